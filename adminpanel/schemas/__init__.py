# Admin Panel Schemas
from adminpanel.schemas.auth import (
    AccountResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PermissionsResponse,
    RegisterRequest,
    TokenResponse,
)
from adminpanel.schemas.system import (
    AccountPasswordRequest,
    AccountStatusRequest,
    MenuCreate,
    MenuDeleteResponse,
    MenuResponse,
    MenuUpdate,
    RoleAssignmentRequest,
    RoleCreate,
    RoleMenusUpdate,
    RoleResponse,
)

__all__ = [
    "AccountPasswordRequest",
    "AccountResponse",
    "AccountStatusRequest",
    "ChangePasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "MenuCreate",
    "MenuDeleteResponse",
    "MenuResponse",
    "MenuUpdate",
    "MessageResponse",
    "PermissionsResponse",
    "RegisterRequest",
    "RoleAssignmentRequest",
    "RoleCreate",
    "RoleMenusUpdate",
    "RoleResponse",
]
