# Admin Panel Services
from adminpanel.services.account import AccountService
from adminpanel.services.auth import AuthService, LoginResult
from adminpanel.services.gate import AuthStrategy, AuthUser, GateRequest, RequestGate, RouteAuth
from adminpanel.services.menu import MenuService
from adminpanel.services.permission import PermissionResolver
from adminpanel.services.role import RoleService
from adminpanel.services.session_store import SessionStore
from adminpanel.services.tokens import TokenClaims, TokenCodec, get_token_codec

__all__ = [
    "AccountService",
    "AuthService",
    "AuthStrategy",
    "AuthUser",
    "GateRequest",
    "LoginResult",
    "MenuService",
    "PermissionResolver",
    "RequestGate",
    "RoleService",
    "RouteAuth",
    "SessionStore",
    "TokenClaims",
    "TokenCodec",
    "get_token_codec",
]
