# Admin Panel Models
from adminpanel.models.account import Account, AccountStatus
from adminpanel.models.associations import account_roles, role_menus
from adminpanel.models.base import Base, BaseModel
from adminpanel.models.menu import Menu, MenuStatus, MenuType
from adminpanel.models.role import ROOT_ROLE_ID, ROOT_ROLE_VALUE, Role, RoleStatus

__all__ = [
    "Account",
    "AccountStatus",
    "Base",
    "BaseModel",
    "Menu",
    "MenuStatus",
    "MenuType",
    "ROOT_ROLE_ID",
    "ROOT_ROLE_VALUE",
    "Role",
    "RoleStatus",
    "account_roles",
    "role_menus",
]
