"""User, role and menu management endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from adminpanel.api.deps import gate, get_account_service, get_menu_service, get_role_service
from adminpanel.schemas.auth import AccountResponse, MessageResponse
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
from adminpanel.services.account import AccountService
from adminpanel.services.gate import RouteAuth
from adminpanel.services.menu import MenuService
from adminpanel.services.role import RoleService

router = APIRouter(prefix="/system", tags=["system"])


# --- Users ---


@router.get(
    "/users",
    response_model=list[AccountResponse],
    dependencies=[Depends(gate(RouteAuth.require("system:user:list")))],
)
async def list_users(
    account_service: AccountService = Depends(get_account_service),
) -> list[AccountResponse]:
    accounts = await account_service.list_accounts()
    return [AccountResponse.model_validate(a) for a in accounts]


@router.post(
    "/users/{account_id}/roles",
    response_model=AccountResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:user:update")))],
)
async def assign_user_roles(
    account_id: UUID,
    body: RoleAssignmentRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.assign_roles(account_id, body.role_ids)
    return AccountResponse.model_validate(account)


@router.post(
    "/users/{account_id}/status",
    response_model=AccountResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:user:update")))],
)
async def set_user_status(
    account_id: UUID,
    body: AccountStatusRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.set_status(account_id, body.status)
    return AccountResponse.model_validate(account)


@router.post(
    "/users/{account_id}/password",
    response_model=MessageResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:user:password")))],
)
async def reset_user_password(
    account_id: UUID,
    body: AccountPasswordRequest,
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await account_service.force_update_password(account_id, body.password)
    return MessageResponse(message="Password updated")


@router.delete(
    "/users/{account_id}",
    response_model=MessageResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:user:delete")))],
)
async def delete_user(
    account_id: UUID,
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await account_service.delete(account_id)
    return MessageResponse(message="User deleted")


# --- Roles ---


@router.get(
    "/roles",
    response_model=list[RoleResponse],
    dependencies=[Depends(gate(RouteAuth.require("system:role:list")))],
)
async def list_roles(
    role_service: RoleService = Depends(get_role_service),
) -> list[RoleResponse]:
    return [RoleResponse.model_validate(r) for r in await role_service.list_roles()]


@router.get(
    "/roles/{role_id}",
    response_model=RoleResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:role:read")))],
)
async def get_role(
    role_id: UUID,
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    return RoleResponse.model_validate(await role_service.get(role_id))


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(gate(RouteAuth.require("system:role:create")))],
)
async def create_role(
    body: RoleCreate,
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    role = await role_service.create(body.name, body.value, body.remark, body.menu_ids)
    return RoleResponse.model_validate(role)


@router.put(
    "/roles/{role_id}/menus",
    response_model=RoleResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:role:update")))],
)
async def update_role_menus(
    role_id: UUID,
    body: RoleMenusUpdate,
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    role = await role_service.update_menus(role_id, body.menu_ids)
    return RoleResponse.model_validate(role)


@router.delete(
    "/roles/{role_id}",
    response_model=MessageResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:role:delete")))],
)
async def delete_role(
    role_id: UUID,
    role_service: RoleService = Depends(get_role_service),
) -> MessageResponse:
    await role_service.delete(role_id)
    return MessageResponse(message="Role deleted")


# --- Menus ---


@router.get(
    "/menus",
    response_model=list[MenuResponse],
    dependencies=[Depends(gate(RouteAuth.require("system:menu:list")))],
)
async def list_menus(
    menu_service: MenuService = Depends(get_menu_service),
) -> list[MenuResponse]:
    return [MenuResponse.model_validate(m) for m in await menu_service.list_menus()]


@router.get(
    "/menus/{menu_id}",
    response_model=MenuResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:menu:read")))],
)
async def get_menu(
    menu_id: UUID,
    menu_service: MenuService = Depends(get_menu_service),
) -> MenuResponse:
    return MenuResponse.model_validate(await menu_service.get(menu_id))


@router.post(
    "/menus",
    response_model=MenuResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(gate(RouteAuth.require("system:menu:create")))],
)
async def create_menu(
    body: MenuCreate,
    menu_service: MenuService = Depends(get_menu_service),
) -> MenuResponse:
    menu = await menu_service.create(body.model_dump())
    return MenuResponse.model_validate(menu)


@router.put(
    "/menus/{menu_id}",
    response_model=MenuResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:menu:update")))],
)
async def update_menu(
    menu_id: UUID,
    body: MenuUpdate,
    menu_service: MenuService = Depends(get_menu_service),
) -> MenuResponse:
    menu = await menu_service.update(menu_id, body.model_dump(exclude_unset=True))
    return MenuResponse.model_validate(menu)


@router.delete(
    "/menus/{menu_id}",
    response_model=MenuDeleteResponse,
    dependencies=[Depends(gate(RouteAuth.require("system:menu:delete")))],
)
async def delete_menu(
    menu_id: UUID,
    menu_service: MenuService = Depends(get_menu_service),
) -> MenuDeleteResponse:
    return MenuDeleteResponse(deleted_ids=await menu_service.delete(menu_id))
