"""Endpoints for the logged-in account."""

from fastapi import APIRouter, Depends

from adminpanel.api.deps import gate, get_account_service, get_auth_service
from adminpanel.schemas.auth import (
    AccountResponse,
    ChangePasswordRequest,
    MessageResponse,
    PermissionsResponse,
)
from adminpanel.services.account import AccountService
from adminpanel.services.auth import AuthService
from adminpanel.services.gate import AuthUser, RouteAuth

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/profile", response_model=AccountResponse)
async def get_profile(
    current_user: AuthUser = Depends(gate(RouteAuth.login())),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.get(current_user.uid)
    return AccountResponse.model_validate(account)


@router.get("/permissions", response_model=PermissionsResponse)
async def get_permissions(
    current_user: AuthUser = Depends(gate(RouteAuth.login())),
    auth_service: AuthService = Depends(get_auth_service),
) -> PermissionsResponse:
    return PermissionsResponse(permissions=await auth_service.get_permissions(current_user.uid))


@router.post("/password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    current_user: AuthUser = Depends(gate(RouteAuth.login())),
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Change the current password.

    Every token issued before the change stops working; log in again.
    """
    await account_service.change_password(current_user.uid, body.old_password, body.new_password)
    return MessageResponse(message="Password changed successfully")
