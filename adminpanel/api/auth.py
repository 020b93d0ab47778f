"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from adminpanel.api.deps import gate, get_account_service, get_auth_service
from adminpanel.schemas.auth import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
)
from adminpanel.services.account import AccountService
from adminpanel.services.auth import AuthService
from adminpanel.services.gate import AuthUser, RouteAuth

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(gate(RouteAuth.public()))],
)
async def login(
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate and get an access token.

    Include the token in the Authorization header as: Bearer <access_token>
    """
    result = await auth_service.login(body.username, body.password)
    return LoginResponse(
        account=AccountResponse.model_validate(result.account),
        token=TokenResponse(access_token=result.access_token, expires_in=result.expires_in),
    )


@router.post(
    "/register",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(gate(RouteAuth.public()))],
)
async def register(
    body: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.register(
        username=body.username,
        password=body.password,
        nickname=body.nickname,
        email=body.email,
    )
    return AccountResponse.model_validate(account)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: AuthUser = Depends(gate(RouteAuth.login())),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the presented token for the remainder of its lifetime."""
    await auth_service.logout(current_user.claims, current_user.token)
    return MessageResponse(message="Logged out successfully")
