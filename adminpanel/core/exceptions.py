"""Business error taxonomy with stable error codes.

Every error a client can see carries a small integer code and a
human-readable message. Internal details (stack traces, cryptographic
failure reasons) are logged server-side only.
"""

import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Stable (code, HTTP status, message) triples."""

    SERVER_ERROR = (500, status.HTTP_500_INTERNAL_SERVER_ERROR, "Service busy, please try again later")
    STORE_UNAVAILABLE = (503, status.HTTP_503_SERVICE_UNAVAILABLE, "Session store unavailable")

    SYSTEM_USER_EXISTS = (1001, status.HTTP_409_CONFLICT, "User already exists")
    INVALID_USERNAME_PASSWORD = (1003, status.HTTP_401_UNAUTHORIZED, "Invalid username or password")
    PERMISSION_REQUIRES_PARENT = (1005, status.HTTP_400_BAD_REQUEST, "A permission node requires a parent")
    ILLEGAL_OPERATION_DIRECTORY_PARENT = (
        1006,
        status.HTTP_400_BAD_REQUEST,
        "Illegal operation: a menu may only have a group as its parent",
    )
    MENU_HAS_ASSOCIATED_ROLES = (
        1007,
        status.HTTP_409_CONFLICT,
        "The menu is still granted to roles, unassign it first",
    )
    ROLE_HAS_ASSOCIATED_USERS = (
        1008,
        status.HTTP_409_CONFLICT,
        "The role still has assigned users, unassign them first",
    )
    SYSTEM_BUILTIN_FUNCTION_NOT_ALLOWED = (
        1009,
        status.HTTP_403_FORBIDDEN,
        "Built-in system entries cannot be modified",
    )
    PASSWORD_MISMATCH = (1011, status.HTTP_400_BAD_REQUEST, "Old password is incorrect")
    PARENT_MENU_NOT_FOUND = (1014, status.HTTP_400_BAD_REQUEST, "Parent menu does not exist")
    USER_NOT_FOUND = (1017, status.HTTP_404_NOT_FOUND, "User does not exist")
    ROLE_NOT_FOUND = (1018, status.HTTP_404_NOT_FOUND, "Role does not exist")
    MENU_NOT_FOUND = (1019, status.HTTP_404_NOT_FOUND, "Menu does not exist")

    UNAUTHORIZED = (1100, status.HTTP_401_UNAUTHORIZED, "Not logged in")
    INVALID_LOGIN = (1101, status.HTTP_401_UNAUTHORIZED, "Login is no longer valid, please log in again")
    NO_PERMISSION = (1102, status.HTTP_403_FORBIDDEN, "No permission to access this resource")
    ACCOUNT_LOGGED_IN_ELSEWHERE = (
        1105,
        status.HTTP_401_UNAUTHORIZED,
        "Your account has been logged in elsewhere",
    )

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def http_status(self) -> int:
        return self.value[1]

    @property
    def message(self) -> str:
        return self.value[2]


class BusinessError(Exception):
    """Base error carrying a stable ErrorCode."""

    error_code: ErrorCode = ErrorCode.SERVER_ERROR

    def __init__(self, error_code: ErrorCode | None = None, message: str | None = None):
        if error_code is not None:
            self.error_code = error_code
        self.message = message or self.error_code.message
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return self.error_code.code

    @property
    def http_status(self) -> int:
        return self.error_code.http_status


class InvalidCredentialsError(BusinessError):
    """Login failed. Same message whether the user is missing or the password is wrong."""

    error_code = ErrorCode.INVALID_USERNAME_PASSWORD


class UnauthorizedError(BusinessError):
    """No usable token on a route that requires one."""

    error_code = ErrorCode.UNAUTHORIZED


class InvalidLoginError(BusinessError):
    """Token revoked, invalidated by a password change, or undecodable."""

    error_code = ErrorCode.INVALID_LOGIN


class AccountLoggedInElsewhereError(BusinessError):
    """A newer login superseded this token (single-session mode)."""

    error_code = ErrorCode.ACCOUNT_LOGGED_IN_ELSEWHERE


class NoPermissionError(BusinessError):
    """Authenticated, but missing a required permission."""

    error_code = ErrorCode.NO_PERMISSION


class StoreUnavailableError(BusinessError):
    """The session store could not be reached."""

    error_code = ErrorCode.STORE_UNAVAILABLE


def error_body(code: int, message: str) -> dict:
    return {"code": code, "message": message, "data": None}


def register_exception_handlers(app: FastAPI) -> None:
    """Render BusinessError and unexpected exceptions as {code, message, data}."""

    @app.exception_handler(BusinessError)
    async def handle_business_error(request: Request, exc: BusinessError) -> JSONResponse:
        log_fn = logger.error if exc.http_status >= 500 else logger.warning
        log_fn(
            "(%s) %s path=%s method=%s",
            exc.code,
            exc.message,
            request.url.path,
            request.method,
            extra={"error_code": exc.code, "path": request.url.path, "method": request.method},
        )
        headers = None
        if exc.http_status == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.http_status,
            content=error_body(exc.code, exc.message),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = ErrorCode.SERVER_ERROR
        return JSONResponse(
            status_code=error.http_status,
            content=error_body(error.code, error.message),
        )
