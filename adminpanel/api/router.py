"""Admin Panel API Router - aggregates all API routes."""

from fastapi import APIRouter

from adminpanel.api import account, auth, sse, system
from adminpanel.core import settings

api_router = APIRouter(prefix=settings.api_prefix)

api_router.include_router(auth.router)
api_router.include_router(account.router)
api_router.include_router(system.router)
api_router.include_router(sse.router)
