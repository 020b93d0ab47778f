# Admin Panel API
from adminpanel.api.router import api_router

__all__ = ["api_router"]
