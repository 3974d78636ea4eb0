"""API routers."""

from warden.routers.auth import router as auth_router
from warden.routers.recovery import router as recovery_router
from warden.routers.users import router as users_router

__all__ = ["auth_router", "recovery_router", "users_router"]
