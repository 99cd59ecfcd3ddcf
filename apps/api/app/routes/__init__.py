"""Route modules."""

from .submissions import router as submissions_router
from .users import router as users_router

__all__ = ["submissions_router", "users_router"]
