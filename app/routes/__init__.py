"""API route modules."""
from app.routes.accounts import router as accounts_router
from app.routes.content import router as content_router
from app.routes.images import router as images_router
from app.routes.published import router as published_router
from app.routes.schedule import router as schedule_router

__all__ = [
    "accounts_router",
    "content_router",
    "images_router",
    "published_router",
    "schedule_router",
]
