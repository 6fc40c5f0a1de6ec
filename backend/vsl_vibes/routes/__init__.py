"""
Routes module - contains all API route handlers
"""

from .generation import router as generation_router
from .media import router as media_router
from .projects import router as projects_router
from .render import router as render_router

__all__ = [
    "generation_router",
    "media_router",
    "projects_router",
    "render_router",
]
