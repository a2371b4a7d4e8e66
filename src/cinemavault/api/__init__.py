"""CinemaVault HTTP API package."""

from cinemavault.api.errors import register_error_handlers
from cinemavault.api.routes import movie_router, review_router

__all__ = ["review_router", "movie_router", "register_error_handlers"]
