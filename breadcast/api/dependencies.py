"""
FastAPI dependencies for frame routes.
"""
from fastapi import Request

from breadcast.config import settings
from breadcast.services.frame_service import FrameService


def get_frame_service(request: Request) -> FrameService:
    """
    Dependency returning the frame service built at start-up.

    Usage:
        @router.get("/{recipe_id}")
        async def frame(service: FrameService = Depends(get_frame_service)):
            ...
    """
    return request.app.state.frame_service


def get_public_host(request: Request) -> str:
    """Hostname used in button targets: configured public host, else the request's host."""
    return settings.public_host or request.url.hostname or "localhost"
