"""
Frame routes.

A frame is requested with GET when first embedded and re-requested with POST
when a button is clicked, so both methods share one handler.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from breadcast.api.dependencies import get_frame_service, get_public_host
from breadcast.engine.arguments import parse_frame_arguments
from breadcast.services.frame_service import FrameService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["frames"])


@router.api_route("/{recipe_id}", methods=["GET", "POST"], response_class=HTMLResponse)
async def recipe_frame(
    request: Request,
    recipe_id: str,
    scale: Optional[str] = Query(None, description="Recipe scale, clamped to 1-4"),
    screen: Optional[str] = Query(None, description="title, ingredients, steps or complete"),
    page: Optional[str] = Query(None, description="Ingredients page or step number"),
    service: FrameService = Depends(get_frame_service),
    host: str = Depends(get_public_host),
):
    """
    Serve the frame for a recipe.

    Invalid or missing parameters fall back to the title screen at scale 1.
    Unknown recipes return a plain-text 404.
    """
    args = parse_frame_arguments(recipe_id, scale=scale, screen=screen, page=page)
    frame_html = await service.render_frame(args, post_url=str(request.url), host=host)
    return HTMLResponse(content=frame_html)
