"""
Factory for creating the frame service based on configuration.

Selects the recipe store and image resolver for the configured render mode.
"""
from typing import Optional

from breadcast.config import RenderMode, Settings
from breadcast.engine.asset_cache import AssetTTLCache, PinOnceAssetCache
from breadcast.engine.protocol import ObjectStore, Renderer
from breadcast.models.schemas import RecipeSet, RenderedRecipeSet
from breadcast.services.frame_service import (
    CachedImageResolver,
    FrameService,
    PinnedImageResolver,
    PrerenderedImageResolver,
)
from breadcast.services.recipe_store import (
    LiveRecipeStore,
    PrerenderedRecipeStore,
    ReloadingFile,
    load_recipe_set,
    load_rendered_recipe_set,
)


def create_frame_service(
    settings: Settings,
    object_store: ObjectStore,
    renderer: Renderer,
    pin_cache: Optional[PinOnceAssetCache] = None,
    ttl_cache: Optional[AssetTTLCache] = None,
) -> FrameService:
    """
    Create the frame service for `settings.render_mode`.

    - PRERENDERED: recipes and asset cids from the rendered recipe set.
    - LIVE_CACHE: recipes from IPFS, images rendered into a TTL cache.
    - LIVE_PINNED: recipes from IPFS, images rendered and pinned once.

    Args:
        settings: Application settings.
        object_store: IPFS access used for fetches, pins and gateway URLs.
        renderer: Frame image renderer.
        pin_cache: Pin map for LIVE_PINNED; a fresh empty one when omitted.
        ttl_cache: Image cache for LIVE_CACHE; a fresh one when omitted.

    Returns:
        A configured FrameService.
    """
    if settings.render_mode == RenderMode.PRERENDERED:
        rendered_file = ReloadingFile(
            settings.rendered_recipe_set_file,
            loader=load_rendered_recipe_set,
            empty=RenderedRecipeSet,
            reload_seconds=settings.recipe_set_reload_seconds,
        )
        store = PrerenderedRecipeStore(rendered_file)
        return FrameService(store, PrerenderedImageResolver(store, object_store), renderer)

    recipe_set_file = ReloadingFile(
        settings.recipe_set_file,
        loader=load_recipe_set,
        empty=RecipeSet,
        reload_seconds=settings.recipe_set_reload_seconds,
    )
    store = LiveRecipeStore(recipe_set_file, object_store)

    if settings.render_mode == RenderMode.LIVE_PINNED:
        resolver = PinnedImageResolver(renderer, object_store, pin_cache or PinOnceAssetCache())
    else:
        resolver = CachedImageResolver(
            renderer, ttl_cache or AssetTTLCache(settings.rerender_ttl_seconds)
        )
    return FrameService(store, resolver, renderer)
