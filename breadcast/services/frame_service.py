"""
Frame service: ties recipe lookup, asset resolution and navigation together.

A request flows through:
1. Recipe id validation and recipe lookup (NotFound short-circuits here)
2. Asset key derivation for the requested frame
3. Image resolution through the deployment's resolver
4. Button computation and HTML assembly
"""
import asyncio
import logging
from typing import Optional, Protocol

from breadcast.engine.arguments import is_valid_cid
from breadcast.engine.asset_cache import AssetTTLCache, PinOnceAssetCache
from breadcast.engine.asset_keys import derive_frame_key
from breadcast.engine.navigation import FrameNavigator
from breadcast.engine.page_builder import build_message_page, build_page_description
from breadcast.engine.protocol import ObjectStore, Renderer
from breadcast.errors import (
    AssetGenerationError,
    AssetNotFoundError,
    BreadcastError,
    InvalidRecipeIdError,
    RecipeNotFoundError,
)
from breadcast.models.schemas import FrameArguments, RecipeDocument
from breadcast.services.frame_response import render_error_frame_html, render_frame_html
from breadcast.services.recipe_store import PrerenderedRecipeStore
from breadcast.services.render_service import to_data_uri

logger = logging.getLogger(__name__)


class RecipeStore(Protocol):
    async def get_recipe(self, recipe_id: str) -> Optional[RecipeDocument]:
        ...


class FrameImageResolver(Protocol):
    """Resolves the image reference (URL or data URI) for a frame."""

    async def resolve(self, args: FrameArguments, recipe: RecipeDocument, asset_key: str) -> str:
        ...


async def render_page(renderer: Renderer, args: FrameArguments, recipe: RecipeDocument) -> bytes:
    """Build the page description for a frame and render it off the event loop."""
    page = build_page_description(recipe, args.screen, args.scale, args.page)
    return await asyncio.to_thread(renderer.render, page)


class PrerenderedImageResolver:
    """Serves cids recorded in the rendered recipe set; never renders."""

    def __init__(self, store: PrerenderedRecipeStore, object_store: ObjectStore):
        self._store = store
        self._object_store = object_store

    async def resolve(self, args: FrameArguments, recipe: RecipeDocument, asset_key: str) -> str:
        content_id = self._store.get_asset_cid(args.recipe_id, asset_key)
        if content_id is None:
            raise AssetNotFoundError(args.recipe_id, asset_key)
        return self._object_store.url(content_id)


class CachedImageResolver:
    """Renders on demand and embeds the image as a data URI, re-rendering after the TTL."""

    def __init__(self, renderer: Renderer, cache: AssetTTLCache):
        self._renderer = renderer
        self._cache = cache

    async def resolve(self, args: FrameArguments, recipe: RecipeDocument, asset_key: str) -> str:
        async def create() -> str:
            try:
                data = await render_page(self._renderer, args, recipe)
            except Exception as e:
                raise AssetGenerationError(asset_key, _reason(e)) from e
            return to_data_uri(data, self._renderer.media_type)

        return await self._cache.get_or_create(asset_key, create)


class PinnedImageResolver:
    """Renders and pins each asset once, serving it from the gateway afterwards."""

    def __init__(self, renderer: Renderer, object_store: ObjectStore, cache: PinOnceAssetCache):
        self._renderer = renderer
        self._object_store = object_store
        self._cache = cache

    async def resolve(self, args: FrameArguments, recipe: RecipeDocument, asset_key: str) -> str:
        async def create() -> str:
            try:
                data = await render_page(self._renderer, args, recipe)
                return await self._object_store.put(
                    f"{asset_key}.{self._renderer.extension}", data
                )
            except Exception as e:
                raise AssetGenerationError(asset_key, _reason(e)) from e

        content_id = await self._cache.get_or_create(asset_key, create)
        return self._object_store.url(content_id)


def _reason(error: Exception) -> str:
    if isinstance(error, BreadcastError):
        return error.message
    return str(error) or type(error).__name__


class FrameService:
    """
    Produces frame HTML for recipe requests.

    Constructed once at start-up with the deployment's store and resolver.
    """

    def __init__(
        self,
        recipe_store: RecipeStore,
        image_resolver: FrameImageResolver,
        renderer: Renderer,
    ):
        self.recipe_store = recipe_store
        self.image_resolver = image_resolver
        self.renderer = renderer

    async def load_recipe(self, recipe_id: str) -> RecipeDocument:
        """
        Resolve a recipe id.

        Raises:
            InvalidRecipeIdError: If the id is not a content identifier.
            RecipeNotFoundError: If the recipe is not in the known set.
        """
        if not is_valid_cid(recipe_id):
            logger.info(f"Invalid recipe cid {recipe_id}")
            raise InvalidRecipeIdError(recipe_id)
        recipe = await self.recipe_store.get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    async def render_frame(self, args: FrameArguments, post_url: str, host: str) -> str:
        """
        Build the frame document for `args`.

        Args:
            args: Parsed and clamped frame arguments.
            post_url: The request URL, echoed as post-back URL.
            host: Hostname for button targets.

        Returns:
            The frame HTML.
        """
        recipe = await self.load_recipe(args.recipe_id)
        asset_key = derive_frame_key(args, recipe)
        image = await self.image_resolver.resolve(args, recipe, asset_key)
        buttons = FrameNavigator(recipe).buttons(args)
        logger.debug(f"Serving {asset_key} with {len(buttons)} buttons")
        return render_frame_html(image, post_url, buttons, host)

    async def render_error_frame(
        self,
        heading: str = "For some reason we cannot display the requested content.",
        message: str = "Please leave feedback and/or try again later.",
    ) -> str:
        """Build a button-less frame showing a message image."""
        page = build_message_page(heading, message)
        data = await asyncio.to_thread(self.renderer.render, page)
        return render_error_frame_html(to_data_uri(data, self.renderer.media_type))
