"""
Frame navigation and asset resolution engine.

This module turns a recipe and a requested frame (screen, scale, page) into
a page description, a stable asset key and the set of navigation buttons:

1. page_builder - Scaled, renderer-agnostic page descriptions
2. asset_keys - Stable keys naming each rendered variant
3. navigation - The button state machine
4. asset_cache - TTL and pin-once caches with single-flight generation
"""

from breadcast.engine.arguments import is_valid_cid, parse_frame_arguments, parse_screen
from breadcast.engine.asset_cache import AssetTTLCache, PinOnceAssetCache
from breadcast.engine.asset_keys import derive_frame_key, derive_key, reachable_frames
from breadcast.engine.navigation import FrameButton, FrameNavigator, frame_url
from breadcast.engine.page_builder import (
    IngredientChip,
    PageDescription,
    PageKind,
    TextFragment,
    build_message_page,
    build_page_description,
)
from breadcast.engine.protocol import ObjectStore, Renderer

__all__ = [
    # Arguments
    "is_valid_cid",
    "parse_frame_arguments",
    "parse_screen",
    # Page descriptions
    "PageDescription",
    "PageKind",
    "TextFragment",
    "IngredientChip",
    "build_page_description",
    "build_message_page",
    # Keys
    "derive_key",
    "derive_frame_key",
    "reachable_frames",
    # Navigation
    "FrameButton",
    "FrameNavigator",
    "frame_url",
    # Caches
    "AssetTTLCache",
    "PinOnceAssetCache",
    # Protocols
    "ObjectStore",
    "Renderer",
]
