"""
Asset key derivation for rendered frame images.

A key names one rendered variant of a recipe frame. Keys double as pin names
on the pinning provider and as entries in the rendered recipe set, so the
format must stay stable across releases.
"""
from typing import List

from breadcast.engine.page_builder import clamp_page, ingredient_page_count
from breadcast.models.schemas import (
    MAX_SCALE,
    MIN_SCALE,
    FrameArguments,
    FrameScreen,
    RecipeDocument,
)


def title_key(recipe_id: str, scale: int) -> str:
    return f"{recipe_id}-title-{scale}"


def ingredients_key(recipe_id: str, scale: int, page: int) -> str:
    return f"{recipe_id}-ingredients-{scale}-{page}"


def step_key(recipe_id: str, scale: int, step: int) -> str:
    return f"{recipe_id}-step-{scale}-{step}"


def completed_key(recipe_id: str) -> str:
    # The completion page carries no scaled content
    return f"{recipe_id}-completed"


def derive_key(recipe_id: str, screen: FrameScreen, scale: int, page: int) -> str:
    """
    Derive the asset key for a (recipe, screen, scale, page) tuple.

    TITLE ignores the page and COMPLETED ignores both scale and page.
    """
    if screen == FrameScreen.INGREDIENTS:
        return ingredients_key(recipe_id, scale, page)
    if screen == FrameScreen.STEPS:
        return step_key(recipe_id, scale, page)
    if screen == FrameScreen.COMPLETED:
        return completed_key(recipe_id)
    return title_key(recipe_id, scale)


def derive_frame_key(args: FrameArguments, recipe: RecipeDocument) -> str:
    """
    Derive the key for a request, using the page the frame will actually show.

    Out-of-range pages are clamped first so they share the key of the page
    that gets rendered.
    """
    page = args.page
    if args.screen == FrameScreen.INGREDIENTS:
        page = clamp_page(page, ingredient_page_count(recipe))
    elif args.screen == FrameScreen.STEPS:
        page = clamp_page(page, len(recipe.steps))
    return derive_key(args.recipe_id, args.screen, args.scale, page)


def reachable_frames(recipe_id: str, recipe: RecipeDocument) -> List[FrameArguments]:
    """Every reachable frame of a recipe, one per distinct asset key."""
    frames = []
    for scale in range(MIN_SCALE, MAX_SCALE + 1):
        frames.append(FrameArguments(recipe_id=recipe_id, screen=FrameScreen.TITLE, scale=scale))
        for page in range(1, max(1, ingredient_page_count(recipe)) + 1):
            frames.append(FrameArguments(
                recipe_id=recipe_id, screen=FrameScreen.INGREDIENTS, scale=scale, page=page,
            ))
        for step in range(1, max(1, len(recipe.steps)) + 1):
            frames.append(FrameArguments(
                recipe_id=recipe_id, screen=FrameScreen.STEPS, scale=scale, page=step,
            ))
    frames.append(FrameArguments(recipe_id=recipe_id, screen=FrameScreen.COMPLETED))
    return frames
