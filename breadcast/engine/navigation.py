"""
Frame navigation state machine.

Given the current frame (screen, scale, page) of a recipe, computes the
buttons a client may press and the frame each one leads to. Buttons are
numbered by the protocol in the order they are returned, so primary
navigation always comes before the scale buttons.
"""
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlencode

from breadcast.engine.page_builder import clamp_page, ingredient_page_count
from breadcast.models.schemas import (
    MAX_SCALE,
    MIN_SCALE,
    FrameArguments,
    FrameScreen,
    RecipeDocument,
)


@dataclass(frozen=True)
class FrameButton:
    """A labelled button and the frame it navigates to."""
    label: str
    target: Optional[FrameArguments] = None


def frame_url(host: str, args: FrameArguments) -> str:
    """Absolute URL that requests the frame described by `args`."""
    params = {"scale": args.scale, "screen": args.screen.value}
    if args.screen in (FrameScreen.INGREDIENTS, FrameScreen.STEPS):
        params["page"] = args.page
    return f"https://{host}/{args.recipe_id}?{urlencode(params)}"


def clamp_scale(scale: int) -> int:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


class FrameNavigator:
    """
    Computes navigation buttons for a recipe frame.

    The navigator never raises on boundary input: pages beyond the recipe's
    bounds are clamped before any button is derived, and every button target
    is itself a valid frame.
    """

    def __init__(self, recipe: RecipeDocument):
        self.recipe = recipe

    def selected_page(self, args: FrameArguments) -> int:
        """The page actually shown for `args` after clamping to the recipe."""
        if args.screen == FrameScreen.INGREDIENTS:
            return clamp_page(args.page, ingredient_page_count(self.recipe))
        if args.screen == FrameScreen.STEPS:
            return clamp_page(args.page, len(self.recipe.steps))
        return 1

    def buttons(self, args: FrameArguments) -> List[FrameButton]:
        """Return the ordered buttons for the frame described by `args`."""
        if args.screen == FrameScreen.INGREDIENTS:
            buttons = self._ingredients_buttons(args)
        elif args.screen == FrameScreen.STEPS:
            buttons = self._steps_buttons(args)
        elif args.screen == FrameScreen.COMPLETED:
            return [FrameButton("Return to Start", self._title(args))]
        else:
            buttons = [
                FrameButton("Ingredients", self._ingredients(args, 1)),
                FrameButton("Steps", self._steps(args, 1)),
            ]
        return buttons + self._scale_buttons(args)

    def _ingredients_buttons(self, args: FrameArguments) -> List[FrameButton]:
        total = ingredient_page_count(self.recipe)
        page = self.selected_page(args)
        buttons = []
        if page > 1:
            buttons.append(FrameButton("<", self._ingredients(args, page - 1)))
        else:
            buttons.append(FrameButton("Back", self._title(args)))
        if page < total:
            buttons.append(FrameButton(">", self._ingredients(args, page + 1)))
        else:
            buttons.append(FrameButton("Begin", self._steps(args, 1)))
        return buttons

    def _steps_buttons(self, args: FrameArguments) -> List[FrameButton]:
        total = len(self.recipe.steps)
        step = self.selected_page(args)
        buttons = []
        if step > 1:
            buttons.append(FrameButton("<", self._steps(args, step - 1)))
        else:
            buttons.append(FrameButton("Back", self._title(args)))
        if step < total:
            buttons.append(FrameButton(">", self._steps(args, step + 1)))
        else:
            buttons.append(FrameButton("Finished 🎉", self._completed(args)))
        return buttons

    def _scale_buttons(self, args: FrameArguments) -> List[FrameButton]:
        page = self.selected_page(args)
        buttons = []
        if args.scale > MIN_SCALE:
            buttons.append(FrameButton(
                "Scale -",
                args.model_copy(update={"scale": clamp_scale(args.scale - 1), "page": page}),
            ))
        if args.scale < MAX_SCALE:
            buttons.append(FrameButton(
                "Scale +",
                args.model_copy(update={"scale": clamp_scale(args.scale + 1), "page": page}),
            ))
        return buttons

    def _title(self, args: FrameArguments) -> FrameArguments:
        return FrameArguments(recipe_id=args.recipe_id, screen=FrameScreen.TITLE, scale=args.scale)

    def _ingredients(self, args: FrameArguments, page: int) -> FrameArguments:
        return FrameArguments(
            recipe_id=args.recipe_id, screen=FrameScreen.INGREDIENTS, scale=args.scale, page=page,
        )

    def _steps(self, args: FrameArguments, step: int) -> FrameArguments:
        return FrameArguments(
            recipe_id=args.recipe_id, screen=FrameScreen.STEPS, scale=args.scale, page=step,
        )

    def _completed(self, args: FrameArguments) -> FrameArguments:
        return FrameArguments(recipe_id=args.recipe_id, screen=FrameScreen.COMPLETED, scale=args.scale)
