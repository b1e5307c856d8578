"""
Builds renderer-agnostic page descriptions for recipe frames.

Handles recipe scaling (`@X<N>` placeholders and ingredient quantities),
ingredient pagination and inline ingredient references (`@<N>`) in step text.
"""
import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from breadcast.models.schemas import FrameScreen, Ingredient, RecipeDocument

logger = logging.getLogger(__name__)

INGREDIENTS_PAGE_SIZE = 5

COMPLETED_HEADING = "Thank You for Using Breadcast"
COMPLETED_MESSAGE = "Feedback & suggestions greatly appreciated."

_SCALE_PLACEHOLDER = re.compile(r"@X(\d+)")
_INGREDIENT_REFERENCE = re.compile(r"@(\d+)")


class PageKind(str, Enum):
    """Discriminant for the kind of page being described."""
    TITLE = "title"
    INGREDIENTS = "ingredients"
    STEP = "step"
    COMPLETED = "completed"
    MESSAGE = "message"


@dataclass(frozen=True)
class TextFragment:
    """A single word of body text."""
    text: str


@dataclass(frozen=True)
class IngredientChip:
    """An ingredient shown with its scaled quantity, inline or as a list row."""
    name: str
    quantity: Union[int, float]
    unit: str

    @property
    def quantity_text(self) -> str:
        return format_quantity(self.quantity)


BodyFragment = Union[TextFragment, IngredientChip]


@dataclass(frozen=True)
class PageDescription:
    """Everything a renderer needs to draw one frame image."""
    kind: PageKind
    title: str
    body: Tuple[BodyFragment, ...] = field(default_factory=tuple)
    subtitle: Optional[str] = None
    yields: Optional[str] = None
    current_page: int = 0
    total_pages: int = 0
    scale_label: str = ""


def format_quantity(value: Union[int, float]) -> str:
    """Format a quantity without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_duration(minutes: int) -> str:
    """
    Format minutes for display.

    Examples:
        45 -> "45 mins"
        60 -> "1 hrs"
        90 -> "1 hrs, 30 mins"
    """
    hours, remaining = divmod(max(0, minutes), 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours} hrs")
    if remaining > 0:
        parts.append(f"{remaining} mins")
    return ", ".join(parts)


def substitute_scale_placeholders(text: str, scale: int) -> str:
    """Replace every `@X<N>` marker with the integer `N * scale`."""
    return _SCALE_PLACEHOLDER.sub(lambda m: str(int(m.group(1)) * scale), text)


def scale_ingredient(ingredient: Ingredient, scale: int) -> IngredientChip:
    return IngredientChip(
        name=ingredient.name,
        quantity=ingredient.quantity * scale,
        unit=ingredient.unit,
    )


def ingredient_page_count(recipe: RecipeDocument) -> int:
    return math.ceil(len(recipe.ingredients) / INGREDIENTS_PAGE_SIZE)


def ingredient_pages(recipe: RecipeDocument) -> List[List[Ingredient]]:
    """Split the ingredients into fixed-size pages."""
    return [
        list(recipe.ingredients[start:start + INGREDIENTS_PAGE_SIZE])
        for start in range(0, len(recipe.ingredients), INGREDIENTS_PAGE_SIZE)
    ]


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a 1-based page into [1, total_pages]; 1 when there are no pages."""
    return max(1, min(total_pages, page))


def _split_words(span: str) -> List[TextFragment]:
    return [TextFragment(word) for word in span.split(" ") if word]


def parse_step_text(
    text: str, ingredients: Sequence[Ingredient], scale: int
) -> List[BodyFragment]:
    """
    Parse step text into word fragments and ingredient chips.

    Every `@<N>` marker that points at an ingredient (1-indexed) becomes a
    chip with the scaled quantity. Markers outside the ingredient list are
    dropped without leaving any text behind.
    """
    parsed: List[BodyFragment] = []
    position = 0
    for match in _INGREDIENT_REFERENCE.finditer(text):
        parsed.extend(_split_words(text[position:match.start()]))
        index = int(match.group(1)) - 1
        if 0 <= index < len(ingredients):
            parsed.append(scale_ingredient(ingredients[index], scale))
        else:
            logger.debug(
                f"Dropping ingredient reference {match.group(0)}: "
                f"only {len(ingredients)} ingredients"
            )
        position = match.end()
    parsed.extend(_split_words(text[position:]))
    return parsed


def _time_line(recipe: RecipeDocument) -> str:
    total = format_duration(recipe.total_time_minutes)
    active = recipe.active_time_minutes
    if active and active != recipe.total_time_minutes:
        return f"{format_duration(active)} active, {total} total"
    return total


def build_title_page(recipe: RecipeDocument, scale: int) -> PageDescription:
    description = substitute_scale_placeholders(recipe.description, scale)
    return PageDescription(
        kind=PageKind.TITLE,
        title=recipe.title,
        body=tuple(_split_words(description)),
        subtitle=_time_line(recipe) or None,
        yields=substitute_scale_placeholders(recipe.yields, scale) or None,
        scale_label=f"x{scale}",
    )


def build_ingredients_page(recipe: RecipeDocument, scale: int, page: int) -> PageDescription:
    pages = ingredient_pages(recipe)
    selected = clamp_page(page, len(pages))
    page_ingredients = pages[selected - 1] if pages else []
    return PageDescription(
        kind=PageKind.INGREDIENTS,
        title=recipe.title,
        body=tuple(scale_ingredient(ingredient, scale) for ingredient in page_ingredients),
        current_page=selected,
        total_pages=len(pages),
        scale_label=f"x{scale}",
    )


def build_step_page(recipe: RecipeDocument, scale: int, step: int) -> PageDescription:
    selected = clamp_page(step, len(recipe.steps))
    text = recipe.steps[selected - 1] if recipe.steps else ""
    return PageDescription(
        kind=PageKind.STEP,
        title=recipe.title,
        body=tuple(parse_step_text(text, recipe.ingredients, scale)),
        current_page=selected,
        total_pages=len(recipe.steps),
        scale_label=f"x{scale}",
    )


def build_completed_page() -> PageDescription:
    return PageDescription(
        kind=PageKind.COMPLETED,
        title=COMPLETED_HEADING,
        body=tuple(_split_words(COMPLETED_MESSAGE)),
    )


def build_message_page(heading: str, message: str) -> PageDescription:
    """Page used for error frames and other one-off notices."""
    return PageDescription(
        kind=PageKind.MESSAGE,
        title=heading,
        body=tuple(_split_words(message)),
    )


def build_page_description(
    recipe: RecipeDocument, screen: FrameScreen, scale: int, page: int
) -> PageDescription:
    """Dispatch to the page builder for a screen."""
    if screen == FrameScreen.INGREDIENTS:
        return build_ingredients_page(recipe, scale, page)
    if screen == FrameScreen.STEPS:
        return build_step_page(recipe, scale, page)
    if screen == FrameScreen.COMPLETED:
        return build_completed_page()
    return build_title_page(recipe, scale)
