"""
Pydantic data models for Breadcast recipe frames.
"""
from enum import Enum
from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_SCALE = 1
MAX_SCALE = 4


class FrameScreen(str, Enum):
    """The navigable recipe views."""
    TITLE = "title"
    INGREDIENTS = "ingredients"
    STEPS = "steps"
    COMPLETED = "complete"


class Ingredient(BaseModel):
    """Ingredient with its base (scale 1) quantity."""
    name: str = Field(..., description="Name of the ingredient")
    quantity: Union[int, float] = Field(0, ge=0, description="Quantity at scale 1")
    unit: str = Field("", description="Unit label (e.g., 'cup', 'g')")

    model_config = ConfigDict(frozen=True)


class Equipment(BaseModel):
    """Equipment needed by a recipe."""
    name: str
    count: int = Field(1, ge=0)
    scales_with_recipe: bool = Field(False, alias="scalesWithRecipe")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RecipeDocument(BaseModel):
    """
    A recipe as published to IPFS.

    Field aliases match the camelCase JSON written by the ingestion tooling.
    `description` and `yields` may embed `@X<N>` scale placeholders; step text
    may embed `@<N>` ingredient references (1-indexed).
    """
    title: str
    description: str = ""
    total_time_minutes: int = Field(0, ge=0, alias="totalTimeMinutes")
    active_time_minutes: int = Field(0, ge=0, alias="activeTimeMinutes")
    yields: str = ""
    equipment: List[Equipment] = Field(default_factory=list)
    ingredients: List[Ingredient] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    image_cid: str = Field("", alias="imageCid")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class FrameArguments(BaseModel):
    """Per-request frame navigation state."""
    recipe_id: str
    screen: FrameScreen = FrameScreen.TITLE
    scale: int = Field(MIN_SCALE, ge=MIN_SCALE, le=MAX_SCALE)
    page: int = Field(1, ge=1)

    model_config = ConfigDict(frozen=True)


class RecipeSetEntry(BaseModel):
    """Named entry of the recipe set file."""
    json_cid: str = Field(..., alias="jsonCid")
    image_cid: str = Field("", alias="imageCid")

    model_config = ConfigDict(populate_by_name=True)


class RecipeSet(BaseModel):
    """Human-chosen recipe names mapped to their published documents."""
    entries: Dict[str, RecipeSetEntry] = Field(default_factory=dict)

    @field_validator("entries", mode="before")
    @classmethod
    def accept_bare_cids(cls, value):
        """Older recipe set files map names straight to the recipe cid."""
        if isinstance(value, dict):
            return {
                name: {"jsonCid": entry} if isinstance(entry, str) else entry
                for name, entry in value.items()
            }
        return value

    def recipe_ids(self) -> set:
        return {entry.json_cid for entry in self.entries.values()}


class RenderedRecipe(BaseModel):
    """Recipe snapshot with the cids of every pinned frame image."""
    recipe_data: RecipeDocument = Field(..., alias="recipeData")
    asset_cids: Dict[str, str] = Field(default_factory=dict, alias="assetCids")

    model_config = ConfigDict(populate_by_name=True)


class RenderedRecipeSet(BaseModel):
    """Recipe ids mapped to their rendered recipes."""
    recipes: Dict[str, RenderedRecipe] = Field(default_factory=dict)

    def get(self, recipe_id: str):
        return self.recipes.get(recipe_id)
