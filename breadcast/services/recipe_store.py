"""
Recipe lookup for frame requests.

Recipes are resolved either from the rendered recipe set written by the
prerender pipeline, or live from IPFS for recipes listed in the named
recipe set. Both files are owned by the CLI; the server only reads them and
tolerates a snapshot up to `reload_seconds` old.
"""
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Generic, Optional, TypeVar

from pydantic import ValidationError

from breadcast.engine.asset_cache import SingleFlight
from breadcast.engine.protocol import ObjectStore
from breadcast.errors import ObjectStoreError
from breadcast.models.schemas import (
    RecipeDocument,
    RecipeSet,
    RenderedRecipe,
    RenderedRecipeSet,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _read_json_object(path: Path) -> dict:
    path = Path(path)
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def load_recipe_set(path: Path) -> RecipeSet:
    """Load the named recipe set file; missing file -> empty set."""
    return RecipeSet(entries=_read_json_object(path))


def save_recipe_set(path: Path, recipe_set: RecipeSet) -> None:
    data = {
        name: entry.model_dump(by_alias=True)
        for name, entry in recipe_set.entries.items()
    }
    _write_json(path, data)


def load_rendered_recipe_set(path: Path) -> RenderedRecipeSet:
    """Load the rendered recipe set file; missing file -> empty set."""
    return RenderedRecipeSet(recipes=_read_json_object(path))


def save_rendered_recipe_set(path: Path, rendered: RenderedRecipeSet) -> None:
    data = {
        recipe_id: recipe.model_dump(by_alias=True)
        for recipe_id, recipe in rendered.recipes.items()
    }
    _write_json(path, data)


def _write_json(path: Path, data: dict) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


class ReloadingFile(Generic[T]):
    """
    A file-backed snapshot that is re-read at most every `reload_seconds`.

    Read or parse failures are logged and produce `empty()`; the next reload
    tries again.
    """

    def __init__(
        self,
        path: Path,
        loader: Callable[[Path], T],
        empty: Callable[[], T],
        reload_seconds: int = 10,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self._loader = loader
        self._empty = empty
        self._reload_seconds = reload_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._loaded_at = 0.0

    def get(self) -> T:
        now = self._clock()
        if self._value is None or now > self._loaded_at + self._reload_seconds:
            self._value = self._load()
            self._loaded_at = now
        return self._value

    def _load(self) -> T:
        try:
            return self._loader(self.path)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Could not load {self.path}: {e}")
            return self._empty()


class PrerenderedRecipeStore:
    """Resolves recipes and their pinned asset cids from the rendered recipe set."""

    def __init__(self, rendered_file: ReloadingFile[RenderedRecipeSet]):
        self._rendered_file = rendered_file

    def _rendered(self, recipe_id: str) -> Optional[RenderedRecipe]:
        return self._rendered_file.get().get(recipe_id)

    async def get_recipe(self, recipe_id: str) -> Optional[RecipeDocument]:
        rendered = self._rendered(recipe_id)
        if rendered is None:
            logger.info(f"Recipe {recipe_id} not in rendered recipe set")
            return None
        return rendered.recipe_data

    def get_asset_cid(self, recipe_id: str, asset_key: str) -> Optional[str]:
        rendered = self._rendered(recipe_id)
        if rendered is None:
            return None
        return rendered.asset_cids.get(asset_key)


class LiveRecipeStore:
    """
    Fetches recipe documents from IPFS for recipes listed in the recipe set.

    Documents are content addressed, so a fetched document is kept for the
    life of the process. Concurrent lookups of an uncached recipe share
    one fetch.
    """

    def __init__(self, recipe_set_file: ReloadingFile[RecipeSet], object_store: ObjectStore):
        self._recipe_set_file = recipe_set_file
        self._object_store = object_store
        self._documents: Dict[str, RecipeDocument] = {}
        self._fetches = SingleFlight()

    async def get_recipe(self, recipe_id: str) -> Optional[RecipeDocument]:
        if recipe_id not in self._recipe_set_file.get().recipe_ids():
            logger.info(f"Recipe {recipe_id} not in recipe set")
            return None

        cached = self._documents.get(recipe_id)
        if cached is not None:
            return cached

        return await self._fetches.run(recipe_id, lambda: self._fetch(recipe_id))

    async def _fetch(self, recipe_id: str) -> RecipeDocument:
        raw = await self._object_store.get(recipe_id)
        try:
            document = RecipeDocument.model_validate_json(raw)
        except ValidationError as e:
            raise ObjectStoreError(
                "fetch", "recipe document is malformed", details={"cid": recipe_id}
            ) from e
        self._documents[recipe_id] = document
        logger.info(f"Fetched recipe {recipe_id}")
        return document
