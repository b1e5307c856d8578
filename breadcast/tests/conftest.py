"""
Shared pytest fixtures for Breadcast tests.

This module provides common fixtures for:
- Fake object store and renderer collaborators
- Sample recipe documents and recipe set files
- FastAPI test client wired to a live-cache frame service
"""
import json
import os
import pytest
from typing import Generator

# Set test environment variables BEFORE importing app modules
# This ensures Settings loads in debug/test mode
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENABLE_BACKGROUND_JOBS", "false")

from fastapi.testclient import TestClient

from breadcast.config import get_settings
from breadcast.main import app
from breadcast.models.schemas import RecipeDocument, RecipeSet, RecipeSetEntry
from breadcast.services.factory import create_frame_service
from breadcast.services.recipe_store import save_recipe_set
from breadcast.tests.fakes import (
    IMAGE_CID,
    RECIPE_ID,
    FakeObjectStore,
    FakeRenderer,
    sample_recipe_data,
)


# ============================================================================
# Recipe and Collaborator Fixtures
# ============================================================================

@pytest.fixture
def recipe_data() -> dict:
    return sample_recipe_data()


@pytest.fixture
def recipe(recipe_data) -> RecipeDocument:
    return RecipeDocument.model_validate(recipe_data)


@pytest.fixture
def object_store(recipe_data) -> FakeObjectStore:
    """Object store holding the sample recipe document under RECIPE_ID."""
    return FakeObjectStore(documents={RECIPE_ID: json.dumps(recipe_data).encode("utf-8")})


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def test_settings(tmp_path):
    """Live-cache settings with recipe set files under a temp directory."""
    return get_settings(
        debug=True,
        base_dir=tmp_path,
        render_mode="live_cache",
        enable_background_jobs=False,
    )


@pytest.fixture
def recipe_set_file(test_settings):
    """Recipe set file listing the sample recipe."""
    save_recipe_set(
        test_settings.recipe_set_file,
        RecipeSet(entries={"country-loaf": RecipeSetEntry(json_cid=RECIPE_ID, image_cid=IMAGE_CID)}),
    )
    return test_settings.recipe_set_file


# ============================================================================
# Client Fixtures
# ============================================================================

def _client_for(service) -> Generator[TestClient, None, None]:
    with TestClient(app, raise_server_exceptions=False) as test_client:
        # Replace the service built by the lifespan hook
        app.state.frame_service = service
        yield test_client


@pytest.fixture
def frame_service(test_settings, recipe_set_file, object_store, renderer):
    return create_frame_service(test_settings, object_store, renderer)


@pytest.fixture
def client(frame_service) -> Generator[TestClient, None, None]:
    """FastAPI test client serving the sample recipe in live-cache mode."""
    yield from _client_for(frame_service)


@pytest.fixture
def client_factory(test_settings, recipe_set_file, object_store):
    """Build a client around a custom renderer."""
    clients = []

    def make(renderer) -> TestClient:
        service = create_frame_service(test_settings, object_store, renderer)
        generator = _client_for(service)
        clients.append(generator)
        return next(generator)

    yield make

    for generator in clients:
        generator.close()
