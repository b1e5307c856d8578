"""
Tests for asset key derivation.
"""

import pytest

from breadcast.engine.asset_keys import derive_frame_key, derive_key, reachable_frames
from breadcast.models.schemas import FrameArguments, FrameScreen

from breadcast.tests.fakes import RECIPE_ID


class TestDeriveKey:
    """Tests for the key format."""

    def test_title_key_ignores_page(self):
        assert derive_key("abc", FrameScreen.TITLE, 2, 7) == "abc-title-2"

    def test_ingredients_key(self):
        assert derive_key("abc", FrameScreen.INGREDIENTS, 3, 2) == "abc-ingredients-3-2"

    def test_step_key(self):
        assert derive_key("abc", FrameScreen.STEPS, 1, 4) == "abc-step-1-4"

    def test_completed_key_ignores_scale_and_page(self):
        assert derive_key("abc", FrameScreen.COMPLETED, 4, 3) == "abc-completed"
        assert derive_key("abc", FrameScreen.COMPLETED, 1, 1) == "abc-completed"

    def test_distinct_frames_distinct_keys(self):
        keys = {
            derive_key("abc", screen, scale, page)
            for screen in (FrameScreen.INGREDIENTS, FrameScreen.STEPS)
            for scale in range(1, 5)
            for page in range(1, 4)
        }
        assert len(keys) == 2 * 4 * 3


class TestDeriveFrameKey:
    """Tests for request keys, which use the clamped page."""

    def test_out_of_range_step_shares_last_step_key(self, recipe):
        args = FrameArguments(recipe_id=RECIPE_ID, screen=FrameScreen.STEPS, scale=2, page=99)
        assert derive_frame_key(args, recipe) == f"{RECIPE_ID}-step-2-3"

    def test_out_of_range_ingredients_page(self, recipe):
        args = FrameArguments(recipe_id=RECIPE_ID, screen=FrameScreen.INGREDIENTS, page=5)
        assert derive_frame_key(args, recipe) == f"{RECIPE_ID}-ingredients-1-2"


class TestReachableFrames:
    """Tests for enumerating every frame of a recipe."""

    def test_frame_count(self, recipe):
        """Per scale: title + 2 ingredient pages + 3 steps; plus one completion frame."""
        frames = reachable_frames(RECIPE_ID, recipe)
        assert len(frames) == 4 * (1 + 2 + 3) + 1

    def test_keys_unique(self, recipe):
        keys = [derive_frame_key(f, recipe) for f in reachable_frames(RECIPE_ID, recipe)]
        assert len(keys) == len(set(keys))

    @pytest.mark.parametrize("scale", [1, 4])
    def test_includes_every_scale(self, recipe, scale):
        keys = {derive_frame_key(f, recipe) for f in reachable_frames(RECIPE_ID, recipe)}
        assert f"{RECIPE_ID}-title-{scale}" in keys
        assert f"{RECIPE_ID}-step-{scale}-3" in keys
