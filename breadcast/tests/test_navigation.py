"""
Tests for the frame navigation state machine and request argument parsing.
"""

import pytest

from breadcast.engine.arguments import is_valid_cid, parse_frame_arguments, parse_int, parse_screen
from breadcast.engine.navigation import FrameNavigator, frame_url
from breadcast.models.schemas import FrameArguments, FrameScreen, RecipeDocument

from breadcast.tests.fakes import RECIPE_ID


def _args(screen=FrameScreen.TITLE, scale=1, page=1):
    return FrameArguments(recipe_id=RECIPE_ID, screen=screen, scale=scale, page=page)


def _labels(buttons):
    return [button.label for button in buttons]


class TestFrameNavigator:
    """Tests for the buttons offered on each screen."""

    @pytest.fixture
    def navigator(self, recipe):
        return FrameNavigator(recipe)

    def test_title_buttons(self, navigator):
        assert _labels(navigator.buttons(_args())) == ["Ingredients", "Steps", "Scale +"]

    def test_title_buttons_mid_scale(self, navigator):
        assert _labels(navigator.buttons(_args(scale=2))) == [
            "Ingredients", "Steps", "Scale -", "Scale +",
        ]

    def test_max_scale_has_no_scale_up(self, navigator):
        assert _labels(navigator.buttons(_args(scale=4))) == ["Ingredients", "Steps", "Scale -"]

    def test_first_ingredients_page(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.INGREDIENTS, scale=2))
        assert _labels(buttons) == ["Back", ">", "Scale -", "Scale +"]
        assert buttons[0].target.screen == FrameScreen.TITLE
        assert buttons[1].target.page == 2

    def test_last_ingredients_page_begins_steps(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.INGREDIENTS, page=2))
        assert _labels(buttons)[:2] == ["<", "Begin"]
        assert buttons[0].target.page == 1
        assert buttons[1].target == _args(FrameScreen.STEPS, page=1)

    def test_first_step(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.STEPS))
        assert _labels(buttons)[:2] == ["Back", ">"]
        assert buttons[1].target.page == 2

    def test_last_step_finishes(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.STEPS, scale=3, page=3))
        assert _labels(buttons)[:2] == ["<", "Finished 🎉"]
        assert buttons[1].target.screen == FrameScreen.COMPLETED
        assert buttons[1].target.scale == 3

    def test_out_of_range_step_treated_as_last(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.STEPS, page=42))
        assert buttons[0].target.page == 2
        assert _labels(buttons)[1] == "Finished 🎉"

    def test_completed_returns_to_start(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.COMPLETED, scale=2))
        assert _labels(buttons) == ["Return to Start"]
        assert buttons[0].target == _args(FrameScreen.TITLE, scale=2)

    def test_scale_buttons_keep_clamped_page(self, navigator):
        buttons = navigator.buttons(_args(FrameScreen.STEPS, scale=2, page=9))
        scale_down, scale_up = buttons[2:]
        assert scale_down.target == _args(FrameScreen.STEPS, scale=1, page=3)
        assert scale_up.target == _args(FrameScreen.STEPS, scale=3, page=3)

    def test_at_most_four_buttons_everywhere(self, navigator):
        for screen in FrameScreen:
            for scale in range(1, 5):
                for page in range(1, 5):
                    buttons = navigator.buttons(_args(screen, scale, page))
                    assert 1 <= len(buttons) <= 4

    def test_recipe_without_ingredients_or_steps(self):
        navigator = FrameNavigator(RecipeDocument(title="Empty"))
        assert _labels(navigator.buttons(_args(FrameScreen.INGREDIENTS)))[:2] == ["Back", "Begin"]
        assert _labels(navigator.buttons(_args(FrameScreen.STEPS)))[:2] == ["Back", "Finished 🎉"]


class TestFrameUrl:
    """Tests for button target URLs."""

    def test_title_url_has_no_page(self):
        assert frame_url("frames.test", _args(scale=2)) == (
            f"https://frames.test/{RECIPE_ID}?scale=2&screen=title"
        )

    def test_steps_url_has_page(self):
        assert frame_url("frames.test", _args(FrameScreen.STEPS, page=3)) == (
            f"https://frames.test/{RECIPE_ID}?scale=1&screen=steps&page=3"
        )

    def test_completed_url(self):
        assert frame_url("frames.test", _args(FrameScreen.COMPLETED)).endswith("screen=complete")


class TestArgumentParsing:
    """Tests for lenient request parameter parsing."""

    def test_defaults(self):
        args = parse_frame_arguments(RECIPE_ID)
        assert args == _args()

    def test_values_parsed(self):
        args = parse_frame_arguments(RECIPE_ID, scale="3", screen="steps", page="2")
        assert args == _args(FrameScreen.STEPS, scale=3, page=2)

    @pytest.mark.parametrize("raw,expected", [("0", 1), ("-2", 1), ("9", 4), ("abc", 1), ("2x", 2)])
    def test_scale_clamped(self, raw, expected):
        assert parse_frame_arguments(RECIPE_ID, scale=raw).scale == expected

    def test_page_at_least_one(self):
        assert parse_frame_arguments(RECIPE_ID, page="-5").page == 1

    def test_unknown_screen_falls_back_to_title(self):
        assert parse_screen("dessert") == FrameScreen.TITLE
        assert parse_screen(None) == FrameScreen.TITLE
        assert parse_screen("complete") == FrameScreen.COMPLETED

    def test_parse_int_default(self):
        assert parse_int(None, 7) == 7
        assert parse_int("", 7) == 7


class TestCidValidation:
    """Tests for recipe identifier validation."""

    @pytest.mark.parametrize("value", [
        RECIPE_ID,
        "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi",
    ])
    def test_valid(self, value):
        assert is_valid_cid(value)

    @pytest.mark.parametrize("value", [
        "",
        None,
        "favicon.ico",
        RECIPE_ID[:-1],
        "Qm" + "0" * 44,
        "BAFYBEIGDYRZT5SFP7UDM7HU76UH7Y26NF3EFUYLQABF3OCLGTQY55FBZDI",
    ])
    def test_invalid(self, value):
        assert not is_valid_cid(value)
