#!/usr/bin/env python3
"""
Demo script to walk a recipe through its frames.
Simulates a user pressing the first button on every frame until the recipe is
finished, printing the page shown and the buttons offered along the way.
"""
from pathlib import Path

from breadcast.engine.asset_keys import derive_frame_key, reachable_frames
from breadcast.engine.navigation import FrameNavigator, frame_url
from breadcast.engine.page_builder import IngredientChip, build_page_description
from breadcast.models.schemas import FrameArguments, FrameScreen, RecipeDocument
from breadcast.services.render_service import SvgFrameRenderer

RECIPE_ID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"

SAMPLE_RECIPE = {
    "title": "Weeknight Focaccia",
    "description": "Dimpled, olive-oil rich bread for @X4 people",
    "totalTimeMinutes": 150,
    "activeTimeMinutes": 25,
    "yields": "@X1 half-sheet pan",
    "ingredients": [
        {"name": "bread flour", "quantity": 500, "unit": "g"},
        {"name": "warm water", "quantity": 400, "unit": "g"},
        {"name": "instant yeast", "quantity": 1.5, "unit": "tsp"},
        {"name": "salt", "quantity": 2, "unit": "tsp"},
        {"name": "olive oil", "quantity": 0.25, "unit": "cup"},
        {"name": "flaky salt", "quantity": 1, "unit": "pinch"},
    ],
    "steps": [
        "Stir @1 @2 and @3 together, then rest 10 minutes.",
        "Add @4 and fold until smooth. Let rise for 90 minutes.",
        "Pour @5 into the pan, stretch the dough and dimple it.",
        "Sprinkle with @6 and bake at 230C for 22 minutes.",
    ],
}


def print_section(title: str):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def print_frame(recipe: RecipeDocument, args: FrameArguments):
    """Print one frame: its key, page content and buttons."""
    page = build_page_description(recipe, args.screen, args.scale, args.page)
    words = [
        f"[{fragment.quantity_text} {fragment.unit} {fragment.name}]".replace("  ", " ")
        if isinstance(fragment, IngredientChip) else fragment.text
        for fragment in page.body
    ]

    print(f"🖼  {derive_frame_key(args, recipe)}")
    print(f"   {page.title}  {page.scale_label}".rstrip())
    if page.subtitle:
        print(f"   {page.subtitle}")
    if page.total_pages > 1:
        print(f"   page {page.current_page}/{page.total_pages}")
    print(f"   {' '.join(words)}")

    buttons = FrameNavigator(recipe).buttons(args)
    for number, button in enumerate(buttons, start=1):
        target = frame_url("frames.example", button.target) if button.target else "-"
        print(f"   ({number}) {button.label:16} → {target}")
    return buttons


def main():
    """Run frame navigation demonstration."""
    print_section("Breadcast Frame Walkthrough")

    recipe = RecipeDocument.model_validate(SAMPLE_RECIPE)
    frames = reachable_frames(RECIPE_ID, recipe)
    print(f"✓ {recipe.title}: {len(frames)} distinct frames across all scales\n")

    # STEP 1: Follow the primary button from the title to the end, at scale 2
    print_section("STEP 1: Cook at Scale 2")

    args = FrameArguments(recipe_id=RECIPE_ID, scale=2)
    seen = set()
    while True:
        buttons = print_frame(recipe, args)
        print()
        key = derive_frame_key(args, recipe)
        if args.screen == FrameScreen.COMPLETED or key in seen:
            break
        seen.add(key)
        # Title offers Ingredients first; everywhere else the forward button is second
        primary = buttons[0] if args.screen == FrameScreen.TITLE else buttons[1]
        args = primary.target

    # STEP 2: Render one frame to disk
    print_section("STEP 2: Render the Title Frame")

    renderer = SvgFrameRenderer()
    title = FrameArguments(recipe_id=RECIPE_ID, scale=2)
    output = Path(f"{derive_frame_key(title, recipe)}.{renderer.extension}")
    page = build_page_description(recipe, title.screen, title.scale, title.page)
    output.write_bytes(renderer.render(page))
    print(f"✓ Wrote {output} ({output.stat().st_size} bytes)")


if __name__ == "__main__":
    main()
