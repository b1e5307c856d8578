"""
CLI for managing Breadcast recipe sets and prerendered frames.
"""
import asyncio
import click
from pydantic import ValidationError
from typing import Dict, Optional, Set

from breadcast.clients.pinata_client import PinataClient
from breadcast.config import Settings, settings as default_settings
from breadcast.engine.arguments import is_valid_cid
from breadcast.engine.asset_keys import derive_frame_key, reachable_frames
from breadcast.engine.page_builder import build_page_description
from breadcast.engine.protocol import ObjectStore, Renderer
from breadcast.errors import BreadcastError, ObjectStoreError
from breadcast.models.schemas import RecipeDocument, RecipeSetEntry, RenderedRecipe
from breadcast.services.recipe_store import (
    load_recipe_set,
    load_rendered_recipe_set,
    save_recipe_set,
    save_rendered_recipe_set,
)
from breadcast.services.render_service import SvgFrameRenderer


class BreadcastCLI:
    """CLI application state: settings and collaborators."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        object_store: Optional[ObjectStore] = None,
        renderer: Optional[Renderer] = None,
    ):
        self.settings = settings or default_settings
        self.object_store = object_store or PinataClient()
        self.renderer = renderer or SvgFrameRenderer()

    def run(self, coro):
        """Run a coroutine, closing the object store's HTTP client afterwards."""
        async def runner():
            try:
                return await coro
            finally:
                close = getattr(self.object_store, "aclose", None)
                if close is not None:
                    await close()

        return asyncio.run(runner())

    def active_cids(self) -> Set[str]:
        """Every cid referenced by the recipe set or the rendered recipe set."""
        active: Set[str] = set()
        for entry in load_recipe_set(self.settings.recipe_set_file).entries.values():
            active.add(entry.json_cid)
            if entry.image_cid:
                active.add(entry.image_cid)
        rendered = load_rendered_recipe_set(self.settings.rendered_recipe_set_file)
        for recipe_id, recipe in rendered.recipes.items():
            active.add(recipe_id)
            active.update(recipe.asset_cids.values())
        return active

    async def render_and_pin(
        self, recipe_id: str, existing: Optional[Dict[str, str]] = None, force: bool = False
    ) -> RenderedRecipe:
        """
        Render every reachable frame of a recipe and pin the images.

        Keys already present in `existing` are reused unless `force` is set.
        """
        raw = await self.object_store.get(recipe_id)
        try:
            recipe = RecipeDocument.model_validate_json(raw)
        except ValidationError as e:
            raise ObjectStoreError(
                "parse recipe", f"{recipe_id} is not a recipe document ({e.error_count()} errors)"
            ) from e
        asset_cids: Dict[str, str] = {}

        for frame in reachable_frames(recipe_id, recipe):
            key = derive_frame_key(frame, recipe)
            if not force and existing and key in existing:
                asset_cids[key] = existing[key]
                continue
            page = build_page_description(recipe, frame.screen, frame.scale, frame.page)
            data = self.renderer.render(page)
            asset_cids[key] = await self.object_store.put(f"{key}.{self.renderer.extension}", data)
            click.echo(f"  ✓ {key} → {asset_cids[key]}")

        return RenderedRecipe(recipe_data=recipe, asset_cids=asset_cids)


@click.group()
@click.pass_context
def cli(ctx):
    """Breadcast - Recipe frames on IPFS"""
    if ctx.obj is None:
        ctx.obj = BreadcastCLI()


@cli.command()
@click.pass_obj
def recipes(app: BreadcastCLI):
    """List the named recipe set."""
    recipe_set = load_recipe_set(app.settings.recipe_set_file)
    rendered = load_rendered_recipe_set(app.settings.rendered_recipe_set_file)

    if not recipe_set.entries:
        click.echo(f"No recipes in {app.settings.recipe_set_file}")
        return

    for name, entry in sorted(recipe_set.entries.items()):
        marker = "🖼 " if rendered.get(entry.json_cid) else "  "
        click.echo(f"{marker}{name:30} {entry.json_cid}")


@cli.command()
@click.argument('name')
@click.argument('json_cid')
@click.argument('image_cid', required=False, default="")
@click.pass_obj
def add(app: BreadcastCLI, name: str, json_cid: str, image_cid: str):
    """Add a published recipe to the recipe set."""
    for value in filter(None, (json_cid, image_cid)):
        if not is_valid_cid(value):
            raise click.BadParameter(f"'{value}' is not a valid CID")

    recipe_set = load_recipe_set(app.settings.recipe_set_file)
    if name in recipe_set.entries:
        raise click.BadParameter(f"'{name}' already exists in the recipe set")

    recipe_set.entries[name] = RecipeSetEntry(json_cid=json_cid, image_cid=image_cid)
    save_recipe_set(app.settings.recipe_set_file, recipe_set)
    click.echo(f"✓ Added {name}")


@cli.command()
@click.argument('name')
@click.option('--force', is_flag=True, help='Re-render keys that already have a cid')
@click.pass_obj
def render(app: BreadcastCLI, name: str, force: bool):
    """Render and pin every frame of a recipe."""
    entry = load_recipe_set(app.settings.recipe_set_file).entries.get(name)
    if entry is None:
        raise click.ClickException(f"No recipe named '{name}'")

    rendered_set = load_rendered_recipe_set(app.settings.rendered_recipe_set_file)
    previous = rendered_set.get(entry.json_cid)

    click.echo(f"\n🍞 Rendering {name} ({entry.json_cid})...\n")
    try:
        rendered = app.run(app.render_and_pin(
            entry.json_cid,
            existing=previous.asset_cids if previous else None,
            force=force,
        ))
    except BreadcastError as e:
        raise click.ClickException(e.message)

    rendered_set.recipes[entry.json_cid] = rendered
    save_rendered_recipe_set(app.settings.rendered_recipe_set_file, rendered_set)
    click.echo(f"\n✓ {len(rendered.asset_cids)} frames recorded for {name}")


@cli.command()
@click.argument('recipe_id')
@click.pass_obj
def keys(app: BreadcastCLI, recipe_id: str):
    """Show the asset keys and cids of a rendered recipe."""
    rendered = load_rendered_recipe_set(app.settings.rendered_recipe_set_file).get(recipe_id)
    if rendered is None:
        raise click.ClickException(f"Recipe {recipe_id} has not been rendered")

    for key, cid in sorted(rendered.asset_cids.items()):
        click.echo(f"{key:60} {cid}")


@cli.command()
@click.option('--yes', is_flag=True, help='Unpin without asking')
@click.pass_obj
def prune(app: BreadcastCLI, yes: bool):
    """Unpin files no longer referenced by either recipe set."""
    active = app.active_cids()
    try:
        pinned = app.run(app.object_store.list())
    except BreadcastError as e:
        raise click.ClickException(e.message)

    inactive = sorted(pinned - active)
    unpinned_active = sorted(active - pinned)

    if unpinned_active:
        click.echo(f"⚠️  {len(unpinned_active)} files in your working set are not pinned:")
        for cid in unpinned_active:
            click.echo(f"  • {cid}")

    if not inactive:
        click.echo("✓ Nothing to unpin")
        return

    click.echo(f"{len(inactive)} pinned files are not referenced:")
    for cid in inactive:
        click.echo(f"  • {cid}")

    if not yes and not click.confirm(
        f"Unpin {len(inactive)} files? This action cannot be undone.", default=False
    ):
        click.echo("Aborted.")
        return

    async def unpin_all():
        for cid in inactive:
            await app.object_store.delete(cid)

    try:
        app.run(unpin_all())
    except BreadcastError as e:
        raise click.ClickException(e.message)
    click.echo(f"✓ {len(inactive)} files have been unpinned.")


if __name__ == '__main__':
    cli()
