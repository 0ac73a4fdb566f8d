"""flashdeck CLI — HTTP server and local card management."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from flashdeck.application.config import resolve_config
from flashdeck.application.factory import Services, build_services
from flashdeck.domain.errors import FlashdeckError
from flashdeck.domain.scheduling import State

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdeck: spaced-repetition flashcards with FSRS scheduling.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Inspect flashdeck configuration.")
app.add_typer(config_app, name="config")

collections_app = typer.Typer(help="Manage collections.", no_args_is_help=True)
app.add_typer(collections_app, name="collections")

cards_app = typer.Typer(help="Manage cards.", no_args_is_help=True)
app.add_typer(cards_app, name="cards")

review_app = typer.Typer(help="Preview and record reviews.", no_args_is_help=True)
app.add_typer(review_app, name="review")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding cards.json.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for flashdeck."""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _overrides(ctx: typer.Context) -> dict:
    obj = ctx.find_root().obj or {}
    return {"data_dir": obj.get("data_dir")}


def _services(ctx: typer.Context) -> Services:
    return build_services(resolve_config(_overrides(ctx)))


def _fail(e: FlashdeckError) -> NoReturn:
    typer.secho(f"Error: {e.message}", fg="red", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option(help="Bind address. Defaults to config.")] = None,
    port: Annotated[int | None, typer.Option(help="Port. Defaults to config.")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on code changes.")] = False,
):
    """Start the HTTP API server."""
    import uvicorn

    overrides = _overrides(ctx)
    config = resolve_config(overrides)
    # The server resolves its own config from the environment.
    if overrides["data_dir"] is not None:
        os.environ["FLASHDECK_DATA_DIR"] = str(config.data_dir)
    uvicorn.run(
        "flashdeck.server:app",
        host=host or config.host,
        port=port or config.port,
        reload=reload,
    )


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show total, due and new card counts."""
    snapshot = _services(ctx).stats.snapshot(_now())

    if json_output:
        from dataclasses import asdict

        typer.echo(json.dumps(asdict(snapshot), indent=2))
        return

    typer.echo(f"Collections: {snapshot.total_collections}")
    typer.echo(f"Cards: {snapshot.total_cards}")
    typer.secho(f"Due: {snapshot.due_cards}", fg="yellow" if snapshot.due_cards else "green")
    typer.echo(f"New: {snapshot.new_cards}")
    for c in snapshot.collections:
        typer.echo(f"  {c.name}: {c.total_cards} cards, {c.due_cards} due, {c.new_cards} new")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = resolve_config(_overrides(ctx))
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    # Never print credentials.
    for secret in ("password", "api_token", "session_secret"):
        if d.get(secret):
            d[secret] = "***"
    typer.echo(json.dumps(d, indent=2))


# ---------------------------------------------------------------------------
# Collections subgroup
# ---------------------------------------------------------------------------


@collections_app.command("list")
def collections_list(ctx: typer.Context):
    """List collections."""
    items = _services(ctx).collections.list_collections()
    if not items:
        typer.secho("No collections found.", fg="yellow")
        return
    for c in items:
        typer.echo(f"{c.id}  {c.name}")


@collections_app.command("create")
def collections_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Collection name.")],
    description: Annotated[str | None, typer.Option(help="Optional description.")] = None,
):
    """Create a collection."""
    try:
        collection = _services(ctx).collections.create_collection(
            name, _now(), description=description
        )
    except FlashdeckError as e:
        _fail(e)
    typer.secho(f"Created {collection.name} ({collection.id})", fg="green")


@collections_app.command("delete")
def collections_delete(
    ctx: typer.Context,
    collection_id: Annotated[str, typer.Argument(help="Collection ID.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Delete a collection and all of its cards."""
    if not force:
        typer.confirm(f"Delete {collection_id} and all of its cards?", abort=True)
    try:
        _services(ctx).collections.delete_collection(collection_id)
    except FlashdeckError as e:
        _fail(e)
    typer.secho(f"Deleted {collection_id}", fg="green")


# ---------------------------------------------------------------------------
# Cards subgroup
# ---------------------------------------------------------------------------


@cards_app.command("add")
def cards_add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Question side.")],
    back: Annotated[str, typer.Argument(help="Answer side.")],
    collection: Annotated[str, typer.Option("--collection", "-c", help="Collection name.")],
    note_id: Annotated[str | None, typer.Option(help="External note reference.")] = None,
):
    """Add a card to a collection."""
    try:
        card = _services(ctx).cards.create_card(
            front=front, back=back, now=_now(), collection_name=collection, note_id=note_id
        )
    except FlashdeckError as e:
        _fail(e)
    typer.secho(f"Created {card.id}", fg="green")


@cards_app.command("list")
def cards_list(
    ctx: typer.Context,
    collection_id: Annotated[str | None, typer.Option(help="Filter by collection ID.")] = None,
    due: Annotated[bool, typer.Option("--due", help="Only cards due now.")] = False,
    new: Annotated[bool, typer.Option("--new", help="Only never-reviewed cards.")] = False,
):
    """List cards."""
    items = _services(ctx).cards.list_cards(_now(), collection_id=collection_id, due=due, new=new)
    if not items:
        typer.secho("No cards found.", fg="yellow")
        return
    for card in items:
        state = State(card.memory.state).name.lower()
        typer.echo(f"{card.id}  [{state}]  due {card.memory.due:%Y-%m-%d %H:%M}  {card.front}")


@cards_app.command("import")
def cards_import(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML file with a collection and its cards.")],
):
    """Import cards from a YAML file."""
    from flashdeck.application.importer import import_cards

    services = _services(ctx)
    try:
        result = import_cards(path, services.cards, services.collections, _now())
    except FlashdeckError as e:
        _fail(e)

    typer.secho(f"Created: {result.created}", fg="green")
    typer.echo(f"Skipped: {result.skipped}")
    if result.errors:
        typer.secho(f"Errors: {len(result.errors)}", fg="red")
        for err in result.errors:
            typer.echo(f"  {err}")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Review subgroup
# ---------------------------------------------------------------------------


@review_app.command("preview")
def review_preview(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card ID.")],
):
    """Show the next interval for each rating."""
    from flashdeck.domain.scheduling import Rating

    try:
        options = _services(ctx).reviews.get_review_options(card_id, _now())
    except FlashdeckError as e:
        _fail(e)
    for option in options:
        typer.echo(f"{option.rating} {Rating(option.rating).label:<6} {option.interval}")


@review_app.command("submit")
def review_submit(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card ID.")],
    rating: Annotated[str, typer.Argument(help="1-4 or again/hard/good/easy.")],
):
    """Record a review."""
    try:
        card = _services(ctx).reviews.submit_review(card_id, rating, _now())
    except FlashdeckError as e:
        _fail(e)
    memory = card.memory
    typer.secho(
        f"{card.id} -> {State(memory.state).name.lower()}, due {memory.due:%Y-%m-%d %H:%M} UTC",
        fg="green",
    )
