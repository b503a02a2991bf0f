"""
CLI interface for wa-dispatch.

Commands:
    send        — Broadcast a message to saved or explicit targets
    targets     — Add, remove, and list saved targets
    categories  — List target categories
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click

from wa_dispatch import __version__
from wa_dispatch.config import load_settings
from wa_dispatch.directory.store import TargetDirectory
from wa_dispatch.dispatch.request import (
    MIN_INTERVAL_FLOOR_SECONDS,
    DispatchRequest,
    DispatchValidationError,
)
from wa_dispatch.dispatch.runner import Dispatcher
from wa_dispatch.messaging.wascript import WascriptClient, WascriptConfig
from wa_dispatch.sendlog.sink import SendLog


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(version=__version__, prog_name="wa-dispatch")
@click.option("--db", default=None, help="Database URL for the target directory.")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False),
              help="Send log file (appended to, never truncated).")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False),
              help="Read settings from this .env file.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
@click.pass_context
def cli(
    ctx: click.Context,
    db: Optional[str],
    log_file: Optional[str],
    env_file: Optional[str],
    verbose: bool,
) -> None:
    """wa-dispatch — broadcast WhatsApp messages through Wascript, one target at a time."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(env_file)
    except ValueError as e:
        raise click.ClickException(str(e))

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["db_url"] = db or settings.db_url
    ctx.obj["log_file"] = Path(log_file) if log_file else settings.log_file


def _directory(ctx: click.Context) -> TargetDirectory:
    return TargetDirectory(ctx.obj["db_url"])


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--message", "-m", default=None, help="Message text.")
@click.option("--message-file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Read the message text from a file.")
@click.option("--target", "-t", "targets", multiple=True,
              help="Target id to send to (repeatable, sent in the order given).")
@click.option("--category", "-c", "categories", multiple=True,
              help="Send to every saved target in this category (repeatable).")
@click.option("--all", "all_targets", is_flag=True, help="Send to every saved target.")
@click.option("--interval", "-i", default=None, type=int,
              help=f"Seconds between sends (minimum {MIN_INTERVAL_FLOOR_SECONDS}).")
@click.option("--token", default=None, help="Wascript token (default: WASCRIPT_TOKEN).")
@click.option("--json-output", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def send(
    ctx: click.Context,
    message: Optional[str],
    message_file: Optional[str],
    targets: tuple[str, ...],
    categories: tuple[str, ...],
    all_targets: bool,
    interval: Optional[int],
    token: Optional[str],
    json_output: bool,
) -> None:
    """Send a message to each selected target, pausing between sends."""
    settings = ctx.obj["settings"]

    if message is not None and message_file:
        raise click.UsageError("Use either --message or --message-file, not both.")
    if message_file:
        message = Path(message_file).read_text(encoding="utf-8")
    if message is None:
        raise click.UsageError("Provide --message or --message-file.")

    target_ids = resolve_targets(ctx, targets, categories, all_targets)

    request = DispatchRequest(
        message_text=message,
        target_ids=target_ids,
        min_interval_seconds=interval if interval is not None else settings.default_interval,
        auth_token=token or settings.wascript_token,
    )

    config = WascriptConfig(
        base_url=settings.wascript_base_url,
        timeout=settings.wascript_timeout,
    )
    with WascriptClient(config) as client:
        dispatcher = Dispatcher(client, SendLog(ctx.obj["log_file"]))
        try:
            result = dispatcher.dispatch(request)
        except DispatchValidationError as e:
            if e.field == "auth_token":
                raise click.UsageError(
                    f"{e} Pass --token or set WASCRIPT_TOKEN in your environment or .env file."
                )
            raise click.UsageError(str(e))

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
    else:
        click.echo(result.summary())

    if result.failed:
        failed = " ".join(f"-t {t}" for t in result.failed_targets())
        click.echo(f"\nTo resend to the failed targets: wa-dispatch send ... {failed}", err=True)
        ctx.exit(1)


def resolve_targets(
    ctx: click.Context,
    targets: tuple[str, ...],
    categories: tuple[str, ...],
    all_targets: bool,
) -> list[str]:
    """Explicit targets first, then saved ones; a target is listed once."""
    ids = list(targets)
    if categories or all_targets:
        directory = _directory(ctx)
        saved = directory.target_ids(None if all_targets else list(categories))
        if not saved:
            click.echo("No saved targets matched the selection.", err=True)
        ids.extend(saved)

    seen: set[str] = set()
    ordered: list[str] = []
    for target_id in ids:
        if target_id not in seen:
            seen.add(target_id)
            ordered.append(target_id)
    return ordered


# ---------------------------------------------------------------------------
# targets
# ---------------------------------------------------------------------------

@cli.group()
def targets() -> None:
    """Manage saved targets."""


@targets.command(name="add")
@click.option("--id", "target_id", required=True, help="WhatsApp group or phone id.")
@click.option("--name", "-n", required=True, help="Friendly name.")
@click.option("--category", "-c", required=True, help="Category (e.g. Work, Church).")
@click.pass_context
def add_target(ctx: click.Context, target_id: str, name: str, category: str) -> None:
    """Save a new target."""
    try:
        target = _directory(ctx).add_target(target_id, name, category)
    except ValueError as e:
        raise click.UsageError(str(e))
    if target is None:
        click.echo(f"Target {target_id} already exists.")
    else:
        click.echo(f"Added {target.name} ({target.id}) in category {target.category}.")


@targets.command(name="remove")
@click.argument("target_id")
@click.pass_context
def remove_target(ctx: click.Context, target_id: str) -> None:
    """Remove a saved target."""
    if _directory(ctx).remove_target(target_id):
        click.echo(f"Removed {target_id}.")
    else:
        click.echo(f"Target {target_id} not found.")


@targets.command(name="list")
@click.option("--category", "-c", default=None, help="Only list this category.")
@click.option("--json-output", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_targets(ctx: click.Context, category: Optional[str], json_output: bool) -> None:
    """List saved targets."""
    saved = _directory(ctx).list_targets(category=category)

    if json_output:
        click.echo(json.dumps([t.to_dict() for t in saved], indent=2, ensure_ascii=False))
        return

    if not saved:
        click.echo("No saved targets.")
        return

    click.echo(f"Saved targets ({len(saved)}):")
    for t in saved:
        click.echo(f"  {t.id:40s} | {t.category[:20]:20s} | {t.name}")


# ---------------------------------------------------------------------------
# categories
# ---------------------------------------------------------------------------

@cli.command()
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List target categories."""
    names = _directory(ctx).list_categories()
    if not names:
        click.echo("No categories.")
        return
    for name in names:
        click.echo(name)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
