#!/usr/bin/env python3
"""orgdo CLI - Manage org-mode task outlines.

This is the main entry point for the orgdo command-line tool.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from org_outline import OrgDocument, OrgItem, parse_date_input

from orgdo import __version__
from orgdo.cli import display
from orgdo.config.loader import load_config
from orgdo.models.config import Config
from orgdo.services.exceptions import DocumentReadError, DocumentWriteError
from orgdo.services.file_operations import load_directory, load_document, save_document
from orgdo.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

path_argument = click.argument(
    "path", required=False, type=click.Path(path_type=Path)
)
multi_option = click.option(
    "--multi", is_flag=True, help="Treat PATH as a directory of outline files"
)


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/orgdo/config.yaml)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, prog_name="orgdo")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool):
    """orgdo - Keep track of tasks in org-mode outline files.

    PATH defaults to the configured default file (todo.org) in the current
    directory, or to the current directory with --multi.
    """
    configure_logging(verbose)

    try:
        loaded = load_config(config)
    except ValueError as e:
        display.show_error(str(e))
        ctx.exit(1)

    # Store global options in context
    ctx.ensure_object(dict)
    ctx.obj["config"] = loaded
    ctx.obj["verbose"] = verbose


def resolve_target(path: Optional[Path], multi: bool, config: Config) -> Path:
    """Pick the file (or directory with ``multi``) a command works on."""
    if multi:
        if path is None:
            return Path.cwd()
        return path.parent if path.is_file() else path
    return path if path is not None else Path.cwd() / config.files.default_file


def open_document(ctx: click.Context, path: Optional[Path], multi: bool) -> OrgDocument:
    """Load the target document, exiting with an error message on failure."""
    config: Config = ctx.obj["config"]
    target = resolve_target(path, multi, config)
    try:
        if multi:
            return load_directory(target, config.workflow(), pattern=config.files.pattern)
        return load_document(target, config.workflow())
    except DocumentReadError as e:
        display.show_error(str(e))
        ctx.exit(1)


def write_document(ctx: click.Context, document: OrgDocument) -> None:
    try:
        save_document(document)
    except DocumentWriteError as e:
        display.show_error(str(e))
        ctx.exit(1)


def select_item(ctx: click.Context, document: OrgDocument, title: str) -> OrgItem:
    """First item whose title contains ``title``; exits when nothing matches."""
    item = document.find_by_title(title)
    if item is None:
        display.show_error(f"No item matching '{title}'")
        ctx.exit(1)
    return item


@cli.command()
@path_argument
@multi_option
@click.option("--all", "show_all", is_flag=True, help="Include children of folded items")
@click.pass_context
def show(ctx: click.Context, path: Optional[Path], multi: bool, show_all: bool):
    """Print the outline.

    Examples:
      orgdo show                  # ./todo.org
      orgdo show notes.org
      orgdo show --multi ~/org    # every *.org file in ~/org
    """
    config: Config = ctx.obj["config"]
    document = open_document(ctx, path, multi)

    items = list(document.walk()) if show_all else document.visible_items()
    if not items:
        click.echo("No items.")
        return
    for item in items:
        click.echo(display.format_item(item, config))


@cli.command()
@click.argument("text", required=False)
@path_argument
@multi_option
@click.option("--deadline", help="Deadline: YYYY-MM-DD, YYYY/MM/DD, MM/DD/YYYY or +N days")
@click.option("--priority", type=click.Choice(["A", "B", "C"], case_sensitive=False))
@click.option("--tag", "tags", multiple=True, help="Tag to add (repeatable)")
@click.pass_context
def capture(
    ctx: click.Context,
    text: Optional[str],
    path: Optional[Path],
    multi: bool,
    deadline: Optional[str],
    priority: Optional[str],
    tags: tuple[str, ...],
):
    """Capture a new item at the top of the outline.

    TEXT is read from standard input when omitted and input is piped.

    Examples:
      orgdo capture "Buy milk"
      echo "Call the bank" | orgdo capture
      orgdo capture "Pay rent" --deadline +3 --tag personal
    """
    config: Config = ctx.obj["config"]

    if text is None and not sys.stdin.isatty():
        text = click.get_text_stream("stdin").read()
    if not text or not text.strip():
        display.show_error("Nothing to capture")
        ctx.exit(1)

    due = None
    if deadline:
        try:
            due = parse_date_input(deadline)
        except ValueError as e:
            display.show_error(str(e))
            ctx.exit(1)

    document = open_document(ctx, path, multi)
    if multi and not document.is_multi_file:
        display.show_error("Could not find file to add to")
        ctx.exit(1)

    # Only the first line becomes the title; the rest are notes
    title, *notes = text.strip().splitlines()
    result = document.capture(title, config.workflow())
    if not result:
        display.show_error(result.message)
        ctx.exit(1)

    item = result.item
    if notes:
        item.set_notes(notes)
    if due:
        item.set_deadline(due)
    if priority:
        item.set_priority(priority)
    if tags:
        item.set_tags(tags)

    write_document(ctx, document)
    logger.info("item_captured", title=item.title, source_file=item.source_file)
    display.show_status(result.message)


@cli.command()
@path_argument
@multi_option
@click.option("--days", type=click.IntRange(min=1), help="Days to cover (default: from config)")
@click.pass_context
def agenda(ctx: click.Context, path: Optional[Path], multi: bool, days: Optional[int]):
    """List scheduled items and deadlines for the coming days.

    Overdue dates are included.
    """
    config: Config = ctx.obj["config"]
    document = open_document(ctx, path, multi)

    entries = document.agenda_entries(days=days or config.ui.agenda_days)
    if not entries:
        click.echo("Nothing scheduled.")
        return
    for entry in sorted(entries, key=lambda e: e.when):
        click.echo(display.format_agenda_entry(entry, config))


@cli.command()
@click.argument("title")
@path_argument
@multi_option
@click.option("--back", is_flag=True, help="Cycle to the previous state")
@click.pass_context
def cycle(ctx: click.Context, title: str, path: Optional[Path], multi: bool, back: bool):
    """Cycle the workflow state of the first item matching TITLE."""
    config: Config = ctx.obj["config"]
    document = open_document(ctx, path, multi)
    item = select_item(ctx, document, title)

    before = item.state
    result = document.cycle_state(item, config.workflow(), backward=back)
    if result:
        write_document(ctx, document)
        logger.info("state_cycled", title=item.title, before=before, after=item.state)
    display.show_status(f"{result.message}: {before or '-'} -> {item.state or '-'}")


@cli.command("clock-in")
@click.argument("title")
@path_argument
@multi_option
@click.pass_context
def clock_in(ctx: click.Context, title: str, path: Optional[Path], multi: bool):
    """Start the clock on the first item matching TITLE."""
    document = open_document(ctx, path, multi)
    item = select_item(ctx, document, title)

    result = document.clock_in(item)
    if result:
        write_document(ctx, document)
        logger.info("clocked_in", title=item.title)
    display.show_status(result.message)


@cli.command("clock-out")
@click.argument("title")
@path_argument
@multi_option
@click.pass_context
def clock_out(ctx: click.Context, title: str, path: Optional[Path], multi: bool):
    """Stop the running clock on the first item matching TITLE."""
    document = open_document(ctx, path, multi)
    item = select_item(ctx, document, title)

    result = document.clock_out(item)
    if result:
        write_document(ctx, document)
        logger.info("clocked_out", title=item.title)
    display.show_status(result.message)


if __name__ == "__main__":
    cli()
