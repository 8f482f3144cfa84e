"""Terminal display for outline items and status messages."""

from datetime import datetime
from typing import Optional

import click
from org_outline import AgendaEntry, OrgItem, format_duration, format_org_date

from orgdo.models.config import Config


def _colored(text: str, color: str) -> str:
    """Style text with a 256-colour code; non-numeric codes leave it plain."""
    if color.isdigit() and 0 <= int(color) <= 255:
        return click.style(text, fg=int(color))
    return text


def format_item(
    item: OrgItem,
    config: Config,
    now: Optional[datetime] = None,
    indent: Optional[int] = None,
) -> str:
    """Build the one-line display for an item.

    Args:
        item: Item to display
        config: Configuration supplying state and tag colours
        now: Reference time for running clocks and overdue dates
        indent: Indentation depth (defaults to ``item.level - 1``)

    Returns:
        Display line, possibly containing terminal styling
    """
    now = now or datetime.now()
    depth = item.level - 1 if indent is None else indent
    parts = []

    if item.state:
        parts.append(_colored(item.state, config.state_color(item.state)))
    if item.priority:
        parts.append(f"[#{item.priority}]")
    parts.append(click.style(item.title, bold=True) if item.level == 1 else item.title)
    if item.folded and item.children:
        parts.append("...")
    if item.tags and config.tags.enabled:
        tags = ":".join(_colored(tag, config.tag_color(tag)) for tag in item.tags)
        parts.append(f":{tags}:")

    details = []
    if item.scheduled:
        details.append(f"scheduled {format_org_date(item.scheduled)}")
    if item.deadline:
        text = f"deadline {format_org_date(item.deadline)}"
        if item.deadline < now and not config.workflow().is_terminal(item.state):
            text = click.style(f"{text} (overdue)", fg="red")
        details.append(text)
    if item.effort:
        details.append(f"effort {item.effort}")
    if item.is_clocked_in:
        details.append(f"clocked in {format_duration(item.current_clock_duration(now))}")
    elif item.clock_entries:
        details.append(f"clocked {format_duration(item.total_clock_duration(now))}")

    line = "  " * max(depth, 0) + " ".join(parts)
    if details:
        line += "  [" + ", ".join(details) + "]"
    return line


def format_agenda_entry(entry: AgendaEntry, config: Config, now: Optional[datetime] = None) -> str:
    """Agenda line: date, kind, then the item display without indentation."""
    now = now or datetime.now()
    day = format_org_date(entry.when)
    kind = "Scheduled" if entry.kind == "scheduled" else "Deadline"
    if entry.when.date() < now.date():
        kind = click.style(f"{kind} (overdue)", fg="red")
    return f"{day}  {kind}: {format_item(entry.item, config, now, indent=0)}"


def show_status(message: str) -> None:
    """Show the status message of an edit.

    Args:
        message: Status message to display
    """
    click.echo(message)


def show_error(message: str) -> None:
    """Show error message.

    Args:
        message: Error message to display
    """
    click.echo(f"Error: {message}", err=True)
