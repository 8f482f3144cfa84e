"""Render outline items back to org text.

Structured lines (CLOSED, SCHEDULED, DEADLINE, the PROPERTIES and LOGBOOK
drawers) are only synthesised when the item's notes do not already hold a
literal copy; notes are always written verbatim.
"""

from typing import Iterable

from org_outline import patterns
from org_outline.model import OrgItem
from org_outline.timestamps import format_clock_timestamp, format_org_date


def render_heading(item: OrgItem, level_offset: int = 0) -> str:
    """Build the heading line for an item.

    Args:
        item: Item to render
        level_offset: Added to the item's level (multi-document saves use -1)

    Returns:
        Heading line without trailing newline
    """
    parts = [patterns.HEADING_MARKER * max(item.level + level_offset, 1)]
    if item.state:
        parts.append(item.state)
    if item.priority:
        parts.append(f"[#{item.priority}]")
    parts.append(item.title)
    if item.tags:
        parts.append(":" + ":".join(item.tags) + ":")
    return " ".join(parts)


def _has_line(notes: list[str], regex) -> bool:
    return any(regex.search(note) for note in notes)


def render_item_lines(item: OrgItem, level_offset: int = 0) -> list[str]:
    """Render one item and its subtree as a list of lines."""
    lines = [render_heading(item, level_offset)]
    # Lines inside code blocks never count as literal copies
    fields = patterns.lines_outside_code(item.notes)

    if item.closed and not _has_line(fields, patterns.CLOSED_RE):
        lines.append(f"CLOSED: [{format_clock_timestamp(item.closed)}]")
    if item.scheduled and not _has_line(fields, patterns.SCHEDULED_RE):
        lines.append(f"SCHEDULED: <{format_org_date(item.scheduled)}>")
    if item.deadline and not _has_line(fields, patterns.DEADLINE_RE):
        lines.append(f"DEADLINE: <{format_org_date(item.deadline)}>")

    if item.effort and not _has_line(fields, patterns.PROPERTIES_START_RE):
        lines.extend([":PROPERTIES:", f":EFFORT: {item.effort}", ":END:"])

    if item.clock_entries and not _has_line(fields, patterns.LOGBOOK_START_RE):
        lines.append(":LOGBOOK:")
        lines.extend(entry.to_line() for entry in item.clock_entries)
        lines.append(":END:")

    lines.extend(item.notes)

    for child in item.children:
        lines.extend(render_item_lines(child, level_offset))

    return lines


def render_items(items: Iterable[OrgItem], level_offset: int = 0) -> str:
    """Render items to org text.

    Args:
        items: Top-level items to render, in order
        level_offset: Level adjustment applied to every rendered heading

    Returns:
        Org text, newline-terminated unless empty
    """
    lines: list[str] = []
    for item in items:
        lines.extend(render_item_lines(item, level_offset))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
