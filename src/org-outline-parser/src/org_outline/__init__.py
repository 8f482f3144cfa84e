"""Org outline parser - Parse, edit and write org-mode task outlines.

This package parses org-mode outline text into a tree of items, offers the
structural edits a task manager needs, and renders the tree back to org text.

Key features:
- Parse headings with workflow state, priority and tags
- Decode SCHEDULED/DEADLINE/CLOSED planning lines, EFFORT and LOGBOOK clocks
- Keep every body line verbatim so unknown content survives a save
- Tree edits (move, promote, demote, capture, delete) that keep levels valid
- Multi-document mode aggregating several files under per-file wrappers

Example:
    >>> from org_outline import OrgDocument
    >>> doc = OrgDocument.parse("* TODO Buy milk :home:")
    >>> doc.items[0].state, doc.items[0].title, doc.items[0].tags
    ('TODO', 'Buy milk', ['home'])
    >>> text = doc.render()
"""

from org_outline.model import ClockEntry, OrgItem, WorkflowStates, PRIORITIES
from org_outline.document import AgendaEntry, EditResult, ItemNotFoundError, OrgDocument
from org_outline.parser import parse_lines, parse_text
from org_outline.writer import render_heading, render_items
from org_outline.timestamps import (
    format_clock_timestamp,
    format_duration,
    format_org_date,
    parse_date_input,
)

__version__ = "0.1.0"

__all__ = [
    "ClockEntry",
    "OrgItem",
    "WorkflowStates",
    "PRIORITIES",
    "AgendaEntry",
    "EditResult",
    "ItemNotFoundError",
    "OrgDocument",
    "parse_lines",
    "parse_text",
    "render_heading",
    "render_items",
    "format_clock_timestamp",
    "format_duration",
    "format_org_date",
    "parse_date_input",
]
