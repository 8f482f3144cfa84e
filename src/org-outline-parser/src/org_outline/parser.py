"""Org outline parser.

Turns org text into a tree of :class:`~org_outline.model.OrgItem`. The parser
is a pure function of the lines and the workflow-state configuration; file
access lives with the caller.

Every body line is kept verbatim in the owning item's ``notes``, including
the planning lines, drawers and code blocks whose content is also decoded
into structured fields. The writer relies on this to avoid emitting those
lines twice.
"""

from enum import Enum
from typing import Iterable, Optional

from org_outline import patterns
from org_outline.model import OrgItem, WorkflowStates


class _Drawer(Enum):
    NONE = 0
    LOGBOOK = 1
    PROPERTIES = 2


def parse_lines(lines: Iterable[str], states: Optional[WorkflowStates] = None) -> list[OrgItem]:
    """Parse org lines into top-level items.

    A heading's parent is the nearest preceding heading with a smaller level:
    a level-3 heading right after a level-1 heading becomes its child even
    though no level-2 heading exists in between. A heading with no such
    ancestor becomes a top-level item.

    Lines before the first heading are dropped. Unparseable planning dates
    and clock stamps leave the field unset but keep the line in notes.

    Args:
        lines: Lines without trailing newlines
        states: Workflow states recognised in headings (defaults apply if None)

    Returns:
        Top-level items in document order
    """
    states = states or WorkflowStates()
    heading_pattern = patterns.build_heading_pattern(states.names)

    roots: list[OrgItem] = []
    stack: list[OrgItem] = []  # Open items, innermost last
    current: Optional[OrgItem] = None
    drawer = _Drawer.NONE
    fence: Optional[patterns.CodeFence] = None

    def keep(line: str) -> None:
        if current is not None:
            current.notes.append(line)

    for line in lines:
        # Code blocks swallow everything up to their own end delimiter
        if fence is not None:
            if patterns.closes_code_block(line, fence):
                fence = None
            keep(line)
            continue

        if patterns.LOGBOOK_START_RE.match(line):
            drawer = _Drawer.LOGBOOK
            keep(line)
            continue
        if patterns.PROPERTIES_START_RE.match(line):
            drawer = _Drawer.PROPERTIES
            keep(line)
            continue
        if drawer is not _Drawer.NONE and patterns.DRAWER_END_RE.match(line):
            drawer = _Drawer.NONE
            keep(line)
            continue

        opened = patterns.opens_code_block(line)
        if opened is not None:
            fence = opened
            keep(line)
            continue

        heading = None
        if drawer is _Drawer.NONE:
            heading = patterns.match_heading(heading_pattern, line)

        if heading is not None:
            item = OrgItem(
                level=heading.level,
                title=heading.title,
                state=heading.state,
                priority=heading.priority,
                tags=heading.tags,
            )

            while stack and stack[-1].level >= item.level:
                stack.pop()

            if stack:
                stack[-1].children.append(item)
            else:
                roots.append(item)

            stack.append(item)
            current = item
            continue

        if current is None:
            continue

        current.apply_content_line(line)

        # Blank lines right below a heading are not kept
        if line.strip() or current.notes:
            current.notes.append(line)

    return roots


def parse_text(text: str, states: Optional[WorkflowStates] = None) -> list[OrgItem]:
    """Parse org text into top-level items (see :func:`parse_lines`)."""
    return parse_lines(text.splitlines(), states)
