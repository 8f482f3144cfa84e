"""Line patterns for org outline files.

Every function here looks at one line in isolation. Which patterns apply
depends on parser state (drawers and code blocks suppress headings), so the
parser decides the order; :func:`classify_line` is the context-free view used
for tooling and tests.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

HEADING_MARKER = "*"

DEFAULT_STATE_NAMES = ("TODO", "PROG", "BLOCK", "DONE")

SCHEDULED_RE = re.compile(r"SCHEDULED:\s*<([^>]+)>")
DEADLINE_RE = re.compile(r"DEADLINE:\s*<([^>]+)>")
CLOSED_RE = re.compile(r"CLOSED:\s*\[([^\]]+)\]")
CLOCK_RE = re.compile(r"CLOCK:\s*\[([^\]]+)\](?:--\[([^\]]+)\])?")
EFFORT_RE = re.compile(r"^\s*:EFFORT:\s*(.+)$")

LOGBOOK_START_RE = re.compile(r"^\s*:LOGBOOK:\s*$")
PROPERTIES_START_RE = re.compile(r"^\s*:PROPERTIES:\s*$")
DRAWER_END_RE = re.compile(r"^\s*:END:\s*$")

ORG_BLOCK_START_RE = re.compile(r"^\s*#\+BEGIN_SRC\b", re.IGNORECASE)
ORG_BLOCK_END_RE = re.compile(r"^\s*#\+END_SRC\b", re.IGNORECASE)
FENCE_RE = re.compile(r"^\s*```")

CLOSED_MARKER = "CLOSED:"


class LineKind(str, Enum):
    """Category of a single outline line."""

    LOGBOOK_START = "logbook_start"
    PROPERTIES_START = "properties_start"
    DRAWER_END = "drawer_end"
    CODE_START = "code_start"
    CODE_END = "code_end"
    FENCE = "fence"
    HEADING = "heading"
    SCHEDULED = "scheduled"
    DEADLINE = "deadline"
    CLOSED = "closed"
    CLOCK = "clock"
    EFFORT = "effort"
    CONTENT = "content"


class CodeFence(str, Enum):
    """Delimiter style of an open code block."""

    ORG = "org"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class Heading:
    """Fields extracted from a heading line."""

    level: int
    state: Optional[str]
    priority: Optional[str]
    title: str
    tags: list[str]


def build_heading_pattern(state_names: Sequence[str] = ()) -> re.Pattern:
    """Build the heading regex for the configured workflow states.

    State names are escaped, so any label can be configured. With no states
    the default ``TODO|PROG|BLOCK|DONE`` set is used.

    Groups: 1 = markers, 2 = state, 3 = priority, 4 = title, 5 = tag cluster.
    """
    names = list(state_names) or list(DEFAULT_STATE_NAMES)
    # Longest first so that e.g. "DONE" never shadows "DONE_LATER"
    names.sort(key=len, reverse=True)
    states = "|".join(re.escape(name) for name in names)
    marker = re.escape(HEADING_MARKER)
    return re.compile(
        rf"^({marker}+)\s+(?:({states})\s+)?(?:\[#([A-C])\]\s+)?(.+?)"
        r"(?:\s+(:[A-Za-z0-9_@#%:]+:)\s*)?$"
    )


def split_tags(cluster: Optional[str]) -> list[str]:
    """Split a ``:tag1:tag2:`` cluster into its tags, dropping empties."""
    if not cluster:
        return []
    return [tag for tag in cluster.strip(":").split(":") if tag]


def match_heading(pattern: re.Pattern, line: str) -> Optional[Heading]:
    """Match a heading line and extract its fields.

    Args:
        pattern: Pattern from :func:`build_heading_pattern`
        line: Line to match

    Returns:
        Heading fields, or None if the line is not a heading
    """
    match = pattern.match(line)
    if match is None:
        return None
    markers, state, priority, title, cluster = match.groups()
    return Heading(
        level=len(markers),
        state=state or None,
        priority=priority or None,
        title=title.strip(),
        tags=split_tags(cluster),
    )


def opens_code_block(line: str) -> Optional[CodeFence]:
    """Return the fence style if the line opens a code block."""
    if ORG_BLOCK_START_RE.match(line):
        return CodeFence.ORG
    if FENCE_RE.match(line):
        return CodeFence.MARKDOWN
    return None


def closes_code_block(line: str, fence: CodeFence) -> bool:
    """Check whether the line closes a code block opened with ``fence``."""
    if fence is CodeFence.ORG:
        return bool(ORG_BLOCK_END_RE.match(line))
    return bool(FENCE_RE.match(line))


def code_line_flags(lines: Sequence[str]) -> list[bool]:
    """Flag each line that belongs to a code block, delimiters included.

    Fences are tracked the way the parser tracks them: a block only closes
    on its own delimiter and runs to the end when left open.
    """
    flags = []
    fence = None
    for line in lines:
        if fence is not None:
            flags.append(True)
            if closes_code_block(line, fence):
                fence = None
            continue
        fence = opens_code_block(line)
        flags.append(fence is not None)
    return flags


def lines_outside_code(lines: Sequence[str]) -> list[str]:
    """The lines that are not part of any code block."""
    return [line for line, in_code in zip(lines, code_line_flags(lines)) if not in_code]


def classify_line(line: str, heading_pattern: Optional[re.Pattern] = None) -> LineKind:
    """Classify a line without parser context.

    Categories are tried in priority order: drawer boundaries, code-block
    boundaries, heading, then the planning/clock/effort markers. A line
    matching none of them is plain content.

    Args:
        line: Line to classify
        heading_pattern: Heading regex (defaults to the default state set)

    Returns:
        Line category
    """
    if LOGBOOK_START_RE.match(line):
        return LineKind.LOGBOOK_START
    if PROPERTIES_START_RE.match(line):
        return LineKind.PROPERTIES_START
    if DRAWER_END_RE.match(line):
        return LineKind.DRAWER_END
    if ORG_BLOCK_START_RE.match(line):
        return LineKind.CODE_START
    if ORG_BLOCK_END_RE.match(line):
        return LineKind.CODE_END
    if FENCE_RE.match(line):
        return LineKind.FENCE

    pattern = heading_pattern or build_heading_pattern()
    if pattern.match(line):
        return LineKind.HEADING
    if SCHEDULED_RE.search(line):
        return LineKind.SCHEDULED
    if DEADLINE_RE.search(line):
        return LineKind.DEADLINE
    if CLOSED_RE.search(line):
        return LineKind.CLOSED
    if CLOCK_RE.search(line):
        return LineKind.CLOCK
    if EFFORT_RE.match(line):
        return LineKind.EFFORT
    return LineKind.CONTENT
