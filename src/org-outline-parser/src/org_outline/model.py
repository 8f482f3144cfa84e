"""Outline items, clock entries and workflow states.

An :class:`OrgItem` carries both structured fields (``scheduled``,
``clock_entries``, ...) and the raw ``notes`` lines it was parsed from.
Whenever a structured field changes through one of the methods below, any
literal copy of it in ``notes`` is rewritten or removed, so the writer never
emits a stale line next to a fresh one.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterator, Optional, Sequence, Union

from org_outline import patterns
from org_outline.timestamps import (
    format_clock_timestamp,
    format_org_date,
    parse_clock_timestamp,
    parse_org_date,
)

PRIORITIES = ("A", "B", "C")


@dataclass
class ClockEntry:
    """One clocked interval. ``end`` is None while the clock is running."""

    start: datetime
    end: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self.end is None

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        end = self.end if self.end is not None else (now or datetime.now())
        return end - self.start

    def to_line(self) -> str:
        """Render as an org ``CLOCK:`` line."""
        line = f"CLOCK: [{format_clock_timestamp(self.start)}]"
        if self.end is not None:
            line += f"--[{format_clock_timestamp(self.end)}]"
        return line


@dataclass(frozen=True)
class WorkflowStates:
    """Ordered workflow state names plus the default for new items.

    The last name is the terminal ("done") state.

    Attributes:
        names: State names in cycling order
        default_new_state: Requested state for captured items (None = no state)
    """

    names: tuple[str, ...] = patterns.DEFAULT_STATE_NAMES
    default_new_state: Optional[str] = "TODO"

    def __post_init__(self):
        object.__setattr__(self, "names", tuple(self.names))

    @property
    def terminal(self) -> Optional[str]:
        return self.names[-1] if self.names else None

    def is_terminal(self, state: Optional[str]) -> bool:
        return state is not None and state == self.terminal

    def new_item_state(self) -> Optional[str]:
        """Resolve the state given to newly created items.

        An unset default means no state. A default that is not a configured
        name falls back to the first configured state.
        """
        if not self.default_new_state:
            return None
        if self.default_new_state in self.names:
            return self.default_new_state
        return self.names[0] if self.names else None

    def next_state(self, current: Optional[str]) -> Optional[str]:
        """State after ``current``, wrapping through None after the last."""
        if not self.names:
            return current
        if current in self.names:
            index = self.names.index(current)
            if index == len(self.names) - 1:
                return None
            return self.names[index + 1]
        return self.names[0]

    def previous_state(self, current: Optional[str]) -> Optional[str]:
        """State before ``current``, wrapping through None before the first."""
        if not self.names:
            return current
        if current is None:
            return self.names[-1]
        if current in self.names:
            index = self.names.index(current)
            return self.names[index - 1] if index > 0 else None
        return None


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class OrgItem:
    """One heading of an org outline, with its notes and children.

    Items compare by identity: two headings with the same text are still two
    different nodes of the tree.

    Attributes:
        level: Heading depth (number of ``*`` markers, 1 = top level)
        title: Heading text without state, priority and tags
        state: Workflow state name, or None
        priority: "A", "B", "C" or None
        tags: Heading tags in display order
        scheduled: SCHEDULED date
        deadline: DEADLINE date
        closed: CLOSED stamp, set when the item reaches the terminal state
        effort: Free-text effort estimate ("" when unset)
        notes: Raw body lines, including literal planning lines and drawers
        children: Sub-items in display order
        folded: Display flag; hides notes and children in visible views
        clock_entries: Clocked intervals in file order
        source_file: Originating file in multi-document mode
        item_id: Stable identifier used by the document index
    """

    level: int
    title: str
    state: Optional[str] = None
    priority: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    scheduled: Optional[datetime] = None
    deadline: Optional[datetime] = None
    closed: Optional[datetime] = None
    effort: str = ""
    notes: list[str] = field(default_factory=list)
    children: list["OrgItem"] = field(default_factory=list)
    folded: bool = False
    clock_entries: list[ClockEntry] = field(default_factory=list)
    source_file: Optional[str] = None
    item_id: str = field(default_factory=_new_id)

    def __repr__(self) -> str:
        return f"OrgItem(level={self.level}, state={self.state!r}, title={self.title!r})"

    # Tree helpers

    def walk(self) -> Iterator["OrgItem"]:
        """Yield this item and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def shift_level(self, delta: int) -> None:
        """Add ``delta`` to the level of this item and every descendant."""
        for item in self.walk():
            item.level += delta

    def set_source_file(self, path: Optional[str]) -> None:
        """Stamp ``path`` on this item and every descendant."""
        for item in self.walk():
            item.source_file = path

    def add_child(
        self, title: str, state: Optional[str] = None, position: Optional[int] = None
    ) -> "OrgItem":
        """Create a child one level deeper, inheriting ``source_file``.

        Args:
            title: Child heading text
            state: Workflow state for the child
            position: Optional index to insert at (None = append to end)

        Returns:
            The created child
        """
        child = OrgItem(
            level=self.level + 1,
            title=title,
            state=state,
            source_file=self.source_file,
        )
        if position is None:
            self.children.append(child)
        else:
            self.children.insert(position, child)
        return child

    def toggle_fold(self) -> bool:
        """Flip the folded flag and return the new value."""
        self.folded = not self.folded
        return self.folded

    # Parsing support

    def apply_content_line(self, line: str) -> None:
        """Update structured fields from one body line.

        Unparseable dates and clock stamps leave the field untouched.
        """
        if match := patterns.SCHEDULED_RE.search(line):
            try:
                self.scheduled = parse_org_date(match.group(1))
            except ValueError:
                pass
        if match := patterns.DEADLINE_RE.search(line):
            try:
                self.deadline = parse_org_date(match.group(1))
            except ValueError:
                pass
        if match := patterns.CLOSED_RE.search(line):
            try:
                self.closed = parse_clock_timestamp(match.group(1))
            except ValueError:
                pass
        if match := patterns.EFFORT_RE.match(line):
            self.effort = match.group(1).strip()
        if entry := _clock_entry_from_line(line):
            self.clock_entries.append(entry)

    # Workflow state

    def cycle_state(
        self,
        states: WorkflowStates,
        backward: bool = False,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        """Move to the next (or previous) workflow state.

        Entering the terminal state stamps ``closed`` and stops a running
        clock; leaving it clears ``closed``. In both cases literal ``CLOSED:``
        lines are removed from notes so the writer regenerates them.

        Args:
            states: Configured workflow states
            backward: Cycle towards the first state instead
            now: Current time (defaults to ``datetime.now()``)

        Returns:
            The new state
        """
        if not states.names:
            return self.state

        was_terminal = states.is_terminal(self.state)
        if backward:
            self.state = states.previous_state(self.state)
        else:
            self.state = states.next_state(self.state)
        is_terminal = states.is_terminal(self.state)

        if is_terminal and not was_terminal:
            now = now or datetime.now()
            self.closed = now
            self._strip_closed_lines()
            if self.is_clocked_in:
                self.clock_out(now)
        elif was_terminal and not is_terminal:
            self.closed = None
            self._strip_closed_lines()

        return self.state

    def _strip_closed_lines(self) -> None:
        notes = _rewrite_fragment(self.notes, patterns.CLOSED_RE, None)
        self.notes = [
            note
            for note, in_code in zip(notes, patterns.code_line_flags(notes))
            if in_code or not note.strip().startswith(patterns.CLOSED_MARKER)
        ]

    # Clocking

    @property
    def is_clocked_in(self) -> bool:
        return any(entry.is_running for entry in self.clock_entries)

    def clock_in(self, now: Optional[datetime] = None) -> bool:
        """Start a new clock entry.

        Returns:
            False if a clock is already running (nothing changes)
        """
        if self.is_clocked_in:
            return False
        self.clock_entries.append(ClockEntry(start=now or datetime.now()))
        self._sync_logbook()
        return True

    def clock_out(self, now: Optional[datetime] = None) -> bool:
        """Stop the most recently started running clock.

        Returns:
            False if no clock is running
        """
        for entry in reversed(self.clock_entries):
            if entry.is_running:
                entry.end = now or datetime.now()
                self._sync_logbook()
                return True
        return False

    def current_clock_duration(self, now: Optional[datetime] = None) -> timedelta:
        """Elapsed time of the running clock, or zero."""
        for entry in self.clock_entries:
            if entry.is_running:
                return entry.duration(now)
        return timedelta(0)

    def total_clock_duration(self, now: Optional[datetime] = None) -> timedelta:
        """Sum of all clocked intervals, counting a running one up to ``now``."""
        now = now or datetime.now()
        return sum((entry.duration(now) for entry in self.clock_entries), timedelta(0))

    def _sync_logbook(self) -> None:
        """Regenerate literal CLOCK lines in notes from ``clock_entries``.

        Inside an existing LOGBOOK drawer the clock lines are replaced in
        place and other drawer lines stay. Parsed clock lines outside a drawer
        are dropped; the writer then emits a fresh drawer. Code blocks are
        left alone.
        """
        notes = self.notes
        in_code = patterns.code_line_flags(notes)
        clock = [not code and _is_parsed_clock_line(n) for n, code in zip(notes, in_code)]

        def without_clocks(indices: range) -> list[str]:
            return [notes[i] for i in indices if not clock[i]]

        start = next(
            (
                i
                for i, note in enumerate(notes)
                if not in_code[i] and patterns.LOGBOOK_START_RE.match(note)
            ),
            None,
        )
        if start is None:
            self.notes = without_clocks(range(len(notes)))
            return

        end = next(
            (
                i
                for i in range(start + 1, len(notes))
                if not in_code[i] and patterns.DRAWER_END_RE.match(notes[i])
            ),
            len(notes),
        )
        first_clock = next((i for i in range(start + 1, end) if clock[i]), None)
        indent = _indent_of(notes[first_clock]) if first_clock is not None else ""
        insert_at = first_clock if first_clock is not None else start + 1
        clock_lines = [indent + entry.to_line() for entry in self.clock_entries]

        self.notes = (
            without_clocks(range(insert_at))
            + clock_lines
            + without_clocks(range(insert_at, len(notes)))
        )

    # Planning and properties

    def set_scheduled(self, value: Optional[datetime]) -> None:
        """Set or clear the SCHEDULED date, updating any literal line."""
        self.scheduled = value
        replacement = f"SCHEDULED: <{format_org_date(value)}>" if value else None
        self.notes = _rewrite_fragment(self.notes, patterns.SCHEDULED_RE, replacement)

    def set_deadline(self, value: Optional[datetime]) -> None:
        """Set or clear the DEADLINE date, updating any literal line."""
        self.deadline = value
        replacement = f"DEADLINE: <{format_org_date(value)}>" if value else None
        self.notes = _rewrite_fragment(self.notes, patterns.DEADLINE_RE, replacement)

    def set_effort(self, value: str) -> None:
        """Set or clear (empty string) the effort estimate.

        An existing ``:EFFORT:`` line is rewritten or removed. When notes hold
        a PROPERTIES drawer without an effort line, the line is added to it.
        """
        value = value.strip()
        self.effort = value
        notes = []
        found = False
        for note, in_code in zip(self.notes, patterns.code_line_flags(self.notes)):
            if not in_code and patterns.EFFORT_RE.match(note):
                found = True
                if value:
                    notes.append(f"{_indent_of(note)}:EFFORT: {value}")
                continue
            notes.append(note)

        if value and not found:
            for i, (note, in_code) in enumerate(zip(notes, patterns.code_line_flags(notes))):
                if not in_code and patterns.PROPERTIES_START_RE.match(note):
                    notes.insert(i + 1, f"{_indent_of(note)}:EFFORT: {value}")
                    break

        self.notes = _drop_empty_properties(notes)

    def set_priority(self, priority: Optional[str]) -> None:
        """Set the priority ("A", "B", "C") or clear it with None."""
        if priority is not None:
            priority = priority.upper()
            if priority not in PRIORITIES:
                raise ValueError(f"Invalid priority: {priority}")
        self.priority = priority

    def set_tags(self, tags: Union[str, Sequence[str]]) -> None:
        """Replace tags from a ``work:urgent`` string or a sequence.

        Blank entries and duplicates are dropped, first occurrence wins.
        """
        if isinstance(tags, str):
            tags = tags.split(":")
        cleaned: list[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in cleaned:
                cleaned.append(tag)
        self.tags = cleaned

    def rename(self, title: str) -> bool:
        """Change the title. Empty titles are refused (returns False)."""
        title = title.strip()
        if not title:
            return False
        self.title = title
        return True

    def set_notes(self, lines: Sequence[str]) -> None:
        """Replace the notes and re-derive structured fields from them.

        A field whose marker appears in the new notes is read from them. A
        field whose marker was in the old notes but is gone is cleared.
        Fields never written into notes are kept.
        """
        new = list(lines)
        old = patterns.lines_outside_code(self.notes)
        fields = patterns.lines_outside_code(new)
        derived = OrgItem(level=self.level, title=self.title)
        for line in fields:
            derived.apply_content_line(line)

        for name, regex in (
            ("scheduled", patterns.SCHEDULED_RE),
            ("deadline", patterns.DEADLINE_RE),
            ("closed", patterns.CLOSED_RE),
        ):
            if _any_search(regex, fields):
                setattr(self, name, getattr(derived, name))
            elif _any_search(regex, old):
                setattr(self, name, None)

        if _any_match(patterns.EFFORT_RE, fields):
            self.effort = derived.effort
        elif _any_match(patterns.EFFORT_RE, old):
            self.effort = ""

        if _any_search(patterns.CLOCK_RE, fields):
            self.clock_entries = derived.clock_entries
        elif _any_search(patterns.CLOCK_RE, old):
            self.clock_entries = []

        self.notes = new


def _clock_entry_from_line(line: str) -> Optional[ClockEntry]:
    match = patterns.CLOCK_RE.search(line)
    if match is None:
        return None
    try:
        entry = ClockEntry(start=parse_clock_timestamp(match.group(1)))
    except ValueError:
        return None
    if match.group(2):
        try:
            entry.end = parse_clock_timestamp(match.group(2))
        except ValueError:
            pass
    return entry


def _is_parsed_clock_line(line: str) -> bool:
    return _clock_entry_from_line(line) is not None


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _rewrite_fragment(
    notes: list[str], regex: re.Pattern, replacement: Optional[str]
) -> list[str]:
    """Replace (or remove, when ``replacement`` is None) a planning fragment.

    Lines left empty after a removal are dropped; indentation is kept. Code
    blocks are copied unchanged.
    """
    result = []
    for note, in_code in zip(notes, patterns.code_line_flags(notes)):
        if in_code or not regex.search(note):
            result.append(note)
            continue
        if replacement is not None:
            result.append(regex.sub(lambda _m: replacement, note, count=1))
            continue
        remainder = regex.sub("", note).strip()
        if remainder:
            result.append(_indent_of(note) + " ".join(remainder.split()))
    return result


def _drop_empty_properties(notes: list[str]) -> list[str]:
    result: list[tuple[str, bool]] = []
    for note, in_code in zip(notes, patterns.code_line_flags(notes)):
        if (
            not in_code
            and patterns.DRAWER_END_RE.match(note)
            and result
            and not result[-1][1]
            and patterns.PROPERTIES_START_RE.match(result[-1][0])
        ):
            result.pop()
            continue
        result.append((note, in_code))
    return [note for note, _in_code in result]


def _any_search(regex: re.Pattern, lines: Sequence[str]) -> bool:
    return any(regex.search(line) for line in lines)


def _any_match(regex: re.Pattern, lines: Sequence[str]) -> bool:
    return any(regex.match(line) for line in lines)
