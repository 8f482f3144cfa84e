"""Org document: the outline tree and its structural operations.

:class:`OrgDocument` owns the top-level items and keeps an index from item id
to parent id, so parent and sibling lookups do not rescan the tree. Every
structural change made through the document updates the index. Code that
edits ``children`` lists by hand is tolerated: a lookup that finds the index
out of date rebuilds it once before giving up.

User-facing operations return an :class:`EditResult`. Boundary conditions
(promoting a top-level item, moving past the last sibling, ...) are reported
there with ``changed=False``; they are not errors.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple, Optional, Union

from org_outline.model import OrgItem, WorkflowStates
from org_outline.parser import parse_text
from org_outline.writer import render_items

PathLike = Union[str, Path]


class ItemNotFoundError(LookupError):
    """Raised when an operation names an item that is not in the document."""

    def __init__(self, item: OrgItem):
        self.item = item
        super().__init__(f"Item not in document: {item.title!r}")


class AgendaEntry(NamedTuple):
    """One planning date of an item shown in the agenda."""

    item: OrgItem
    kind: str  # "scheduled" or "deadline"
    when: datetime


@dataclass(frozen=True)
class EditResult:
    """Outcome of a user-level edit.

    Attributes:
        changed: Whether the document was modified
        message: Status text for the user
        item: Item created or affected by the edit, if any
    """

    changed: bool
    message: str
    item: Optional[OrgItem] = None

    def __bool__(self) -> bool:
        return self.changed


@dataclass
class OrgDocument:
    """Parsed org outline.

    Attributes:
        path: Backing file, or directory in multi-document mode
        items: Top-level items
    """

    path: Optional[str] = None
    items: list[OrgItem] = field(default_factory=list)
    _parents: dict[str, Optional[str]] = field(default_factory=dict, init=False, repr=False)
    _nodes: dict[str, OrgItem] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self.reindex()

    @classmethod
    def parse(
        cls,
        text: str,
        path: Optional[PathLike] = None,
        states: Optional[WorkflowStates] = None,
    ) -> "OrgDocument":
        """Parse org text into a document.

        Args:
            text: Org text
            path: Backing file path, kept for saving
            states: Workflow states recognised in headings

        Returns:
            Parsed OrgDocument
        """
        return cls(path=str(path) if path is not None else None, items=parse_text(text, states))

    @classmethod
    def from_files(
        cls, directory: PathLike, documents: Iterable[tuple[PathLike, "OrgDocument"]]
    ) -> "OrgDocument":
        """Aggregate parsed files into one multi-document outline.

        Each file becomes a level-1 wrapper titled with the file name. The
        file's own top-level items become the wrapper's children, shifted one
        level down, and every node is stamped with the file path.

        Args:
            directory: Directory the files came from
            documents: ``(file path, parsed document)`` pairs, in display order

        Returns:
            Multi-document OrgDocument
        """
        wrappers = []
        for file_path, document in documents:
            file_path = str(file_path)
            wrapper = OrgItem(level=1, title=Path(file_path).name, source_file=file_path)
            for item in document.items:
                item.shift_level(1)
                item.set_source_file(file_path)
                wrapper.children.append(item)
            wrappers.append(wrapper)
        return cls(path=str(directory), items=wrappers)

    # Index

    def reindex(self) -> None:
        """Rebuild the id index from the current tree."""
        self._parents = {}
        self._nodes = {}

        def visit(items: list[OrgItem], parent: Optional[OrgItem]) -> None:
            for item in items:
                self._nodes[item.item_id] = item
                self._parents[item.item_id] = parent.item_id if parent else None
                visit(item.children, item)

        visit(self.items, None)

    def _register(self, item: OrgItem, parent: Optional[OrgItem]) -> None:
        self._parents[item.item_id] = parent.item_id if parent else None
        self._nodes[item.item_id] = item
        for child in item.children:
            self._register(child, item)

    def _unregister(self, item: OrgItem) -> None:
        for node in item.walk():
            self._parents.pop(node.item_id, None)
            self._nodes.pop(node.item_id, None)

    def _locate(self, item: OrgItem) -> tuple[Optional[OrgItem], list[OrgItem], int]:
        """Return ``(parent, sibling list, index)`` for an item in the tree."""
        for attempt in range(2):
            if self._nodes.get(item.item_id) is item:
                parent_id = self._parents[item.item_id]
                parent = self._nodes.get(parent_id) if parent_id else None
                siblings = parent.children if parent else self.items
                for index, sibling in enumerate(siblings):
                    if sibling is item:
                        return parent, siblings, index
            if attempt == 0:
                self.reindex()
        raise ItemNotFoundError(item)

    # Queries

    def walk(self) -> Iterator[OrgItem]:
        """Yield every item in document order, ignoring folding."""
        for item in self.items:
            yield from item.walk()

    def visible_items(self) -> list[OrgItem]:
        """Flatten the tree for display, skipping children of folded items."""
        visible: list[OrgItem] = []

        def flatten(items: list[OrgItem]) -> None:
            for item in items:
                visible.append(item)
                if not item.folded:
                    flatten(item.children)

        flatten(self.items)
        return visible

    def find(self, item_id: str) -> Optional[OrgItem]:
        """Look up an item by id."""
        item = self._nodes.get(item_id)
        if item is None:
            self.reindex()
            item = self._nodes.get(item_id)
        return item

    def find_by_title(self, text: str) -> Optional[OrgItem]:
        """First item (document order) whose title contains ``text``, case-insensitive.

        File wrappers are not matched.
        """
        needle = text.lower()
        return next(
            (
                item
                for item in self.walk()
                if needle in item.title.lower() and not self.is_file_item(item)
            ),
            None,
        )

    def __contains__(self, item: OrgItem) -> bool:
        try:
            self._locate(item)
        except ItemNotFoundError:
            return False
        return True

    def parent_of(self, item: OrgItem) -> Optional[OrgItem]:
        """Parent of ``item``, or None for a top-level item."""
        parent, _siblings, _index = self._locate(item)
        return parent

    def siblings_of(self, item: OrgItem) -> list[OrgItem]:
        """The list holding ``item`` (its parent's children or the top level)."""
        _parent, siblings, _index = self._locate(item)
        return siblings

    @property
    def is_multi_file(self) -> bool:
        """True when the top level consists of file wrappers."""
        return bool(self.items) and self.items[0].source_file is not None

    def is_file_item(self, item: OrgItem) -> bool:
        """True for a file wrapper of a multi-document outline."""
        return self.is_multi_file and any(wrapper is item for wrapper in self.items)

    def file_item_for(self, item: Optional[OrgItem]) -> Optional[OrgItem]:
        """Find the file wrapper owning ``item`` in multi-document mode.

        Falls back to the first wrapper when ``item`` is None or belongs to
        no wrapper. Returns None outside multi-document mode.
        """
        if not self.is_multi_file:
            return None
        if item is not None and item.source_file is not None:
            if item.level == 1 and item in self.items:
                return item
            for wrapper in self.items:
                if wrapper.source_file == item.source_file:
                    return wrapper
        return self.items[0]

    def agenda_entries(
        self, now: Optional[datetime] = None, days: int = 7
    ) -> list[AgendaEntry]:
        """Planning dates falling before the end of the agenda window.

        Folding is ignored. Overdue dates are included. An item with both a
        scheduled date and a deadline in the window yields two entries.

        Args:
            now: Current time (defaults to ``datetime.now()``)
            days: Window length counted from the start of today

        Returns:
            Entries in document order, scheduled before deadline per item
        """
        now = now or datetime.now()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        window_end = start_of_day + timedelta(days=days)

        entries = []
        for item in self.walk():
            if item.scheduled is not None and item.scheduled < window_end:
                entries.append(AgendaEntry(item, "scheduled", item.scheduled))
            if item.deadline is not None and item.deadline < window_end:
                entries.append(AgendaEntry(item, "deadline", item.deadline))
        return entries

    def agenda_items(self, now: Optional[datetime] = None, days: int = 7) -> list[OrgItem]:
        """Items of :meth:`agenda_entries`, one per entry."""
        return [entry.item for entry in self.agenda_entries(now, days)]

    def level_violations(self) -> list[tuple[OrgItem, OrgItem]]:
        """``(parent, child)`` pairs where the child is not exactly one level deeper."""
        return [
            (item, child)
            for item in self.walk()
            for child in item.children
            if child.level != item.level + 1
        ]

    # Structural edits

    def delete(self, item: OrgItem) -> EditResult:
        """Remove an item and its whole subtree."""
        _parent, siblings, index = self._locate(item)
        del siblings[index]
        self._unregister(item)
        return EditResult(True, "Item deleted", item)

    def move_up(self, item: OrgItem) -> EditResult:
        """Swap an item with its previous sibling."""
        _parent, siblings, index = self._locate(item)
        if index == 0:
            return EditResult(False, "Cannot move - already at top of list", item)
        siblings[index - 1], siblings[index] = siblings[index], siblings[index - 1]
        return EditResult(True, "Item moved up", item)

    def move_down(self, item: OrgItem) -> EditResult:
        """Swap an item with its next sibling."""
        _parent, siblings, index = self._locate(item)
        if index == len(siblings) - 1:
            return EditResult(False, "Cannot move - already at bottom of list", item)
        siblings[index + 1], siblings[index] = siblings[index], siblings[index + 1]
        return EditResult(True, "Item moved down", item)

    def promote(self, item: OrgItem) -> EditResult:
        """Make an item a sibling of its parent, placed right after it.

        The item and its descendants move up one level. In multi-document
        mode the top of a file is the highest an item can go.
        """
        parent, siblings, index = self._locate(item)
        if item.level <= 1 or parent is None:
            return EditResult(False, "Cannot promote - already at top level", item)
        if self.is_file_item(parent):
            return EditResult(False, "Cannot promote - already at top of file", item)

        grandparent, parent_siblings, parent_index = self._locate(parent)
        del siblings[index]
        item.shift_level(-1)
        parent_siblings.insert(parent_index + 1, item)
        self._parents[item.item_id] = grandparent.item_id if grandparent else None
        return EditResult(True, "Item promoted", item)

    def demote(self, item: OrgItem) -> EditResult:
        """Make an item the last child of its previous sibling.

        The subtree is shifted so the item sits one level below its new
        parent, and the new parent is unfolded.
        """
        _parent, siblings, index = self._locate(item)
        if self.is_file_item(item):
            return EditResult(False, "Cannot demote file-level items", item)
        if index == 0:
            return EditResult(False, "Cannot demote - no previous sibling", item)

        new_parent = siblings[index - 1]
        del siblings[index]
        item.shift_level(new_parent.level + 1 - item.level)
        new_parent.children.append(item)
        new_parent.folded = False
        self._parents[item.item_id] = new_parent.item_id
        return EditResult(True, "Item demoted", item)

    def capture(
        self,
        title: str,
        states: Optional[WorkflowStates] = None,
        selected: Optional[OrgItem] = None,
    ) -> EditResult:
        """Capture a new item at the top of the document.

        In multi-document mode the item goes first into the file wrapper
        owning ``selected`` (or the first wrapper) and inherits its file.

        Args:
            title: Heading text
            states: Workflow states providing the default state
            selected: Item under the cursor, used to choose the target file

        Returns:
            EditResult carrying the new item
        """
        title = title.strip()
        if not title:
            return EditResult(False, "Cannot capture an empty title")

        states = states or WorkflowStates()
        new_item = OrgItem(level=1, title=title, state=states.new_item_state())

        if self.is_multi_file:
            wrapper = self.file_item_for(selected)
            new_item.level = wrapper.level + 1
            new_item.source_file = wrapper.source_file
            wrapper.children.insert(0, new_item)
            wrapper.folded = False
            self._register(new_item, wrapper)
            return EditResult(True, f"TODO captured to {wrapper.title}", new_item)

        self.items.insert(0, new_item)
        self._register(new_item, None)
        return EditResult(True, "TODO captured!", new_item)

    def add_sub_item(
        self, parent: OrgItem, title: str, states: Optional[WorkflowStates] = None
    ) -> EditResult:
        """Append a new child to ``parent`` and unfold it."""
        self._locate(parent)
        title = title.strip()
        if not title:
            return EditResult(False, "Cannot add an empty sub-task", parent)

        states = states or WorkflowStates()
        child = parent.add_child(title, state=states.new_item_state())
        parent.folded = False
        self._register(child, parent)
        return EditResult(True, "Sub-task added!", child)

    # Item edits that need the document for reporting

    def cycle_state(
        self,
        item: OrgItem,
        states: WorkflowStates,
        backward: bool = False,
        now: Optional[datetime] = None,
    ) -> EditResult:
        """Cycle an item's workflow state (see :meth:`OrgItem.cycle_state`).

        File wrappers are never written, so they take no state.
        """
        self._locate(item)
        if self.is_file_item(item):
            return EditResult(False, "Cannot change state of file-level items", item)
        if not states.names:
            return EditResult(False, "No workflow states configured", item)
        item.cycle_state(states, backward=backward, now=now)
        return EditResult(True, "State changed", item)

    def clock_in(self, item: OrgItem, now: Optional[datetime] = None) -> EditResult:
        self._locate(item)
        if self.is_file_item(item):
            return EditResult(False, "Cannot clock file-level items", item)
        if not item.clock_in(now):
            return EditResult(False, "Already clocked in", item)
        return EditResult(True, "Clocked in", item)

    def clock_out(self, item: OrgItem, now: Optional[datetime] = None) -> EditResult:
        self._locate(item)
        if self.is_file_item(item):
            return EditResult(False, "Cannot clock file-level items", item)
        if not item.clock_out(now):
            return EditResult(False, "Not clocked in", item)
        return EditResult(True, "Clocked out", item)

    def toggle_fold(self, item: OrgItem) -> EditResult:
        self._locate(item)
        folded = item.toggle_fold()
        return EditResult(True, "Folded" if folded else "Unfolded", item)

    # Rendering

    def render(self) -> str:
        """Render the whole document as org text."""
        return render_items(self.items)

    def render_files(self) -> dict[str, str]:
        """Render a multi-document outline, one text per source file.

        Wrapper headings are not written; each wrapper's children are written
        one level up. Wrappers sharing a file are concatenated in order.

        Returns:
            Mapping of file path to org text
        """
        groups: dict[str, list[OrgItem]] = {}
        for wrapper in self.items:
            if wrapper.source_file is None:
                continue
            groups.setdefault(wrapper.source_file, []).extend(wrapper.children)
        return {path: render_items(items, level_offset=-1) for path, items in groups.items()}

