"""Tests for the org outline parser."""

from datetime import datetime
from textwrap import dedent

from org_outline.model import WorkflowStates
from org_outline.parser import parse_lines, parse_text


class TestHeadings:
    """Tests for heading structure."""

    def test_single_item_with_schedule(self):
        """Test the basic item with tags and a SCHEDULED line."""
        items = parse_text("* TODO Buy milk :errand:\nSCHEDULED: <2024-01-15 Mon>\n")

        assert len(items) == 1
        item = items[0]
        assert item.level == 1
        assert item.state == "TODO"
        assert item.title == "Buy milk"
        assert item.tags == ["errand"]
        assert item.scheduled == datetime(2024, 1, 15)
        assert item.notes == ["SCHEDULED: <2024-01-15 Mon>"]

    def test_nesting(self):
        """Test that deeper headings nest under the previous shallower one."""
        items = parse_text(dedent("""\
            * Project
            ** TODO Step one
            *** Detail
            ** Step two
            * Other
        """))

        assert [item.title for item in items] == ["Project", "Other"]
        project = items[0]
        assert [child.title for child in project.children] == ["Step one", "Step two"]
        assert project.children[0].children[0].title == "Detail"

    def test_orphan_level_two_is_top_level(self):
        """Test a level-2 heading with no ancestor becomes a top-level item."""
        items = parse_text("** Orphan\n* Top\n")

        assert [item.title for item in items] == ["Orphan", "Top"]
        assert items[0].level == 2

    def test_level_gap_keeps_raw_level(self):
        """Test that a level-3 heading under a level-1 heading keeps level 3."""
        items = parse_text("* Parent\n*** Deep child\n")

        child = items[0].children[0]
        assert child.title == "Deep child"
        assert child.level == 3

    def test_lines_before_first_heading_dropped(self):
        items = parse_text("#+TITLE: Tasks\n\n* First\n")

        assert len(items) == 1
        assert items[0].notes == []

    def test_custom_states(self):
        """Test that configured states are recognised in headings."""
        states = WorkflowStates(names=("NEXT", "WAIT", "DONE"))
        items = parse_text("* NEXT Call\n* TODO Write\n", states)

        assert items[0].state == "NEXT"
        assert items[1].state is None
        assert items[1].title == "TODO Write"


class TestBody:
    """Tests for notes, drawers and code blocks."""

    def test_leading_blank_lines_skipped(self):
        """Test that blank lines directly below a heading are dropped."""
        items = parse_text("* Task\n\n\nFirst note\n\nSecond note\n")

        assert items[0].notes == ["First note", "", "Second note"]

    def test_logbook_and_effort(self):
        """Test decoding of drawers while keeping them verbatim in notes."""
        text = dedent("""\
            * TODO Write
            :PROPERTIES:
            :EFFORT: 2h
            :END:
            :LOGBOOK:
            CLOCK: [2024-01-15 Mon 09:00]--[2024-01-15 Mon 10:30] =>  1:30
            CLOCK: [2024-01-16 Tue 14:00]
            :END:
        """)
        item = parse_text(text)[0]

        assert item.effort == "2h"
        assert len(item.clock_entries) == 2
        assert item.clock_entries[0].end == datetime(2024, 1, 15, 10, 30)
        assert item.clock_entries[1].is_running
        assert item.notes == text.splitlines()[1:]

    def test_heading_inside_drawer_is_note(self):
        """Test that a heading-like line inside a drawer is not a heading."""
        items = parse_text("* Task\n:PROPERTIES:\n* not a heading\n:END:\n")

        assert len(items) == 1
        assert "* not a heading" in items[0].notes

    def test_stray_end_is_a_note(self):
        items = parse_text("* Task\n:END:\n* Next\n")

        assert items[0].notes == [":END:"]
        assert items[1].title == "Next"

    def test_code_block_content_is_opaque(self):
        """Test that headings and planning lines inside code are kept as text."""
        text = dedent("""\
            * Script
            #+begin_src sh
            * echo hi
            SCHEDULED: <2024-01-15 Mon>
            #+end_src
            * After
        """)
        items = parse_text(text)

        assert [item.title for item in items] == ["Script", "After"]
        assert items[0].scheduled is None
        assert items[0].notes[1] == "* echo hi"

    def test_markdown_fence(self):
        items = parse_text("* Snippet\n```\n* inside\n```\n* Next\n")

        assert len(items) == 2
        assert items[0].notes == ["```", "* inside", "```"]

    def test_invalid_date_ignored(self):
        """Test that an unparseable date leaves the field unset but keeps the line."""
        item = parse_text("* Task\nDEADLINE: <soon>\n")[0]

        assert item.deadline is None
        assert item.notes == ["DEADLINE: <soon>"]

    def test_planning_line_with_both_dates(self):
        item = parse_text("* Task\nSCHEDULED: <2024-01-15 Mon> DEADLINE: <2024-01-20 Sat 17:00>\n")[0]

        assert item.scheduled == datetime(2024, 1, 15)
        assert item.deadline == datetime(2024, 1, 20, 17, 0)

    def test_parse_lines_accepts_iterables(self):
        items = parse_lines(iter(["* A", "** B"]))
        assert items[0].children[0].title == "B"
