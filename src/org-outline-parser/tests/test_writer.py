"""Tests for rendering outlines back to org text."""

from datetime import datetime
from textwrap import dedent

from org_outline.model import ClockEntry, OrgItem
from org_outline.parser import parse_text
from org_outline.writer import render_heading, render_items


class TestRenderHeading:
    """Tests for heading lines."""

    def test_full_heading(self):
        item = OrgItem(level=2, title="Write", state="TODO", priority="A", tags=["work", "urgent"])
        assert render_heading(item) == "** TODO [#A] Write :work:urgent:"

    def test_level_offset(self):
        item = OrgItem(level=2, title="Write")
        assert render_heading(item, level_offset=-1) == "* Write"

    def test_level_never_below_one(self):
        assert render_heading(OrgItem(level=1, title="Top"), level_offset=-1) == "* Top"


class TestRenderItems:
    """Tests for whole-tree rendering."""

    def test_empty(self):
        assert render_items([]) == ""

    def test_synthesised_lines(self):
        """Test structured lines are emitted when notes carry no literal copy."""
        item = OrgItem(
            level=1,
            title="Task",
            state="DONE",
            closed=datetime(2024, 1, 15, 10, 0),
            scheduled=datetime(2024, 1, 14),
            deadline=datetime(2024, 1, 20, 17, 0),
            effort="2h",
            clock_entries=[ClockEntry(datetime(2024, 1, 14, 9, 0), datetime(2024, 1, 14, 10, 0))],
            notes=["Body"],
        )

        assert render_items([item]) == dedent("""\
            * DONE Task
            CLOSED: [2024-01-15 Mon 10:00]
            SCHEDULED: <2024-01-14 Sun>
            DEADLINE: <2024-01-20 Sat 17:00>
            :PROPERTIES:
            :EFFORT: 2h
            :END:
            :LOGBOOK:
            CLOCK: [2024-01-14 Sun 09:00]--[2024-01-14 Sun 10:00]
            :END:
            Body
        """)

    def test_literal_lines_not_duplicated(self):
        """Test that parsed planning lines and drawers are written once."""
        text = dedent("""\
            * TODO Task :home:
              SCHEDULED: <2024-01-15 Mon> DEADLINE: <2024-01-20 Sat>
              :PROPERTIES:
              :EFFORT: 1h
              :END:
              :LOGBOOK:
              CLOCK: [2024-01-14 Sun 09:00]--[2024-01-14 Sun 10:00] =>  1:00
              :END:
            ** Child
            #+BEGIN_SRC python
            print("* not a heading")
            #+END_SRC
        """)

        assert render_items(parse_text(text)) == text

    def test_structural_round_trip(self):
        """Test that state, priority, title, tags and nesting survive a round trip."""
        text = "* TODO [#B] Parent :a:b:\n** PROG Child\n*** Grandchild\n* DONE Other\n"
        first = parse_text(text)
        second = parse_text(render_items(first))

        def shape(items):
            return [
                (i.level, i.state, i.priority, i.title, i.tags, shape(i.children))
                for i in items
            ]

        assert shape(second) == shape(first)

    def test_render_is_idempotent(self):
        """Test that rendering a re-parsed render gives the same text."""
        item = OrgItem(level=1, title="Task", state="DONE", closed=datetime(2024, 1, 15, 10, 0))
        item.clock_in(datetime(2024, 1, 15, 8, 0))

        once = render_items([item])
        twice = render_items(parse_text(once))

        assert twice == once

    def test_code_block_text_is_not_a_literal(self):
        """Test that planning text quoted in a code block does not suppress the real line."""
        item = OrgItem(
            level=1,
            title="Task",
            deadline=datetime(2024, 1, 20),
            notes=["#+BEGIN_SRC org", "DEADLINE: <2020-01-01 Wed>", "#+END_SRC"],
        )

        assert render_items([item]) == (
            "* Task\nDEADLINE: <2024-01-20 Sat>\n"
            "#+BEGIN_SRC org\nDEADLINE: <2020-01-01 Wed>\n#+END_SRC\n"
        )
