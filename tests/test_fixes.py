# tests/test_fixes.py
"""
Tests for text edits and fix application.
"""

import pytest

from conftest import make_unit
from javatime_shims.errors import FixError
from javatime_shims.fixes import (
    SuggestedFix,
    TextEdit,
    apply_edits,
    apply_fixes,
    apply_fixes_to_unit,
)

SOURCE = "Instant a = Instant.from(x); Year b = Year.from(y);"


def span_of(text, needle):
    start = text.index(needle)
    return start, start + len(needle)


class TestTextEdit:

    def test_invalid_spans(self):
        with pytest.raises(FixError):
            TextEdit(-1, 2, "x")
        with pytest.raises(FixError):
            TextEdit(5, 2, "x")

    def test_to_dict(self):
        assert TextEdit(1, 4, "abc").to_dict() == {"start": 1, "end": 4, "replacement": "abc"}

    def test_to_dict_with_origin(self):
        assert TextEdit(1, 4, "b", origin=2).to_dict() == {
            "start": 1, "end": 4, "replacement": "b", "origin": 2,
        }

    def test_negative_origin(self):
        with pytest.raises(FixError):
            TextEdit(0, 2, "x", origin=-1)

    def test_empty_fix(self):
        assert SuggestedFix().is_empty
        assert not SuggestedFix.replace(0, 1, "a").is_empty
        assert SuggestedFix.replace(0, 1, "a").to_list() == [
            {"start": 0, "end": 1, "replacement": "a"},
        ]


class TestApplyEdits:

    def test_single_edit(self):
        start, end = span_of(SOURCE, "Instant.from(x)")
        assert apply_edits(SOURCE, [TextEdit(start, end, "x")]) == (
            "Instant a = x; Year b = Year.from(y);"
        )

    def test_order_does_not_matter(self):
        e1 = TextEdit(*span_of(SOURCE, "Instant.from(x)"), "x")
        e2 = TextEdit(*span_of(SOURCE, "Year.from(y)"), "y")
        expected = "Instant a = x; Year b = y;"
        assert apply_edits(SOURCE, [e1, e2]) == expected
        assert apply_edits(SOURCE, [e2, e1]) == expected

    def test_identical_edits_apply_once(self):
        e = TextEdit(*span_of(SOURCE, "Instant.from(x)"), "x")
        assert apply_edits(SOURCE, [e, e]) == apply_edits(SOURCE, [e])

    def test_adjacent_edits(self):
        assert apply_edits("abcd", [TextEdit(0, 2, "X"), TextEdit(2, 4, "Y")]) == "XY"

    def test_overlap_rejected(self):
        with pytest.raises(FixError):
            apply_edits("abcdef", [TextEdit(0, 3, "X"), TextEdit(2, 5, "Y")])

    def test_out_of_bounds_rejected(self):
        with pytest.raises(FixError):
            apply_edits("abc", [TextEdit(1, 10, "X")])

    def test_no_edits(self):
        assert apply_edits(SOURCE, []) == SOURCE


class TestNestedEdits:
    """``Instant.from(Instant.from(now))`` yields one edit inside another."""

    NESTED = "x = Instant.from(Instant.from(now));"

    def _redundant(self, text, call, arg):
        start, end = span_of(text, call)
        origin = text.index(arg, start)
        return TextEdit(start, end, arg, origin=origin)

    def test_inner_composed_into_outer(self):
        outer = self._redundant(self.NESTED, "Instant.from(Instant.from(now))", "Instant.from(now)")
        inner = self._redundant(self.NESTED, "Instant.from(now)", "now")
        expected = "x = now;"
        assert apply_edits(self.NESTED, [outer, inner]) == expected
        assert apply_edits(self.NESTED, [inner, outer]) == expected

    def test_three_levels(self):
        text = "x = Instant.from(Instant.from(Instant.from(now)));"
        edits = [
            self._redundant(text, "Instant.from(Instant.from(Instant.from(now)))",
                            "Instant.from(Instant.from(now))"),
            self._redundant(text, "Instant.from(Instant.from(now))", "Instant.from(now)"),
            self._redundant(text, "Instant.from(now)", "now"),
        ]
        assert apply_edits(text, edits) == "x = now;"

    def test_outer_alone(self):
        outer = self._redundant(self.NESTED, "Instant.from(Instant.from(now))", "Instant.from(now)")
        assert apply_edits(self.NESTED, [outer]) == "x = Instant.from(now);"

    def test_contained_edit_without_origin_rejected(self):
        start, end = span_of(self.NESTED, "Instant.from(Instant.from(now))")
        outer = TextEdit(start, end, "Instant.from(now)")
        inner = self._redundant(self.NESTED, "Instant.from(now)", "now")
        with pytest.raises(FixError):
            apply_edits(self.NESTED, [outer, inner])

    def test_edit_outside_copied_text_rejected(self):
        # the stray edit lies in call text the outer edit discards
        outer = self._redundant(self.NESTED, "Instant.from(Instant.from(now))", "Instant.from(now)")
        stray = TextEdit(outer.start, outer.start + 3, "Ins")
        with pytest.raises(FixError):
            apply_edits(self.NESTED, [outer, stray])


class TestApplyFixes:

    def test_apply_fixes(self):
        fixes = [
            SuggestedFix.replace(*span_of(SOURCE, "Instant.from(x)"), "x"),
            SuggestedFix.replace(*span_of(SOURCE, "Year.from(y)"), "y"),
        ]
        assert apply_fixes(SOURCE, fixes) == "Instant a = x; Year b = y;"

    def test_unit_with_embedded_source(self):
        unit = make_unit([], source=SOURCE)
        fix = SuggestedFix.replace(*span_of(SOURCE, "Year.from(y)"), "y")
        assert apply_fixes_to_unit(unit, [fix]).endswith("Year b = y;")

    def test_unit_read_from_disk(self, tmp_path):
        (tmp_path / "Dates.java").write_text(SOURCE, encoding="utf-8")
        unit = make_unit([], file="Dates.java")
        fix = SuggestedFix.replace(*span_of(SOURCE, "Instant.from(x)"), "x")
        assert apply_fixes_to_unit(unit, [fix], tmp_path).startswith("Instant a = x;")
