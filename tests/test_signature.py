# tests/test_signature.py
"""
Tests for the resolved-method-signature grammar and its visitor.
"""

import pytest
from parsimonious.exceptions import IncompleteParseError, ParseError

from javatime_shims.errors import SignatureError
from javatime_shims.signature import SIGNATURE_GRAMMAR, parse_signature

TA = "java.time.temporal.TemporalAccessor"


class TestGrammarRules:
    """Rule-level parsing, before the visitor runs."""

    def test_rules_present(self):
        for rule in ("signature", "modifier_list", "type_name", "params", "qualified_name"):
            assert rule in SIGNATURE_GRAMMAR

    def test_qualified_name(self):
        tree = SIGNATURE_GRAMMAR["qualified_name"].parse("java.time.LocalDate")
        assert tree.text == "java.time.LocalDate"

    def test_modifier_needs_word_boundary(self):
        with pytest.raises((ParseError, IncompleteParseError)):
            SIGNATURE_GRAMMAR["modifier"].parse("statics")


class TestParseSignature:
    """``parse_signature`` end to end."""

    def test_full_form(self):
        sig = parse_signature(f"public static java.time.LocalDate from({TA})")
        assert sig.name == "from"
        assert sig.owner is None
        assert sig.modifiers == frozenset({"public", "static"})
        assert sig.return_type == "java.time.LocalDate"
        assert sig.parameters == (TA,)
        assert sig.is_static

    def test_qualified_method_with_parameter_name(self):
        sig = parse_signature(f"static java.time.LocalDate java.time.LocalDate.from({TA} temporal)")
        assert sig.owner == "java.time.LocalDate"
        assert sig.name == "from"
        assert sig.parameters == (TA,)
        assert sig.matches("from", (TA,))

    def test_no_modifiers_is_not_static(self):
        sig = parse_signature(f"java.time.LocalDate.from({TA})")
        assert sig.return_type is None
        assert not sig.is_static
        assert not sig.matches("from", (TA,))

    def test_no_parameters(self):
        sig = parse_signature("public static java.time.Instant now()")
        assert sig.parameters == ()

    def test_generics_are_erased(self):
        sig = parse_signature(
            "public static <T extends java.lang.Comparable<? super T>> "
            "java.util.List<T> sorted(java.util.Collection<? extends T> items, "
            "java.util.Map<java.lang.String, java.util.List<T>> index)"
        )
        assert sig.return_type == "java.util.List"
        assert sig.parameters == ("java.util.Collection", "java.util.Map")

    def test_arrays_and_varargs(self):
        sig = parse_signature("static void f(int[][] grid, java.lang.String... names)")
        assert sig.parameters == ("int[][]", "java.lang.String[]")

    def test_other_overload_does_not_match(self):
        sig = parse_signature("public static java.time.LocalDate of(int y, int m, int d)")
        assert not sig.matches("from", (TA,))

    def test_str_round_trips_the_essentials(self):
        sig = parse_signature(f"static java.time.Year java.time.Year.from({TA})")
        assert str(sig) == f"static java.time.Year java.time.Year.from({TA})"

    @pytest.mark.parametrize("text", [
        "",
        "from(",
        "public static java.time.LocalDate from(java.time.temporal.TemporalAccessor",
        "public static LocalDate from(TemporalAccessor) throws X",
        "1abc()",
    ])
    def test_malformed_raises(self, text):
        with pytest.raises(SignatureError) as info:
            parse_signature(text)
        assert info.value.text == text
        assert info.value.code == "JTS-2001"
        assert info.value.position >= 0
