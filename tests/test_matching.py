"""
Unit tests for the match engine.

Tests:
- Match-type semantics and case-insensitivity
- Disabled and invalid rules never match
- Write-time validation of custom rules
- Time budget for user-authored regexes
"""

import re
import time

import pytest
import regex

from fitout.services import matching
from fitout.services.errors import PatternValidationError
from fitout.services.matching import Pattern, match_span, matches, validate_pattern


class TestMatchTypes:
    """Tests for the five match strategies."""

    @pytest.mark.parametrize(
        "match_type,pattern,text,expected",
        [
            ("contains", "pipe", "Leaky PIPE in the kitchen", True),
            ("contains", "Pipe", "drain is blocked", False),
            ("equals", "Central", "  central ", True),
            ("equals", "Central", "Central Park", False),
            ("startsWith", "fix", "Fix my sink", True),
            ("startsWith", "sink", "Fix my sink", False),
            ("endsWith", "SINK", "fix my sink", True),
            ("endsWith", "fix", "fix my sink", False),
            ("regex", r"tile|tiling", "Bathroom TILING job", True),
            ("regex", r"^paint", "repaint the wall", False),
        ],
    )
    def test_strategy(self, make_pattern, match_type, pattern, text, expected):
        """Each strategy follows its case-insensitive string law."""
        rule = make_pattern(pattern=pattern, match_type=match_type)
        assert matches(rule, text) is expected

    @pytest.mark.parametrize(
        "pattern,text",
        [("pipe", "my pipe"), ("PIPE", "no match here"), ("a b", "A B C"), ("z", "")],
    )
    def test_contains_law(self, make_pattern, pattern, text):
        """contains(p, s) == lower(p) in lower(s)."""
        rule = make_pattern(pattern=pattern, match_type="contains")
        assert matches(rule, text) == (pattern.lower() in text.lower())

    @pytest.mark.parametrize(
        "pattern,text",
        [(" Plumber ", "plumber"), ("plumber", "PLUMBER  "), ("plumber", "plumbers")],
    )
    def test_equals_law(self, make_pattern, pattern, text):
        """equals(p, s) == (trim(lower(s)) == trim(lower(p)))."""
        rule = make_pattern(pattern=pattern, match_type="equals")
        assert matches(rule, text) == (text.strip().lower() == pattern.strip().lower())

    def test_electric_regex_scenario(self, make_pattern):
        """The 'electric|elec' rule catches both shorthand and full words."""
        rule = make_pattern(
            name="Electrical Services", pattern="electric|elec", match_type="regex",
            maps_to="Electrician",
        )
        assert matches(rule, "need elec work done")
        assert matches(rule, "electrical fault")
        assert rule.target == "electrician"

    def test_span_points_at_match(self, make_pattern):
        """The reported span covers the matched text in the lower-cased input."""
        rule = make_pattern(pattern="leaky pipe")
        text = "I need to fix a Leaky Pipe"
        start, end = match_span(rule, text)
        assert text.lower()[start:end] == "leaky pipe"


class TestNonMatchingRules:
    """Tests for rules that must never match."""

    def test_disabled_rule_never_matches(self, make_pattern):
        """Disabled rules short-circuit before evaluating."""
        rule = make_pattern(pattern="pipe", enabled=False)
        assert not matches(rule, "pipe")

    def test_invalid_regex_does_not_raise(self, make_pattern):
        """An uncompilable regex is treated as no match."""
        rule = make_pattern(pattern="(", match_type="regex")
        assert matches(rule, "(") is False

    def test_unknown_match_type(self, make_pattern):
        """Unknown strategies never match."""
        rule = make_pattern(pattern="pipe", match_type="fuzzy")
        assert not matches(rule, "pipe")

    @pytest.mark.parametrize("source", [r"(a|aa)+b", r"(a+)+b", r"((a+))+b"])
    def test_catastrophic_user_regex_is_bounded(self, make_pattern, source):
        """A backtracking user regex gives up within its budget."""
        rule = make_pattern(pattern=source, match_type="regex")
        started = time.monotonic()
        assert not matches(rule, "a" * 60)
        assert time.monotonic() - started < 2.0

    def test_user_regex_still_matches_after_timeout(self, make_pattern):
        """A timed-out search leaves no state behind for later rules."""
        slow = make_pattern(pattern=r"(a|aa)+b", match_type="regex")
        fast = make_pattern(pattern="electric|elec", match_type="regex")
        assert not matches(slow, "a" * 60)
        assert matches(fast, "need elec work done")

    def test_engines_by_source(self, make_pattern):
        """Core regexes compile with re, user regexes with the regex engine."""
        core = make_pattern(pattern="elec", match_type="regex", source="core")
        user = make_pattern(pattern="elec", match_type="regex")
        assert isinstance(matching.compile_regex(core.pattern, user=False), re.Pattern)
        assert isinstance(matching.compile_regex(user.pattern, user=True), type(regex.compile("")))
        assert matches(core, "elec") and matches(user, "elec")

    def test_input_is_bounded(self, make_pattern):
        """Text beyond the configured length is not searched."""
        rule = make_pattern(pattern="needle")
        text = "x" * 10_000 + " needle"
        assert not matches(rule, text)


class TestTargets:
    """Tests for the canonical value a rule resolves to."""

    def test_maps_to_wins(self):
        """An explicit mapsTo is used, lower-cased for trade categories."""
        rule = Pattern(id="a", name="Whatever", pattern="x", maps_to="Electrician")
        assert rule.target == "electrician"

    def test_name_suffix_is_stripped(self):
        """Label words like 'Trade' and 'Intent' are dropped from the name."""
        assert Pattern(id="a", name="Plumber Trade", pattern="x", category="trade").target == "plumber"
        assert Pattern(id="b", name="Repair Intent", pattern="x", category="intent").target == "repair"

    def test_location_target_keeps_case(self):
        """Location targets keep their authored spelling."""
        rule = Pattern(id="a", name="Kowloon", pattern="kln", category="location")
        assert rule.target == "Kowloon"


class TestValidation:
    """Tests for write-time validation of custom rules."""

    def test_valid_rule_passes(self):
        """A well-formed regex rule validates."""
        validate_pattern("Electrical Services", "electric|elec", "regex", "service", "Electrician")

    @pytest.mark.parametrize(
        "name,pattern,match_type,category,maps_to",
        [
            ("", "pipe", "contains", "service", None),
            ("Pipe", "", "contains", "service", None),
            ("Pipe", "   ", "contains", "service", None),
            ("Pipe", "pipe", "fuzzy", "service", None),
            ("Pipe", "pipe", "contains", "colour", None),
            ("Broken", "(", "regex", "service", None),
            ("Nested", "(a+)+$", "regex", "service", None),
            ("Nested", r"(\w*)*x", "regex", "service", None),
            ("Alternation", r"(a|aa)+b", "regex", "service", None),
            ("Deep", r"((a+))+$", "regex", "service", None),
            ("Counted", r"(?:ab|a){2,}c", "regex", "service", None),
            ("Demolition", "demolish", "contains", "intent", "demolition"),
            ("Too long", "x" * 1000, "contains", "service", None),
        ],
    )
    def test_rejected(self, name, pattern, match_type, category, maps_to):
        """Malformed rules raise PatternValidationError."""
        with pytest.raises(PatternValidationError):
            validate_pattern(name, pattern, match_type, category, maps_to)

    def test_intent_rule_inferred_from_name(self):
        """An intent rule without mapsTo may name its intent."""
        validate_pattern("Upgrade Intent", "modernise", "contains", "intent")

    @pytest.mark.parametrize(
        "source",
        [r"(tile|tiling)s?", r"[(a+)]+", r"\(a+\)+", r"(?:kitchen|bath)room", r"colou?r"],
    )
    def test_safe_groups_accepted(self, source):
        """Groups that are not themselves repeated stay valid."""
        validate_pattern("Safe", source, "regex", "service")
