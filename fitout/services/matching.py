"""Pattern rules and the match engine.

A rule is tested against free text with one of five strategies. Literal
strategies compare case-insensitively; ``regex`` rules compile once with
``IGNORECASE`` and are cached by source text. Core regexes use ``re``;
user-authored regexes run on the ``regex`` engine with a per-search timeout, so
a pathological rule degrades to "no match" instead of stalling the request.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import regex

from fitout.config import get_settings
from fitout.services.errors import PatternValidationError

logger = logging.getLogger("fitout.matching")

MATCH_TYPES = ("contains", "equals", "startsWith", "endsWith", "regex")
CATEGORIES = ("service", "trade", "location", "supply", "intent")
WORK_INTENTS = ("renovation", "repair", "upgrade", "maintenance")
SOURCES = ("core", "user")

# Trailing label words that carry no target meaning: "Plumber Trade" -> "plumber"
_TARGET_SUFFIX = re.compile(r"\s+(?:trade|services?|intent)$", re.IGNORECASE)

_REPEATS = ("+", "*", "{")
_QUANTIFIERS = ("+", "*", "?", "{")


def has_ambiguous_repeat(source: str) -> bool:
    """True if a repeated group contains a quantifier or an alternation.

    Catches the shapes that backtrack exponentially, such as ``(a+)+``,
    ``((a+))+``, ``(\\w*)*`` and ``(a|aa)+``.
    """
    stack = []  # per open group: [has_quantifier, has_alternation]
    in_class = False
    i = 0
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
            i += 1
            continue

        if ch == "[":
            in_class = True
            i += 1
            if source[i:i + 1] == "^":
                i += 1
            if source[i:i + 1] == "]":
                i += 1
            continue
        if ch == "(":
            stack.append([False, False])
            # Skip the "?" of (?:...), (?P<name>...) and friends
            if source[i + 1:i + 2] == "?":
                i += 1
        elif ch == ")" and stack:
            has_quantifier, has_alternation = stack.pop()
            following = source[i + 1:i + 2]
            if following in _REPEATS and (has_quantifier or has_alternation):
                return True
            if stack:
                stack[-1][0] = stack[-1][0] or has_quantifier or following in _QUANTIFIERS
                stack[-1][1] = stack[-1][1] or has_alternation
        elif ch in _QUANTIFIERS:
            if stack:
                stack[-1][0] = True
        elif ch == "|":
            if stack:
                stack[-1][1] = True
        i += 1
    return False


@dataclass(frozen=True)
class Pattern:
    """A single matching rule."""

    id: str
    name: str
    pattern: str
    match_type: str = "contains"
    category: str = "service"
    maps_to: Optional[str] = None
    enabled: bool = True
    source: str = "core"
    notes: Optional[str] = None

    @property
    def is_core(self) -> bool:
        return self.source == "core"

    @property
    def target(self) -> str:
        """Canonical value this rule resolves to."""
        value = (self.maps_to or _TARGET_SUFFIX.sub("", self.name.strip())).strip()
        if self.category in ("service", "trade", "intent"):
            return value.lower()
        return value


# ─── VALIDATION ──────────────────────────────────────────────────────────────

def validate_pattern(
    name: Optional[str],
    pattern: Optional[str],
    match_type: Optional[str],
    category: Optional[str],
    maps_to: Optional[str] = None,
) -> None:
    """Reject a custom rule that resolution could not use safely."""
    settings = get_settings()

    if not name or not name.strip():
        raise PatternValidationError("Pattern name is required")
    if not pattern or not pattern.strip():
        raise PatternValidationError("Pattern string is required")
    if match_type not in MATCH_TYPES:
        raise PatternValidationError(
            f"Unknown matchType '{match_type}' (expected one of {', '.join(MATCH_TYPES)})"
        )
    if category not in CATEGORIES:
        raise PatternValidationError(
            f"Unknown category '{category}' (expected one of {', '.join(CATEGORIES)})"
        )
    if len(pattern) > settings.max_pattern_length:
        raise PatternValidationError(
            f"Pattern is longer than {settings.max_pattern_length} characters"
        )

    if match_type == "regex":
        try:
            regex.compile(pattern, regex.IGNORECASE)
        except regex.error as exc:
            raise PatternValidationError(f"Invalid regular expression: {exc}") from exc
        if has_ambiguous_repeat(pattern):
            raise PatternValidationError(
                "Regular expression repeats a group that contains a quantifier or alternation"
            )

    if category == "intent":
        candidate = Pattern(id="", name=name, pattern=pattern, category=category, maps_to=maps_to)
        if candidate.target not in WORK_INTENTS:
            raise PatternValidationError(
                f"Intent patterns must map to one of {', '.join(WORK_INTENTS)}"
            )


# ─── REGEX COMPILATION ───────────────────────────────────────────────────────

@lru_cache(maxsize=1024)
def compile_regex(source: str, user: bool = False):
    """Compile a rule source once; None marks it permanently non-matching.

    Core sources compile with ``re``. User sources compile with ``regex``,
    whose searches accept a timeout.
    """
    try:
        if user:
            return regex.compile(source, regex.IGNORECASE)
        return re.compile(source, re.IGNORECASE)
    except (re.error, regex.error):
        return None


def clear_regex_cache() -> None:
    compile_regex.cache_clear()


def _search(compiled, text: str, rule: Pattern):
    if rule.is_core:
        return compiled.search(text)

    timeout = get_settings().regex_timeout_seconds
    try:
        return compiled.search(text, timeout=timeout)
    except TimeoutError:
        logger.warning(f"Regex rule {rule.id} exceeded {timeout:.3f}s budget, treated as no match")
        return None


# ─── MATCHING ────────────────────────────────────────────────────────────────

def prepare_input(text: str) -> str:
    """Lower-case and bound the input before any rule sees it."""
    return (text or "")[: get_settings().max_input_length].lower()


def match_span(rule: Pattern, text: str) -> Optional[Tuple[int, int]]:
    """Return the (start, end) span of a match in the prepared text, or None."""
    if not rule.enabled or not rule.pattern:
        return None

    haystack = prepare_input(text)

    if rule.match_type == "regex":
        compiled = compile_regex(rule.pattern, user=not rule.is_core)
        if compiled is None:
            return None
        found = _search(compiled, haystack, rule)
        return found.span() if found else None

    needle = rule.pattern.lower()

    if rule.match_type == "contains":
        idx = haystack.find(needle)
        return (idx, idx + len(needle)) if idx >= 0 else None
    if rule.match_type == "equals":
        if haystack.strip() == needle.strip():
            return (0, len(haystack))
        return None
    if rule.match_type == "startsWith":
        return (0, len(needle)) if haystack.startswith(needle) else None
    if rule.match_type == "endsWith":
        if haystack.endswith(needle):
            return (len(haystack) - len(needle), len(haystack))
        return None

    return None


def matches(rule: Pattern, text: str) -> bool:
    return match_span(rule, text) is not None
