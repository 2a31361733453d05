"""Category resolvers built on the match engine.

Each resolver scans the enabled rules of its category in merged order and
returns candidates. None of them raise on a miss; an empty list (or None)
is the normal "nothing found" outcome.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fitout.services.locations import (
    CanonicalLocation, LocationHit, find_locations, lookup, match_confidence,
)
from fitout.services.matching import WORK_INTENTS, Pattern, match_span, prepare_input
from fitout.services.pattern_store import PatternSet


@dataclass(frozen=True)
class Candidate:
    target: str
    pattern: Pattern
    span: Tuple[int, int]
    category: str


# Free-standing action verbs that signal the user wants something done
ACTION_VERBS = re.compile(
    r"\b(find|need|needs|needed|looking for|looking|search|searching|hire|hiring|"
    r"want|wanted|get|fix|repair|install|build|replace|renovate|quote)\b",
    re.IGNORECASE,
)


def detect_action_verb(text: str) -> Optional[str]:
    found = ACTION_VERBS.search(prepare_input(text))
    return found.group(1) if found else None


def _scan(text: str, patterns: List[Pattern]) -> List[Candidate]:
    candidates = []
    for rule in patterns:
        span = match_span(rule, text)
        if span is not None:
            candidates.append(Candidate(rule.target, rule, span, rule.category))
    return candidates


def resolve_trades(text: str, patterns: PatternSet) -> List[Candidate]:
    """Every service/trade rule that matches, in merged order."""
    return _scan(text, patterns.for_category("service", "trade"))


def resolve_work_intent(text: str, patterns: PatternSet) -> Optional[Candidate]:
    """First intent rule that matches and maps to a known work intent."""
    for candidate in _scan(text, patterns.for_category("intent")):
        if candidate.target in WORK_INTENTS:
            return candidate
    return None


def resolve_supplies(text: str, patterns: PatternSet) -> List[str]:
    """Distinct reseller product categories mentioned, first mention first."""
    supplies = []
    for candidate in _scan(text, patterns.for_category("supply")):
        if candidate.target not in supplies:
            supplies.append(candidate.target)
    return supplies


def resolve_locations(text: str, patterns: PatternSet) -> List[LocationHit]:
    """Gazetteer mentions plus location-rule matches, deepest per mention."""
    hits = find_locations(text)

    for candidate in _scan(text, patterns.for_category("location")):
        location = lookup(candidate.target) or CanonicalLocation(primary=candidate.target)
        hit = LocationHit(
            location=location,
            span=candidate.span,
            matched_text=prepare_input(text)[candidate.span[0]:candidate.span[1]],
            source=candidate.pattern.id,
            confidence=match_confidence(location.granularity),
        )
        # A rule only adds evidence the gazetteer did not already find at equal or greater depth
        if any(h.location == location or location.contains(h.location) for h in hits):
            continue
        hits = [h for h in hits if not h.location.contains(location)]
        hits.append(hit)

    hits.sort(key=lambda h: h.span[0])
    return hits
