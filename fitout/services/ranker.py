"""Confidence ranking: folds resolver output into one scored decision.

The ordering of the confidence tiers is what callers rely on:

    trade + location (0.95)
    > verb + service keyword (0.9)
    > verb + profession keyword, or service keyword alone (0.8)
    > profession keyword alone, or verb + location (0.7)
    > location alone (0.6)
    > verb alone (0.55)
    > bare fallback (0.5)

Ties inside a category go to the first rule in merged order, and core rules
come before user rules.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from fitout.services.locations import LocationHit, best_location
from fitout.services.pattern_store import PatternSet
from fitout.services.resolvers import (
    Candidate, detect_action_verb, resolve_locations, resolve_trades, resolve_work_intent,
)

COMPOUND_CONFIDENCE = 0.95
VERB_BASE = 0.5
NO_VERB_BASE = 0.4
SERVICE_BONUS = 0.4
TRADE_BONUS = 0.3
LOCATION_BONUS = 0.2
VERB_ONLY_BONUS = 0.05
FALLBACK_CONFIDENCE = 0.5

# Service keywords name a concrete job, so they beat bare profession names
_SPECIFICITY = ("service", "trade")


@dataclass(frozen=True)
class Decision:
    best_trade: Optional[Candidate]
    trades_required: Tuple[str, ...]
    location: Optional[LocationHit]
    work_intent: Optional[str]
    verb: Optional[str]
    confidence: float
    evidence: Tuple[str, ...]

    @property
    def has_evidence(self) -> bool:
        return bool(self.best_trade or self.location or self.verb)

    @property
    def profession_type(self) -> Optional[str]:
        return self.best_trade.target if self.best_trade else None


def pick_trade(candidates: List[Candidate]) -> Optional[Candidate]:
    for category in _SPECIFICITY:
        for candidate in candidates:
            if candidate.category == category:
                return candidate
    return None


def required_trades(candidates: List[Candidate], best: Optional[Candidate]) -> Tuple[str, ...]:
    """Distinct trade targets, the picked trade first."""
    ordered = []
    if best is not None:
        ordered.append(best.target)
    for category in _SPECIFICITY:
        for candidate in candidates:
            if candidate.category == category and candidate.target not in ordered:
                ordered.append(candidate.target)
    return tuple(ordered)


def score(verb: Optional[str], trade: Optional[Candidate], location: Optional[LocationHit]) -> float:
    if trade and location:
        return COMPOUND_CONFIDENCE

    base = VERB_BASE if verb else NO_VERB_BASE
    if trade:
        bonus = SERVICE_BONUS if trade.category == "service" else TRADE_BONUS
    elif location:
        bonus = LOCATION_BONUS
    elif verb:
        bonus = VERB_ONLY_BONUS
    else:
        return FALLBACK_CONFIDENCE
    return round(min(base + bonus, COMPOUND_CONFIDENCE), 2)


def rank(text: str, patterns: PatternSet) -> Decision:
    candidates = resolve_trades(text, patterns)
    best = pick_trade(candidates)
    location = best_location(resolve_locations(text, patterns))
    intent = resolve_work_intent(text, patterns)
    verb = detect_action_verb(text)

    evidence = []
    if verb:
        evidence.append(f"verb:{verb}")
    if best:
        evidence.append(f"{best.category}:{best.pattern.id}->{best.target}")
    if location:
        evidence.append(f"location:{location.source}->{location.location.label}")
    if intent:
        evidence.append(f"intent:{intent.pattern.id}->{intent.target}")

    return Decision(
        best_trade=best,
        trades_required=required_trades(candidates, best),
        location=location,
        work_intent=intent.target if intent else None,
        verb=verb,
        confidence=score(verb, best, location),
        evidence=tuple(evidence),
    )
