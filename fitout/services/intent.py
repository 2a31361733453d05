"""Intent routing: turns a search query into a navigation decision.

Routing is a fixed priority chain of ``RouteVariant`` entries evaluated in
order; the first predicate that holds builds the result. Join and
manage-project phrases are checked before the professional search because
their verb sets are narrow and the search verbs would otherwise swallow them.
"""

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable, List, Optional, Tuple

from fitout.services.locations import CanonicalLocation
from fitout.services.pattern_store import PatternSet, load
from fitout.services.ranker import FALLBACK_CONFIDENCE, Decision, rank
from fitout.services.resolvers import resolve_supplies

JOIN_PATTERN = re.compile(
    r"\b(join|register|post my services?|become a professional|list my business)\b"
)
MANAGE_PATTERN = re.compile(
    r"\bmanage\b|\b(?:track|view)\s+(?:my\s+|the\s+|our\s+)?projects?\b|\bmy projects?\b"
)

# Professions whose label does not pluralize with a plain "s"
PLURAL_LABELS = {
    "hvac": "HVAC technicians",
    "flooring": "flooring specialists",
    "welding": "welders",
}

ACTION_DESCRIPTIONS = {
    "find-professional": "Browse and find professionals",
    "join": "Register your business",
    "manage-projects": "Manage your projects",
    "unknown": "Explore Fitout Hub",
}

_CORE_ONLY = load()


@dataclass(frozen=True)
class IntentMetadata:
    display_text: str
    profession_type: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    trades_required: List[str] = field(default_factory=list)
    location_detail: Optional[CanonicalLocation] = None
    location_confidence: Optional[float] = None
    work_intent: Optional[str] = None


@dataclass(frozen=True)
class IntentResult:
    action: str
    route: str
    confidence: float
    metadata: IntentMetadata


class RouteContext:
    """One query being routed; the ranked decision is computed on demand."""

    def __init__(self, query: str, patterns: PatternSet):
        self.query = query
        self.normalized = (query or "").lower().strip()
        self.patterns = patterns

    @cached_property
    def decision(self) -> Decision:
        return rank(self.query, self.patterns)


@dataclass(frozen=True)
class RouteVariant:
    name: str
    predicate: Callable[[RouteContext], bool]
    build: Callable[[RouteContext], IntentResult]


def plural_label(profession: str) -> str:
    return PLURAL_LABELS.get(profession, f"{profession}s")


def _unknown(ctx: RouteContext) -> IntentResult:
    return IntentResult(
        action="unknown",
        route="/",
        confidence=0.0,
        metadata=IntentMetadata(display_text="Please enter a query"),
    )


def _join(ctx: RouteContext) -> IntentResult:
    return IntentResult(
        action="join",
        route="/join",
        confidence=0.95,
        metadata=IntentMetadata(display_text="Join us as a professional or business"),
    )


def _manage(ctx: RouteContext) -> IntentResult:
    return IntentResult(
        action="manage-projects",
        route="/projects",
        confidence=0.9,
        metadata=IntentMetadata(display_text="Manage your renovation projects"),
    )


def _find(ctx: RouteContext) -> IntentResult:
    decision = ctx.decision
    profession = decision.profession_type
    hit = decision.location
    location = hit.location if hit else None

    label = plural_label(profession) if profession else "professionals"
    display = f"Find {label} in {location.display}" if location else f"Find {label}"

    return IntentResult(
        action="find-professional",
        route="/professionals",
        confidence=decision.confidence,
        metadata=IntentMetadata(
            display_text=display,
            profession_type=profession,
            location=location.display if location else None,
            description=ctx.query.strip(),
            trades_required=list(decision.trades_required),
            location_detail=location,
            location_confidence=hit.confidence if hit else None,
            work_intent=decision.work_intent,
        ),
    )


def _fallback(ctx: RouteContext) -> IntentResult:
    return IntentResult(
        action="find-professional",
        route="/professionals",
        confidence=FALLBACK_CONFIDENCE,
        metadata=IntentMetadata(display_text=ctx.query, description=ctx.query.strip()),
    )


ROUTE_VARIANTS: Tuple[RouteVariant, ...] = (
    RouteVariant("empty", lambda ctx: not ctx.query, _unknown),
    RouteVariant("join", lambda ctx: bool(JOIN_PATTERN.search(ctx.normalized)), _join),
    RouteVariant("manage-projects", lambda ctx: bool(MANAGE_PATTERN.search(ctx.normalized)), _manage),
    RouteVariant("find-professional", lambda ctx: ctx.decision.has_evidence, _find),
    RouteVariant("fallback", lambda ctx: True, _fallback),
)


def resolve_intent(query: str, patterns: Optional[PatternSet] = None) -> IntentResult:
    """Classify a search query into a navigation action.

    Pure over (query, patterns): the same inputs always give the same result.
    Non-empty input never yields ``unknown``.
    """
    ctx = RouteContext(query or "", _CORE_ONLY if patterns is None else patterns)
    for variant in ROUTE_VARIANTS:
        if variant.predicate(ctx):
            return variant.build(ctx)
    return _unknown(ctx)


def describe_action(action: str) -> str:
    return ACTION_DESCRIPTIONS.get(action, "Explore")


# ─── PROJECT PRE-FILL ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProjectPrefill:
    trades_required: List[str]
    profession_type: Optional[str]
    location: Optional[CanonicalLocation]
    region: str
    work_intent: Optional[str]
    supplies: List[str]
    confidence: float
    notes: str


def prefill_project(description: str, patterns: Optional[PatternSet] = None) -> ProjectPrefill:
    """Pre-fill a new-project form from a free-text description."""
    patterns = _CORE_ONLY if patterns is None else patterns
    text = description or ""
    if not text.strip():
        return ProjectPrefill([], None, None, "", None, [], 0.0, "")

    decision = rank(text, patterns)
    location = decision.location.location if decision.location else None
    return ProjectPrefill(
        trades_required=list(decision.trades_required),
        profession_type=decision.profession_type,
        location=location,
        region=location.label if location else "",
        work_intent=decision.work_intent,
        supplies=resolve_supplies(text, patterns),
        confidence=decision.confidence,
        notes=text.strip(),
    )
