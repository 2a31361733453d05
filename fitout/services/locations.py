"""Hong Kong location gazetteer.

A static primary → secondary → tertiary tree of regions. Free text is
matched against every node name (and its aliases) on word boundaries; the
most specific match wins for each mention, and a broader region that is an
ancestor of a kept match is dropped, so "Central, Hong Kong Island" yields one
location rather than two.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fitout.services.matching import prepare_input

LEVELS = ("primary", "secondary", "tertiary")

# Match confidence by the level of the matched name; aliases score a little lower
LEVEL_CONFIDENCE = {"primary": 0.85, "secondary": 0.9, "tertiary": 0.95}
ALIAS_PENALTY = 0.05

# ── Static region tree ───────────────────────────────────────────────────────
HK_REGIONS: Dict[str, Dict[str, List[str]]] = {
    "Hong Kong Island": {
        "Central and Western": [
            "Central", "Sheung Wan", "Admiralty", "Mid-Levels", "Sai Ying Pun",
            "Kennedy Town", "The Peak",
        ],
        "Wan Chai": [
            "Wan Chai", "Causeway Bay", "Happy Valley", "Tai Hang", "Jardine's Lookout",
        ],
        "Eastern": [
            "North Point", "Quarry Bay", "Tai Koo", "Sai Wan Ho", "Shau Kei Wan", "Chai Wan",
        ],
        "Southern": [
            "Aberdeen", "Ap Lei Chau", "Pok Fu Lam", "Repulse Bay", "Stanley", "Wong Chuk Hang",
        ],
    },
    "Kowloon": {
        "Yau Tsim Mong": ["Tsim Sha Tsui", "Jordan", "Yau Ma Tei", "Mong Kok", "Tai Kok Tsui"],
        "Sham Shui Po": ["Sham Shui Po", "Cheung Sha Wan", "Lai Chi Kok", "Mei Foo", "Shek Kip Mei"],
        "Kowloon City": ["Hung Hom", "To Kwa Wan", "Ho Man Tin", "Kowloon Tong", "Kai Tak"],
        "Wong Tai Sin": ["Wong Tai Sin", "Diamond Hill", "San Po Kong", "Lok Fu"],
        "Kwun Tong": ["Kwun Tong", "Ngau Tau Kok", "Lam Tin", "Yau Tong", "Kowloon Bay"],
    },
    "New Territories": {
        "Sha Tin": ["Sha Tin", "Tai Wai", "Ma On Shan", "Fo Tan"],
        "Tsuen Wan": ["Tsuen Wan", "Sham Tseng", "Ma Wan"],
        "Kwai Tsing": ["Kwai Chung", "Tsing Yi"],
        "Tuen Mun": ["Tuen Mun", "So Kwun Wat"],
        "Yuen Long": ["Yuen Long", "Tin Shui Wai", "Kam Tin", "Mai Po / Nam Sang Wai"],
        "North": ["Sheung Shui", "Fanling", "Sha Tau Kok", "Robin's Nest"],
        "Tai Po": ["Tai Po", "Tai Po Market"],
        "Sai Kung": ["Sai Kung", "Tseung Kwan O", "LOHAS Park", "Clear Water Bay"],
        "Islands": [
            "Tung Chung", "Discovery Bay", "Mui Wo", "Cheung Chau", "Lamma Island",
            "Peng Chau", "Chek Lap Kok (Hong Kong International Airport)",
        ],
    },
}

# Common synonyms, keyed by normalized name
NAME_ALIASES: Dict[str, List[str]] = {
    "hong kong island": ["hk island", "hki"],
    "kowloon": ["kln"],
    "new territories": ["nt"],
    "tsim sha tsui": ["tst"],
    "mong kok": ["mk", "mongkok"],
    "wan chai": ["wanchai", "wch"],
    "causeway bay": ["cwb"],
    "north point": ["np"],
    "mid levels": ["midlevels"],
    "sha tin": ["shatin"],
    "tseung kwan o": ["tko"],
    "discovery bay": ["db"],
    "lohas park": ["lohas"],
    "jardine s lookout": ["jardines lookout"],
    "robin s nest": ["robins nest"],
    "mai po nam sang wai": ["mai po", "nam sang wai"],
    "chek lap kok hong kong international airport": ["airport", "hkg", "chek lap kok"],
}

# District names that are ordinary English words only match with "district"
AMBIGUOUS_NAMES = {"north", "eastern", "southern", "islands"}


def normalize(text: str) -> str:
    text = unicodedata.normalize("NFKD", (text or "").lower())
    text = re.sub(r"[’']", "'", text)
    text = re.sub(r"[^a-z0-9\s]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def _fold(text: str) -> str:
    """Prepared input with punctuation blanked; offsets match ``prepare_input``."""
    return re.sub(r"[^a-z0-9\s]", " ", prepare_input(text))


def _key_matcher(key: str):
    return re.compile(r"\b" + r"\s+".join(re.escape(word) for word in key.split()) + r"\b")


def match_confidence(level: str, alias: bool = False) -> float:
    confidence = LEVEL_CONFIDENCE[level]
    return round(confidence - ALIAS_PENALTY, 2) if alias else confidence


# ─── TYPES ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CanonicalLocation:
    primary: str
    secondary: Optional[str] = None
    tertiary: Optional[str] = None

    @property
    def granularity(self) -> str:
        if self.tertiary:
            return "tertiary"
        if self.secondary:
            return "secondary"
        return "primary"

    @property
    def depth(self) -> int:
        return LEVELS.index(self.granularity) + 1

    @property
    def display(self) -> str:
        return self.tertiary or self.secondary or self.primary

    @property
    def label(self) -> str:
        return ", ".join(part for part in (self.primary, self.secondary, self.tertiary) if part)

    def contains(self, other: "CanonicalLocation") -> bool:
        """True if ``other`` lies strictly inside this region."""
        if self.depth >= other.depth or self.primary != other.primary:
            return False
        return self.secondary is None or self.secondary == other.secondary


@dataclass(frozen=True)
class LocationHit:
    location: CanonicalLocation
    span: Tuple[int, int]
    matched_text: str
    source: str = "gazetteer"
    confidence: float = 0.0


@dataclass(frozen=True)
class LocationSuggestion:
    location: CanonicalLocation
    score: float


class LocationNode:
    def __init__(self, name: str, level: str, parent: Optional["LocationNode"] = None):
        self.name = name
        self.level = level
        self.parent = parent
        self.children: List["LocationNode"] = []

        key = normalize(name)
        keys = [f"{key} district"] if key in AMBIGUOUS_NAMES else [key]
        aliases = NAME_ALIASES.get(key, [])
        self.keys = keys + aliases
        self.matchers = [(_key_matcher(k), False) for k in keys]
        self.matchers += [(_key_matcher(k), True) for k in aliases]

    @property
    def location(self) -> CanonicalLocation:
        chain = []
        node = self
        while node is not None:
            chain.append(node.name)
            node = node.parent
        chain.reverse()
        return CanonicalLocation(*chain)


def _build_tree():
    roots = []
    by_level: Dict[str, List[LocationNode]] = {level: [] for level in LEVELS}
    for primary, districts in HK_REGIONS.items():
        root = LocationNode(primary, "primary")
        roots.append(root)
        by_level["primary"].append(root)
        for secondary, areas in districts.items():
            district = LocationNode(secondary, "secondary", root)
            root.children.append(district)
            by_level["secondary"].append(district)
            for tertiary in areas:
                area = LocationNode(tertiary, "tertiary", district)
                district.children.append(area)
                by_level["tertiary"].append(area)
    return roots, by_level


_ROOTS, _BY_LEVEL = _build_tree()

_KEY_INDEX: Dict[str, LocationNode] = {}
# Walk shallow to deep so a name shared by a district and an area resolves to the area
for _level in LEVELS:
    for _node in _BY_LEVEL[_level]:
        for _key in _node.keys + [normalize(_node.name)]:
            _KEY_INDEX[_key] = _node


# ─── LOOKUPS ─────────────────────────────────────────────────────────────────

def lookup(name: str) -> Optional[CanonicalLocation]:
    """Resolve a region name or alias to its canonical location."""
    node = _KEY_INDEX.get(normalize(name))
    return node.location if node else None


def find_locations(text: str) -> List[LocationHit]:
    """Find every location mention in free text, deepest match per mention."""
    folded = _fold(text)
    if not folded.strip():
        return []

    candidates = []
    for level in reversed(LEVELS):
        for node in _BY_LEVEL[level]:
            for matcher, alias in node.matchers:
                for found in matcher.finditer(folded):
                    candidates.append((found.span(), node, found.group(0), alias))

    # Longer span first, then deeper level, then earlier position
    candidates.sort(key=lambda c: (-(c[0][1] - c[0][0]), -LEVELS.index(c[1].level), c[0][0]))

    kept = []
    for candidate in candidates:
        span = candidate[0]
        if any(span[0] < k[0][1] and k[0][0] < span[1] for k in kept):
            continue
        kept.append(candidate)

    hits = [
        LocationHit(
            location=node.location,
            span=span,
            matched_text=matched,
            confidence=match_confidence(node.level, alias),
        )
        for span, node, matched, alias in kept
    ]
    hits = [h for h in hits if not any(h.location.contains(o.location) for o in hits)]
    hits.sort(key=lambda h: h.span[0])
    return hits


def best_location(hits: List[LocationHit]) -> Optional[LocationHit]:
    """Deepest hit wins; ties go to the earliest mention."""
    if not hits:
        return None
    return min(hits, key=lambda h: (-h.location.depth, h.span[0]))


def primaries() -> List[str]:
    return [root.name for root in _ROOTS]


def secondaries(primary: str) -> List[str]:
    for root in _ROOTS:
        if root.name == primary:
            return [child.name for child in root.children]
    return []


def tertiaries(primary: str, secondary: str) -> List[str]:
    for root in _ROOTS:
        if root.name != primary:
            continue
        for district in root.children:
            if district.name == secondary:
                return [area.name for area in district.children]
    return []


def location_tree() -> Dict[str, Dict[str, List[str]]]:
    return {p: {s: list(areas) for s, areas in d.items()} for p, d in HK_REGIONS.items()}


# ─── TYPEAHEAD SEARCH ────────────────────────────────────────────────────────

# (starts-with, substring, every-word) score bands per level
_SEARCH_SCORES = {
    "tertiary": (0.95, 0.65, 0.45),
    "secondary": (0.9, 0.6, 0.4),
    "primary": (0.85, 0.55, 0.35),
}


def search_locations(query: str, limit: int = 10) -> List[LocationSuggestion]:
    """Rank regions for a partial query, one suggestion per region."""
    q = normalize(query)
    if not q:
        return []
    words = q.split()

    results = []
    for level in reversed(LEVELS):
        for node in _BY_LEVEL[level]:
            name = normalize(node.name)
            starts, partial, wordwise = _SEARCH_SCORES[level]
            if name.startswith(q):
                score = starts
            elif q in name:
                score = partial
            elif all(w in name for w in words):
                score = wordwise
            else:
                continue
            results.append(LocationSuggestion(location=node.location, score=score))

    # Stable sort keeps deeper regions ahead within a score band
    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]
