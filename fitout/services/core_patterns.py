"""Core service-to-profession rules.

These are the built-in rules that power matching. They are read-only through
the pattern admin surface and are always listed ahead of user rules.
"""

import re

from fitout.services.matching import Pattern


def core_id(category: str, name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"core-{category}-{slug}"


# ─── SERVICE KEYWORDS ────────────────────────────────────────────────────────
# Specific jobs and problems, each mapped to the profession that handles it.

SERVICE_KEYWORDS = [
    ("plumber", [
        "leaky pipe", "leaking pipe", "burst pipe", "water pipe", "toilet repair",
        "blocked drain", "drainage", "bathroom fitting", "hot water", "boiler",
        "sink repair", "taps", "faucet",
    ]),
    ("electrician", [
        "electrical work", "wiring", "light installation", "socket installation",
        "circuit breaker", "electrical fault", "power outage", "rewiring",
        "lighting", "electrics", "light not working", "lights not working",
        "bulb replacement", "replace bulb", "lamp repair", "short circuit",
        "tripping power", "fuse blown", "breaker tripped", "distribution panel",
        "electrical panel", "dimmer switch", "install dimmer", "led light",
        "ceiling light", "downlight", "spotlight", "track lighting",
        "socket repair", "switch repair", "plug point", "power socket",
    ]),
    ("carpenter", [
        "carpentry", "wooden door", "cabinet", "shelving", "desk building",
        "wood repair", "wardrobe", "custom woodwork", "timber work", "joinery",
    ]),
    ("painter", [
        "paint wall", "painting", "wall paint", "interior paint", "exterior paint",
        "repainting", "wall decoration", "decorating", "wallpaper", "paint job",
    ]),
    ("tiler", [
        "tile installation", "tiling", "floor tile", "wall tile", "bathroom tile",
        "kitchen tile", "grout", "mosaic", "marble",
    ]),
    ("mason", [
        "brick work", "masonry", "concrete", "brickwork", "stone work",
        "wall construction", "foundation", "concrete floor", "retaining wall",
    ]),
    ("builder", [
        "renovation", "fitout", "construction", "building work", "structural work",
        "extension", "new build", "refurbishment", "major works",
    ]),
    ("architect", [
        "architectural design", "building design", "space planning", "floor plan",
        "design consultation", "interior design",
    ]),
    ("hvac", [
        "air conditioning", "ac repair", "heating", "ventilation",
        "climate control", "thermostat",
    ]),
    ("glazier", [
        "window", "glass", "glazing", "mirror", "glass door", "window repair",
        "double glazing",
    ]),
    ("flooring", [
        "flooring", "laminate", "wooden floor", "vinyl floor", "carpet",
        "floor installation", "floor repair",
    ]),
]

# ─── PROFESSION KEYWORDS ─────────────────────────────────────────────────────
# Bare profession names; weaker evidence than a service keyword.

PROFESSION_KEYWORDS = [
    "builder", "electrician", "plumber", "carpenter", "painter", "architect",
    "contractor", "engineer", "designer", "renovator", "flooring", "tiler",
    "mason", "welding", "hvac", "landscaper",
]

# ─── WORK INTENT ─────────────────────────────────────────────────────────────

INTENT_RULES = [
    ("renovation", r"\b(?:renovat\w*|refurbish\w*|remodel\w*)"),
    ("repair", r"\b(?:repair\w*|fix\w*|replac\w*|broken|leak\w*)"),
    ("upgrade", r"\b(?:upgrad\w*|improv\w*|enhanc\w*|install\w*)"),
    ("maintenance", r"\b(?:maintain\w*|maintenance|servic\w*|clean\w*)"),
]

# ─── SUPPLIES ────────────────────────────────────────────────────────────────
# Reseller product categories, used when pre-filling a new project.

SUPPLY_RULES = [
    ("Building Materials", r"building materials?|\bcement\b|\bsand\b|plywood|\bbricks?\b"),
    ("Tiles & Flooring", r"\btiles?\b|laminate|vinyl|parquet|floorboards?"),
    ("Fixtures & Fittings", r"fixtures?|fittings?|hardware|door handles?|hinges?"),
    ("Paint & Finishes", r"\bpaints?\b|varnish|primer|lacquer|wood stain"),
    ("Lighting", r"light fittings?|\blamps?\b|downlights?|chandeliers?|pendant lights?"),
    ("Sanitaryware", r"\btoilets?\b|\bbasins?\b|bathtubs?|shower (?:screen|tray|head)s?"),
    ("Kitchen", r"kitchen cabinets?|countertops?|worktops?|range hoods?"),
]


def _build_core_patterns():
    patterns = []

    for profession, keywords in SERVICE_KEYWORDS:
        for keyword in keywords:
            name = keyword.capitalize()
            patterns.append(Pattern(
                id=core_id("service", name),
                name=name,
                pattern=keyword,
                match_type="contains",
                category="service",
                maps_to=profession,
                notes="Core hardcoded pattern - read only",
            ))

    for profession in PROFESSION_KEYWORDS:
        name = profession.capitalize()
        patterns.append(Pattern(
            id=core_id("trade", name),
            name=name,
            pattern=profession,
            match_type="contains",
            category="trade",
            maps_to=profession,
            notes="Core hardcoded pattern - read only",
        ))

    for intent, regex in INTENT_RULES:
        name = f"{intent.capitalize()} Intent"
        patterns.append(Pattern(
            id=core_id("intent", intent),
            name=name,
            pattern=regex,
            match_type="regex",
            category="intent",
            maps_to=intent,
            notes="Core hardcoded pattern - read only",
        ))

    for label, regex in SUPPLY_RULES:
        patterns.append(Pattern(
            id=core_id("supply", label),
            name=label,
            pattern=regex,
            match_type="regex",
            category="supply",
            maps_to=label,
            notes="Core hardcoded pattern - read only",
        ))

    return tuple(patterns)


CORE_PATTERNS = _build_core_patterns()
CORE_IDS = frozenset(p.id for p in CORE_PATTERNS)
