"""Trade catalogue seeding: upserts trades and keyword mappings by natural key."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitout.models.database import ServiceMapping, Trade
from fitout.services.core_patterns import SERVICE_KEYWORDS

logger = logging.getLogger("fitout.seed")

TRADES = [
    {
        "title": "Plumber",
        "category": "contractor",
        "profession_type": "plumber",
        "aliases": ["Plumbing", "Drainage Specialist"],
        "description": "Plumbing, water systems, drainage, and bathroom fittings",
        "featured": True,
        "sort_order": 1,
    },
    {
        "title": "Electrician",
        "category": "contractor",
        "profession_type": "electrician",
        "aliases": ["Electrical", "Sparky"],
        "description": "Electrical work, wiring, lighting, and power systems",
        "featured": True,
        "sort_order": 2,
    },
    {
        "title": "Carpenter",
        "category": "contractor",
        "profession_type": "carpenter",
        "aliases": ["Woodworker", "Joiner"],
        "description": "Carpentry, joinery, custom woodwork, and furniture",
        "featured": True,
        "sort_order": 3,
    },
    {
        "title": "Painter",
        "category": "contractor",
        "profession_type": "painter",
        "aliases": ["Decorator", "Painting"],
        "description": "Painting, decorating, and wall finishing",
        "featured": True,
        "sort_order": 4,
    },
    {
        "title": "Tiler",
        "category": "contractor",
        "profession_type": "tiler",
        "aliases": ["Tiling Specialist"],
        "description": "Tile installation, grouting, and flooring",
        "featured": False,
        "sort_order": 5,
    },
    {
        "title": "Mason",
        "category": "contractor",
        "profession_type": "mason",
        "aliases": ["Bricklayer", "Masonry"],
        "description": "Brickwork, stonework, and concrete",
        "featured": False,
        "sort_order": 6,
    },
    {
        "title": "Builder",
        "category": "contractor",
        "profession_type": "builder",
        "aliases": ["General Builder", "Construction", "Renovator"],
        "description": "General building, renovation, and construction",
        "featured": True,
        "sort_order": 7,
    },
    {
        "title": "Architect",
        "category": "company",
        "profession_type": "architect",
        "aliases": ["Architectural Design", "Designer"],
        "description": "Architectural design, space planning, and building design",
        "featured": False,
        "sort_order": 8,
    },
    {
        "title": "HVAC Technician",
        "category": "contractor",
        "profession_type": "hvac",
        "aliases": ["AC Technician", "Aircon", "Climate Control"],
        "description": "Air conditioning, heating, and ventilation systems",
        "featured": False,
        "sort_order": 9,
    },
    {
        "title": "Glazier",
        "category": "contractor",
        "profession_type": "glazier",
        "aliases": ["Glass Fitter", "Window Specialist"],
        "description": "Window installation, glass work, and glazing",
        "featured": False,
        "sort_order": 10,
    },
    {
        "title": "Flooring Specialist",
        "category": "contractor",
        "profession_type": "flooring",
        "aliases": ["Floor Fitter", "Flooring"],
        "description": "Laminate, vinyl, wooden floors, and carpet",
        "featured": False,
        "sort_order": 11,
    },
]

_TITLE_BY_PROFESSION = {t["profession_type"]: t["title"] for t in TRADES}

# keyword → trade title, derived from the core service keywords
SERVICE_MAPPINGS = [
    (keyword, _TITLE_BY_PROFESSION.get(profession, profession))
    for profession, keywords in SERVICE_KEYWORDS
    for keyword in keywords
]


async def seed_trades(session: AsyncSession) -> tuple[int, int]:
    """Upsert trades by title and mappings by keyword. Returns (trades, mappings)."""
    trade_ids = {}

    with session.no_autoflush:
        for data in TRADES:
            result = await session.execute(select(Trade).where(Trade.title == data["title"]))
            existing = result.scalar_one_or_none()

            if existing:
                for field, value in data.items():
                    setattr(existing, field, value)
                existing.enabled = True
                trade = existing
            else:
                trade = Trade(**data, enabled=True)
                session.add(trade)
            await session.flush()
            trade_ids[data["title"]] = trade.id

    mapping_count = 0
    for keyword, title in SERVICE_MAPPINGS:
        trade_id = trade_ids.get(title)
        if trade_id is None:
            logger.warning(f"Skipping mapping '{keyword}': trade '{title}' not found")
            continue

        result = await session.execute(select(ServiceMapping).where(ServiceMapping.keyword == keyword))
        existing = result.scalar_one_or_none()
        if existing:
            existing.trade_id = trade_id
        else:
            session.add(ServiceMapping(keyword=keyword, trade_id=trade_id, enabled=True))
        mapping_count += 1

    await session.flush()
    logger.info(f"Seeded {len(trade_ids)} trades and {mapping_count} service mappings")
    return len(trade_ids), mapping_count
