"""Trade catalogue lookups backed by the service-mapping table."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fitout.models.database import ServiceMapping, Trade

logger = logging.getLogger("fitout.trades")


async def list_trades(session: AsyncSession) -> list[Trade]:
    result = await session.execute(
        select(Trade)
        .options(selectinload(Trade.service_mappings))
        .where(Trade.enabled == True)
        .order_by(Trade.sort_order, Trade.title)
    )
    return list(result.scalars().all())


async def get_trade(session: AsyncSession, trade_id: int) -> Optional[Trade]:
    result = await session.execute(
        select(Trade)
        .options(selectinload(Trade.service_mappings))
        .where(Trade.id == trade_id)
    )
    return result.scalar_one_or_none()


async def legacy_mappings(session: AsyncSession) -> dict[str, str]:
    """keyword → profession type for every enabled mapping."""
    result = await session.execute(
        select(ServiceMapping.keyword, Trade.profession_type, Trade.title)
        .join(Trade, ServiceMapping.trade_id == Trade.id)
        .where(ServiceMapping.enabled == True, Trade.enabled == True)
        .order_by(ServiceMapping.id)
    )
    return {kw.lower(): (profession or title) for kw, profession, title in result.all()}


async def match_service(session: AsyncSession, keyword: str) -> Optional[str]:
    """Resolve a keyword to a profession: exact mapping first, then partial overlap."""
    normalized = (keyword or "").lower().strip()
    if not normalized:
        return None

    mappings = await legacy_mappings(session)
    if normalized in mappings:
        return mappings[normalized]

    for mapped, profession in mappings.items():
        if mapped in normalized or normalized in mapped:
            return profession
    return None


async def increment_usage(session: AsyncSession, trade_id: int) -> Optional[Trade]:
    trade = await get_trade(session, trade_id)
    if trade is None:
        return None
    trade.usage_count = (trade.usage_count or 0) + 1
    await session.flush()
    logger.debug(f"Trade {trade.title} usage now {trade.usage_count}")
    return trade
