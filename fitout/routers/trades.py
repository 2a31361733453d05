"""Trade endpoints: catalogue listing and keyword lookups."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fitout.models.database import Trade, get_db
from fitout.models.schemas import TradeOut, TradeMatchOut
from fitout.services import trades as trade_service

router = APIRouter(prefix="/trades", tags=["trades"])


def _trade_out(trade: Trade) -> TradeOut:
    out = TradeOut.model_validate(trade)
    out.keywords = sorted(m.keyword for m in trade.service_mappings if m.enabled)
    return out


@router.get("", response_model=list[TradeOut])
async def list_trades(db: AsyncSession = Depends(get_db)):
    """List enabled trades by sort order."""
    return [_trade_out(t) for t in await trade_service.list_trades(db)]


@router.get("/match", response_model=TradeMatchOut)
async def match_trade(
    q: str = Query(..., min_length=1, description="Service keyword or phrase"),
    db: AsyncSession = Depends(get_db),
):
    """Map a service keyword to a profession via the mapping table."""
    return TradeMatchOut(query=q, profession=await trade_service.match_service(db, q))


@router.get("/legacy-mappings")
async def get_legacy_mappings(db: AsyncSession = Depends(get_db)):
    """Keyword → profession dictionary for older clients."""
    return await trade_service.legacy_mappings(db)


@router.get("/{trade_id}", response_model=TradeOut)
async def get_trade(trade_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single trade by ID."""
    trade = await trade_service.get_trade(db, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return _trade_out(trade)


@router.post("/{trade_id}/usage", response_model=TradeOut)
async def record_usage(trade_id: int, db: AsyncSession = Depends(get_db)):
    """Count one more use of a trade."""
    trade = await trade_service.increment_usage(db, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return _trade_out(trade)
