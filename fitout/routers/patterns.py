"""Pattern endpoints: list the merged rule set and manage custom rules."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fitout.models.database import get_db
from fitout.models.schemas import PatternCreate, PatternUpdate, PatternOut
from fitout.services.errors import (
    PatternError, PatternConflictError, PatternNotFoundError,
    PatternPermissionError, PatternValidationError,
)
from fitout.services.pattern_store import PatternStore, get_pattern_store

router = APIRouter(prefix="/patterns", tags=["patterns"])

_STATUS_CODES = {
    PatternValidationError: 422,
    PatternPermissionError: 403,
    PatternConflictError: 409,
    PatternNotFoundError: 404,
}


def _http_error(exc: PatternError) -> HTTPException:
    return HTTPException(status_code=_STATUS_CODES.get(type(exc), 400), detail=str(exc))


@router.get("", response_model=list[PatternOut])
async def list_patterns(
    include_core: bool = Query(False, alias="includeCore"),
    db: AsyncSession = Depends(get_db),
    store: PatternStore = Depends(get_pattern_store),
):
    """List custom patterns, optionally preceded by the read-only core set."""
    patterns = await store.list(db, include_core=include_core)
    return [PatternOut.model_validate(p) for p in patterns]


@router.post("", response_model=PatternOut, status_code=201)
async def create_pattern(
    data: PatternCreate,
    db: AsyncSession = Depends(get_db),
    store: PatternStore = Depends(get_pattern_store),
):
    """Create a custom pattern."""
    try:
        pattern = await store.create(db, data.model_dump())
    except PatternError as exc:
        raise _http_error(exc)
    return PatternOut.model_validate(pattern)


@router.put("/{pattern_id}", response_model=PatternOut)
async def update_pattern(
    pattern_id: str,
    data: PatternUpdate,
    db: AsyncSession = Depends(get_db),
    store: PatternStore = Depends(get_pattern_store),
):
    """Edit a custom pattern. Core patterns are read-only."""
    try:
        pattern = await store.update(db, pattern_id, data.model_dump(exclude_unset=True))
    except PatternError as exc:
        raise _http_error(exc)
    return PatternOut.model_validate(pattern)


@router.delete("/{pattern_id}")
async def delete_pattern(
    pattern_id: str,
    db: AsyncSession = Depends(get_db),
    store: PatternStore = Depends(get_pattern_store),
):
    """Delete a custom pattern. Core patterns are read-only."""
    try:
        await store.delete(db, pattern_id)
    except PatternError as exc:
        raise _http_error(exc)
    return {"message": "Pattern deleted", "id": pattern_id}
