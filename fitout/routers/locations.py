"""Location endpoints: region tree and typeahead search."""

from fastapi import APIRouter, Query

from fitout.models.schemas import LocationSuggestionOut
from fitout.services.locations import location_tree, search_locations

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("/search", response_model=list[LocationSuggestionOut])
async def search(
    q: str = Query("", description="Partial region name"),
    limit: int = Query(10, ge=1, le=50),
):
    return [LocationSuggestionOut.model_validate(s) for s in search_locations(q, limit=limit)]


@router.get("/tree")
async def tree():
    return location_tree()
