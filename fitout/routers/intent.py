"""Intent endpoints: classify search queries and pre-fill new projects."""

from fastapi import APIRouter, Depends, Query

from fitout.models.schemas import IntentResultOut, PrefillRequest, ProjectPrefillOut
from fitout.services.intent import describe_action, prefill_project, resolve_intent
from fitout.services.pattern_store import PatternStore, get_pattern_store

router = APIRouter(prefix="/intent", tags=["intent"])


# Sync handlers: resolution runs in the threadpool while a user regex spends its time budget
@router.get("", response_model=IntentResultOut)
def classify_query(
    q: str = Query("", description="Free-text search query"),
    store: PatternStore = Depends(get_pattern_store),
):
    """Resolve a search query to a navigation action."""
    result = resolve_intent(q, store.snapshot())
    out = IntentResultOut.model_validate(result)
    out.action_description = describe_action(result.action)
    return out


@router.post("/prefill", response_model=ProjectPrefillOut)
def prefill_from_description(
    data: PrefillRequest,
    store: PatternStore = Depends(get_pattern_store),
):
    """Suggest trades, location, work intent and supplies for a project description."""
    return ProjectPrefillOut.model_validate(prefill_project(data.description, store.snapshot()))
