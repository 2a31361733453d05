from fitout.models.database import (
    Base, CustomPattern, Trade, ServiceMapping,
    get_engine, get_session_factory, get_db, init_db, dispose_db,
)
from fitout.models.schemas import (
    PatternCreate, PatternUpdate, PatternOut,
    LocationOut, LocationSuggestionOut,
    IntentMetadataOut, IntentResultOut, PrefillRequest, ProjectPrefillOut,
    TradeOut, TradeMatchOut,
)
