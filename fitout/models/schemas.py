"""Pydantic schemas for API requests and responses.

Pattern and intent payloads use the camelCase keys the web client already
speaks (``matchType``, ``mapsTo``, ``_source``, ``professionType`` ...).
"""

from typing import Optional
from pydantic import AliasChoices, BaseModel, Field


# ─── PATTERNS ────────────────────────────────────────────────────────────────

class PatternCreate(BaseModel):
    id: Optional[str] = None
    name: str
    pattern: str
    match_type: str = Field(validation_alias=AliasChoices("matchType", "match_type"))
    category: str
    maps_to: Optional[str] = Field(None, validation_alias=AliasChoices("mapsTo", "maps_to"))
    notes: Optional[str] = None
    enabled: bool = True

class PatternUpdate(BaseModel):
    name: Optional[str] = None
    pattern: Optional[str] = None
    match_type: Optional[str] = Field(None, validation_alias=AliasChoices("matchType", "match_type"))
    category: Optional[str] = None
    maps_to: Optional[str] = Field(None, validation_alias=AliasChoices("mapsTo", "maps_to"))
    notes: Optional[str] = None
    enabled: Optional[bool] = None

class PatternOut(BaseModel):
    id: str
    name: str
    pattern: str
    match_type: str = Field(serialization_alias="matchType")
    category: str
    maps_to: Optional[str] = Field(None, serialization_alias="mapsTo")
    notes: Optional[str] = None
    enabled: bool
    source: str = Field(serialization_alias="_source")

    model_config = {"from_attributes": True}


# ─── LOCATIONS ───────────────────────────────────────────────────────────────

class LocationOut(BaseModel):
    primary: str
    secondary: Optional[str] = None
    tertiary: Optional[str] = None
    granularity: str
    display: str
    label: str

    model_config = {"from_attributes": True}

class LocationSuggestionOut(BaseModel):
    location: LocationOut
    score: float

    model_config = {"from_attributes": True}


# ─── INTENT ──────────────────────────────────────────────────────────────────

class IntentMetadataOut(BaseModel):
    profession_type: Optional[str] = Field(None, serialization_alias="professionType")
    location: Optional[str] = None
    description: Optional[str] = None
    trades_required: list[str] = Field(default_factory=list, serialization_alias="tradesRequired")
    display_text: str = Field(serialization_alias="displayText")
    location_detail: Optional[LocationOut] = Field(None, serialization_alias="locationDetail")
    location_confidence: Optional[float] = Field(None, serialization_alias="locationConfidence")
    work_intent: Optional[str] = Field(None, serialization_alias="workIntent")

    model_config = {"from_attributes": True}

class IntentResultOut(BaseModel):
    action: str
    route: str
    confidence: float
    metadata: IntentMetadataOut
    action_description: str = Field("", serialization_alias="actionDescription")

    model_config = {"from_attributes": True}

class PrefillRequest(BaseModel):
    description: str

class ProjectPrefillOut(BaseModel):
    trades_required: list[str] = Field(serialization_alias="tradesRequired")
    profession_type: Optional[str] = Field(None, serialization_alias="professionType")
    location: Optional[LocationOut] = None
    region: str
    work_intent: Optional[str] = Field(None, serialization_alias="workIntent")
    supplies: list[str]
    confidence: float
    notes: str

    model_config = {"from_attributes": True}


# ─── TRADES ──────────────────────────────────────────────────────────────────

class TradeOut(BaseModel):
    id: int
    title: str
    category: str
    profession_type: str
    aliases: list
    description: str
    enabled: bool
    featured: bool
    sort_order: int
    usage_count: int
    keywords: list[str] = []

    model_config = {"from_attributes": True}

class TradeMatchOut(BaseModel):
    query: str
    profession: Optional[str] = None
