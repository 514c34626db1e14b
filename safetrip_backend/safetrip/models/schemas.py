"""
SafeTrip — Pydantic V2 Schemas
Request/response models for the API layer. Wire format is camelCase.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from safetrip.core.security import sanitize_html_text


# ═══════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════

class DrivingRiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


class NewsSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


HazardSeverity = Literal["low", "medium", "high"]

# Free text coming from the client, HTML-escaped after validation
SafeText = Annotated[str, Field(min_length=1), AfterValidator(sanitize_html_text)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictCamelModel(CamelModel):
    """Request bodies: unknown keys are rejected."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# ═══════════════════════════════════════════════════════════════
# Driving Risk (weather / traffic classifiers)
# ═══════════════════════════════════════════════════════════════

class DrivingRisk(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: DrivingRiskLevel
    message: str


# ═══════════════════════════════════════════════════════════════
# Accident Prediction
# ═══════════════════════════════════════════════════════════════

class RiskPredictionResponse(CamelModel):
    probability: int = Field(..., ge=5, le=100, description="Heuristic risk percentage")
    level: Literal["LOW", "MEDIUM", "HIGH"]
    message: str
    contributing_factors: list[str] = Field(
        default_factory=list,
        description="Evaluation order: speed, weather, time of day, traffic, history",
    )


# ═══════════════════════════════════════════════════════════════
# Location / Trips / Hazards
# ═══════════════════════════════════════════════════════════════

class LocationUpdate(StrictCamelModel):
    user_id: SafeText
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    speed: Optional[float] = Field(default=None, ge=0, description="km/h")
    timestamp: Optional[Any] = None


class LocationResponse(CamelModel):
    status: str = "success"
    processed_at: datetime
    risk_level: str
    message: str


class TripStartRequest(StrictCamelModel):
    user_id: SafeText
    start_location: SafeText


class TripStartResponse(CamelModel):
    message: str
    trip_id: str


class TripEndRequest(CamelModel):
    trip_id: Union[str, int, None] = None
    end_location: Optional[str] = None
    distance: Optional[float] = Field(default=None, description="km")
    duration: Optional[float] = Field(default=None, description="seconds")


class HazardReportRequest(StrictCamelModel):
    type: SafeText
    severity: HazardSeverity
    location: SafeText
    user_id: SafeText


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str
    mode: str = Field(description="'supabase' or 'memory'")
