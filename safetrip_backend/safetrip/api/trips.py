"""
SafeTrip — Location, Trip & Hazard API
Endpoints: /api/location, /api/alerts, /api/trip/start, /api/trip/end,
/api/report-hazard
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends

from safetrip.api.deps import get_trip_store
from safetrip.core.database import TripStore
from safetrip.core.errors import ApiError, StoreError
from safetrip.core.security import get_current_user
from safetrip.engine.live_check import check_live_speed
from safetrip.models.schemas import (
    HazardReportRequest,
    LocationResponse,
    LocationUpdate,
    MessageResponse,
    TripEndRequest,
    TripStartRequest,
    TripStartResponse,
)

logger = logging.getLogger("safetrip.api.trips")

router = APIRouter(prefix="/api", tags=["Trips"])

RECENT_HAZARDS_LIMIT = 10


def external_alerts(now: datetime) -> list[dict[str, Any]]:
    created_at = now.isoformat()
    return [
        {"id": "ext_1", "type": "Weather", "message": "Fog reported in 5km", "severity": "medium", "created_at": created_at},
        {"id": "ext_2", "type": "Traffic", "message": "Congestion on Main St", "severity": "low", "created_at": created_at},
    ]


async def _save_location(store: TripStore, update: LocationUpdate) -> None:
    try:
        await store.record_location(
            update.user_id, update.latitude, update.longitude, update.speed, update.timestamp
        )
    except StoreError as e:
        logger.error(f"Location save error: {e}")


# ═══════════════════════════════════════════════════════════════
# POST /location (GPS fix receiver)
# ═══════════════════════════════════════════════════════════════

@router.post("/location", response_model=LocationResponse)
async def receive_location(
    update: LocationUpdate,
    background_tasks: BackgroundTasks,
    user: dict = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
):
    logger.info(
        f"GPS: [{update.latitude:.4f}, {update.longitude:.4f}] | Speed: {update.speed or 0:.1f} km/h"
    )
    level, message = check_live_speed(update.speed, "Clear")

    # Saved after the response goes out
    background_tasks.add_task(_save_location, store, update)

    return LocationResponse(
        processed_at=datetime.now(timezone.utc),
        risk_level=level.value,
        message=message,
    )


# ═══════════════════════════════════════════════════════════════
# GET /alerts
# ═══════════════════════════════════════════════════════════════

@router.get("/alerts")
async def get_alerts(store: TripStore = Depends(get_trip_store)):
    try:
        hazards = await store.recent_hazards(RECENT_HAZARDS_LIMIT)
    except StoreError as e:
        logger.error(f"Could not load hazard reports: {e}")
        hazards = []
    return [*external_alerts(datetime.now(timezone.utc)), *hazards]


# ═══════════════════════════════════════════════════════════════
# Trips
# ═══════════════════════════════════════════════════════════════

@router.post("/trip/start", response_model=TripStartResponse)
async def start_trip(
    request: TripStartRequest,
    user: dict = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
):
    try:
        trip_id = await store.start_trip(request.user_id, request.start_location)
    except StoreError as e:
        raise ApiError(status_code=500, message=str(e)) from e

    message = "Trip started (Mock)" if store.mode == "memory" else "Trip started"
    return TripStartResponse(message=message, trip_id=trip_id)


@router.post("/trip/end", response_model=MessageResponse)
async def end_trip(request: TripEndRequest, store: TripStore = Depends(get_trip_store)):
    try:
        found = await store.end_trip(request.trip_id, request.end_location, request.distance, request.duration)
    except StoreError as e:
        raise ApiError(status_code=500, message=str(e)) from e

    if not found:
        logger.warning(f"Trip end for unknown trip id: {request.trip_id}")
    if store.mode == "memory":
        return MessageResponse(message="Trip ended (Mock). Saved to Memory.")
    return MessageResponse(message="Trip ended. Saved to History.")


# ═══════════════════════════════════════════════════════════════
# POST /report-hazard
# ═══════════════════════════════════════════════════════════════

@router.post("/report-hazard", response_model=MessageResponse)
async def report_hazard(
    request: HazardReportRequest,
    user: dict = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
):
    try:
        await store.report_hazard(request.type, request.severity, request.location, request.user_id)
    except StoreError as e:
        raise ApiError(status_code=500, message=str(e)) from e

    message = "Hazard reported (Mock)" if store.mode == "memory" else "Hazard reported successfully"
    return MessageResponse(message=message)
