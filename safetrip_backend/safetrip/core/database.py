"""
SafeTrip — Trip / Hazard Store
Persists location fixes, trips and hazard reports to Supabase (hosted
Postgres, reached through its PostgREST interface). When Supabase is not
configured the service runs in memory ("mock mode"); that data is lost on
restart.

Tables: location_history, trips, hazard_reports
"""

import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional, Union

import httpx

from safetrip.core.config import Settings
from safetrip.core.errors import StoreError

logger = logging.getLogger("safetrip.database")

TripId = Union[str, int]

# Memory mode keeps only the latest fixes
MAX_LOCATION_FIXES = 1000


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TripStore(ABC):
    mode: str

    @abstractmethod
    async def record_location(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        speed: Optional[float],
        timestamp: Any = None,
    ) -> None: ...

    @abstractmethod
    async def start_trip(self, user_id: str, start_location: str) -> str: ...

    @abstractmethod
    async def end_trip(
        self,
        trip_id: Optional[TripId],
        end_location: Optional[str],
        distance_km: Optional[float],
        duration_sec: Optional[float],
    ) -> bool:
        """Mark a trip completed. Returns False if no such trip is known."""

    @abstractmethod
    async def report_hazard(self, type: str, severity: str, location: str, user_id: str) -> dict: ...

    @abstractmethod
    async def recent_hazards(self, limit: int = 10) -> list[dict]: ...

    async def close(self) -> None:
        return None


# ═══════════════════════════════════════════════════════════════
# In-memory (mock mode)
# ═══════════════════════════════════════════════════════════════

class InMemoryTripStore(TripStore):
    mode = "memory"

    def __init__(self) -> None:
        self.trips: list[dict] = []
        self.hazards: list[dict] = []
        self.locations: deque[dict] = deque(maxlen=MAX_LOCATION_FIXES)
        self._last_id = 0

    def _next_id(self) -> str:
        # Millisecond clock ids, bumped so two calls in one ms stay distinct
        candidate = int(time.time() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return str(self._last_id)

    async def record_location(self, user_id, latitude, longitude, speed, timestamp=None) -> None:
        self.locations.append({
            "user_id": user_id,
            "latitude": latitude,
            "longitude": longitude,
            "speed": speed,
            "timestamp": timestamp,
        })

    async def start_trip(self, user_id: str, start_location: str) -> str:
        trip = {
            "id": self._next_id(),
            "user_id": user_id,
            "start_time": _utcnow_iso(),
            "status": "active",
            "start_location": start_location,
        }
        self.trips.append(trip)
        return trip["id"]

    async def end_trip(self, trip_id, end_location, distance_km, duration_sec) -> bool:
        for trip in self.trips:
            if trip["id"] == str(trip_id):
                trip.update({
                    "end_time": _utcnow_iso(),
                    "status": "completed",
                    "end_location": end_location,
                    "distance_km": distance_km,
                    "duration_sec": duration_sec,
                })
                return True
        return False

    async def report_hazard(self, type: str, severity: str, location: str, user_id: str) -> dict:
        report = {
            "id": self._next_id(),
            "type": type,
            "severity": severity,
            "location": location,
            "user_id": user_id,
            "created_at": _utcnow_iso(),
        }
        self.hazards.append(report)
        return report

    async def recent_hazards(self, limit: int = 10) -> list[dict]:
        return list(reversed(self.hazards))[:limit]


# ═══════════════════════════════════════════════════════════════
# Supabase (PostgREST)
# ═══════════════════════════════════════════════════════════════

class SupabaseTripStore(TripStore):
    mode = "supabase"

    def __init__(self, supabase_url: str, api_key: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._rest_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, table: str, **kwargs) -> list[dict]:
        try:
            resp = await self._client.request(method, f"{self._rest_url}/{table}", headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"Supabase unreachable: {e}") from e
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("message") or resp.text
            except (ValueError, AttributeError):
                detail = resp.text
            raise StoreError(detail)
        if not resp.content:
            return []
        return resp.json()

    async def record_location(self, user_id, latitude, longitude, speed, timestamp=None) -> None:
        await self._request("POST", "location_history", json=[{
            "user_id": user_id,
            "latitude": latitude,
            "longitude": longitude,
            "speed": speed,
            "timestamp": timestamp,
        }])

    async def start_trip(self, user_id: str, start_location: str) -> str:
        rows = await self._request("POST", "trips", json=[{
            "user_id": user_id,
            "start_time": _utcnow_iso(),
            "status": "active",
            "start_location": start_location,
        }])
        if not rows:
            raise StoreError("Trip insert returned no row")
        return str(rows[0]["id"])

    async def end_trip(self, trip_id, end_location, distance_km, duration_sec) -> bool:
        rows = await self._request(
            "PATCH",
            "trips",
            params={"id": f"eq.{trip_id}"},
            json={
                "end_time": _utcnow_iso(),
                "status": "completed",
                "end_location": end_location,
                "distance_km": distance_km,
                "duration_sec": duration_sec,
            },
        )
        return bool(rows)

    async def report_hazard(self, type: str, severity: str, location: str, user_id: str) -> dict:
        rows = await self._request("POST", "hazard_reports", json=[{
            "type": type,
            "severity": severity,
            "location": location,
            "user_id": user_id,
            "created_at": _utcnow_iso(),
        }])
        return rows[0] if rows else {}

    async def recent_hazards(self, limit: int = 10) -> list[dict]:
        return await self._request(
            "GET",
            "hazard_reports",
            params={"select": "*", "order": "created_at.desc", "limit": limit},
        )


def create_trip_store(app_settings: Settings) -> TripStore:
    """Supabase when configured, otherwise the in-memory store."""
    if app_settings.supabase_configured:
        logger.info("Connected to Supabase (persistent storage active)")
        return SupabaseTripStore(app_settings.supabase_url, app_settings.supabase_key)
    logger.warning("Supabase not configured. Running in MOCK MODE (memory store); updates are lost on restart.")
    return InMemoryTripStore()
