"""
SafeTrip — FastAPI Lifespan Events
Builds the trip store, auth verifier and provider clients at startup and
closes them at shutdown. Everything is hung on `app.state` for the
request dependencies in `safetrip.api.deps`.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from safetrip.core.config import Settings
from safetrip.core.database import create_trip_store
from safetrip.core.security import SupabaseAuthVerifier
from safetrip.services.news_client import NewsClient
from safetrip.services.traffic_client import TrafficClient
from safetrip.services.weather_client import WeatherClient

logger = logging.getLogger("safetrip.events")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info("  SafeTrip Backend — Starting Up")
    logger.info("=" * 60)

    app.state.trip_store = create_trip_store(app_settings)
    app.state.auth_verifier = (
        SupabaseAuthVerifier(app_settings.supabase_url, app_settings.supabase_key)
        if app_settings.supabase_configured
        else None
    )
    app.state.weather_client = WeatherClient(
        api_key=app_settings.weather_api_key, timeout=app_settings.http_timeout_seconds
    )
    app.state.traffic_client = TrafficClient(access_token=app_settings.mapbox_token)
    app.state.news_client = NewsClient(
        api_key=app_settings.news_api_key, timeout=app_settings.http_timeout_seconds
    )

    if app.state.trip_store.mode == "memory":
        logger.warning("NOTICE: running in MOCK MODE (no database). Updates will be lost on restart.")
    logger.info(f"SafeTrip backend ready on port {app_settings.api_port}")

    yield  # ── App is running ──

    logger.info("Shutting down SafeTrip backend...")
    await app.state.weather_client.close()
    await app.state.traffic_client.close()
    await app.state.news_client.close()
    if app.state.auth_verifier is not None:
        await app.state.auth_verifier.close()
    await app.state.trip_store.close()
    logger.info("Shutdown complete.")
