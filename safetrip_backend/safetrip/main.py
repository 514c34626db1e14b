"""
SafeTrip — FastAPI Application Entry Point
Accident-risk prediction, live weather/traffic/news feeds, trip logging
and hazard reporting for the SafeTrip driver app.

Run with:
    cd safetrip_backend
    uvicorn safetrip.main:app --reload --host 0.0.0.0 --port 5000
"""

import logging
import sys
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from safetrip.api.news import router as news_router
from safetrip.api.predict import router as predict_router
from safetrip.api.traffic import router as traffic_router
from safetrip.api.trips import router as trips_router
from safetrip.api.weather import router as weather_router
from safetrip.core.config import Settings, settings
from safetrip.core.errors import ApiError, StoreError
from safetrip.core.events import lifespan
from safetrip.core.middleware import (
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from safetrip.core.security import SlidingWindowRateLimiter
from safetrip.models.schemas import HealthResponse

# ── Logging ──
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s │ %(name)-28s │ %(levelname)-7s │ %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)

logger = logging.getLogger("safetrip")

SERVICE_NAME = "safetrip-backend"


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the leading "body"/"query" marker from the location
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query")]
        field = ".".join(loc)
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return ", ".join(parts)


def _register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"Store error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": f"Validation failed: {_format_validation_error(exc)}"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": str(exc) if app_settings.debug else None,
            },
        )


# ═══════════════════════════════════════════════════════════════
# FastAPI App
# ═══════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    app = FastAPI(
        title="SafeTrip Backend",
        description=(
            "Driving-safety companion API: rule-based accident risk scoring, "
            "weather and traffic risk classification, news alerts, trips and hazards."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = app_settings

    # Added last runs first: CORS wraps everything, logging sees every response
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=app_settings.max_body_bytes)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=SlidingWindowRateLimiter(
            limit=app_settings.rate_limit_requests,
            window_seconds=app_settings.rate_limit_window_seconds,
        ),
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, app_settings)

    # ── Register Routers ──
    app.include_router(predict_router)
    app.include_router(weather_router)
    app.include_router(traffic_router)
    app.include_router(news_router)
    app.include_router(trips_router)

    # ═══════════════════════════════════════════════════════════
    # Root & Health Endpoints
    # ═══════════════════════════════════════════════════════════

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": "SafeTrip Backend",
            "version": "1.0.0",
            "description": "Driving-safety companion API",
            "docs": "/docs",
            "endpoints": {
                "predict_accident": "/api/predict-accident",
                "weather": "/api/weather",
                "traffic": "/api/traffic",
                "route_traffic": "/api/traffic/route",
                "incidents": "/api/traffic/incidents",
                "news": "/api/news",
                "news_alerts": "/api/news/alerts",
                "location": "/api/location",
                "alerts": "/api/alerts",
                "trip_start": "/api/trip/start",
                "trip_end": "/api/trip/end",
                "report_hazard": "/api/report-hazard",
            },
        }

    @app.get("/health", tags=["Root"], response_model=HealthResponse)
    async def health(request: Request):
        return HealthResponse(status="ok", service=SERVICE_NAME, mode=request.app.state.trip_store.mode)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("safetrip.main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug)
