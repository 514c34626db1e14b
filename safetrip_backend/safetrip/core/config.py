"""
SafeTrip — Application Configuration
Uses pydantic-settings to load from .env file and environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # ── External providers ──
    weather_api_key: str = Field(default="", description="OpenWeatherMap API key")
    mapbox_token: str = Field(default="", description="Mapbox access token (driving-traffic directions)")
    news_api_key: str = Field(default="", description="NewsAPI.org API key")

    # ── Supabase (hosted Postgres + Auth) ──
    supabase_url: str = Field(default="", description="Project URL, e.g. https://xyz.supabase.co")
    supabase_key: str = Field(default="", description="Service or anon key")

    # ── API Server ──
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=5000)
    debug: bool = Field(default=True)
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:8080",
            "http://localhost:5173",
            "http://127.0.0.1:8080",
            "http://127.0.0.1:5173",
        ]
    )

    # ── Request limits ──
    rate_limit_requests: int = Field(default=100, description="Requests per IP per window on /api/*")
    rate_limit_window_seconds: float = Field(default=15 * 60)
    max_body_bytes: int = Field(default=10 * 1024)

    # ── Upstream timeouts (seconds) ──
    http_timeout_seconds: float = 5.0
    traffic_timeout_seconds: float = 6.0
    route_traffic_timeout_seconds: float = 8.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def supabase_configured(self) -> bool:
        return self.supabase_url.startswith("http") and is_configured(self.supabase_key)


def is_configured(value: str) -> bool:
    """A credential counts only if set and not a `YOUR_...` placeholder."""
    return bool(value) and "YOUR_" not in value


# Singleton instance
settings = Settings()
