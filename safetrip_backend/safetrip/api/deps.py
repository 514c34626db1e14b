"""Request-scoped accessors for the services built in the lifespan."""

from fastapi import Request

from safetrip.core.database import TripStore
from safetrip.services.news_client import NewsClient
from safetrip.services.traffic_client import TrafficClient
from safetrip.services.weather_client import WeatherClient


def get_trip_store(request: Request) -> TripStore:
    return request.app.state.trip_store


def get_weather_client(request: Request) -> WeatherClient:
    return request.app.state.weather_client


def get_traffic_client(request: Request) -> TrafficClient:
    return request.app.state.traffic_client


def get_news_client(request: Request) -> NewsClient:
    return request.app.state.news_client
