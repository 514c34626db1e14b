"""
SafeTrip — News API
Endpoints: /api/news, /api/news/alerts
"""

from fastapi import APIRouter, Depends

from safetrip.api.deps import get_news_client
from safetrip.services.news_client import NewsClient

router = APIRouter(prefix="/api/news", tags=["News"])


@router.get("")
async def get_news(client: NewsClient = Depends(get_news_client)):
    """Latest road safety and driving news."""
    return await client.get_articles()


@router.get("/alerts")
async def get_news_alerts(client: NewsClient = Depends(get_news_client)):
    """Only high-severity news that should surface as driving alerts."""
    return await client.get_alerts()
