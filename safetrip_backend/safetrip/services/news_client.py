"""
SafeTrip — NewsAPI Client
Road-safety news feed and high-severity driving alerts from NewsAPI.org.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from safetrip.core.config import is_configured, settings
from safetrip.engine.news_severity import classify_news_severity
from safetrip.models.schemas import NewsSeverity

logger = logging.getLogger("safetrip.news")

NEWSAPI_URL = "https://newsapi.org/v2/everything"

ARTICLES_QUERY = "road accident driving safety traffic India"
ALERTS_QUERY = "road accident closed highway India"
ALERT_DESCRIPTION_CHARS = 150


def mock_news(now: Optional[datetime] = None) -> list[dict[str, Any]]:
    now = now or datetime.now(timezone.utc)

    def hours_ago(hours: int) -> str:
        return (now - timedelta(hours=hours)).isoformat()

    return [
        {
            "id": "mock_news_1",
            "title": "NH44 Partially Closed Due to Road Widening Work",
            "description": (
                "National Highway 44 is partially closed near Siddipet for ongoing road widening. "
                "Commuters advised to use alternate routes."
            ),
            "source": "Times of India",
            "publishedAt": hours_ago(1),
            "severity": NewsSeverity.HIGH.value,
            "url": "#",
        },
        {
            "id": "mock_news_2",
            "title": "Heavy Rains Expected Across Telangana - Drive Carefully",
            "description": (
                "IMD has issued a yellow alert for heavy rains. "
                "Drivers are advised to reduce speed and keep headlights on."
            ),
            "source": "NDTV",
            "publishedAt": hours_ago(2),
            "severity": NewsSeverity.MEDIUM.value,
            "url": "#",
        },
        {
            "id": "mock_news_3",
            "title": "Traffic Diversion on Outer Ring Road This Weekend",
            "description": (
                "GHMC has announced traffic diversions on ORR for maintenance work "
                "from Saturday evening to Sunday morning."
            ),
            "source": "Deccan Chronicle",
            "publishedAt": hours_ago(3),
            "severity": NewsSeverity.MEDIUM.value,
            "url": "#",
        },
        {
            "id": "mock_news_4",
            "title": "New Drunk Driving Crackdown Begins in Hyderabad",
            "description": (
                "Hyderabad Traffic Police have started special naka checking "
                "from midnight to 4 AM at major city entry points."
            ),
            "source": "The Hindu",
            "publishedAt": hours_ago(24),
            "severity": NewsSeverity.LOW.value,
            "url": "#",
        },
    ]


def _usable(article: dict) -> bool:
    title = article.get("title")
    return bool(title) and "[Removed]" not in title


class NewsClient:
    """Async client for the NewsAPI `everything` endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_key = settings.news_api_key if api_key is None else api_key
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.http_timeout_seconds)

    @property
    def is_available(self) -> bool:
        return is_configured(self._api_key)

    async def close(self) -> None:
        await self._client.aclose()

    async def _search(self, query: str, page_size: int) -> list[dict]:
        params = {
            "q": query,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": page_size,
            "apiKey": self._api_key,
        }
        resp = await self._client.get(NEWSAPI_URL, params=params)
        resp.raise_for_status()
        return resp.json().get("articles") or []

    async def get_articles(self) -> dict[str, Any]:
        """Latest road-safety news, each tagged with a severity."""
        if not self.is_available:
            logger.warning("News API: using mock data (no API key configured)")
            return {"articles": mock_news(), "isMock": True}

        try:
            raw = await self._search(ARTICLES_QUERY, page_size=10)
            articles = [
                {
                    "id": a.get("url"),
                    "title": a["title"],
                    "description": a.get("description"),
                    "source": (a.get("source") or {}).get("name") or "Unknown",
                    "url": a.get("url"),
                    "publishedAt": a.get("publishedAt"),
                    "imageUrl": a.get("urlToImage"),
                    "severity": classify_news_severity(f"{a['title']} {a.get('description') or ''}").value,
                }
                for a in raw
                if _usable(a)
            ]
        except httpx.HTTPError as e:
            logger.error(f"News API error: {e}")
            return {"articles": mock_news(), "isMock": True}
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"News API returned an unexpected payload: {e}")
            return {"articles": mock_news(), "isMock": True}

        logger.info(f"Fetched {len(articles)} news articles")
        return {"articles": articles, "count": len(articles)}

    async def get_alerts(self) -> dict[str, Any]:
        """High-severity items only, meant to be shown as in-drive alerts."""
        if not self.is_available:
            alerts = [n for n in mock_news() if n["severity"] == NewsSeverity.HIGH.value]
            return {"alerts": alerts, "isMock": True}

        try:
            raw = await self._search(ALERTS_QUERY, page_size=5)
            alerts = []
            for a in raw:
                if not _usable(a):
                    continue
                severity = classify_news_severity(a["title"])
                if severity is not NewsSeverity.HIGH:
                    continue
                description = a.get("description")
                alerts.append({
                    "id": a.get("url"),
                    "title": a["title"],
                    "description": f"{description[:ALERT_DESCRIPTION_CHARS]}..." if description else None,
                    "source": (a.get("source") or {}).get("name"),
                    "publishedAt": a.get("publishedAt"),
                    "severity": severity.value,
                })
        except httpx.HTTPError as e:
            logger.error(f"News alerts error: {e}")
            return {"alerts": [], "isMock": True}
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"News alerts returned an unexpected payload: {e}")
            return {"alerts": [], "isMock": True}

        return {"alerts": alerts, "count": len(alerts)}
