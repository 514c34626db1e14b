from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from safetrip.services.news_client import NewsClient, mock_news


def build_client(handler, api_key: str = "news-key") -> NewsClient:
    transport = httpx.MockTransport(handler)
    return NewsClient(api_key=api_key, client=httpx.AsyncClient(transport=transport))


def article(title: str, description: str | None = None, url: str = "https://news.example.com/a") -> dict:
    return {
        "title": title,
        "description": description,
        "source": {"name": "Example Times"},
        "url": url,
        "publishedAt": "2024-05-01T10:00:00Z",
        "urlToImage": None,
    }


@pytest.mark.asyncio
async def test_articles_are_classified_and_filtered() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["q"] == "road accident driving safety traffic India"
        assert request.url.params["pageSize"] == "10"
        return httpx.Response(
            status_code=200,
            json={
                "articles": [
                    article("Bus crash near Pune", "Several injured", url="https://a"),
                    article("[Removed]", url="https://removed"),
                    article("Expressway reopens", "Traffic flowing smoothly", url="https://b"),
                    article("Two killed in pile-up", url="https://c"),
                ]
            },
        )

    news = await build_client(handler).get_articles()

    assert news["count"] == 3
    assert [a["severity"] for a in news["articles"]] == ["medium", "low", "high"]
    assert news["articles"][0]["source"] == "Example Times"
    assert news["articles"][0]["id"] == "https://a"


@pytest.mark.asyncio
async def test_alerts_keep_high_severity_only() -> None:
    long_description = "x" * 200

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["q"] == "road accident closed highway India"
        return httpx.Response(
            status_code=200,
            json={
                "articles": [
                    article("Highway blocked by landslide", long_description, url="https://a"),
                    article("Minor collision downtown", url="https://b"),
                ]
            },
        )

    alerts = await build_client(handler).get_alerts()

    assert alerts["count"] == 1
    assert alerts["alerts"][0]["severity"] == "high"
    assert alerts["alerts"][0]["description"] == "x" * 150 + "..."


@pytest.mark.asyncio
async def test_mock_news_without_key() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no upstream call expected")

    client = build_client(handler, api_key="")

    news = await client.get_articles()
    alerts = await client.get_alerts()

    assert news["isMock"] is True
    assert len(news["articles"]) == 4
    assert alerts["isMock"] is True
    assert [a["id"] for a in alerts["alerts"]] == ["mock_news_1"]


@pytest.mark.asyncio
async def test_upstream_failure() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=429, json={"status": "error"})

    client = build_client(handler)

    assert (await client.get_articles())["isMock"] is True
    assert await client.get_alerts() == {"alerts": [], "isMock": True}


def test_mock_news_timestamps_are_relative() -> None:
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    items = mock_news(now)

    assert items[0]["publishedAt"] == "2024-05-01T11:00:00+00:00"
    assert items[3]["publishedAt"] == "2024-04-30T12:00:00+00:00"
    assert [n["severity"] for n in items] == ["high", "medium", "medium", "low"]
