"""
API tests for the dashboard endpoints, health check and app shell.
"""

import json
from datetime import timedelta
from unittest.mock import patch

import pytest

from lifelog.services.dashboard_service import week_bounds
from lifelog.template_config import app_today


def save(client, headers, day, **fields):
    body = {"entry_date": day.isoformat()}
    body.update(fields)
    response = client.post("/api/entries", json=body, headers=headers)
    assert response.status_code in (200, 201), response.text
    return response.json()


@pytest.fixture
def mock_post():
    with patch("lifelog.services.insights.requests.post") as post, \
            patch("lifelog.services.insights.time.sleep"):
        yield post


class TestStats:
    """Tests for GET /api/dashboard/stats."""

    def test_empty(self, client, auth_headers):
        stats = client.get("/api/dashboard/stats", headers=auth_headers).json()["stats"]
        assert stats["totalEntries"] == 0
        assert stats["avgMood"] == 0
        assert stats["currentStreak"] == 0

    def test_streak_and_averages(self, client, auth_headers):
        today = app_today()
        save(client, auth_headers, today, mood=4)
        save(client, auth_headers, today - timedelta(days=1), mood=8)

        stats = client.get("/api/dashboard/stats?period=30", headers=auth_headers).json()["stats"]

        assert stats["totalEntries"] == 2
        assert stats["avgMood"] == 6.0
        assert stats["currentStreak"] == 2
        assert [p["mood"] for p in stats["moodTrend"]] == [8, 4]

    def test_bad_period_falls_back(self, client, auth_headers):
        response = client.get("/api/dashboard/stats?period=abc", headers=auth_headers)
        assert response.status_code == 200


class TestWeeklySummary:
    """Tests for GET /api/dashboard/weekly-summary."""

    def test_empty_week(self, client, auth_headers):
        data = client.get("/api/dashboard/weekly-summary", headers=auth_headers).json()

        start, end = week_bounds(app_today())
        assert data["entries_count"] == 0
        assert data["period"] == {"start": start.isoformat(), "end": end.isoformat()}
        assert data["summary"]["title"] == "A week without entries"

    def test_basic_summary_without_key(self, client, auth_headers, mock_post):
        save(client, auth_headers, app_today(), mood=7)

        data = client.get("/api/dashboard/weekly-summary", headers=auth_headers).json()

        assert data["entries_count"] == 1
        assert data["summary"]["title"] == "A week with 1 entries"
        mock_post.assert_not_called()

    def test_ai_summary_with_key(self, client, with_api_key, mock_post, fake_completion):
        payload = {
            "title": "Good week",
            "narrative": "Steady.",
            "highlights": [],
            "lowlights": [],
            "suggestions": [],
        }
        mock_post.return_value = fake_completion(json.dumps(payload))
        save(client, with_api_key, app_today(), mood=7)

        data = client.get("/api/dashboard/weekly-summary", headers=with_api_key).json()

        assert data["summary"] == payload

    def test_previous_week(self, client, auth_headers):
        data = client.get("/api/dashboard/weekly-summary?offset=1", headers=auth_headers).json()

        start, _ = week_bounds(app_today(), 1)
        assert data["period"]["start"] == start.isoformat()


class TestSearch:
    """Tests for POST /api/dashboard/search."""

    def test_query_required(self, client, auth_headers):
        response = client.post("/api/dashboard/search", json={"query": " "}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Query is required"

    def test_text_search_without_key(self, client, auth_headers):
        save(client, auth_headers, app_today(), content="Went hiking in the Mountains")
        save(client, auth_headers, app_today() - timedelta(days=1), content="Stayed home")

        data = client.post(
            "/api/dashboard/search", json={"query": "mountains"}, headers=auth_headers
        ).json()

        assert data["method"] == "text"
        assert [e["content"] for e in data["results"]] == ["Went hiking in the Mountains"]

    def test_semantic_search_with_key(self, client, with_api_key, mock_post, fake_completion):
        entry = save(client, with_api_key, app_today(), content="Beach day")
        save(client, with_api_key, app_today() - timedelta(days=1), content="private", is_private=True)
        mock_post.return_value = fake_completion(json.dumps({
            "results": [
                {"entry_id": entry["id"], "relevance": "About the beach"},
                {"entry_id": 99999, "relevance": "Unknown entry"},
            ],
            "summary": "Found one",
        }))

        data = client.post(
            "/api/dashboard/search", json={"query": "sea"}, headers=with_api_key
        ).json()

        assert data["method"] == "semantic"
        assert data["summary"] == "Found one"
        assert len(data["results"]) == 1
        assert data["results"][0]["id"] == entry["id"]
        assert data["results"][0]["relevance"] == "About the beach"
        prompt = mock_post.call_args.kwargs["json"]["messages"][1]["content"]
        assert "private" not in prompt


class TestHeatmapAndEmotions:
    """Tests for heatmap and emotion endpoints."""

    def test_heatmap(self, client, auth_headers):
        save(client, auth_headers, app_today(), mood=5)
        today = app_today()

        data = client.get(
            f"/api/dashboard/heatmap?year={today.year}&month={today.month}",
            headers=auth_headers,
        ).json()

        assert data["year"] == today.year
        assert data["month"] == today.month
        assert data["heatmap"][0]["date"] == today.isoformat()

    def test_invalid_month(self, client, auth_headers):
        response = client.get("/api/dashboard/heatmap?month=13", headers=auth_headers)
        assert response.status_code == 422

    def test_emotions_empty(self, client, auth_headers):
        data = client.get("/api/dashboard/emotions", headers=auth_headers).json()
        assert data == {"emotions": []}


class TestAppShell:
    """Tests for the health check and HTML shell."""

    def test_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "ok"
        assert data["app"] == "LifeLog"

    def test_index(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "LifeLog" in response.text
