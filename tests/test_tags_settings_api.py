"""
API tests for tags and user settings.
"""

from unittest.mock import patch

from lifelog.seed import SYSTEM_TAGS, seed_system_tags


class TestTags:
    """Tests for /api/tags."""

    def test_system_tags_listed_first(self, client, auth_headers):
        client.post("/api/tags", json={"name": "art"}, headers=auth_headers)

        tags = client.get("/api/tags", headers=auth_headers).json()["tags"]

        assert len(tags) == len(SYSTEM_TAGS) + 1
        assert all(tag["is_system"] for tag in tags[:len(SYSTEM_TAGS)])
        assert tags[-1]["name"] == "art"

    def test_create_normalizes_name(self, client, auth_headers):
        response = client.post(
            "/api/tags", json={"name": "  Reading ", "color": "#000000"}, headers=auth_headers
        )

        assert response.status_code == 201
        tag = response.json()["tag"]
        assert tag["name"] == "reading"
        assert tag["color"] == "#000000"
        assert tag["icon"] == "tag"
        assert tag["is_system"] is False

    def test_create_requires_name(self, client, auth_headers):
        response = client.post("/api/tags", json={"name": "  "}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Tag name is required"

    def test_name_clashing_with_system_tag(self, client, auth_headers):
        response = client.post("/api/tags", json={"name": "WORK"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "A tag with this name already exists"

    def test_same_name_for_different_users(self, client, auth_headers, register_user):
        other = register_user(email="bob@example.com", name="Bob")
        client.post("/api/tags", json={"name": "art"}, headers=auth_headers)

        response = client.post("/api/tags", json={"name": "art"}, headers=other)

        assert response.status_code == 201

    def test_update_and_delete_own_tag(self, client, auth_headers):
        tag_id = client.post("/api/tags", json={"name": "art"}, headers=auth_headers).json()["tag"]["id"]

        updated = client.patch(f"/api/tags/{tag_id}", json={"name": "Music"}, headers=auth_headers)
        assert updated.status_code == 200
        assert updated.json()["tag"]["name"] == "music"

        # Renaming to its own name is not a clash
        same = client.patch(f"/api/tags/{tag_id}", json={"name": "music"}, headers=auth_headers)
        assert same.status_code == 200

        deleted = client.delete(f"/api/tags/{tag_id}", headers=auth_headers)
        assert deleted.json() == {"success": True}

    def test_system_tags_cannot_be_modified(self, client, auth_headers):
        tags = client.get("/api/tags", headers=auth_headers).json()["tags"]
        system_id = tags[0]["id"]

        assert client.patch(
            f"/api/tags/{system_id}", json={"name": "x"}, headers=auth_headers
        ).status_code == 404
        assert client.delete(f"/api/tags/{system_id}", headers=auth_headers).status_code == 404

    def test_usage_stats(self, client, auth_headers):
        tags = client.get("/api/tags", headers=auth_headers).json()["tags"]
        family = next(tag["id"] for tag in tags if tag["name"] == "family")
        client.post(
            "/api/entries",
            json={"entry_date": "2024-03-10", "tag_ids": [family]},
            headers=auth_headers,
        )

        stats = client.get("/api/tags/stats", headers=auth_headers).json()["stats"]

        assert stats[0]["name"] == "family"
        assert stats[0]["usage_count"] == 1
        assert all(tag["usage_count"] == 0 for tag in stats[1:])

    def test_seeding_is_idempotent(self, db_session):
        assert seed_system_tags(db_session) == 0


class TestSettings:
    """Tests for /api/settings."""

    def test_api_key_is_masked(self, client, auth_headers):
        response = client.patch(
            "/api/settings", json={"deepseek_api_key": "sk-abcdef123456"}, headers=auth_headers
        )

        settings = response.json()["settings"]
        assert settings["deepseek_api_key"] == "sk-...3456"
        assert settings["has_api_key"] is True
        assert "abcdef" not in response.text

    def test_partial_update(self, client, auth_headers):
        client.patch("/api/settings", json={"theme": "dark"}, headers=auth_headers)
        response = client.patch(
            "/api/settings",
            json={"ai_depth": "deep", "discrete_mode": True, "notification_time": "07:30"},
            headers=auth_headers,
        )

        settings = response.json()["settings"]
        assert settings["theme"] == "dark"
        assert settings["ai_depth"] == "deep"
        assert settings["discrete_mode"] is True
        assert settings["notification_time"] == "07:30"

    def test_invalid_values(self, client, auth_headers):
        depth = client.patch("/api/settings", json={"ai_depth": "extreme"}, headers=auth_headers)
        theme = client.patch("/api/settings", json={"theme": "neon"}, headers=auth_headers)
        time = client.patch("/api/settings", json={"notification_time": "25:00"}, headers=auth_headers)

        assert depth.status_code == 400
        assert depth.json()["error"] == "Invalid AI depth"
        assert theme.json()["error"] == "Invalid theme"
        assert time.status_code == 400

    def test_nothing_to_update(self, client, auth_headers):
        response = client.patch("/api/settings", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "No settings to update"

    def test_clear_and_delete_key(self, client, auth_headers):
        client.patch("/api/settings", json={"deepseek_api_key": "sk-abcdef123456"}, headers=auth_headers)
        cleared = client.patch("/api/settings", json={"deepseek_api_key": ""}, headers=auth_headers)
        assert cleared.json()["settings"]["has_api_key"] is False

        client.patch("/api/settings", json={"deepseek_api_key": "sk-abcdef123456"}, headers=auth_headers)
        response = client.delete("/api/settings/api-key", headers=auth_headers)
        assert response.json()["success"] is True
        settings = client.get("/api/settings", headers=auth_headers).json()["settings"]
        assert settings["deepseek_api_key"] is None

    def test_key_check_without_any_key(self, client, auth_headers):
        response = client.post("/api/settings/test-api-key", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_key_check_uses_stored_key(self, client, with_api_key, fake_completion):
        with patch("lifelog.services.insights.requests.post") as post:
            post.return_value = fake_completion("Hi")
            response = client.post("/api/settings/test-api-key", json={}, headers=with_api_key)

        assert response.json() == {"valid": True, "message": "API key is valid!"}
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer sk-test-key-1234"

    def test_key_check_reports_rejection(self, client, auth_headers, fake_completion):
        with patch("lifelog.services.insights.requests.post") as post:
            post.return_value = fake_completion(status_code=401, body={})
            response = client.post(
                "/api/settings/test-api-key", json={"api_key": "sk-bad"}, headers=auth_headers
            )

        assert response.json() == {"valid": False, "error": "Invalid API key"}
