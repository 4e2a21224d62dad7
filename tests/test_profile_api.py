# =============================================================================
# tests/test_profile_api.py - Profile Endpoint Tests
# =============================================================================
# End-to-end tests for /api/profile:
# - Lazy creation with defaults
# - Partial updates and nested merges
# - Stats, avatar, preferences, delete
# - Public profile privacy rules
# =============================================================================

from unittest.mock import patch

from core.services.profile_service import ProfileService
from lib.utils import new_id


def get_me(client, user):
    response = client.get("/api/profile/me", headers=user["headers"])
    assert response.status_code == 200, response.text
    return response.json()["data"]


def update_me(client, user, payload):
    return client.put("/api/profile/me", json=payload, headers=user["headers"])


class TestOwnProfile:
    """Tests for GET/PUT/DELETE /api/profile/me."""

    def test_created_on_first_access(self, client, alice, store):
        profile = get_me(client, alice)

        assert profile["user"] == alice["id"]
        assert profile["displayName"] == "alice"
        assert profile["fullName"] == "alice"
        assert profile["preferences"]["theme"] == "auto"
        assert profile["privacy"]["profileVisibility"] == "private"
        assert profile["stats"]["lastActive"] is not None
        assert store.count("profiles") == 1

    def test_second_access_reuses_profile(self, client, alice, store):
        first = get_me(client, alice)
        second = get_me(client, alice)

        assert first["id"] == second["id"]
        assert store.count("profiles") == 1

    def test_partial_update_keeps_other_fields(self, client, alice):
        update_me(client, alice, {"firstName": "Alice"})

        response = update_me(client, alice, {"bio": "hi"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["bio"] == "hi"
        assert data["firstName"] == "Alice"

    def test_nested_objects_merged(self, client, alice):
        update_me(client, alice, {"preferences": {"theme": "dark"}})

        data = update_me(client, alice, {"preferences": {"language": "fr"}}).json()["data"]

        assert data["preferences"]["theme"] == "dark"
        assert data["preferences"]["language"] == "fr"
        assert data["preferences"]["timezone"] == "UTC"

    def test_display_name_from_names(self, client, alice):
        update_me(client, alice, {"displayName": ""})

        data = update_me(client, alice, {"firstName": "Ada", "lastName": "Lovelace"}).json()["data"]

        assert data["displayName"] == "Ada Lovelace"
        assert data["fullName"] == "Ada Lovelace"

    def test_invalid_update_changes_nothing(self, client, alice):
        update_me(client, alice, {"bio": "original"})

        response = update_me(client, alice, {"bio": "changed", "website": "nope"})

        assert response.status_code == 400
        assert get_me(client, alice)["bio"] == "original"

    def test_unknown_field_rejected(self, client, alice):
        assert update_me(client, alice, {"user": "someone-else"}).status_code == 400

    def test_delete(self, client, alice, store):
        get_me(client, alice)

        response = client.delete("/api/profile/me", headers=alice["headers"])

        assert response.status_code == 200
        assert store.count("profiles") == 0

    def test_delete_missing(self, client, alice):
        response = client.delete("/api/profile/me", headers=alice["headers"])

        assert response.status_code == 404
        assert response.json()["message"] == "Profile not found"


class TestStats:
    """Tests for GET /api/profile/stats."""

    def test_aggregates_own_todos(self, client, alice, bob, store):
        get_me(client, alice)
        ids = []
        for title in ("a", "b", "c"):
            response = client.post("/api/todos", json={"title": title}, headers=alice["headers"])
            ids.append(response.json()["data"]["id"])
        client.put(f"/api/todos/{ids[0]}", json={"completed": True}, headers=alice["headers"])
        client.post("/api/todos", json={"title": "bob's"}, headers=bob["headers"])

        response = client.get("/api/profile/stats", headers=alice["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalTodos"] == 3
        assert data["completedTodos"] == 1
        assert data["pendingTodos"] == 2
        assert data["completionRate"] == 33
        assert data["streakDays"] == 0

        stored = store.find_one("profiles", {"user_id": alice["id"]})
        assert stored["stats"]["total_todos"] == 3
        assert stored["stats"]["completed_todos"] == 1

    def test_without_profile(self, client, alice, store):
        data = client.get("/api/profile/stats", headers=alice["headers"]).json()["data"]

        assert data["totalTodos"] == 0
        assert data["completionRate"] == 0
        assert store.count("profiles") == 0

    def test_counts_read_through_owner_scoped_repository(self, store, sink):
        owner = new_id()
        service = ProfileService(store, owner, "alice@example.com", sink)

        with patch("core.services.profile_service.ScopedRepository") as repo_cls:
            repo_cls.return_value.list.return_value = [{"completed": True}, {"completed": False}]
            stats = service.get_stats()

        repo_cls.assert_called_once_with(store, "todos", owner)
        assert (stats.total_todos, stats.completed_todos) == (2, 1)


class TestAvatarAndPreferences:
    """Tests for PUT /api/profile/avatar and /api/profile/preferences."""

    def test_update_avatar(self, client, alice):
        url = "https://cdn.example.com/alice.png"

        response = client.put("/api/profile/avatar", json={"avatarUrl": url}, headers=alice["headers"])

        assert response.status_code == 200
        assert response.json()["data"] == {"avatar": url}
        assert get_me(client, alice)["avatar"] == url

    def test_avatar_required(self, client, alice):
        response = client.put("/api/profile/avatar", json={}, headers=alice["headers"])

        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Avatar URL is required"

    def test_update_preferences_merges(self, client, alice):
        response = client.put(
            "/api/profile/preferences",
            json={"preferences": {"theme": "light", "todoReminders": False}},
            headers=alice["headers"],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["theme"] == "light"
        assert data["todoReminders"] is False
        assert data["emailNotifications"] is True

    def test_preferences_required(self, client, alice):
        response = client.put("/api/profile/preferences", json={}, headers=alice["headers"])
        assert response.status_code == 400


class TestPublicProfile:
    """Tests for GET /api/profile/{user_id}."""

    def test_private_by_default(self, client, alice, bob):
        get_me(client, bob)

        response = client.get(f"/api/profile/{bob['id']}", headers=alice["headers"])

        assert response.status_code == 403
        assert response.json()["message"] == "Profile is private"

    def test_friends_only_is_refused(self, client, alice, bob):
        update_me(client, bob, {"privacy": {"profileVisibility": "friends"}})

        assert client.get(f"/api/profile/{bob['id']}", headers=alice["headers"]).status_code == 403

    def test_public_view(self, client, alice, bob):
        update_me(client, bob, {
            "bio": "hello",
            "phone": "+1 555 123 4567",
            "privacy": {"profileVisibility": "public"},
        })

        response = client.get(f"/api/profile/{bob['id']}", headers=alice["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["bio"] == "hello"
        assert data["displayName"] == "bob"
        for hidden in ("privacy", "account", "phone", "email", "stats"):
            assert hidden not in data

    def test_stats_when_opted_in(self, client, alice, bob):
        update_me(client, bob, {"privacy": {"profileVisibility": "public", "showStats": True}})

        data = client.get(f"/api/profile/{bob['id']}", headers=alice["headers"]).json()["data"]

        assert "totalTodos" in data["stats"]

    def test_owner_can_read_own_private(self, client, alice):
        get_me(client, alice)
        assert client.get(f"/api/profile/{alice['id']}", headers=alice["headers"]).status_code == 200

    def test_missing_profile(self, client, alice, bob):
        assert client.get(f"/api/profile/{bob['id']}", headers=alice["headers"]).status_code == 404

    def test_requires_auth(self, client, bob):
        assert client.get(f"/api/profile/{bob['id']}").status_code == 401

    def test_fixed_paths_not_captured(self, client, alice):
        """/stats and /me are never treated as a user id."""
        assert client.get("/api/profile/stats", headers=alice["headers"]).json()["data"]["totalTodos"] == 0
