"""
Tests for the HTTP API.

Tests cover:
1. API key enforcement
2. User, FP, leaderboard and friendship endpoints
3. Daily logging and streaks
4. Due-date and booster projections
"""
from datetime import date, timedelta


def create_user(client, user_id, **fields):
    response = client.post("/api/users", json={"id": user_id, **fields})
    assert response.status_code == 200
    return response.json()


class TestAuth:
    """Tests for API key checks"""

    def test_root_needs_no_key(self, client):
        response = client.get("/", headers={"X-API-Key": ""})
        assert response.status_code == 200
        assert response.json()["status"] == "active"

    def test_missing_key_rejected(self, client):
        response = client.get("/api/fp/rules", headers={"X-API-Key": ""})
        assert response.status_code == 401

    def test_wrong_key_rejected(self, client):
        response = client.get("/api/fp/rules", headers={"X-API-Key": "nope"})
        assert response.status_code == 401


class TestUsersAndFp:
    """Tests for user and FP endpoints"""

    def test_upsert_creates_then_updates(self, client):
        created = create_user(client, "alice", display_name="Alice")
        updated = create_user(client, "alice", display_name="Alice B")

        assert created["fp_total"] == 0
        assert updated["display_name"] == "Alice B"
        assert client.get("/api/users/alice").json()["display_name"] == "Alice B"

    def test_unknown_user_is_404(self, client):
        assert client.get("/api/users/ghost").status_code == 404

    def test_rules_listing(self, client):
        rules = {rule["event_type"]: rule for rule in client.get("/api/fp/rules").json()}

        assert rules["log_day"]["fp_amount"] == 3
        assert rules["log_day"]["window_policy"] == "daily"
        assert rules["hit_weekly_goal"]["window_policy"] == "weekly"
        assert rules["first_friend"]["window_policy"] == "once"

    def test_total_activity_and_reconcile(self, client):
        create_user(client, "alice")
        create_user(client, "bob")
        request = client.post("/api/friendships", json={"requester_id": "alice", "addressee_id": "bob"})
        client.post(f"/api/friendships/{request.json()['id']}/accept")

        assert client.get("/api/users/alice/fp").json() == {"user_id": "alice", "fp_total": 11}

        activity = client.get("/api/users/alice/fp/activity", params={"limit": 1}).json()
        assert len(activity) == 1

        reconcile = client.post("/api/users/alice/fp/reconcile").json()
        assert reconcile["repaired"] is False
        assert reconcile["ledger_total"] == 11

    def test_reconcile_unknown_user_is_404(self, client):
        assert client.post("/api/users/ghost/fp/reconcile").status_code == 404

    def test_activity_limit_is_bounded(self, client):
        response = client.get("/api/users/alice/fp/activity", params={"limit": 0})
        assert response.status_code == 422


class TestLeaderboard:
    """Tests for GET /api/fp/leaderboard"""

    def test_all_time_board(self, client):
        create_user(client, "alice")
        create_user(client, "bob")
        friendship = client.post("/api/friendships", json={"requester_id": "alice", "addressee_id": "bob"}).json()
        client.post(f"/api/friendships/{friendship['id']}/accept")

        board = client.get("/api/fp/leaderboard").json()

        assert [(e["user_id"], e["rank"]) for e in board] == [("alice", 1), ("bob", 2)]

    def test_weekly_friends_board(self, client):
        create_user(client, "alice")
        create_user(client, "carol")
        client.post("/api/users/alice/daily-logs", json={"date": date.today().isoformat(), "task_points": 5})

        board = client.get(
            "/api/fp/leaderboard",
            params={"scope": "friends", "period": "weekly", "user_id": "alice"}
        ).json()

        assert [e["user_id"] for e in board] == ["alice"]

    def test_bad_scope_is_400(self, client):
        assert client.get("/api/fp/leaderboard", params={"scope": "planet"}).status_code == 400


class TestFriendships:
    """Tests for friendship endpoints"""

    def test_accept_lists_friends_both_ways(self, client):
        create_user(client, "alice")
        create_user(client, "bob")
        friendship = client.post("/api/friendships", json={"requester_id": "alice", "addressee_id": "bob"})
        assert friendship.status_code == 201

        accepted = client.post(f"/api/friendships/{friendship.json()['id']}/accept")

        assert accepted.json()["status"] == "accepted"
        assert [u["id"] for u in client.get("/api/users/bob/friends").json()] == ["alice"]

    def test_self_friendship_rejected(self, client):
        create_user(client, "alice")
        response = client.post("/api/friendships", json={"requester_id": "alice", "addressee_id": "alice"})
        assert response.status_code == 400

    def test_duplicate_request_rejected(self, client):
        create_user(client, "alice")
        create_user(client, "bob")
        client.post("/api/friendships", json={"requester_id": "alice", "addressee_id": "bob"})

        response = client.post("/api/friendships", json={"requester_id": "bob", "addressee_id": "alice"})

        assert response.status_code == 400

    def test_decline_then_accept_is_rejected(self, client):
        create_user(client, "alice")
        create_user(client, "bob")
        friendship_id = client.post(
            "/api/friendships", json={"requester_id": "alice", "addressee_id": "bob"}
        ).json()["id"]

        assert client.post(f"/api/friendships/{friendship_id}/decline").json()["status"] == "declined"
        assert client.post(f"/api/friendships/{friendship_id}/accept").status_code == 400
        assert client.get("/api/users/alice/fp").json()["fp_total"] == 0

    def test_unknown_friendship_is_404(self, client):
        assert client.post("/api/friendships/999/accept").status_code == 404


class TestDailyLogs:
    """Tests for daily logging, habit settings and streaks"""

    def test_log_day_awards_and_reports_total(self, client):
        create_user(client, "alice")
        settings = client.put("/api/users/alice/habit-settings", json={"daily_goal": 50})
        assert settings.json()["daily_goal"] == 50

        response = client.post(
            "/api/users/alice/daily-logs",
            json={"date": date.today().isoformat(), "task_points": 40, "todo_points": 20}
        )

        body = response.json()
        assert response.status_code == 200
        assert [a["fp_awarded"] for a in body["awards"]] == [3, 10]
        assert body["fp_total"] == 13
        assert client.get("/api/users/alice/streaks").json()["logging_streak"] == 1

    def test_positive_penalty_rejected(self, client):
        create_user(client, "alice")
        response = client.post(
            "/api/users/alice/daily-logs",
            json={"date": date.today().isoformat(), "penalty_points": 5}
        )
        assert response.status_code == 422

    def test_log_for_unknown_user_is_404(self, client):
        response = client.post("/api/users/ghost/daily-logs", json={"date": date.today().isoformat()})
        assert response.status_code == 404


class TestProjections:
    """Tests for due-date and booster panels"""

    def test_due_date_panel(self, client):
        as_of = date(2024, 3, 10)
        items = [
            {"id": "a", "title": "Rent", "due_date": "2024-03-09", "penalty_value": 15},
            {"id": "b", "title": "Gym", "due_date": "2024-03-11"},
        ]

        panel = client.post(
            "/api/due-dates/panel", json={"items": items, "as_of": as_of.isoformat()}
        ).json()

        assert [v["id"] for v in panel["missed"]] == ["a"]
        assert panel["upcoming"][0]["is_urgent"] is True
        assert panel["lost_points"] == 15
        assert panel["net_points"] == -15

    def test_next_occurrence_defaults_to_one_week(self, client):
        items = [{
            "id": "gym", "title": "Gym", "due_date": "2024-03-10", "status": "completed",
            "is_recurring": True, "completed_at": "2024-03-10T08:00:00"
        }]

        result = client.post("/api/due-dates/next-occurrence", json={"items": items, "item_id": "gym"}).json()

        assert len(result) == 2
        assert result[1]["status"] == "pending"
        assert result[1]["due_date"] == (date(2024, 3, 10) + timedelta(days=7)).isoformat()

    def test_next_occurrence_for_pending_item_is_400(self, client):
        items = [{"id": "gym", "title": "Gym", "due_date": "2024-03-10", "is_recurring": True}]
        response = client.post("/api/due-dates/next-occurrence", json={"items": items, "item_id": "gym"})
        assert response.status_code == 400

    def test_next_occurrence_unknown_item_is_404(self, client):
        response = client.post("/api/due-dates/next-occurrence", json={"items": [], "item_id": "x"})
        assert response.status_code == 404

    def test_booster_panel(self, client):
        boosters = [
            {"id": "a", "points": 20, "progress": 3, "required": 3},
            {"id": "b", "points": -10, "achieved": True},
        ]

        panel = client.post("/api/boosters/panel", json={"boosters": boosters}).json()

        assert panel["total_earned"] == 20
        assert panel["total_penalty"] == 10
