# tests for habits: once-per-day completion and streaks
# tests for friendai/routers/habits.py and friendai/services/habit_service.py

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from friendai.errors import ConflictError, NotFoundError
from friendai.models.habit import HabitCreate
from friendai.services import habit_service
from friendai.services.habit_service import compute_streak
from friendai.services.storage import HabitQuery
from friendai.utils import utcnow


def _day(y, m, d, hour=12):
    return datetime(y, m, d, hour, tzinfo=timezone.utc)


class TestComputeStreak:
    """consecutive days ending at the latest completion"""

    def test_empty(self):
        assert compute_streak([]) == 0

    def test_consecutive_days(self):
        dates = [_day(2025, 6, d) for d in (10, 11, 12, 13)]
        assert compute_streak(dates) == 4

    def test_gap_breaks_streak(self):
        dates = [_day(2025, 6, 1), _day(2025, 6, 2), _day(2025, 6, 4), _day(2025, 6, 5)]
        assert compute_streak(dates) == 2

    def test_same_day_counted_once(self):
        dates = [_day(2025, 6, 1, 8), _day(2025, 6, 1, 20), _day(2025, 6, 2)]
        assert compute_streak(dates) == 2

    def test_order_does_not_matter(self):
        dates = [_day(2025, 6, 3), _day(2025, 6, 1), _day(2025, 6, 2)]
        assert compute_streak(dates) == 3


class TestCompletion:
    """completion endpoint"""

    async def test_first_completion(self, auth_client):
        habit = (await auth_client.post("/api/habits", json={"name": "Meditate"})).json()
        resp = await auth_client.post(f"/api/habits/{habit['id']}/complete", json={"notes": "10 min"})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["completions"]) == 1
        assert data["completions"][0]["notes"] == "10 min"
        assert data["streak"] == {"current": 1, "longest": 1}

    async def test_completion_without_body(self, auth_client):
        habit = (await auth_client.post("/api/habits", json={"name": "Stretch"})).json()
        resp = await auth_client.post(f"/api/habits/{habit['id']}/complete")
        assert resp.status_code == 200

    async def test_second_completion_same_day_is_409(self, auth_client):
        habit = (await auth_client.post("/api/habits", json={"name": "Meditate"})).json()
        await auth_client.post(f"/api/habits/{habit['id']}/complete")
        resp = await auth_client.post(f"/api/habits/{habit['id']}/complete")
        assert resp.status_code == 409
        assert resp.json() == {"detail": "Habit already completed today"}

        habits = (await auth_client.get("/api/habits")).json()
        assert len(habits[0]["completions"]) == 1

    async def test_streak_extends_previous_days(self, auth_client, storage):
        habit = (await auth_client.post("/api/habits", json={"name": "Read"})).json()
        now = utcnow()
        await storage.habits.update(habit["id"], {
            "completions": [{"date": now - timedelta(days=d), "notes": None} for d in (3, 2, 1)],
            "streak": {"current": 3, "longest": 3},
        })
        resp = await auth_client.post(f"/api/habits/{habit['id']}/complete")
        assert resp.json()["streak"] == {"current": 4, "longest": 4}

    async def test_longest_survives_broken_streak(self, auth_client, storage):
        habit = (await auth_client.post("/api/habits", json={"name": "Read"})).json()
        now = utcnow()
        await storage.habits.update(habit["id"], {
            "completions": [{"date": now - timedelta(days=d), "notes": None} for d in (10, 9, 8, 7, 6)],
            "streak": {"current": 5, "longest": 5},
        })
        resp = await auth_client.post(f"/api/habits/{habit['id']}/complete")
        assert resp.json()["streak"] == {"current": 1, "longest": 5}

    async def test_unknown_habit_is_404(self, auth_client):
        resp = await auth_client.post("/api/habits/mem_habits_77/complete")
        assert resp.status_code == 404

    async def test_missing_habits_leave_no_lock_behind(self, auth_client):
        for i in range(20):
            resp = await auth_client.post(f"/api/habits/nope_{i}/complete")
            assert resp.status_code == 404
        assert habit_service._completion_locks == {}

    async def test_other_users_habit_gets_no_lock(self, storage, user_id):
        habit = await habit_service.create_habit(storage, "someone_else", HabitCreate(name="Read"))
        with pytest.raises(NotFoundError):
            await habit_service.complete_habit(storage, user_id, habit.id)
        assert habit.id not in habit_service._completion_locks

    async def test_concurrent_completions_record_once(self, storage, user_id):
        habit = await habit_service.create_habit(storage, user_id, HabitCreate(name="Walk"))
        results = await asyncio.gather(
            *(habit_service.complete_habit(storage, user_id, habit.id) for _ in range(5)),
            return_exceptions=True,
        )
        assert sum(1 for r in results if isinstance(r, ConflictError)) == 4
        stored = await storage.habits.find_one(HabitQuery(id=habit.id))
        assert len(stored.completions) == 1


class TestHabitCrud:
    """create, filter, update, delete"""

    async def test_create_defaults(self, auth_client):
        resp = await auth_client.post("/api/habits", json={"name": "Journal"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["frequency"] == "daily"
        assert data["active"] is True
        assert data["streak"] == {"current": 0, "longest": 0}

    async def test_create_requires_name(self, auth_client):
        resp = await auth_client.post("/api/habits", json={"description": "nameless"})
        assert resp.status_code == 400

    async def test_active_filter(self, auth_client):
        a = (await auth_client.post("/api/habits", json={"name": "a"})).json()
        await auth_client.post("/api/habits", json={"name": "b"})
        await auth_client.put(f"/api/habits/{a['id']}", json={"active": False})

        active = (await auth_client.get("/api/habits", params={"active": "true"})).json()
        assert [h["name"] for h in active] == ["b"]

    async def test_update_ignores_streak(self, auth_client):
        habit = (await auth_client.post("/api/habits", json={"name": "a"})).json()
        resp = await auth_client.put(f"/api/habits/{habit['id']}", json={
            "name": "renamed",
            "streak": {"current": 99, "longest": 99},
        })
        assert resp.json()["name"] == "renamed"
        assert resp.json()["streak"] == {"current": 0, "longest": 0}

    async def test_delete(self, auth_client):
        habit = (await auth_client.post("/api/habits", json={"name": "a"})).json()
        assert (await auth_client.delete(f"/api/habits/{habit['id']}")).status_code == 200
        assert (await auth_client.get("/api/habits")).json() == []

    async def test_service_conflict_error(self, storage, user_id):
        habit = await habit_service.create_habit(storage, user_id, HabitCreate(name="x"))
        await habit_service.complete_habit(storage, user_id, habit.id)
        with pytest.raises(ConflictError):
            await habit_service.complete_habit(storage, user_id, habit.id)
