from datetime import timedelta
from unittest.mock import MagicMock

import redis

from pingtopass.crud.crud_dashboard import award_xp
from pingtopass.db.base_class import utcnow
from pingtopass.models.test_attempt import TestAttempt
from pingtopass.models.user import UserProfile
from pingtopass.schemas.dashboard import (
    DashboardStatistics, DashboardStats, DashboardUser, RecentActivity, TodayGoal,
)
from pingtopass.services.cache import DashboardCache

from conftest import API


def _profile(db, db_user):
    return db.query(UserProfile).filter_by(user_id=db_user.id).one()


class TestAwardXp:
    def test_ten_xp_per_correct_answer(self, db, user):
        gained, profile, leveled_up = award_xp(db, db_user=user, correct_answers=7)
        db.commit()

        assert gained == 70
        assert profile.current_xp == 70
        assert profile.total_xp == 70
        assert leveled_up is False

    def test_level_up_carries_leftover_xp(self, db, user):
        profile = _profile(db, user)
        profile.current_xp = 980
        db.commit()

        _, profile, leveled_up = award_xp(db, db_user=user, correct_answers=5)

        assert leveled_up is True
        assert profile.level == 2
        assert profile.current_xp == 30

    def test_streak_grows_on_consecutive_days(self, db, user):
        profile = _profile(db, user)
        profile.streak = 3
        profile.last_activity_at = utcnow() - timedelta(days=1)
        db.commit()

        _, profile, _ = award_xp(db, db_user=user, correct_answers=1)
        assert profile.streak == 4

        _, profile, _ = award_xp(db, db_user=user, correct_answers=1)
        assert profile.streak == 4

    def test_streak_restarts_after_a_gap(self, db, user):
        profile = _profile(db, user)
        profile.streak = 9
        profile.last_activity_at = utcnow() - timedelta(days=3)
        db.commit()

        _, profile, _ = award_xp(db, db_user=user, correct_answers=1)
        assert profile.streak == 1


class TestDashboardEndpoint:
    def test_defaults_for_a_new_user(self, client, auth_headers, exam_data):
        response = client.get(f"{API}/dashboard/stats", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["cache-control"] == "public, max-age=300, s-maxage=300"
        data = response.json()["data"]
        assert data["user"]["level"] == 1
        assert data["user"]["next_level_xp"] == 1000
        assert data["statistics"]["available_exams"] == 1
        assert data["statistics"]["tests_completed"] == 0
        assert data["today_goal"]["target_questions"] == 10
        assert data["today_goal"]["target_minutes"] == 30
        assert data["recent_activity"]["last_test_score"] is None

    def test_counts_sessions_and_tests(self, client, db, user, auth_headers, exam_data):
        client.post(f"{API}/sessions", headers=auth_headers, json={"exam_id": 1})
        now = utcnow()
        db.add_all([
            TestAttempt(user_id=user.id, exam_id=1, question_ids=[1], status="completed",
                        score=0.8, passed=True, completed_at=now - timedelta(hours=1)),
            TestAttempt(user_id=user.id, exam_id=1, question_ids=[1], status="completed",
                        score=0.4, passed=False, completed_at=now),
        ])
        db.commit()

        stats = client.get(f"{API}/dashboard/stats", headers=auth_headers).json()["data"]

        assert stats["statistics"]["active_sessions"] == 1
        assert stats["statistics"]["tests_completed"] == 2
        assert stats["statistics"]["average_score"] == 60.0
        assert stats["statistics"]["pass_rate"] == 50.0
        assert stats["recent_activity"]["last_test_score"] == 0.4
        assert stats["recent_activity"]["last_study_date"] is not None


def _stats() -> DashboardStats:
    return DashboardStats(
        user=DashboardUser(display_name="Cached", level=3, current_xp=750, next_level_xp=3000, streak=2),
        statistics=DashboardStatistics(
            available_exams=1, active_sessions=0, tests_completed=0, average_score=0.0, pass_rate=0.0,
        ),
        today_goal=TodayGoal(
            date="2026-01-01", target_questions=10, completed_questions=0,
            target_minutes=30, completed_minutes=0, is_completed=False,
        ),
        recent_activity=RecentActivity(),
    )


class TestDashboardCache:
    def test_disabled_without_client(self):
        cache = DashboardCache(client=None)
        assert cache.enabled is False
        assert cache.get(1) is None
        cache.set(1, _stats())
        cache.invalidate(1)

    def test_round_trip_through_redis_client(self):
        fake = MagicMock()
        cache = DashboardCache(client=fake, ttl=120)
        stats = _stats()

        cache.set(5, stats)
        key, ttl, payload = fake.setex.call_args.args
        assert key == "pingtopass:dashboard:5"
        assert ttl == 120

        fake.get.return_value = payload
        assert cache.get(5) == stats

        cache.invalidate(5)
        fake.delete.assert_called_once_with("pingtopass:dashboard:5")

    def test_redis_errors_are_treated_as_misses(self):
        fake = MagicMock()
        fake.get.side_effect = redis.ConnectionError("down")
        cache = DashboardCache(client=fake)

        assert cache.get(1) is None

    def test_endpoint_serves_cached_stats(self, client, auth_headers, dashboard_cache, user, exam_data):
        fake = MagicMock()
        fake.get.return_value = _stats().model_dump_json()
        dashboard_cache.client = fake

        response = client.get(f"{API}/dashboard/stats", headers=auth_headers)

        assert response.headers["x-cache"] == "HIT"
        assert response.json()["data"]["user"]["display_name"] == "Cached"
        fake.get.assert_called_once_with(f"pingtopass:dashboard:{user.id}")

    def test_completing_a_session_invalidates_cache(self, client, auth_headers, dashboard_cache, user, exam_data):
        fake = MagicMock()
        fake.get.return_value = None
        dashboard_cache.client = fake
        session_id = client.post(f"{API}/sessions", headers=auth_headers, json={"exam_id": 1}).json()["data"]["session"]["id"]
        fake.delete.reset_mock()

        client.post(f"{API}/sessions/{session_id}/complete", headers=auth_headers)

        fake.delete.assert_called_once_with(f"pingtopass:dashboard:{user.id}")
