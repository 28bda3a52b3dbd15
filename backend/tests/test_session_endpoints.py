from pingtopass.models.daily_goal import DailyGoal
from pingtopass.models.user import UserProfile
from pingtopass.models.user_progress import UserProgress

from conftest import API, auth_header


def _start(client, headers, **payload):
    payload.setdefault("exam_id", 1)
    return client.post(f"{API}/sessions", headers=headers, json=payload)


def _answer(client, headers, session_id, question_id, choice):
    return client.post(f"{API}/study/answer", headers=headers, json={
        "question_id": question_id, "study_session_id": session_id,
        "selected_answer": choice, "time_spent_seconds": 30,
    })


class TestStartSession:
    def test_returns_session_and_first_batch(self, client, auth_headers, exam_data):
        response = _start(client, auth_headers, mode="practice", question_count=5,
                          difficulty={"min": 3, "max": 5})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["session"]["status"] == "active"
        assert data["session"]["difficulty_filter"] == {"min": 3, "max": 5}
        assert len(data["questions"]) == 5
        assert all(q["difficulty"] >= 3 for q in data["questions"])

    def test_one_active_session_per_exam(self, client, auth_headers, exam_data):
        first = _start(client, auth_headers)
        second = _start(client, auth_headers)

        assert second.status_code == 409
        assert second.json()["data"]["session_id"] == first.json()["data"]["session"]["id"]

    def test_unknown_exam(self, client, auth_headers, exam_data):
        assert _start(client, auth_headers, exam_id=404).status_code == 404

    def test_invalid_difficulty_window(self, client, auth_headers, exam_data):
        response = _start(client, auth_headers, difficulty={"min": 4, "max": 2})
        assert response.status_code == 400


class TestReadAndUpdate:
    def test_other_users_session_is_not_found(self, client, auth_headers, other_user, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]

        response = client.get(f"{API}/sessions/{session_id}", headers=auth_header(other_user))

        assert response.status_code == 404

    def test_list_filters_by_status(self, client, auth_headers, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]
        client.put(f"{API}/sessions/{session_id}", headers=auth_headers, json={"status": "paused"})

        paused = client.get(f"{API}/sessions", params={"status": "paused"}, headers=auth_headers)
        active = client.get(f"{API}/sessions", params={"status": "active"}, headers=auth_headers)

        assert [s["id"] for s in paused.json()["data"]] == [session_id]
        assert active.json()["data"] == []

    def test_update_fields(self, client, auth_headers, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]

        response = client.put(f"{API}/sessions/{session_id}", headers=auth_headers, json={
            "current_question_id": exam_data.questions[3].id, "time_spent_seconds": 120,
        })

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["current_question_id"] == exam_data.questions[3].id
        assert data["time_spent_seconds"] == 120
        assert data["status"] == "active"

    def test_cannot_complete_through_update(self, client, auth_headers, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]
        response = client.put(f"{API}/sessions/{session_id}", headers=auth_headers, json={"status": "completed"})
        assert response.status_code == 400


class TestCompleteSession:
    def test_complete_rolls_into_progress_and_awards_xp(self, client, db, user, auth_headers, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]
        for question, choice in zip(exam_data.questions[:5], ["a", "a", "b", "a", "b"]):
            _answer(client, auth_headers, session_id, question.id, choice)

        response = client.post(f"{API}/sessions/{session_id}/complete", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["session"]["status"] == "completed"
        assert data["session"]["total_questions"] == 5
        assert data["session"]["correct_answers"] == 3
        assert data["session"]["time_spent_seconds"] == 150
        assert data["xp_awarded"] == 30
        assert data["leveled_up"] is False

        db.expire_all()
        progress = db.query(UserProgress).filter_by(user_id=user.id, exam_id=1).one()
        assert progress.total_questions_seen == 5
        assert progress.total_correct == 3
        assert progress.overall_accuracy == 0.6
        assert progress.total_study_minutes == 2
        profile = db.query(UserProfile).filter_by(user_id=user.id).one()
        assert profile.current_xp == 30
        assert profile.streak == 1
        goal = db.query(DailyGoal).filter_by(user_id=user.id).one()
        assert goal.completed_questions == 5

    def test_complete_twice_conflicts(self, client, auth_headers, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]
        client.post(f"{API}/sessions/{session_id}/complete", headers=auth_headers)

        again = client.post(f"{API}/sessions/{session_id}/complete", headers=auth_headers)
        update = client.put(f"{API}/sessions/{session_id}", headers=auth_headers, json={"status": "paused"})

        assert again.status_code == 409
        assert update.status_code == 409

    def test_new_session_allowed_after_completion(self, client, auth_headers, exam_data):
        session_id = _start(client, auth_headers).json()["data"]["session"]["id"]
        client.post(f"{API}/sessions/{session_id}/complete", headers=auth_headers)

        assert _start(client, auth_headers).status_code == 201
