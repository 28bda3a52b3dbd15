from pingtopass.models.audit import AuditLog
from pingtopass.models.question import Question
from pingtopass.models.user_answer import UserAnswer

from conftest import API


class TestStudyQuestions:
    def test_requires_authentication(self, client, exam_data):
        response = client.get(f"{API}/study/questions", params={"exam_id": 1})

        assert response.status_code == 401
        body = response.json()
        assert body["authenticated"] is False
        assert body["type"] == "AuthError"

    def test_difficulty_and_limit(self, client, auth_headers, exam_data):
        response = client.get(
            f"{API}/study/questions",
            params={"exam_id": 1, "difficulty": "3-5", "limit": 10},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["metadata"]["count"] == 10
        assert len(data["questions"]) == 10
        assert all(q["difficulty"] >= 3 for q in data["questions"])
        assert response.headers["cache-control"] == "private, max-age=60"

    def test_answers_are_stripped(self, client, auth_headers, exam_data):
        response = client.get(f"{API}/study/questions", params={"exam_id": 1, "limit": 3}, headers=auth_headers)

        for q in response.json()["data"]["questions"]:
            assert "explanation" not in q
            assert "reference" not in q
            for option in q["answers"]:
                assert set(option) == {"id", "text"}

    def test_objective_ids_parameter(self, client, auth_headers, exam_data):
        objective_id = exam_data.objectives[0].id
        response = client.get(
            f"{API}/study/questions",
            params={"exam_id": 1, "objective_ids": str(objective_id), "limit": 50},
            headers=auth_headers,
        )

        questions = response.json()["data"]["questions"]
        assert len(questions) == 10
        assert {q["objective_id"] for q in questions} == {objective_id}

    def test_bad_difficulty_is_a_validation_error(self, client, auth_headers, exam_data):
        for raw in ("5-3", "x-y", "0-9"):
            response = client.get(
                f"{API}/study/questions", params={"exam_id": 1, "difficulty": raw}, headers=auth_headers,
            )
            assert response.status_code == 400
            assert response.json()["type"] == "ValidationError"

    def test_limit_out_of_range(self, client, auth_headers, exam_data):
        response = client.get(f"{API}/study/questions", params={"exam_id": 1, "limit": 0}, headers=auth_headers)
        assert response.status_code == 400

    def test_unknown_exam(self, client, auth_headers, exam_data):
        response = client.get(f"{API}/study/questions", params={"exam_id": 42}, headers=auth_headers)
        assert response.status_code == 404


class TestSubmitAnswer:
    def test_correct_answer(self, client, db, auth_headers, exam_data):
        question_id = exam_data.questions[0].id
        response = client.post(f"{API}/study/answer", headers=auth_headers, json={
            "question_id": question_id, "selected_answer": "a", "time_spent_seconds": 12,
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_correct"] is True
        assert data["correct_answer_ids"] == ["a"]
        assert data["explanation"] == "Explanation"
        assert data["session_progress"] is None

        db.expire_all()
        db_question = db.get(Question, question_id)
        assert db_question.total_attempts == 1
        assert db_question.correct_attempts == 1
        audit = db.query(AuditLog).filter(AuditLog.action == "answer.submitted").one()
        assert audit.entity_id == str(data["answer_id"])
        assert audit.event_metadata["is_correct"] is True

    def test_answer_updates_session(self, client, auth_headers, exam_data):
        session = client.post(f"{API}/sessions", headers=auth_headers, json={"exam_id": 1}).json()["data"]["session"]

        for question, choice in zip(exam_data.questions[:4], ["a", "b", "a", "a"]):
            response = client.post(f"{API}/study/answer", headers=auth_headers, json={
                "question_id": question.id, "study_session_id": session["id"],
                "selected_answer": choice, "time_spent_seconds": 10,
            })
            assert response.status_code == 200

        progress = response.json()["data"]["session_progress"]
        assert progress["total_questions"] == 4
        assert progress["correct_answers"] == 3
        assert progress["accuracy"] == 0.75

    def test_unknown_question(self, client, db, auth_headers, exam_data):
        response = client.post(f"{API}/study/answer", headers=auth_headers, json={
            "question_id": 9999, "selected_answer": "a", "time_spent_seconds": 5,
        })

        assert response.status_code == 404
        assert db.query(UserAnswer).count() == 0

    def test_unknown_session(self, client, auth_headers, exam_data):
        response = client.post(f"{API}/study/answer", headers=auth_headers, json={
            "question_id": exam_data.questions[0].id, "study_session_id": 777,
            "selected_answer": "a", "time_spent_seconds": 5,
        })
        assert response.status_code == 404

    def test_time_spent_is_capped_at_an_hour(self, client, auth_headers, exam_data):
        response = client.post(f"{API}/study/answer", headers=auth_headers, json={
            "question_id": exam_data.questions[0].id, "selected_answer": "a", "time_spent_seconds": 3601,
        })
        assert response.status_code == 400
        assert isinstance(response.json()["data"], list)

    def test_malformed_multi_select_writes_nothing(self, client, db, auth_headers, exam_data):
        db_question = Question(
            exam_id=1, objective_id=exam_data.objectives[0].id, text="Pick two", type="multi_select",
            answers=[
                {"id": "a", "text": "A", "is_correct": True},
                {"id": "b", "text": "B", "is_correct": True},
                {"id": "c", "text": "C", "is_correct": False},
            ],
            difficulty=3,
        )
        db.add(db_question)
        db.commit()

        bad = client.post(f"{API}/study/answer", headers=auth_headers, json={
            "question_id": db_question.id, "selected_answer": "a", "time_spent_seconds": 5,
        })
        good = client.post(f"{API}/study/answer", headers=auth_headers, json={
            "question_id": db_question.id, "selected_answer": '["b", "a"]', "time_spent_seconds": 5,
        })

        assert bad.status_code == 400
        assert good.json()["data"]["is_correct"] is True
        assert db.query(UserAnswer).count() == 1
