import uuid

from sqlalchemy.exc import OperationalError

from app.db.session import get_db
from app.main import app
from fakes import DEFAULT_MODEL, FALLBACK_MODEL, PLACEHOLDER_QUESTIONS, quiz_output, timeout_error


def generation_body(course, **overrides):
    body = {"courseId": course["id"], "numberOfQuestions": 5, "difficulty": "medium"}
    body.update(overrides)
    return body


def test_generate_quiz_returns_requested_questions(client, course, install_llm):
    install_llm(quiz_output())

    r = client.post("/api/quiz/generate", json=generation_body(course, timePerQuestion=45))

    assert r.status_code == 200, r.text
    questions = r.json()
    assert len(questions) == 5
    assert [q["id"] for q in questions] == [1, 2, 3, 4, 5]
    for q in questions:
        assert len(q["options"]) == 4
        assert q["correctAnswer"] in {"A", "B", "C", "D"}
        assert q["timePerQuestion"] == 45
    assert r.headers["X-Model-Used"] == DEFAULT_MODEL


def test_legacy_path_is_an_alias(client, course, install_llm):
    install_llm(quiz_output())

    r = client.post("/api/generate-quiz", json=generation_body(course))

    assert r.status_code == 200
    assert len(r.json()) == 5


def test_missing_difficulty_is_rejected(client, course, install_llm):
    llm = install_llm()

    r = client.post("/api/quiz/generate", json={"courseId": course["id"], "numberOfQuestions": 5})

    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Missing required parameters"
    assert body["details"]["difficulty"] is False
    assert llm.calls == []


def test_unknown_course_is_not_found(client, install_llm):
    install_llm()

    r = client.post(
        "/api/quiz/generate",
        json={"courseId": str(uuid.uuid4()), "numberOfQuestions": 5, "difficulty": "easy"},
    )

    assert r.status_code == 404
    assert r.json()["message"] == "Course not found"


def test_malformed_course_id_is_not_found(client, install_llm):
    install_llm()

    r = client.post("/api/quiz/generate", json={"courseId": "not-an-id", "numberOfQuestions": 5, "difficulty": "easy"})

    assert r.status_code == 404


def test_fallback_model_recorded_after_two_timeouts(client, course, install_llm):
    llm = install_llm(timeout_error(), timeout_error(), quiz_output())

    r = client.post("/api/quiz/generate", json=generation_body(course))

    assert r.status_code == 200
    assert len(r.json()) == 5
    assert r.headers["X-Model-Used"] == FALLBACK_MODEL
    assert llm.models[-1] == FALLBACK_MODEL


def test_persistent_placeholders_are_unprocessable(client, course, install_llm):
    install_llm(quiz_output(PLACEHOLDER_QUESTIONS), quiz_output(PLACEHOLDER_QUESTIONS))

    r = client.post("/api/quiz/generate", json=generation_body(course))

    assert r.status_code == 422
    assert r.json()["message"] == "Unable to generate valid questions"


def test_count_is_clamped(client, course, install_llm):
    llm = install_llm(quiz_output())

    r = client.post("/api/quiz/generate", json=generation_body(course, numberOfQuestions=500))

    assert r.status_code == 200
    assert "exactly 10 multiple choice questions" in llm.calls[0]["prompt"]


def test_missing_api_key_is_a_configuration_error(client, course, install_llm):
    install_llm(configured=False)

    r = client.post("/api/quiz/generate", json=generation_body(course))

    assert r.status_code == 500
    body = r.json()
    assert body["message"] == "Server configuration error"
    assert "stack" in body


def test_database_outage_is_service_unavailable(client, install_llm):
    install_llm()

    def broken_db():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_db] = broken_db

    r = client.post(
        "/api/quiz/generate",
        json={"courseId": str(uuid.uuid4()), "numberOfQuestions": 5, "difficulty": "easy"},
    )

    assert r.status_code == 503
    assert r.json()["message"] == "Database service unavailable"


def save_body(course, **overrides):
    body = {
        "courseId": course["id"],
        "questions": [
            {"question": "Binary search?", "correctAnswer": "B", "userAnswer": "B", "isCorrect": True},
            {"question": "BFS uses?", "answer": "A", "correct": False},
        ],
        "score": 1,
        "totalQuestions": 2,
        "difficulty": "medium",
        "timeSpent": 42,
        "timePerQuestion": 30,
    }
    body.update(overrides)
    return body


def test_save_result_persists_and_returns_history(client, course, auth_headers):
    r = client.post("/api/quiz/save-result", headers=auth_headers, json=save_body(course))

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Quiz saved successfully"
    assert body["quiz"]["courseName"] == "Algorithms"
    assert body["quiz"]["percentageScore"] == 50
    assert len(body["history"]) == 1

    history = client.get("/api/quiz/history", headers=auth_headers).json()
    assert history[0]["id"] == body["quiz"]["id"]
    assert history[0]["timeSpent"] == 42


def test_save_result_applies_question_defaults(client, course, auth_headers, user):
    client.post("/api/quiz/save-result", headers=auth_headers, json=save_body(course))

    r = client.get(f"/api/quiz-history/{user['user']['id']}", headers=auth_headers)

    saved = r.json()["history"][0]["questions"]
    assert saved[1] == {
        "question": "BFS uses?",
        "correctAnswer": "A",
        "userAnswer": "A",
        "isCorrect": False,
        "timeSpent": 30.0,
    }


def test_save_result_validation_messages(client, course, auth_headers):
    r = client.post("/api/quiz/save-result", headers=auth_headers, json=save_body(course, courseId=None))
    assert r.status_code == 400
    assert r.json()["error"] == "Course ID is required"

    r = client.post("/api/quiz/save-result", headers=auth_headers, json=save_body(course, questions=None))
    assert r.json()["error"] == "Questions array is required"

    r = client.post("/api/quiz/save-result", headers=auth_headers, json=save_body(course, difficulty=""))
    assert r.json()["error"] == "Please provide all required quiz data"


def test_save_result_requires_existing_course(client, auth_headers):
    r = client.post(
        "/api/quiz/save-result",
        headers=auth_headers,
        json=save_body({"id": str(uuid.uuid4())}),
    )

    assert r.status_code == 404


def test_save_result_requires_auth(client, course):
    r = client.post("/api/quiz/save-result", json=save_body(course))

    assert r.status_code == 401
