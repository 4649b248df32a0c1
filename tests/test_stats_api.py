from fakes import signup


def save_quiz(client, headers, course_id, score, total=10):
    r = client.post(
        "/api/quiz/save-result",
        headers=headers,
        json={
            "courseId": course_id,
            "questions": [],
            "score": score,
            "totalQuestions": total,
            "difficulty": "easy",
            "timeSpent": 60,
        },
    )
    assert r.status_code == 200, r.text
    return r.json()["quiz"]


def test_quiz_history_for_the_caller(client, auth_headers, user, course):
    save_quiz(client, auth_headers, course["id"], 6)
    save_quiz(client, auth_headers, course["id"], 9)

    r = client.get(f"/api/quiz-history/{user['user']['id']}", headers=auth_headers)

    assert r.status_code == 200
    body = r.json()
    assert body["totalQuizzes"] == 2
    assert sorted(entry["scorePercentage"] for entry in body["history"]) == [60, 90]
    assert body["stats"] == {"averageScore": 75.0, "totalQuizzes": 2}


def test_quiz_history_of_another_user_is_forbidden(client, auth_headers):
    other = signup(client, name="Eve", email="eve@epsilora.io")

    r = client.get(f"/api/quiz-history/{other['user']['id']}", headers=auth_headers)

    assert r.status_code == 403
    assert r.json()["error"] == "Unauthorized access to quiz history"


def test_empty_history_stats(client, auth_headers, user):
    body = client.get(f"/api/quiz-history/{user['user']['id']}", headers=auth_headers).json()

    assert body == {"history": [], "totalQuizzes": 0, "stats": {"averageScore": 0.0, "totalQuizzes": 0}}


def test_global_stats(client, auth_headers, course):
    assert client.get("/api/quiz/stats").json() == {"totalQuizzes": 0, "averageScore": 0, "latestScore": 0}

    save_quiz(client, auth_headers, course["id"], 5)
    save_quiz(client, auth_headers, course["id"], 8)

    stats = client.get("/api/quiz/stats").json()
    assert stats["totalQuizzes"] == 2
    assert stats["averageScore"] == 65
    assert stats["latestScore"] == 80


def test_zero_question_quiz_does_not_break_stats(client, auth_headers, course):
    save_quiz(client, auth_headers, course["id"], 0, total=0)

    assert client.get("/api/quiz/stats").json()["totalQuizzes"] == 1


def test_dashboard(client, auth_headers, course):
    client.post("/api/courses", headers=auth_headers, json={"name": "Databases"})
    for score in (7, 8, 9):
        save_quiz(client, auth_headers, course["id"], score)

    body = client.get("/api/dashboard", headers=auth_headers).json()

    assert len(body["recentQuizzes"]) == 3
    assert body["recentQuizzes"][0]["courseName"] == "Algorithms"
    progress = {entry["courseName"]: entry for entry in body["courseProgress"]}
    assert progress["Algorithms"]["quizzesTaken"] == 3
    assert progress["Algorithms"]["progress"] == 30
    assert progress["Algorithms"]["averageScore"] == 80.0
    assert progress["Databases"] == {
        "courseId": progress["Databases"]["courseId"],
        "courseName": "Databases",
        "progress": 0,
        "quizzesTaken": 0,
        "averageScore": 0,
    }


def test_dashboard_progress_is_capped(client, auth_headers, course):
    for _ in range(12):
        save_quiz(client, auth_headers, course["id"], 10)

    body = client.get("/api/dashboard", headers=auth_headers).json()

    assert len(body["recentQuizzes"]) == 5
    assert body["courseProgress"][0]["progress"] == 100
