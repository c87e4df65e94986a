from datetime import datetime, timedelta

from quizhub import main


async def _register(client, username):
    response = await client.post("/api/v1/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": "secret123",
    })
    assert response.status_code == 201, response.text
    return response.json()


async def _quiz_with_questions(client, owner_id, count):
    response = await client.post("/api/v1/quizzes/", json={
        "title": "Space",
        "description": "Planets and stars",
        "created_by": owner_id,
    })
    assert response.status_code == 201, response.text
    quiz = response.json()

    questions = []
    for i in range(count):
        response = await client.post("/api/v1/quizzes/questions", json={
            "quiz_id": quiz["id"],
            "question_text": f"Question {i}",
            "question_type": "multiple_choice",
            "order_index": i,
            "answer_options": [
                {"option_text": "yes", "is_correct": True, "order_index": 0},
                {"option_text": "no", "is_correct": False, "order_index": 1},
            ],
        })
        assert response.status_code == 201, response.text
        questions.append(response.json())
    return quiz, questions


async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


async def test_register_and_login(client):
    user = await _register(client, "dana")
    assert "password" not in user and "password_hash" not in user

    response = await client.post("/api/v1/auth/login", json={
        "email": "dana@example.com", "password": "secret123"
    })

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user["id"]
    assert body["token"]


async def test_login_bad_password_is_401(client):
    await _register(client, "dana")

    response = await client.post("/api/v1/auth/login", json={
        "email": "dana@example.com", "password": "nope-nope"
    })

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"


async def test_register_duplicate_email_is_409(client):
    await _register(client, "erin")

    response = await client.post("/api/v1/auth/register", json={
        "username": "erin2", "email": "erin@example.com", "password": "secret123"
    })

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


async def test_register_validation_errors(client):
    response = await client.post("/api/v1/auth/register", json={
        "username": "ab", "email": "not-an-email", "password": "123"
    })

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    fields = {e["field"] for e in error["details"]["validation_errors"]}
    assert fields == {"username", "email", "password"}


async def test_get_user_profile_not_found(client):
    response = await client.get("/api/v1/users/999")

    assert response.status_code == 404
    body = response.json()
    assert body["error"]["code"] == "NOT_FOUND"
    assert body["error"]["path"] == "/api/v1/users/999"
    assert response.headers["X-Correlation-ID"]


async def test_quiz_detail_and_listing(client):
    owner = await _register(client, "author")
    quiz, _ = await _quiz_with_questions(client, owner["id"], 2)

    listing = await client.get("/api/v1/quizzes/")
    detail = await client.get(f"/api/v1/quizzes/{quiz['id']}")

    assert listing.status_code == 200
    assert [q["id"] for q in listing.json()] == [quiz["id"]]
    assert detail.status_code == 200
    body = detail.json()
    assert [q["order_index"] for q in body["questions"]] == [0, 1]
    assert [o["option_text"] for o in body["questions"][0]["answer_options"]] == ["yes", "no"]


async def test_create_question_rejects_empty_text(client):
    owner = await _register(client, "author")
    quiz, _ = await _quiz_with_questions(client, owner["id"], 0)

    response = await client.post("/api/v1/quizzes/questions", json={
        "quiz_id": quiz["id"],
        "question_text": "",
        "question_type": "text",
        "order_index": 0,
    })

    assert response.status_code == 422


async def test_full_attempt_lifecycle(client):
    owner = await _register(client, "author")
    player = await _register(client, "player")
    quiz, questions = await _quiz_with_questions(client, owner["id"], 4)

    response = await client.post("/api/v1/attempts/start", json={
        "user_id": player["id"], "quiz_id": quiz["id"]
    })
    assert response.status_code == 201
    attempt = response.json()
    assert attempt["total_questions"] == 4
    assert attempt["completed_at"] is None

    for question, pick in zip(questions, [0, 0, 0, 1]):
        response = await client.post("/api/v1/attempts/answers", json={
            "user_id": player["id"],
            "question_id": question["id"],
            "selected_option_id": question["answer_options"][pick]["id"],
        })
        assert response.status_code == 201, response.text
        assert response.json()["is_correct"] is (pick == 0)

    response = await client.post("/api/v1/attempts/complete", json={"attempt_id": attempt["id"]})
    assert response.status_code == 200
    completed = response.json()
    assert completed["score"] == 75.0
    assert completed["completed_at"] is not None

    assert datetime.fromisoformat(completed["completed_at"].replace("Z", "+00:00")).utcoffset() == timedelta(0)

    again = await client.post("/api/v1/attempts/complete", json={"attempt_id": attempt["id"]})
    assert again.status_code == 409
    error = again.json()["error"]
    assert error["code"] == "ALREADY_COMPLETED"
    assert error["details"]["attempt_id"] == attempt["id"]

    history = await client.get(f"/api/v1/users/{player['id']}/attempts")
    assert [a["id"] for a in history.json()] == [attempt["id"]]

    board = await client.get(f"/api/v1/quizzes/{quiz['id']}/leaderboard")
    assert board.status_code == 200
    entries = board.json()
    assert len(entries) == 1
    assert entries[0]["username"] == "player"
    assert entries[0]["rank"] == 1
    assert entries[0]["score"] == 75.0


async def test_submit_answer_requires_some_answer(client):
    response = await client.post("/api/v1/attempts/answers", json={
        "user_id": 1, "question_id": 1
    })

    assert response.status_code == 422


async def test_submit_answer_before_start_is_409(client):
    owner = await _register(client, "author")
    quiz, questions = await _quiz_with_questions(client, owner["id"], 1)

    response = await client.post("/api/v1/attempts/answers", json={
        "user_id": owner["id"],
        "question_id": questions[0]["id"],
        "selected_option_id": questions[0]["answer_options"][0]["id"],
    })

    assert response.status_code == 409


async def test_lifespan_configures_logging(monkeypatch):
    calls = []

    async def fake_init_db():
        calls.append("init_db")

    monkeypatch.setattr(main, "setup_logging", lambda: calls.append("setup_logging"))
    monkeypatch.setattr(main, "init_db", fake_init_db)

    async with main.lifespan(main.app):
        pass

    assert calls == ["setup_logging", "init_db"]
