import pytest

from quizhub.schemas.attempt_schema import StartQuizRequest, SubmitAnswerRequest, CompleteQuizRequest
from quizhub.services.attempt_service import attempt_service
from quizhub.services.reporting_service import reporting_service
from quizhub.utils.exceptions import NotFoundError
from tests.helpers import correct_option_id, wrong_option_id


async def _play(db, user_id, quiz_id, questions, correctness, complete=True):
    attempt = await attempt_service.start_quiz(db, StartQuizRequest(user_id=user_id, quiz_id=quiz_id))
    for question, correct in zip(questions, correctness):
        option_id = correct_option_id(question) if correct else wrong_option_id(question)
        await attempt_service.submit_answer(db, SubmitAnswerRequest(
            user_id=user_id, question_id=question.id, selected_option_id=option_id, attempt_id=attempt.id
        ))
    if complete:
        return await attempt_service.complete_quiz(db, CompleteQuizRequest(attempt_id=attempt.id))
    return attempt


async def test_get_quizzes_lists_all(db, make_user, make_quiz):
    owner = await make_user()
    await make_quiz(owner.id, "First")
    await make_quiz(owner.id, "Second")

    quizzes = await reporting_service.get_quizzes(db)

    assert sorted(q.title for q in quizzes) == ["First", "Second"]


async def test_get_quiz_by_id_orders_questions(db, make_user, make_quiz, make_choice_question):
    owner = await make_user()
    quiz = await make_quiz(owner.id)
    await make_choice_question(quiz.id, 2, text="third")
    await make_choice_question(quiz.id, 0, text="first")
    await make_choice_question(quiz.id, 1, text="second")

    detail = await reporting_service.get_quiz_by_id(db, quiz.id)

    assert detail.id == quiz.id
    assert [q.question_text for q in detail.questions] == ["first", "second", "third"]
    for question in detail.questions:
        assert [o.order_index for o in question.answer_options] == [0, 1, 2]


async def test_get_quiz_by_id_missing(db):
    with pytest.raises(NotFoundError):
        await reporting_service.get_quiz_by_id(db, 77)


async def test_get_user_quiz_attempts(db, make_user, make_quiz, make_choice_question):
    owner = await make_user()
    quiz = await make_quiz(owner.id)
    questions = [await make_choice_question(quiz.id, i) for i in range(2)]
    player = await make_user()
    other = await make_user()

    await _play(db, player.id, quiz.id, questions, [True, True])
    await _play(db, player.id, quiz.id, questions, [False], complete=False)
    await _play(db, other.id, quiz.id, questions, [True])

    attempts = await reporting_service.get_user_quiz_attempts(db, player.id)

    assert len(attempts) == 2
    assert {a.user_id for a in attempts} == {player.id}


async def test_get_user_quiz_attempts_unknown_user(db):
    with pytest.raises(NotFoundError):
        await reporting_service.get_user_quiz_attempts(db, 31337)


async def test_leaderboard_ranks_completed_attempts(db, make_user, make_quiz, make_choice_question):
    owner = await make_user()
    quiz = await make_quiz(owner.id)
    questions = [await make_choice_question(quiz.id, i) for i in range(4)]
    low = await make_user("low")
    high = await make_user("high")
    mid = await make_user("mid")
    idle = await make_user("idle")

    await _play(db, low.id, quiz.id, questions, [True, False, False, False])
    await _play(db, high.id, quiz.id, questions, [True, True, True, True])
    await _play(db, mid.id, quiz.id, questions, [True, True, True, False])
    await _play(db, idle.id, quiz.id, questions, [True, True, True, True], complete=False)

    board = await reporting_service.get_quiz_leaderboard(db, quiz.id)

    assert [e.username for e in board] == ["high", "mid", "low"]
    assert [e.score for e in board] == [100.0, 75.0, 25.0]
    assert [e.rank for e in board] == [1, 2, 3]
    assert all(e.completed_at is not None for e in board)


async def test_leaderboard_ties_go_to_earliest_completion(db, make_user, make_quiz, make_choice_question):
    owner = await make_user()
    quiz = await make_quiz(owner.id)
    questions = [await make_choice_question(quiz.id, i) for i in range(2)]
    early = await make_user("early")
    late = await make_user("late")

    await _play(db, early.id, quiz.id, questions, [True, False])
    await _play(db, late.id, quiz.id, questions, [False, True])

    board = await reporting_service.get_quiz_leaderboard(db, quiz.id)

    assert [e.username for e in board] == ["early", "late"]


async def test_leaderboard_limit(db, make_user, make_quiz, make_choice_question):
    owner = await make_user()
    quiz = await make_quiz(owner.id)
    questions = [await make_choice_question(quiz.id, 0)]
    for _ in range(3):
        player = await make_user()
        await _play(db, player.id, quiz.id, questions, [True])

    board = await reporting_service.get_quiz_leaderboard(db, quiz.id, limit=2)

    assert len(board) == 2


async def test_leaderboard_unknown_quiz(db):
    with pytest.raises(NotFoundError):
        await reporting_service.get_quiz_leaderboard(db, 404)
