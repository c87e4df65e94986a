from typing import Dict, Optional
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from quizhub.models.question import Question
from quizhub.models.answer_option import AnswerOption
from quizhub.models.quiz_attempt import QuizAttempt
from quizhub.models.user_answer import UserAnswer
from quizhub.db.base import utcnow, as_utc
from quizhub.db.utils import BaseRepository
from quizhub.schemas.attempt_schema import (
    StartQuizRequest, SubmitAnswerRequest, CompleteQuizRequest,
    QuizAttemptResponse, UserAnswerResponse
)
from quizhub.services.user_service import UserRepository
from quizhub.services.quiz_service import QuizRepository, QuestionRepository, AnswerOptionRepository
from quizhub.utils.exceptions import ConflictError, ValidationError, AlreadyCompletedError
from quizhub.core.logging import get_logger, get_performance_logger

logger = get_logger(__name__)
performance_logger = get_performance_logger(__name__)

SCORE_QUANTUM = Decimal("0.01")


def calculate_score(correct_count: int, total_questions: int) -> Decimal:
    """Percentage of correct answers, rounded half-up to two decimals"""
    if total_questions <= 0:
        return Decimal("0.00")
    score = Decimal(correct_count) * 100 / Decimal(total_questions)
    return score.quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


def normalize_answer_text(text: Optional[str]) -> str:
    return " ".join((text or "").split()).casefold()


class QuizAttemptRepository(BaseRepository[QuizAttempt]):
    def __init__(self):
        super().__init__(QuizAttempt)

    async def get_latest_in_progress(self, db: AsyncSession, user_id: int, quiz_id: int) -> Optional[QuizAttempt]:
        result = await db.execute(
            select(QuizAttempt)
            .where(
                QuizAttempt.user_id == user_id,
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.completed_at.is_(None)
            )
            .order_by(QuizAttempt.started_at.desc(), QuizAttempt.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mark_completed(self, db: AsyncSession, attempt_id: int, score: Decimal, completed_at: datetime) -> bool:
        """Set score and completed_at only if the attempt is still open; False when it was not"""
        result = await db.execute(
            update(QuizAttempt)
            .where(QuizAttempt.id == attempt_id, QuizAttempt.completed_at.is_(None))
            .values(score=score, completed_at=completed_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class UserAnswerRepository(BaseRepository[UserAnswer]):
    def __init__(self):
        super().__init__(UserAnswer)

    async def latest_correctness_by_question(self, db: AsyncSession, attempt: QuizAttempt) -> Dict[int, bool]:
        """
        Correctness of the most recent answer to each question in this attempt.

        Only questions that already existed when the attempt started count,
        matching the total_questions frozen at start.
        """
        result = await db.execute(
            select(UserAnswer.question_id, UserAnswer.is_correct)
            .join(Question, Question.id == UserAnswer.question_id)
            .where(
                UserAnswer.attempt_id == attempt.id,
                Question.quiz_id == attempt.quiz_id,
                Question.created_at <= attempt.started_at
            )
            .order_by(UserAnswer.answered_at, UserAnswer.id)
        )
        latest = {}
        for question_id, is_correct in result.all():
            latest[question_id] = is_correct
        return latest


class AttemptService:
    """Start, answer and complete quiz attempts"""

    def __init__(self):
        self.user_repo = UserRepository()
        self.quiz_repo = QuizRepository()
        self.question_repo = QuestionRepository()
        self.option_repo = AnswerOptionRepository()
        self.attempt_repo = QuizAttemptRepository()
        self.answer_repo = UserAnswerRepository()

    async def start_quiz(self, db: AsyncSession, request: StartQuizRequest) -> QuizAttemptResponse:
        await self.user_repo.get_by_id_or_404(db, request.user_id)
        await self.quiz_repo.get_by_id_or_404(db, request.quiz_id)

        total_questions = await self.question_repo.count_for_quiz(db, request.quiz_id)

        attempt = await self.attempt_repo.create(
            db,
            user_id=request.user_id,
            quiz_id=request.quiz_id,
            score=Decimal("0.00"),
            total_questions=total_questions,
            started_at=utcnow(),
            completed_at=None
        )
        await db.commit()

        logger.info(
            f"User {request.user_id} started attempt {attempt.id} on quiz {request.quiz_id} "
            f"({total_questions} questions)"
        )
        return QuizAttemptResponse.model_validate(attempt)

    async def _resolve_attempt(self, db: AsyncSession, request: SubmitAnswerRequest, question: Question) -> QuizAttempt:
        if request.attempt_id is not None:
            attempt = await self.attempt_repo.get_by_id_or_404(db, request.attempt_id)
            if attempt.user_id != request.user_id or attempt.quiz_id != question.quiz_id:
                raise ValidationError(
                    f"Attempt {attempt.id} does not belong to this user and quiz",
                    details={"attempt_id": attempt.id, "question_id": question.id}
                )
            if attempt.is_completed:
                raise AlreadyCompletedError(attempt.id)
            return attempt

        attempt = await self.attempt_repo.get_latest_in_progress(db, request.user_id, question.quiz_id)
        if attempt is None:
            raise ConflictError(
                f"User {request.user_id} has no attempt in progress on quiz {question.quiz_id}",
                resource_type="quiz_attempt"
            )
        return attempt

    async def _is_text_answer_accepted(self, db: AsyncSession, question: Question, answer_text: Optional[str]) -> bool:
        result = await db.execute(
            select(AnswerOption.option_text).where(
                AnswerOption.question_id == question.id,
                AnswerOption.is_correct.is_(True)
            )
        )
        accepted = {normalize_answer_text(text) for text in result.scalars().all()}
        return bool(accepted) and normalize_answer_text(answer_text) in accepted

    async def submit_answer(self, db: AsyncSession, request: SubmitAnswerRequest) -> UserAnswerResponse:
        """
        Record one answer and grade it.

        A selected option is correct iff it is flagged correct. A free-text
        answer is correct iff it matches one of the question's correct
        options, ignoring case and surrounding whitespace.
        """
        await self.user_repo.get_by_id_or_404(db, request.user_id)
        question = await self.question_repo.get_by_id_or_404(db, request.question_id)
        attempt = await self._resolve_attempt(db, request, question)
        if as_utc(question.created_at) > as_utc(attempt.started_at):
            raise ValidationError(
                f"Question {question.id} was added after attempt {attempt.id} started",
                details={"question_id": question.id, "attempt_id": attempt.id}
            )

        if request.selected_option_id is not None:
            option = await self.option_repo.get_by_id_or_404(db, request.selected_option_id)
            if option.question_id != question.id:
                raise ValidationError(
                    f"Answer option {option.id} does not belong to question {question.id}",
                    details={"selected_option_id": option.id, "question_id": question.id}
                )
            is_correct = option.is_correct
        elif question.question_type.is_choice:
            raise ValidationError(
                f"A {question.question_type.value} question must be answered with selected_option_id",
                details={"question_id": question.id}
            )
        else:
            is_correct = await self._is_text_answer_accepted(db, question, request.answer_text)

        answer = await self.answer_repo.create(
            db,
            user_id=request.user_id,
            question_id=question.id,
            attempt_id=attempt.id,
            answer_text=request.answer_text,
            selected_option_id=request.selected_option_id,
            is_correct=is_correct,
            answered_at=utcnow()
        )
        await db.commit()

        logger.info(
            f"User {request.user_id} answered question {question.id} in attempt {attempt.id} "
            f"(correct={is_correct})"
        )
        return UserAnswerResponse.model_validate(answer)

    async def complete_quiz(self, db: AsyncSession, request: CompleteQuizRequest) -> QuizAttemptResponse:
        """
        Finalise an attempt and store its score.

        The score is the share of the quiz's questions whose latest answer in
        this attempt is correct. completed_at is written with a conditional
        update, so of two concurrent completions only one succeeds; the
        other gets AlreadyCompletedError.
        """
        attempt_id = request.attempt_id
        attempt = await self.attempt_repo.get_by_id_or_404(db, attempt_id)
        if attempt.is_completed:
            raise AlreadyCompletedError(attempt_id)

        with performance_logger.measure_time("score_attempt", attempt_id=attempt_id):
            latest = await self.answer_repo.latest_correctness_by_question(db, attempt)
            correct_count = sum(1 for is_correct in latest.values() if is_correct)
            score = calculate_score(correct_count, attempt.total_questions)

        if not await self.attempt_repo.mark_completed(db, attempt_id, score, utcnow()):
            # rollback expires the loaded attempt, so only attempt_id is safe to read here
            await db.rollback()
            logger.info(f"Attempt {attempt_id} was completed by a concurrent request")
            raise AlreadyCompletedError(attempt_id)

        await db.commit()
        await db.refresh(attempt)

        logger.info(
            f"Attempt {attempt.id} completed: {correct_count}/{attempt.total_questions} correct, score {score}"
        )
        return QuizAttemptResponse.model_validate(attempt)


attempt_service = AttemptService()
