from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from quizhub.models.quiz import Quiz
from quizhub.models.user import User
from quizhub.models.quiz_attempt import QuizAttempt
from quizhub.schemas.quiz_schema import (
    QuizResponse, QuizWithQuestions, QuizQuestionDetail, AnswerOptionResponse
)
from quizhub.schemas.attempt_schema import QuizAttemptResponse, LeaderboardEntry
from quizhub.services.user_service import UserRepository
from quizhub.services.quiz_service import QuizRepository, QuestionRepository, AnswerOptionRepository
from quizhub.services.attempt_service import QuizAttemptRepository
from quizhub.core.config import settings
from quizhub.core.logging import get_logger

logger = get_logger(__name__)


class ReportingService:
    """Read-side projections: quiz listings, quiz detail, attempt history, leaderboards"""

    def __init__(self):
        self.user_repo = UserRepository()
        self.quiz_repo = QuizRepository()
        self.question_repo = QuestionRepository()
        self.option_repo = AnswerOptionRepository()
        self.attempt_repo = QuizAttemptRepository()

    async def get_quizzes(self, db: AsyncSession) -> List[QuizResponse]:
        quizzes = await self.quiz_repo.get_multi(
            db, order_by=[Quiz.created_at.desc(), Quiz.id.desc()]
        )
        return [QuizResponse.model_validate(q) for q in quizzes]

    async def get_quiz_by_id(self, db: AsyncSession, quiz_id: int) -> QuizWithQuestions:
        """Quiz with its questions and their options, both sorted by order_index"""
        quiz = await self.quiz_repo.get_by_id_or_404(db, quiz_id)
        questions = await self.question_repo.get_for_quiz(db, quiz_id)
        options = await self.option_repo.get_for_questions(db, [q.id for q in questions])

        options_by_question = {q.id: [] for q in questions}
        for option in options:
            options_by_question[option.question_id].append(AnswerOptionResponse.model_validate(option))

        return QuizWithQuestions(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            created_by=quiz.created_by,
            created_at=quiz.created_at,
            updated_at=quiz.updated_at,
            questions=[
                QuizQuestionDetail(
                    id=q.id,
                    question_text=q.question_text,
                    question_type=q.question_type,
                    order_index=q.order_index,
                    answer_options=options_by_question[q.id]
                )
                for q in questions
            ]
        )

    async def get_user_quiz_attempts(self, db: AsyncSession, user_id: int) -> List[QuizAttemptResponse]:
        await self.user_repo.get_by_id_or_404(db, user_id)

        attempts = await self.attempt_repo.get_multi(
            db,
            filters={"user_id": user_id},
            order_by=[QuizAttempt.started_at.desc(), QuizAttempt.id.desc()]
        )
        return [QuizAttemptResponse.model_validate(a) for a in attempts]

    async def get_quiz_leaderboard(
            self,
            db: AsyncSession,
            quiz_id: int,
            limit: Optional[int] = None
    ) -> List[LeaderboardEntry]:
        """
        Completed attempts ranked by score.

        Ties go to the attempt completed first, then to the lower attempt id.
        In-progress attempts are left out since their score is not final.
        """
        await self.quiz_repo.get_by_id_or_404(db, quiz_id)

        stmt = (
            select(QuizAttempt, User.username)
            .join(User, User.id == QuizAttempt.user_id)
            .where(QuizAttempt.quiz_id == quiz_id, QuizAttempt.completed_at.is_not(None))
            .order_by(QuizAttempt.score.desc(), QuizAttempt.completed_at.asc(), QuizAttempt.id.asc())
            .limit(limit or settings.LEADERBOARD_DEFAULT_LIMIT)
        )
        result = await db.execute(stmt)

        entries = []
        for rank, (attempt, username) in enumerate(result.all(), 1):
            entries.append(LeaderboardEntry(
                id=attempt.id,
                user_id=attempt.user_id,
                quiz_id=attempt.quiz_id,
                score=attempt.score,
                total_questions=attempt.total_questions,
                completed_at=attempt.completed_at,
                started_at=attempt.started_at,
                rank=rank,
                username=username
            ))

        logger.debug(f"Leaderboard for quiz {quiz_id}: {len(entries)} entries")
        return entries


reporting_service = ReportingService()
