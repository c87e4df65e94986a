from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from quizhub.models.quiz import Quiz
from quizhub.models.question import Question, QuestionType
from quizhub.models.answer_option import AnswerOption
from quizhub.db.utils import BaseRepository
from quizhub.schemas.quiz_schema import (
    QuizCreate, QuizResponse, QuestionCreate, QuestionResponse,
    AnswerOptionCreate, AnswerOptionResponse
)
from quizhub.services.user_service import UserRepository
from quizhub.utils.exceptions import ConflictError, ValidationError
from quizhub.core.logging import get_logger

logger = get_logger(__name__)


class QuizRepository(BaseRepository[Quiz]):
    def __init__(self):
        super().__init__(Quiz)


class QuestionRepository(BaseRepository[Question]):
    def __init__(self):
        super().__init__(Question)

    async def get_for_quiz(self, db: AsyncSession, quiz_id: int) -> List[Question]:
        result = await db.execute(
            select(Question)
            .where(Question.quiz_id == quiz_id)
            .order_by(Question.order_index, Question.id)
        )
        return list(result.scalars().all())

    async def count_for_quiz(self, db: AsyncSession, quiz_id: int) -> int:
        return await self.count(db, filters={"quiz_id": quiz_id})

    async def order_index_taken(self, db: AsyncSession, quiz_id: int, order_index: int) -> bool:
        result = await db.execute(
            select(Question.id).where(
                Question.quiz_id == quiz_id,
                Question.order_index == order_index
            )
        )
        return result.first() is not None


class AnswerOptionRepository(BaseRepository[AnswerOption]):
    def __init__(self):
        super().__init__(AnswerOption)

    async def get_for_questions(self, db: AsyncSession, question_ids: List[int]) -> List[AnswerOption]:
        if not question_ids:
            return []
        result = await db.execute(
            select(AnswerOption)
            .where(AnswerOption.question_id.in_(question_ids))
            .order_by(AnswerOption.question_id, AnswerOption.order_index, AnswerOption.id)
        )
        return list(result.scalars().all())


def validate_answer_options(question_type: QuestionType, options: Optional[List[AnswerOptionCreate]]) -> None:
    """
    Check the option set of a new question.

    Choice questions need exactly one correct option; true/false questions
    carry exactly two options. Text questions may carry correct options,
    which act as accepted answers for free-text grading.
    """
    options = options or []

    order_indexes = [o.order_index for o in options]
    if len(order_indexes) != len(set(order_indexes)):
        raise ValidationError(
            "Answer option order_index values must be unique within a question",
            details={"order_indexes": order_indexes}
        )

    if not question_type.is_choice:
        return

    if question_type == QuestionType.TRUE_FALSE and len(options) != 2:
        raise ValidationError(
            "A true_false question requires exactly 2 answer options",
            details={"option_count": len(options)}
        )
    if len(options) < 2:
        raise ValidationError(
            f"A {question_type.value} question requires at least 2 answer options",
            details={"option_count": len(options)}
        )

    correct_count = sum(1 for o in options if o.is_correct)
    if correct_count != 1:
        raise ValidationError(
            f"A {question_type.value} question requires exactly one correct option",
            details={"correct_count": correct_count}
        )


class QuizService:
    """Authoring of quizzes and their questions"""

    def __init__(self):
        self.user_repo = UserRepository()
        self.quiz_repo = QuizRepository()
        self.question_repo = QuestionRepository()
        self.option_repo = AnswerOptionRepository()

    async def create_quiz(self, db: AsyncSession, quiz_data: QuizCreate) -> QuizResponse:
        await self.user_repo.get_by_id_or_404(db, quiz_data.created_by)

        quiz = await self.quiz_repo.create(
            db,
            title=quiz_data.title,
            description=quiz_data.description,
            created_by=quiz_data.created_by
        )
        await db.commit()

        logger.info(f"Created quiz {quiz.id} for user {quiz.created_by}")
        return QuizResponse.model_validate(quiz)

    async def create_question(self, db: AsyncSession, question_data: QuestionCreate) -> QuestionResponse:
        """
        Create a question together with its answer options.

        The question row and every option row are flushed in the same
        session and committed once; any failure rolls the whole unit back
        so no question is left without its options.

        Args:
            db: Database session
            question_data: Question payload with optional nested options

        Returns:
            The stored question with its options sorted by order_index
        """
        await self.quiz_repo.get_by_id_or_404(db, question_data.quiz_id)
        validate_answer_options(question_data.question_type, question_data.answer_options)

        if await self.question_repo.order_index_taken(db, question_data.quiz_id, question_data.order_index):
            raise ConflictError(
                f"Quiz {question_data.quiz_id} already has a question at order_index {question_data.order_index}",
                resource_type="question"
            )

        try:
            question = await self.question_repo.create(
                db,
                quiz_id=question_data.quiz_id,
                question_text=question_data.question_text,
                question_type=question_data.question_type,
                order_index=question_data.order_index
            )

            options = []
            for option_data in sorted(question_data.answer_options or [], key=lambda o: o.order_index):
                option = await self.option_repo.create(
                    db,
                    question_id=question.id,
                    option_text=option_data.option_text,
                    is_correct=option_data.is_correct,
                    order_index=option_data.order_index
                )
                options.append(option)

            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create question for quiz {question_data.quiz_id}: {e}")
            raise

        logger.info(f"Created question {question.id} with {len(options)} options in quiz {question.quiz_id}")

        return QuestionResponse(
            id=question.id,
            quiz_id=question.quiz_id,
            question_text=question.question_text,
            question_type=question.question_type,
            order_index=question.order_index,
            created_at=question.created_at,
            answer_options=[AnswerOptionResponse.model_validate(o) for o in options]
        )


quiz_service = QuizService()
