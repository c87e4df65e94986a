from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.db.session import get_db
from quizhub.core.logging import get_logger
from quizhub.services.quiz_service import quiz_service
from quizhub.services.reporting_service import reporting_service
from quizhub.schemas.quiz_schema import (
    QuizCreate, QuizResponse, QuizWithQuestions, QuestionCreate, QuestionResponse
)
from quizhub.schemas.attempt_schema import LeaderboardEntry

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=List[QuizResponse])
async def get_quizzes(db: AsyncSession = Depends(get_db)):
    quizzes = await reporting_service.get_quizzes(db)
    logger.info(f"Retrieved {len(quizzes)} quizzes")
    return quizzes


@router.post("/", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(
        quiz_data: QuizCreate,
        db: AsyncSession = Depends(get_db)
):
    return await quiz_service.create_quiz(db, quiz_data)


@router.post("/questions", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
        question_data: QuestionCreate,
        db: AsyncSession = Depends(get_db)
):
    """
    Add a question, with its answer options, to an existing quiz
    """
    return await quiz_service.create_question(db, question_data)


@router.get("/{quiz_id}", response_model=QuizWithQuestions)
async def get_quiz(
        quiz_id: int,
        db: AsyncSession = Depends(get_db)
):
    """
    Get a quiz with its ordered questions and answer options
    """
    return await reporting_service.get_quiz_by_id(db, quiz_id)


@router.get("/{quiz_id}/leaderboard", response_model=List[LeaderboardEntry])
async def get_quiz_leaderboard(
        quiz_id: int,
        db: AsyncSession = Depends(get_db),
        limit: Optional[int] = Query(None, ge=1, le=500)
):
    """
    Completed attempts on a quiz ranked by score

    Args:
        limit: Maximum number of entries (defaults to LEADERBOARD_DEFAULT_LIMIT)
    """
    return await reporting_service.get_quiz_leaderboard(db, quiz_id, limit=limit)
