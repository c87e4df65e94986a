from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.db.session import get_db
from quizhub.services.attempt_service import attempt_service
from quizhub.schemas.attempt_schema import (
    StartQuizRequest, SubmitAnswerRequest, CompleteQuizRequest,
    QuizAttemptResponse, UserAnswerResponse
)

router = APIRouter()


@router.post("/start", response_model=QuizAttemptResponse, status_code=status.HTTP_201_CREATED)
async def start_quiz(
        request: StartQuizRequest,
        db: AsyncSession = Depends(get_db)
):
    return await attempt_service.start_quiz(db, request)


@router.post("/answers", response_model=UserAnswerResponse, status_code=status.HTTP_201_CREATED)
async def submit_answer(
        request: SubmitAnswerRequest,
        db: AsyncSession = Depends(get_db)
):
    """
    Record an answer in the user's attempt and grade it
    """
    return await attempt_service.submit_answer(db, request)


@router.post("/complete", response_model=QuizAttemptResponse)
async def complete_quiz(
        request: CompleteQuizRequest,
        db: AsyncSession = Depends(get_db)
):
    """
    Finalise an attempt; completing the same attempt twice returns 409
    """
    return await attempt_service.complete_quiz(db, request)
