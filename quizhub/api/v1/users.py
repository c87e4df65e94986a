from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.db.session import get_db
from quizhub.services.user_service import user_service
from quizhub.services.reporting_service import reporting_service
from quizhub.schemas.user_schema import PublicUser
from quizhub.schemas.attempt_schema import QuizAttemptResponse

router = APIRouter()


@router.get("/{user_id}", response_model=PublicUser)
async def get_user_profile(
        user_id: int,
        db: AsyncSession = Depends(get_db)
):
    return await user_service.get_user_profile(db, user_id)


@router.get("/{user_id}/attempts", response_model=List[QuizAttemptResponse])
async def get_user_quiz_attempts(
        user_id: int,
        db: AsyncSession = Depends(get_db)
):
    """
    All attempts made by a user, newest first
    """
    return await reporting_service.get_user_quiz_attempts(db, user_id)
