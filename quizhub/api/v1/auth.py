from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.db.session import get_db
from quizhub.services.user_service import user_service
from quizhub.schemas.user_schema import UserRegister, UserLogin, PublicUser, LoginResponse
from quizhub.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post("/register", response_model=PublicUser, status_code=status.HTTP_201_CREATED)
async def register(
        user_data: UserRegister,
        db: AsyncSession = Depends(get_db)
):
    """
    Register a new user with username, email and password
    """
    return await user_service.register(db, user_data)


@router.post("/login", response_model=LoginResponse)
async def login(
        credentials: UserLogin,
        db: AsyncSession = Depends(get_db)
):
    """
    Exchange email and password for the public user record and a session token
    """
    return await user_service.login(db, credentials)
