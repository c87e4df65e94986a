from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_

from quizhub.models.user import User
from quizhub.db.utils import BaseRepository
from quizhub.schemas.user_schema import UserRegister, UserLogin, PublicUser, LoginResponse
from quizhub.core.security import get_password_hash, verify_password, create_access_token
from quizhub.utils.exceptions import NotFoundError, DatabaseError, AuthenticationError, ConflictError
from quizhub.core.logging import get_logger, log_authentication

logger = get_logger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self):
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(
                select(User).where(User.email == email.lower())
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Error getting user by email {email}: {e}")
            raise DatabaseError("Failed to get user by email")

    async def find_conflicting(self, db: AsyncSession, username: str, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(or_(User.username == username, User.email == email.lower()))
        )
        return result.scalars().first()


class UserService:
    """Registration, login and profile lookups"""

    def __init__(self):
        self.user_repo = UserRepository()

    async def register(self, db: AsyncSession, user_data: UserRegister) -> PublicUser:
        """Create a user; username and email must both be unused"""
        existing = await self.user_repo.find_conflicting(db, user_data.username, user_data.email)
        if existing:
            field = "email" if existing.email == user_data.email.lower() else "username"
            logger.warning(f"Registration rejected, {field} already taken")
            raise ConflictError(f"A user with this {field} already exists", resource_type="user")

        user = await self.user_repo.create(
            db,
            username=user_data.username,
            email=user_data.email.lower(),
            password_hash=get_password_hash(user_data.password)
        )
        await db.commit()

        logger.info(f"Registered user {user.id} ({user.username})")
        return PublicUser.model_validate(user)

    async def login(self, db: AsyncSession, credentials: UserLogin) -> LoginResponse:
        user = await self.user_repo.get_by_email(db, credentials.email)

        if not user or not verify_password(credentials.password, user.password_hash):
            log_authentication(logger, False, email=credentials.email)
            raise AuthenticationError("Invalid email or password")

        token = create_access_token({"sub": str(user.id), "username": user.username})
        log_authentication(logger, True, email=user.email, user_id=user.id)

        return LoginResponse(user=PublicUser.model_validate(user), token=token)

    async def get_user_profile(self, db: AsyncSession, user_id: int) -> PublicUser:
        """Get user profile by ID"""
        try:
            user = await self.user_repo.get_by_id_or_404(db, user_id)
            return PublicUser.model_validate(user)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Error getting user profile {user_id}: {e}")
            raise DatabaseError("Failed to get user profile")


user_service = UserService()
