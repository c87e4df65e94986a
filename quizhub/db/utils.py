from typing import Optional, Type, TypeVar, Generic, List, Dict, Any, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, text
from sqlalchemy.exc import IntegrityError

from quizhub.db.base import BaseModel
from quizhub.utils.exceptions import DatabaseError, NotFoundError, ConflictError
from quizhub.core.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def create(self, db: AsyncSession, **kwargs) -> ModelType:
        """Create a new record"""
        try:
            db_obj = self.model(**kwargs)
            db.add(db_obj)
            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            await db.rollback()
            logger.error(f"Database integrity error creating {self.model.__name__}: {e}")
            raise ConflictError(
                f"Failed to create {self.model.__name__}: conflicting data",
                resource_type=self.model.__tablename__
            )
        except Exception as e:
            await db.rollback()
            logger.error(f"Unexpected error creating {self.model.__name__}: {e}")
            raise DatabaseError(f"Failed to create {self.model.__name__}")

    async def get_by_id(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        """Get record by ID"""
        try:
            result = await db.execute(select(self.model).where(self.model.id == id))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Error getting {self.model.__name__} by ID {id}: {e}")
            raise DatabaseError(f"Failed to get {self.model.__name__}")

    async def get_by_id_or_404(self, db: AsyncSession, id: int) -> ModelType:
        """Get record by ID or raise NotFoundError"""
        obj = await self.get_by_id(db, id)
        if not obj:
            raise NotFoundError(
                f"{self.model.__name__} {id} not found",
                resource_type=self.model.__tablename__
            )
        return obj

    async def get_multi(
            self,
            db: AsyncSession,
            filters: Optional[Dict[str, Any]] = None,
            order_by: Optional[Sequence[Any]] = None,
            skip: int = 0,
            limit: Optional[int] = None
    ) -> List[ModelType]:
        """Get multiple records with optional filtering and ordering"""
        try:
            query = select(self.model)

            if filters:
                for key, value in filters.items():
                    if hasattr(self.model, key):
                        query = query.where(getattr(self.model, key) == value)

            if order_by:
                query = query.order_by(*order_by)

            if skip:
                query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)

            result = await db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error getting multiple {self.model.__name__}: {e}")
            raise DatabaseError(f"Failed to get {self.model.__name__} records")

    async def count(self, db: AsyncSession, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count records with optional filtering"""
        try:
            query = select(func.count(self.model.id))

            if filters:
                for key, value in filters.items():
                    if hasattr(self.model, key):
                        query = query.where(getattr(self.model, key) == value)

            result = await db.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise DatabaseError(f"Failed to count {self.model.__name__} records")


async def check_database_connection(db: AsyncSession) -> bool:
    """Check if database connection is working"""
    try:
        await db.execute(select(1))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False


async def get_table_info(db: AsyncSession, table_name: str) -> Dict[str, Any]:
    """Get row count information about a database table"""
    try:
        result = await db.execute(text(f"SELECT COUNT(*) FROM {table_name}"))
        row_count = result.scalar()

        return {
            "table_name": table_name,
            "row_count": row_count,
            "status": "healthy"
        }
    except Exception as e:
        logger.error(f"Error getting table info for {table_name}: {e}")
        return {
            "table_name": table_name,
            "row_count": 0,
            "status": "error",
            "error": str(e)
        }
