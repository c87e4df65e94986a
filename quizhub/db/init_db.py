import asyncio

from quizhub.db.session import engine, init_db, AsyncSessionLocal
from quizhub.db.base import Base
from quizhub.db.utils import check_database_connection, get_table_info
from quizhub.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

TABLES = ["users", "quizzes", "questions", "answer_options", "quiz_attempts", "user_answers"]


async def create_tables():
    try:
        await init_db()
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create database tables: {e}")
        raise


async def drop_tables():
    import quizhub.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped successfully")
    except Exception as e:
        logger.error(f"Failed to drop database tables: {e}")
        raise


async def reset_tables():
    await drop_tables()
    await create_tables()
    logger.info("Database tables reset successfully")


async def check_database_health() -> bool:
    try:
        async with AsyncSessionLocal() as session:
            if not await check_database_connection(session):
                logger.error("Database connection failed")
                return False

            for table in TABLES:
                info = await get_table_info(session, table)
                logger.info(f"{table}: {info['row_count']} rows, status: {info['status']}")
            logger.info("Database health check completed successfully")
            return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_tables())
