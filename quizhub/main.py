from datetime import datetime, timezone
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from quizhub.core.config import settings
from quizhub.core.logging import get_logger, setup_logging
from quizhub.db.session import init_db
from quizhub.middleware.monitoring_middleware import RequestLoggingMiddleware
from quizhub.utils.error_handler import setup_exception_handlers
from quizhub.schemas.health_schema import HealthCheck
from quizhub.api.v1 import auth, users, quizzes, attempts

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting QuizHub API")

    await init_db()
    logger.info("Database tables created successfully")

    yield
    logger.info("Shutting down QuizHub API")


app = FastAPI(
    lifespan=lifespan,
    title="QuizHub API",
    description="Quiz authoring, attempts, scoring and leaderboards",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

setup_exception_handlers(app)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(quizzes.router, prefix="/api/v1/quizzes", tags=["Quizzes"])
app.include_router(attempts.router, prefix="/api/v1/attempts", tags=["Quiz Attempts"])


@app.get("/health", response_model=HealthCheck)
async def health_check():
    return HealthCheck(status="ok", timestamp=datetime.now(timezone.utc))


def run():
    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT)


if __name__ == "__main__":
    run()
