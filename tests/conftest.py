import os
import tempfile
import uuid

_db_path = os.path.join(tempfile.gettempdir(), f"quizhub_test_{uuid.uuid4().hex}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_path}"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "quizhub_test_logs")

from typing import Optional, Sequence, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from quizhub.db.base import Base
from quizhub.db.session import engine, AsyncSessionLocal
from quizhub.main import app
from quizhub.models.question import QuestionType
from quizhub.schemas.user_schema import UserRegister, PublicUser
from quizhub.schemas.quiz_schema import QuizCreate, QuizResponse, QuestionCreate, QuestionResponse, AnswerOptionCreate
from quizhub.services.user_service import user_service
from quizhub.services.quiz_service import quiz_service
import quizhub.models  # noqa: F401


@pytest_asyncio.fixture
async def setup_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db(setup_database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(setup_database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def _make_user(username: Optional[str] = None, password: str = "secret123") -> PublicUser:
        counter["n"] += 1
        username = username or f"player{counter['n']}"
        return await user_service.register(
            db, UserRegister(username=username, email=f"{username}@example.com", password=password)
        )

    return _make_user


@pytest.fixture
def make_quiz(db):
    async def _make_quiz(owner_id: int, title: str = "General knowledge") -> QuizResponse:
        return await quiz_service.create_quiz(
            db, QuizCreate(title=title, description="Test quiz", created_by=owner_id)
        )

    return _make_quiz


@pytest.fixture
def make_choice_question(db):
    """Multiple choice question; options are (text, is_correct) pairs in display order"""

    async def _make_question(
            quiz_id: int,
            order_index: int,
            options: Sequence[Tuple[str, bool]] = (("right", True), ("wrong", False), ("also wrong", False)),
            text: Optional[str] = None
    ) -> QuestionResponse:
        return await quiz_service.create_question(db, QuestionCreate(
            quiz_id=quiz_id,
            question_text=text or f"Question {order_index}",
            question_type=QuestionType.MULTIPLE_CHOICE,
            order_index=order_index,
            answer_options=[
                AnswerOptionCreate(option_text=option_text, is_correct=is_correct, order_index=i)
                for i, (option_text, is_correct) in enumerate(options)
            ]
        ))

    return _make_question

