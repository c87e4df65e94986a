import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import IntegrityError, OperationalError

from quizhub.middleware.monitoring_middleware import RequestLoggingMiddleware
from quizhub.utils.error_handler import setup_exception_handlers
from quizhub.utils.exceptions import AlreadyCompletedError


def _build_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/completed")
    async def completed():
        raise AlreadyCompletedError(7)

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT INTO users ...", {}, Exception("UNIQUE constraint failed: users.email"))

    @app.get("/operational")
    async def operational():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    return app


@pytest_asyncio.fixture
async def error_client():
    transport = ASGITransport(app=_build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_domain_error_envelope(error_client):
    response = await error_client.get("/completed", headers={"X-Correlation-ID": "abc-123"})

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "ALREADY_COMPLETED"
    assert error["details"] == {"resource_type": "quiz_attempt", "attempt_id": 7}
    assert error["path"] == "/completed"
    assert error["correlation_id"] == "abc-123"
    assert response.headers["X-Correlation-ID"] == "abc-123"


async def test_unknown_route_uses_error_envelope(error_client):
    response = await error_client.get("/nowhere")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "HTTP_ERROR"
    assert error["status"] == 404


@pytest.mark.parametrize("path,status,code", [
    ("/integrity", 409, "CONFLICT"),
    ("/operational", 500, "DATABASE_ERROR"),
])
async def test_database_errors(error_client, path, status, code):
    response = await error_client.get(path)

    assert response.status_code == status
    error = response.json()["error"]
    assert error["code"] == code
    assert "UNIQUE" not in error["message"]


async def test_unexpected_error_is_500(error_client):
    response = await error_client.get("/boom")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INTERNAL_SERVER_ERROR"
    assert error["details"]["error_type"] == "RuntimeError"
    assert response.headers["X-Correlation-ID"] == error["correlation_id"]
