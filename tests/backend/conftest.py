import os
import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from app.core import db as db_module
from app.core.db import Database
from app.main import app


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

DEFAULT_PASSWORD = "UserPass123"


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database plus the storage handle the routes receive.
    """
    await _init_test_db()
    handle = Database(max_size=5, acquire_timeout=2.0)
    app.state.db = handle
    yield handle
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def register_user(client):
    """
    Factory fixture registering a user through the public endpoint.
    Returns (user dict, Authorization headers).
    """

    async def _register(password: str = DEFAULT_PASSWORD) -> tuple[dict, dict[str, str]]:
        name = f"user_{uuid.uuid4().hex[:8]}"
        resp = await client.post(
            "/api/auth/register",
            json={"username": name, "email": f"{name}@example.com", "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest_asyncio.fixture
async def create_todo(client):
    """
    Factory fixture creating a todo for the given auth headers.
    """

    async def _create(headers: dict[str, str], **fields) -> dict:
        payload = {"title": "A todo", **fields}
        resp = await client.post("/api/todos", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["todo"]

    return _create
