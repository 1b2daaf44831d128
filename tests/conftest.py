# tests/conftest.py
import os
import tempfile

# la config se lee al importar app.*, así que el entorno va primero
_TMP_DIR = tempfile.mkdtemp(prefix="snapshare-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SWEEP_ENABLED"] = "false"
os.environ["ADMIN_EMAIL"] = "admin@snapshare.com"
os.environ["ADMIN_PASSWORD"] = "admin123"

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import select, func  # noqa: E402

from app.main import app  # noqa: E402
from app.db.init_db import init_models, drop_models  # noqa: E402
from app.db.session import AsyncSessionLocal  # noqa: E402
from app.users.service import ensure_admin  # noqa: E402


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def count_rows(model, *where) -> int:
    async with AsyncSessionLocal() as db:
        q = select(func.count()).select_from(model)
        if where:
            q = q.where(*where)
        res = await db.execute(q)
        return int(res.scalar_one())


@pytest.fixture
async def client():
    await drop_models()
    await init_models()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def signup(client):
    """signup(username, role) → (token, user) de una cuenta nueva."""

    async def _signup(username: str, role: str = "consumer", password: str = "pw"):
        res = await client.post(
            "/api/auth/signup",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
                "role": role,
            },
        )
        assert res.status_code == 201, res.text
        body = res.json()
        return body["token"], body["user"]

    return _signup


@pytest.fixture
def admin_login(client):
    async def _admin_login():
        async with AsyncSessionLocal() as db:
            await ensure_admin(db)
            await db.commit()
        res = await client.post(
            "/api/auth/login",
            json={"email": "admin@snapshare.com", "password": "admin123"},
        )
        assert res.status_code == 200, res.text
        body = res.json()
        return body["token"], body["user"]

    return _admin_login


@pytest.fixture
def create_post(client):
    async def _create_post(token: str, image: str = "img1", caption: str = "hello"):
        res = await client.post(
            "/api/posts",
            json={"image": image, "caption": caption},
            headers=bearer(token),
        )
        assert res.status_code == 201, res.text
        return res.json()

    return _create_post
