from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from trellis.core import db
from trellis.core.config import AppSettings, get_settings
from trellis.main import create_app
from trellis.services.repository import EngagementRepository


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[AppSettings]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'trellis.db'}")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setenv("SIGNING_SECRET", "test-secret")
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://testserver")
    get_settings.cache_clear()
    monkeypatch.setattr(db, "_async_engine", None)
    monkeypatch.setattr(db, "_session_factory", None)

    yield get_settings()

    get_settings.cache_clear()


@pytest.fixture
def client(settings: AppSettings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def repository(tmp_path: Path) -> AsyncIterator[EngagementRepository]:
    engine = db.create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'repo.db'}")
    await db.init_models(engine)
    try:
        yield EngagementRepository(async_sessionmaker(bind=engine, expire_on_commit=False))
    finally:
        await engine.dispose()


@pytest.fixture
def make_engagement(client: TestClient) -> Callable[..., str]:
    def _create(**overrides: str) -> str:
        payload = {
            "company_name": "Acme Pty Ltd",
            "leader_name": "Jordan Lee",
            "financial_year_end": "2024-06-30",
        }
        payload.update(overrides)
        response = client.post("/v1/engagements", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["engagement_id"]

    return _create
