import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
str_root = str(ROOT)
if str_root not in sys.path:
    sys.path.insert(0, str_root)

# diet_tracker.main builds its module-level app at import time.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from httpx import ASGITransport, AsyncClient  # noqa: E402

from diet_tracker.core.db import Database  # noqa: E402
from diet_tracker.core.settings import Settings  # noqa: E402
from diet_tracker.main import create_app  # noqa: E402


def make_settings(url: str, **api) -> Settings:
    return Settings.model_validate(
        {
            "database": {"url": url},
            "server": {},
            "api": api,
        }
    )


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'diet_tracker.db'}"


@pytest.fixture
async def database(db_url):
    db = Database(db_url)
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
async def api_client(database, db_url):
    app = create_app(make_settings(db_url), database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
