import os
import asyncio
import sqlite3
from datetime import datetime, date
from pathlib import Path

import pytest

os.environ.setdefault("USE_SQLITE", "true")
os.environ.setdefault("SQLITE_URL", "sqlite+aiosqlite:///./data/test.db")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")
os.environ["REDIS_URL"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["SUPABASE_URL"] = ""
os.environ["NOTIFICATION_FUNCTION_URL"] = ""
os.environ["INQUIRY_STORE_BACKEND"] = "database"

# Avoid deprecated sqlite3 default datetime adapters in Python 3.12+.
sqlite3.register_adapter(datetime, lambda value: value.isoformat(sep=" "))
sqlite3.register_adapter(date, lambda value: value.isoformat())


@pytest.fixture(scope="session")
def sqlite_db_path() -> Path:
    return Path("data/test.db")


@pytest.fixture(autouse=True, scope="session")
def _ensure_test_db_dir(sqlite_db_path: Path) -> None:
    sqlite_db_path.parent.mkdir(parents=True, exist_ok=True)
    if sqlite_db_path.exists():
        sqlite_db_path.unlink()


@pytest.fixture(autouse=True, scope="session")
def _dispose_engine() -> None:
    yield
    from app.database import get_engine
    engine = get_engine()
    if engine is not None:
        loop = asyncio.new_event_loop()
        loop.run_until_complete(engine.dispose())
        loop.close()


@pytest.fixture(autouse=True)
def _reset_client_storages():
    """Every test starts with fresh client-local state."""
    from app.services.client_storage import reset_client_storages

    reset_client_storages()
    yield
    reset_client_storages()


VALID_FORM = {
    "full_name": "Jane Doe",
    "email": "jane@x.com",
    "inquiry_type": "consultation",
}


@pytest.fixture
def valid_form() -> dict:
    return dict(VALID_FORM)
