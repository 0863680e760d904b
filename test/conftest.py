"""
Shared fixtures. The API tests run against a throwaway SQLite file; the environment
must point at it before regional_factions.api.database is first imported.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="regional-factions-test-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402

from regional_factions.engine.events import clear_event_log  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_default_log():
    clear_event_log()
    yield
    clear_event_log()


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient

    from regional_factions.api.main import app

    with TestClient(app) as c:
        yield c
