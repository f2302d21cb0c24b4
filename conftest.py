import os
import tempfile

# Must run before anything imports app.db
_DB_DIR = tempfile.mkdtemp(prefix="people-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'people.db')}"
os.environ.setdefault("REPORT_CREATED_BY", "javacodegeek.com")

import httpx
import pytest
from sqlalchemy import text

from app.db import Base, engine
from app import models  # noqa: F401


@pytest.fixture(autouse=True)
def people_table():
    Base.metadata.create_all(engine)
    yield
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM people"))


@pytest.fixture
def directory_transport():
    """Build a DirectoryClient-ready httpx.Client answering with `handler`."""

    def _make(handler):
        return httpx.Client(transport=httpx.MockTransport(handler))

    return _make
