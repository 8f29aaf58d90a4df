from pathlib import Path
import os
import tempfile
import pytest

# Point the app at a throwaway SQLite file before `reportcard` is imported.
# A file (not :memory:) is required: reference checks run on their own
# connections in worker threads.
_DB_DIR = Path(tempfile.mkdtemp(prefix="reportcard-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"

from sqlmodel import SQLModel  # noqa: E402
from reportcard.database import engine, open_session  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test an empty schema."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with open_session() as s:
        yield s
