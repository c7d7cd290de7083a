import sys
from pathlib import Path

import pytest
from sqlalchemy.pool import StaticPool

test_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(test_root))

from printqueue.database import Database  # noqa: E402
from tests.helpers import build_client  # noqa: E402


@pytest.fixture
def database():
    # eine einzige In-Memory-Verbindung für Test und App teilen
    db = Database("sqlite://", poolclass=StaticPool)
    db.open()
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture
def client(database):
    with build_client(database) as c:
        yield c
