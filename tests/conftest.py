from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


AUTH = "test-secret"


@pytest.fixture
def settings(tmp_path: Path):
    """
    Settings rooted in a temp directory so tests never touch a real ./database.
    """
    from settings import Settings

    return Settings(port=3000, path=str(tmp_path / "db"), tables=["main", "test"], auth=AUTH)


@pytest.fixture
def memory_storage():
    from persistence.memory_store import InMemoryStorage

    return InMemoryStorage()


@pytest.fixture
def database(settings, memory_storage):
    from persistence.database import open_database

    return open_database(settings, memory_storage)


@pytest.fixture
def disk_database(settings):
    from persistence.database import open_database

    return open_database(settings)


@pytest.fixture
def app(settings, memory_storage):
    from app import create_app

    return create_app(settings, storage=memory_storage)


@pytest.fixture
def http(app):
    from fastapi.testclient import TestClient

    client = TestClient(app)
    client.headers.update({"auth": AUTH})
    return client
