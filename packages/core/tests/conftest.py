import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[3]

paths = [
    ROOT / "packages" / "adapter-sdk" / "src",
    ROOT / "packages" / "adapter-sqlalchemy" / "src",
    ROOT / "packages" / "adapters" / "sqlite" / "src",
    ROOT / "packages" / "adapters" / "mock" / "src",
    ROOT / "packages" / "core" / "src",
]

for path in paths:
    sys.path.insert(0, str(path))

from dbsampler import Database, Sampler  # noqa: E402
from dbsampler_mock import MockAdapter  # noqa: E402


@pytest.fixture
def mock_adapter():
    """Returns a fresh MockAdapter so counters start at zero."""
    return MockAdapter()


@pytest.fixture
def database(mock_adapter):
    db = Database(mock_adapter)
    yield db
    db.close()


@pytest.fixture
def sampler(database):
    return Sampler(database)
