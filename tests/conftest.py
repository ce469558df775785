"""Pytest configuration and fixtures."""

import json
import sys
from pathlib import Path

import pytest

# Make the collection_box package importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from collection_box.catalog import OriginCatalog
from collection_box.core import Settings

TEST_ORIGINS = {
    "support": ["Bilibili", "GitHub"],
    "items": [
        {"host": "bilibili.com", "origin": "Bilibili"},
        {"host": "b23.tv", "origin": "Bilibili"},
        {"host": "github.com", "origin": "GitHub"},
        {"host": "localhost", "origin": "localhost"},
    ],
}


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure async backend."""
    return "asyncio"


@pytest.fixture
def bilibili_catalog():
    """Catalog that only knows bilibili.com."""
    return OriginCatalog({"bilibili.com": "Bilibili"})


@pytest.fixture
def origin_file(tmp_path):
    path = tmp_path / "origin.json"
    path.write_text(json.dumps(TEST_ORIGINS), encoding="utf-8")
    return path


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'collectionbox.db'}"


@pytest.fixture
def settings(origin_file, database_url):
    """Settings pointing at a temporary catalog and database."""
    return Settings(
        _env_file=None,
        origin_file=str(origin_file),
        database_url=database_url,
        log_format="text",
        db_log_level="silent",
    )
