import logging
from typing import Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from seeder.config import Settings
from seeder.seeds.models import ResolvedCollection


class Item(BaseModel):
    name: str
    quantity: int = 1


class Tag(BaseModel):
    label: str


@pytest.fixture(autouse=True)
def reset_seeder_logger():
    """Undo configure_logging() between tests."""
    yield
    root = logging.getLogger("seeder")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


def make_settings(**values) -> Settings:
    """Settings with every URI source unset, whatever the test env holds."""
    defaults = {
        "MONGO_URI": None,
        "MONGODB_URI": None,
        "mongoUri": None,
        "DB_URI": None,
        "DATABASE_URI": None,
        "DATABASE_NAME": None,
    }
    defaults.update(values)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def clean_settings():
    env = make_settings()
    with patch("seeder.config.settings", env), patch("seeder.main.settings", env):
        yield env


@pytest.fixture
def sample_collections():
    return [
        ResolvedCollection(
            name="items",
            model="Item",
            schema=Item,
            documents=[{"name": "bolt", "quantity": 10}, {"name": "nut", "quantity": 20}],
        ),
        ResolvedCollection(
            name="tags",
            model="Tag",
            schema=Tag,
            documents=[{"label": "hardware"}],
        ),
    ]


def _make_mock_collection(existing: int = 0, deleted: Optional[int] = None):
    collection = MagicMock()
    collection.count_documents = AsyncMock(return_value=existing)
    collection.delete_many = AsyncMock(
        return_value=MagicMock(deleted_count=existing if deleted is None else deleted)
    )

    async def insert_many(documents):
        return MagicMock(inserted_ids=[f"id-{i}" for i in range(len(documents))])

    collection.insert_many = AsyncMock(side_effect=insert_many)
    return collection


def _make_mock_db(counts: dict[str, int]):
    collections = {name: _make_mock_collection(count) for name, count in counts.items()}
    mock_db = MagicMock()
    mock_db.__getitem__.side_effect = collections.__getitem__
    mock_db.collections = collections
    return mock_db


@pytest.fixture
def mock_db():
    db = _make_mock_db({"items": 5, "tags": 3})
    with patch("seeder.seeds.service.get_database", return_value=db):
        yield db
