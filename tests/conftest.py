"""Pytest configuration and shared fixtures for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

from core.config import JsonStoreConfiguration  # noqa: E402
from core.types import EntityDescriptor, Schema  # noqa: E402
from store.json_store import JsonStore  # noqa: E402


@pytest.fixture
def library_schema() -> Schema:
    """Author/Book schema with a to-many and a to-one relationship."""
    return Schema(
        entities=(
            EntityDescriptor(name="Author", attributes=("name",), relationships=("books",)),
            EntityDescriptor(name="Book", attributes=("title",), relationships=("author",)),
        )
    )


@pytest.fixture
def store_config(tmp_path: Path, library_schema: Schema) -> JsonStoreConfiguration:
    """Configuration pointing at a not-yet-created backing file."""
    return JsonStoreConfiguration(
        name="test",
        file_location=tmp_path / "library.json",
        schema=library_schema,
    )


@pytest.fixture
def store(store_config: JsonStoreConfiguration) -> JsonStore:
    return JsonStore(store_config)
