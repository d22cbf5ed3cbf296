"""Public import surface for the JSON snapshot store.

This module provides a stable import path for framework integrations.
It re-exports the store, registry, configuration, typed models, and errors.
"""

from __future__ import annotations

from core.config import JsonStoreConfiguration
from core.errors import (
    JsonStoreConfigError,
    JsonStoreDecodeError,
    JsonStoreEncodeError,
    JsonStoreError,
    JsonStoreQueryError,
    JsonStoreRegistryError,
    JsonStoreRemapError,
    JsonStoreSchemaError,
    JsonStoreUnsupportedPredicateError,
    JsonStoreUnsupportedSortError,
    JsonStoreWriteError,
)
from core.types import (
    EntityDescriptor,
    FetchRequest,
    FetchResult,
    PersistentIdentifier,
    SaveRequest,
    SaveResult,
    Schema,
    Snapshot,
    SortDescriptor,
)
from store.json_store import JsonStore
from store.store_registry import StoreRegistry

__all__ = [
    "EntityDescriptor",
    "FetchRequest",
    "FetchResult",
    "JsonStore",
    "JsonStoreConfigError",
    "JsonStoreConfiguration",
    "JsonStoreDecodeError",
    "JsonStoreEncodeError",
    "JsonStoreError",
    "JsonStoreQueryError",
    "JsonStoreRegistryError",
    "JsonStoreRemapError",
    "JsonStoreSchemaError",
    "JsonStoreUnsupportedPredicateError",
    "JsonStoreUnsupportedSortError",
    "JsonStoreWriteError",
    "PersistentIdentifier",
    "SaveRequest",
    "SaveResult",
    "Schema",
    "Snapshot",
    "SortDescriptor",
    "StoreRegistry",
]
