"""JSON store exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure kind maps to one exception type so callers can recover
selectively, for example by falling back to in-memory filtering.
"""

from __future__ import annotations


class JsonStoreError(Exception):
    """Base exception for all JSON store failures."""


class JsonStoreConfigError(JsonStoreError):
    """Raised for invalid store configuration."""


class JsonStoreSchemaError(JsonStoreConfigError):
    """Raised when a store is constructed without a schema."""


class JsonStoreQueryError(JsonStoreError):
    """Raised for fetch requests using unsupported query features."""


class JsonStoreUnsupportedPredicateError(JsonStoreQueryError):
    """Raised when a fetch request carries a predicate."""


class JsonStoreUnsupportedSortError(JsonStoreQueryError):
    """Raised when a fetch request carries sort descriptors."""


class JsonStoreDecodeError(JsonStoreError):
    """Raised when the backing document cannot be parsed."""


class JsonStoreEncodeError(JsonStoreError):
    """Raised when snapshots cannot be serialized."""


class JsonStoreWriteError(JsonStoreError):
    """Raised when the backing document cannot be written."""


class JsonStoreRemapError(JsonStoreError):
    """Raised when an inserted snapshot has no permanent identifier."""


class JsonStoreRegistryError(JsonStoreError):
    """Raised for unknown store lookups in a registry."""
