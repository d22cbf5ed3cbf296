"""Shared JSON serialization for Snapshot payloads.

This module centralizes Snapshot to JSON conversion. Relationship fields
are split from plain attributes so identifiers round-trip as typed values.
"""

from __future__ import annotations

from typing import Any

from core.constants import (
    ATTRIBUTES_KEY,
    ENTITY_NAME_KEY,
    IDENTIFIER_KEY,
    PRIMARY_KEY_KEY,
    RELATIONSHIPS_KEY,
    STORE_IDENTIFIER_KEY,
)
from core.errors import JsonStoreDecodeError, JsonStoreEncodeError
from core.types import PersistentIdentifier, Snapshot


def identifier_to_payload(identifier: PersistentIdentifier) -> dict[str, str]:
    """Serialize a permanent identifier.

    Args:
        identifier: Identifier to serialize.

    Returns:
        JSON-safe identifier object.

    Raises:
        JsonStoreEncodeError: If the identifier is temporary.
    """
    if identifier.is_temporary:
        raise JsonStoreEncodeError(
            f"Refusing to persist temporary identifier {identifier.entity_name}:"
            f"{identifier.primary_key}. Insert the referenced record in the same save "
            "batch so it is remapped to a permanent identifier."
        )
    return {
        STORE_IDENTIFIER_KEY: identifier.store_identifier,
        ENTITY_NAME_KEY: identifier.entity_name,
        PRIMARY_KEY_KEY: identifier.primary_key,
    }


def identifier_from_payload(payload: object) -> PersistentIdentifier:
    """Deserialize an identifier object.

    Args:
        payload: Parsed JSON identifier object.

    Returns:
        Permanent identifier.

    Raises:
        JsonStoreDecodeError: If required keys are missing or mistyped.
    """
    if not isinstance(payload, dict):
        raise JsonStoreDecodeError(
            f"Invalid identifier payload {payload!r}: expected JSON object."
        )
    try:
        parts = [payload[key] for key in (STORE_IDENTIFIER_KEY, ENTITY_NAME_KEY, PRIMARY_KEY_KEY)]
    except KeyError as error:
        raise JsonStoreDecodeError(
            f"Invalid identifier payload: missing key {error}."
        ) from error
    if not all(isinstance(part, str) for part in parts):
        raise JsonStoreDecodeError(
            f"Invalid identifier payload {payload!r}: expected string fields."
        )
    return PersistentIdentifier(
        store_identifier=parts[0],
        entity_name=parts[1],
        primary_key=parts[2],
    )


def snapshot_to_payload(snapshot: Snapshot) -> dict[str, object]:
    """Serialize Snapshot into JSON-safe payload.

    Args:
        snapshot: Snapshot instance.

    Returns:
        Dictionary payload for JSON encoding.

    Raises:
        JsonStoreEncodeError: If any identifier is temporary.
    """
    attributes: dict[str, object] = {}
    relationships: dict[str, object] = {}
    for name, value in snapshot.values.items():
        if isinstance(value, PersistentIdentifier):
            relationships[name] = identifier_to_payload(value)
        elif _is_identifier_list(value):
            relationships[name] = [identifier_to_payload(item) for item in value]  # type: ignore[union-attr]
        else:
            attributes[name] = value
    return {
        IDENTIFIER_KEY: identifier_to_payload(snapshot.persistent_identifier),
        ATTRIBUTES_KEY: attributes,
        RELATIONSHIPS_KEY: relationships,
    }


def snapshot_from_payload(payload: object) -> Snapshot:
    """Deserialize JSON payload into Snapshot.

    Args:
        payload: Serialized snapshot object.

    Returns:
        Parsed Snapshot.

    Raises:
        JsonStoreDecodeError: If the payload shape is invalid.
    """
    if not isinstance(payload, dict):
        raise JsonStoreDecodeError(
            f"Invalid snapshot payload: expected JSON object, got {type(payload).__name__}."
        )
    if IDENTIFIER_KEY not in payload:
        raise JsonStoreDecodeError(
            f"Invalid snapshot payload: missing '{IDENTIFIER_KEY}'."
        )
    identifier = identifier_from_payload(payload[IDENTIFIER_KEY])
    attributes = payload.get(ATTRIBUTES_KEY, {})
    relationships = payload.get(RELATIONSHIPS_KEY, {})
    if not isinstance(attributes, dict) or not isinstance(relationships, dict):
        raise JsonStoreDecodeError(
            f"Invalid snapshot payload for {identifier.entity_name}:{identifier.primary_key}: "
            "attributes and relationships must be JSON objects."
        )
    values: dict[str, object] = dict(attributes)
    for name, value in relationships.items():
        values[name] = _relationship_from_payload(value)
    return Snapshot(persistent_identifier=identifier, values=values)


def snapshots_to_payload(snapshots: list[Snapshot]) -> list[dict[str, object]]:
    """Serialize a snapshot collection into the backing document array."""
    return [snapshot_to_payload(snapshot) for snapshot in snapshots]


def snapshots_from_payload(payload: Any) -> list[Snapshot]:
    """Deserialize the backing document array into snapshots."""
    if not isinstance(payload, list):
        raise JsonStoreDecodeError(
            f"Invalid backing document: expected JSON array at top level, "
            f"got {type(payload).__name__}."
        )
    return [snapshot_from_payload(item) for item in payload]


def _relationship_from_payload(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, list):
        return [identifier_from_payload(item) for item in value]
    return identifier_from_payload(value)


def _is_identifier_list(value: object) -> bool:
    if not isinstance(value, (list, tuple)) or not value:
        return False
    return all(isinstance(item, PersistentIdentifier) for item in value)
