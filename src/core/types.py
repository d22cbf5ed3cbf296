"""Shared typed models.

This module defines the immutable data model exchanged between the
snapshot store and the object-graph framework that drives it: identifiers,
snapshots, schema descriptors, and fetch/save request and result payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping
from uuid import uuid4


@dataclass(frozen=True)
class PersistentIdentifier:
    """Identity of one snapshot.

    Attributes:
        store_identifier: Identifier of the owning store (backing file name).
        entity_name: Entity type name, used as the variant discriminant.
        primary_key: Unique key within the store.
        is_temporary: Whether the identifier is batch-local and never persisted.
    """

    store_identifier: str
    entity_name: str
    primary_key: str
    is_temporary: bool = False

    @classmethod
    def temporary(
        cls,
        entity_name: str,
        primary_key: str | None = None,
    ) -> "PersistentIdentifier":
        """Build a caller-side temporary identifier for a pending insert.

        Args:
            entity_name: Entity type name of the pending record.
            primary_key: Optional explicit key; a fresh UUID when omitted.

        Returns:
            Temporary identifier.
        """
        return cls(
            store_identifier="",
            entity_name=entity_name,
            primary_key=str(uuid4()) if primary_key is None else primary_key,
            is_temporary=True,
        )

    @classmethod
    def permanent(
        cls,
        store_identifier: str,
        entity_name: str,
        primary_key: str | None = None,
    ) -> "PersistentIdentifier":
        """Build a store-assigned permanent identifier.

        Args:
            store_identifier: Identifier of the owning store.
            entity_name: Entity type name.
            primary_key: Optional explicit key; a fresh UUID when omitted.

        Returns:
            Permanent identifier.
        """
        return cls(
            store_identifier=store_identifier,
            entity_name=entity_name,
            primary_key=str(uuid4()) if primary_key is None else primary_key,
        )


@dataclass(frozen=True)
class Snapshot:
    """Serializable value copy of one persisted entity.

    Relationship-valued fields hold a PersistentIdentifier (to-one),
    a list of identifiers (to-many), or None.

    Attributes:
        persistent_identifier: Identity of the snapshot.
        values: Field name to value mapping.
    """

    persistent_identifier: PersistentIdentifier
    values: Mapping[str, object] = field(default_factory=dict)

    @property
    def entity_name(self) -> str:
        """Entity type name of the snapshot."""
        return self.persistent_identifier.entity_name

    def copy(
        self,
        persistent_identifier: PersistentIdentifier,
        remapped_identifiers: Mapping[PersistentIdentifier, PersistentIdentifier],
    ) -> "Snapshot":
        """Return a copy carrying a new identifier and remapped references.

        Args:
            persistent_identifier: Identifier for the copy.
            remapped_identifiers: Temporary to permanent identifier table.

        Returns:
            New snapshot; the receiver is left untouched.
        """
        values = {
            name: _remap_value(value, remapped_identifiers)
            for name, value in self.values.items()
        }
        return Snapshot(persistent_identifier=persistent_identifier, values=values)


@dataclass(frozen=True)
class EntityDescriptor:
    """Logical description of one entity type.

    Attributes:
        name: Entity type name.
        attributes: Attribute field names.
        relationships: Relationship field names.
    """

    name: str
    attributes: tuple[str, ...] = ()
    relationships: tuple[str, ...] = ()


@dataclass(frozen=True)
class Schema:
    """Set of entity descriptors a store is declared for."""

    entities: tuple[EntityDescriptor, ...] = ()

    @property
    def entity_names(self) -> tuple[str, ...]:
        """Entity type names in declaration order."""
        return tuple(entity.name for entity in self.entities)


@dataclass(frozen=True)
class SortDescriptor:
    """One requested sort key."""

    field_name: str
    ascending: bool = True


@dataclass(frozen=True)
class FetchRequest:
    """Request payload for snapshot retrieval.

    Attributes:
        entity_name: Entity type to fetch.
        predicate: Optional filter; rejected by the JSON store.
        sort_by: Optional sort keys; rejected by the JSON store when non-empty.
    """

    entity_name: str
    predicate: Callable[[Snapshot], bool] | None = None
    sort_by: tuple[SortDescriptor, ...] = ()


@dataclass(frozen=True)
class FetchResult:
    """Fetched snapshots together with the originating request."""

    request: FetchRequest
    snapshots: tuple[Snapshot, ...]


@dataclass(frozen=True)
class SaveRequest:
    """Batch of changes to persist.

    Attributes:
        inserted: New snapshots carrying temporary identifiers.
        updated: Changed snapshots carrying permanent identifiers.
        deleted: Snapshots to remove, identified by permanent identifiers.
    """

    inserted: tuple[Snapshot, ...] = ()
    updated: tuple[Snapshot, ...] = ()
    deleted: tuple[Snapshot, ...] = ()


@dataclass(frozen=True)
class SaveResult:
    """Outcome of one save batch.

    Attributes:
        store_identifier: Identifier of the store that persisted the batch.
        remapped_identifiers: Temporary to permanent identifier table.
    """

    store_identifier: str
    remapped_identifiers: Mapping[PersistentIdentifier, PersistentIdentifier]


def _remap_value(
    value: object,
    remapped_identifiers: Mapping[PersistentIdentifier, PersistentIdentifier],
) -> object:
    """Substitute remapped identifiers inside one field value."""
    if isinstance(value, PersistentIdentifier):
        return remapped_identifiers.get(value, value)
    if isinstance(value, (list, tuple)):
        return [_remap_value(item, remapped_identifiers) for item in value]
    return value
