"""JSON-backed snapshot store.

This module persists a set of snapshots as one JSON document. Every call
re-reads the whole document; saves merge a change batch with temporary to
permanent identifier remapping and rewrite the document atomically.

Single-writer contract: saves from separate processes are last-writer-wins.
Within one process, saves against the same backing path are serialized.
"""

from __future__ import annotations

import threading
from pathlib import Path

from core.config import JsonStoreConfiguration
from core.errors import (
    JsonStoreRemapError,
    JsonStoreSchemaError,
    JsonStoreUnsupportedPredicateError,
    JsonStoreUnsupportedSortError,
)
from core.logging_config import get_logger
from core.types import (
    FetchRequest,
    FetchResult,
    PersistentIdentifier,
    SaveRequest,
    SaveResult,
    Schema,
    Snapshot,
)
from store.document_io import encode_document, read_document, write_document_atomic
from store.snapshot_payload import snapshots_from_payload, snapshots_to_payload

_LOGGER = get_logger(__name__)

_PATH_LOCKS: dict[Path, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


class JsonStore:
    """Snapshot store backed by a single JSON document.

    The store never sees live domain objects, only snapshots and
    identifiers. Filtering and sorting are left to the caller.
    """

    def __init__(
        self,
        configuration: JsonStoreConfiguration,
        migration_plan: object | None = None,
    ) -> None:
        """Initialize store from configuration.

        Args:
            configuration: Store configuration; must carry a schema.
            migration_plan: Reserved for schema evolution; ignored.

        Raises:
            JsonStoreSchemaError: If the configuration has no schema.
        """
        if configuration.schema is None:
            raise JsonStoreSchemaError(
                f"Store '{configuration.name}' requires a schema. "
                "Pass schema=Schema(...) in its configuration."
            )
        self._configuration = configuration
        self._schema: Schema = configuration.schema
        self._identifier = configuration.file_location.name
        self._file_lock = _lock_for(configuration.file_location)

    @property
    def configuration(self) -> JsonStoreConfiguration:
        return self._configuration

    @property
    def name(self) -> str:
        return self._configuration.name

    @property
    def identifier(self) -> str:
        """Store identifier derived from the backing file name."""
        return self._identifier

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def file_location(self) -> Path:
        return self._configuration.file_location

    def read(self) -> list[Snapshot]:
        """Load every snapshot from the backing document.

        Returns:
            Stored snapshots; empty when the document does not exist yet.

        Raises:
            JsonStoreDecodeError: If the document is malformed.
        """
        payload = read_document(self.file_location)
        if payload is None:
            _LOGGER.debug("backing_document_missing", store=self.name, path=str(self.file_location))
            return []
        return snapshots_from_payload(payload)

    def fetch(self, request: FetchRequest) -> FetchResult:
        """Return all snapshots of the requested entity type.

        Args:
            request: Fetch request; predicate and sort must be absent.

        Returns:
            Fetch result holding matching snapshots in document order.

        Raises:
            JsonStoreUnsupportedPredicateError: If a predicate is supplied.
            JsonStoreUnsupportedSortError: If sort descriptors are supplied.
            JsonStoreDecodeError: If the document is malformed.
        """
        _reject_query_features(request)
        snapshots = tuple(
            snapshot for snapshot in self.read() if snapshot.entity_name == request.entity_name
        )
        _LOGGER.info(
            "snapshots_fetched",
            store=self.name,
            entity_name=request.entity_name,
            snapshot_count=len(snapshots),
        )
        return FetchResult(request=request, snapshots=snapshots)

    def fetch_count(self, request: FetchRequest) -> int:
        """Count snapshots of the requested entity type."""
        return len(self.fetch(request).snapshots)

    def fetch_identifiers(self, request: FetchRequest) -> list[PersistentIdentifier]:
        """List identifiers of snapshots of the requested entity type."""
        return [snapshot.persistent_identifier for snapshot in self.fetch(request).snapshots]

    def save(self, request: SaveRequest) -> SaveResult:
        """Apply a change batch and rewrite the backing document.

        Args:
            request: Inserted, updated, and deleted snapshots.

        Returns:
            Save result mapping temporary to permanent identifiers.

        Raises:
            JsonStoreDecodeError: If the current document is malformed.
            JsonStoreEncodeError: If snapshots cannot be serialized.
            JsonStoreWriteError: If the document cannot be written.
        """
        with self._file_lock:
            working_set = {snapshot.persistent_identifier: snapshot for snapshot in self.read()}
            remapped_identifiers = self._assign_permanent_identifiers(request.inserted)
            _apply_inserts(working_set, request.inserted, remapped_identifiers)
            _apply_updates(working_set, request.updated, remapped_identifiers)
            deleted_count = _apply_deletes(working_set, request.deleted)
            payload = snapshots_to_payload(list(working_set.values()))
            write_document_atomic(self.file_location, encode_document(payload))
        _LOGGER.info(
            "snapshots_saved",
            store=self.name,
            inserted=len(request.inserted),
            updated=len(request.updated),
            deleted=deleted_count,
            snapshot_count=len(working_set),
        )
        return SaveResult(store_identifier=self.identifier, remapped_identifiers=remapped_identifiers)

    def erase(self) -> None:
        """Delete the backing document; the store reads as empty afterwards."""
        with self._file_lock:
            self.file_location.unlink(missing_ok=True)
        _LOGGER.info("store_erased", store=self.name, path=str(self.file_location))

    def _assign_permanent_identifiers(
        self,
        inserted: tuple[Snapshot, ...],
    ) -> dict[PersistentIdentifier, PersistentIdentifier]:
        """Build the temporary to permanent table for every insert."""
        return {
            snapshot.persistent_identifier: PersistentIdentifier.permanent(
                self.identifier, snapshot.entity_name
            )
            for snapshot in inserted
        }


def _reject_query_features(request: FetchRequest) -> None:
    """Fail fast on query features the store does not evaluate."""
    if request.predicate is not None:
        raise JsonStoreUnsupportedPredicateError(
            f"Fetch for '{request.entity_name}' carries a predicate. "
            "Fetch without a predicate and filter in memory."
        )
    if request.sort_by:
        raise JsonStoreUnsupportedSortError(
            f"Fetch for '{request.entity_name}' carries sort descriptors. "
            "Fetch unsorted and sort in memory."
        )


def _apply_inserts(
    working_set: dict[PersistentIdentifier, Snapshot],
    inserted: tuple[Snapshot, ...],
    remapped_identifiers: dict[PersistentIdentifier, PersistentIdentifier],
) -> None:
    for snapshot in inserted:
        permanent_identifier = remapped_identifiers.get(snapshot.persistent_identifier)
        if permanent_identifier is None:
            raise JsonStoreRemapError(
                f"No permanent identifier assigned for inserted snapshot "
                f"{snapshot.entity_name}:{snapshot.persistent_identifier.primary_key}."
            )
        working_set[permanent_identifier] = snapshot.copy(permanent_identifier, remapped_identifiers)


def _apply_updates(
    working_set: dict[PersistentIdentifier, Snapshot],
    updated: tuple[Snapshot, ...],
    remapped_identifiers: dict[PersistentIdentifier, PersistentIdentifier],
) -> None:
    for snapshot in updated:
        identifier = snapshot.persistent_identifier
        working_set[identifier] = snapshot.copy(identifier, remapped_identifiers)


def _apply_deletes(
    working_set: dict[PersistentIdentifier, Snapshot],
    deleted: tuple[Snapshot, ...],
) -> int:
    """Remove deleted snapshots; absent identifiers are skipped."""
    deleted_count = 0
    for snapshot in deleted:
        if working_set.pop(snapshot.persistent_identifier, None) is None:
            _LOGGER.debug(
                "delete_target_missing",
                entity_name=snapshot.entity_name,
                primary_key=snapshot.persistent_identifier.primary_key,
            )
            continue
        deleted_count += 1
    return deleted_count


def _lock_for(document_path: Path) -> threading.Lock:
    """Return the process-wide lock guarding one backing path."""
    key = document_path.expanduser().resolve()
    with _PATH_LOCKS_GUARD:
        return _PATH_LOCKS.setdefault(key, threading.Lock())
