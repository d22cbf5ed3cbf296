"""Unit tests for the JSON snapshot store."""

from __future__ import annotations

import json
import shutil
import threading
from pathlib import Path

import pytest

from core.config import JsonStoreConfiguration
from core.errors import (
    JsonStoreDecodeError,
    JsonStoreEncodeError,
    JsonStoreRemapError,
    JsonStoreSchemaError,
    JsonStoreUnsupportedPredicateError,
    JsonStoreUnsupportedSortError,
)
from core.types import (
    FetchRequest,
    PersistentIdentifier,
    SaveRequest,
    Snapshot,
    SortDescriptor,
)
from store.json_store import JsonStore, _apply_inserts, _lock_for
from tests.fixture_paths import fixture_path


def _insert(store: JsonStore, *snapshots: Snapshot) -> dict[PersistentIdentifier, PersistentIdentifier]:
    result = store.save(SaveRequest(inserted=snapshots))
    return dict(result.remapped_identifiers)


def _person(name: str) -> Snapshot:
    return Snapshot(PersistentIdentifier.temporary("Person"), {"name": name})


def test_constructor_requires_schema(tmp_path: Path) -> None:
    """Store construction should fail without a schema."""
    config = JsonStoreConfiguration(name="test", file_location=tmp_path / "s.json")

    with pytest.raises(JsonStoreSchemaError):
        JsonStore(config)


def test_identifier_is_file_base_name(store: JsonStore) -> None:
    """Store identifier should derive from the backing file name."""
    assert store.identifier == "library.json" and store.name == "test"


def test_migration_plan_is_accepted(store_config: JsonStoreConfiguration) -> None:
    """Reserved migration hook should not affect construction."""
    store = JsonStore(store_config, migration_plan=object())

    assert store.read() == []


def test_read_missing_file_returns_empty(store: JsonStore) -> None:
    """Reading a store with no backing file should return no snapshots."""
    assert store.read() == [] and not store.file_location.exists()


def test_read_malformed_file_raises(store: JsonStore) -> None:
    """Malformed backing documents should raise a decode error."""
    store.file_location.write_text("{ not json", encoding="utf-8")

    with pytest.raises(JsonStoreDecodeError):
        store.read()


def test_fetch_rejects_predicate_before_io(store: JsonStore) -> None:
    """Predicates should fail even when the document is unreadable."""
    store.file_location.write_text("{ not json", encoding="utf-8")
    request = FetchRequest(entity_name="Book", predicate=lambda snapshot: True)

    with pytest.raises(JsonStoreUnsupportedPredicateError):
        store.fetch(request)


def test_fetch_rejects_sort_before_io(store: JsonStore) -> None:
    """Sort descriptors should fail even when the document is unreadable."""
    store.file_location.write_text("{ not json", encoding="utf-8")
    request = FetchRequest(entity_name="Book", sort_by=(SortDescriptor("title"),))

    with pytest.raises(JsonStoreUnsupportedSortError):
        store.fetch(request)


def test_fetch_filters_by_entity_name(store: JsonStore) -> None:
    """Fetch should return only snapshots of the requested entity type."""
    shutil.copyfile(fixture_path("documents/library.json"), store.file_location)

    result = store.fetch(FetchRequest(entity_name="Book"))

    assert sorted(snapshot.values["title"] for snapshot in result.snapshots) == [
        "Pride and Prejudice",
        "Sense and Sensibility",
    ]


def test_fetch_count_and_identifiers(store: JsonStore) -> None:
    """Count and identifier fetches should follow the same filtering."""
    shutil.copyfile(fixture_path("documents/library.json"), store.file_location)
    request = FetchRequest(entity_name="Author")

    identifiers = store.fetch_identifiers(request)

    assert store.fetch_count(request) == 1 and identifiers[0].primary_key == "author-1"


def test_fetch_unknown_entity_returns_empty(store: JsonStore) -> None:
    """Entity types absent from the document should fetch nothing."""
    shutil.copyfile(fixture_path("documents/library.json"), store.file_location)

    assert store.fetch(FetchRequest(entity_name="Publisher")).snapshots == ()


def test_save_assigns_distinct_permanent_identifiers(store: JsonStore) -> None:
    """Inserts of one entity type should receive pairwise distinct identifiers."""
    people = [_person(f"person-{index}") for index in range(10)]

    remap = _insert(store, *people)

    permanent = list(remap.values())
    assert len(set(permanent)) == 10 and all(
        not identifier.is_temporary and identifier.store_identifier == "library.json"
        for identifier in permanent
    )


def test_save_remap_keeps_entity_name(store: JsonStore) -> None:
    """Permanent identifiers should keep the temporary identifier's entity name."""
    person = _person("Alice")

    remap = _insert(store, person)

    assert remap[person.persistent_identifier].entity_name == "Person"


def test_save_rewrites_references_between_inserts(store: JsonStore) -> None:
    """References among inserts in one batch should persist as permanent identifiers."""
    author_id = PersistentIdentifier.temporary("Author")
    book_id = PersistentIdentifier.temporary("Book")
    author = Snapshot(author_id, {"name": "Jane Austen", "books": [book_id]})
    book = Snapshot(book_id, {"title": "Emma", "author": author_id})

    remap = _insert(store, author, book)

    stored_book = store.fetch(FetchRequest(entity_name="Book")).snapshots[0]
    stored_author = store.fetch(FetchRequest(entity_name="Author")).snapshots[0]
    assert stored_book.values["author"] == remap[author_id] and stored_author.values["books"] == [
        remap[book_id]
    ]


def test_update_rewrites_reference_to_new_insert(store: JsonStore) -> None:
    """Updates in the same batch may point at freshly inserted records."""
    remap = _insert(store, Snapshot(PersistentIdentifier.temporary("Book"), {"title": "Emma"}))
    book_id = next(iter(remap.values()))
    author_id = PersistentIdentifier.temporary("Author")

    result = store.save(
        SaveRequest(
            inserted=(Snapshot(author_id, {"name": "Jane Austen"}),),
            updated=(Snapshot(book_id, {"title": "Emma", "author": author_id}),),
        )
    )

    stored_book = store.fetch(FetchRequest(entity_name="Book")).snapshots[0]
    assert stored_book.values["author"] == result.remapped_identifiers[author_id]


def test_update_overwrites_existing_snapshot(store: JsonStore) -> None:
    """Updates should replace the stored snapshot under its identifier."""
    remap = _insert(store, _person("Alice"))
    person_id = next(iter(remap.values()))

    store.save(SaveRequest(updated=(Snapshot(person_id, {"name": "Alicia"}),)))

    assert store.read() == [Snapshot(person_id, {"name": "Alicia"})]


def test_delete_removes_snapshot(store: JsonStore) -> None:
    """Deleted snapshots should be absent from the next read."""
    remap = _insert(store, _person("Alice"), _person("Bob"))
    first_id = next(iter(remap.values()))

    store.save(SaveRequest(deleted=(Snapshot(first_id, {}),)))

    assert [snapshot.persistent_identifier for snapshot in store.read()] == list(remap.values())[1:]


def test_delete_of_absent_snapshot_is_noop(store: JsonStore) -> None:
    """Deleting an unknown identifier should leave the document unchanged."""
    _insert(store, _person("Alice"))
    before = json.loads(store.file_location.read_text(encoding="utf-8"))
    missing = Snapshot(PersistentIdentifier.permanent("library.json", "Person", "missing"), {})

    result = store.save(SaveRequest(deleted=(missing,)))

    after = json.loads(store.file_location.read_text(encoding="utf-8"))
    assert after == before and result.remapped_identifiers == {}


def test_save_result_carries_store_identifier(store: JsonStore) -> None:
    """Save result should name the persisting store."""
    result = store.save(SaveRequest())

    assert result.store_identifier == "library.json" and store.read() == []


def test_save_rejects_dangling_temporary_reference(store: JsonStore) -> None:
    """Temporary references to records outside the batch must not be persisted."""
    orphan = Snapshot(
        PersistentIdentifier.temporary("Book"),
        {"author": PersistentIdentifier.temporary("Author")},
    )

    with pytest.raises(JsonStoreEncodeError):
        store.save(SaveRequest(inserted=(orphan,)))

    assert not store.file_location.exists()


def test_failed_save_keeps_previous_document(store: JsonStore) -> None:
    """Encoding failures should leave the prior document untouched."""
    _insert(store, _person("Alice"))
    before = store.file_location.read_text(encoding="utf-8")

    with pytest.raises(JsonStoreEncodeError):
        _insert(store, Snapshot(PersistentIdentifier.temporary("Person"), {"name": object()}))

    assert store.file_location.read_text(encoding="utf-8") == before


def test_apply_inserts_raises_for_missing_mapping() -> None:
    """Inserts without a permanent identifier should be surfaced, not dropped."""
    with pytest.raises(JsonStoreRemapError):
        _apply_inserts({}, (_person("Alice"),), {})


def test_erase_removes_backing_document(store: JsonStore) -> None:
    """Erase should delete the file and leave an empty store."""
    _insert(store, _person("Alice"))

    store.erase()

    assert not store.file_location.exists() and store.read() == []


def test_erase_without_document_is_noop(store: JsonStore) -> None:
    """Erasing an empty store should not raise."""
    store.erase()

    assert store.read() == []


def test_save_with_unencodable_string_keeps_previous_document(store: JsonStore) -> None:
    """Lone surrogates should fail with a typed error and leave no temp file."""
    _insert(store, _person("Alice"))
    before = store.file_location.read_text(encoding="utf-8")

    with pytest.raises(JsonStoreEncodeError):
        _insert(store, _person("\ud800"))

    assert store.file_location.read_text(encoding="utf-8") == before and [
        path.name for path in store.file_location.parent.iterdir()
    ] == ["library.json"]


def test_concurrent_saves_on_shared_path_lose_no_inserts(
    store_config: JsonStoreConfiguration,
) -> None:
    """Two stores on one file should serialize saves across threads."""
    stores = [JsonStore(store_config), JsonStore(store_config)]
    thread_count = 20
    threads = [
        threading.Thread(target=_insert, args=(stores[index % 2], _person(f"person-{index}")))
        for index in range(thread_count)
    ]

    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(stores[0].read()) == thread_count


def test_lock_is_shared_for_equivalent_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Relative and absolute spellings of one file should share a lock."""
    monkeypatch.chdir(tmp_path)

    assert _lock_for(Path("library.json")) is _lock_for(tmp_path / "library.json")
