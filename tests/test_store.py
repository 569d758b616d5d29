"""Tests for the JSON file store."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from goodfirst.application.cache_gate import should_refresh
from goodfirst.domain.repository import RawIssue, RawMetadata, RepoRecord, StoreState
from goodfirst.infrastructure.database import PostgresStore
from goodfirst.infrastructure.store import JsonFileStore, create_store

from conftest import make_issues, make_metadata


def sample_records():
    return (
        RepoRecord.build("a", "one", RawMetadata.from_payload(make_metadata(repo_id=1)), RawIssue.list_from_payload(make_issues(3))),
        RepoRecord.build("b", "two", RawMetadata.from_payload(make_metadata(repo_id=2, language=None)), RawIssue.list_from_payload(make_issues(10))),
    )


def test_missing_file_reads_as_empty_state(tmp_path):
    store = JsonFileStore(str(tmp_path / "missing.json"))
    state = store.read_store()

    assert state == StoreState.empty()
    assert should_refresh(state) is True


def test_empty_file_reads_as_empty_state(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("")

    assert JsonFileStore(str(path)).read_store() == StoreState.empty()


def test_round_trip_preserves_details_and_timestamp(tmp_path):
    store = JsonFileStore(str(tmp_path / "nested" / "store.json"))
    written = StoreState(last_modified=datetime.now(timezone.utc), details=sample_records())

    store.write_store(written)
    loaded = store.read_store()

    assert loaded.details == written.details
    assert abs(loaded.last_modified - written.last_modified) < timedelta(milliseconds=1)
    assert should_refresh(loaded) is False


def test_written_document_uses_string_ids_and_iso_timestamps(tmp_path):
    path = tmp_path / "store.json"
    JsonFileStore(str(path)).write_store(
        StoreState(last_modified=datetime(2024, 3, 1, tzinfo=timezone.utc), details=sample_records())
    )

    document = json.loads(path.read_text())

    assert document["last_modified"] == "2024-03-01T00:00:00.000Z"
    assert document["details"][0]["id"] == "1"
    assert document["details"][0]["last_modified"] == "2024-03-01T12:00:00.000Z"
    assert not (tmp_path / "store.json.tmp").exists()


def test_write_replaces_previous_snapshot(tmp_path):
    store = JsonFileStore(str(tmp_path / "store.json"))
    store.write_store(StoreState(last_modified=datetime.now(timezone.utc), details=sample_records()))
    store.write_store(StoreState(last_modified=datetime.now(timezone.utc), details=()))

    assert store.read_store().details == ()


def test_unparseable_timestamp_reads_as_stale(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"last_modified": "whenever", "details": []}))

    state = JsonFileStore(str(path)).read_store()

    assert state.last_modified is None
    assert should_refresh(state) is True


def test_malformed_store_is_not_masked(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")

    with pytest.raises(ValueError):
        JsonFileStore(str(path)).read_store()


def test_create_store_picks_backend(tmp_path):
    assert isinstance(create_store("json", str(tmp_path / "s.json")), JsonFileStore)
    assert isinstance(create_store("postgres", ""), PostgresStore)
    with pytest.raises(ValueError):
        create_store("redis", "")


def test_failed_write_keeps_previous_snapshot_and_no_temp_file(tmp_path):
    path = tmp_path / "store.json"
    store = JsonFileStore(str(path))
    store.write_store(StoreState(last_modified=datetime.now(timezone.utc), details=sample_records()))

    unserializable = RepoRecord(
        id="3", name="three", owner="c", description=object(), language=None,
        url=None, stars=0, last_modified="2024-03-01T12:00:00.000Z",
    )
    with pytest.raises(TypeError):
        store.write_store(StoreState(last_modified=datetime.now(timezone.utc), details=(unserializable,)))

    assert not (tmp_path / "store.json.tmp").exists()
    assert store.read_store().details == sample_records()
