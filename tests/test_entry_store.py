from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError

import entry_store
from errors import StoreFailure
from models import db


@pytest.fixture
def ctx(flask_app):
    with flask_app.app_context():
        yield


def _seed():
    entry_store.insert_entry("u1", "morning walk", "joy", 0.91, datetime(2026, 3, 9, 8))
    entry_store.insert_entry("u1", "Late meeting again", "sadness", 0.64, datetime(2026, 3, 10, 22))
    entry_store.insert_entry("u1", "quiet evening", "neutral", 0.55, datetime(2026, 3, 11, 19))
    entry_store.insert_entry("u2", "someone else", "joy", 0.99, datetime(2026, 3, 10, 12))


def test_insert_normalizes_mood_and_keeps_raw_confidence(ctx):
    j = entry_store.insert_entry("u1", "hello", "LABEL_2", 0.87654)
    assert j.id is not None
    assert j.created_at is not None
    assert j.mood == "positive"
    assert j.confidence == 0.87654
    assert j.to_dict()["confidence"] == 0.88


def test_queries_are_scoped_to_user(ctx):
    _seed()
    assert [j.entry for j in entry_store.query_entries("u1")] == [
        "quiet evening", "Late meeting again", "morning walk",
    ]
    assert [j.entry for j in entry_store.query_entries("u2")] == ["someone else"]
    assert entry_store.query_entries("nobody") == []


def test_date_range_is_inclusive(ctx):
    _seed()
    items = entry_store.query_entries("u1", start=date(2026, 3, 10), end=date(2026, 3, 10))
    assert [j.entry for j in items] == ["Late meeting again"]


def test_filters_and_sorting(ctx):
    _seed()
    assert [j.entry for j in entry_store.query_entries("u1", mood="sad")] == ["Late meeting again"]
    assert [j.entry for j in entry_store.query_entries("u1", search="MEETING")] == ["Late meeting again"]
    by_conf = entry_store.query_entries("u1", sort="confidence", descending=False)
    assert [j.confidence for j in by_conf] == [0.55, 0.64, 0.91]
    with pytest.raises(ValueError):
        entry_store.query_entries("u1", sort="entry")


def test_update_changes_text_only(ctx):
    j = entry_store.insert_entry("u1", "first draft", "sad", 0.7)
    updated = entry_store.update_entry_text("u1", j.id, "second draft")
    assert updated.entry == "second draft"
    assert updated.mood == "sad"
    assert updated.confidence == 0.7


def test_update_and_delete_respect_ownership(ctx):
    j = entry_store.insert_entry("u1", "mine", "joy", 0.7)
    assert entry_store.update_entry_text("u2", j.id, "hijack") is None
    assert entry_store.delete_entry("u2", j.id) is False
    assert entry_store.delete_entry("u1", j.id) is True
    assert entry_store.get_entry("u1", j.id) is None


def test_commit_failure_raises_store_failure(ctx, monkeypatch):
    def boom():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "commit", boom)
    with pytest.raises(StoreFailure) as exc_info:
        entry_store.insert_entry("u1", "hello", "joy", 0.9)
    assert exc_info.value.operation == "insert"


def test_search_matches_wildcards_literally(ctx):
    entry_store.insert_entry("u1", "gave it 100% today", "joy", 0.9)
    entry_store.insert_entry("u1", "gave it 1000 tries", "sad", 0.9)
    entry_store.insert_entry("u1", "renamed a_b.txt", "neutral", 0.9)
    entry_store.insert_entry("u1", "renamed axb.txt", "neutral", 0.9)
    entry_store.insert_entry("u1", "path C:\\temp", "neutral", 0.9)
    assert [j.entry for j in entry_store.query_entries("u1", search="100%")] == ["gave it 100% today"]
    assert [j.entry for j in entry_store.query_entries("u1", search="a_b")] == ["renamed a_b.txt"]
    assert [j.entry for j in entry_store.query_entries("u1", search="C:\\temp")] == ["path C:\\temp"]
