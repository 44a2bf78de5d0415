"""SQLite conversation repository and unit-of-work tests."""
from __future__ import annotations

import sqlite3
import time

import pytest

from mka_relay.base.models import DEFAULT_TITLE, ConversationType
from mka_relay.persistence import get_uow
from mka_relay.persistence.sqlite import create_connection, init_schema
from mka_relay.persistence.sqlite.engine import get_db_path


@pytest.fixture()
def uow():
    unit = get_uow(":memory:")
    yield unit
    unit.close()


def test_create_uses_default_title_and_type(uow):
    with uow:
        conv = uow.conversations.create()
    assert conv.title == DEFAULT_TITLE  # nosec B101
    assert conv.type is ConversationType.CHAT  # nosec B101
    assert conv.created_at == conv.updated_at  # nosec B101
    assert conv.created_at.tzinfo is not None  # nosec B101


def test_get_unknown_returns_none(uow):
    assert uow.conversations.get("missing") is None  # nosec B101


def test_list_recent_orders_by_update_and_filters_type(uow):
    with uow:
        first = uow.conversations.create("first")
        time.sleep(0.002)
        uow.conversations.create("deck", ConversationType.PPT)
        time.sleep(0.002)
        uow.conversations.create("second")
        time.sleep(0.002)
        uow.conversations.touch(first.id)

    chats = [c.title for c in uow.conversations.list_recent(ConversationType.CHAT)]
    assert chats == ["first", "second"]  # nosec B101
    everything = [c.title for c in uow.conversations.list_recent()]
    assert everything[0] == "first" and len(everything) == 3  # nosec B101
    assert len(list(uow.conversations.list_recent(limit=1))) == 1  # nosec B101


def test_rename_touch_and_delete(uow):
    with uow:
        conv = uow.conversations.create("draft")
        assert uow.conversations.rename(conv.id, "final")  # nosec B101
    assert uow.conversations.get(conv.id).title == "final"  # nosec B101
    with uow:
        assert uow.conversations.delete(conv.id)  # nosec B101
    assert uow.conversations.get(conv.id) is None  # nosec B101
    assert not uow.conversations.touch(conv.id)  # nosec B101
    assert not uow.conversations.rename(conv.id, "x")  # nosec B101
    assert not uow.conversations.delete(conv.id)  # nosec B101


def test_rollback_on_error(uow):
    with pytest.raises(RuntimeError):
        with uow:
            uow.conversations.create("doomed")
            raise RuntimeError("boom")
    assert list(uow.conversations.list_recent()) == []  # nosec B101


def test_type_check_constraint_rejects_unknown_type(uow):
    with pytest.raises(sqlite3.IntegrityError):
        uow._conn.execute(
            "INSERT INTO conversations(id, title, type, created_at, updated_at) VALUES('x', 't', 'calendar', 'a', 'b')"
        )


def test_file_database_persists_across_connections(tmp_path):
    path = str(tmp_path / "nested" / "relay.sqlite3")
    unit = get_uow(path)
    with unit:
        conv = unit.conversations.create("kept")
    unit.close()

    conn = create_connection(path)
    init_schema(conn)
    row = conn.execute("SELECT title FROM conversations WHERE id = ?", (conv.id,)).fetchone()
    conn.close()
    assert row["title"] == "kept"  # nosec B101


def test_db_path_expands_home_and_keeps_memory():
    assert get_db_path(":memory:") == ":memory:"  # nosec B101
    assert not get_db_path("~/relay.sqlite3").startswith("~")  # nosec B101
