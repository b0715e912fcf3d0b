from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from loradb.core.grammar import TableName
from loradb.core.schema import User
from loradb.core.tables import get_table, list_tables
from loradb.db import Database, ensure_table, ensure_tables
from loradb.store.errors import StoreTimeoutError


def test_ensure_tables_creates_catalog_and_admin(store, settings, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="loradb.db"):
        ensure_tables(store, settings)

    assert store.has_schema()
    assert store.tables() == sorted(d.name.value for d in list_tables())
    for d in list_tables():
        info = store.table_info(d.name)
        assert info.attributes == d.fields
        assert list(info.index) == d.index_positions()

    mutations = store.mutations()
    assert mutations.count("create_schema") == 1
    assert mutations.count("create_table") == len(list_tables())
    assert mutations.count("write") == 1

    db = Database(store, settings)
    assert db.get(TableName.USERS, "admin") == User(name="admin", password="admin")
    assert "Database create schema" in caplog.text
    assert "Database create rxframes" in caplog.text


def test_second_ensure_issues_no_mutations(store, settings) -> None:
    ensure_tables(store, settings)
    store.calls.clear()

    ensure_tables(store, settings)

    assert store.mutations() == []


def test_admin_is_seeded_only_on_creation(store, settings) -> None:
    ensure_tables(store, settings)
    store.delete("users", "admin")

    ensure_tables(store, settings)

    assert store.all_keys("users") == []


def test_admin_credentials_come_from_settings(store, settings) -> None:
    custom = replace(settings, admin_user="ops", admin_pass="s3cret")
    ensure_table(store, get_table(TableName.USERS), custom)

    assert Database(store, custom).get(TableName.USERS, "ops") == User(name="ops", password="s3cret")


def test_ensure_table_propagates_readiness_timeout(store, settings, monkeypatch) -> None:
    monkeypatch.setattr(store, "create_table", lambda definition: None)

    with pytest.raises(StoreTimeoutError) as info:
        ensure_table(store, get_table(TableName.LINKS), settings)

    assert info.value.tables == ["links"]
