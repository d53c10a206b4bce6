"""Tests for Store — wiring, transactions and teardown."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import inspect

from acltree.domain.errors import ConfigurationError
from acltree.domain.types import Role
from acltree.infrastructure.store import Store
from tests.conftest import make_store, requestors


class TestWiring:
    def test_tables_created(self, store: Store) -> None:
        names = set(inspect(store.engine).get_table_names())
        assert {
            "resource_collections",
            "resource_nodes",
            "requestor_collections",
            "requestor_nodes",
        } <= names

    def test_strategy_columns(self, store: Store, strategy_name: str) -> None:
        columns = {c["name"] for c in inspect(store.engine).get_columns("requestor_nodes")}
        assert {"id", "collection_id", "parent_id"} <= columns
        assert ("path" in columns) is (strategy_name == "path")

    def test_database_under_root(self, store: Store, tmp_path: Path) -> None:
        assert (tmp_path / ".acltree" / "acltree.db").is_file()

    def test_registry_initialized(self, store: Store, strategy_name: str) -> None:
        assert store.registry.is_initialized
        assert store.strategy.name == strategy_name

    def test_unknown_strategy(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            make_store(tmp_path, "nested-set")

    def test_context_manager(self, tmp_path: Path) -> None:
        with make_store(tmp_path) as s:
            s.resolve("x", Role.REQUESTOR)
        assert not s.registry.is_initialized

    def test_reopen_existing_database(self, tmp_path: Path, strategy_name: str) -> None:
        with make_store(tmp_path, strategy_name) as s:
            employees, managers = requestors(s, "employees", "managers")
            managers.join(employees)
        with make_store(tmp_path, strategy_name) as s:
            assert s.resolve("managers", Role.REQUESTOR).is_("employees")


class TestTransactions:
    def test_nested_joins_outer(self, store: Store) -> None:
        with store.transaction() as outer:
            assert store.in_transaction
            with store.transaction() as inner:
                assert inner is outer
        assert not store.in_transaction

    def test_rollback_on_error(self, store: Store) -> None:
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.resolve("temporary", Role.REQUESTOR)
                raise RuntimeError("boom")
        assert store.all_collections(Role.REQUESTOR) == []

    def test_graph_invalidated_after_transaction(self, store: Store) -> None:
        employees, managers = requestors(store, "employees", "managers")
        assert store.graph.descendants(Role.REQUESTOR, employees.id) == set()
        managers.join(employees)
        assert store.graph.descendants(Role.REQUESTOR, employees.id) == {managers.id}


class TestRecordLoaders:
    def test_register_and_lookup(self, store: Store) -> None:
        def loader(key: str) -> str:
            return f"user-{key}"

        store.register_record_loader("User", loader)
        assert store.record_loader("User") is loader
        assert store.record_loader("Group") is None
