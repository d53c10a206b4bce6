"""Tests for table construction and the engine factory."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import Column, Integer, MetaData, insert, text
from sqlalchemy.exc import IntegrityError

from acltree.domain.types import Role
from acltree.infrastructure.database import build_tables, create_db_engine, init_database


class TestBuildTables:
    def test_both_roles(self) -> None:
        tables = build_tables(MetaData())
        assert set(tables) == {Role.RESOURCE, Role.REQUESTOR}
        assert tables[Role.RESOURCE].collections.name == "resource_collections"
        assert tables[Role.REQUESTOR].nodes.name == "requestor_nodes"

    def test_extra_columns_per_role(self) -> None:
        tables = build_tables(MetaData(), lambda: [Column("depth", Integer)])
        assert "depth" in tables[Role.RESOURCE].nodes.c
        assert "depth" in tables[Role.REQUESTOR].nodes.c
        assert tables[Role.RESOURCE].nodes.c.depth is not tables[Role.REQUESTOR].nodes.c.depth


class TestConstraints:
    @pytest.fixture
    def engine_and_tables(self, tmp_path: Path):  # noqa: ANN201
        metadata = MetaData()
        tables = build_tables(metadata)
        engine = init_database(f"sqlite:///{tmp_path / 'db' / 'acl.db'}", metadata)
        try:
            yield engine, tables
        finally:
            engine.dispose()

    @pytest.mark.parametrize(
        "values",
        [
            {"alias": "x", "model": "User", "foreign_key": "1"},
            {"model": "User"},
            {"foreign_key": "1"},
        ],
    )
    def test_identity_check(self, engine_and_tables, values: dict) -> None:  # noqa: ANN001
        engine, tables = engine_and_tables
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(insert(tables[Role.RESOURCE].collections).values(**values))

    def test_node_needs_collection(self, engine_and_tables) -> None:  # noqa: ANN001
        engine, tables = engine_and_tables
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(insert(tables[Role.RESOURCE].nodes).values(collection_id=999))


class TestEngine:
    def test_sqlite_pragmas(self, tmp_path: Path) -> None:
        engine = create_db_engine(f"sqlite:///{tmp_path / 'a.db'}")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"
        engine.dispose()

    def test_memory_database(self) -> None:
        metadata = MetaData()
        build_tables(metadata)
        engine = init_database("sqlite://", metadata)
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()

    def test_init_idempotent(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'a.db'}"
        for _ in range(2):
            metadata = MetaData()
            build_tables(metadata)
            init_database(url, metadata).dispose()
