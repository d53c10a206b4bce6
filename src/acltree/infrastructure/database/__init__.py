"""Database engine and per-strategy table factory via SQLAlchemy Core."""

from acltree.infrastructure.database.engine import create_db_engine, init_database
from acltree.infrastructure.database.schema import (
    RoleTables,
    build_tables,
    collections_table,
    nodes_table,
)

__all__ = [
    "RoleTables",
    "build_tables",
    "collections_table",
    "create_db_engine",
    "init_database",
    "nodes_table",
]
