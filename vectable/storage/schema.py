"""
SQLite Schema: DDL for the Collection Catalog and Vector Tables

Tables:
- vectable_collections: one row per collection (dimension, engine, encoding)
- <name>_vectors: records of one collection

Record ids use AUTOINCREMENT so an id is never reassigned after delete.
"""

from __future__ import annotations

import sqlite3

from vectable.core.constants import VECTOR_TABLE_SUFFIX

CATALOG_TABLE = "vectable_collections"

CATALOG_DDL = f"""
CREATE TABLE IF NOT EXISTS {CATALOG_TABLE} (
    name TEXT PRIMARY KEY NOT NULL,
    dimension INTEGER NOT NULL CHECK (dimension > 0),
    engine TEXT NOT NULL,
    encoding TEXT NOT NULL,
    created INTEGER DEFAULT (strftime('%s', 'now'))
);
"""

VECTOR_TABLE_DDL = """
CREATE TABLE {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    normalized_vector BLOB NOT NULL CHECK (length(normalized_vector) = {blob_length}),
    binary_code BLOB NOT NULL CHECK (length(binary_code) = {code_length}),
    created INTEGER DEFAULT (strftime('%s', 'now'))
);
"""


def vector_table_name(name: str) -> str:
    return f"{name}{VECTOR_TABLE_SUFFIX}"


def escape_identifier(identifier: str) -> str:
    """Quote an SQL identifier, doubling embedded double quotes."""
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def vector_table_ddl(table: str, blob_length: int, code_length: int) -> str:
    """CREATE TABLE statement for one collection's records (no IF NOT EXISTS)."""
    return VECTOR_TABLE_DDL.format(
        table=escape_identifier(table),
        blob_length=int(blob_length),
        code_length=int(code_length),
    )


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def initialize_catalog(conn: sqlite3.Connection) -> None:
    """Create the catalog table if missing. Idempotent."""
    conn.execute(CATALOG_DDL)
