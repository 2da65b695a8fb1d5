from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Sequence

from errors import SchemaNotFoundError

DEFAULT_TABLES = ("Employees",)

logger = logging.getLogger(__name__)


def open_database(db_path: str, mode: str = "rw") -> sqlite3.Connection:
    """Open an existing database file; `mode` is SQLite's URI mode ("rw" or "ro"), neither creates the file."""
    return sqlite3.connect(f"{Path(db_path).resolve().as_uri()}?mode={mode}", uri=True)


def get_schema_context(db_path: str, tables: Sequence[str] = DEFAULT_TABLES) -> str:
    """Return the stored CREATE TABLE text for each table, in the order given."""
    try:
        conn = open_database(db_path, mode="ro")
    except sqlite3.OperationalError as exc:
        logger.error("Cannot open database %s: %s", db_path, exc)
        raise SchemaNotFoundError(tables[0]) from exc
    try:
        cur = conn.cursor()
        definitions: list[str] = []
        for table in tables:
            cur.execute(
                "SELECT sql FROM sqlite_master WHERE type='table' AND name=?",
                (table,),
            )
            row = cur.fetchone()
            if row is None or not row[0]:
                raise SchemaNotFoundError(table)
            definitions.append(row[0].strip())
        logger.debug("Loaded schema for %d table(s) from %s", len(definitions), db_path)
        return "\n\n".join(definitions)
    finally:
        conn.close()
