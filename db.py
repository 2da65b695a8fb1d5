from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from errors import QueryExecutionError
from schema_context import DEFAULT_TABLES, get_schema_context, open_database
from sql_guardrails import check_read_only_sql

DELIMITER = "\t"
NULL_LITERAL = ""

logger = logging.getLogger(__name__)


def _clean_field(text: str) -> str:
    return text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ").replace(DELIMITER, " ")


def format_cell(value: Any) -> str:
    if value is None:
        return NULL_LITERAL
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _clean_field(bytes(value).hex())
    return _clean_field(str(value))


@dataclass(frozen=True)
class TabularResult:
    """Column names plus stringified rows. Zero columns means "no applicable result"."""

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        width = len(self.columns)
        for idx, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"Row {idx} has {len(row)} cell(s), expected {width}.")

    @classmethod
    def from_cursor(cls, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> TabularResult:
        return cls(
            columns=tuple(_clean_field(str(c)) for c in columns),
            rows=tuple(tuple(format_cell(v) for v in row) for row in rows),
        )

    @property
    def is_empty(self) -> bool:
        return not self.columns

    def to_text(self) -> str:
        if self.is_empty:
            return ""
        lines = [DELIMITER.join(self.columns)]
        lines.extend(DELIMITER.join(row) for row in self.rows)
        return "\n".join(lines)


def execute_query(db_path: str, sql: str, read_only: bool = False) -> TabularResult:
    if read_only:
        check_read_only_sql(sql)

    try:
        conn = open_database(db_path, mode="ro" if read_only else "rw")
    except sqlite3.Error as exc:
        raise QueryExecutionError(str(exc)) from exc
    try:
        cur = conn.cursor()
        cur.execute(sql)
        if cur.description is None:
            conn.commit()
            return TabularResult()
        columns = [d[0] for d in cur.description]
        rows = cur.fetchall()
        logger.debug("Query returned %d column(s), %d row(s)", len(columns), len(rows))
        return TabularResult.from_cursor(columns, rows)
    except (sqlite3.Error, sqlite3.Warning) as exc:
        raise QueryExecutionError(str(exc)) from exc
    finally:
        conn.close()


class Database(ABC):
    @abstractmethod
    def fetch_schema(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def run(self, sql: str) -> TabularResult:
        raise NotImplementedError


class SQLiteDatabase(Database):
    def __init__(self, db_path: str, tables: Sequence[str] = DEFAULT_TABLES, read_only: bool = False) -> None:
        self.db_path = db_path
        self.tables = tuple(tables)
        self.read_only = read_only

    def fetch_schema(self) -> str:
        return get_schema_context(self.db_path, self.tables)

    def run(self, sql: str) -> TabularResult:
        return execute_query(self.db_path, sql, read_only=self.read_only)
