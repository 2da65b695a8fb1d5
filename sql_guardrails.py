from __future__ import annotations

import re

from errors import SqlPolicyError

# Writes are stopped by the read-only connection; this only gates statement shape.
READ_STATEMENTS = ("select", "with", "values")

_LITERAL_RE = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")
_COMMENT_RE = re.compile(r"--[^\n]*|/\*.*?\*/", re.DOTALL)
_LEADING_WORD_RE = re.compile(r"[a-zA-Z]+")


def _neutralize(sql: str) -> str:
    """Blank out quoted text, then comments, so their contents are never mistaken for SQL."""
    return _COMMENT_RE.sub(" ", _LITERAL_RE.sub("''", sql)).strip()


def check_read_only_sql(sql: str) -> None:
    """Raise SqlPolicyError unless `sql` is one statement that starts with a read keyword."""
    cleaned = _neutralize(sql or "")
    if not cleaned:
        raise SqlPolicyError("SQL is empty.")

    if ";" in cleaned.rstrip("; \t\r\n"):
        raise SqlPolicyError("Only a single SQL statement is allowed.")

    leading = _LEADING_WORD_RE.match(cleaned.lstrip("("))
    if leading is None or leading.group(0).lower() not in READ_STATEMENTS:
        raise SqlPolicyError("Only SELECT queries are allowed in read-only mode.")
