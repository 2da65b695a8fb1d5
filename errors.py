from __future__ import annotations


class NLSQLError(Exception):
    """Base class for every error raised by the question-to-answer pipeline."""


class SchemaNotFoundError(NLSQLError):
    def __init__(self, table: str) -> None:
        super().__init__(f"Table not found in database schema: {table}")
        self.table = table


class MissingPlaceholderError(NLSQLError):
    def __init__(self, template: str, missing: list[str]) -> None:
        super().__init__(f"Template {template!r} is missing value(s) for: {', '.join(missing)}")
        self.template = template
        self.missing = missing


class GenerationUnavailableError(NLSQLError):
    """The language-model service could not be reached or answered with an error."""


class GenerationEmptyError(NLSQLError):
    """The language-model service answered without any usable text."""


class QueryExecutionError(NLSQLError):
    """The storage engine rejected the SQL. The message is the engine's own diagnostic."""


class SqlPolicyError(QueryExecutionError):
    """The SQL was refused by the read-only policy before reaching the engine."""
