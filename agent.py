#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

from dotenv import load_dotenv

from db import Database, SQLiteDatabase, TabularResult
from errors import (
    GenerationEmptyError,
    GenerationUnavailableError,
    MissingPlaceholderError,
    QueryExecutionError,
    SchemaNotFoundError,
)
from llm_client import LLMClient, OpenAIClient
from prompts import FINAL_ANSWER, TEXT_TO_SQL, bind
from seed_data import seed_database

EXIT_KEYWORD = "exit"
NO_DATA_MESSAGE = "I couldn't find any data for that query."

STATUS_ANSWERED = "answered"
STATUS_NO_DATA = "no_data"
STATUS_FAILED = "failed"

_FENCED_RE = re.compile(r"```(.*?)(?:```|\Z)", re.DOTALL)
_FENCE_LANG_RE = re.compile(r"^[ \t]*(?:sql|sqlite3?|postgres(?:ql)?|mysql|tsql|plsql)\b", re.IGNORECASE)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTurn:
    question: str
    status: str
    sql: str = ""
    result: TabularResult = field(default_factory=TabularResult)
    answer: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["data"] = self.result.to_text()
        return payload


def extract_sql(text: str) -> str:
    """Trim a completion and unwrap the first markdown code fence if the model added one."""
    cleaned = text.strip()
    match = _FENCED_RE.search(cleaned)
    if match:
        return _FENCE_LANG_RE.sub("", match.group(1), count=1).strip()
    return cleaned


def run_turn(question: str, schema: str, llm: LLMClient, database: Database) -> ConversationTurn:
    try:
        raw = llm.complete(bind(TEXT_TO_SQL, {"schema": schema, "question": question}))
    except (GenerationUnavailableError, GenerationEmptyError) as exc:
        logger.warning("SQL generation failed: %s", exc)
        return ConversationTurn(question=question, status=STATUS_FAILED, error=f"SQL generation failed: {exc}")

    sql = extract_sql(raw)
    if not sql:
        logger.warning("SQL generation produced no statement: %r", raw)
        return ConversationTurn(
            question=question, status=STATUS_FAILED, error="SQL generation failed: the model returned no SQL."
        )
    logger.debug("Generated SQL: %s", sql)

    try:
        result = database.run(sql)
    except QueryExecutionError as exc:
        logger.warning("Query execution failed: %s", exc)
        return ConversationTurn(question=question, status=STATUS_FAILED, sql=sql, error=f"Query failed: {exc}")

    if result.is_empty:
        return ConversationTurn(question=question, status=STATUS_NO_DATA, sql=sql, result=result)

    try:
        answer = llm.complete(bind(FINAL_ANSWER, {"question": question, "data": result.to_text()}))
    except (GenerationUnavailableError, GenerationEmptyError) as exc:
        logger.warning("Answer generation failed: %s", exc)
        return ConversationTurn(
            question=question,
            status=STATUS_FAILED,
            sql=sql,
            result=result,
            error=f"Answer generation failed: {exc}",
        )

    return ConversationTurn(question=question, status=STATUS_ANSWERED, sql=sql, result=result, answer=answer)


def print_turn(turn: ConversationTurn, write: Callable[[str], Any] = print, as_json: bool = False) -> None:
    if as_json:
        write(json.dumps(turn.to_dict(), indent=2, default=str))
        return
    if turn.sql:
        write(f"\nGenerated SQL: {turn.sql}")
    if turn.status == STATUS_NO_DATA:
        write(f"{NO_DATA_MESSAGE}\n")
        return
    if not turn.result.is_empty:
        write(f"Query Result:\n{turn.result.to_text()}")
    if turn.status == STATUS_FAILED:
        write(f"\nAn error occurred: {turn.error}\n")
        return
    write(f"\nAnswer: {turn.answer}\n")


class ChatSession:
    """Sequential question loop over a schema fetched once at startup."""

    def __init__(self, schema: str, llm: LLMClient, database: Database) -> None:
        self._schema = schema
        self.llm = llm
        self.database = database

    @property
    def schema(self) -> str:
        return self._schema

    def ask(self, question: str) -> ConversationTurn:
        try:
            return run_turn(question, self._schema, self.llm, self.database)
        except MissingPlaceholderError:
            logger.critical("Prompt binding failed; template placeholders and call sites disagree.", exc_info=True)
            raise

    def run(
        self,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], Any] = print,
        as_json: bool = False,
    ) -> int:
        """Answer questions until the exit keyword or end of input. Returns the number of turns taken."""
        turns = 0
        while True:
            try:
                line = read_line("> ")
            except EOFError:
                break
            if line.casefold() == EXIT_KEYWORD:
                break
            print_turn(self.ask(line), write=write, as_json=as_json)
            turns += 1
        return turns


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask NL questions over the SQLite Employees table.")
    parser.add_argument("--db-path", default=os.getenv("NLSQL_DB_PATH", "local_company.db"))
    parser.add_argument("--model", default=os.getenv("NLSQL_MODEL", "phi3"))
    parser.add_argument("--base-url", default=os.getenv("NLSQL_LLM_BASE_URL", "http://localhost:11434/v1"))
    parser.add_argument("--question", help="Single question to run, then exit.")
    parser.add_argument("--json", action="store_true")
    parser.add_argument(
        "--read-only",
        action="store_true",
        default=_env_flag("NLSQL_READ_ONLY"),
        help="Only run single SELECT/WITH statements, over a read-only connection.",
    )
    parser.add_argument(
        "--reset-db",
        action="store_true",
        default=_env_flag("NLSQL_RESET_DB"),
        help="Drop and re-seed the demo table at startup.",
    )
    parser.add_argument("--no-seed", action="store_true", help="Use the database as-is; skip demo table setup.")
    parser.add_argument("--log-level", default=os.getenv("NLSQL_LOG_LEVEL", "WARNING"))
    return parser.parse_args(argv)


def main() -> None:
    load_dotenv()
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.no_seed:
        seed_database(args.db_path, reset=args.reset_db)

    database = SQLiteDatabase(args.db_path, read_only=args.read_only)
    try:
        schema = database.fetch_schema()
    except SchemaNotFoundError as exc:
        raise SystemExit(str(exc)) from exc

    session = ChatSession(schema, OpenAIClient(model=args.model, base_url=args.base_url), database)
    if args.question is not None:
        print_turn(session.ask(args.question), as_json=args.json)
        return

    print("Database Schema:")
    print(schema)
    print(f"\nChat with your database! Type '{EXIT_KEYWORD}' to quit.")
    session.run(as_json=args.json)


if __name__ == "__main__":
    main()
