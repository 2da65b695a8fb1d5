#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sqlite3

import pandas as pd

TABLE_NAME = "Employees"

EMPLOYEES = [
    {"Name": "Alice Johnson", "Department": "Engineering", "Salary": 95000, "HireDate": "2022-01-15"},
    {"Name": "Bob Smith", "Department": "Sales", "Salary": 82000, "HireDate": "2021-11-30"},
    {"Name": "Charlie Brown", "Department": "Engineering", "Salary": 110000, "HireDate": "2020-05-20"},
    {"Name": "Diana Prince", "Department": "Sales", "Salary": 78000, "HireDate": "2022-08-01"},
    {"Name": "Eve Adams", "Department": "HR", "Salary": 65000, "HireDate": "2023-02-10"},
]

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create and populate the demo Employees table in SQLite.")
    p.add_argument("--db-path", default="local_company.db")
    p.add_argument("--reset", action="store_true", help="Drop and recreate the table, discarding existing rows.")
    return p.parse_args()


def create_schema(conn: sqlite3.Connection, reset: bool = False) -> None:
    if reset:
        conn.execute(f"DROP TABLE IF EXISTS {TABLE_NAME};")
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            Id INTEGER PRIMARY KEY,
            Name TEXT NOT NULL,
            Department TEXT NOT NULL,
            Salary INTEGER NOT NULL,
            HireDate TEXT NOT NULL
        )
        """
    )


def seed_database(db_path: str, reset: bool = False) -> int:
    """Ensure the demo table exists and holds data. Returns the number of rows inserted."""
    conn = sqlite3.connect(db_path)
    try:
        create_schema(conn, reset=reset)
        (existing,) = conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()
        if existing:
            conn.commit()
            logger.info("Keeping %d existing row(s) in %s", existing, TABLE_NAME)
            return 0
        employees_df = pd.DataFrame(EMPLOYEES)
        employees_df.to_sql(TABLE_NAME, conn, if_exists="append", index=False)
        conn.commit()
    finally:
        conn.close()
    logger.info("Seeded %d row(s) into %s at %s", len(employees_df), TABLE_NAME, db_path)
    return len(employees_df)


def main() -> None:
    args = parse_args()
    inserted = seed_database(args.db_path, reset=args.reset)
    if inserted:
        print(f"Database '{args.db_path}' created and populated ({inserted} rows).")
    else:
        print(f"Database '{args.db_path}' already populated; nothing inserted.")


if __name__ == "__main__":
    main()
