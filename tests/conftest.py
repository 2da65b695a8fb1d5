import pytest

from db import SQLiteDatabase
from llm_client import LLMClient
from seed_data import seed_database


class ScriptedLLM(LLMClient):
    """Returns (or raises) queued responses in order and records every request."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


# Seeded demo database, fresh per test
@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "company.db")
    seed_database(path)
    return path


@pytest.fixture
def database(db_path):
    return SQLiteDatabase(db_path)


@pytest.fixture
def schema(database):
    return database.fetch_schema()


@pytest.fixture
def scripted_llm():
    return ScriptedLLM
