import pytest

from errors import MissingPlaceholderError
from prompts import FINAL_ANSWER, TEXT_TO_SQL, PromptTemplate, bind

SCHEMA = "CREATE TABLE Employees (Id INTEGER PRIMARY KEY, Name TEXT NOT NULL)"


@pytest.mark.parametrize(
    "question",
    [
        "How many employees work in Engineering?",
        "",
        "   ",
        "What about {data} and {schema}?",
        "Names with a 'quote' or \"double\" {0} }{",
    ],
)
def test_text_to_sql_contains_schema_and_question(question):
    """Schema and question appear verbatim and no template marker survives"""
    request = bind(TEXT_TO_SQL, {"schema": SCHEMA, "question": question})
    assert SCHEMA in request.prompt
    assert f"User Question: {question}\n" in request.prompt
    leftover = request.prompt.replace(SCHEMA, "").replace(question, "")
    assert "{schema}" not in leftover
    assert "{question}" not in leftover


def test_braces_in_values_are_not_expanded():
    request = bind(FINAL_ANSWER, {"question": "{data}", "data": "a\tb\n1\t2"})
    assert "User Question: {data}" in request.prompt
    assert request.prompt.count("a\tb\n1\t2") == 1


def test_temperatures_are_fixed_per_template():
    assert bind(TEXT_TO_SQL, {"schema": SCHEMA, "question": "q"}).temperature == 0.0
    assert bind(FINAL_ANSWER, {"question": "q", "data": "d"}).temperature == 0.2


def test_request_names_its_template():
    assert bind(TEXT_TO_SQL, {"schema": SCHEMA, "question": "q"}).template == "TextToSql"
    assert bind(FINAL_ANSWER, {"question": "q", "data": "d"}).template == "FinalAnswer"


def test_missing_placeholder_lists_every_absent_name():
    with pytest.raises(MissingPlaceholderError) as exc_info:
        bind(FINAL_ANSWER, {})
    assert exc_info.value.missing == ["question", "data"]
    assert exc_info.value.template == "FinalAnswer"


def test_extra_values_are_ignored():
    request = bind(TEXT_TO_SQL, {"schema": SCHEMA, "question": "q", "data": "unused"})
    assert "unused" not in request.prompt


def test_template_rejects_undeclared_placeholder():
    with pytest.raises(ValueError):
        PromptTemplate(name="Bad", body="{schema} {other}", placeholders=("schema",), temperature=0.0)


def test_template_rejects_out_of_range_temperature():
    with pytest.raises(ValueError):
        PromptTemplate(name="Hot", body="{question}", placeholders=("question",), temperature=1.5)
