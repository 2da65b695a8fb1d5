from __future__ import annotations

import logging
from dataclasses import dataclass
from string import Formatter
from typing import Mapping

from errors import MissingPlaceholderError

logger = logging.getLogger(__name__)


def _body_placeholders(body: str) -> set[str]:
    return {field for _, field, _, _ in Formatter().parse(body) if field is not None}


@dataclass(frozen=True)
class PromptTemplate:
    """Immutable prompt body, the names it expects, and its sampling temperature."""

    name: str
    body: str
    placeholders: tuple[str, ...]
    temperature: float

    def __post_init__(self) -> None:
        found = _body_placeholders(self.body)
        if found != set(self.placeholders):
            raise ValueError(
                f"Template {self.name!r} declares {sorted(self.placeholders)} but its body uses {sorted(found)}."
            )
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"Template {self.name!r} temperature must be within [0, 1], got {self.temperature}.")


@dataclass(frozen=True)
class GenerationRequest:
    template: str
    prompt: str
    temperature: float


def bind(template: PromptTemplate, values: Mapping[str, str]) -> GenerationRequest:
    missing = [name for name in template.placeholders if name not in values]
    if missing:
        raise MissingPlaceholderError(template.name, missing)
    # Single pass: braces inside the values are left alone.
    prompt = template.body.format(**{name: str(values[name]) for name in template.placeholders})
    logger.debug("Bound template %s (%d chars)", template.name, len(prompt))
    return GenerationRequest(template=template.name, prompt=prompt, temperature=template.temperature)


TEXT_TO_SQL = PromptTemplate(
    name="TextToSql",
    body="""Given the following database schema, your job is to convert the user's question into a valid SQLite SQL query.
- ONLY output the SQL query.
- Do not add any other text, explanations, or markdown formatting like ```sql.
- Be careful with data types and column names.

Schema:
---
{schema}
---

User Question: {question}

SQL Query:
""",
    placeholders=("schema", "question"),
    temperature=0.0,
)

FINAL_ANSWER = PromptTemplate(
    name="FinalAnswer",
    body="""Answer the following user's question based ONLY on the provided data.
If the data is empty or irrelevant, say you could not find an answer.
Be friendly and concise.

Data:
---
{data}
---

User Question: {question}

Answer:
""",
    placeholders=("question", "data"),
    temperature=0.2,
)
