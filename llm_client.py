from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod

import openai
from openai import OpenAI

from errors import GenerationEmptyError, GenerationUnavailableError
from prompts import GenerationRequest

DEFAULT_MODEL = "phi3"
DEFAULT_BASE_URL = "http://localhost:11434/v1"

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    @abstractmethod
    def complete(self, request: GenerationRequest) -> str:
        raise NotImplementedError


class OpenAIClient(LLMClient):
    """Chat-completions client for any OpenAI-compatible endpoint (a local Ollama server by default)."""

    def __init__(
        self,
        model: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_sec: float | None = None,
    ) -> None:
        self.model = model or os.getenv("NLSQL_MODEL", DEFAULT_MODEL)
        self.base_url = base_url or os.getenv("NLSQL_LLM_BASE_URL", DEFAULT_BASE_URL)
        # Local servers ignore the key but the SDK refuses to start without one.
        self.api_key = api_key or os.getenv("OPENAI_API_KEY") or "ollama"
        if timeout_sec is None and os.getenv("NLSQL_LLM_TIMEOUT_SEC"):
            timeout_sec = float(os.environ["NLSQL_LLM_TIMEOUT_SEC"])
        self.timeout_sec = timeout_sec

    def complete(self, request: GenerationRequest) -> str:
        client = OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout_sec,
            max_retries=0,
        )
        try:
            resp = client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": request.prompt}],
                temperature=request.temperature,
            )
        except openai.APIError as exc:
            logger.warning("%s generation failed against %s: %r", request.template, self.base_url, exc)
            raise GenerationUnavailableError(f"Language model call failed: {exc}") from exc

        if not resp.choices:
            raise GenerationEmptyError("Language model returned no choices.")
        text = resp.choices[0].message.content
        if not text or not text.strip():
            raise GenerationEmptyError("Language model returned empty text output.")
        return text
