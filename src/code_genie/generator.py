"""Gemini text-completion adapter and upstream error translation."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Protocol

from code_genie.errors import (
    GenerationError,
    InvalidCredentialError,
    MissingCredentialError,
    RateLimitError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_KEY_FILE = Path(".api_keys/Gemini.md")
DEFAULT_MODEL_NAME = "gemini-1.5-flash"

_INVALID_KEY_TOKENS = ("API_KEY_INVALID", "API key not valid")
_RATE_LIMIT_TOKENS = ("RATE_LIMIT_EXCEEDED", "RESOURCE_EXHAUSTED")


class Completer(Protocol):
    async def complete(self, instruction: str) -> str: ...


def resolve_gemini_api_key(key_file: Path = DEFAULT_GEMINI_KEY_FILE) -> str | None:
    """Resolve the Gemini API key from environment or fallback file.

    Resolution order:
    1. ``GEMINI_API_KEY`` environment variable.
    2. ``key_file`` plaintext contents.

    Args:
        key_file: Optional fallback file containing only the API key.

    Returns:
        The non-empty API key when found, otherwise ``None``.
    """
    api_key = (os.getenv("GEMINI_API_KEY") or "").strip()
    if api_key:
        return api_key

    if key_file.exists():
        fallback_key = key_file.read_text(encoding="utf-8").strip()
        if fallback_key:
            return fallback_key

    return None


def translate_error(exc: Exception) -> GenerationError:
    """Map an SDK or transport exception onto the error taxonomy."""
    if isinstance(exc, GenerationError):
        return exc

    text = str(exc)
    code = getattr(exc, "code", None)

    if code in (401, 403) or any(token in text for token in _INVALID_KEY_TOKENS):
        return InvalidCredentialError(details=text)
    if code == 429 or any(token in text for token in _RATE_LIMIT_TOKENS):
        return RateLimitError(details=text)
    return UpstreamError(details=text)


class GeminiGenerator:
    """Thin adapter around Google GenAI content generation."""

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME, api_key: str | None = None):
        """Create a generator bound to a model name and optional explicit key."""
        self.model_name = model_name
        self.api_key = api_key

    def _client(self):
        api_key = self.api_key or resolve_gemini_api_key()
        if not api_key:
            raise MissingCredentialError()

        from google import genai

        return genai.Client(api_key=api_key)

    async def complete(self, instruction: str) -> str:
        """Send one instruction to Gemini and return the completion text.

        Raises:
            ValueError: If the instruction is blank.
            GenerationError: Missing or invalid credentials, rate limiting, or
                any other upstream failure, already translated.
        """
        if not isinstance(instruction, str) or not instruction.strip():
            raise ValueError("Instruction must be a non-empty string.")

        client = self._client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model_name,
                contents=instruction,
            )
        except Exception as exc:
            logger.exception("Gemini request failed (model=%s)", self.model_name)
            raise translate_error(exc) from exc

        text = (response.text or "").strip()
        if not text:
            raise UpstreamError(details="Gemini returned an empty response")
        return text

    def generate(self, instruction: str) -> str:
        """Blocking wrapper around :meth:`complete` for synchronous callers."""
        return asyncio.run(self.complete(instruction))
