"""Per-request generation pipeline: classify, complete, extract."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from code_genie.classifier import classify
from code_genie.errors import EmptyPromptError, GenerationError, UnsupportedModeError
from code_genie.extractor import extract
from code_genie.generator import Completer, translate_error
from code_genie.models import GenerationRequest, GenerationResult, Mode, RawCompletion
from code_genie.prompting import build_instruction

logger = logging.getLogger(__name__)


def build_request(prompt: str | None, mode: str | None = None, include_comments: bool = True) -> GenerationRequest:
    """Validate raw caller input into a ``GenerationRequest``.

    Raises:
        EmptyPromptError: If the prompt is missing, not a string, or blank.
        UnsupportedModeError: If ``mode`` is not a known mode.
    """
    if not isinstance(prompt, str) or not prompt.strip():
        raise EmptyPromptError()
    try:
        return GenerationRequest(prompt=prompt, mode=mode, include_comments=include_comments)
    except ValidationError as exc:
        raise UnsupportedModeError(f"Unsupported language: {mode}") from exc


def resolve_mode(request: GenerationRequest) -> Mode:
    return request.mode or classify(request.prompt)


async def generate_code(request: GenerationRequest, completer: Completer) -> GenerationResult:
    """Run one request end to end.

    The completer call is the only suspension point. Any failure it raises is
    translated into the error taxonomy; extraction itself never fails.
    """
    mode = resolve_mode(request)
    instruction = build_instruction(request.prompt, mode, include_comments=request.include_comments)
    logger.info('Generating code for prompt: "%s" in %s', request.prompt, mode)

    try:
        completion = RawCompletion(text=await completer.complete(instruction))
    except GenerationError:
        raise
    except Exception as exc:
        logger.exception("Completion failed")
        raise translate_error(exc) from exc

    files = extract(completion.text, mode)
    primary = files[0]
    logger.debug("Extracted %d artifact(s); primary language=%s", len(files), primary.language)

    return GenerationResult(
        code=primary.content,
        language=primary.language,
        mode=mode,
        files=files,
        prompt=request.prompt,
        timestamp=datetime.now(timezone.utc),
    )
