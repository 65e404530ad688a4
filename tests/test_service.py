from __future__ import annotations

import asyncio
import logging

import pytest
from conftest import FakeCompleter

from code_genie.errors import EmptyPromptError, RateLimitError, UnsupportedModeError, UpstreamError
from code_genie.service import build_request, generate_code, resolve_mode


@pytest.mark.parametrize("prompt", [None, "", "   \n\t"])
def test_build_request_given_blank_prompt_when_built_then_empty_prompt_error_is_raised(prompt) -> None:
    # Given
    # A missing or whitespace-only prompt.

    # When / Then
    with pytest.raises(EmptyPromptError):
        build_request(prompt)


def test_build_request_given_unknown_mode_when_built_then_unsupported_mode_error_is_raised() -> None:
    # Given
    mode = "cobol"

    # When / Then
    with pytest.raises(UnsupportedModeError, match="cobol"):
        build_request("write a report", mode)


def test_build_request_given_padded_prompt_when_built_then_prompt_is_trimmed() -> None:
    # Given
    prompt = "  sort a list  "

    # When
    request = build_request(prompt)

    # Then
    assert request.prompt == "sort a list"
    assert request.mode is None
    assert request.include_comments is True


def test_resolve_mode_given_explicit_mode_when_resolved_then_classifier_is_skipped() -> None:
    # Given
    request = build_request("python dashboard", "rust")

    # When
    mode = resolve_mode(request)

    # Then
    assert mode == "rust"


def test_generate_code_given_fenced_completion_when_run_then_result_holds_clean_code() -> None:
    # Given
    completer = FakeCompleter(text="```python\nprint(1)\n```")
    request = build_request("print one in python")

    # When
    result = asyncio.run(generate_code(request, completer))

    # Then
    assert result.success is True
    assert result.mode == "python"
    assert result.code == "print(1)"
    assert result.language == "python"
    assert result.prompt == "print one in python"
    assert "Target Language: python" in completer.instructions[0]


def test_generate_code_given_webapp_prompt_when_run_then_all_files_are_returned(webapp_completion: str) -> None:
    # Given
    completer = FakeCompleter(text=webapp_completion)
    request = build_request("Build a todo app")

    # When
    result = asyncio.run(generate_code(request, completer))

    # Then
    assert result.mode == "webapp"
    assert [artifact.filename for artifact in result.files] == ["index.html", "styles.css", "script.js"]
    assert result.code == result.files[0].content
    assert result.language == "html"


def test_generate_code_given_taxonomy_error_when_run_then_error_propagates_unchanged() -> None:
    # Given
    error = RateLimitError()
    completer = FakeCompleter(error=error)

    # When
    with pytest.raises(RateLimitError) as excinfo:
        asyncio.run(generate_code(build_request("sort a list"), completer))

    # Then
    assert excinfo.value is error


def test_generate_code_given_unexpected_error_when_run_then_it_is_translated() -> None:
    # Given
    completer = FakeCompleter(error=RuntimeError("boom"))

    # When
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(generate_code(build_request("sort a list"), completer))

    # Then
    assert excinfo.value.details == "boom"


def test_generate_code_given_prompt_when_run_then_prompt_and_mode_are_logged_at_info(
    caplog: pytest.LogCaptureFixture,
) -> None:
    # Given
    completer = FakeCompleter(text="```python\nprint(1)\n```")
    request = build_request("print one in python")
    caplog.set_level(logging.INFO, logger="code_genie.service")

    # When
    asyncio.run(generate_code(request, completer))

    # Then
    messages = [record.getMessage() for record in caplog.records if record.levelno == logging.INFO]
    assert 'Generating code for prompt: "print one in python" in python' in messages
