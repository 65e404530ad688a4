from __future__ import annotations

import sys
import types

import pytest
from conftest import FakeCompleter
from typer.testing import CliRunner

from code_genie.cli import app
from code_genie.errors import InvalidCredentialError

runner = CliRunner()


@pytest.fixture
def fake_generator(monkeypatch: pytest.MonkeyPatch) -> FakeCompleter:
    completer = FakeCompleter(text="```python\nprint(1)\n```")
    monkeypatch.setattr("code_genie.cli.GeminiGenerator", lambda model_name: completer)
    return completer


def test_classify_given_prompt_when_invoked_then_mode_is_printed() -> None:
    # Given
    args = ["classify", "python dashboard"]

    # When
    result = runner.invoke(app, args)

    # Then
    assert result.exit_code == 0
    assert result.stdout.strip() == "webapp"


def test_generate_given_prompt_when_invoked_then_files_are_written_and_history_recorded(
    tmp_path,
    fake_generator: FakeCompleter,
) -> None:
    # Given
    db_path = tmp_path / "history.db"
    output_root = tmp_path / "generated"

    # When
    result = runner.invoke(
        app,
        ["generate", "print one in python", "--db", str(db_path), "--output-root", str(output_root)],
    )

    # Then
    assert result.exit_code == 0, result.stdout
    assert "Generation complete." in result.stdout
    written = list(output_root.glob("*/generated-code.py"))
    assert len(written) == 1
    assert written[0].read_text(encoding="utf-8") == "print(1)\n"

    history = runner.invoke(app, ["history", "--db", str(db_path)])
    assert "print one in python" in history.stdout


def test_generate_given_no_history_flag_when_invoked_then_history_stays_empty(
    tmp_path,
    fake_generator: FakeCompleter,
) -> None:
    # Given
    db_path = tmp_path / "history.db"

    # When
    result = runner.invoke(
        app,
        [
            "generate",
            "print one in python",
            "--no-history",
            "--db",
            str(db_path),
            "--output-root",
            str(tmp_path / "generated"),
        ],
    )

    # Then
    assert result.exit_code == 0, result.stdout
    history = runner.invoke(app, ["history", "--db", str(db_path)])
    assert "No history yet." in history.stdout


def test_generate_given_upstream_failure_when_invoked_then_exit_code_is_nonzero(
    tmp_path,
    fake_generator: FakeCompleter,
) -> None:
    # Given
    fake_generator.error = InvalidCredentialError()

    # When
    result = runner.invoke(
        app,
        ["generate", "sort a list", "--db", str(tmp_path / "history.db"), "--output-root", str(tmp_path / "out")],
    )

    # Then
    assert result.exit_code == 1
    assert not (tmp_path / "out").exists()


def test_generate_given_blank_prompt_when_invoked_then_usage_error_is_reported(tmp_path) -> None:
    # Given
    args = ["generate", "   ", "--db", str(tmp_path / "history.db")]

    # When
    result = runner.invoke(app, args)

    # Then
    assert result.exit_code == 2


def test_clear_history_given_recorded_entries_when_invoked_then_removed_count_is_printed(
    tmp_path,
    fake_generator: FakeCompleter,
) -> None:
    # Given
    db_path = tmp_path / "history.db"
    runner.invoke(app, ["generate", "print one in python", "--db", str(db_path), "--output-root", str(tmp_path)])

    # When
    result = runner.invoke(app, ["clear-history", "--db", str(db_path)])

    # Then
    assert result.exit_code == 0
    assert "removed=1" in result.stdout


def test_languages_given_no_args_when_invoked_then_picker_languages_are_listed() -> None:
    # Given
    args = ["languages"]

    # When
    result = runner.invoke(app, args)

    # Then
    assert result.exit_code == 0
    assert "typescript" in result.stdout
    assert "C++" in result.stdout


def test_serve_given_configured_log_level_when_invoked_then_root_logging_is_configured_before_uvicorn(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # Given
    calls: list[tuple[str, object]] = []
    fake_uvicorn = types.ModuleType("uvicorn")
    fake_uvicorn.run = lambda target, **kwargs: calls.append(("run", target))
    monkeypatch.setitem(sys.modules, "uvicorn", fake_uvicorn)
    monkeypatch.setattr("code_genie.cli.configure_logging", lambda level: calls.append(("logging", level)))
    monkeypatch.setattr("code_genie.cli.settings.log_level", "info")

    # When
    result = runner.invoke(app, ["serve", "--port", "4000"])

    # Then
    assert result.exit_code == 0, result.stdout
    assert calls == [("logging", "INFO"), ("run", "code_genie.api:app")]
