from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from code_genie.models import ExtractedArtifact, GenerationResult, HistoryEntry


class FakeCompleter:
    """Records instructions and replays a canned completion or error."""

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.instructions: list[str] = []

    async def complete(self, instruction: str) -> str:
        self.instructions.append(instruction)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def webapp_completion() -> str:
    return (
        "=== index.html ===\n"
        '<!DOCTYPE html>\n<html><body><div id="app"></div></body></html>\n'
        "=== styles.css ===\n"
        "body { margin: 0; }\n"
        "=== script.js ===\n"
        "console.log('ready');\n"
    )


@pytest.fixture
def generation_result() -> GenerationResult:
    return GenerationResult(
        code="print(1)",
        language="python",
        mode="python",
        files=[ExtractedArtifact(filename="generated-code.py", language="python", content="print(1)")],
        prompt="print one in python",
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def history_entry() -> HistoryEntry:
    return HistoryEntry(
        id="entry0001abc",
        session_id="session-a",
        prompt="Build a <todo> app",
        mode="webapp",
        language="html",
        code="<div></div>",
        files=[
            ExtractedArtifact(filename="index.html", language="html", content="<div></div>"),
            ExtractedArtifact(filename="styles.css", language="css", content="div { color: red; }"),
        ],
        timestamp=datetime(2026, 1, 3, tzinfo=timezone.utc),
    )
