"""Write generated artifacts to disk as downloadable files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from code_genie.models import ExtractedArtifact, HistoryEntry


def render_generation(entry: HistoryEntry, output_root: Path) -> Path:
    """Write a generation package to disk and return the output directory.

    Args:
        entry: History entry holding the prompt and extracted files.
        output_root: Root directory where per-generation folders are created.

    Returns:
        The entry-specific directory containing each artifact file plus
        ``generation.md`` and ``generation.json`` summaries.
    """
    target_dir = output_root / entry.id
    target_dir.mkdir(parents=True, exist_ok=True)

    for artifact in entry.files:
        (target_dir / _safe_filename(artifact.filename)).write_text(_with_newline(artifact.content), encoding="utf-8")

    (target_dir / "generation.md").write_text(_render_markdown(entry), encoding="utf-8")

    json_payload: dict[str, Any] = entry.model_dump(mode="json")
    (target_dir / "generation.json").write_text(
        json.dumps(json_payload, indent=2, ensure_ascii=False), encoding="utf-8"
    )

    return target_dir


def _render_markdown(entry: HistoryEntry) -> str:
    """Render a human-readable Markdown summary of a generation."""
    lines = [
        f"# {_first_line(entry.prompt)}",
        "",
        f"- Generation ID: `{entry.id}`",
        f"- Created: `{entry.timestamp.isoformat()}`",
        f"- Mode: `{entry.mode}`",
        f"- Detected language: `{entry.language}`",
        "",
        "## Prompt",
        "",
        entry.prompt,
        "",
        "## Files",
        "",
    ]

    for artifact in entry.files:
        lines.extend(_render_artifact_block(artifact))

    return "\n".join(lines)


def _render_artifact_block(artifact: ExtractedArtifact) -> list[str]:
    return [
        f"### {artifact.filename}",
        "",
        f"```{artifact.language}",
        artifact.content,
        "```",
        "",
    ]


def _first_line(text: str, limit: int = 80) -> str:
    """Return a single-line title, truncated with an ellipsis past ``limit``."""
    line = text.strip().splitlines()[0] if text.strip() else "Untitled generation"
    if len(line) > limit:
        return line[: limit - 3].rstrip() + "..."
    return line


def _safe_filename(name: str) -> str:
    return Path(name).name or "generated-code.txt"


def _with_newline(content: str) -> str:
    return content if content.endswith("\n") else content + "\n"
