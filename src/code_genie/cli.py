"""Typer-based CLI for generating code, browsing history, and serving the API."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer

from code_genie.classifier import classify_result
from code_genie.config import settings
from code_genie.errors import GenerationError
from code_genie.generator import GeminiGenerator, resolve_gemini_api_key
from code_genie.models import SUPPORTED_LANGUAGES
from code_genie.renderer import render_generation
from code_genie.service import build_request, generate_code, resolve_mode
from code_genie.store import HistoryStore, entry_from_result

app = typer.Typer(add_completion=False, help="code-genie: turn plain-language descriptions into code")

DEFAULT_DB_PATH = settings.history_db_path
DEFAULT_OUTPUT_ROOT = Path("generated")
DEFAULT_SESSION = "cli"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _echo_step(step: int, total: int, message: str) -> None:
    """Print a normalized progress step line."""
    typer.echo(f"[{step}/{total}] {message}")


def configure_logging(level: int | str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _open_store(db_path: Path) -> HistoryStore:
    store = HistoryStore(db_path, capacity=settings.history_capacity)
    store.init_db()
    return store


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        configure_logging(logging.DEBUG)


@app.command("generate")
def generate(
    prompt: str = typer.Argument(..., help="Plain-language description of the code to generate"),
    language: str | None = typer.Option(None, "--language", "-l", help="Explicit mode; auto-detected when omitted"),
    no_comments: bool = typer.Option(False, "--no-comments", help="Only comment where essential"),
    model_name: str = typer.Option(settings.gemini_model, "--model", help="Gemini model name"),
    db_path: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite history path"),
    session_id: str = typer.Option(DEFAULT_SESSION, "--session", help="History session key"),
    output_root: Path = typer.Option(DEFAULT_OUTPUT_ROOT, help="Directory for downloaded files"),
    no_history: bool = typer.Option(False, "--no-history", help="Do not record this generation"),
) -> None:
    """Generate code from a prompt, record it, and write the files to disk."""
    total_steps = 4
    try:
        request = build_request(prompt, language, include_comments=not no_comments)
    except GenerationError as exc:
        raise typer.BadParameter(exc.message) from exc

    _echo_step(1, total_steps, f"Mode: {resolve_mode(request)}")

    _echo_step(2, total_steps, f"Calling model {model_name}")
    try:
        result = asyncio.run(generate_code(request, GeminiGenerator(model_name=model_name)))
    except GenerationError as exc:
        typer.echo(f"{exc.title}: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc

    _echo_step(3, total_steps, "Recording history")
    if no_history:
        typer.echo("    --no-history enabled: skipping history")
        entry = entry_from_result(result, session_id)
    else:
        entry = _open_store(db_path).record(result, session_id=session_id)

    _echo_step(4, total_steps, "Writing files")
    out_dir = render_generation(entry, output_root=output_root)
    for artifact in result.files:
        typer.echo(f"    {artifact.filename} ({artifact.language})")
    typer.echo(f"Generation complete. id={entry.id} mode={result.mode} language={result.language} path={out_dir}")


@app.command("classify")
def classify_prompt(
    prompt: str = typer.Argument(..., help="Prompt to classify"),
) -> None:
    """Print the mode a prompt would be generated in."""
    if not prompt.strip():
        raise typer.BadParameter("Prompt must be a non-empty string.")
    typer.echo(classify_result(prompt.strip()).mode)


@app.command("languages")
def languages() -> None:
    """List the languages offered in the UI picker."""
    for option in SUPPORTED_LANGUAGES:
        typer.echo(f"{option.icon} {option.value:<12} {option.label}")


@app.command("history")
def history(
    db_path: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite history path"),
    session_id: str = typer.Option(DEFAULT_SESSION, "--session", help="History session key"),
    limit: int = typer.Option(20, help="Max entries to list"),
) -> None:
    """List recorded generations, newest first."""
    store = _open_store(db_path)
    entries = store.list_entries(session_id, limit=limit)
    if not entries:
        typer.echo("No history yet.")
        return
    for entry in entries:
        preview = entry.prompt if len(entry.prompt) <= 60 else entry.prompt[:57] + "..."
        typer.echo(f"{entry.id}  {entry.timestamp.isoformat()}  {entry.mode:<10}  {preview}")


@app.command("show")
def show(
    entry_id: str = typer.Argument(..., help="History entry ID"),
    db_path: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite history path"),
    session_id: str = typer.Option(DEFAULT_SESSION, "--session", help="History session key"),
) -> None:
    """Print the files of a recorded generation."""
    store = _open_store(db_path)
    entry = store.get_entry(session_id, entry_id)
    if not entry:
        raise typer.BadParameter(f"History entry not found: {entry_id}")
    for artifact in entry.files:
        typer.echo(f"--- {artifact.filename} ({artifact.language})")
        typer.echo(artifact.content)


@app.command("render")
def render(
    entry_id: str = typer.Argument(..., help="History entry ID"),
    db_path: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite history path"),
    session_id: str = typer.Option(DEFAULT_SESSION, "--session", help="History session key"),
    output_root: Path = typer.Option(DEFAULT_OUTPUT_ROOT, help="Directory for downloaded files"),
) -> None:
    """Write a recorded generation's files to disk."""
    store = _open_store(db_path)
    entry = store.get_entry(session_id, entry_id)
    if not entry:
        raise typer.BadParameter(f"History entry not found: {entry_id}")
    out_dir = render_generation(entry, output_root=output_root)
    typer.echo(f"Rendered generation to: {out_dir}")


@app.command("clear-history")
def clear_history(
    db_path: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite history path"),
    session_id: str = typer.Option(DEFAULT_SESSION, "--session", help="History session key"),
) -> None:
    """Delete every recorded generation for a session."""
    store = _open_store(db_path)
    removed = store.clear(session_id)
    typer.echo(f"History cleared. removed={removed}")


@app.command("serve")
def serve(
    host: str = typer.Option(settings.host, help="Bind address"),
    port: int = typer.Option(settings.port, help="Bind port"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    configure_logging(settings.log_level.upper())
    typer.echo(f"Code Genie API server running on {host}:{port} (env={settings.app_env})")
    uvicorn.run("code_genie.api:app", host=host, port=port, log_level=settings.log_level.lower())


@app.command("doctor")
def doctor(
    db_path: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="SQLite history path"),
) -> None:
    """Print local environment diagnostics used by the CLI and API."""
    api_key = resolve_gemini_api_key()
    typer.echo(f"History DB exists: {db_path.exists()} ({db_path})")
    typer.echo(f"GEMINI_API_KEY set: {bool(api_key)}")
    typer.echo(f"Model: {settings.gemini_model}")
    typer.echo(f"Allowed origins: {', '.join(settings.origins)}")


if __name__ == "__main__":
    app()
