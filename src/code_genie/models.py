"""Pydantic models shared across classification, extraction, history, and the API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

Mode = Literal[
    "javascript",
    "typescript",
    "python",
    "java",
    "cpp",
    "csharp",
    "go",
    "rust",
    "php",
    "ruby",
    "html",
    "css",
    "sql",
    "bash",
    "json",
    "webapp",
]

WEBAPP_MODE: Mode = "webapp"
MODES: tuple[str, ...] = get_args(Mode)


class GenerationRequest(BaseModel):
    """One UI submission: the prompt plus optional explicit mode."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    mode: Mode | None = None
    include_comments: bool = True

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Prompt must be a non-empty string.")
        return value


class ClassificationResult(BaseModel):
    mode: Mode


class RawCompletion(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class ExtractedArtifact(BaseModel):
    """A single named file produced from a completion."""

    filename: str
    language: str
    content: str


class GenerationResult(BaseModel):
    """Successful response of the generate-code pipeline."""

    success: bool = True
    code: str
    language: str
    mode: Mode
    files: list[ExtractedArtifact]
    prompt: str
    timestamp: datetime


class HistoryEntry(BaseModel):
    """Persisted record of one successful generation."""

    id: str
    session_id: str = "default"
    prompt: str
    mode: Mode
    language: str
    code: str
    files: list[ExtractedArtifact] = Field(default_factory=list)
    timestamp: datetime


class ErrorPayload(BaseModel):
    error: str
    message: str
    details: str | None = None


class LanguageOption(BaseModel):
    value: str
    label: str
    icon: str


SUPPORTED_LANGUAGES: tuple[LanguageOption, ...] = (
    LanguageOption(value="javascript", label="JavaScript", icon="🟨"),
    LanguageOption(value="typescript", label="TypeScript", icon="🔷"),
    LanguageOption(value="python", label="Python", icon="🐍"),
    LanguageOption(value="java", label="Java", icon="☕"),
    LanguageOption(value="cpp", label="C++", icon="⚡"),
)
