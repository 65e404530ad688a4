"""Error taxonomy surfaced to API and CLI callers."""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for failures that map to a structured error response."""

    kind = "generic-upstream-failure"
    title = "Internal server error"
    status_code = 500
    default_message = "Failed to generate code. Please try again later."

    def __init__(self, message: str | None = None, *, details: str | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class EmptyPromptError(GenerationError):
    kind = "empty-input"
    title = "Prompt is required"
    status_code = 400
    default_message = "Please provide a description of the code you want to generate."


class MissingCredentialError(GenerationError):
    kind = "missing-credential"
    title = "API configuration error"
    status_code = 500
    default_message = "Gemini API key is not configured. Set GEMINI_API_KEY or add .api_keys/Gemini.md."


class InvalidCredentialError(GenerationError):
    kind = "invalid-credential"
    title = "Invalid API key"
    status_code = 401
    default_message = "The provided Gemini API key is invalid. Please check config."


class RateLimitError(GenerationError):
    kind = "rate-limit-exceeded"
    title = "Rate limit exceeded"
    status_code = 429
    default_message = "Gemini API rate limit exceeded. Try again later."


class UpstreamError(GenerationError):
    pass


class UnsupportedModeError(GenerationError):
    kind = "unsupported-mode"
    title = "Unsupported language"
    status_code = 400
    default_message = "The requested language is not supported."
