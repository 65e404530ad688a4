"""Keyword heuristics that map a free-text prompt to an output mode."""

from __future__ import annotations

import re

from code_genie.models import WEBAPP_MODE, ClassificationResult, Mode

DEFAULT_MODE: Mode = "javascript"

APP_INTENT_KEYWORDS: tuple[str, ...] = (
    "app",
    "website",
    "web page",
    "webpage",
    "dashboard",
    "calculator",
    "game",
    "form",
    "landing page",
    "todo",
    "to-do",
    "portfolio",
)


def _word(keyword: str) -> re.Pattern[str]:
    """Whole-word pattern for keywords that are also common English fragments."""
    return re.compile(rf"\b{re.escape(keyword)}\b")


# Declaration order is the tie-break: the first tag with a matching keyword wins.
# Plain strings match as substrings of the lowercased prompt.
LANGUAGE_KEYWORDS: tuple[tuple[Mode, tuple[str | re.Pattern[str], ...]], ...] = (
    ("javascript", ("javascript", "node.js", "nodejs", _word("js"), "react", "vue", "jquery", "express")),
    ("typescript", ("typescript", _word("ts"), "tsx", "angular")),
    ("python", ("python", "py", "django", "flask", "pandas", "numpy")),
    ("java", ("java", "spring boot", "maven", "gradle")),
    ("cpp", ("c++", "cpp", "cplusplus")),
    ("csharp", ("c#", "csharp", ".net", "dotnet")),
    ("go", ("golang", _word("go"), "goroutine")),
    ("rust", (_word("rust"), "cargo")),
    ("php", ("php", "laravel", "wordpress")),
    ("ruby", ("ruby", "rails")),
    ("sql", ("sql", "query", "database")),
    ("bash", ("bash", "shell", "zsh", "crontab")),
    ("css", ("css", "stylesheet", "tailwind", "flexbox")),
    ("html", ("html", "markup")),
    ("json", ("json",)),
)


def _matches(keyword: str | re.Pattern[str], text: str) -> bool:
    if isinstance(keyword, re.Pattern):
        return keyword.search(text) is not None
    return keyword in text


def classify(prompt: str) -> Mode:
    """Return the output mode for a prompt.

    Application-intent keywords take priority over every language keyword, so
    ``"python dashboard"`` resolves to the composite web-app mode. Callers must
    reject blank prompts before classifying.
    """
    text = prompt.lower()

    if any(keyword in text for keyword in APP_INTENT_KEYWORDS):
        return WEBAPP_MODE

    for tag, keywords in LANGUAGE_KEYWORDS:
        if any(_matches(keyword, text) for keyword in keywords):
            return tag

    return DEFAULT_MODE


def classify_result(prompt: str) -> ClassificationResult:
    return ClassificationResult(mode=classify(prompt))
