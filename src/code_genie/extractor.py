"""Turn raw model completions into clean, named code artifacts.

Every function here is lenient: malformed completions degrade to the whole
trimmed text rather than raising.
"""

from __future__ import annotations

import re

from code_genie.models import WEBAPP_MODE, ExtractedArtifact

HTML_MARKER = "=== index.html ==="
CSS_MARKER = "=== styles.css ==="
JS_MARKER = "=== script.js ==="

# (marker, filename, language) in the order the sections are requested.
WEBAPP_SECTIONS: tuple[tuple[str, str, str], ...] = (
    (HTML_MARKER, "index.html", "html"),
    (CSS_MARKER, "styles.css", "css"),
    (JS_MARKER, "script.js", "javascript"),
)

FILE_EXTENSIONS: dict[str, str] = {
    "javascript": "js",
    "typescript": "ts",
    "python": "py",
    "java": "java",
    "cpp": "cpp",
    "csharp": "cs",
    "go": "go",
    "rust": "rs",
    "php": "php",
    "ruby": "rb",
    "html": "html",
    "css": "css",
    "sql": "sql",
    "bash": "sh",
    "json": "json",
}

FENCE_RE = re.compile(r"```(?:[\w+#-]*\n)?([\s\S]*?)```")
MARKUP_RE = re.compile(r"<!DOCTYPE\s+html|<html[\s>]|<body[\s>]|<div[\s>]", re.IGNORECASE)
STYLE_BLOCK_RE = re.compile(r"<style[^>]*>([\s\S]*?)</style>", re.IGNORECASE)
SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>([\s\S]*?)</script>", re.IGNORECASE)

# First entry with any matching signature wins.
LANGUAGE_SIGNATURES: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    (
        "javascript",
        (
            re.compile(r"function\s+\w+"),
            re.compile(r"const\s+\w+\s*="),
            re.compile(r"=>\s*{"),
            re.compile(r"console\.log"),
            re.compile(r"require\("),
            re.compile(r"import\s+"),
        ),
    ),
    (
        "python",
        (
            re.compile(r"def\s+\w+"),
            re.compile(r"import\s+\w+"),
            re.compile(r"from\s+\w+\s+import"),
            re.compile(r"print\("),
            re.compile(r"if\s+__name__\s*==\s*[\"']__main__[\"']"),
            re.compile(r":\s*$", re.MULTILINE),
        ),
    ),
    (
        "java",
        (
            re.compile(r"public\s+class"),
            re.compile(r"public\s+static\s+void\s+main"),
            re.compile(r"System\.out\.println"),
            re.compile(r"import\s+java\."),
            re.compile(r"\w+\s+\w+\s*\([^)]*\)\s*{"),
        ),
    ),
    (
        "cpp",
        (
            re.compile(r"#include\s*<"),
            re.compile(r"using\s+namespace\s+std"),
            re.compile(r"int\s+main\s*\("),
            re.compile(r"cout\s*<<"),
            re.compile(r"std::"),
        ),
    ),
    (
        "html",
        (
            re.compile(r"<html"),
            re.compile(r"<div"),
            re.compile(r"<script"),
            re.compile(r"<style"),
            re.compile(r"<!DOCTYPE"),
        ),
    ),
    (
        "css",
        (
            re.compile(r"\{[^}]*\}"),
            re.compile(r"@media"),
            re.compile(r"\.[\w-]+\s*{"),
            re.compile(r"#[\w-]+\s*{"),
        ),
    ),
    (
        "sql",
        (
            re.compile(r"SELECT\s+", re.IGNORECASE),
            re.compile(r"FROM\s+", re.IGNORECASE),
            re.compile(r"WHERE\s+", re.IGNORECASE),
            re.compile(r"INSERT\s+INTO", re.IGNORECASE),
            re.compile(r"CREATE\s+TABLE", re.IGNORECASE),
        ),
    ),
    (
        "json",
        (
            re.compile(r"^\s*{"),
            re.compile(r"^\s*\["),
            re.compile(r"\"[\w-]+\"\s*:"),
            re.compile(r",\s*$", re.MULTILINE),
        ),
    ),
)


def strip_code_fence(text: str) -> str:
    """Return the first fenced block's body, or the whole text, trimmed."""
    match = FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def detect_language(code: str, fallback: str) -> str:
    """Guess the language of ``code`` from syntax signatures.

    Args:
        code: Extracted code content.
        fallback: Tag returned when nothing matches (usually the requested mode).

    Returns:
        The first matching tag in declaration order, otherwise ``fallback``.
    """
    if not code:
        return fallback
    for tag, patterns in LANGUAGE_SIGNATURES:
        if any(pattern.search(code) for pattern in patterns):
            return tag
    return fallback


def filename_for(language: str) -> str:
    return f"generated-code.{FILE_EXTENSIONS.get(language, 'txt')}"


def extract_single(raw: str, mode: str) -> ExtractedArtifact:
    """Single-file strategy: strip Markdown fencing and label the result."""
    content = strip_code_fence(raw)
    language = detect_language(content, mode)
    return ExtractedArtifact(filename=filename_for(language), language=language, content=content)


def split_webapp_sections(raw: str) -> list[ExtractedArtifact]:
    """Split a marker-delimited completion into html/css/js artifacts.

    Each section runs from the end of its marker to the start of the next
    marker found in the text, or to the end of the text. Sections that are
    missing or empty after trimming are omitted.
    """
    positions: list[tuple[int, int, str, str]] = []
    for marker, filename, language in WEBAPP_SECTIONS:
        index = raw.find(marker)
        if index != -1:
            positions.append((index, index + len(marker), filename, language))

    bounds = sorted(start for start, _, _, _ in positions)
    sections: dict[str, ExtractedArtifact] = {}
    for start, body_start, filename, language in positions:
        following = [bound for bound in bounds if bound > start]
        end = following[0] if following else len(raw)
        content = strip_code_fence(raw[body_start:end])
        if content:
            sections[filename] = ExtractedArtifact(filename=filename, language=language, content=content)

    return [sections[filename] for _, filename, _ in WEBAPP_SECTIONS if filename in sections]


def extract_embedded_markup(raw: str) -> list[ExtractedArtifact]:
    """Fallback for completions that return a bare HTML document.

    The whole document becomes ``index.html``; inline ``<style>`` and
    ``<script>`` bodies are additionally exposed as their own files. A fence
    is only unwrapped when its own body is markup.
    """
    fenced = FENCE_RE.search(raw)
    if fenced and MARKUP_RE.search(fenced.group(1)):
        document = fenced.group(1).strip()
    else:
        document = raw.strip()
    artifacts = [ExtractedArtifact(filename="index.html", language="html", content=document)]

    style = STYLE_BLOCK_RE.search(document)
    if style and style.group(1).strip():
        artifacts.append(ExtractedArtifact(filename="styles.css", language="css", content=style.group(1).strip()))

    script = SCRIPT_BLOCK_RE.search(document)
    if script and script.group(1).strip():
        artifacts.append(
            ExtractedArtifact(filename="script.js", language="javascript", content=script.group(1).strip())
        )

    return artifacts


def extract_webapp(raw: str) -> list[ExtractedArtifact]:
    """Composite strategy with markup and single-file fallbacks."""
    if any(marker in raw for marker, _, _ in WEBAPP_SECTIONS):
        artifacts = split_webapp_sections(raw)
        if artifacts:
            return artifacts

    if MARKUP_RE.search(raw):
        return extract_embedded_markup(raw)

    return [extract_single(raw, WEBAPP_MODE)]


def extract(raw: str, mode: str) -> list[ExtractedArtifact]:
    """Extract artifacts from a raw completion according to ``mode``.

    Args:
        raw: Completion text exactly as returned by the model.
        mode: Classified or explicitly requested mode.

    Returns:
        One artifact for language modes; up to three for the web-app mode.
    """
    if mode == WEBAPP_MODE:
        return extract_webapp(raw)
    return [extract_single(raw, mode)]
