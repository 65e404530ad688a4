from __future__ import annotations

from code_genie.extractor import CSS_MARKER, HTML_MARKER, JS_MARKER
from code_genie.models import WEBAPP_MODE


def build_system_prompt() -> str:
    return "You are an expert programmer who generates clean, well-documented, and production-ready code."


def _target_label(mode: str) -> str:
    if mode == WEBAPP_MODE:
        return "HTML, CSS and JavaScript (complete web application)"
    return mode


def build_webapp_contract() -> str:
    return (
        "Output format:\n"
        "Return exactly three sections, in this order, each introduced by its marker line "
        "and followed by the raw file contents with no Markdown fences:\n"
        f"{HTML_MARKER}\n"
        "<the complete index.html, linking styles.css and script.js>\n"
        f"{CSS_MARKER}\n"
        "<the complete styles.css>\n"
        f"{JS_MARKER}\n"
        "<the complete script.js>\n"
    )


def build_instruction(prompt: str, mode: str, include_comments: bool = True) -> str:
    """Build the full instruction text sent to the model for one request."""
    target = _target_label(mode)
    comment_policy = "always" if include_comments else "only when essential"

    instruction = (
        f"{build_system_prompt()}\n\n"
        "Rules:\n"
        "1. Generate only the requested code without explanations unless specifically asked\n"
        f"2. Include helpful comments {comment_policy}\n"
        f"3. Follow best practices and conventions for {target}\n"
        "4. Make the code readable and maintainable\n"
        "5. If the request is unclear, generate the most likely interpretation\n"
        "6. Handle edge cases appropriately\n"
        "7. Use modern syntax and patterns\n\n"
    )

    if mode == WEBAPP_MODE:
        instruction += build_webapp_contract() + "\n"

    instruction += f"Target Language: {target}\n\nGenerate {target} code for: {prompt}"
    return instruction
