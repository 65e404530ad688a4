from __future__ import annotations

from code_genie.extractor import CSS_MARKER, HTML_MARKER, JS_MARKER
from code_genie.prompting import build_instruction, build_system_prompt


def test_build_system_prompt_given_no_args_when_called_then_role_is_described() -> None:
    # Given
    # No input is required.

    # When
    prompt = build_system_prompt()

    # Then
    assert "expert programmer" in prompt


def test_build_instruction_given_language_mode_when_called_then_rules_and_target_are_included() -> None:
    # Given
    prompt = "Write a Python function to validate email addresses"

    # When
    instruction = build_instruction(prompt, "python", include_comments=True)

    # Then
    assert "Rules:" in instruction
    assert "Include helpful comments always" in instruction
    assert "Target Language: python" in instruction
    assert instruction.endswith(f"Generate python code for: {prompt}")
    assert HTML_MARKER not in instruction


def test_build_instruction_given_comments_disabled_when_called_then_policy_is_essential_only() -> None:
    # Given
    include_comments = False

    # When
    instruction = build_instruction("sort a list", "go", include_comments=include_comments)

    # Then
    assert "Include helpful comments only when essential" in instruction


def test_build_instruction_given_webapp_mode_when_called_then_section_markers_are_requested_in_order() -> None:
    # Given
    prompt = "todo app"

    # When
    instruction = build_instruction(prompt, "webapp")

    # Then
    html_at = instruction.index(HTML_MARKER)
    css_at = instruction.index(CSS_MARKER)
    js_at = instruction.index(JS_MARKER)
    assert html_at < css_at < js_at
    assert "complete web application" in instruction
