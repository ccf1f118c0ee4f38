"""
Tests for model output parsing (code fences and JSON decoding).
"""

import pytest

from src.models.errors import AIError, ErrorKind, ProviderName
from src.utils.parsing import parse_json_payload, strip_code_fences


def test_strip_fence_with_language_tag():
    text = '```json\n{"score": 8}\n```'
    assert strip_code_fences(text) == '{"score": 8}'


def test_strip_fence_without_language_tag():
    text = '```\n{"score": 8}\n```\n'
    assert strip_code_fences(text) == '{"score": 8}'


def test_unfenced_text_only_trimmed():
    assert strip_code_fences('  {"score": 8}\n') == '{"score": 8}'


def test_inner_backticks_untouched():
    text = 'Use `code` here'
    assert strip_code_fences(text) == text


def test_fenced_and_unfenced_decode_identically():
    body = '{"score": 6, "strengths": ["a"]}'
    fenced = parse_json_payload(f"```json\n{body}\n```", ProviderName.GEMINI)
    plain = parse_json_payload(body, ProviderName.GEMINI)
    assert fenced == plain == {"score": 6, "strengths": ["a"]}


def test_malformed_json_is_parse_error():
    with pytest.raises(AIError) as exc_info:
        parse_json_payload("Here is your feedback: score 7", ProviderName.ANTHROPIC)

    error = exc_info.value
    assert error.kind == ErrorKind.PARSE_ERROR
    assert error.retryable is True
    assert error.provider == ProviderName.ANTHROPIC


@pytest.mark.parametrize("text", ["", "   ", "```json\n```", None])
def test_empty_text_is_parse_error(text):
    with pytest.raises(AIError) as exc_info:
        parse_json_payload(text, ProviderName.GEMINI)
    assert exc_info.value.kind == ErrorKind.PARSE_ERROR
