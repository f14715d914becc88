"""Tests for extracting JSON payloads from model output."""

import pytest

from resumegate.app.exceptions import MalformedResponseError
from resumegate.app.services.sanitizer import (
    MAX_SCAN_CANDIDATES,
    extract_payload,
    parse_payload,
    strip_code_fence,
)


class TestStripCodeFence:

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence_untouched(self):
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


class TestExtractPayload:
    """Tests for the first-brace to last-brace slice."""

    def test_prose_and_fence_removed(self):
        raw = "Here is the result:\n```json\n{\"score\": 80}\n```\nThanks"
        assert extract_payload(raw) == '{"score": 80}'

    def test_nested_object_kept_whole(self):
        raw = 'Result: {"a": {"b": 1}} done'
        assert extract_payload(raw) == '{"a": {"b": 1}}'

    def test_no_braces(self):
        with pytest.raises(MalformedResponseError):
            extract_payload("I cannot help with that.")

    def test_closing_before_opening(self):
        with pytest.raises(MalformedResponseError):
            extract_payload("} oops {")

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_response(self, raw):
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_payload(raw)
        assert exc_info.value.status_code == 502


class TestParsePayload:
    """Tests for decoding the extracted payload."""

    def test_fenced_payload(self):
        assert parse_payload('Here you go:\n```json\n{"score": 80}\n```') == {"score": 80}

    def test_trailing_prose_with_brace_falls_back_to_balanced_scan(self):
        raw = '{"score": 80} Note: use {placeholders} sparingly'
        assert parse_payload(raw) == {"score": 80}

    def test_braces_inside_strings_ignored_by_scan(self):
        raw = 'Answer {"title": "use } and { carefully", "n": 1} and a stray }'
        assert parse_payload(raw) == {"title": "use } and { carefully", "n": 1}

    def test_escaped_quote_inside_string(self):
        raw = 'x {"quote": "say \\"hi\\" {"} y }'
        assert parse_payload(raw) == {"quote": 'say "hi" {'}

    def test_leading_prose_with_brace(self):
        raw = 'Using {template} syntax: {"score": 55}'
        assert parse_payload(raw) == {"score": 55}

    def test_undecodable_json(self):
        with pytest.raises(MalformedResponseError):
            parse_payload("{not json at all}")

    def test_scan_is_bounded(self):
        raw = "{x " * (MAX_SCAN_CANDIDATES + 5) + '{"late": true}' + " }" * (MAX_SCAN_CANDIDATES + 5)
        with pytest.raises(MalformedResponseError):
            parse_payload(raw)

    def test_excessive_nesting_is_malformed(self):
        raw = '{"score": ' + "[" * 200000 + "]" * 200000 + "}"
        with pytest.raises(MalformedResponseError):
            parse_payload(raw)
