"""Extraction of the JSON payload embedded in free-form model output.

Models are prompted to answer with a bare JSON object, but they routinely
wrap it in a fenced code block or surround it with prose. ``extract_payload``
is a best-effort heuristic: strip a leading/trailing code fence, then take
everything from the first ``{`` to the last ``}``.

The first/last slice breaks when prose after the object contains a ``}``;
``parse_payload`` therefore falls back to a string-aware balanced brace
scan before giving up.
"""

import json
import re
from typing import Any, Iterator

from resumegate.app.core.logging import get_logger
from resumegate.app.exceptions import MalformedResponseError

logger = get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```[A-Za-z]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")

# Upper bound on candidate start positions tried by the fallback scanner
MAX_SCAN_CANDIDATES = 32


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json (or bare ```) marker and a trailing ``` marker."""
    text = text.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def extract_payload(raw_text: str) -> str:
    """Extract the JSON object text from raw model output.

    Args:
        raw_text: Untrusted text returned by the model

    Returns:
        The substring from the first ``{`` to the last ``}`` inclusive

    Raises:
        MalformedResponseError: If there is no ``{``/``}`` pair, or the last
            ``}`` precedes the first ``{``
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise MalformedResponseError("Empty response from model")

    text = strip_code_fence(raw_text)
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponseError()
    return text[start:end + 1]


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield brace-balanced regions starting at successive ``{`` positions.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the nesting depth.
    """
    start = text.find("{")
    tried = 0
    while start != -1 and tried < MAX_SCAN_CANDIDATES:
        tried += 1
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    yield text[start:index + 1]
                    break
        start = text.find("{", start + 1)


def parse_payload(raw_text: str) -> Any:
    """Extract and decode the JSON payload from raw model output.

    Raises:
        MalformedResponseError: If no region of the text decodes as JSON
    """
    payload = extract_payload(raw_text)
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.debug(f"First/last brace slice is not valid JSON ({exc}); scanning for balanced object")

    for candidate in _balanced_objects(strip_code_fence(raw_text)):
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue

    raise MalformedResponseError("Model response contains no decodable JSON object")
