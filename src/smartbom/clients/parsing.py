"""Extraction of structured payloads from free-form model responses.

Research models often wrap their JSON answer in reasoning blocks
(``<think>…</think>``), commentary, or Markdown code fences.  The contract
is: strip those wrappers, take the substring from the first ``{`` to the
last ``}``, and parse only that.  Anything else is a :class:`ParseError`,
which the retry executor treats as terminal.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from smartbom.exceptions import ParseError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_CODE_FENCE = re.compile(r"```[a-zA-Z0-9_-]*")

# Maximum characters of the payload echoed into debug logs.
_LOG_PREVIEW_LEN = 200


def strip_wrappers(text: str) -> str:
    """Remove reasoning blocks and code-fence markers from *text*."""
    cleaned = _THINK_BLOCK.sub("", text)
    cleaned = _CODE_FENCE.sub("", cleaned)
    return cleaned.strip()


def extract_json_payload(text: str) -> dict[str, Any]:
    """Return the JSON object embedded in a model response.

    Args:
        text: Raw response text.

    Returns:
        The decoded JSON object.

    Raises:
        ParseError: If no ``{ … }`` span exists or the span is not valid JSON.
    """
    cleaned = strip_wrappers(text or "")
    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first == -1 or last == -1 or last < first:
        raise ParseError("No valid JSON object found in response", raw=text or "")

    candidate = cleaned[first : last + 1]
    logger.debug("Extracted JSON payload: %s", candidate[:_LOG_PREVIEW_LEN])
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse JSON response: {exc}", raw=text) from exc
    return payload


def parse_response(text: str, schema: Type[M]) -> M:
    """Extract the JSON payload from *text* and validate it against *schema*.

    Raises:
        ParseError: If extraction fails or the payload does not match *schema*.
    """
    payload = extract_json_payload(text)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ParseError(
            f"Response does not match {schema.__name__}: "
            f"{exc.error_count()} validation error(s)",
            raw=text,
        ) from exc
