"""Helpers for pulling structured data out of LLM replies.

Models often wrap the JSON they were asked for in prose or Markdown code
fences; this finds the outermost ``{...}`` block and decodes it.
"""

from __future__ import annotations

import json
import re
from typing import Any

from relieflink.utils.errors import MalformedProviderResponseError

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str, provider_name: str | None = None) -> dict[str, Any]:
    """Return the first JSON object embedded in *text*.

    Raises
    ------
    MalformedProviderResponseError
        If no object is present or it does not decode to a dict.
    """
    match = _JSON_OBJECT_RE.search(text or "")
    if match is None:
        raise MalformedProviderResponseError(
            message="No JSON object found in model reply",
            provider_name=provider_name,
        )
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MalformedProviderResponseError(
            message=f"Model reply is not valid JSON: {exc.msg}",
            provider_name=provider_name,
        ) from exc
    if not isinstance(data, dict):
        raise MalformedProviderResponseError(
            message="Model reply JSON is not an object",
            provider_name=provider_name,
        )
    return data
