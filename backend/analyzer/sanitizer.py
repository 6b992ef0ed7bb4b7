# analyzer/sanitizer.py
# ─────────────────────────────────────────────────────────────────────────────
# Recover the analysis JSON from whatever the model actually sent back.
#
# Models are told "JSON only, no markdown" and still wrap answers in
# ```json fences or open with "Here is the result:". We strip fences,
# keep the span from the first "{" to the last "}", and parse that.
# Field values are not validated: once it parses, it is trusted.
# ─────────────────────────────────────────────────────────────────────────────

import json
import logging
import re

from errors import ResponseFormatError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```[A-Za-z0-9_+-]*")


def _clean_json(raw: str) -> str:
    """Strip markdown fences, surrounding prose and whitespace."""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = _FENCE.sub("", text).strip()

    start = text.find("{")
    end   = text.rfind("}")
    if start != -1 and end > start:
        text = text[start:end + 1]
    return text


def parse_analysis(raw: str) -> dict:
    """Parse a completion into a dict or raise ResponseFormatError."""
    cleaned = _clean_json(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("JSON parse error: %s\nRaw model output:\n%s", e, raw)
        raise ResponseFormatError(raw, detail=str(e)) from e

    if not isinstance(parsed, dict):
        logger.error("Model output is not a JSON object:\n%s", raw)
        raise ResponseFormatError(raw, detail=f"expected object, got {type(parsed).__name__}")
    return parsed
