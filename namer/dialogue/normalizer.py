"""
Coerces raw model text into a structured chat payload.

The model is told to answer in JSON but is not guaranteed to. This module
tries a direct parse, then the outermost {...} span, and finally builds a
fallback payload around the raw text so callers always get a dict.
"""
import json
import re
from typing import Any, Dict, List, Optional

from namer.utils.logger import get_logger

logger = get_logger("dialogue.normalizer")

FALLBACK_ANSWER_LIMIT = 500
FALLBACK_QUICK_REPLIES: List[str] = ['Opps，再试一次', '告诉我更多', '重新开始', '需要帮助']
FALLBACK_MISSING_SLOTS: List[str] = ["target_person", "gender"]

# Greedy: first "{" to last "}"
JSON_OBJECT_PATTERN = re.compile(r"{[\s\S]*}")


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def build_fallback_payload(raw: str) -> Dict[str, Any]:
    """Wrap unparseable model text in a usable payload."""
    answer = raw[:FALLBACK_ANSWER_LIMIT] + ('...' if len(raw) > FALLBACK_ANSWER_LIMIT else '')
    return {
        "answer": answer,
        "quickReplies": list(FALLBACK_QUICK_REPLIES),
        "slots": {},
        "missing_slots": list(FALLBACK_MISSING_SLOTS),
        "can_generate": False,
    }


def ensure_valid_json(raw: Optional[str]) -> Dict[str, Any]:
    """
    Parse model output into a dict, never raising.

    Args:
        raw: Raw completion text

    Returns:
        The parsed object, the parsed outermost-brace span, or a fallback payload
    """
    raw = raw or ""

    parsed = _loads_object(raw)
    if parsed is not None:
        return parsed

    match = JSON_OBJECT_PATTERN.search(raw)
    if match:
        parsed = _loads_object(match.group(0))
        if parsed is not None:
            logger.warning("Model output was not pure JSON; recovered embedded object")
            return parsed
        logger.error("Error parsing extracted JSON span from model output")

    logger.error("Creating fallback JSON response")
    return build_fallback_payload(raw)
