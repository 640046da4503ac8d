"""
Dedicated name generation.

Unlike the chat turn this path makes a single model call with no retry,
and an unparseable reply is reported as a GenerationError instead of
being smoothed over.
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from namer.core.config import NamerConfig, get_config
from namer.core.errors import GenerationError, ModelCallError
from namer.dialogue.normalizer import JSON_OBJECT_PATTERN
from namer.dialogue.prompts import NAME_COUNT, build_name_generation_prompt
from namer.dialogue.recommendations import NameRecommendation
from namer.dialogue.slots import PreferenceSlots
from namer.utils.logger import get_logger

logger = get_logger("core.generator")


def parse_recommendations(raw: Optional[str]) -> List[NameRecommendation]:
    """
    Parse the generation reply into recommendations.

    Accepts a bare JSON object or one wrapped in prose / code fences.
    Entries that are not valid recommendations are skipped.

    Raises:
        GenerationError: no JSON object, or no "recommendations" list in it
    """
    raw = raw or ""
    data: Any = None
    try:
        data = json.loads(raw)
    except ValueError:
        match = JSON_OBJECT_PATTERN.search(raw)
        if match:
            try:
                data = json.loads(match.group(0))
            except ValueError:
                data = None

    if not isinstance(data, dict):
        raise GenerationError("无法生成名字推荐")

    entries = data.get("recommendations")
    if not isinstance(entries, list):
        raise GenerationError("无法生成名字推荐")

    recommendations = []
    for entry in entries:
        try:
            recommendations.append(NameRecommendation.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping malformed recommendation {entry!r}: {e.error_count()} error(s)")
    return recommendations


class NameGenerator:
    """Builds the generation prompt from a slot snapshot and runs it once."""

    def __init__(self, client, config: Optional[NamerConfig] = None):
        self.client = client
        self.config = config or get_config()

    def generate(self, session_id: str, slots: Any) -> List[NameRecommendation]:
        """
        Generate name recommendations for the given preferences.

        Args:
            session_id: Caller's session id (logged only)
            slots: PreferenceSlots or a raw slots dict; missing values are allowed

        Returns:
            List of NameRecommendation (the prompt asks for five)

        Raises:
            GenerationError: the model call failed or its reply was unusable
        """
        snapshot = PreferenceSlots.from_model_output(slots)
        prompt = build_name_generation_prompt(snapshot, count=NAME_COUNT)

        try:
            raw = self.client.complete(
                messages=[{"role": "user", "content": prompt}],
                model=self.config.generate_model,
                temperature=self.config.generate_temperature,
                max_tokens=self.config.generate_max_tokens,
                json_mode=True,
                timeout=self.config.request_timeout,
            )
        except ModelCallError as e:
            logger.error(f"Name generation call failed [{session_id}]: {e}")
            raise GenerationError("无法生成名字推荐") from e

        try:
            recommendations = parse_recommendations(raw)
        except GenerationError:
            logger.error(f"Error parsing recommendations [{session_id}]: {(raw or '')[:200]!r}")
            raise

        if len(recommendations) != NAME_COUNT:
            logger.warning(f"Expected {NAME_COUNT} recommendations, got {len(recommendations)} [{session_id}]")
        logger.info(f"Generated names [{session_id}]: {[r.name for r in recommendations]}")
        return recommendations
