"""
Name recommendation models and extraction of recommendations embedded in prose.

The conversational model sometimes lists names inside its answer instead of
leaving generation to /generate-names; those are pulled out here so the
client can still show them as cards.
"""
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

# "1. **Aria** - description" up to the next numbered item or end of text
RECOMMENDATION_PATTERN = re.compile(r"\d+\.\s+\*\*([^*]+)\*\*\s+-\s+([\s\S]+?)(?=\n\d+\.|$)")


class ExtractedRecommendation(BaseModel):
    """A name pulled out of free-text answer content."""
    name: str
    description: str


class NameRecommendation(BaseModel):
    """A fully described name recommendation from the generation call."""
    name: str = Field(description="Recommended English name")
    pronunciation: Optional[str] = Field(default=None, description="Pronunciation guide")
    meaning: str = Field(default="", description="Meaning, origin and cultural background")
    style_tags: List[str] = Field(default_factory=list, description="2-4 style tags")
    popularity: Optional[str] = Field(default=None, description="Popularity description")
    chinese_relation: Optional[str] = Field(default=None, description="Relation to the Chinese name")
    reason: str = Field(default="", description="Why this name fits the user")

    @field_validator("style_tags", mode="before")
    @classmethod
    def _tags_as_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in re.split(r"[,，、]", value) if tag.strip()]
        return [str(tag).strip() for tag in value if str(tag).strip()]


def extract_recommendations_from_text(text: Optional[str]) -> List[Dict[str, str]]:
    """
    Pull numbered "**Name** - description" items out of an answer.

    Args:
        text: Free-text answer from the model

    Returns:
        Ordered list of {"name", "description"} dicts, empty if nothing matched
    """
    if not text:
        return []

    return [
        ExtractedRecommendation(name=match.group(1).strip(), description=match.group(2).strip()).model_dump()
        for match in RECOMMENDATION_PATTERN.finditer(text)
    ]
