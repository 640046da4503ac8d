"""
Pydantic models for the naming assistant API.

Field names on the wire are camelCase (chatContent, quickReplies, ...)
except for the slot-protocol fields (slots, missing_slots, can_generate),
which keep the names the model itself is prompted with.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

from namer.dialogue.recommendations import ExtractedRecommendation, NameRecommendation
from namer.dialogue.slots import PreferenceSlots

OPENING_ONLY_FIELDS = ("variant", "isReset")


class ChatTurn(BaseModel):
    """One message of the client-held conversation history."""
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    chat_content: Optional[str] = Field(default=None, alias="chatContent", description="User's latest message")
    chat_history: List[ChatTurn] = Field(default_factory=list, alias="chatHistory", description="Full prior history")
    session_id: Optional[str] = Field(default=None, alias="sessionId", description="Echoed back, never stored")


class ChatResponse(BaseModel):
    """Response model for the chat endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    chat_content: str = Field(alias="chatContent", description="Assistant reply")
    quick_replies: List[str] = Field(default_factory=list, alias="quickReplies")

    # Slot state (null on the degraded failure reply)
    slots: Optional[PreferenceSlots] = None
    missing_slots: Optional[List[str]] = None
    can_generate: Optional[bool] = None

    session_id: str = Field(default="", alias="sessionId")
    recommendations: List[ExtractedRecommendation] = Field(default_factory=list)
    has_recommendations: bool = Field(default=False, alias="hasRecommendations")

    # Opening branch only
    variant: Optional[int] = Field(default=None, description="Index into the opening message pool")
    is_reset: Optional[bool] = Field(default=None, alias="isReset")

    def to_wire(self) -> Dict[str, Any]:
        """Aliased JSON body; the opening-only keys are omitted when unset."""
        body = self.model_dump(by_alias=True, mode="json")
        for key in OPENING_ONLY_FIELDS:
            if body.get(key) is None:
                body.pop(key, None)
        return body


class GenerateNamesRequest(BaseModel):
    """Request model for dedicated name generation."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    slots: Optional[Dict[str, Any]] = Field(default=None, description="PreferenceSlots snapshot, partial allowed")


class GenerateNamesResponse(BaseModel):
    """Response model for dedicated name generation."""
    recommendations: List[NameRecommendation]


class HealthResponse(BaseModel):
    """Response model for health check."""
    version: str
    status: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx reply."""
    error: str
