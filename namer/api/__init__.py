"""
API module for the naming assistant.

Provides the REST endpoints (/chat, /generate-names, /healthz).
"""
from namer.api.models import (
    ChatTurn,
    ChatRequest,
    ChatResponse,
    GenerateNamesRequest,
    GenerateNamesResponse,
    HealthResponse,
)

__all__ = [
    "ChatTurn",
    "ChatRequest",
    "ChatResponse",
    "GenerateNamesRequest",
    "GenerateNamesResponse",
    "HealthResponse",
]
