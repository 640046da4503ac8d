"""
Exception types raised across the naming assistant.

The API layer maps these onto HTTP status codes; everything else is
considered an unexpected fault and becomes a 500.
"""


class NamerError(Exception):
    """Base class for all naming-assistant errors."""
    status_code = 500


class MissingParameterError(NamerError):
    """A required request field was absent or empty."""
    status_code = 400


class ModelCallError(NamerError):
    """The language-model call failed (transport, provider or empty reply)."""


class GenerationError(NamerError):
    """The dedicated name-generation reply could not be parsed."""
    status_code = 500
