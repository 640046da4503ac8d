"""
English Namer - conversational English-name assistant.

A chat service that:
- Fills naming-preference slots through multi-turn dialogue
- Recomputes missing slots and generation readiness every turn
- Generates English-name recommendations on demand
"""

from namer.core.config import NamerConfig, get_config, set_config

__all__ = [
    'NamerConfig',
    'get_config',
    'set_config',
]

__version__ = '0.1.0'
