"""
Dialogue-state components: slots, commands, normalization, openings,
prompts and recommendation extraction. No network I/O lives here.
"""
from .slots import (
    PreferenceSlots, PreferenceSlot, SlotPriority, NAMING_SLOTS,
    validate_missing_slots, compute_can_generate, has_required_slots, empty_slots,
)
from .commands import SpecialCommands, detect_special_commands
from .normalizer import ensure_valid_json
from .openings import OpeningMessage, OPENING_MESSAGES, pick_opening
from .recommendations import NameRecommendation, extract_recommendations_from_text
