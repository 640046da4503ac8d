"""
Preference slot definitions and the slot-filling state tracker.

The model declares which slots it has filled and which it thinks are still
missing. Nothing it says about missingness or readiness is taken verbatim:
the missing list and the can_generate flag are recomputed here every turn
from the slot snapshot.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field

from namer.utils.logger import get_logger

logger = get_logger("dialogue.slots")


class SlotPriority(Enum):
    """Priority level for preference slots."""
    REQUIRED = 1   # Must be known before generation (target_person, gender)
    OPTIONAL = 2   # Improves recommendations; asked in NAMING_SLOTS order


@dataclass
class PreferenceSlot:
    """Definition of a single preference slot."""
    name: str
    priority: SlotPriority
    allowed_values: List[str] = field(default_factory=list)
    is_list: bool = False


# Ordered by importance: this order is the missing-slot sort order.
NAMING_SLOTS = [
    PreferenceSlot("target_person", SlotPriority.REQUIRED),
    PreferenceSlot("gender", SlotPriority.REQUIRED,
                   allowed_values=["male", "female", "neutral"]),
    PreferenceSlot("chinese_name_input", SlotPriority.OPTIONAL),
    PreferenceSlot("chinese_reference", SlotPriority.OPTIONAL,
                   allowed_values=["phonetic", "semantic", "none", "both"]),
    PreferenceSlot("scenario", SlotPriority.OPTIONAL),
    PreferenceSlot("aesthetic_tags", SlotPriority.OPTIONAL, is_list=True),
    PreferenceSlot("meaning_tags", SlotPriority.OPTIONAL, is_list=True),
    PreferenceSlot("popularity_pref", SlotPriority.OPTIONAL,
                   allowed_values=["popular", "avoid_popular", "mixed"]),
    PreferenceSlot("practical_pref", SlotPriority.OPTIONAL),
    PreferenceSlot("additional_context", SlotPriority.OPTIONAL),
]

SLOTS_BY_NAME = {slot.name: slot for slot in NAMING_SLOTS}
SLOT_ORDER = [slot.name for slot in NAMING_SLOTS]
REQUIRED_SLOTS = [slot.name for slot in NAMING_SLOTS if slot.priority == SlotPriority.REQUIRED]


class PreferenceSlots(BaseModel):
    """Accumulated naming preferences; every field is present, null when unknown."""
    target_person: Optional[str] = Field(None, description="Who the name is for (e.g. '女儿', '自己')")
    gender: Optional[Literal["male", "female", "neutral"]] = Field(None, description="Gender of the name")
    scenario: Optional[str] = Field(None, description="Usage context (e.g. '出国留学', '职场')")
    chinese_name_input: Optional[str] = Field(None, description="Existing Chinese given name (e.g. '诗涵')")
    chinese_reference: Optional[Literal["phonetic", "semantic", "none", "both"]] = Field(
        None, description="How the English name relates to the Chinese name"
    )
    aesthetic_tags: Optional[List[str]] = Field(None, description="Style descriptors (e.g. '优雅', '小众')")
    meaning_tags: Optional[List[str]] = Field(None, description="Meaning descriptors (e.g. '希望', '智慧')")
    popularity_pref: Optional[Literal["popular", "avoid_popular", "mixed"]] = Field(
        None, description="Preference for common or rare names"
    )
    practical_pref: Optional[str] = Field(None, description="Practical concerns (e.g. '发音简单')")
    additional_context: Optional[str] = Field(None, description="Anything else worth knowing")

    @classmethod
    def from_model_output(cls, raw: Any) -> "PreferenceSlots":
        """
        Build a slot snapshot from whatever the model put under "slots".

        Unknown keys are dropped, out-of-range enum values become None,
        a bare string for a tag list becomes a one-element list and empty
        values become None. Never raises.
        """
        if isinstance(raw, PreferenceSlots):
            return raw.model_copy()
        if not isinstance(raw, Mapping):
            if raw is not None:
                logger.warning(f"Ignoring non-object slots value: {raw!r}")
            return cls()

        values = {}
        for slot in NAMING_SLOTS:
            values[slot.name] = _coerce_slot_value(slot, raw.get(slot.name))
        return cls(**values)


def _coerce_slot_value(slot: PreferenceSlot, value: Any) -> Any:
    if value is None:
        return None

    if slot.is_list:
        items = value if isinstance(value, (list, tuple)) else [value]
        tags = [str(item).strip() for item in items if item is not None and str(item).strip()]
        return tags or None

    if isinstance(value, (list, tuple)):
        value = "，".join(str(item).strip() for item in value if item is not None and str(item).strip())
    text = str(value).strip()
    if not text:
        return None

    if slot.allowed_values:
        normalized = text.lower()
        if normalized not in slot.allowed_values:
            logger.warning(f"Dropping out-of-range value for {slot.name}: {text!r}")
            return None
        return normalized
    return text


def empty_slots() -> PreferenceSlots:
    """Return a snapshot with every slot unknown."""
    return PreferenceSlots()


SlotsLike = Union[PreferenceSlots, Mapping[str, Any], None]


def _slot_value(slots: SlotsLike, name: str) -> Any:
    if slots is None:
        return None
    if isinstance(slots, PreferenceSlots):
        return getattr(slots, name, None)
    return slots.get(name)


def is_slot_filled(slots: SlotsLike, name: str) -> bool:
    """A slot counts as filled unless it is None, blank text or an empty list."""
    value = _slot_value(slots, name)
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def has_required_slots(slots: SlotsLike) -> bool:
    """True when both target_person and gender are known."""
    return all(is_slot_filled(slots, name) for name in REQUIRED_SLOTS)


def missing_slot_sort_key(name: str):
    """target_person, gender, then the fixed priority order, then anything else lexically."""
    if name in SLOTS_BY_NAME:
        return (0, SLOT_ORDER.index(name), "")
    return (1, 0, name)


def validate_missing_slots(
    slots: SlotsLike,
    declared_missing: Optional[Iterable[Any]] = None,
    required_only: bool = False,
) -> List[str]:
    """
    Recompute the authoritative missing-slot list.

    Entries the model flagged as missing are kept. Required slots that are
    unfilled are always added; with required_only=False every other unfilled
    slot is added too, so the list reflects the whole snapshot and not only
    what the model chose to declare. required_only=True gives the narrower
    required-field backstop. The result is deduplicated and sorted with
    missing_slot_sort_key (fixed priority order, not alphabetical), so
    calling this on its own output is a no-op.

    Args:
        slots: Slot snapshot (PreferenceSlots or a raw dict)
        declared_missing: missing_slots as declared by the model (may be None)
        required_only: Only backstop target_person/gender

    Returns:
        Ordered list of missing slot names
    """
    missing: List[str] = []
    if isinstance(declared_missing, str):
        declared_missing = [declared_missing]
    for name in declared_missing or []:
        if isinstance(name, str) and name.strip() and name.strip() not in missing:
            missing.append(name.strip())

    candidates = REQUIRED_SLOTS if required_only else SLOT_ORDER
    for name in candidates:
        if not is_slot_filled(slots, name) and name not in missing:
            missing.append(name)

    return sorted(missing, key=missing_slot_sort_key)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def compute_can_generate(
    slots: SlotsLike,
    missing_slots: List[str],
    model_declared: Any = False,
    generate_requested: bool = False,
) -> bool:
    """
    Derive generation readiness.

    True when the user asked to generate and the required slots are known,
    or the model declared readiness, or the required slots are known and
    nothing is missing.
    """
    required_known = has_required_slots(slots)
    return bool(
        (generate_requested and required_known)
        or _as_bool(model_declared)
        or (required_known and not missing_slots)
    )
