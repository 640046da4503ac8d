"""
Conversation turn controller.

Runs one chat turn end to end: command detection, the opening branch for
empty histories, the model call with bounded retry, normalization, slot
validation and recommendation extraction. Holds no per-session state; the
client resends the whole history with every request.
"""
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from namer.core.config import NamerConfig, get_config
from namer.core.errors import MissingParameterError
from namer.dialogue.commands import SpecialCommands, detect_special_commands
from namer.dialogue.normalizer import ensure_valid_json
from namer.dialogue.openings import OPENING_MESSAGES, RESET_NOTICE, OpeningMessage, pick_opening
from namer.dialogue.prompts import (
    SYSTEM_PROMPT,
    JSON_REMINDER,
    GENERATE_NOW_HINT,
    CHANGE_STYLE_HINT,
    CHAT_FAILURE_MESSAGE,
    CHAT_FAILURE_QUICK_REPLIES,
)
from namer.dialogue.recommendations import extract_recommendations_from_text
from namer.dialogue.slots import (
    PreferenceSlots,
    compute_can_generate,
    empty_slots,
    validate_missing_slots,
)
from namer.utils.logger import get_logger

logger = get_logger("core.controller")

CHAT_ROLES = ("user", "assistant", "system")


@dataclass
class ChatTurnResult:
    """Result of one conversational turn."""
    chat_content: str
    quick_replies: List[str] = field(default_factory=list)
    slots: Optional[PreferenceSlots] = None
    missing_slots: Optional[List[str]] = None
    can_generate: Optional[bool] = None
    session_id: str = ""
    recommendations: List[Dict[str, str]] = field(default_factory=list)
    has_recommendations: bool = False
    variant: Optional[int] = None     # Opening branch only
    is_reset: bool = False
    degraded: bool = False            # Retry budget exhausted


class ChatController:
    """
    Composes the dialogue components into a request/response cycle.

    The model client, random source, sleep and clock are injected so the
    controller can be driven deterministically in tests.
    """

    def __init__(
        self,
        client,
        config: Optional[NamerConfig] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        openings: Sequence[OpeningMessage] = OPENING_MESSAGES,
    ):
        """
        Args:
            client: Object with ``complete(messages, model, ...) -> str``
            config: Configuration object. Uses default config if not provided.
            rng: Random source for opening selection
            sleep: Called with the retry delay between failed attempts
            clock: Monotonic clock used for the overall deadline
            openings: Opening message pool
        """
        self.client = client
        self.config = config or get_config()
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.clock = clock
        self.openings = openings

        logger.info(
            f"Chat controller initialized: model={self.config.chat_model}, "
            f"attempts={self.config.chat_max_attempts}, deadline={self.config.chat_deadline}s"
        )

    def process_turn(
        self,
        chat_content: Optional[str],
        chat_history: Optional[Sequence[Any]],
        session_id: Optional[str] = None,
    ) -> ChatTurnResult:
        """
        Handle one chat request.

        Args:
            chat_content: The user's latest utterance
            chat_history: All prior turns, oldest first
            session_id: Echoed back unchanged

        Returns:
            ChatTurnResult

        Raises:
            MissingParameterError: history is non-empty but chat_content is blank
        """
        session_id = session_id or ""
        commands = detect_special_commands(chat_content)
        if commands.any:
            logger.info(
                f"Commands [{session_id}]: reset={commands.is_reset}, "
                f"generate={commands.is_generate}, change_style={commands.is_change_style}"
            )

        if commands.is_reset:
            logger.info(f"Reset requested [{session_id}]")
            return self.opening_response(session_id, reset=True)

        if not chat_history:
            return self.opening_response(session_id)

        if not chat_content or not chat_content.strip():
            raise MissingParameterError("缺少必要参数")

        messages = self.build_messages(chat_content, chat_history, commands)
        raw = self._call_with_retry(messages)
        if raw is None:
            return self.failure_response(session_id)

        return self._compose_response(raw, commands, session_id)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def opening_response(self, session_id: str = "", reset: bool = False) -> ChatTurnResult:
        """Greeting for an empty (or just reset) conversation."""
        variant, opening = pick_opening(self.openings, self.rng)
        slots = empty_slots()
        text = RESET_NOTICE + opening.text if reset else opening.text
        return ChatTurnResult(
            chat_content=text,
            quick_replies=list(opening.quick_replies),
            slots=slots,
            missing_slots=validate_missing_slots(slots, []),
            can_generate=False,
            session_id=session_id,
            variant=variant,
            is_reset=reset,
        )

    def failure_response(self, session_id: str = "") -> ChatTurnResult:
        """Canned apology once the retry budget is spent."""
        return ChatTurnResult(
            chat_content=CHAT_FAILURE_MESSAGE,
            quick_replies=list(CHAT_FAILURE_QUICK_REPLIES),
            session_id=session_id,
            degraded=True,
        )

    # ------------------------------------------------------------------
    # Model call
    # ------------------------------------------------------------------

    def build_messages(
        self,
        chat_content: str,
        chat_history: Sequence[Any],
        commands: Optional[SpecialCommands] = None,
    ) -> List[Dict[str, str]]:
        """System prompt + JSON reminder + history + utterance + command hints."""
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "system", "content": JSON_REMINDER},
        ]
        messages.extend(_history_messages(chat_history))
        messages.append({"role": "user", "content": chat_content})

        commands = commands or SpecialCommands()
        if commands.is_generate:
            messages.append({"role": "system", "content": GENERATE_NOW_HINT})
        if commands.is_change_style:
            messages.append({"role": "system", "content": CHANGE_STYLE_HINT})
        return messages

    def _call_with_retry(self, messages: List[Dict[str, str]]) -> Optional[str]:
        """Return the raw completion, or None when every attempt failed."""
        max_attempts = max(1, self.config.chat_max_attempts)
        started = self.clock()

        for attempt in range(1, max_attempts + 1):
            remaining = self.config.chat_deadline - (self.clock() - started)
            if remaining <= 0:
                logger.warning(f"Chat deadline of {self.config.chat_deadline}s reached before attempt {attempt}")
                break

            try:
                return self.client.complete(
                    messages=messages,
                    model=self.config.chat_model,
                    temperature=self.config.chat_temperature,
                    max_tokens=self.config.chat_max_tokens,
                    json_mode=True,
                    timeout=min(self.config.request_timeout, remaining),
                )
            except Exception as e:
                logger.error(f"Chat model call failed (attempt {attempt}/{max_attempts}): {e}")
                if attempt < max_attempts:
                    self.sleep(self.config.chat_retry_delay)

        logger.error("Chat model call failed on every attempt, returning fallback reply")
        return None

    def _compose_response(self, raw: str, commands: SpecialCommands, session_id: str) -> ChatTurnResult:
        payload = ensure_valid_json(raw)

        answer = payload.get("answer")
        answer = answer if isinstance(answer, str) else ("" if answer is None else str(answer))
        quick_replies = _string_list(payload.get("quickReplies"))
        slots = PreferenceSlots.from_model_output(payload.get("slots"))
        declared_missing = payload.get("missing_slots")
        if not isinstance(declared_missing, list):
            declared_missing = []

        missing_slots = validate_missing_slots(slots, declared_missing)
        recommendations = extract_recommendations_from_text(answer)
        can_generate = compute_can_generate(
            slots,
            missing_slots,
            model_declared=payload.get("can_generate", False),
            generate_requested=commands.is_generate,
        )

        logger.info(
            f"Turn [{session_id}]: filled={[k for k, v in slots.model_dump().items() if v is not None]}, "
            f"missing={missing_slots}, can_generate={can_generate}, recommendations={len(recommendations)}"
        )

        return ChatTurnResult(
            chat_content=answer,
            quick_replies=quick_replies,
            slots=slots,
            missing_slots=missing_slots,
            can_generate=can_generate,
            session_id=session_id,
            recommendations=recommendations,
            has_recommendations=len(recommendations) > 0,
        )


def _history_messages(chat_history: Sequence[Any]) -> List[Dict[str, str]]:
    """Accept dicts or objects with role/content; drop anything unusable."""
    messages = []
    for item in chat_history or []:
        if isinstance(item, Mapping):
            role, content = item.get("role"), item.get("content")
        else:
            role, content = getattr(item, "role", None), getattr(item, "content", None)
        if role not in CHAT_ROLES or not isinstance(content, str):
            logger.warning(f"Skipping malformed history item: {item!r}")
            continue
        messages.append({"role": role, "content": content})
    return messages


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]
