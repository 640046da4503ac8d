"""
Special-command detection on the latest user utterance.

Runs before (and independently of) the model: a reset short-circuits the
turn, generate / change-style add instructions to the outgoing prompt.
"""
import re
from dataclasses import dataclass
from typing import Optional

RESET_PATTERN = re.compile(r"重新开始|重来|从头来|清空|重置|start over|restart|reset", re.IGNORECASE)
GENERATE_PATTERN = re.compile(
    r"生成名字|推荐名字|查看结果|展示结果|推荐一些|generate names?|show (?:me )?(?:the )?results",
    re.IGNORECASE,
)
CHANGE_STYLE_PATTERN = re.compile(
    r"换个风格|换种类型|换一种|不同风格|更改风格|修改风格|change (?:the )?style|different style",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class SpecialCommands:
    """Command flags found in one utterance. The flags are independent."""
    is_reset: bool = False
    is_generate: bool = False
    is_change_style: bool = False

    @property
    def any(self) -> bool:
        return self.is_reset or self.is_generate or self.is_change_style


def detect_special_commands(chat_content: Optional[str]) -> SpecialCommands:
    """Scan an utterance for reset, generate-now and change-style intents."""
    if not chat_content:
        return SpecialCommands()

    text = chat_content.lower()
    return SpecialCommands(
        is_reset=bool(RESET_PATTERN.search(text)),
        is_generate=bool(GENERATE_PATTERN.search(text)),
        is_change_style=bool(CHANGE_STYLE_PATTERN.search(text)),
    )
