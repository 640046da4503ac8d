"""
Opening messages for conversations with no history.
"""
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

RESET_NOTICE = "已重置会话。"


@dataclass(frozen=True)
class OpeningMessage:
    """One greeting variant with its own suggested quick replies."""
    text: str
    quick_replies: List[str] = field(default_factory=list)


OPENING_MESSAGES: List[OpeningMessage] = [
    OpeningMessage(
        text="有时候给孩子或者自己取个英文名，感觉比写论文还难 😅 你现在是想帮谁起名字呢？",
        quick_replies=['给宝宝起名', '给朋友起名', '给自己起名', '给学生起名'],
    ),
    OpeningMessage(
        text="你希望这个名字传达什么感觉？✨ 比如有寓意、有文化感，还是念出来就很顺耳那种？",
        quick_replies=['有寓意的名字', '发音好听', '不要太常见', '像某部电影角色'],
    ),
    OpeningMessage(
        text="名字这种东西，选好了是加分神器，选不好...可能一辈子都在纠正发音 🙈 你现在有点想法了吗？",
        quick_replies=['我有点想法', '不知道从哪开始', '先给我点灵感', '我想听听你的建议'],
    ),
    OpeningMessage(
        text="如果你在为一个特别的人取名，我懂这份纠结 🫶 我们可以慢慢聊，一起找点灵感。",
        quick_replies=['好的，慢慢来', '我希望名字特别', '不希望撞名', '我想让名字有故事感', '先推荐几个名字吧'],
    ),
    OpeningMessage(
        text="想起一个既特别又不出戏的英文名其实挺难的…不过我们一起慢慢来，别怕取名压力山大 🧠💡",
        quick_replies=['风格偏好', '跟中文名有关', '取名场景', '随便聊聊试试看'],
    ),
]


def pick_opening(
    pool: Sequence[OpeningMessage] = OPENING_MESSAGES,
    rng: Optional[random.Random] = None,
) -> Tuple[int, OpeningMessage]:
    """
    Choose an opening uniformly at random.

    Args:
        pool: Candidate openings (must be non-empty)
        rng: Random source; the module-level generator when omitted

    Returns:
        (variant index, chosen opening)
    """
    if not pool:
        raise ValueError("Opening message pool is empty")
    index = (rng or random).randrange(len(pool))
    return index, pool[index]
