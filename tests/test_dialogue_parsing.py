"""
Unit tests for command detection, response normalization, opening selection
and recommendation extraction.
"""
import json
import random

import pytest

from namer.dialogue.commands import SpecialCommands, detect_special_commands
from namer.dialogue.normalizer import (
    ensure_valid_json,
    FALLBACK_QUICK_REPLIES,
    FALLBACK_ANSWER_LIMIT,
)
from namer.dialogue.openings import OPENING_MESSAGES, OpeningMessage, pick_opening
from namer.dialogue.recommendations import extract_recommendations_from_text


# ---------------------------------------------------------------------------
# Special commands
# ---------------------------------------------------------------------------

class TestSpecialCommands:

    def test_reset(self):
        commands = detect_special_commands("我们重新开始吧")
        assert commands.is_reset
        assert not commands.is_generate
        assert not commands.is_change_style

    def test_plain_utterance_has_no_flags(self):
        assert detect_special_commands("我喜欢这个名字") == SpecialCommands()

    @pytest.mark.parametrize("text", ["生成名字吧", "帮我推荐名字", "查看结果", "推荐一些给我", "Show me the results"])
    def test_generate(self, text):
        assert detect_special_commands(text).is_generate

    @pytest.mark.parametrize("text", ["换个风格", "想要不同风格的", "能换一种吗", "Change Style please"])
    def test_change_style(self, text):
        assert detect_special_commands(text).is_change_style

    def test_flags_are_independent(self):
        commands = detect_special_commands("清空之后换个风格再生成名字")
        assert commands.is_reset and commands.is_generate and commands.is_change_style
        assert commands.any

    def test_case_insensitive_english(self):
        assert detect_special_commands("RESTART").is_reset

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty(self, text):
        assert not detect_special_commands(text).any


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

WELL_FORMED = {
    "answer": "好的！",
    "quickReplies": ["是", "否"],
    "slots": {"target_person": "女儿", "gender": "female"},
    "missing_slots": ["scenario"],
    "can_generate": False,
}


class TestEnsureValidJson:

    def test_well_formed_round_trip(self):
        assert ensure_valid_json(json.dumps(WELL_FORMED, ensure_ascii=False)) == WELL_FORMED

    def test_code_fenced(self):
        raw = "```json\n" + json.dumps(WELL_FORMED) + "\n```"
        assert ensure_valid_json(raw) == WELL_FORMED

    def test_prose_around_object(self):
        raw = "当然！这是结果：" + json.dumps(WELL_FORMED) + " 希望有帮助"
        assert ensure_valid_json(raw) == WELL_FORMED

    def test_not_json_at_all(self):
        payload = ensure_valid_json("not json at all")
        assert payload == {
            "answer": "not json at all",
            "quickReplies": FALLBACK_QUICK_REPLIES,
            "slots": {},
            "missing_slots": ["target_person", "gender"],
            "can_generate": False,
        }

    def test_truncated_object_falls_back(self):
        raw = '{"answer": "hello", "slots": {'
        payload = ensure_valid_json(raw)
        assert payload["answer"] == raw
        assert payload["can_generate"] is False

    def test_long_text_truncated_with_ellipsis(self):
        raw = "字" * (FALLBACK_ANSWER_LIMIT + 20)
        payload = ensure_valid_json(raw)
        assert payload["answer"] == "字" * FALLBACK_ANSWER_LIMIT + "..."

    def test_exact_limit_not_truncated(self):
        raw = "a" * FALLBACK_ANSWER_LIMIT
        assert ensure_valid_json(raw)["answer"] == raw

    @pytest.mark.parametrize("raw", ["[1, 2, 3]", "42", "", None])
    def test_non_object_json_falls_back(self, raw):
        payload = ensure_valid_json(raw)
        assert payload["missing_slots"] == ["target_person", "gender"]
        assert payload["slots"] == {}

    def test_fallback_lists_are_fresh_copies(self):
        first = ensure_valid_json("oops")
        first["quickReplies"].append("mutated")
        assert "mutated" not in ensure_valid_json("oops again")["quickReplies"]


# ---------------------------------------------------------------------------
# Openings
# ---------------------------------------------------------------------------

class TestPickOpening:

    def test_pool_has_five_variants(self):
        assert len(OPENING_MESSAGES) == 5
        assert all(opening.quick_replies for opening in OPENING_MESSAGES)

    def test_deterministic_with_seeded_rng(self):
        index_a, opening_a = pick_opening(OPENING_MESSAGES, random.Random(42))
        index_b, opening_b = pick_opening(OPENING_MESSAGES, random.Random(42))
        assert index_a == index_b
        assert opening_a is OPENING_MESSAGES[index_a]

    def test_index_in_range(self):
        rng = random.Random(7)
        seen = {pick_opening(OPENING_MESSAGES, rng)[0] for _ in range(200)}
        assert seen == {0, 1, 2, 3, 4}

    def test_custom_pool(self):
        pool = [OpeningMessage(text="hi", quick_replies=["a"])]
        assert pick_opening(pool, random.Random()) == (0, pool[0])

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError):
            pick_opening([], random.Random())


# ---------------------------------------------------------------------------
# Recommendation extraction
# ---------------------------------------------------------------------------

class TestExtractRecommendations:

    def test_two_items(self):
        text = "1. **Aria** - means light, suited for...\n2. **Lior** - Hebrew for my light"
        assert extract_recommendations_from_text(text) == [
            {"name": "Aria", "description": "means light, suited for..."},
            {"name": "Lior", "description": "Hebrew for my light"},
        ]

    def test_multiline_description(self):
        text = "给你几个：\n1. **Elena** - 优雅\n  很适合职场\n2. **Iris** - 彩虹女神\n"
        result = extract_recommendations_from_text(text)
        assert [r["name"] for r in result] == ["Elena", "Iris"]
        assert result[0]["description"] == "优雅\n  很适合职场"
        assert result[1]["description"] == "彩虹女神"

    def test_names_trimmed(self):
        result = extract_recommendations_from_text("1. ** Nova ** - new star")
        assert result == [{"name": "Nova", "description": "new star"}]

    @pytest.mark.parametrize("text", [None, "", "我们再聊聊风格吧", "1. Aria - no bold"])
    def test_no_matches(self, text):
        assert extract_recommendations_from_text(text) == []
