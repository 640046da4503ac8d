"""
Unit tests for dedicated name generation (namer/core/generator.py) and
the generation prompt.
"""
import json

import pytest

from namer.core.errors import GenerationError, ModelCallError
from namer.core.generator import NameGenerator, parse_recommendations
from namer.dialogue.prompts import build_name_generation_prompt
from namer.dialogue.slots import PreferenceSlots


def recommendation(name, **overrides):
    entry = {
        "name": name,
        "pronunciation": "AH-ree-ah",
        "meaning": "light",
        "style_tags": ["优雅", "小众"],
        "popularity": "rising",
        "chinese_relation": "未提供中文名",
        "reason": "fits",
    }
    entry.update(overrides)
    return entry


FIVE_NAMES = json.dumps({"recommendations": [recommendation(n) for n in ["Aria", "Lior", "Iris", "Nova", "Elena"]]})


class TestPrompt:

    def test_placeholders_for_unknown_slots(self):
        prompt = build_name_generation_prompt(PreferenceSlots())
        assert "为用户生成5个" in prompt
        assert "- 起名对象: 未指定" in prompt
        assert "- 使用场景: 日常生活/未指定" in prompt
        assert "- 中文名参考: 未提供" in prompt
        assert "- 审美风格标签: 未指定" in prompt
        assert "- 其他上下文: 无" in prompt
        assert "用户未提供中文名参考" in prompt

    def test_known_values_embedded(self):
        slots = PreferenceSlots(
            target_person="女儿",
            gender="female",
            chinese_name_input="诗涵",
            chinese_reference="phonetic",
            aesthetic_tags=["优雅", "小众"],
            meaning_tags=["智慧"],
        )
        prompt = build_name_generation_prompt(slots)
        assert "为女儿生成5个" in prompt
        assert "- 性别: female" in prompt
        assert "- 审美风格标签: 优雅, 小众" in prompt
        assert "- 寓意偏好: 智慧" in prompt
        assert '如果用户提供了中文名"诗涵"，请根据phonetic进行关联' in prompt
        assert '与中文名"诗涵"的关联说明' in prompt

    def test_braces_in_values_are_safe(self):
        prompt = build_name_generation_prompt(PreferenceSlots(additional_context="{weird}"))
        assert "- 其他上下文: {weird}" in prompt


class TestParseRecommendations:

    def test_valid(self):
        result = parse_recommendations(FIVE_NAMES)
        assert [r.name for r in result] == ["Aria", "Lior", "Iris", "Nova", "Elena"]
        assert result[0].style_tags == ["优雅", "小众"]

    def test_wrapped_in_prose(self):
        assert len(parse_recommendations("Here you go:\n" + FIVE_NAMES)) == 5

    @pytest.mark.parametrize("raw", ["not json", "", None, "[]", '{"names": []}', '{"recommendations": "Aria"}'])
    def test_unusable_reply_raises(self, raw):
        with pytest.raises(GenerationError):
            parse_recommendations(raw)

    def test_malformed_entries_skipped(self):
        raw = json.dumps({"recommendations": [recommendation("Aria"), {"meaning": "no name"}, "Lior"]})
        assert [r.name for r in parse_recommendations(raw)] == ["Aria"]

    def test_optional_fields_and_tag_string(self):
        raw = json.dumps({"recommendations": [{"name": "Nova", "style_tags": "现代，简洁"}]})
        result = parse_recommendations(raw)[0]
        assert result.pronunciation is None
        assert result.style_tags == ["现代", "简洁"]


class TestNameGenerator:

    def test_single_call_with_generation_settings(self, make_client, config):
        client = make_client([FIVE_NAMES])
        generator = NameGenerator(client, config=config)

        result = generator.generate("s1", {"target_person": "女儿", "gender": "female"})

        assert len(result) == 5
        assert len(client.calls) == 1
        call = client.calls[0]
        assert call["model"] == config.generate_model
        assert call["temperature"] == config.generate_temperature
        assert call["max_tokens"] == config.generate_max_tokens
        assert call["messages"][0]["role"] == "user"
        assert "为女儿生成5个" in call["messages"][0]["content"]

    def test_parse_failure_is_not_retried(self, make_client, config):
        client = make_client(["oops", FIVE_NAMES])
        with pytest.raises(GenerationError):
            NameGenerator(client, config=config).generate("s1", {})
        assert len(client.calls) == 1

    def test_model_failure_becomes_generation_error(self, make_client, config):
        client = make_client([ModelCallError("down")])
        with pytest.raises(GenerationError):
            NameGenerator(client, config=config).generate("s1", {})

    def test_accepts_slot_model(self, make_client, config):
        client = make_client([FIVE_NAMES])
        NameGenerator(client, config=config).generate("s1", PreferenceSlots(target_person="自己"))
        assert "为自己生成5个" in client.calls[0]["messages"][0]["content"]
