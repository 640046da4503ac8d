"""Pytest configuration for naming assistant tests."""

import random

import pytest

from namer.core.config import NamerConfig, set_config
from namer.core.controller import ChatController


class FakeModelClient:
    """
    Stand-in for ModelClient.

    Each call to complete() consumes the next scripted reply: a string is
    returned, an exception instance is raised.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def complete(self, messages, model, temperature=0.7, max_tokens=None, json_mode=False, timeout=None):
        self.calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
            "timeout": timeout,
        })
        if not self.replies:
            raise RuntimeError("FakeModelClient has no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


# ---------------------------------------------------------------------------
# Config isolation: get_config() caches a module-level instance; pin it to
# plain defaults so a developer's .env or YAML never leaks into the tests.
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def config():
    cfg = NamerConfig()
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def controller(fake_client, config, sleeps):
    return ChatController(
        fake_client,
        config=config,
        rng=random.Random(0),
        sleep=sleeps.append,
    )


@pytest.fixture
def history():
    return [
        {"role": "assistant", "content": "你现在是想帮谁起名字呢？"},
        {"role": "user", "content": "给我女儿"},
        {"role": "assistant", "content": "好的！有中文名吗？"},
    ]


@pytest.fixture
def make_client():
    """Factory for scripted fake clients: make_client(["{...}", TimeoutError()])."""
    return FakeModelClient
