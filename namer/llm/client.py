"""
OpenAI chat-completion adapter.

The controller and generator depend on anything with a ``complete`` method
returning raw text, so tests can pass a fake in place of ModelClient.
"""
from typing import Dict, List, Optional

from openai import OpenAI

from namer.core.config import NamerConfig, get_config
from namer.core.errors import ModelCallError
from namer.utils.logger import get_logger

logger = get_logger("llm.client")


class ModelClient:
    """Thin wrapper around ``OpenAI().chat.completions.create``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[OpenAI] = None,
    ):
        """
        Args:
            api_key: OpenAI key; the SDK reads OPENAI_API_KEY when omitted
            timeout: Default per-request timeout in seconds
            client: Pre-built OpenAI client (for tests)
        """
        self.timeout = timeout
        # SDK retries off; ChatController retries on its own schedule
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    @classmethod
    def from_config(cls, config: Optional[NamerConfig] = None) -> "ModelClient":
        config = config or get_config()
        return cls(api_key=config.openai_api_key, timeout=config.request_timeout)

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Run one chat completion and return the message text.

        Raises:
            ModelCallError: on any transport or provider failure
        """
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            completion = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                timeout=timeout if timeout is not None else self.timeout,
                **kwargs,
            )
        except Exception as e:
            raise ModelCallError(f"Model call to {model} failed: {e}") from e

        if not completion.choices:
            raise ModelCallError(f"Model {model} returned no choices")

        content = completion.choices[0].message.content or ""
        logger.debug(f"RAW response ({model}): {content}")
        return content
