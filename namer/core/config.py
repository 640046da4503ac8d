"""
Configuration management for the naming assistant.

Loads settings from a YAML config file, then lets environment variables
(including a local .env file) override the model-related values.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import yaml

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of namer package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"


@dataclass
class NamerConfig:
    """Configuration for the naming assistant."""

    # Model configuration (the two call sites default to different models)
    chat_model: str = "gpt-4o-mini"
    generate_model: str = "gpt-3.5-turbo"
    chat_temperature: float = 0.7
    generate_temperature: float = 0.8
    chat_max_tokens: int = 800
    generate_max_tokens: int = 1500

    # Conversational call retry policy
    chat_max_attempts: int = 3          # Total attempts, not retries
    chat_retry_delay: float = 0.5       # Seconds between failed attempts
    request_timeout: float = 30.0       # Per-attempt transport timeout
    chat_deadline: float = 90.0         # No new attempt starts after this many seconds

    # Credentials / passthrough values
    openai_api_key: Optional[str] = None
    analytics_id: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    conversation_log_dir: Optional[str] = None

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "NamerConfig":
        """Load configuration from YAML file, then apply environment overrides."""
        path = config_path or Path(os.getenv("NAMER_CONFIG", DEFAULT_CONFIG_PATH))
        data = {}
        if path.exists():
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

        models_config = data.get('models', {})
        chat_config = data.get('chat', {})
        logging_config = data.get('logging', {})

        config = cls(
            chat_model=models_config.get('chat', 'gpt-4o-mini'),
            generate_model=models_config.get('generate', 'gpt-3.5-turbo'),
            chat_temperature=models_config.get('chat_temperature', 0.7),
            generate_temperature=models_config.get('generate_temperature', 0.8),
            chat_max_tokens=models_config.get('chat_max_tokens', 800),
            generate_max_tokens=models_config.get('generate_max_tokens', 1500),
            chat_max_attempts=chat_config.get('max_attempts', 3),
            chat_retry_delay=chat_config.get('retry_delay', 0.5),
            request_timeout=chat_config.get('request_timeout', 30.0),
            chat_deadline=chat_config.get('deadline', 90.0),
            log_level=logging_config.get('level', 'INFO'),
            conversation_log_dir=logging_config.get('conversation_log_dir'),
        )
        return config.apply_env()

    def apply_env(self) -> "NamerConfig":
        """Override fields from environment variables, in place."""
        # OPENAI_MODEL overrides both call sites; the specific variables win over it
        shared_model = os.getenv("OPENAI_MODEL")
        self.chat_model = os.getenv("NAMER_CHAT_MODEL") or shared_model or self.chat_model
        self.generate_model = os.getenv("NAMER_GENERATE_MODEL") or shared_model or self.generate_model

        self.openai_api_key = os.getenv("OPENAI_API_KEY", self.openai_api_key)
        self.analytics_id = os.getenv("GA_MEASUREMENT_ID", self.analytics_id)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()
        self.conversation_log_dir = os.getenv("CONVERSATION_LOG_DIR", self.conversation_log_dir)
        return self


# Global config instance
_config: Optional[NamerConfig] = None


def get_config() -> NamerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = NamerConfig.from_yaml()
    return _config


def set_config(config: NamerConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
