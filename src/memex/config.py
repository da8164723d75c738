"""AI settings file and embedding configuration."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".memex" / "ai-config.json"

EMBEDDING_MODEL = "text-embedding-3-small"
EMBEDDING_DIMENSIONS = 384
BATCH_SIZE = 100
MAX_INPUT_CHARS = 8000

# JSON key -> AIConfig attribute
_CONFIG_KEYS: dict[str, str] = {
    "openaiApiKey": "openai_api_key",
    "whisperApiKey": "whisper_api_key",
    "anthropicApiKey": "anthropic_api_key",
    "privacyLevel": "privacy_level",
}


@dataclass(frozen=True, slots=True)
class AIConfig:
    """Contents of the AI settings file.

    Attributes:
        openai_api_key: Key for the OpenAI APIs (embeddings, chat).
        whisper_api_key: Key for transcription; also accepted for embeddings.
        anthropic_api_key: Key for the chat model.
        privacy_level: ``"strict"`` or ``"balanced"``.
        extra: Unknown keys, preserved on save.
    """

    openai_api_key: str | None = None
    whisper_api_key: str | None = None
    anthropic_api_key: str | None = None
    privacy_level: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AIConfig:
        known = {attr: data[key] for key, attr in _CONFIG_KEYS.items() if key in data}
        extra = {k: v for k, v in data.items() if k not in _CONFIG_KEYS}
        return cls(**known, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        for key, attr in _CONFIG_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    @property
    def embedding_api_key(self) -> str | None:
        """Return the credential used for embeddings, if any."""
        return self.openai_api_key or self.whisper_api_key or None


def load_ai_config(path: str | Path | None = None) -> AIConfig:
    """Read the AI settings file at *path*.

    A missing file yields an empty config.  An unreadable or malformed
    file is logged and also yields an empty config.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        if not config_path.exists():
            return AIConfig()
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Could not read AI config at %s", config_path, exc_info=True)
        return AIConfig()
    if not isinstance(data, dict):
        logger.warning("AI config at %s is not a JSON object", config_path)
        return AIConfig()
    return AIConfig.from_dict(data)


def save_ai_config(updates: dict[str, Any], path: str | Path | None = None) -> AIConfig:
    """Merge *updates* (JSON keys) into the settings file and return the result."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    merged = {**load_ai_config(config_path).to_dict(), **updates}
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(merged, indent=2), encoding="utf-8")
    config_path.chmod(0o600)
    return AIConfig.from_dict(merged)


@dataclass(frozen=True, slots=True)
class EmbeddingSettings:
    """Resolved settings for the embedding provider.

    Attributes:
        api_key: Provider credential, or None when unconfigured.
        model: Embedding model identifier.
        dimensions: Output dimensionality requested from the provider.
        batch_size: Maximum texts per provider call.
        max_input_chars: Per-text truncation limit.
        timeout: Per-request timeout in seconds (enforced by the SDK transport).
        max_retries: SDK-level retries for transient failures.
    """

    api_key: str | None = None
    model: str = EMBEDDING_MODEL
    dimensions: int = EMBEDDING_DIMENSIONS
    batch_size: int = BATCH_SIZE
    max_input_chars: int = MAX_INPUT_CHARS
    timeout: float = 60.0
    max_retries: int = 2

    @classmethod
    def resolve(cls, config_path: str | Path | None = None) -> EmbeddingSettings:
        """Build settings from the AI settings file and the environment.

        Credential order: ``openaiApiKey``, ``whisperApiKey``, then
        ``OPENAI_API_KEY``.
        """
        config = load_ai_config(config_path)
        api_key = config.embedding_api_key or os.environ.get("OPENAI_API_KEY") or None
        model = os.environ.get("MEMEX_EMBEDDING_MODEL") or EMBEDDING_MODEL
        return cls(api_key=api_key, model=model)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
