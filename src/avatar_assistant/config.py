"""Configuration models for the assistant core."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalConfig(BaseModel):
    """Configures keyword scoring for the knowledge retriever."""

    default_k: int = Field(default=3, ge=1)
    navigation_bonus: int = Field(default=2, ge=0)
    action_bonus: int = Field(default=1, ge=0)


class GenerationConfig(BaseModel):
    """Configures the modern pipeline's chat model call."""

    model: str = "gpt-4o-mini"
    max_tokens: int = Field(default=300, ge=1)
    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    plain_language_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=15.0, gt=0.0)


class LegacyConfig(BaseModel):
    """Configures the legacy assistant's chat model call."""

    model: str = "gpt-4o"
    max_tokens: int = Field(default=200, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=15.0, gt=0.0)


class TelemetryConfig(BaseModel):
    """Configures the in-process diagnostics buffer."""

    capacity: int = Field(default=100, ge=1)


class AssistantSettings(BaseSettings):
    """Environment-level settings.

    Rollout fields are read on every request (`RolloutRouter` builds a fresh
    instance per call), so flipping `ASSISTANT_MODERN_ENABLED` or editing the
    allowlist takes effect without a restart.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSISTANT_", extra="ignore", populate_by_name=True
    )

    modern_enabled: bool = False
    modern_allowlist: str = ""
    log_level: str = "INFO"
    user_context_url: str = "http://localhost:5000/api/avatar/context"
    shopping_list_url: str | None = None
    http_timeout_seconds: float = Field(default=5.0, gt=0.0)

    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")

    @property
    def allowlist(self) -> frozenset[str]:
        return frozenset(
            part.strip() for part in self.modern_allowlist.split(",") if part.strip()
        )
