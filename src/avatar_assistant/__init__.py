"""Avatar assistant orchestration core."""

from .config import AssistantSettings, GenerationConfig, RetrievalConfig

__all__ = ["AssistantSettings", "GenerationConfig", "RetrievalConfig"]
