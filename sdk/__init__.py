"""Configuration plus the GameSession composition root (``sdk.runtime``)."""

from .config import AppConfig, GameSettings, SessionConfig, get_config, load_config

__all__ = ["AppConfig", "GameSettings", "SessionConfig", "get_config", "load_config"]
