
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
import os


def _env(name: str, default: Any) -> Any:
    # raw strings are coerced and range-checked by pydantic (validate_default)
    return os.getenv(name, default)


class GameSettings(BaseModel):
    model_config = ConfigDict(validate_default=True)
    rows: int = Field(default_factory=lambda: _env("BLOCKFALL_ROWS", 20), ge=1)
    cols: int = Field(default_factory=lambda: _env("BLOCKFALL_COLS", 10), ge=1)
    # milliseconds per gravity step
    speed: int = Field(default_factory=lambda: _env("BLOCKFALL_SPEED", 1000), ge=1)
    ghost_piece: bool = Field(default_factory=lambda: _env("BLOCKFALL_GHOST_PIECE", True))
    show_next: bool = Field(default_factory=lambda: _env("BLOCKFALL_SHOW_NEXT", True))

class SessionConfig(BaseModel):
    model_config = ConfigDict(validate_default=True)
    # clock resolution is whole seconds, so ticking slower than 1 Hz drops seconds
    tick_interval_s: float = Field(default_factory=lambda: _env("BLOCKFALL_TICK_INTERVAL", 1.0), gt=0, le=1.0)
    strict_lifecycle: bool = Field(default_factory=lambda: _env("BLOCKFALL_STRICT_LIFECYCLE", False))

class AppConfig(BaseModel):
    model_config = ConfigDict(validate_default=True)
    game: GameSettings = Field(default_factory=GameSettings)
    session: SessionConfig = Field(default_factory=SessionConfig)
    log_level: str = Field(default_factory=lambda: str(_env("BLOCKFALL_LOG_LEVEL", "INFO")).upper())


def load_config() -> AppConfig:
    """Build an AppConfig from BLOCKFALL_* environment variables."""
    return AppConfig()


_config_singleton: Optional[AppConfig] = None

def get_config(force_refresh: bool = False) -> AppConfig:
    global _config_singleton
    if force_refresh or _config_singleton is None:
        _config_singleton = load_config()
    return _config_singleton
