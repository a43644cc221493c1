"""Service configuration: environment variables layered over an optional YAML file."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

LOGGER = logging.getLogger("realty_briefing.common.config")

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_PERSONA = (
    "You are the AI assistant of a real-estate CRM system. "
    "Respond in Korean with a friendly and professional tone."
)


@dataclass(frozen=True)
class GeminiConfig:
    """Everything the text-generation client needs, fixed at construction."""
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 90.0
    max_attempts: int = 3
    backoff_s: float = 0.5
    persona: str = DEFAULT_PERSONA

    @property
    def primary_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    @property
    def fallback_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/openai/chat/completions"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./realty_briefing.db"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    gemini: GeminiConfig = field(default_factory=GeminiConfig)

    @classmethod
    def from_env(cls, base: Settings | None = None, env: Mapping[str, str] | None = None) -> Settings:
        """Overlay environment variables on ``base`` (defaults when omitted)."""
        env = os.environ if env is None else env
        base = base or cls()
        g = base.gemini
        gemini = replace(
            g,
            api_key=env.get("GEMINI_API_KEY") or env.get("Gemini_API_Key") or g.api_key,
            model=env.get("GEMINI_MODEL", g.model),
            base_url=env.get("GEMINI_BASE_URL", g.base_url),
            timeout_s=float(env.get("GEMINI_TIMEOUT_S", g.timeout_s)),
            max_attempts=int(env.get("GEMINI_MAX_ATTEMPTS", g.max_attempts)),
            backoff_s=float(env.get("GEMINI_BACKOFF_S", g.backoff_s)),
        )
        return replace(
            base,
            database_url=env.get("DATABASE_URL", base.database_url),
            log_level=env.get("LOG_LEVEL", base.log_level),
            host=env.get("HOST", base.host),
            port=int(env.get("PORT", base.port)),
            gemini=gemini,
        )


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _known_fields(cls: type, section: Mapping[str, Any], source: str) -> dict[str, Any]:
    fields = cls.__dataclass_fields__
    unknown = sorted(str(k) for k in section if k not in fields)
    if unknown:
        LOGGER.warning("Ignoring unknown %s keys in %s: %s", cls.__name__, source, ", ".join(unknown))
    return {k: v for k, v in section.items() if k in fields}


def load_settings(cfg_path: str | None = None, env: Mapping[str, str] | None = None) -> Settings:
    """
    Build settings from an optional YAML file, then apply environment overrides.

    Args:
        cfg_path: YAML file with top-level service keys and a ``gemini`` section.
            Missing files are ignored.
        env: Environment mapping; defaults to ``os.environ``.
    """
    base = Settings()
    if cfg_path and Path(cfg_path).exists():
        cfg = load_cfg(cfg_path)
        gemini_cfg = cfg.pop("gemini", None) or {}
        known = _known_fields(Settings, cfg, cfg_path)
        gemini = GeminiConfig(**_known_fields(GeminiConfig, gemini_cfg, cfg_path))
        base = replace(base, gemini=gemini, **known)
    return Settings.from_env(base, env)
