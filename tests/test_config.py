from __future__ import annotations

import pytest

from realty_briefing.common.config import Settings, load_settings
from realty_briefing.common.schema import GenerationOptions


def test_env_overrides_yaml(tmp_path) -> None:  # noqa: ANN001
    cfg = tmp_path / "service.yaml"
    cfg.write_text(
        "database_url: sqlite+aiosqlite:///from-yaml.db\n"
        "port: 9000\n"
        "gemini:\n"
        "  model: gemini-from-yaml\n"
        "  max_attempts: 5\n",
        encoding="utf-8",
    )
    env = {"Gemini_API_Key": "legacy-key", "GEMINI_MODEL": "gemini-from-env"}

    settings = load_settings(str(cfg), env=env)

    assert settings.database_url == "sqlite+aiosqlite:///from-yaml.db"
    assert settings.port == 9000
    assert settings.gemini.api_key == "legacy-key"
    assert settings.gemini.model == "gemini-from-env"
    assert settings.gemini.max_attempts == 5
    assert settings.gemini.primary_url.endswith("/models/gemini-from-env:generateContent")
    assert settings.gemini.fallback_url.endswith("/openai/chat/completions")


def test_missing_yaml_uses_defaults() -> None:
    settings = load_settings("does/not/exist.yaml", env={})
    assert settings == Settings()
    assert settings.gemini.api_key is None
    assert settings.gemini.timeout_s == 90.0


@pytest.mark.parametrize(
    "kwargs",
    [{"temperature": 2.5}, {"top_p": 1.5}, {"max_output_tokens": 0}, {"top_k": 0}],
)
def test_generation_options_reject_out_of_range(kwargs) -> None:  # noqa: ANN001
    with pytest.raises(ValueError):
        GenerationOptions(**kwargs)


def test_unknown_yaml_keys_are_ignored_with_warning(tmp_path, caplog) -> None:  # noqa: ANN001
    cfg = tmp_path / "service.yaml"
    cfg.write_text(
        "port: 9100\n"
        "workers: 4\n"
        "gemini:\n"
        "  model: gemini-from-yaml\n"
        "  base_url_typo: https://example.invalid\n",
        encoding="utf-8",
    )

    with caplog.at_level("WARNING", logger="realty_briefing.common.config"):
        settings = load_settings(str(cfg), env={})

    assert settings.port == 9100
    assert settings.gemini.model == "gemini-from-yaml"
    assert settings.gemini.base_url == Settings().gemini.base_url
    assert "base_url_typo" in caplog.text
    assert "workers" in caplog.text
