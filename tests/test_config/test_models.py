from pathlib import Path

import pytest

from setupwiz.config.models import EngineSettings


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for name in ("SETUPWIZ_RUNTIME_OS", "SETUPWIZ_TEXT_FORMAT", "SETUPWIZ_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_validate() -> None:
    EngineSettings().validate()


def test_normalizes_values() -> None:
    settings = EngineSettings(text_format=" JSON ", log_level="info", log_file="~/wizard.log")
    assert settings.text_format == "json"
    assert settings.log_level == "INFO"
    assert isinstance(settings.log_file, Path)
    assert "~" not in str(settings.log_file)


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"text_format": "toml"}, "text_format"),
        ({"log_level": "chatty"}, "log_level"),
        ({"default_tier": "turbo"}, "default_tier"),
        ({"default_load_profile": "medium"}, "default_load_profile"),
    ],
)
def test_validate_rejects_unknown_values(kwargs, field) -> None:
    with pytest.raises(ValueError, match=field):
        EngineSettings(**kwargs).validate()


def test_env_overrides_constructor(monkeypatch) -> None:
    monkeypatch.setenv("SETUPWIZ_LOG_LEVEL", "debug")
    assert EngineSettings(log_level="ERROR").log_level == "DEBUG"
