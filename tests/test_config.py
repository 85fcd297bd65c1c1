import pytest

from tuneprompt.core.config import load_config, validate_config
from tuneprompt.exceptions import ConfigurationError
from tuneprompt.models import Config


def write(tmp_path, text: str) -> str:
    path = tmp_path / "tuneprompt.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_load_config_resolves_environment_variables(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("TP_OPENAI_KEY", "sk-test")
    path = write(tmp_path, """
providers:
  openai:
    api_key: "${TP_OPENAI_KEY}"
    model: gpt-4o
    timeout: 10
threshold: 0.7
fallback_order: [openai]
""")

    config = load_config(path)

    assert config.providers.openai.api_key == "sk-test"
    assert config.providers.openai.timeout == 10
    assert config.threshold == 0.7
    assert list(config.providers.configured()) == ["openai"]


def test_load_config_finds_default_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    write(tmp_path, "providers:\n  anthropic:\n    api_key: key\n    model: claude-sonnet\n")

    config = load_config()

    assert config.providers.anthropic.model == "claude-sonnet"
    assert config.default_provider == "openai"


def test_unresolved_key_is_reported_as_missing(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("TP_MISSING_KEY", raising=False)
    path = write(tmp_path, "providers:\n  openai:\n    api_key: '${TP_MISSING_KEY}'\n    model: gpt-4o\n")

    with pytest.raises(ConfigurationError, match="API key missing for provider: openai"):
        load_config(path)


def test_config_without_providers_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="At least one provider"):
        validate_config(Config())


def test_missing_file_raises(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(FileNotFoundError):
        load_config()
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_yaml_is_rejected(tmp_path) -> None:
    path = write(tmp_path, "- openai\n- anthropic\n")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(path)


def test_invalid_values_become_configuration_errors(tmp_path) -> None:
    path = write(tmp_path, "providers:\n  openai:\n    api_key: k\n    model: gpt-4o\n    timeout: 500\n")

    with pytest.raises(ConfigurationError, match="Invalid config file"):
        load_config(path)
