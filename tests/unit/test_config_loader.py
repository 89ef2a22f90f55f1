"""Tests for configuration loading."""

import pytest
import yaml

from scriptran.core.exceptions import ConfigurationError
from scriptran.utils import get_default_config, load_config, save_config
from scriptran.utils.config_loader import SUPPORTED_LANGUAGES, merge_config

ENV_VARS = ["OPENAI_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_BASE_URL", "ANTHROPIC_BASE_URL", "PROXY_TOKEN"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = get_default_config()

    assert config["defaults"]["provider"] == "openai"
    assert config["providers"]["anthropic"]["default_model"] == "claude-3-haiku-20240307"
    assert config["pipeline"]["max_concurrency"] == 1
    assert len(config["languages"]) == 20
    assert config["languages"] == SUPPORTED_LANGUAGES


def test_load_merges_over_defaults(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump({
        "defaults": {"target_lang": "German"},
        "pipeline": {"max_concurrency": 4},
    }))

    config = load_config(str(path))

    assert config["defaults"]["target_lang"] == "German"
    assert config["defaults"]["source_lang"] == "English"
    assert config["pipeline"]["max_concurrency"] == 4
    assert config["pipeline"]["verify_translation"] is True


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_file(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://proxy.example.com/v1")

    config = load_config(str(path))

    assert config["providers"]["openai"]["api_key"] == "sk-openai"
    assert config["providers"]["anthropic"]["base_url"] == "https://proxy.example.com/v1"
    assert config["providers"]["anthropic"]["api_key"] == ""


def test_proxy_token_fills_missing_keys(tmp_path, monkeypatch):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
    monkeypatch.setenv("PROXY_TOKEN", "proxy-token")

    config = load_config(str(path))

    assert config["providers"]["anthropic"]["api_key"] == "sk-ant"
    assert config["providers"]["openai"]["api_key"] == "proxy-token"


def test_merge_is_recursive_and_non_destructive():
    base = {"a": {"x": 1, "y": 2}, "b": 1}

    merged = merge_config(base, {"a": {"y": 3}})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}
    assert base["a"]["y"] == 2


def test_save_and_reload(tmp_path):
    config = get_default_config()
    config["defaults"]["target_lang"] = "한국어"
    path = tmp_path / "nested" / "saved.yaml"

    save_config(config, str(path))

    assert load_config(str(path))["defaults"]["target_lang"] == "한국어"
