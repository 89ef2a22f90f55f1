"""Configuration loading and management."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from scriptran.core.exceptions import ConfigurationError


SUPPORTED_LANGUAGES = [
    "English", "Spanish", "French", "German", "Italian",
    "Portuguese", "Dutch", "Russian", "Chinese", "Japanese",
    "Korean", "Arabic", "Hindi", "Turkish", "Polish",
    "Swedish", "Norwegian", "Danish", "Finnish", "Greek",
]


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file (defaults to configs/default.yaml)

    Returns:
        Configuration dictionary, merged over the defaults
    """
    if config_path is None:
        # Try to find default config
        possible_paths = [
            Path("configs/default.yaml"),
            Path(__file__).parent.parent.parent / "configs" / "default.yaml"
        ]

        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break
        else:
            return override_with_env(get_default_config())

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    config = merge_config(get_default_config(), loaded)

    # Override with environment variables
    return override_with_env(config)


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Output path
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def override_with_env(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override config with environment variables."""
    env_mappings = {
        "OPENAI_API_KEY": ["providers", "openai", "api_key"],
        "ANTHROPIC_API_KEY": ["providers", "anthropic", "api_key"],
        "OPENAI_BASE_URL": ["providers", "openai", "base_url"],
        "ANTHROPIC_BASE_URL": ["providers", "anthropic", "base_url"],
    }

    for env_var, path in env_mappings.items():
        value = os.getenv(env_var)
        if value:
            current = config
            for key in path[:-1]:
                if key not in current:
                    current[key] = {}
                current = current[key]
            current[path[-1]] = value

    # A proxy token stands in for any provider key that is still missing
    proxy_token = os.getenv("PROXY_TOKEN")
    if proxy_token:
        for settings in config.setdefault("providers", {}).values():
            if not settings.get("api_key"):
                settings["api_key"] = proxy_token

    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "defaults": {
            "source_lang": "English",
            "target_lang": "Spanish",
            "provider": "openai"
        },
        "providers": {
            "openai": {
                "display_name": "OpenAI GPT-3.5",
                "default_model": "gpt-3.5-turbo",
                "api_key": "",
                "base_url": "",
                "max_retries": 2
            },
            "anthropic": {
                "display_name": "Anthropic Claude",
                "default_model": "claude-3-haiku-20240307",
                "api_key": "",
                "base_url": "",
                "max_retries": 2
            }
        },
        "pipeline": {
            "detection_temperature": 0.2,
            "detection_max_tokens": 900,
            "followup_temperature": 0.3,
            "followup_max_tokens": 1000,
            "verify_translation": True,
            "retry_no_op": True,
            "max_concurrency": 1,
            "timeout": 60.0
        },
        "languages": list(SUPPORTED_LANGUAGES)
    }
