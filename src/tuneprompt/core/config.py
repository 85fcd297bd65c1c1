"""配置加载 / Configuration loader"""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from tuneprompt.exceptions import ConfigurationError
from tuneprompt.models.config import Config

DEFAULT_CONFIG_NAMES = ["tuneprompt.yaml", "tuneprompt.yml", ".tuneprompt.yaml"]


def _resolve_env_vars(value: str) -> str:
    """解析环境变量 ${VAR} 格式 / Resolve ${VAR} environment variables"""
    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


def _resolve_config_env_vars(config_dict: dict) -> dict:
    """递归解析配置中的环境变量 / Recursively resolve env vars in config"""
    result = {}
    for key, value in config_dict.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_config_env_vars(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_config_env_vars(item) if isinstance(item, dict)
                else _resolve_env_vars(item) if isinstance(item, str)
                else item
                for item in value
            ]
        else:
            result[key] = value
    return result


def validate_config(config: Config) -> Config:
    """至少配置一个提供商，且每个提供商都有 API Key / At least one provider, each with a key"""
    configured = config.providers.configured()
    if not configured:
        raise ConfigurationError("At least one provider must be configured")

    for name, provider_config in configured.items():
        api_key = provider_config.api_key
        # 未解析的 ${VAR} 视为缺失
        if not api_key or re.fullmatch(r'\$\{[^}]+\}', api_key):
            raise ConfigurationError(
                f"API key missing for provider: {name}",
                details={"provider": name},
            )
    return config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件 / Load configuration file

    Args:
        config_path: 配置文件路径，默认查找 tuneprompt.yaml / Config file path, defaults to tuneprompt.yaml

    Returns:
        Config 对象 / Config object

    Raises:
        FileNotFoundError: 找不到配置文件
        ConfigurationError: 配置内容无效
    """
    if config_path is None:
        # 查找默认配置文件 / Look for default config file
        for name in DEFAULT_CONFIG_NAMES:
            if Path(name).exists():
                config_path = name
                break
        else:
            raise FileNotFoundError(
                "No tuneprompt config found. Create tuneprompt.yaml first."
            )

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

    # 解析环境变量 / Resolve environment variables
    config_dict = _resolve_config_env_vars(config_dict)

    try:
        config = Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    return validate_config(config)
