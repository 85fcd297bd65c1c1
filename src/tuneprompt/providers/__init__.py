"""提供商模块 / Provider modules"""

from typing import Type

from tuneprompt.models.config import Config
from tuneprompt.providers.base import BaseProvider, ProviderResponse
from tuneprompt.providers.openai_compat import OpenAICompatibleProvider
from tuneprompt.providers.openai_provider import OpenAIProvider
from tuneprompt.providers.anthropic_provider import AnthropicProvider
from tuneprompt.providers.openrouter_provider import OpenRouterProvider

PROVIDER_CLASSES: dict[str, Type[BaseProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "openrouter": OpenRouterProvider,
}


def create_providers(config: Config) -> dict[str, BaseProvider]:
    """按配置创建提供商映射 / Build the name-keyed provider mapping from config"""
    return {
        name: PROVIDER_CLASSES[name](provider_config)
        for name, provider_config in config.providers.configured().items()
    }


__all__ = [
    "BaseProvider", "ProviderResponse", "OpenAICompatibleProvider",
    "OpenAIProvider", "AnthropicProvider", "OpenRouterProvider",
    "PROVIDER_CLASSES", "create_providers",
]
