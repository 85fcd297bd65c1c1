"""OpenAI 兼容接口的提供商实现 / Providers speaking the OpenAI chat API"""

import os
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from tuneprompt.exceptions import ProviderError, ProviderTimeoutError
from tuneprompt.models.config import ProviderConfig
from tuneprompt.models.test_case import ChatPrompt, Prompt
from tuneprompt.providers.base import BaseProvider, ProviderResponse


def build_messages(prompt: Prompt) -> list[dict[str, str]]:
    """构造消息列表 / Build the chat message list"""
    if isinstance(prompt, ChatPrompt):
        messages = []
        if prompt.system:
            messages.append({"role": "system", "content": prompt.system})
        messages.append({"role": "user", "content": prompt.user})
        return messages
    return [{"role": "user", "content": prompt}]


class OpenAICompatibleProvider(BaseProvider):
    """基于 AsyncOpenAI 客户端的提供商"""

    default_base_url: Optional[str] = None
    default_headers: Optional[dict[str, str]] = None
    default_max_tokens: Optional[int] = None
    # 是否支持 response_format=json_object
    supports_json_output: bool = False

    def __init__(self, config: ProviderConfig, client: Optional[AsyncOpenAI] = None):
        super().__init__(config)
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        """延迟初始化客户端 / Lazy-initialize the client"""
        if self._client is None:
            api_key = self.config.api_key or (os.environ.get(self.env_key) if self.env_key else None)
            if not api_key:
                raise ProviderError(self.name, "API key missing")

            # 超时由 BaseProvider 统一控制，这里不再重试
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.config.base_url or self.default_base_url,
                timeout=self.config.timeout,
                max_retries=0,
                default_headers=self.default_headers,
            )

        return self._client

    async def _complete(
        self,
        prompt: Prompt,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> ProviderResponse:
        client = self._get_client()

        kwargs: dict[str, Any] = {
            "model": model or self.config.model,
            "messages": build_messages(prompt),
        }
        max_tokens = max_tokens or self.config.max_tokens or self.default_max_tokens
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if self.config.temperature is not None:
            kwargs["temperature"] = self.config.temperature
        if json_output and self.supports_json_output:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e

        if not response.choices:
            raise ProviderError(self.name, "Malformed response: no choices returned")

        usage = response.usage
        return ProviderResponse(
            content=response.choices[0].message.content or "",
            tokens=usage.total_tokens if usage else None,
            cost=self.estimate_cost(usage),
        )

    async def _embed(self, text: str) -> list[float]:
        client = self._get_client()
        try:
            response = await client.embeddings.create(model=self.config.embedding_model, input=text)
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e

        if not response.data:
            raise ProviderError(self.name, "Malformed response: no embedding returned")
        return list(response.data[0].embedding)

    def estimate_cost(self, usage: Any) -> Optional[float]:
        """按 token 估算费用，子类覆盖 / Approximate cost; variants override"""
        return None

    def _translate_error(self, error: openai.OpenAIError) -> ProviderError:
        """将 SDK 异常转为可读的 ProviderError"""
        if isinstance(error, openai.APITimeoutError):
            return ProviderTimeoutError(self.name, "Request timed out")
        if isinstance(error, openai.AuthenticationError):
            return ProviderError(self.name, "Authentication failed, check the API key")
        if isinstance(error, openai.RateLimitError):
            return ProviderError(self.name, "Rate limit exceeded")
        if isinstance(error, openai.APIConnectionError):
            return ProviderError(self.name, f"Network error: {error}")
        if isinstance(error, openai.APIStatusError):
            return ProviderError(
                self.name, f"HTTP {error.status_code}: {error.message}",
                details={"status_code": error.status_code},
            )
        return ProviderError(self.name, str(error))
