"""提供商能力接口 / Provider capability interface"""

import asyncio
import math
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from tuneprompt.exceptions import (
    ProviderError, ProviderTimeoutError, TunePromptError, UnsupportedCapability,
)
from tuneprompt.models.config import ProviderConfig
from tuneprompt.models.test_case import Prompt


class ProviderResponse(BaseModel):
    """一次补全调用的归一化结果"""
    content: str
    tokens: Optional[int] = None
    cost: Optional[float] = None


class BaseProvider(ABC):
    """提供商基类

    对外只暴露 complete / get_embedding 两个能力。每次调用都有超时上限，
    超时与其他失败一样抛出 ProviderError，由调用方推进回退链。
    """

    name: str = ""
    supports_embeddings: bool = False
    # 未在配置中给出 api_key 时读取的环境变量
    env_key: Optional[str] = None

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def timeout(self) -> float:
        return self.config.timeout

    async def complete(
        self,
        prompt: Prompt,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> ProviderResponse:
        """
        执行一次补全 / Run one completion

        Args:
            prompt: 纯文本，或 system + user
            model: 覆盖配置中的模型（可选）
            max_tokens: 覆盖配置中的输出上限（可选）
            json_output: 请求 JSON 输出，提供商支持时生效

        Returns:
            ProviderResponse

        Raises:
            ProviderError: 任何失败（鉴权、限流、网络、超时、响应格式）
        """
        try:
            return await asyncio.wait_for(
                self._complete(prompt, model, max_tokens=max_tokens, json_output=json_output),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(self.name, f"completion timed out after {self.timeout:g}s") from e
        except TunePromptError:
            raise
        except Exception as e:
            raise ProviderError(self.name, str(e) or type(e).__name__) from e

    async def get_embedding(self, text: str) -> list[float]:
        """
        计算文本向量 / Embed text

        Raises:
            UnsupportedCapability: 提供商不支持 embeddings（可恢复）
            ProviderError: 调用失败
        """
        if not self.supports_embeddings:
            raise UnsupportedCapability(self.name, "embeddings")
        try:
            embedding = await asyncio.wait_for(self._embed(text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(self.name, f"embedding timed out after {self.timeout:g}s") from e
        except TunePromptError:
            raise
        except Exception as e:
            raise ProviderError(self.name, str(e) or type(e).__name__) from e

        # NaN / inf 会让余弦相似度失真
        if not all(math.isfinite(x) for x in embedding):
            raise ProviderError(self.name, "Malformed response: non-finite embedding")
        return embedding

    @abstractmethod
    async def _complete(
        self,
        prompt: Prompt,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> ProviderResponse:
        """具体提供商的补全实现"""

    async def _embed(self, text: str) -> list[float]:
        raise UnsupportedCapability(self.name, "embeddings")
