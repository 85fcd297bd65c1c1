from __future__ import annotations

import asyncio
import math
from typing import Callable, Optional, Union

from tuneprompt.exceptions import ProviderError
from tuneprompt.models import ChatPrompt, Prompt, ProviderConfig
from tuneprompt.providers import BaseProvider, ProviderResponse

Responder = Union[str, Callable[[Prompt], str]]
Embedder = Union[dict, Callable[[str], list]]


class StubProvider(BaseProvider):
    """Scripted in-memory provider."""

    def __init__(
        self,
        name: str,
        responder: Responder = "",
        embeddings: Optional[Embedder] = None,
        supports_embeddings: bool = False,
        error: Optional[Exception] = None,
        embed_error: Optional[Exception] = None,
        delay: float = 0.0,
        timeout: float = 5.0,
        tokens: Optional[int] = 12,
        cost: Optional[float] = 0.001,
    ) -> None:
        super().__init__(ProviderConfig.model_construct(model="stub", timeout=timeout))
        self.name = name
        self.supports_embeddings = supports_embeddings
        self.responder = responder
        self.embeddings = embeddings or {}
        self.error = error
        self.embed_error = embed_error
        self.delay = delay
        self.tokens = tokens
        self.cost = cost
        self.calls: list[Prompt] = []
        self.requests: list[dict] = []
        self.embed_calls: list[str] = []

    async def _complete(
        self,
        prompt: Prompt,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> ProviderResponse:
        self.calls.append(prompt)
        self.requests.append({"model": model, "max_tokens": max_tokens, "json_output": json_output})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        content = self.responder(prompt) if callable(self.responder) else self.responder
        return ProviderResponse(content=content, tokens=self.tokens, cost=self.cost)

    async def _embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        if self.embed_error is not None:
            raise self.embed_error
        if callable(self.embeddings):
            return self.embeddings(text)
        return self.embeddings[text]


def failing(name: str, message: str = "boom") -> StubProvider:
    return StubProvider(name, error=ProviderError(name, message))


def unit_vector(cosine: float) -> list[float]:
    """2-d unit vector whose cosine with [1, 0] equals ``cosine``."""
    return [cosine, math.sqrt(1.0 - cosine * cosine)]


def prompt_text(prompt: Prompt) -> str:
    return prompt.user if isinstance(prompt, ChatPrompt) else prompt
