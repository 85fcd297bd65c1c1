"""OpenRouter 提供商"""

from typing import Any, Optional

from tuneprompt.providers.openai_compat import OpenAICompatibleProvider


class OpenRouterProvider(OpenAICompatibleProvider):
    """OpenRouter

    embeddings 走 OpenAI 兼容端点，是否可用取决于所选模型；
    不可用时调用失败，由语义评分的回退链处理。
    """

    name = "openrouter"
    env_key = "OPENROUTER_API_KEY"
    supports_embeddings = True
    default_base_url = "https://openrouter.ai/api/v1"
    default_headers = {
        "HTTP-Referer": "https://github.com/tuneprompt/tuneprompt",
        "X-Title": "TunePrompt",
    }

    def estimate_cost(self, usage: Any) -> Optional[float]:
        # 路由模型价格差异很大，本地无法估算
        return 0.0
