"""OpenAI 提供商"""

from typing import Any, Optional

from tuneprompt.providers.openai_compat import OpenAICompatibleProvider

# GPT-4o 示例价格（每 1k token）
INPUT_COST_PER_1K = 0.005
OUTPUT_COST_PER_1K = 0.015


class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI：支持补全和 embeddings"""

    name = "openai"
    env_key = "OPENAI_API_KEY"
    supports_embeddings = True
    supports_json_output = True

    def estimate_cost(self, usage: Any) -> Optional[float]:
        tokens = getattr(usage, "total_tokens", None) or 0
        # 简化：按输入输出各占一半估算
        return (tokens / 1000) * (INPUT_COST_PER_1K + OUTPUT_COST_PER_1K) / 2
