"""Anthropic 提供商

通过 Anthropic 的 OpenAI 兼容端点调用 Claude；Anthropic 不提供 embeddings。
"""

from typing import Any, Optional

from tuneprompt.providers.openai_compat import OpenAICompatibleProvider

# Claude Sonnet 示例价格（每 1M token）
INPUT_COST_PER_1M = 3.00
OUTPUT_COST_PER_1M = 15.00


class AnthropicProvider(OpenAICompatibleProvider):
    name = "anthropic"
    env_key = "ANTHROPIC_API_KEY"
    supports_embeddings = False
    default_base_url = "https://api.anthropic.com/v1/"
    default_max_tokens = 1000

    def estimate_cost(self, usage: Any) -> Optional[float]:
        if usage is None:
            return None
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        return (
            (input_tokens / 1_000_000) * INPUT_COST_PER_1M
            + (output_tokens / 1_000_000) * OUTPUT_COST_PER_1M
        )
