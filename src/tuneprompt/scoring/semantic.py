"""语义相似度评分"""

import asyncio
import math
from typing import Sequence

from tuneprompt.exceptions import DimensionMismatch
from tuneprompt.providers.base import BaseProvider


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    余弦相似度 dot(a,b) / (|a|·|b|)，结果限制在 [0, 1]

    Raises:
        DimensionMismatch: 向量长度不一致（不会截断）
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    # 含 NaN / inf 的向量无法比较，视为不相似
    if not all(math.isfinite(x) for x in a) or not all(math.isfinite(y) for y in b):
        return 0.0

    dot = math.fsum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(math.fsum(x * x for x in a))
    norm_b = math.sqrt(math.fsum(y * y for y in b))

    # 零向量没有方向，视为不相似
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = dot / (norm_a * norm_b)
    if not math.isfinite(similarity):
        return 0.0
    return max(0.0, min(1.0, similarity))


async def semantic_similarity(expected: str, actual: str, provider: BaseProvider) -> float:
    """用同一个提供商计算两段文本的向量并求余弦相似度

    两次 embedding 必须来自同一个提供商，否则向量空间不可比。
    任一调用失败时取消另一个，避免无人等待的计费调用。
    """
    tasks = [
        asyncio.ensure_future(provider.get_embedding(expected)),
        asyncio.ensure_future(provider.get_embedding(actual)),
    ]
    try:
        expected_embedding, actual_embedding = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
    return cosine_similarity(expected_embedding, actual_embedding)
