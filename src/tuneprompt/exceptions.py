"""异常体系 / Exception hierarchy

ProviderError 在回退链内部被恢复；ScoringError 转为用例的 error 状态；
MalformedCandidateError 触发启发式改写；ConfigurationError 只终止当前操作。
ProviderError is recovered inside the fallback chain; ScoringError becomes an
``error`` outcome; MalformedCandidateError triggers the heuristic rewrite;
ConfigurationError only aborts the current operation.
"""

from typing import Any, Optional


class TunePromptError(Exception):
    """所有 tuneprompt 异常的基类 / Base class for all tuneprompt errors"""

    code = "TUNEPROMPT_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(message)


# ─── Provider ────────────────────────────────────────────

class ProviderError(TunePromptError):
    """单个提供商调用失败（鉴权、限流、网络、响应格式）"""

    code = "PROVIDER_ERROR"

    def __init__(self, provider: str, message: str, details: Optional[dict[str, Any]] = None):
        self.provider = provider
        super().__init__(message, details=details)

    def __str__(self) -> str:
        return f"{self.provider}: {self.message}"


class ProviderTimeoutError(ProviderError):
    """提供商调用超时 / Provider call exceeded its timeout"""

    code = "PROVIDER_TIMEOUT"


class UnsupportedCapability(ProviderError):
    """提供商不支持该能力（如 embeddings）/ Provider lacks the requested capability"""

    code = "UNSUPPORTED_CAPABILITY"

    def __init__(self, provider: str, capability: str):
        self.capability = capability
        super().__init__(provider, f"{capability} is not supported by this provider")


# ─── Scoring ─────────────────────────────────────────────

class ScoringError(TunePromptError):
    """评分方法无法产生分数 / A scoring method could not produce a number"""

    code = "SCORING_ERROR"


class EmbeddingUnavailable(ScoringError):
    """没有可用的 embedding 提供商 / No provider could produce embeddings"""

    code = "EMBEDDING_UNAVAILABLE"


class DimensionMismatch(ScoringError):
    """向量维度不一致 / Embedding vectors differ in length"""

    code = "DIMENSION_MISMATCH"

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Vectors must have same length ({left} != {right})")


class UnknownScoringMethod(ScoringError):
    code = "UNKNOWN_SCORING_METHOD"


# ─── Optimizer ───────────────────────────────────────────

class MalformedCandidateError(TunePromptError):
    """改写响应无法解析为两个候选 / Rewrite response did not parse into two candidates"""

    code = "MALFORMED_CANDIDATE"

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)


# ─── Configuration ───────────────────────────────────────

class ConfigurationError(TunePromptError):
    """配置缺失或所需能力在所有提供商上都不可用"""

    code = "CONFIGURATION_ERROR"
