"""配置模型"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


PROVIDER_NAMES = ("openai", "anthropic", "openrouter")


class ProviderConfig(BaseModel):
    """单个提供商配置"""
    api_key: Optional[str] = Field(default=None, description="API Key，支持 ${ENV_VAR} 格式")
    model: str = Field(..., description="模型名称")
    base_url: Optional[str] = Field(default=None, description="API Base URL")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="最大输出 token 数")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0, description="温度")
    timeout: float = Field(default=30.0, ge=1.0, le=120.0, description="单次调用超时（秒）")
    embedding_model: str = Field(default="text-embedding-3-small", description="Embedding 模型")


class ProvidersConfig(BaseModel):
    """已配置的提供商"""
    openai: Optional[ProviderConfig] = None
    anthropic: Optional[ProviderConfig] = None
    openrouter: Optional[ProviderConfig] = None

    def configured(self) -> dict[str, ProviderConfig]:
        """按名称返回已配置的提供商 / Configured providers keyed by name"""
        return {
            name: cfg for name in PROVIDER_NAMES
            if (cfg := getattr(self, name)) is not None
        }


class OptimizerConfig(BaseModel):
    """优化器配置"""
    generation_order: list[str] = Field(
        default_factory=lambda: ["anthropic", "openai", "openrouter"],
        description="生成候选改写时的提供商顺序",
    )
    generation_max_tokens: int = Field(default=4000, ge=1, description="生成候选改写时的输出 token 上限")
    concurrent_shadow_tests: bool = Field(default=True, description="候选影子测试是否并发执行")


class Config(BaseModel):
    """tuneprompt 完整配置"""
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    threshold: float = Field(default=0.8, ge=0.0, le=1.0, description="默认通过阈值")
    default_provider: str = Field(default="openai", description="未指定时首选的提供商")
    fallback_order: list[str] = Field(
        default_factory=lambda: ["openai", "anthropic", "openrouter"],
        description="补全调用的回退顺序",
    )
    embedding_order: list[str] = Field(
        default_factory=lambda: ["openai", "openrouter"],
        description="语义评分时 embedding 提供商的优先顺序",
    )
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)

    @field_validator("fallback_order", "embedding_order")
    @classmethod
    def check_provider_names(cls, value: list[str]) -> list[str]:
        unknown = [name for name in value if name not in PROVIDER_NAMES]
        if unknown:
            raise ValueError(f"未知的提供商 / Unknown providers: {unknown}")
        return value
