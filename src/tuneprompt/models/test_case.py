"""测试用例模型"""

import json
from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class ScoringMethod(str, Enum):
    """评分方法"""
    EXACT = "exact"
    JSON = "json"
    SEMANTIC = "semantic"


class ChatPrompt(BaseModel):
    """system + user 形式的提示词"""
    model_config = ConfigDict(frozen=True)

    system: Optional[str] = Field(default=None, description="系统提示词")
    user: str = Field(..., description="用户消息")


Prompt = Union[str, ChatPrompt]


class TestCaseConfig(BaseModel):
    """单个用例的评测配置"""
    __test__ = False
    model_config = ConfigDict(frozen=True)

    threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="通过阈值，缺省用全局阈值")
    method: ScoringMethod = Field(default=ScoringMethod.SEMANTIC, description="评分方法")
    model: Optional[str] = Field(default=None, description="目标模型")
    provider: Optional[str] = Field(default=None, description="固定提供商，设置后不回退")


class TestCase(BaseModel):
    """单个测试用例

    由外部加载器创建，加载后不可变。
    expect 为字符串，或 json 评分时的结构化模板。
    """
    __test__ = False
    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="用例描述")
    prompt: Prompt = Field(..., description="提示词")
    variables: Optional[dict[str, Any]] = Field(default=None, description="插值变量")
    expect: Any = Field(..., description="期望输出")
    config: TestCaseConfig = Field(default_factory=TestCaseConfig)

    @property
    def expected_text(self) -> str:
        """期望输出的字符串形式 / Expectation rendered as text"""
        return expected_to_text(self.expect)

    def with_prompt(self, prompt: Prompt) -> "TestCase":
        """返回替换提示词后的新用例 / Copy with a different prompt"""
        return self.model_copy(update={"prompt": prompt})


def expected_to_text(expect: Any) -> str:
    if isinstance(expect, str):
        return expect
    return json.dumps(expect, ensure_ascii=False)
