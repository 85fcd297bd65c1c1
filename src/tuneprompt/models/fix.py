"""修复（优化）相关模型 / Fix loop models"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from tuneprompt.models.test_case import (
    ChatPrompt, Prompt, ScoringMethod, TestCase, TestCaseConfig,
)
from tuneprompt.models.test_result import TestResult


class ErrorType(str, Enum):
    """失败分类，决定修复策略"""
    SEMANTIC = "semantic"
    JSON = "json"
    EXACT = "exact"
    LENGTH = "length"


_METHOD_TO_ERROR_TYPE = {
    ScoringMethod.SEMANTIC: ErrorType.SEMANTIC,
    ScoringMethod.JSON: ErrorType.JSON,
    ScoringMethod.EXACT: ErrorType.EXACT,
}


class FailedTest(BaseModel):
    """优化器视角下的失败用例

    由 TestResult 派生，额外携带生效阈值和 error_type。
    保留原始 expect 与 config，影子测试据此重建同一评分路径。
    """
    id: str
    description: str
    prompt: Prompt
    input: Optional[dict[str, Any]] = Field(default=None, description="用例插值变量")
    expect: Any = Field(default=None, description="原始期望（字符串或 JSON 模板）")
    expected_output: str
    actual_output: str = ""
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    threshold: float = Field(..., ge=0.0, le=1.0)
    error_type: ErrorType
    error_message: str = ""
    config: TestCaseConfig = Field(default_factory=TestCaseConfig)

    @classmethod
    def from_result(
        cls,
        result: TestResult,
        default_threshold: float = 0.8,
        error_type: Optional[ErrorType] = None,
    ) -> "FailedTest":
        case = result.test_case
        if result.threshold is not None:
            threshold = result.threshold
        elif case.config.threshold is not None:
            threshold = case.config.threshold
        else:
            threshold = default_threshold

        return cls(
            id=result.id,
            description=case.description,
            prompt=case.prompt,
            input=case.variables,
            expect=case.expect,
            expected_output=result.expected_output or case.expected_text,
            actual_output=result.actual_output,
            score=result.score,
            threshold=threshold,
            error_type=error_type or _METHOD_TO_ERROR_TYPE[case.config.method],
            error_message=result.error or f"Score {result.score:.2f} < threshold {threshold}",
            config=case.config,
        )

    @property
    def system_prompt(self) -> Optional[str]:
        return self.prompt.system if isinstance(self.prompt, ChatPrompt) else None

    @property
    def user_prompt(self) -> str:
        """需要被改写的提示词文本 / The text the optimizer rewrites"""
        return self.prompt.user if isinstance(self.prompt, ChatPrompt) else self.prompt

    def rewrite(self, candidate: str) -> Prompt:
        """用候选文本替换 user 部分，保留 system / Replace the user part, keep system"""
        if isinstance(self.prompt, ChatPrompt):
            return ChatPrompt(system=self.prompt.system, user=candidate)
        return candidate

    def to_test_case(self, candidate: Optional[str] = None) -> TestCase:
        """重建原始用例（可替换提示词），阈值固定为本次失败时的阈值"""
        expect = self.expect if self.expect is not None else self.expected_output
        return TestCase(
            description=self.description,
            prompt=self.rewrite(candidate) if candidate is not None else self.prompt,
            variables=self.input,
            expect=expect,
            config=self.config.model_copy(update={"threshold": self.threshold}),
        )


class FixCandidate(BaseModel):
    """候选改写"""
    prompt: str
    reasoning: str = ""
    score: Optional[float] = Field(default=None, description="影子测试分数，测试前未知")
    source: str = Field(default="heuristic", description="生成该候选的提供商，或 heuristic")
    output: str = ""
    error: Optional[str] = None


class ShadowTestResult(BaseModel):
    """影子测试结果"""
    score: float = 0.0
    passed: bool = False
    output: str = ""
    provider: Optional[str] = None
    error: Optional[str] = None


class OptimizationResult(BaseModel):
    """优化结果

    confidence 等于胜出候选的影子测试分数；passed 可能为 False，
    胜出者只是候选中最好的一个。
    """
    test_id: str
    original_prompt: str
    optimized_prompt: str
    optimized_prompt_messages: Optional[ChatPrompt] = Field(
        default=None, description="原始提示词为 system+user 时，改写后的完整提示词",
    )
    reasoning: str = ""
    confidence: float = 0.0
    test_results: ShadowTestResult = Field(default_factory=ShadowTestResult)
    candidates: list[FixCandidate] = Field(default_factory=list)

    # 错误信息
    error: Optional[str] = None
