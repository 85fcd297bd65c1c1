"""数据模型 / Data models"""

from tuneprompt.models.config import (
    Config, ProviderConfig, ProvidersConfig, OptimizerConfig, PROVIDER_NAMES,
)
from tuneprompt.models.test_case import (
    TestCase, TestCaseConfig, ChatPrompt, Prompt, ScoringMethod,
)
from tuneprompt.models.test_result import (
    TestResult, TestRun, TestStatus, ResultMetadata,
)
from tuneprompt.models.fix import (
    ErrorType, FailedTest, FixCandidate, ShadowTestResult, OptimizationResult,
)

__all__ = [
    # 配置 / Configuration
    "Config", "ProviderConfig", "ProvidersConfig", "OptimizerConfig", "PROVIDER_NAMES",
    # 测试用例 / Test cases
    "TestCase", "TestCaseConfig", "ChatPrompt", "Prompt", "ScoringMethod",
    # 评测结果 / Results
    "TestResult", "TestRun", "TestStatus", "ResultMetadata",
    # 优化 / Optimization
    "ErrorType", "FailedTest", "FixCandidate", "ShadowTestResult", "OptimizationResult",
]
