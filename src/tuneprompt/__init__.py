"""tuneprompt - LLM 提示词测试与自动修复引擎
tuneprompt - LLM prompt testing and auto-fix engine"""

__version__ = "0.1.0"

from tuneprompt.core.config import load_config
from tuneprompt.core.runner import TestRunner
from tuneprompt.core.optimizer import PromptOptimizer
from tuneprompt.models import (
    Config, TestCase, TestCaseConfig, ChatPrompt, TestResult, TestRun, TestStatus,
    FailedTest, FixCandidate, OptimizationResult, ErrorType, ScoringMethod,
)

__all__ = [
    "__version__",
    "load_config", "TestRunner", "PromptOptimizer",
    "Config", "TestCase", "TestCaseConfig", "ChatPrompt", "TestResult", "TestRun", "TestStatus",
    "FailedTest", "FixCandidate", "OptimizationResult", "ErrorType", "ScoringMethod",
]
