"""影子测试 / Shadow testing

候选提示词走与原失败用例完全相同的执行与评分路径（TestRunner.execute_single），
包括变量插值、固定提供商、评分方法和阈值。
"""

from tuneprompt.core.runner import TestRunner
from tuneprompt.models import FailedTest, ShadowTestResult, TestStatus


class ShadowTester:
    """用原用例的配置验证候选提示词"""

    def __init__(self, runner: TestRunner):
        self.runner = runner

    async def run(self, candidate_prompt: str, failed_test: FailedTest) -> ShadowTestResult:
        test_case = failed_test.to_test_case(candidate_prompt)
        result = await self.runner.execute_single(test_case)

        return ShadowTestResult(
            score=result.score,
            passed=result.status == TestStatus.PASS,
            output=result.actual_output,
            provider=result.metadata.provider,
            error=result.error if result.status == TestStatus.ERROR else None,
        )
