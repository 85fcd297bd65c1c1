"""测试执行器 / Test runner

单个用例：按回退链调用提供商 → 评分 → 判定 pass / fail / error。
批量执行严格串行：结果顺序与输入一致，同一时刻只有一条用例在产生计费调用。
"""

import json
import time
import uuid
from typing import Any, Optional

import structlog

from tuneprompt.exceptions import (
    ConfigurationError, DimensionMismatch, EmbeddingUnavailable, ProviderError,
    ScoringError, TunePromptError, UnknownScoringMethod,
)
from tuneprompt.models import (
    Config, ResultMetadata, ScoringMethod, TestCase, TestResult, TestRun, TestStatus,
)
from tuneprompt.providers import BaseProvider, ProviderResponse, create_providers
from tuneprompt.scoring import exact_match, semantic_similarity, validate_json
from tuneprompt.utils.template import render_prompt

logger = structlog.get_logger(__name__)


class ScoreOutcome:
    """评分结果（未判定）/ Score before the threshold comparison"""

    def __init__(self, score: float, error: Optional[str] = None, scoring_provider: Optional[str] = None):
        self.score = score
        self.error = error
        self.scoring_provider = scoring_provider


class TestRunner:
    """测试执行器

    providers 为名称到提供商的映射；不传时按配置创建。
    """
    __test__ = False

    def __init__(self, config: Config, providers: Optional[dict[str, BaseProvider]] = None):
        self.config = config
        self.providers = providers if providers is not None else create_providers(config)

    # ── 回退顺序 ─────────────────────────────────────────

    def provider_order(self, test_case: TestCase) -> list[str]:
        """补全调用的提供商顺序 / Completion fallback order for one test case

        固定了提供商的用例只尝试该提供商；否则为
        [默认提供商, 优先级列表中的其余提供商, 其他已配置提供商]，跳过未配置的。
        """
        pinned = test_case.config.provider
        if pinned:
            return [pinned] if pinned in self.providers else []

        initial = self.config.default_provider
        chain = [initial] + [p for p in self.config.fallback_order if p != initial]
        chain += [p for p in self.providers if p not in chain]
        return [p for p in chain if p in self.providers]

    def embedding_order(self, completion_provider: Optional[str] = None) -> list[str]:
        """语义评分的 embedding 提供商顺序：当前补全提供商优先"""
        chain = [completion_provider] if completion_provider else []
        chain += [p for p in self.config.embedding_order if p not in chain]
        chain += [p for p in self.providers if p not in chain]
        return [
            p for p in chain
            if p in self.providers and self.providers[p].supports_embeddings
        ]

    def resolve_threshold(self, test_case: TestCase) -> float:
        if test_case.config.threshold is not None:
            return test_case.config.threshold
        return self.config.threshold

    # ── 单条用例 ─────────────────────────────────────────

    async def execute_single(self, test_case: TestCase) -> TestResult:
        """执行单个用例，任何失败都记录在结果中而不是抛出"""
        test_id = str(uuid.uuid4())
        start_time = time.time()

        try:
            return await self._execute(test_id, test_case, start_time)
        except TunePromptError as e:
            return self._error_result(test_id, test_case, start_time, str(e))
        except Exception as e:
            logger.exception("Unexpected error while executing test", description=test_case.description)
            return self._error_result(test_id, test_case, start_time, f"Unexpected error: {e}")

    async def _execute(self, test_id: str, test_case: TestCase, start_time: float) -> TestResult:
        threshold = self.resolve_threshold(test_case)
        prompt = render_prompt(test_case.prompt, test_case.variables)

        order = self.provider_order(test_case)
        if not order:
            pinned = test_case.config.provider
            if pinned:
                raise ConfigurationError(f"Provider '{pinned}' is not configured")
            raise ConfigurationError("No provider configured")

        errors: list[str] = []
        for provider_name in order:
            provider = self.providers[provider_name]
            try:
                response = await provider.complete(prompt, model=test_case.config.model)
            except ProviderError as e:
                errors.append(f"{provider_name.upper()}: {e.message}")
                logger.warning("Provider failed", provider=provider_name, error=e.message)
                continue

            # 补全成功后不再尝试其他提供商
            return await self._score_response(
                test_id, test_case, start_time, threshold, provider_name, response,
            )

        return self._error_result(
            test_id, test_case, start_time, " | ".join(errors) or "All providers failed",
            threshold=threshold,
        )

    async def _score_response(
        self,
        test_id: str,
        test_case: TestCase,
        start_time: float,
        threshold: float,
        provider_name: str,
        response: ProviderResponse,
    ) -> TestResult:
        try:
            outcome = await self.score(test_case, response.content, provider_name)
        except ScoringError as e:
            # 评分不可用与低分不同，判为 error
            logger.warning("Scoring failed", provider=provider_name, error=str(e))
            return TestResult(
                id=test_id,
                test_case=test_case,
                status=TestStatus.ERROR,
                score=0.0,
                threshold=threshold,
                actual_output=response.content,
                expected_output=test_case.expected_text,
                error=str(e),
                metadata=self._metadata(start_time, provider_name, response),
            )

        status = TestStatus.PASS if outcome.score >= threshold else TestStatus.FAIL
        return TestResult(
            id=test_id,
            test_case=test_case,
            status=status,
            score=outcome.score,
            threshold=threshold,
            actual_output=response.content,
            expected_output=test_case.expected_text,
            error=outcome.error,
            metadata=self._metadata(start_time, provider_name, response, outcome.scoring_provider),
        )

    # ── 评分 ─────────────────────────────────────────────

    async def score(self, test_case: TestCase, actual: str, provider_name: Optional[str] = None) -> ScoreOutcome:
        """按用例声明的方法评分，只产生分数，不与阈值比较"""
        method = test_case.config.method

        if method == ScoringMethod.EXACT:
            return ScoreOutcome(exact_match(test_case.expected_text, actual))

        if method == ScoringMethod.JSON:
            result = validate_json(_json_template(test_case.expect), actual)
            return ScoreOutcome(result.score, error=result.error)

        if method == ScoringMethod.SEMANTIC:
            return await self._semantic_score(test_case.expected_text, actual, provider_name)

        raise UnknownScoringMethod(f"Unknown scoring method: {method}")

    async def _semantic_score(self, expected: str, actual: str, provider_name: Optional[str]) -> ScoreOutcome:
        """embedding 的独立回退链 / Independent fallback chain for embeddings"""
        candidates = self.embedding_order(provider_name)
        if not candidates:
            raise EmbeddingUnavailable("No embedding-capable providers available for semantic scoring")

        last_error: Optional[ProviderError] = None
        for name in candidates:
            try:
                score = await semantic_similarity(expected, actual, self.providers[name])
                return ScoreOutcome(score, scoring_provider=name)
            except DimensionMismatch:
                raise
            except ProviderError as e:
                last_error = e
                logger.info("Embedding provider failed, trying next", provider=name, error=e.message)

        raise EmbeddingUnavailable(
            f"Semantic scoring failed. Last error: {last_error or 'Unknown error'}"
        )

    # ── 批量执行 ─────────────────────────────────────────

    async def run_tests(self, test_cases: list[TestCase]) -> TestRun:
        """串行执行所有用例 / Run all test cases sequentially, in input order"""
        run_id = str(uuid.uuid4())
        start_time = time.time()

        results = []
        for test_case in test_cases:
            results.append(await self.execute_single(test_case))

        run = TestRun.from_results(run_id, results, _elapsed_ms(start_time))
        logger.info(
            "Test run finished", run_id=run_id, total=run.total_tests,
            passed=run.passed, failed=run.failed, errors=run.errors, duration_ms=run.duration_ms,
        )
        return run

    # ── 工具方法 ─────────────────────────────────────────

    @staticmethod
    def _metadata(
        start_time: float,
        provider_name: Optional[str] = None,
        response: Optional[ProviderResponse] = None,
        scoring_provider: Optional[str] = None,
    ) -> ResultMetadata:
        return ResultMetadata(
            duration_ms=_elapsed_ms(start_time),
            tokens=response.tokens if response else None,
            cost=response.cost if response else None,
            provider=provider_name,
            scoring_provider=scoring_provider,
        )

    def _error_result(
        self,
        test_id: str,
        test_case: TestCase,
        start_time: float,
        message: str,
        threshold: Optional[float] = None,
    ) -> TestResult:
        return TestResult(
            id=test_id,
            test_case=test_case,
            status=TestStatus.ERROR,
            score=0.0,
            threshold=threshold if threshold is not None else self.resolve_threshold(test_case),
            actual_output="",
            expected_output=test_case.expected_text,
            error=message,
            metadata=self._metadata(start_time),
        )


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


def _json_template(expect: Any) -> Any:
    """字符串形式的 JSON 期望先解析为结构 / A JSON expectation written as a string is parsed first"""
    if isinstance(expect, str):
        try:
            return json.loads(expect)
        except json.JSONDecodeError:
            return expect
    return expect
