"""提示词优化器 / Prompt optimizer

流程：归因 → 选择 meta-prompt → 生成两个候选 → 影子测试 → 按分数选出最佳候选。
"""

import asyncio
import json
import re
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from tuneprompt.core.constraints import build_error_context
from tuneprompt.core.meta_prompt import select_meta_prompt
from tuneprompt.core.runner import TestRunner
from tuneprompt.core.shadow import ShadowTester
from tuneprompt.exceptions import MalformedCandidateError, ProviderError
from tuneprompt.models import (
    ErrorType, FailedTest, FixCandidate, OptimizationResult, OptimizerConfig,
    ShadowTestResult,
)
from tuneprompt.models.test_case import ChatPrompt
from tuneprompt.providers import BaseProvider
from tuneprompt.utils.template import prompt_to_text

logger = structlog.get_logger(__name__)

HEURISTIC_SOURCE = "heuristic"


# ─── 候选解析 ────────────────────────────────────────────

class _CandidateItem(BaseModel):
    prompt: str = Field(..., min_length=1)
    reasoning: str = ""


class _CandidatePair(BaseModel):
    candidate_a: _CandidateItem = Field(..., alias="candidateA")
    candidate_b: _CandidateItem = Field(..., alias="candidateB")


def _extract_json_object(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = re.search(r"```(?:json)?\s*\n(.*?)\n```", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    # 去掉前后的说明文字
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            pass
    return None


def parse_candidates(raw: str, source: str = "") -> list[FixCandidate]:
    """
    解析模型返回的两个候选 / Parse exactly two candidates from a rewrite response

    Raises:
        MalformedCandidateError: 不是 JSON，或不包含两个 prompt + reasoning
    """
    data = _extract_json_object(raw.strip())
    if data is None:
        raise MalformedCandidateError("Rewrite response is not valid JSON", raw)

    try:
        pair = _CandidatePair.model_validate(data)
    except ValidationError as e:
        raise MalformedCandidateError(f"Rewrite response does not contain two candidates: {e}", raw) from e

    candidates = []
    for item in (pair.candidate_a, pair.candidate_b):
        prompt = item.prompt.strip()
        if not prompt:
            raise MalformedCandidateError("Rewrite response contains an empty prompt", raw)
        candidates.append(FixCandidate(prompt=prompt, reasoning=item.reasoning.strip(), source=source))
    return candidates


# ─── 启发式改写 ──────────────────────────────────────────

def create_fallback_prompt(test: FailedTest) -> str:
    """所有提供商都失败时的最小改写 / Minimal deterministic rewrite"""
    improved = test.user_prompt

    if test.error_type == ErrorType.JSON:
        if "JSON" not in improved:
            improved += "\n\nReturn your response as valid JSON only, with no additional text."
        if test.expected_output:
            improved += f"\n\nUse exactly this structure:\n{test.expected_output}"

    elif test.error_type == ErrorType.SEMANTIC:
        improved = (
            "You must provide a response that includes the following key information:\n"
            f"{test.expected_output}\n\n{improved}"
        )

    elif test.error_type == ErrorType.EXACT:
        improved += (
            "\n\nRespond with exactly the following text and nothing else:\n"
            f"{test.expected_output}"
        )

    elif test.error_type == ErrorType.LENGTH:
        improved += (
            f"\n\nKeep your response to about {len(test.expected_output)} characters."
        )

    return improved


_FALLBACK_REASONING = {
    ErrorType.JSON: "Fallback rewrite: added explicit JSON-only output instructions",
    ErrorType.SEMANTIC: "Fallback rewrite: listed the key information the response must include",
    ErrorType.EXACT: "Fallback rewrite: stated the exact required output",
    ErrorType.LENGTH: "Fallback rewrite: added an explicit length limit",
}


# ─── 优化器 ──────────────────────────────────────────────

class PromptOptimizer:
    """提示词优化器

    候选生成有独立的提供商回退链；影子测试复用 TestRunner 的单用例执行。
    """

    def __init__(
        self,
        runner: TestRunner,
        providers: Optional[dict[str, BaseProvider]] = None,
        config: Optional[OptimizerConfig] = None,
    ):
        self.runner = runner
        self.providers = providers if providers is not None else runner.providers
        self.config = config or runner.config.optimizer
        self.shadow_tester = ShadowTester(runner)

    def generation_order(self) -> list[str]:
        order = [p for p in self.config.generation_order if p in self.providers]
        return order + [p for p in self.providers if p not in order]

    async def optimize(self, failed_test: FailedTest) -> OptimizationResult:
        """
        为一个失败用例生成并验证改写 / Produce and verify a rewrite for one failure

        Returns:
            最佳候选及其影子测试结果；最佳候选不一定通过
        """
        logger.info("Analyzing failure", test_id=failed_test.id, description=failed_test.description)

        # 1. 归因 + 选择 meta-prompt
        error_context = build_error_context(failed_test)
        meta_prompt = select_meta_prompt(failed_test, error_context)

        # 2. 生成候选
        candidates = await self.generate_candidates(meta_prompt, failed_test)

        # 3. 影子测试
        tested = await self.shadow_test(candidates, failed_test)

        # 4. 按分数选择，分数相同取靠前的
        best, best_result = max(tested, key=lambda pair: pair[0].score or 0.0)
        logger.info(
            "Selected candidate", test_id=failed_test.id, source=best.source,
            score=best.score, passed=best_result.passed,
        )

        optimized = failed_test.rewrite(best.prompt)
        return OptimizationResult(
            test_id=failed_test.id,
            original_prompt=prompt_to_text(failed_test.prompt),
            optimized_prompt=best.prompt,
            optimized_prompt_messages=optimized if isinstance(optimized, ChatPrompt) else None,
            reasoning=best.reasoning,
            confidence=best_result.score,
            test_results=best_result,
            candidates=[candidate for candidate, _ in tested],
            error=best_result.error,
        )

    async def generate_candidates(self, meta_prompt: str, failed_test: FailedTest) -> list[FixCandidate]:
        """按顺序尝试提供商，直到拿到两个合法候选；全部失败则退回启发式改写"""
        for name in self.generation_order():
            provider = self.providers[name]
            try:
                response = await provider.complete(
                    meta_prompt, max_tokens=self.config.generation_max_tokens, json_output=True,
                )
                candidates = parse_candidates(response.content, source=name)
            except ProviderError as e:
                logger.warning("Candidate generation failed", provider=name, error=e.message)
                continue
            except MalformedCandidateError as e:
                logger.warning("Malformed candidate response", provider=name, error=e.message)
                continue

            logger.info("Generated candidates", provider=name, count=len(candidates))
            return candidates

        logger.warning("All providers failed for candidate generation, using heuristic rewrite")
        return [FixCandidate(
            prompt=create_fallback_prompt(failed_test),
            reasoning=_FALLBACK_REASONING[failed_test.error_type],
            source=HEURISTIC_SOURCE,
        )]

    async def shadow_test(
        self, candidates: list[FixCandidate], failed_test: FailedTest,
    ) -> list[tuple[FixCandidate, ShadowTestResult]]:
        """影子测试每个候选，结果按候选顺序一一对应"""
        if self.config.concurrent_shadow_tests:
            results = await asyncio.gather(
                *[self.shadow_tester.run(c.prompt, failed_test) for c in candidates]
            )
        else:
            results = [await self.shadow_tester.run(c.prompt, failed_test) for c in candidates]

        tested = []
        for candidate, result in zip(candidates, results):
            logger.info("Shadow test finished", source=candidate.source, score=result.score, passed=result.passed)
            tested.append((
                candidate.model_copy(update={"score": result.score, "output": result.output, "error": result.error}),
                result,
            ))
        return tested

    async def optimize_all(self, failed_tests: list[FailedTest]) -> list[OptimizationResult]:
        """逐个优化，单个失败不影响其他用例 / One result per input, failures captured as data"""
        results = []
        for failed_test in failed_tests:
            try:
                results.append(await self.optimize(failed_test))
            except Exception as e:
                logger.exception("Optimization failed", test_id=failed_test.id)
                results.append(OptimizationResult(
                    test_id=failed_test.id,
                    original_prompt=prompt_to_text(failed_test.prompt),
                    optimized_prompt=failed_test.user_prompt,
                    error=str(e),
                ))
        return results
