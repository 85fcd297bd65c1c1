"""Meta-prompt 模板 / Meta-prompt templates

每个模板要求模型诊断根因、从固定技巧中选择手段改写提示词，
并只返回包含两个候选的 JSON。
"""

import json

from tuneprompt.models.fix import ErrorType, FailedTest

TECHNIQUES = [
    "Explicit constraints: state every requirement the output must satisfy",
    "Structural delimiters: separate instructions, inputs and output sections",
    "Role framing: assign the model an expert role suited to the task",
    "Worked examples: show one or more examples of a correct output",
    "Chain-of-thought: ask for step-by-step reasoning before the final answer",
]

OUTPUT_FORMAT = """## Output Format
Return ONLY a JSON object, with no markdown fences and no text before or after it:
{{
  "candidateA": {{"prompt": "<complete rewritten prompt>", "reasoning": "<root cause and techniques applied>"}},
  "candidateB": {{"prompt": "<a different complete rewritten prompt>", "reasoning": "<root cause and techniques applied>"}}
}}
The two candidates must use different techniques. Keep any {{{{variable}}}} placeholders from the original prompt."""

_GENERIC_TEMPLATE = """You are an expert LLM prompt engineer. A prompt has failed a unit test.
Rewrite it so the output satisfies the test while keeping the original intent.

## Original Prompt
{prompt_section}

## Test Input
{test_input}

## Expected Output
{expected_output}

## Actual Output
{actual_output}

## Failure Analysis
{error_context}

## Instructions
1. Diagnose why the original prompt produced this output (missing constraints, ambiguity, tone, format).
2. Apply one or more of these techniques:
{techniques}
3. Produce two alternative rewrites of the prompt.

{output_format}"""

_JSON_TEMPLATE = """You are an expert LLM prompt engineer specialised in structured output.
A prompt was expected to produce JSON with an exact structure, and it did not.

## Original Prompt
{prompt_section}

## Test Input
{test_input}

## Required JSON Structure
{expected_output}

## Actual Output
{actual_output}

## Failure Analysis
{error_context}

## Instructions
1. Diagnose why the output was not valid JSON or did not match the required keys and value types.
2. Rewrite the prompt so the model returns only JSON with exactly the required keys. Apply one or more of:
{techniques}
3. Show the required structure inside the prompt and forbid any text outside the JSON.
4. Produce two alternative rewrites of the prompt.

{output_format}"""

_SEMANTIC_TEMPLATE = """You are an expert LLM prompt engineer. A prompt produced output whose meaning is
too far from the expected answer (score {score:.2f}, required {threshold:.2f}).

## Original Prompt
{prompt_section}

## Test Input
{test_input}

## Expected Output (meaning to convey)
{expected_output}

## Actual Output
{actual_output}

## Failure Analysis
{error_context}

## Instructions
1. Identify which key information, tone or scope the actual output is missing.
2. Rewrite the prompt so the model conveys the expected meaning. Apply one or more of:
{techniques}
3. Do not just paste the expected output into the prompt; make the instructions general.
4. Produce two alternative rewrites of the prompt.

{output_format}"""


def _prompt_section(test: FailedTest) -> str:
    if test.system_prompt:
        return (
            f"[system]\n{test.system_prompt}\n\n[user]\n{test.user_prompt}\n\n"
            "Rewrite only the [user] part; the system prompt stays unchanged."
        )
    return test.user_prompt


def _fields(test: FailedTest, error_context: str) -> dict:
    return {
        "prompt_section": _prompt_section(test),
        "test_input": json.dumps(test.input, ensure_ascii=False, indent=2) if test.input else "(none)",
        "expected_output": test.expected_output,
        "actual_output": test.actual_output or "(empty)",
        "error_context": error_context,
        "techniques": "\n".join(f"   - {t}" for t in TECHNIQUES),
        "output_format": OUTPUT_FORMAT.format(),
        "score": test.score,
        "threshold": test.threshold,
    }


def build_optimization_prompt(test: FailedTest, error_context: str) -> str:
    """通用模板（exact / length）/ Generic template"""
    return _GENERIC_TEMPLATE.format(**_fields(test, error_context))


def build_json_fix_prompt(test: FailedTest, error_context: str) -> str:
    return _JSON_TEMPLATE.format(**_fields(test, error_context))


def build_semantic_fix_prompt(test: FailedTest, error_context: str) -> str:
    return _SEMANTIC_TEMPLATE.format(**_fields(test, error_context))


def select_meta_prompt(test: FailedTest, error_context: str) -> str:
    """按 error_type 选择模板 / Choose the template by error type"""
    if test.error_type == ErrorType.JSON:
        return build_json_fix_prompt(test, error_context)
    if test.error_type == ErrorType.SEMANTIC:
        return build_semantic_fix_prompt(test, error_context)
    return build_optimization_prompt(test, error_context)
