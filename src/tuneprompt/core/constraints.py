"""失败归因：从失败用例提取问题与修复建议 / Error context for the optimizer"""

import json

from pydantic import BaseModel, Field

from tuneprompt.models.fix import ErrorType, FailedTest

# 语义分差超过该值视为明显跑题
OFF_TOPIC_DEFICIT = 0.3


class ExtractedConstraints(BaseModel):
    """归因结果"""
    error_type: ErrorType
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


def extract_constraints(test: FailedTest) -> ExtractedConstraints:
    """按 error_type 归类问题并给出修复手段"""
    constraints = ExtractedConstraints(error_type=test.error_type)

    if test.error_type == ErrorType.JSON:
        try:
            json.loads(test.actual_output)
            constraints.issues.append("Output JSON does not match the expected structure")
        except json.JSONDecodeError as e:
            constraints.issues.append("Output was not valid JSON")
            constraints.issues.append(f"JSON Error: {e}")
        constraints.suggestions.extend([
            "Add explicit JSON formatting instructions",
            "Provide a JSON schema example",
            "Use delimiters like <json_output></json_output>",
        ])

    elif test.error_type == ErrorType.SEMANTIC:
        deficit = test.threshold - test.score
        constraints.issues.append(
            f"Semantic similarity too low ({test.score:.2f} < {test.threshold})"
        )
        if deficit > OFF_TOPIC_DEFICIT:
            constraints.issues.append("Output is significantly off-topic")
            constraints.suggestions.extend([
                "Add more specific instructions",
                "Include key phrases that must appear",
                "Provide examples of correct outputs",
            ])
        else:
            constraints.issues.append("Output is close but missing key details")
            constraints.suggestions.extend([
                "Emphasize critical information",
                "Add constraint checklist",
                "Request step-by-step reasoning",
            ])

    elif test.error_type == ErrorType.LENGTH:
        constraints.issues.append(
            f"Output length mismatch: {len(test.actual_output)} characters "
            f"(expected around {len(test.expected_output)})"
        )
        constraints.suggestions.extend([
            "Specify exact character/word limits",
            'Add "Be concise" or "Be detailed" instructions',
            "Provide length reference examples",
        ])

    elif test.error_type == ErrorType.EXACT:
        constraints.issues.append("Output does not match the expected text exactly")
        constraints.suggestions.extend([
            "State the exact required output",
            "Forbid any additional commentary or formatting",
            "Show the expected output verbatim as an example",
        ])

    return constraints


def build_error_context(test: FailedTest) -> str:
    """渲染为给 meta-prompt 使用的文本 / Render the context block for the meta-prompt"""
    constraints = extract_constraints(test)

    issues = "\n".join(f"{i}. {issue}" for i, issue in enumerate(constraints.issues, 1))
    suggestions = "\n".join(f"{i}. {s}" for i, s in enumerate(constraints.suggestions, 1))

    return (
        f"Error Type: {constraints.error_type.value.upper()}\n\n"
        f"Issues Detected:\n{issues}\n\n"
        f"Recommended Fixes:\n{suggestions}"
    )
