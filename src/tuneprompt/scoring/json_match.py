"""结构化 JSON 评分

严格匹配：每一层类型必须一致，对象的键集合必须完全相同，叶子值严格相等，
任何一处不匹配都得 0 分，没有部分得分。这里优先保证输出结构正确，
而不是语义上的宽容（例如数字与数字字符串不会互相转换）。
"""

import json
from typing import Any, Optional

from pydantic import BaseModel


class JsonMatch(BaseModel):
    """JSON 评分结果"""
    score: float
    error: Optional[str] = None


def _kind(value: Any) -> str:
    # bool 是 int 的子类，必须先判断
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def structural_match(expected: Any, actual: Any) -> bool:
    """递归结构比较，与键顺序无关 / Recursive structural equality, key order independent"""
    kind = _kind(expected)
    if kind != _kind(actual):
        return False

    if kind == "object":
        if len(expected) != len(actual):
            return False
        return all(
            key in actual and structural_match(value, actual[key])
            for key, value in expected.items()
        )

    if kind == "array":
        if len(expected) != len(actual):
            return False
        return all(structural_match(e, a) for e, a in zip(expected, actual))

    return expected == actual


def validate_json(expected: Any, actual: str) -> JsonMatch:
    """解析 actual 并与期望结构比较 / Parse actual output and compare with the expected structure"""
    try:
        parsed = json.loads(actual)
    except (json.JSONDecodeError, TypeError) as e:
        return JsonMatch(score=0.0, error=f"Invalid JSON: {e}")

    return JsonMatch(score=1.0 if structural_match(expected, parsed) else 0.0)
