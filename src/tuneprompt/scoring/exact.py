"""精确匹配评分"""


def exact_match(expected: str, actual: str) -> float:
    """忽略大小写与首尾空白的相等比较 / Case-insensitive, trimmed equality"""
    return 1.0 if expected.strip().lower() == actual.strip().lower() else 0.0
