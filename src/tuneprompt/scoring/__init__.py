"""评分策略 / Scoring strategies"""

from tuneprompt.scoring.exact import exact_match
from tuneprompt.scoring.json_match import JsonMatch, validate_json, structural_match
from tuneprompt.scoring.semantic import cosine_similarity, semantic_similarity

__all__ = [
    "exact_match",
    "JsonMatch", "validate_json", "structural_match",
    "cosine_similarity", "semantic_similarity",
]
