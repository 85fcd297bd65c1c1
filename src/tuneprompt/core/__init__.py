"""核心模块 / Core modules"""

from tuneprompt.core.config import load_config, validate_config
from tuneprompt.core.runner import TestRunner
from tuneprompt.core.shadow import ShadowTester
from tuneprompt.core.optimizer import PromptOptimizer, parse_candidates, create_fallback_prompt
from tuneprompt.core.constraints import extract_constraints, build_error_context
from tuneprompt.core.meta_prompt import select_meta_prompt

__all__ = [
    "load_config",
    "validate_config",
    "TestRunner",
    "ShadowTester",
    "PromptOptimizer",
    "parse_candidates",
    "create_fallback_prompt",
    "extract_constraints",
    "build_error_context",
    "select_meta_prompt",
]
