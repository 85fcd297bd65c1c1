"""工具模块 / Utility modules"""

from tuneprompt.utils.logging_util import configure_logging
from tuneprompt.utils.template import interpolate, render_prompt, prompt_to_text

__all__ = ["configure_logging", "interpolate", "render_prompt", "prompt_to_text"]
