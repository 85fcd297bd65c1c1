"""提示词变量插值 / Prompt variable interpolation"""

import re
from typing import Any, Optional

from tuneprompt.models.test_case import ChatPrompt, Prompt

def interpolate(text: str, variables: Optional[dict[str, Any]] = None) -> str:
    """将 {{name}} 替换为变量值，未知变量保持原样 / Unknown placeholders are left untouched

    变量名可以是任意字符串（含空格、数字开头等）。
    """
    if not variables:
        return text

    values = {str(name): value for name, value in variables.items()}
    # 长名字优先，避免前缀相同的变量互相抢占
    names = sorted(values, key=len, reverse=True)
    pattern = re.compile(
        r"\{\{\s*(" + "|".join(re.escape(name) for name in names) + r")\s*\}\}"
    )

    return pattern.sub(lambda match: str(values[match.group(1)]), text)


def render_prompt(prompt: Prompt, variables: Optional[dict[str, Any]] = None) -> Prompt:
    """对字符串或 system+user 提示词做插值 / Interpolate both prompt shapes"""
    if isinstance(prompt, ChatPrompt):
        return ChatPrompt(
            system=interpolate(prompt.system, variables) if prompt.system else prompt.system,
            user=interpolate(prompt.user, variables),
        )
    return interpolate(prompt, variables)


def prompt_to_text(prompt: Prompt) -> str:
    """提示词的纯文本形式 / Plain-text rendering of a prompt"""
    if isinstance(prompt, ChatPrompt):
        if prompt.system:
            return f"[system]\n{prompt.system}\n\n[user]\n{prompt.user}"
        return prompt.user
    return prompt
