import json
import logging

import structlog

from tuneprompt.models import ChatPrompt
from tuneprompt.utils import configure_logging, interpolate, prompt_to_text, render_prompt


def test_interpolate_replaces_known_variables_only() -> None:
    text = "Hello {{name}}, your order {{ order_id }} ships {{when}}."

    assert interpolate(text, {"name": "Ada", "order_id": 42}) == "Hello Ada, your order 42 ships {{when}}."


def test_interpolate_without_variables_is_identity() -> None:
    assert interpolate("Hi {{name}}", None) == "Hi {{name}}"
    assert interpolate("Hi {{name}}", {}) == "Hi {{name}}"


def test_render_prompt_handles_system_and_user() -> None:
    prompt = ChatPrompt(system="You serve {{company}}.", user="Greet {{name}}")

    rendered = render_prompt(prompt, {"company": "Acme", "name": "Ada"})

    assert rendered == ChatPrompt(system="You serve Acme.", user="Greet Ada")
    assert prompt.user == "Greet {{name}}"


def test_prompt_to_text() -> None:
    assert prompt_to_text("plain") == "plain"
    assert prompt_to_text(ChatPrompt(user="only user")) == "only user"
    assert prompt_to_text(ChatPrompt(system="sys", user="usr")) == "[system]\nsys\n\n[user]\nusr"


def test_configure_logging_json_renders_key_values(caplog) -> None:
    configure_logging(level="INFO", json=True)
    caplog.set_level(logging.INFO)

    structlog.get_logger("tuneprompt.tests").info("Provider failed", provider="openai")

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "Provider failed"
    assert payload["provider"] == "openai"
    assert payload["level"] == "info"


def test_interpolate_accepts_any_variable_key() -> None:
    text = "Dear {{user name}}, you came {{1st}}! Cost: {{price($)}}"

    result = interpolate(text, {"user name": "Ada", "1st": "first", "price($)": 9.5})

    assert result == "Dear Ada, you came first! Cost: 9.5"


def test_interpolate_prefers_longest_matching_key() -> None:
    assert interpolate("{{name}} / {{name.full}}", {"name": "Ada", "name.full": "Ada Lovelace"}) == (
        "Ada / Ada Lovelace"
    )
