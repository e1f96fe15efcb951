############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# conftest.py: Pytest configuration and shared test fixtures
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Pytest configuration and shared fixtures for agbridge tests."""

import json
from typing import Any, Callable, Dict

import pytest

from agbridge.app.core.translators import translate_request
from agbridge.app.settings import Settings, get_settings

TARGET_MODEL = "gemini-2.5-pro"


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep settings from leaking between tests through the lru_cache."""
    for name in (
        "AGBRIDGE_CORRELATION_MISS_POLICY",
        "AGBRIDGE_EMIT_SYSTEM_INSTRUCTION",
        "AGBRIDGE_EMIT_GENERATION_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def default_settings() -> Settings:
    """Settings with defaults only (no .env file)."""
    return Settings(_env_file=None)


@pytest.fixture
def translate() -> Callable[..., Dict[str, Any]]:
    """Run a request dict through the byte-level translator and decode the result."""

    def _translate(data: Dict[str, Any], model: str = TARGET_MODEL, **kwargs: Any) -> Dict[str, Any]:
        output = translate_request(json.dumps(data).encode("utf-8"), model, **kwargs)
        return json.loads(output)

    return _translate


@pytest.fixture
def claude_shell_tool() -> Dict[str, Any]:
    """Claude-format (flat) tool definition."""
    return {
        "name": "Shell",
        "description": "Executes a shell command",
        "input_schema": {
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "The command to execute"},
            },
            "required": ["command"],
        },
    }


@pytest.fixture
def openai_shell_tool() -> Dict[str, Any]:
    """OpenAI-format (wrapped) tool definition."""
    return {
        "type": "function",
        "function": {
            "name": "Shell",
            "description": "Execute command",
            "parameters": {
                "type": "object",
                "properties": {"command": {"type": "string"}},
            },
        },
    }


@pytest.fixture
def claude_tool_conversation() -> list:
    """Claude-format tool call followed by its result."""
    return [
        {"role": "user", "content": "List files"},
        {
            "role": "assistant",
            "content": [
                {
                    "type": "tool_use",
                    "id": "call_1",
                    "name": "Shell",
                    "input": {"command": "ls -la"},
                }
            ],
        },
        {
            "role": "user",
            "content": [
                {"type": "tool_result", "tool_use_id": "call_1", "content": "file1.txt"}
            ],
        },
    ]


@pytest.fixture
def openai_tool_conversation() -> list:
    """OpenAI-format tool call followed by a tool role result."""
    return [
        {"role": "user", "content": "Run a command"},
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                {
                    "id": "call_openai",
                    "type": "function",
                    "function": {"name": "Shell", "arguments": '{"command": "whoami"}'},
                }
            ],
        },
        {"role": "tool", "tool_call_id": "call_openai", "content": "root"},
    ]
