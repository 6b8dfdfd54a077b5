"""Shared fixtures for gptbridge tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

import pytest
from dotenv import load_dotenv
from openai.types.chat import ChatCompletion, ChatCompletionChunk

# Auto-load .env from project root (gitignored, never pushed).
# This provides OPENAI_API_KEY for integration tests.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env", override=False)

# ---------------------------------------------------------------------------
# Auto-skip integration tests when OpenAI credentials are unavailable
# ---------------------------------------------------------------------------


def _openai_credentials_available() -> bool:
    """Check whether live OpenAI tests may run.

    Returns True when:
    0. Integration tests are explicitly enabled, AND
    1. The OPENAI_API_KEY env var is set.
    """
    if os.environ.get("GPTBRIDGE_RUN_INTEGRATION", "").strip().lower() not in (
        "1",
        "true",
        "yes",
        "on",
    ):
        return False
    return bool(os.environ.get("OPENAI_API_KEY", ""))


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip integration tests when OpenAI is not available."""
    if _openai_credentials_available():
        return
    skip_marker = pytest.mark.skip(
        reason=(
            "Integration test skipped: set GPTBRIDGE_RUN_INTEGRATION=1 and "
            "ensure OPENAI_API_KEY is set."
        )
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_marker)


# ---------------------------------------------------------------------------
# Wire fixtures: OpenAI SDK objects built from raw API payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_completion() -> Callable[..., ChatCompletion]:
    """Factory for ``ChatCompletion`` objects with one or more choices."""

    def _make(
        *choices: dict[str, Any],
        usage: dict[str, int] | None = None,
        model: str = "gpt-4o-2024-05-13",
    ) -> ChatCompletion:
        payload: dict[str, Any] = {
            "id": "chatcmpl-123",
            "object": "chat.completion",
            "created": 1_715_000_000,
            "model": model,
            "choices": [
                {"index": i, "logprobs": None, **choice}
                for i, choice in enumerate(choices)
            ],
        }
        if usage is not None:
            payload["usage"] = usage
        return ChatCompletion.model_validate(payload)

    return _make


@pytest.fixture()
def make_chunk() -> Callable[..., ChatCompletionChunk]:
    """Factory for ``ChatCompletionChunk`` objects."""

    def _make(
        *choices: dict[str, Any],
        usage: dict[str, int] | None = None,
    ) -> ChatCompletionChunk:
        payload: dict[str, Any] = {
            "id": "chatcmpl-123",
            "object": "chat.completion.chunk",
            "created": 1_715_000_000,
            "model": "gpt-4o-2024-05-13",
            "choices": [
                {"index": 0, "finish_reason": None, **choice} for choice in choices
            ],
        }
        if usage is not None:
            payload["usage"] = usage
        return ChatCompletionChunk.model_validate(payload)

    return _make


@pytest.fixture()
def text_completion(make_completion: Callable[..., ChatCompletion]) -> ChatCompletion:
    """A single-choice completion answering ``"Hello there!"``."""
    return make_completion(
        {
            "finish_reason": "stop",
            "message": {"role": "assistant", "content": "Hello there!"},
        },
        usage={"prompt_tokens": 9, "completion_tokens": 3, "total_tokens": 12},
    )


@pytest.fixture()
def tool_call_completion(
    make_completion: Callable[..., ChatCompletion],
) -> ChatCompletion:
    """A completion requesting a ``get_weather`` tool call."""
    return make_completion(
        {
            "finish_reason": "tool_calls",
            "message": {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": "call_abc",
                        "type": "function",
                        "function": {
                            "name": "get_weather",
                            "arguments": '{"city": "Paris"}',
                        },
                    }
                ],
            },
        },
        usage={"prompt_tokens": 20, "completion_tokens": 8, "total_tokens": 28},
    )
