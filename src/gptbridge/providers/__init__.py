"""Chat providers that run generic requests against OpenAI chat models.

This package contains the provider abstraction and its implementations for
the OpenAI API and for GPT deployments on Azure OpenAI.
"""

from __future__ import annotations

from typing import Any

from gptbridge.providers.chat import ChatProvider
from gptbridge.providers.openai_chat import OpenAIChatProvider


# Lazy import for the Azure-dependent provider
def __getattr__(name: str) -> Any:
    if name == "AzureChatProvider":
        from gptbridge.providers.azure_chat import AzureChatProvider

        return AzureChatProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AzureChatProvider",
    "ChatProvider",
    "OpenAIChatProvider",
]
