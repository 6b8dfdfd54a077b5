"""gptbridge: OpenAI GPT chat models for generic generation frameworks."""

from typing import Any

from gptbridge.config import PluginSettings, load_settings
from gptbridge.errors import (
    ConfigError,
    GPTBridgeError,
    InvalidJsonOutputError,
    InvalidRequestError,
    MalformedToolCallError,
    ProviderError,
    UnmappableRoleError,
    UnsupportedModelError,
    UnsupportedOutputFormatError,
    UnsupportedPartError,
)
from gptbridge.logging import get_logger
from gptbridge.models import (
    Candidate,
    DataPart,
    FinishReason,
    GenerateRequest,
    GenerateResponse,
    GenerateResponseChunk,
    MediaPart,
    Message,
    OpenAIConfig,
    OutputFormat,
    Role,
    TextPart,
    ToolDefinition,
    ToolRequestPart,
    ToolResponsePart,
    Usage,
)
from gptbridge.plugin import ModelAction, gpt_model, openai_plugin
from gptbridge.providers import ChatProvider, OpenAIChatProvider
from gptbridge.registry import (
    MODELS_SUPPORTING_RESPONSE_FORMAT,
    SUPPORTED_GPT_MODELS,
    ModelInfo,
    ModelSupports,
    list_models,
    lookup,
)
from gptbridge.request_builder import to_openai_messages, to_openai_request_body
from gptbridge.response_reducer import (
    ChatCompletionAccumulator,
    from_openai_choice,
    from_openai_chunk_choice,
    from_openai_completion,
    reduce_stream,
)


def __getattr__(name: str) -> Any:
    """Lazy loading for Azure-dependent classes."""
    if name == "AzureChatProvider":
        from gptbridge.providers import AzureChatProvider

        return AzureChatProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AzureChatProvider",
    "Candidate",
    "ChatCompletionAccumulator",
    "ChatProvider",
    "ConfigError",
    "DataPart",
    "FinishReason",
    "GPTBridgeError",
    "GenerateRequest",
    "GenerateResponse",
    "GenerateResponseChunk",
    "InvalidJsonOutputError",
    "InvalidRequestError",
    "MODELS_SUPPORTING_RESPONSE_FORMAT",
    "MalformedToolCallError",
    "MediaPart",
    "Message",
    "ModelAction",
    "ModelInfo",
    "ModelSupports",
    "OpenAIChatProvider",
    "OpenAIConfig",
    "OutputFormat",
    "PluginSettings",
    "ProviderError",
    "Role",
    "SUPPORTED_GPT_MODELS",
    "TextPart",
    "ToolDefinition",
    "ToolRequestPart",
    "ToolResponsePart",
    "UnmappableRoleError",
    "UnsupportedModelError",
    "UnsupportedOutputFormatError",
    "UnsupportedPartError",
    "Usage",
    "from_openai_choice",
    "from_openai_chunk_choice",
    "from_openai_completion",
    "get_logger",
    "gpt_model",
    "list_models",
    "load_settings",
    "lookup",
    "openai_plugin",
    "reduce_stream",
    "to_openai_messages",
    "to_openai_request_body",
]
