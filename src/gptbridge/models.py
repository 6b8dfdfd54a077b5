"""Pydantic data models for generic chat requests, responses, and stream chunks.

Field names are snake_case; every model also accepts the camelCase names a
host framework sends (``maxOutputTokens``, ``toolRequest``, ...), so host
payloads can be passed straight to ``model_validate``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Role(str, Enum):
    """Author of a generic message."""

    USER = "user"
    MODEL = "model"
    SYSTEM = "system"
    TOOL = "tool"


class FinishReason(str, Enum):
    """Why a candidate stopped generating.

    * **STOP**: natural end of output, including a request for tool calls.
    * **LENGTH**: the token limit was reached.
    * **BLOCKED**: the vendor's content filter stopped the output.
    * **OTHER**: a final completion with an unclassified reason.
    * **UNKNOWN**: a stream chunk that has not finished yet.
    """

    STOP = "stop"
    LENGTH = "length"
    BLOCKED = "blocked"
    OTHER = "other"
    UNKNOWN = "unknown"


class OutputFormat(str, Enum):
    """Desired format of the model output."""

    TEXT = "text"
    JSON = "json"


class VisualDetailLevel(str, Enum):
    """Image fidelity hint forwarded with media parts."""

    AUTO = "auto"
    LOW = "low"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Message parts
# ---------------------------------------------------------------------------


class Media(_CamelModel):
    """A media reference, either a remote URL or a ``data:`` URL."""

    url: str
    content_type: str | None = None


class ToolRequest(_CamelModel):
    """A model-issued instruction to invoke a tool.

    Attributes:
        name: Tool (function) name.
        ref: Call identifier used to correlate the tool response.
        input: Structured arguments, or the raw argument string when the
            model produced something that is not JSON.
    """

    name: str
    ref: str | None = None
    input: Any = None


class ToolResponse(_CamelModel):
    """The caller-supplied result of a previously issued tool call."""

    name: str | None = None
    ref: str | None = None
    output: Any = None


class TextPart(_CamelModel):
    """Plain text content."""

    text: str


class MediaPart(_CamelModel):
    """Image (or other media) content."""

    media: Media


class ToolRequestPart(_CamelModel):
    """A tool invocation requested by the model."""

    tool_request: ToolRequest


class ToolResponsePart(_CamelModel):
    """The output of a tool invocation, sent back to the model."""

    tool_response: ToolResponse


class DataPart(_CamelModel):
    """Structured output decoded from a JSON-mode response."""

    data: Any = None


_PART_TAGS: dict[type[BaseModel], str] = {
    TextPart: "text",
    MediaPart: "media",
    ToolRequestPart: "tool_request",
    ToolResponsePart: "tool_response",
    DataPart: "data",
}

_PART_KEYS: dict[str, str] = {
    "text": "text",
    "media": "media",
    "toolRequest": "tool_request",
    "tool_request": "tool_request",
    "toolResponse": "tool_response",
    "tool_response": "tool_response",
    "data": "data",
}


def _part_kind(value: Any) -> str | None:
    """Return the variant tag of a part, or None when it is ambiguous."""
    if isinstance(value, BaseModel):
        return _PART_TAGS.get(type(value))
    if isinstance(value, dict):
        tags = {
            _PART_KEYS[key]
            for key, item in value.items()
            if key in _PART_KEYS and item is not None
        }
        if len(tags) == 1:
            return tags.pop()
    return None


Part = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[MediaPart, Tag("media")],
        Annotated[ToolRequestPart, Tag("tool_request")],
        Annotated[ToolResponsePart, Tag("tool_response")],
        Annotated[DataPart, Tag("data")],
    ],
    Discriminator(_part_kind),
]


class Message(_CamelModel):
    """One conversation turn made of ordered parts."""

    role: Role
    content: list[Part] = []

    def text(self) -> str:
        """Concatenate the text parts of this message, in order."""
        return "".join(
            part.text for part in self.content if isinstance(part, TextPart)
        )

    def tool_request_parts(self) -> list[ToolRequestPart]:
        """Return the tool-request parts of this message."""
        return [part for part in self.content if isinstance(part, ToolRequestPart)]

    def tool_response_parts(self) -> list[ToolResponsePart]:
        """Return the tool-response parts of this message."""
        return [part for part in self.content if isinstance(part, ToolResponsePart)]


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class ToolDefinition(_CamelModel):
    """A tool the model may call.

    Attributes:
        name: Function name exposed to the model.
        description: Optional human-readable purpose of the tool.
        input_schema: JSON schema of the tool arguments.
        output_schema: JSON schema of the tool result (informational).
    """

    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None
    output_schema: dict[str, Any] | None = None


class OutputConfig(_CamelModel):
    """Output constraints requested by the caller."""

    format: OutputFormat | None = None


class OpenAIConfig(_CamelModel):
    """Generation options recognised by the OpenAI chat models.

    The first block holds options shared by every generic model; the rest
    are OpenAI-specific.

    Attributes:
        version: Explicit model version sent as the request ``model``.
        temperature: Sampling temperature.
        max_output_tokens: Upper bound on generated tokens.
        top_p: Nucleus sampling probability mass.
        stop_sequences: Sequences that end generation.
        candidate_count: Number of candidates to generate.
        frequency_penalty: Penalty for frequent tokens (-2.0 to 2.0).
        presence_penalty: Penalty for already-present tokens (-2.0 to 2.0).
        logit_bias: Token id (as a string) to bias (-100 to 100).
        log_probs: Whether to return log probabilities.
        top_log_probs: Number of most likely tokens to return per position
            (0 to 20).
        seed: Seed for best-effort deterministic sampling.
        user: Opaque end-user identifier.
        visual_detail_level: Image fidelity for media parts.
    """

    version: str | None = None
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    stop_sequences: list[str] | None = None
    candidate_count: int | None = None

    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    logit_bias: dict[str, Annotated[float, Field(ge=-100, le=100)]] | None = None
    log_probs: bool | None = None
    top_log_probs: int | None = Field(default=None, ge=0, le=20)
    seed: int | None = None
    user: str | None = None
    visual_detail_level: VisualDetailLevel | None = None


class GenerateRequest(_CamelModel):
    """A generic generation request.

    Attributes:
        messages: Ordered conversation history.
        config: Optional generation options.
        tools: Tool definitions available to the model.
        output: Optional output constraints.
        candidates: Legacy candidate count; ``config.candidate_count`` wins
            when both are set.
    """

    messages: list[Message]
    config: OpenAIConfig | None = None
    tools: list[ToolDefinition] = []
    output: OutputConfig | None = None
    candidates: int | None = None

    @property
    def json_mode(self) -> bool:
        """Whether the caller asked for JSON output."""
        return self.output is not None and self.output.format == OutputFormat.JSON


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class Candidate(_CamelModel):
    """One generated completion option."""

    index: int
    finish_reason: FinishReason
    message: Message
    custom: dict[str, Any] = {}


class Usage(_CamelModel):
    """Token accounting; values the vendor omits stay ``None``."""

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


class GenerateResponse(_CamelModel):
    """A generic generation response.

    Attributes:
        candidates: Converted candidates, in vendor order.
        usage: Token accounting for the whole request.
        custom: The raw vendor response object.
    """

    candidates: list[Candidate] = []
    usage: Usage = Usage()
    custom: Any = None


class GenerateResponseChunk(_CamelModel):
    """Partial content delivered to a streaming callback."""

    index: int
    content: list[Part] = []
