"""Generic request -> OpenAI chat-completion request body.

Key mappings:
- ``user`` parts -> ``text`` / ``image_url`` content items
- ``system`` messages -> one flattened string
- ``model`` tool requests -> ``tool_calls`` on an ``assistant`` message
- ``tool`` responses -> one ``tool`` message per response part
- tool definitions -> ``{"type": "function", "function": {...}}``

Reference:
- OpenAI Chat Completions: https://platform.openai.com/docs/api-reference/chat
"""

from __future__ import annotations

from typing import Any

from gptbridge.errors import (
    UnmappableRoleError,
    UnsupportedOutputFormatError,
    UnsupportedPartError,
)
from gptbridge.logging import get_logger
from gptbridge.models import (
    GenerateRequest,
    MediaPart,
    Message,
    OutputFormat,
    Part,
    Role,
    TextPart,
    ToolDefinition,
    VisualDetailLevel,
)
from gptbridge.registry import MODELS_SUPPORTING_RESPONSE_FORMAT, ModelInfo, lookup
from gptbridge.utils import prune_empty_fields, to_json_string

logger = get_logger("request_builder")

DEFAULT_VISUAL_DETAIL_LEVEL = VisualDetailLevel.AUTO

_ROLE_MAP: dict[str, str] = {
    Role.USER.value: "user",
    Role.MODEL.value: "assistant",
    Role.SYSTEM.value: "system",
    Role.TOOL.value: "tool",
}

_RESPONSE_FORMAT_TYPES: dict[OutputFormat, str] = {
    OutputFormat.JSON: "json_object",
    OutputFormat.TEXT: "text",
}


def to_openai_role(role: Role | str) -> str:
    """Map a generic role to its OpenAI chat role.

    Raises:
        UnmappableRoleError: If *role* has no OpenAI counterpart.
    """
    key = role.value if isinstance(role, Role) else role
    try:
        return _ROLE_MAP[key]
    except KeyError:
        raise UnmappableRoleError(
            f"role {role} doesn't map to an OpenAI role."
        ) from None


def to_openai_tool(tool: ToolDefinition) -> dict[str, Any]:
    """Convert a tool definition to an OpenAI function tool."""
    function: dict[str, Any] = {
        "name": tool.name,
        "parameters": tool.input_schema,
    }
    if tool.description:
        function["description"] = tool.description
    return {"type": "function", "function": function}


def to_openai_text_and_media(
    part: Part,
    visual_detail_level: VisualDetailLevel | str = DEFAULT_VISUAL_DETAIL_LEVEL,
) -> dict[str, Any]:
    """Convert a user-message part to an OpenAI content item.

    Args:
        part: A text or media part.
        visual_detail_level: Detail hint attached to image items.

    Returns:
        A ``text`` or ``image_url`` content item.

    Raises:
        UnsupportedPartError: If the part is neither text nor media.
    """
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.text}
    if isinstance(part, MediaPart):
        return {
            "type": "image_url",
            "image_url": {
                "url": part.media.url,
                "detail": VisualDetailLevel(visual_detail_level).value,
            },
        }
    raise UnsupportedPartError(
        "Unsupported part fields encountered for current message role: "
        f"{part.model_dump_json(by_alias=True, exclude_none=True)}."
    )


def _assistant_message(message: Message) -> dict[str, Any]:
    tool_calls = [
        {
            "id": part.tool_request.ref or "",
            "type": "function",
            "function": {
                "name": part.tool_request.name,
                "arguments": to_json_string(part.tool_request.input),
            },
        }
        for part in message.tool_request_parts()
    ]
    if tool_calls:
        return {"role": "assistant", "tool_calls": tool_calls}
    return {"role": "assistant", "content": message.text()}


def _tool_messages(message: Message) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for part in message.tool_response_parts():
        output = part.tool_response.output
        messages.append(
            {
                "role": "tool",
                "tool_call_id": part.tool_response.ref or "",
                "content": output if isinstance(output, str) else to_json_string(output),
            }
        )
    return messages


def to_openai_messages(
    messages: list[Message],
    visual_detail_level: VisualDetailLevel | str | None = None,
) -> list[dict[str, Any]]:
    """Convert generic messages to OpenAI chat messages.

    A ``tool`` message expands into one OpenAI message per tool-response
    part; every other message maps to exactly one OpenAI message.

    Args:
        messages: Ordered generic messages.
        visual_detail_level: Detail hint for image parts (default ``auto``).

    Returns:
        The OpenAI ``messages`` list.

    Raises:
        UnmappableRoleError: If a message role has no OpenAI counterpart.
        UnsupportedPartError: If a user message carries a non text/media part.
    """
    detail = visual_detail_level or DEFAULT_VISUAL_DETAIL_LEVEL
    openai_messages: list[dict[str, Any]] = []
    for message in messages:
        role = to_openai_role(message.role)
        if role == "user":
            openai_messages.append(
                {
                    "role": role,
                    "content": [
                        to_openai_text_and_media(part, detail)
                        for part in message.content
                    ],
                }
            )
        elif role == "system":
            openai_messages.append({"role": role, "content": message.text()})
        elif role == "assistant":
            openai_messages.append(_assistant_message(message))
        else:
            openai_messages.extend(_tool_messages(message))
    return openai_messages


def resolve_model_version(model: ModelInfo, request: GenerateRequest) -> str:
    """Pick the ``model`` value sent to OpenAI.

    Priority: explicit ``config.version``, then the descriptor's default
    version, then the registry name itself.
    """
    config_version = request.config.version if request.config else None
    return config_version or model.version or model.name


def _response_format(
    model: ModelInfo, version: str, output_format: OutputFormat | None
) -> dict[str, str] | None:
    if output_format is None:
        return None
    if (
        version not in MODELS_SUPPORTING_RESPONSE_FORMAT
        or output_format not in model.supports.output
    ):
        raise UnsupportedOutputFormatError(
            f"{output_format.value} format is not supported for "
            f"{version} currently"
        )
    return {"type": _RESPONSE_FORMAT_TYPES[output_format]}


def to_openai_request_body(
    model_name: str, request: GenerateRequest
) -> dict[str, Any]:
    """Convert a generic request into an OpenAI chat-completion body.

    Unset options never appear in the result: every falsy field is pruned
    before returning.

    Args:
        model_name: Registry key of the target model.
        request: The generic request.

    Returns:
        A request body for ``client.chat.completions.create``.

    Raises:
        UnsupportedModelError: If *model_name* is not registered.
        UnmappableRoleError: If a message role cannot be mapped.
        UnsupportedPartError: If a user message carries an unsupported part.
        UnsupportedOutputFormatError: If the requested output format is not
            allowed for the resolved model version.
    """
    model = lookup(model_name)
    config = request.config
    openai_messages = to_openai_messages(
        request.messages, config.visual_detail_level if config else None
    )
    version = resolve_model_version(model, request)

    tools = request.tools
    if tools and not model.supports.tools:
        logger.warning(
            "Model %s does not support tools; dropping %d tool definition(s)",
            model.name,
            len(tools),
        )
        tools = []

    candidate_count = config.candidate_count if config else None
    body: dict[str, Any] = {
        "model": version,
        "messages": openai_messages,
        "tools": [to_openai_tool(tool) for tool in tools],
        "n": candidate_count or request.candidates,
    }
    if config is not None:
        body.update(
            {
                "temperature": config.temperature,
                "max_tokens": config.max_output_tokens,
                "top_p": config.top_p,
                "stop": config.stop_sequences,
                "frequency_penalty": config.frequency_penalty,
                "logit_bias": config.logit_bias,
                "logprobs": config.log_probs,  # not snake case upstream
                "presence_penalty": config.presence_penalty,
                "seed": config.seed,
                "top_logprobs": config.top_log_probs,  # not snake case upstream
                "user": config.user,
            }
        )

    output_format = request.output.format if request.output else None
    body["response_format"] = _response_format(model, version, output_format)

    body = prune_empty_fields(body)
    logger.debug(
        "Built request body for %s: %d message(s), fields=%s",
        version,
        len(openai_messages),
        sorted(body),
    )
    return body
