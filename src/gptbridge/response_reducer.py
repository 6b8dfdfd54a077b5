"""OpenAI chat completions -> generic responses.

Handles both delivery modes:

* a single ``ChatCompletion`` is converted choice by choice;
* a ``ChatCompletionChunk`` stream is fed to a callback chunk by chunk and
  then folded into one final completion, which is converted exactly like
  the non-streaming case.

Tool-call arguments that are not valid JSON are passed through as the raw
string.  Message content in JSON mode has no such fallback.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, Awaitable, Callable
from types import MappingProxyType
from typing import Any

from openai.types.chat import ChatCompletion, ChatCompletionChunk

from gptbridge.errors import InvalidJsonOutputError, MalformedToolCallError
from gptbridge.logging import get_logger
from gptbridge.models import (
    Candidate,
    DataPart,
    FinishReason,
    GenerateResponse,
    GenerateResponseChunk,
    Message,
    Part,
    Role,
    TextPart,
    ToolRequest,
    ToolRequestPart,
    Usage,
)
from gptbridge.utils import parse_json_or_raw

logger = get_logger("response_reducer")

StreamingCallback = Callable[[GenerateResponseChunk], None]

# ``tool_calls`` is returned by the API even where older SDK enums omit it.
FINISH_REASON_MAP: MappingProxyType[str, FinishReason] = MappingProxyType(
    {
        "length": FinishReason.LENGTH,
        "stop": FinishReason.STOP,
        "tool_calls": FinishReason.STOP,
        "content_filter": FinishReason.BLOCKED,
    }
)


def from_openai_tool_call(tool_call: Any) -> ToolRequestPart:
    """Convert an OpenAI tool call (or tool-call delta) to a tool request.

    Args:
        tool_call: A ``ChatCompletionMessageToolCall`` or a streamed
            ``ChoiceDeltaToolCall``.

    Returns:
        A tool-request part whose input is the decoded arguments, or the
        raw argument string when it is not valid JSON.

    Raises:
        MalformedToolCallError: If the tool call has no function payload.
    """
    function = getattr(tool_call, "function", None)
    if function is None:
        raise MalformedToolCallError(
            "Unexpected OpenAI choice: tool_calls was provided but one or "
            "more tool calls is missing its function."
        )
    arguments = function.arguments
    parsed = parse_json_or_raw(arguments)
    if arguments and parsed is arguments:
        logger.debug(
            "Arguments of tool call %s are not JSON; passing the raw string",
            function.name,
        )
    return ToolRequestPart(
        tool_request=ToolRequest(
            name=function.name or "",
            ref=tool_call.id,
            input=parsed,
        )
    )


def _message_content(content: str | None, json_mode: bool) -> list[Part]:
    if json_mode:
        try:
            return [DataPart(data=json.loads(content))]  # type: ignore[arg-type]
        except (TypeError, json.JSONDecodeError) as exc:
            raise InvalidJsonOutputError(
                f"Model returned invalid JSON content: {exc}"
            ) from exc
    return [TextPart(text=content or "")]


def from_openai_choice(choice: Any, json_mode: bool = False) -> Candidate:
    """Convert a completion choice to a generic candidate.

    Args:
        choice: A ``ChatCompletion`` choice.
        json_mode: Decode the message content as JSON.

    Returns:
        The converted candidate.  A missing or unmapped finish reason
        becomes ``other``.

    Raises:
        MalformedToolCallError: If a tool call has no function payload.
        InvalidJsonOutputError: If *json_mode* is set and the content is
            not valid JSON.
    """
    tool_calls = choice.message.tool_calls
    if tool_calls:
        content: list[Part] = [from_openai_tool_call(call) for call in tool_calls]
    else:
        content = _message_content(choice.message.content, json_mode)
    return Candidate(
        index=choice.index,
        finish_reason=FINISH_REASON_MAP.get(choice.finish_reason or "", FinishReason.OTHER),
        message=Message(role=Role.MODEL, content=content),
    )


def from_openai_chunk_choice(choice: Any, json_mode: bool = False) -> Candidate:
    """Convert a streamed chunk choice to a generic candidate.

    Unlike :func:`from_openai_choice`, a chunk that has not finished yet
    reports ``unknown``, and any ``tool_calls`` list (even an empty one)
    produces tool-request content.
    """
    delta = choice.delta
    if delta.tool_calls is not None:
        content: list[Part] = [from_openai_tool_call(call) for call in delta.tool_calls]
    else:
        content = _message_content(delta.content, json_mode)
    if choice.finish_reason:
        finish_reason = FINISH_REASON_MAP.get(choice.finish_reason, FinishReason.OTHER)
    else:
        finish_reason = FinishReason.UNKNOWN
    return Candidate(
        index=choice.index,
        finish_reason=finish_reason,
        message=Message(role=Role.MODEL, content=content),
    )


def from_openai_usage(usage: Any) -> Usage:
    """Map OpenAI token counts; a missing usage block yields all ``None``."""
    return Usage(
        input_tokens=getattr(usage, "prompt_tokens", None),
        output_tokens=getattr(usage, "completion_tokens", None),
        total_tokens=getattr(usage, "total_tokens", None),
    )


def from_openai_completion(
    completion: ChatCompletion, json_mode: bool = False
) -> GenerateResponse:
    """Convert a full ``ChatCompletion`` to a generic response.

    Args:
        completion: The OpenAI completion.
        json_mode: Decode each choice's content as JSON.

    Returns:
        The generic response; ``custom`` holds *completion* itself.
    """
    return GenerateResponse(
        candidates=[from_openai_choice(choice, json_mode) for choice in completion.choices],
        usage=from_openai_usage(completion.usage),
        custom=completion,
    )


class ChatCompletionAccumulator:
    """Fold a chunk stream into the ``ChatCompletion`` it describes.

    Content deltas are concatenated per choice, tool-call deltas are merged
    by their ``index`` (the id and name arrive once, the arguments in
    pieces), and the last non-empty finish reason of each choice wins.
    """

    def __init__(self) -> None:
        self._id = ""
        self._model = ""
        self._created = 0
        self._system_fingerprint: str | None = None
        self._usage: Any = None
        self._choices: dict[int, dict[str, Any]] = {}

    def add(self, chunk: ChatCompletionChunk) -> None:
        """Merge one chunk into the running snapshot."""
        self._id = chunk.id or self._id
        self._model = chunk.model or self._model
        self._created = chunk.created or self._created
        self._system_fingerprint = chunk.system_fingerprint or self._system_fingerprint
        if chunk.usage is not None:
            self._usage = chunk.usage

        for choice in chunk.choices or []:
            state = self._choices.setdefault(
                choice.index,
                {"content": None, "tool_calls": {}, "finish_reason": None},
            )
            delta = choice.delta
            if delta.content:
                state["content"] = (state["content"] or "") + delta.content
            for call in delta.tool_calls or []:
                entry = state["tool_calls"].setdefault(
                    call.index,
                    {"id": "", "type": "function", "function": {"name": "", "arguments": ""}},
                )
                if call.id:
                    entry["id"] = call.id
                if call.function is not None:
                    if call.function.name:
                        entry["function"]["name"] = call.function.name
                    if call.function.arguments:
                        entry["function"]["arguments"] += call.function.arguments
            if choice.finish_reason:
                state["finish_reason"] = choice.finish_reason

    def final_completion(self) -> ChatCompletion:
        """Return the completion assembled from every chunk seen so far."""
        choices: list[dict[str, Any]] = []
        for index in sorted(self._choices):
            state = self._choices[index]
            message: dict[str, Any] = {"role": "assistant", "content": state["content"]}
            if state["tool_calls"]:
                message["tool_calls"] = [
                    state["tool_calls"][i] for i in sorted(state["tool_calls"])
                ]
            choices.append(
                {
                    "index": index,
                    "finish_reason": state["finish_reason"],
                    "message": message,
                    "logprobs": None,
                }
            )
        return ChatCompletion.model_construct(
            id=self._id,
            object="chat.completion",
            created=self._created,
            model=self._model,
            choices=choices,
            usage=self._usage,
            system_fingerprint=self._system_fingerprint,
        )


async def reduce_stream(
    chunks: AsyncIterable[ChatCompletionChunk],
    streaming_callback: StreamingCallback,
    json_mode: bool = False,
    final_completion: Callable[[], Awaitable[ChatCompletion]] | None = None,
) -> GenerateResponse:
    """Feed a chunk stream to *streaming_callback*, then return the result.

    Chunks are consumed strictly in order.  For every choice of every chunk
    the callback is invoked synchronously, before the next chunk is read.
    The callback content is cumulative framing of the same completion as
    the returned response, not a disjoint part of it.

    Args:
        chunks: The async chunk sequence from the transport.
        streaming_callback: Receives one ``GenerateResponseChunk`` per
            chunk choice.
        json_mode: Decode the final message content as JSON.
        final_completion: Optional coroutine factory returning the
            transport's own final completion.  When omitted, the completion
            is assembled from the chunks.

    Returns:
        The final completion converted like the non-streaming path.
    """
    accumulator = ChatCompletionAccumulator()
    chunk_count = 0
    async for chunk in chunks:
        chunk_count += 1
        accumulator.add(chunk)
        for choice in chunk.choices or []:
            candidate = from_openai_chunk_choice(choice)
            streaming_callback(
                GenerateResponseChunk(
                    index=candidate.index,
                    content=candidate.message.content,
                )
            )

    if final_completion is not None:
        completion = await final_completion()
    else:
        completion = accumulator.final_completion()
    logger.debug("Stream finished after %d chunk(s)", chunk_count)
    return from_openai_completion(completion, json_mode)
