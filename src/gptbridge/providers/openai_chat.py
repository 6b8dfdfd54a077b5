"""OpenAI chat-completion provider.

Runs a generic request against one registered GPT model through
``AsyncOpenAI``.  Request and response translation live in
:mod:`gptbridge.request_builder` and :mod:`gptbridge.response_reducer`;
this module only owns the client and the call itself.
"""

from __future__ import annotations

from typing import Any

from openai import AsyncOpenAI, OpenAIError

from gptbridge.errors import ProviderError
from gptbridge.logging import get_logger
from gptbridge.models import GenerateRequest, GenerateResponse
from gptbridge.providers.chat import ChatProvider
from gptbridge.registry import ModelInfo, lookup
from gptbridge.request_builder import to_openai_request_body
from gptbridge.response_reducer import (
    StreamingCallback,
    from_openai_completion,
    reduce_stream,
)

logger = get_logger("providers")


class OpenAIChatProvider(ChatProvider):
    """Chat provider for the OpenAI Chat Completions API.

    The model name is checked against the capability registry on
    construction, so an unsupported model fails before any request is made.

    Implements async context manager protocol for automatic cleanup::

        async with OpenAIChatProvider("gpt-4o") as provider:
            response = await provider.generate(request)
        # Owned client closed on exit
    """

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the OpenAI chat provider.

        Args:
            model_name: Registry key of the model (e.g. ``"gpt-4o"``).
            api_key: OpenAI API key. The SDK falls back to ``OPENAI_API_KEY``.
            base_url: Optional custom base URL (proxies, gateways).
            organization: Optional OpenAI organization id.
            client: Pre-configured async client. If provided, the caller is
                responsible for closing it.

        Raises:
            UnsupportedModelError: If *model_name* is not registered.
        """
        self._model_info = lookup(model_name)
        self._api_key = api_key
        self._base_url = base_url
        self._organization = organization
        self._client = client
        self._owns_client = client is None

    @property
    def model_info(self) -> ModelInfo:
        """Capability descriptor of the model served by this provider."""
        return self._model_info

    def _get_client(self) -> Any:
        """Lazily create and return the ``AsyncOpenAI`` client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                organization=self._organization,
            )
        return self._client

    def build_body(self, request: GenerateRequest) -> dict[str, Any]:
        """Translate *request* into the chat-completion request body."""
        return to_openai_request_body(self._model_info.name, request)

    async def generate(
        self,
        request: GenerateRequest,
        streaming_callback: StreamingCallback | None = None,
    ) -> GenerateResponse:
        """Send a chat-completion request and translate the answer.

        With a *streaming_callback* the request is streamed: each chunk is
        delivered to the callback and the final completion is assembled
        from the chunks.

        Args:
            request: The generic request.
            streaming_callback: Optional callback for partial content.

        Returns:
            The generic response.

        Raises:
            GPTBridgeError: Translation errors, unchanged.
            ProviderError: If the OpenAI SDK call fails.
        """
        body = self.build_body(request)
        client = self._get_client()
        json_mode = request.json_mode

        try:
            if streaming_callback is not None:
                stream = await client.chat.completions.create(
                    **body,
                    stream=True,
                    stream_options={"include_usage": True},
                )
                try:
                    return await reduce_stream(stream, streaming_callback, json_mode)
                finally:
                    await stream.close()
            completion = await client.chat.completions.create(**body)
        except OpenAIError as exc:
            logger.error("Chat completion failed for %s: %s", body["model"], exc)
            raise ProviderError(f"Chat completion failed: {exc}") from exc

        logger.debug(
            "Chat completion for %s returned %d choice(s)",
            body["model"],
            len(completion.choices),
        )
        return from_openai_completion(completion, json_mode)

    async def close(self) -> None:
        """Close the client if this provider created it.

        User-supplied clients are NOT closed.
        """
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None
