"""Model definitions handed to a host generation framework.

A host registers each supported model under ``openai/<name>`` together with
its capability descriptor, its config schema and a runner coroutine.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from openai import AsyncOpenAI
from pydantic import ValidationError

from gptbridge.config import PluginSettings, load_settings
from gptbridge.errors import GPTBridgeError, InvalidRequestError, UnmappableRoleError
from gptbridge.logging import get_logger
from gptbridge.models import GenerateRequest, GenerateResponse, OpenAIConfig
from gptbridge.providers.chat import ChatProvider
from gptbridge.providers.openai_chat import OpenAIChatProvider
from gptbridge.registry import ModelInfo, lookup, qualified_name
from gptbridge.response_reducer import StreamingCallback

logger = get_logger("plugin")

Runner = Callable[[GenerateRequest, StreamingCallback | None], Awaitable[GenerateResponse]]


@dataclass(frozen=True)
class ModelAction:
    """A model ready for registration with a host framework.

    Attributes:
        name: Namespaced model name (``openai/<name>``).
        info: Capability descriptor.
        config_schema: Model of the generation options the model accepts.
        runner: Coroutine function executing a request.
    """

    name: str
    info: ModelInfo
    config_schema: type[OpenAIConfig]
    runner: Runner

    async def __call__(
        self,
        request: GenerateRequest | dict[str, Any],
        streaming_callback: StreamingCallback | None = None,
    ) -> GenerateResponse:
        """Run *request*, validating a raw host payload first.

        Raises:
            UnmappableRoleError: If a message role is not a known role.
            InvalidRequestError: If the payload is otherwise invalid.
        """
        if not isinstance(request, GenerateRequest):
            try:
                request = GenerateRequest.model_validate(request)
            except ValidationError as exc:
                raise _request_error(exc) from exc
        return await self.runner(request, streaming_callback)


def _request_error(exc: ValidationError) -> GPTBridgeError:
    for error in exc.errors():
        if error["loc"][-1:] == ("role",):
            return UnmappableRoleError(
                f"role {error['input']} doesn't map to an OpenAI role."
            )
    return InvalidRequestError(f"Invalid generate request: {exc}")


def gpt_model(
    name: str,
    client: Any | None = None,
    provider: ChatProvider | None = None,
) -> ModelAction:
    """Define one GPT model.

    Args:
        name: Registry key of the model (e.g. ``"gpt-4o"``).
        client: Async OpenAI client used when no *provider* is given.
        provider: Provider serving the model.

    Returns:
        The model definition.

    Raises:
        UnsupportedModelError: If *name* is not registered.
    """
    info = lookup(name)
    if provider is None:
        provider = OpenAIChatProvider(name, client=client)
    return ModelAction(
        name=qualified_name(name),
        info=info,
        config_schema=OpenAIConfig,
        runner=provider.generate,
    )


def _provider_for(name: str, settings: PluginSettings, client: Any | None) -> ChatProvider:
    if settings.use_azure:
        from gptbridge.providers.azure_chat import AzureChatProvider

        return AzureChatProvider(
            name,
            azure_endpoint=settings.azure_endpoint,
            deployment=settings.azure_deployments.get(name),
            client=client,
        )
    return OpenAIChatProvider(name, client=client)


def openai_plugin(
    settings: PluginSettings | None = None,
    client: Any | None = None,
) -> list[ModelAction]:
    """Define every model listed in the plugin settings.

    For the OpenAI API a single client is shared by all models; it is
    created from the settings when *client* is not given.

    Args:
        settings: Plugin settings (default: :func:`load_settings`).
        client: Optional pre-configured async client.

    Returns:
        One ``ModelAction`` per configured model, in settings order.

    Raises:
        ConfigError: If settings have to be loaded and are invalid.
    """
    if settings is None:
        settings = load_settings()
    if client is None and not settings.use_azure:
        client = AsyncOpenAI(
            api_key=settings.api_key.get_secret_value() if settings.api_key else None,
            base_url=settings.base_url,
            organization=settings.organization,
        )

    actions = [
        gpt_model(name, provider=_provider_for(name, settings, client))
        for name in settings.models
    ]
    logger.info("Defined %d OpenAI model(s)", len(actions))
    return actions
