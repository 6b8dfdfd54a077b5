"""Azure OpenAI chat provider using Entra ID bearer token auth.

Uses ``AsyncAzureOpenAI`` with ``get_bearer_token_provider`` for
authentication.  Translation and capability gating are inherited from
:class:`~gptbridge.providers.openai_chat.OpenAIChatProvider`; only the
client and the deployment name differ.
"""

from __future__ import annotations

import os
from typing import Any

from gptbridge.errors import ProviderError
from gptbridge.logging import get_logger
from gptbridge.models import GenerateRequest
from gptbridge.providers.openai_chat import OpenAIChatProvider

logger = get_logger("providers")

_AZURE_COGNITIVE_SCOPE = "https://cognitiveservices.azure.com/.default"
_DEFAULT_API_VERSION = "2024-12-01-preview"


class AzureChatProvider(OpenAIChatProvider):
    """Chat provider for GPT models deployed on Azure OpenAI.

    Azure addresses models by deployment name, so the request ``model`` is
    replaced with the deployment after the registry gates (tool support,
    response-format allow-list) have been applied to the model version.

    Implements async context manager protocol for automatic cleanup::

        async with AzureChatProvider("gpt-4o", deployment="my-gpt4o") as provider:
            response = await provider.generate(request)
        # Automatic cleanup on exit
    """

    def __init__(
        self,
        model_name: str,
        azure_endpoint: str | None = None,
        deployment: str | None = None,
        credential: Any | None = None,
        api_version: str = _DEFAULT_API_VERSION,
        client: Any | None = None,
    ) -> None:
        """Initialize the Azure chat provider.

        Args:
            model_name: Registry key of the model (e.g. ``"gpt-4o"``).
            azure_endpoint: Azure OpenAI endpoint URL
                (e.g. ``https://<resource>.openai.azure.com``).
                Falls back to the ``AZURE_OPENAI_ENDPOINT`` env var.
            deployment: Deployment name sent as the request ``model``.
                Defaults to the resolved model version.
            credential: Azure credential (defaults to ``DefaultAzureCredential``).
                If provided, the caller is responsible for closing it.
            api_version: Azure OpenAI API version.
            client: Pre-configured ``AsyncAzureOpenAI`` client.

        Raises:
            UnsupportedModelError: If *model_name* is not registered.
        """
        super().__init__(model_name, client=client)
        self._endpoint = azure_endpoint or os.environ.get("AZURE_OPENAI_ENDPOINT", "")
        self._deployment = deployment
        self._user_credential = credential
        self._owns_credential = credential is None
        self._api_version = api_version
        self._credential: Any | None = None

    def _get_client(self) -> Any:
        """Lazily create and return the Azure OpenAI client.

        Uses ``get_bearer_token_provider`` from ``azure.identity.aio`` to
        obtain Entra ID tokens for the Azure Cognitive Services scope.

        Returns:
            An ``AsyncAzureOpenAI`` instance.
        """
        if self._client is not None:
            return self._client

        from openai import AsyncAzureOpenAI

        try:
            from azure.identity.aio import (  # type: ignore[import-untyped,import-not-found]
                DefaultAzureCredential,
                get_bearer_token_provider,
            )
        except ImportError as exc:
            raise ImportError(
                "Azure Identity package is required for AzureChatProvider. "
                "Install with: pip install azure-identity"
            ) from exc

        if not self._endpoint:
            raise ProviderError(
                "No Azure OpenAI endpoint configured. "
                "Set AZURE_OPENAI_ENDPOINT or pass azure_endpoint."
            )

        if self._user_credential is not None:
            self._credential = self._user_credential
        else:
            self._credential = DefaultAzureCredential()

        token_provider = get_bearer_token_provider(
            self._credential,
            _AZURE_COGNITIVE_SCOPE,
        )

        self._client = AsyncAzureOpenAI(
            azure_ad_token_provider=token_provider,
            azure_endpoint=str(self._endpoint),
            api_version=self._api_version,
        )
        logger.info("Created Azure OpenAI client for %s", self._endpoint)
        return self._client

    def build_body(self, request: GenerateRequest) -> dict[str, Any]:
        """Translate *request*, then address the Azure deployment."""
        body = super().build_body(request)
        if self._deployment:
            body["model"] = self._deployment
        return body

    async def close(self) -> None:
        """Clean up resources.

        Closes the client and credentials owned by this provider.
        User-supplied credentials are NOT closed.
        """
        await super().close()
        if self._owns_credential and self._credential is not None:
            await self._credential.close()
            self._credential = None
