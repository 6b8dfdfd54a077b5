"""Chat provider abstraction for generic generation requests."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from gptbridge.models import GenerateRequest, GenerateResponse
from gptbridge.response_reducer import StreamingCallback


class ChatProvider(ABC):
    """Abstract base class for chat-completion providers.

    Implementations translate a generic request for one model, call the
    vendor API and translate the answer back.  When a streaming callback
    is given, partial content is delivered to it before the final response
    is returned.
    """

    @abstractmethod
    async def generate(
        self,
        request: GenerateRequest,
        streaming_callback: StreamingCallback | None = None,
    ) -> GenerateResponse:
        """Run a generation request.

        Args:
            request: The generic request.
            streaming_callback: Optional callback receiving partial content
                as it arrives.

        Returns:
            The generic response.

        Raises:
            GPTBridgeError: If translation or the API call fails.
        """

    async def close(self) -> None:
        """Clean up provider resources.

        Default implementation does nothing. Providers that need cleanup
        should override this method.
        """
        pass

    async def __aenter__(self) -> "ChatProvider":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager, cleaning up resources."""
        await self.close()
