"""gptbridge error hierarchy.

All custom exceptions inherit from GPTBridgeError, enabling callers
to catch the base class for blanket error handling or specific
subclasses for targeted recovery.
"""


class GPTBridgeError(Exception):
    """Base exception for all gptbridge errors."""


class ConfigError(GPTBridgeError):
    """Raised when plugin settings loading or validation fails."""


class UnsupportedModelError(GPTBridgeError):
    """Raised when a model name is not in the capability registry."""


class InvalidRequestError(GPTBridgeError):
    """Raised when a host request payload fails validation."""


class UnmappableRoleError(GPTBridgeError):
    """Raised when a message role has no OpenAI counterpart."""


class UnsupportedPartError(GPTBridgeError):
    """Raised when a message part cannot be sent for its message role."""


class UnsupportedOutputFormatError(GPTBridgeError):
    """Raised when the requested output format is not allowed for the model."""


class MalformedToolCallError(GPTBridgeError):
    """Raised when an OpenAI tool call carries no function payload."""


class InvalidJsonOutputError(GPTBridgeError):
    """Raised when JSON-mode message content is not valid JSON."""


class ProviderError(GPTBridgeError):
    """Raised when the OpenAI transport fails."""
