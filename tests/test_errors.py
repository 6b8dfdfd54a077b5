"""Tests for gptbridge.errors — error hierarchy."""

from __future__ import annotations

import pytest

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

_ALL_ERRORS = (
    ConfigError,
    InvalidRequestError,
    UnsupportedModelError,
    UnmappableRoleError,
    UnsupportedPartError,
    UnsupportedOutputFormatError,
    MalformedToolCallError,
    InvalidJsonOutputError,
    ProviderError,
)


class TestErrorHierarchy:
    """Verify the gptbridge error inheritance tree."""

    def test_gptbridge_error_is_base(self) -> None:
        """GPTBridgeError is a subclass of Exception."""
        assert issubclass(GPTBridgeError, Exception)

    def test_all_errors_inherit_from_base(self) -> None:
        """All custom errors inherit from GPTBridgeError."""
        for cls in _ALL_ERRORS:
            assert issubclass(cls, GPTBridgeError), f"{cls.__name__} missing base"

    def test_catch_base_catches_all(self) -> None:
        """try/except GPTBridgeError catches any subclass."""
        for cls in _ALL_ERRORS:
            with pytest.raises(GPTBridgeError):
                raise cls("test")

    def test_specific_errors_distinguishable(self) -> None:
        """Translation errors are not transport or config errors."""
        assert not issubclass(UnsupportedPartError, ProviderError)
        assert not issubclass(ProviderError, UnsupportedPartError)
        assert not issubclass(MalformedToolCallError, InvalidJsonOutputError)
        assert not issubclass(ConfigError, UnsupportedModelError)

    def test_message_preserved(self) -> None:
        """Error message is accessible via str()."""
        err = UnsupportedModelError("Unsupported model: gpt-5")
        assert str(err) == "Unsupported model: gpt-5"
