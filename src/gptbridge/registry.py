"""Capability registry of the supported OpenAI chat models.

The registry is a read-only mapping built at import time.  Lookups are
exact-match on the model name; an unknown name is always an error because
request building gates tool use and output formats on these flags.
"""

from __future__ import annotations

from types import MappingProxyType

from pydantic import BaseModel

from gptbridge.errors import UnsupportedModelError
from gptbridge.models import OutputFormat

MODEL_NAMESPACE = "openai"

# Versions known to accept the ``response_format`` request directive.
MODELS_SUPPORTING_RESPONSE_FORMAT: frozenset[str] = frozenset(
    {
        "gpt-4o",
        "gpt-4o-2024-05-13",
        "gpt-4o-mini",
        "gpt-4o-mini-2024-07-18",
        "gpt-4-turbo",
        "gpt-4-turbo-2024-04-09",
        "gpt-4-turbo-preview",
        "gpt-4-0125-preview",
        "gpt-4-1106-preview",
        "gpt-3.5-turbo-0125",
        "gpt-3.5-turbo",
        "gpt-3.5-turbo-1106",
    }
)


class ModelSupports(BaseModel):
    """Feature flags of a model.

    Attributes:
        multiturn: Accepts conversation history.
        tools: Accepts tool definitions.
        media: Accepts image parts in user messages.
        system_role: Accepts system messages.
        output: Output formats the model can be asked for.
    """

    multiturn: bool = True
    tools: bool = False
    media: bool = False
    system_role: bool = True
    output: frozenset[OutputFormat] = frozenset({OutputFormat.TEXT})

    model_config = {"frozen": True}


class ModelInfo(BaseModel):
    """Static capability descriptor of a supported model.

    Attributes:
        name: Registry key (e.g. ``"gpt-4o"``).
        versions: Accepted version aliases, in preference order.
        label: Human-readable label.
        supports: Feature flags.
        version: Default version sent as the request ``model``, if any.
    """

    name: str
    versions: tuple[str, ...]
    label: str
    supports: ModelSupports
    version: str | None = None

    model_config = {"frozen": True}

    @property
    def qualified_name(self) -> str:
        """Name under which the model is registered (``openai/<name>``)."""
        return qualified_name(self.name)


_TEXT_AND_JSON = frozenset({OutputFormat.TEXT, OutputFormat.JSON})
_TEXT_ONLY = frozenset({OutputFormat.TEXT})

GPT_4O = ModelInfo(
    name="gpt-4o",
    versions=("gpt-4o", "gpt-4o-2024-05-13"),
    label="OpenAI - GPT-4o",
    supports=ModelSupports(tools=True, media=True, output=_TEXT_AND_JSON),
)

GPT_4O_MINI = ModelInfo(
    name="gpt-4o-mini",
    versions=("gpt-4o-mini", "gpt-4o-mini-2024-07-18"),
    label="OpenAI - GPT-4o mini",
    supports=ModelSupports(tools=True, media=True, output=_TEXT_AND_JSON),
)

GPT_4_TURBO = ModelInfo(
    name="gpt-4-turbo",
    versions=(
        "gpt-4-turbo",
        "gpt-4-turbo-2024-04-09",
        "gpt-4-turbo-preview",
        "gpt-4-0125-preview",
        "gpt-4-1106-preview",
    ),
    label="OpenAI - GPT-4 Turbo",
    supports=ModelSupports(tools=True, media=True, output=_TEXT_AND_JSON),
)

GPT_4_VISION = ModelInfo(
    name="gpt-4-vision",
    versions=("gpt-4-vision-preview", "gpt-4-1106-vision-preview"),
    label="OpenAI - GPT-4 Vision",
    supports=ModelSupports(tools=False, media=True, output=_TEXT_ONLY),
)

GPT_4 = ModelInfo(
    name="gpt-4",
    versions=("gpt-4", "gpt-4-0613", "gpt-4-32k", "gpt-4-32k-0613"),
    label="OpenAI - GPT-4",
    supports=ModelSupports(tools=True, media=False, output=_TEXT_ONLY),
)

GPT_35_TURBO = ModelInfo(
    name="gpt-3.5-turbo",
    versions=("gpt-3.5-turbo-0125", "gpt-3.5-turbo", "gpt-3.5-turbo-1106"),
    label="OpenAI - GPT-3.5 Turbo",
    supports=ModelSupports(tools=True, media=False, output=_TEXT_AND_JSON),
)

SUPPORTED_GPT_MODELS: MappingProxyType[str, ModelInfo] = MappingProxyType(
    {
        info.name: info
        for info in (
            GPT_4O,
            GPT_4O_MINI,
            GPT_4_TURBO,
            GPT_4_VISION,
            GPT_4,
            GPT_35_TURBO,
        )
    }
)


def lookup(model_name: str) -> ModelInfo:
    """Return the capability descriptor for *model_name*.

    Args:
        model_name: Registry key such as ``"gpt-4o"``.

    Returns:
        The matching ``ModelInfo``.

    Raises:
        UnsupportedModelError: If the name is not registered.
    """
    try:
        return SUPPORTED_GPT_MODELS[model_name]
    except KeyError:
        raise UnsupportedModelError(f"Unsupported model: {model_name}") from None


def list_models() -> list[str]:
    """Return the supported model names in registry order."""
    return list(SUPPORTED_GPT_MODELS)


def qualified_name(model_name: str) -> str:
    """Return the namespaced name of a model (``openai/<name>``)."""
    return f"{MODEL_NAMESPACE}/{model_name}"
