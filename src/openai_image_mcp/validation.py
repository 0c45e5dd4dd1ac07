"""Table-driven checks for the options each image model accepts.

Every table is keyed by ``(model, mode)``. Supporting a new model or a new
value is a change to the tables below, not to the checking code.
"""

import os
from typing import Any, Dict, FrozenSet, Mapping, Tuple

from openai_image_mcp.errors import InvalidArgumentError
from openai_image_mcp.models import (
    CURRENT_MODEL,
    EditOptions,
    GenerationOptions,
    LegacyImageOptions,
)

GENERATE = "generate"
EDIT = "edit"

_CURRENT_QUALITY = frozenset({"auto", "high", "medium", "low"})
_CURRENT_SIZE = frozenset({"1024x1024", "1536x1024", "1024x1536", "auto"})
_LEGACY_QUALITY = frozenset({"hd", "standard"})
_LEGACY_STYLE = frozenset({"vivid", "natural"})

OPTION_TABLES: Dict[Tuple[str, str], Dict[str, FrozenSet[str]]] = {
    ("dall-e-2", GENERATE): {
        "quality": _LEGACY_QUALITY,
        "size": frozenset({"256x256", "512x512", "1024x1024"}),
        "style": _LEGACY_STYLE,
    },
    ("dall-e-3", GENERATE): {
        "quality": _LEGACY_QUALITY,
        "size": frozenset({"1024x1024", "1792x1024", "1024x1792"}),
        "style": _LEGACY_STYLE,
    },
    (CURRENT_MODEL, GENERATE): {
        "quality": _CURRENT_QUALITY,
        "size": _CURRENT_SIZE,
        "background": frozenset({"transparent", "opaque", "auto"}),
        "moderation": frozenset({"low", "auto"}),
        "output_format": frozenset({"png", "jpeg", "webp"}),
    },
    (CURRENT_MODEL, EDIT): {
        "quality": _CURRENT_QUALITY,
        "size": _CURRENT_SIZE,
    },
}

INTEGER_RANGES: Dict[Tuple[str, str], Dict[str, Tuple[int, int]]] = {
    (CURRENT_MODEL, GENERATE): {"output_compression": (0, 100)},
}

# Formats that can carry an alpha channel.
TRANSPARENT_FORMATS = frozenset({"png", "webp"})


def _check_integer(name: str, value: Any, low: int, high: int) -> int:
    if isinstance(value, bool):
        raise InvalidArgumentError(name, value, "expected an integer")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidArgumentError(name, value, "expected an integer") from None
    if not isinstance(value, int):
        raise InvalidArgumentError(name, value, "expected an integer")
    if not low <= value <= high:
        raise InvalidArgumentError(name, value, f"must be between {low} and {high}")
    return value


def validate_options(model: str, mode: str, raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Check raw caller options against the table for ``(model, mode)``.

    Returns a new dict holding only checked values. Raises
    ``InvalidArgumentError`` naming the first offending field.
    """
    table = OPTION_TABLES.get((model, mode))
    if table is None:
        raise InvalidArgumentError("model", model)
    ranges = INTEGER_RANGES.get((model, mode), {})
    checked: Dict[str, Any] = {}
    for name, value in raw.items():
        if name in table:
            if not isinstance(value, str) or value not in table[name]:
                raise InvalidArgumentError(name, value)
            checked[name] = value
        elif name in ranges:
            checked[name] = _check_integer(name, value, *ranges[name])
        else:
            raise InvalidArgumentError(name, value, "unknown option")
    return checked


def check_output_path(path: str) -> str:
    if not path or not os.path.isabs(path):
        raise InvalidArgumentError("output_path", path, "must be an absolute path")
    return path


def validate_legacy_options(model: str, raw: Mapping[str, Any]) -> LegacyImageOptions:
    return LegacyImageOptions(**validate_options(model, GENERATE, raw))


def validate_generation_options(raw: Mapping[str, Any]) -> GenerationOptions:
    options = GenerationOptions(**validate_options(CURRENT_MODEL, GENERATE, raw))
    if (
        options.background == "transparent"
        and options.output_format not in TRANSPARENT_FORMATS
    ):
        raise InvalidArgumentError(
            "background",
            options.background,
            f"requires output_format png or webp, got {options.output_format}",
        )
    return options


def validate_edit_options(raw: Mapping[str, Any]) -> EditOptions:
    return EditOptions(**validate_options(CURRENT_MODEL, EDIT, raw))
