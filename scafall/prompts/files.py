"""Decoding of ``prompts.toml`` and ``.override.toml``.

Both files are TOML.  The prompt file holds an array of ``[[prompt]]``
tables; the override file is a flat table of string values::

    # .override.toml
    project = "demo"
    license = "MIT"
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from scafall.errors import ConfigFormatError, ReservedNameError
from scafall.models import PromptSet
from scafall.source.tree import TemplateSource


def _load_toml(source: TemplateSource, name: str) -> dict[str, Any]:
    location = source.root / name
    try:
        text = source.read_bytes(name).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigFormatError(location, f"not valid UTF-8 ({exc})") from exc
    except OSError as exc:
        raise ConfigFormatError(location, f"cannot read file ({exc})") from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFormatError(location, str(exc)) from exc


def read_prompt_file(source: TemplateSource, name: str) -> PromptSet:
    """Read the prompt declarations at the root of *source*.

    An empty file yields an empty ``PromptSet``.

    Raises:
        ConfigFormatError: If the file is not TOML, a record lacks ``name`` or
            ``prompt``, or two prompts share a name.
    """
    data = _load_toml(source, name)
    try:
        return PromptSet.model_validate(data)
    except ValidationError as exc:
        raise ConfigFormatError(source.root / name, _summarise(exc)) from exc


def read_overrides(source: TemplateSource, name: str) -> dict[str, str]:
    """Read the override file at the root of *source*.

    Returns an empty mapping when the file does not exist.

    Raises:
        ConfigFormatError: If the file is not a flat table of strings.
    """
    if not source.exists(name):
        return {}
    data = _load_toml(source, name)
    for key, value in data.items():
        if not isinstance(value, str):
            raise ConfigFormatError(
                source.root / name,
                f"value for '{key}' must be a string, got {type(value).__name__}",
            )
    return dict(data)


def check_reserved(
    names: Iterable[str],
    reserved: Iterable[str],
    path: str = "",
) -> None:
    """Raise ``ReservedNameError`` for the first name found in *reserved*."""
    reserved_set = set(reserved)
    for name in names:
        if name in reserved_set:
            raise ReservedNameError(name, path)


def _summarise(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', '')}" if loc else err.get("msg", ""))
    return "; ".join(parts)
