"""Scafall configuration.

Typed settings shared by the fetcher, resolver and materializer.  Uses a
Pydantic v2 model so values are validated at construction time and can be
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

PROMPT_FILE = "prompts.toml"
OVERRIDE_FILE = ".override.toml"

# Version-control and package-manager metadata never copied to the output.
IGNORED_DIRECTORIES: tuple[str, ...] = (".git", ".hg", ".svn", "node_modules")

DEFAULT_COLLECTION_PROMPT = "Choose a project template"


def _default_ignored_names() -> list[str]:
    return [PROMPT_FILE, OVERRIDE_FILE, *IGNORED_DIRECTORIES]


class ScaffoldConfig(BaseModel):
    """Global scaffolding configuration.

    Instances are typically created once by the CLI entry point (or by code
    embedding the engine) and handed to :class:`~scafall.Scaffolder`.
    """

    output_dir: Path | None = Field(default=None, description="Project directory to create")
    overrides: dict[str, str] = Field(
        default_factory=dict, description="Values that always win and skip prompting"
    )
    defaults: dict[str, str] = Field(
        default_factory=dict, description="Values pre-filled as interactive defaults"
    )
    reserved_names: list[str] = Field(
        default_factory=list, description="Variable names templates may not declare"
    )
    prompt_file: str = Field(default=PROMPT_FILE)
    override_file: str = Field(default=OVERRIDE_FILE)
    ignored_names: list[str] = Field(default_factory=_default_ignored_names)
    collection_prompt: str = Field(default=DEFAULT_COLLECTION_PROMPT)
    clone_depth: int = Field(default=1, ge=1, description="git clone --depth")
    git_timeout: int = Field(default=300, ge=1, description="git clone timeout in seconds")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            SCAFALL_OUTPUT_DIR, SCAFALL_OVERRIDES (``k=v,k=v``),
            SCAFALL_RESERVED (comma separated), SCAFALL_CLONE_DEPTH,
            SCAFALL_GIT_TIMEOUT.

        Raises:
            ValueError: If a variable holds a malformed value.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SCAFALL_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["SCAFALL_OUTPUT_DIR"])
        if os.environ.get("SCAFALL_OVERRIDES"):
            kwargs["overrides"] = parse_key_values(os.environ["SCAFALL_OVERRIDES"].split(","))
        if os.environ.get("SCAFALL_RESERVED"):
            kwargs["reserved_names"] = [
                n.strip() for n in os.environ["SCAFALL_RESERVED"].split(",") if n.strip()
            ]
        if os.environ.get("SCAFALL_CLONE_DEPTH"):
            kwargs["clone_depth"] = _int_env("SCAFALL_CLONE_DEPTH")
        if os.environ.get("SCAFALL_GIT_TIMEOUT"):
            kwargs["git_timeout"] = _int_env("SCAFALL_GIT_TIMEOUT")
        return cls(**kwargs)


def parse_key_values(pairs: list[str]) -> dict[str, str]:
    """Parse ``["a=1", "b=2"]`` into ``{"a": "1", "b": "2"}``.

    Blank items are skipped.  Raises ``ValueError`` for an item without ``=``
    or with an empty key.
    """
    result: dict[str, str] = {}
    for item in pairs:
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected key=value, got: {item!r}")
        result[key] = value.strip()
    return result


def _int_env(name: str) -> int:
    """Read a positive integer from the environment variable *name*.

    Raises ``ValueError`` naming the variable when the value is not a
    positive integer.
    """
    raw = os.environ[name].strip()
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a positive integer, got: {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got: {raw!r}")
    return value
