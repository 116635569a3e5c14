"""Pydantic v2 models for prompts and resolved variable bindings.

Defines the data passed between the prompt reader, the resolver and the tree
materializer.  ``PromptSet`` mirrors the layout of ``prompts.toml``::

    [[prompt]]
    name = "project"
    prompt = "Project name"
    required = true
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Prompt definitions
# ---------------------------------------------------------------------------

class Prompt(BaseModel):
    """A single variable requested from the user."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Variable name bound by this prompt")
    prompt: str = Field(..., description="Question text shown to the user")
    required: bool = Field(default=False, description="Reject empty answers")
    default: str = Field(default="", description="Default answer; empty means none")
    choices: list[str] = Field(
        default_factory=list, description="Closed set of allowed answers, if any"
    )

    @property
    def label(self) -> str:
        return self.prompt

    @property
    def is_choice(self) -> bool:
        return bool(self.choices)


class PromptSet(BaseModel):
    """Ordered prompts declared by a template.

    Prompts are asked in declaration order.  Names must be unique.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompts: list[Prompt] = Field(default_factory=list, alias="prompt")

    @field_validator("prompts")
    @classmethod
    def _unique_names(cls, prompts: list[Prompt]) -> list[Prompt]:
        seen: set[str] = set()
        for p in prompts:
            if p.name in seen:
                raise ValueError(f"duplicate prompt name: {p.name}")
            seen.add(p.name)
        return prompts

    @classmethod
    def of(cls, *prompts: Prompt) -> "PromptSet":
        """Build a prompt set directly from ``Prompt`` instances."""
        return cls.model_validate({"prompt": list(prompts)})

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.prompts]


# ---------------------------------------------------------------------------
# Resolved values
# ---------------------------------------------------------------------------

class VariableBindings(Mapping[str, str]):
    """Immutable ``name -> value`` mapping used for substitution.

    Layers are combined with :meth:`merged`, which returns a new instance and
    lets the right-hand side win.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, str] = {
            str(k): str(v) for k, v in (values or {}).items()
        }

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableBindings({self._values!r})"

    def merged(self, other: Mapping[str, Any]) -> "VariableBindings":
        """Return a new binding set with *other* layered on top."""
        return VariableBindings({**self._values, **other})

    def as_dict(self) -> dict[str, str]:
        """Return a plain mutable copy, e.g. for a template context."""
        return dict(self._values)
