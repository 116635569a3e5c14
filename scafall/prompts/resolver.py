"""Layered resolution of prompt values.

Bindings are built from four layers, lowest priority first:

1. the interactive answer (or the accepted default) -- only for prompts no
   higher layer resolves;
2. caller defaults -- only pre-fill the interactive default;
3. values from the template's override file;
4. caller overrides -- always win.

Each layer is a pure function from ``(PromptSet, VariableBindings)`` to a new
``VariableBindings``; nothing is mutated in place.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from functools import reduce

from scafall.errors import PromptError
from scafall.models import Prompt, PromptSet, VariableBindings
from scafall.prompts.asker import Asker
from scafall.prompts.files import check_reserved

Layer = Callable[[PromptSet, VariableBindings], VariableBindings]


def overlay(values: Mapping[str, str]) -> Layer:
    """A layer that binds *values* on top of whatever is already bound."""

    def _apply(prompt_set: PromptSet, bound: VariableBindings) -> VariableBindings:
        return bound.merged(values)

    return _apply


class PromptResolver:
    """Resolves a ``PromptSet`` into ``VariableBindings``.

    Attributes:
        asker: Answers prompts that no override resolves.
        reserved_names: Names that neither prompts nor override files may use.
    """

    def __init__(self, asker: Asker, reserved_names: Iterable[str] = ()) -> None:
        self.asker = asker
        self.reserved_names = frozenset(reserved_names)

    def resolve(
        self,
        prompt_set: PromptSet,
        file_overrides: Mapping[str, str] | None = None,
        caller_overrides: Mapping[str, str] | None = None,
        caller_defaults: Mapping[str, str] | None = None,
        *,
        prompt_path: str = "",
        override_path: str = "",
    ) -> VariableBindings:
        """Resolve every prompt in declaration order.

        Args:
            prompt_set: Prompts declared by the template.
            file_overrides: Values read from the template's override file.
            caller_overrides: Values supplied by the caller; highest priority.
            caller_defaults: Preferred interactive defaults, keyed by name.
            prompt_path: Location of the prompt file, for error messages.
            override_path: Location of the override file, for error messages.

        Returns:
            The merged bindings.  Override values whose names no prompt
            declares are bound as well.

        Raises:
            ReservedNameError: Before any prompting, if a prompt or override
                file key is a reserved name.
            PromptError: If the asker fails or returns an unusable answer.
        """
        file_overrides = dict(file_overrides or {})
        caller_overrides = dict(caller_overrides or {})
        caller_defaults = dict(caller_defaults or {})

        check_reserved(prompt_set.names, self.reserved_names, prompt_path)
        check_reserved(file_overrides, self.reserved_names, override_path)

        layers: list[Layer] = [overlay(file_overrides), overlay(caller_overrides)]
        fixed = reduce(lambda bound, layer: layer(prompt_set, bound), layers, VariableBindings())

        answers: dict[str, str] = {}
        for prompt in prompt_set.prompts:
            if prompt.name in fixed:
                continue
            default = caller_defaults.get(prompt.name, prompt.default)
            answers[prompt.name] = self._ask(prompt, default)

        return VariableBindings(answers).merged(fixed)

    def _ask(self, prompt: Prompt, default: str) -> str:
        answer = self.asker.ask(prompt, default)
        if prompt.is_choice and answer not in prompt.choices:
            raise PromptError(
                f"'{answer}' is not a valid choice for '{prompt.name}' "
                f"(expected one of: {', '.join(prompt.choices)})",
                name=prompt.name,
            )
        if prompt.required and not answer:
            raise PromptError(f"'{prompt.name}' requires a non-empty value", name=prompt.name)
        return answer
