"""Interactive askers: how an unresolved prompt gets its answer.

The resolver only depends on the :class:`Asker` protocol.  ``RichAsker`` asks
on the terminal through ``rich.prompt``; ``DefaultsAsker`` never reads input
and accepts each prompt's default, which suits CI and scripted runs.
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.prompt import Prompt as RichPrompt

from scafall.errors import PromptError
from scafall.models import Prompt
from scafall.utils import console as default_console


class Asker(Protocol):
    """Returns one answer for *prompt*, or raises ``PromptError``."""

    def ask(self, prompt: Prompt, default: str) -> str: ...


class RichAsker:
    """Ask prompts on the terminal.

    Choice prompts only accept one of the listed values.  Required free-text
    prompts are re-asked until a non-empty answer is given.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def ask(self, prompt: Prompt, default: str) -> str:
        try:
            if prompt.is_choice:
                return self._ask_choice(prompt, default)
            return self._ask_text(prompt, default)
        except (EOFError, KeyboardInterrupt) as exc:
            raise PromptError(
                f"no answer given for '{prompt.name}'", name=prompt.name
            ) from exc

    def _ask_choice(self, prompt: Prompt, default: str) -> str:
        if default in prompt.choices:
            return RichPrompt.ask(
                prompt.label, choices=prompt.choices, default=default, console=self.console
            )
        return RichPrompt.ask(prompt.label, choices=prompt.choices, console=self.console)

    def _ask_text(self, prompt: Prompt, default: str) -> str:
        while True:
            if default:
                answer = RichPrompt.ask(prompt.label, default=default, console=self.console)
            else:
                answer = RichPrompt.ask(prompt.label, console=self.console)
            if answer or not prompt.required:
                return answer
            self.console.print("[prompt.invalid]please provide a non-empty value")


class DefaultsAsker:
    """Non-interactive asker that accepts every default.

    A required prompt without a default cannot be answered and raises
    ``PromptError``; a choice prompt without a usable default gets its first
    choice.
    """

    def ask(self, prompt: Prompt, default: str) -> str:
        if prompt.is_choice:
            return default if default in prompt.choices else prompt.choices[0]
        if prompt.required and not default:
            raise PromptError(
                f"'{prompt.name}' is required and has no default", name=prompt.name
            )
        return default
