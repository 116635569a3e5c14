"""Prompt declarations, overrides, and their resolution into bindings."""

from scafall.prompts.asker import Asker, DefaultsAsker, RichAsker
from scafall.prompts.files import check_reserved, read_overrides, read_prompt_file
from scafall.prompts.resolver import PromptResolver, overlay

__all__ = [
    "Asker",
    "DefaultsAsker",
    "PromptResolver",
    "RichAsker",
    "check_reserved",
    "overlay",
    "read_overrides",
    "read_prompt_file",
]
