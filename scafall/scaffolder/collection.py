"""Detection of template collections.

A source is a *collection* when it has no prompt file of its own but at least
one immediate subdirectory does.  Each such subdirectory is an independent
template the user picks from.  Detection is one level deep only: a chosen
member that is itself laid out as a collection is scaffolded as an ordinary
template.
"""

from __future__ import annotations

from scafall.config import PROMPT_FILE
from scafall.source.tree import TemplateSource


def is_collection(
    source: TemplateSource, prompt_file: str = PROMPT_FILE
) -> tuple[bool, list[str]]:
    """Decide whether *source* is a collection.

    Returns:
        ``(True, names)`` with the qualifying subdirectory names in listing
        order, or ``(False, [])`` when the source has its own prompt file or
        no subdirectory qualifies.
    """
    if source.exists(prompt_file):
        return False, []

    names = [
        entry.name
        for entry in source.children()
        if entry.is_dir and source.exists(entry.path / prompt_file)
    ]
    return bool(names), names
