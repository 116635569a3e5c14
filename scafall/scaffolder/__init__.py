"""Scafall scaffolder -- turns a template source into a project directory.

This package detects collections, substitutes variables with Jinja2 and
writes the resulting tree.  The orchestrator ties those steps to prompt
resolution.

Quick usage::

    from scafall.scaffolder import Scaffolder

    scaffolder = Scaffolder(overrides={"project": "demo"})
    result = await scaffolder.scaffold("https://github.com/org/template", "./demo")
"""

from scafall.scaffolder.collection import is_collection
from scafall.scaffolder.engine import TemplateEngine
from scafall.scaffolder.materializer import (
    DEFAULT_IGNORED_NAMES,
    Materializer,
    PlannedEntry,
    plan_entries,
    sniff_text,
)
from scafall.scaffolder.orchestrator import (
    COLLECTION_CHOICE_VARIABLE,
    ScaffoldResult,
    ScaffoldState,
    Scaffolder,
    scaffold,
    scaffold_collection,
)

__all__ = [
    "COLLECTION_CHOICE_VARIABLE",
    "DEFAULT_IGNORED_NAMES",
    "Materializer",
    "PlannedEntry",
    "ScaffoldResult",
    "ScaffoldState",
    "Scaffolder",
    "TemplateEngine",
    "is_collection",
    "plan_entries",
    "scaffold",
    "scaffold_collection",
    "sniff_text",
]
