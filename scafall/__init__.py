"""Scafall -- create new projects from project templates.

Templates live in local directories or git repositories.  A template's
``prompts.toml`` declares the variables it needs; values come from caller
overrides, the template's ``.override.toml``, or interactive prompts, and are
substituted into file contents and file/directory names.
"""

from scafall.config import ScaffoldConfig
from scafall.errors import (
    CollectionSelectionError,
    ConfigFormatError,
    FetchError,
    MaterializationIOError,
    PromptError,
    ReservedNameError,
    ScaffoldError,
    SubstitutionError,
    TargetExistsError,
)
from scafall.models import Prompt, PromptSet, VariableBindings
from scafall.scaffolder import (
    ScaffoldResult,
    ScaffoldState,
    Scaffolder,
    scaffold,
    scaffold_collection,
)

__version__ = "0.3.0"

__all__ = [
    "CollectionSelectionError",
    "ConfigFormatError",
    "FetchError",
    "MaterializationIOError",
    "Prompt",
    "PromptError",
    "PromptSet",
    "ReservedNameError",
    "ScaffoldConfig",
    "ScaffoldError",
    "ScaffoldResult",
    "ScaffoldState",
    "Scaffolder",
    "SubstitutionError",
    "TargetExistsError",
    "VariableBindings",
    "scaffold",
    "scaffold_collection",
]
