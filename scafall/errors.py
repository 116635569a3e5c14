"""Typed errors raised by the scaffolding engine.

Every failure surfaces as a subclass of :class:`ScaffoldError` so that callers
(the CLI, or code embedding the engine) can catch one type and still inspect
the specific cause.  The engine never logs-and-swallows these; they are always
propagated to the immediate caller.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for every error raised by the engine."""


class FetchError(ScaffoldError):
    """Raised when a template source cannot be fetched or read."""

    def __init__(self, message: str, url: str = "", stderr: str = "") -> None:
        self.url = url
        self.stderr = stderr
        super().__init__(message)


class ConfigFormatError(ScaffoldError):
    """Raised when a prompt or override file exists but is malformed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"{self.path} file does not match required format: {reason}")


class ReservedNameError(ScaffoldError):
    """Raised when a template declares or overrides a reserved variable."""

    def __init__(self, name: str, path: str | Path = "") -> None:
        self.name = name
        self.path = str(path)
        where = f"{self.path} file" if self.path else "prompt set"
        super().__init__(f"{where} contains reserved variable: {name}")


class PromptError(ScaffoldError):
    """Raised when interactive resolution of a prompt fails."""

    def __init__(self, message: str, name: str = "") -> None:
        self.name = name
        super().__init__(message)


class CollectionSelectionError(ScaffoldError):
    """Raised when a collection member could not be selected."""


class TargetExistsError(ScaffoldError):
    """Raised when the output directory already exists."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"directory {self.path} already exists")


class SubstitutionError(ScaffoldError):
    """Raised when a template reference cannot be resolved."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to substitute variables in {path}: {reason}")


class MaterializationIOError(ScaffoldError):
    """Raised when writing the output tree fails part-way.

    Output already written is left in place.
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"failed to write {self.path}: {reason}")
