"""Materialization of a template source into an output directory.

Works in two passes:

1. :func:`plan_entries` walks the source lazily and annotates each entry with
   whether it is ignored and, if not, its substituted output path.  It does
   no writing and can be tested against any ``TemplateSource``.
2. :class:`Materializer` consumes that plan and performs all filesystem
   writes: directories first, then files beneath them, with text content
   substituted, binary content copied byte-for-byte and symbolic links
   recreated with their targets unchanged.

A failure part-way through leaves already-written output in place.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Collection, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from scafall.config import IGNORED_DIRECTORIES, OVERRIDE_FILE, PROMPT_FILE
from scafall.errors import MaterializationIOError, SubstitutionError, TargetExistsError
from scafall.scaffolder.engine import TemplateEngine
from scafall.source.tree import SourceEntry, TemplateSource
from scafall.utils import print_created

DEFAULT_IGNORED_NAMES: frozenset[str] = frozenset(
    (PROMPT_FILE, OVERRIDE_FILE, *IGNORED_DIRECTORIES)
)

# Owner read/write is always granted on generated files.
OWNER_RW = 0o600

_SNIFF_BYTES = 8192

TextDetector = Callable[[bytes], bool]


def sniff_text(data: bytes) -> bool:
    """Return ``True`` if *data* looks like text.

    Content with a NUL byte in its first 8 KiB, or that is not valid UTF-8,
    is treated as binary.
    """
    if b"\x00" in data[:_SNIFF_BYTES]:
        return False
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


# ---------------------------------------------------------------------------
# Pass 1: planning
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlannedEntry:
    """A source entry and where (if anywhere) it lands in the output."""

    entry: SourceEntry
    ignored: bool
    output_path: PurePosixPath | None = None


def is_ignored(path: PurePosixPath, ignored_names: Collection[str]) -> bool:
    """``True`` if *path* is, or lies under, an ignored name."""
    return any(part in ignored_names for part in path.parts)


def plan_entries(
    source: TemplateSource,
    bindings: Mapping[str, str],
    engine: TemplateEngine,
    ignored_names: Collection[str] = DEFAULT_IGNORED_NAMES,
) -> Iterator[PlannedEntry]:
    """Yield a ``PlannedEntry`` for every entry of *source*.

    Every path segment of a kept entry is substituted independently.  Ignored
    directories are reported once and not descended into.

    Raises:
        SubstitutionError: If a path segment cannot be rendered, renders to
            an empty name, or would escape the output directory.
    """
    ignored_set = frozenset(ignored_names)

    def prune(entry: SourceEntry) -> bool:
        return entry.name in ignored_set

    for entry in source.entries(prune=prune):
        if is_ignored(entry.path, ignored_set):
            yield PlannedEntry(entry=entry, ignored=True)
            continue
        yield PlannedEntry(
            entry=entry,
            ignored=False,
            output_path=_output_path(entry.path, bindings, engine),
        )


def _output_path(
    path: PurePosixPath, bindings: Mapping[str, str], engine: TemplateEngine
) -> PurePosixPath:
    segments: list[str] = []
    for part in path.parts:
        rendered = engine.substitute(part, bindings, path=str(path))
        if not rendered.strip():
            raise SubstitutionError(str(path), f"segment '{part}' renders to an empty name")
        segments.append(rendered)
    out = PurePosixPath(*segments)
    if out.is_absolute() or ".." in out.parts:
        raise SubstitutionError(str(path), f"renders outside the output directory: {out}")
    return out


# ---------------------------------------------------------------------------
# Pass 2: writing
# ---------------------------------------------------------------------------


class Materializer:
    """Writes a planned template tree to disk.

    Attributes:
        engine: Substitutes variables into paths and text content.
        is_text: Decides whether a file's content is substituted.
        ignored_names: Names never copied to the output.
    """

    def __init__(
        self,
        engine: TemplateEngine | None = None,
        is_text: TextDetector = sniff_text,
        ignored_names: Collection[str] = DEFAULT_IGNORED_NAMES,
    ) -> None:
        self.engine = engine or TemplateEngine()
        self.is_text = is_text
        self.ignored_names = frozenset(ignored_names)

    async def materialize(
        self,
        source: TemplateSource,
        bindings: Mapping[str, str],
        target: str | Path,
    ) -> list[Path]:
        """Write *source* into the new directory *target*.

        Args:
            source: Template tree to copy.
            bindings: Resolved variables; not modified.
            target: Output directory.  Must not exist yet.

        Returns:
            Paths of the files written, in walk order.

        Raises:
            TargetExistsError: If *target* exists; nothing is written.
            SubstitutionError: If a path or text file cannot be rendered.
            MaterializationIOError: If a directory or file cannot be written.
            FetchError: If a directory of *source* cannot be listed.
        """
        target = Path(target)
        if target.exists():
            raise TargetExistsError(target)
        try:
            await asyncio.to_thread(target.mkdir, parents=True)
        except FileExistsError as exc:
            raise TargetExistsError(target) from exc
        except OSError as exc:
            raise MaterializationIOError(target, str(exc)) from exc

        written: list[Path] = []
        for planned in plan_entries(source, bindings, self.engine, self.ignored_names):
            if planned.ignored or planned.output_path is None:
                continue
            out = target.joinpath(*planned.output_path.parts)
            if planned.entry.is_dir:
                await asyncio.to_thread(_make_dir, out)
                continue
            if planned.entry.is_link:
                await asyncio.to_thread(_copy_link, source, planned.entry, out)
            else:
                await asyncio.to_thread(self._write_file, source, planned.entry, out, bindings)
            print_created(str(out))
            written.append(out)
        return written

    def _write_file(
        self,
        source: TemplateSource,
        entry: SourceEntry,
        out: Path,
        bindings: Mapping[str, str],
    ) -> None:
        """Synchronous helper: read, maybe substitute, write, chmod."""
        try:
            data = source.read_bytes(entry.path)
        except OSError as exc:
            raise MaterializationIOError(entry.path, str(exc)) from exc

        if self.is_text(data):
            text = data.decode("utf-8", errors="surrogateescape")
            text = self.engine.substitute(text, bindings, path=str(entry.path))
            data = text.encode("utf-8", errors="surrogateescape")

        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(data)
            os.chmod(out, entry.mode | OWNER_RW)
        except OSError as exc:
            raise MaterializationIOError(out, str(exc)) from exc


def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise MaterializationIOError(path, str(exc)) from exc


def _copy_link(source: TemplateSource, entry: SourceEntry, out: Path) -> None:
    """Recreate a symbolic link with its target unchanged."""
    try:
        link_target = source.read_link(entry.path)
        out.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(link_target, out)
    except OSError as exc:
        raise MaterializationIOError(out, str(exc)) from exc
