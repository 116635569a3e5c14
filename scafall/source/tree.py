"""Read-only template file trees.

A ``TemplateSource`` exposes exactly what the engine needs from a fetched
template: listing entries, reading file bytes, telling files from
directories, and reading permission bits.  Two variants exist:

* ``DirectorySource`` -- a local directory used in place.
* ``ClonedSource`` -- a snapshot cloned into a temporary directory that the
  source owns and removes on :meth:`~ClonedSource.close`.

Nothing downstream of the fetcher branches on which variant it holds.

Symbolic links are never followed.  A link is listed as its own entry with
``is_link`` set, and a link to a directory is not descended into.
"""

from __future__ import annotations

import os
import shutil
import stat
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from scafall.errors import FetchError


@dataclass(frozen=True)
class SourceEntry:
    """One file or directory inside a template source."""

    path: PurePosixPath
    is_dir: bool
    mode: int
    is_link: bool = False

    @property
    def name(self) -> str:
        return self.path.name


class TemplateSource(ABC):
    """Abstract read-only file tree rooted at :attr:`root`."""

    root: Path

    @abstractmethod
    def children(self, path: str | PurePosixPath = "") -> list[SourceEntry]:
        """Immediate entries under *path*, sorted by name."""

    @abstractmethod
    def read_bytes(self, path: str | PurePosixPath) -> bytes:
        """Return the content of the file at *path*."""

    @abstractmethod
    def read_link(self, path: str | PurePosixPath) -> str:
        """Return the target of the symbolic link at *path*, unresolved."""

    @abstractmethod
    def is_dir(self, path: str | PurePosixPath) -> bool:
        """``True`` if *path* exists and is a directory."""

    @abstractmethod
    def exists(self, path: str | PurePosixPath) -> bool:
        """``True`` if *path* exists in the source."""

    @abstractmethod
    def mode(self, path: str | PurePosixPath) -> int:
        """Permission bits of *path*."""

    @abstractmethod
    def narrow(self, path: str | PurePosixPath) -> "TemplateSource":
        """Return a new source rooted at the subdirectory *path*."""

    def entries(
        self, prune: Callable[[SourceEntry], bool] | None = None
    ) -> Iterator[SourceEntry]:
        """Walk the whole tree depth-first.

        Directories are yielded before their children and siblings come in
        name order, so two walks of an unchanged tree are identical.  A
        directory for which *prune* returns ``True`` is yielded but not
        descended into.
        """
        stack: list[SourceEntry] = list(reversed(self.children()))
        while stack:
            entry = stack.pop()
            yield entry
            if entry.is_dir and not (prune and prune(entry)):
                stack.extend(reversed(self.children(entry.path)))

    def close(self) -> None:
        """Release any resources held by the source."""

    def __enter__(self) -> "TemplateSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class DirectorySource(TemplateSource):
    """A template read in place from a local directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.root)!r})"

    def _abs(self, path: str | PurePosixPath) -> Path:
        return self.root.joinpath(*PurePosixPath(path).parts)

    def children(self, path: str | PurePosixPath = "") -> list[SourceEntry]:
        """List *path* without following symbolic links.

        Raises:
            FetchError: If the directory or one of its entries cannot be read.
        """
        base = PurePosixPath(path)
        result: list[SourceEntry] = []
        try:
            with os.scandir(self._abs(path)) as it:
                for item in it:
                    result.append(
                        SourceEntry(
                            path=base / item.name,
                            is_dir=item.is_dir(follow_symlinks=False),
                            mode=stat.S_IMODE(item.stat(follow_symlinks=False).st_mode),
                            is_link=item.is_symlink(),
                        )
                    )
        except OSError as exc:
            raise FetchError(
                f"cannot read template directory {self._abs(path)}: {exc}"
            ) from exc
        result.sort(key=lambda e: e.name)
        return result

    def read_bytes(self, path: str | PurePosixPath) -> bytes:
        return self._abs(path).read_bytes()

    def read_link(self, path: str | PurePosixPath) -> str:
        return os.readlink(self._abs(path))

    def is_dir(self, path: str | PurePosixPath) -> bool:
        return self._abs(path).is_dir()

    def exists(self, path: str | PurePosixPath) -> bool:
        return self._abs(path).exists()

    def mode(self, path: str | PurePosixPath) -> int:
        return stat.S_IMODE(self._abs(path).stat().st_mode)

    def narrow(self, path: str | PurePosixPath) -> "DirectorySource":
        if not self.is_dir(path):
            raise NotADirectoryError(f"{path} is not a directory in {self.root}")
        return DirectorySource(self._abs(path))


class ClonedSource(DirectorySource):
    """A snapshot of a remote repository held in a temporary directory.

    The checkout lives at :attr:`root`, somewhere under :attr:`tmp_dir`.
    Closing the source deletes :attr:`tmp_dir`.
    """

    def __init__(self, root: str | Path, url: str, tmp_dir: str | Path) -> None:
        super().__init__(root)
        self.url = url
        self.tmp_dir = Path(tmp_dir)

    def close(self) -> None:
        shutil.rmtree(self.tmp_dir, ignore_errors=True)
