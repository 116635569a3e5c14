"""Turn a URL-or-path into a readable ``TemplateSource``.

Local directories are used in place.  Anything else is handed to
``git clone --depth N`` and cloned into a fresh temporary directory which the
returned ``ClonedSource`` owns.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from pathlib import Path, PurePosixPath, PureWindowsPath

from scafall.errors import FetchError
from scafall.source.tree import ClonedSource, DirectorySource, TemplateSource
from scafall.utils import console


async def _run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 300.0,
) -> tuple[str, str]:
    """Run a git command asynchronously and return (stdout, stderr).

    Raises FetchError if git is missing, times out, or exits non-zero.
    """
    cmd = ["git"] + list(args)
    cmd_str = " ".join(cmd)
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
            env=env,
        )
    except FileNotFoundError as exc:
        raise FetchError(f"git executable not found: {exc}") from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise FetchError(f"Git command timed out after {timeout}s: {cmd_str}")

    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

    if process.returncode != 0:
        raise FetchError(
            f"Git command failed (exit {process.returncode}): {cmd_str}\n{stderr}",
            stderr=stderr,
        )

    return stdout, stderr


class SourceFetcher:
    """Fetches template sources from local paths or git remotes."""

    def __init__(self, depth: int = 1, timeout: float = 300.0) -> None:
        self.depth = depth
        self.timeout = timeout

    async def fetch(self, url: str) -> TemplateSource:
        """Return a source for *url*.

        Args:
            url: A local directory or anything ``git clone`` accepts.

        Returns:
            A ``DirectorySource`` for local paths, otherwise a
            ``ClonedSource`` the caller must close.

        Raises:
            FetchError: If the path is not a directory or the clone fails.
        """
        local = Path(url).expanduser()
        if local.exists():
            if not local.is_dir():
                raise FetchError(f"template source is not a directory: {url}", url=url)
            return DirectorySource(local)

        tmp_dir = Path(tempfile.mkdtemp(prefix="scafall-"))
        checkout = tmp_dir / "template"
        console.print(f"[dim]Cloning {url}...[/dim]")
        try:
            await _run_git(
                "clone", "--depth", str(self.depth), "--", url, str(checkout),
                timeout=self.timeout,
            )
        except FetchError as exc:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise FetchError(f"cannot fetch template {url}: {exc}", url=url, stderr=exc.stderr) from exc
        return ClonedSource(checkout, url=url, tmp_dir=tmp_dir)


def select_sub_path(source: TemplateSource, sub_path: str | None) -> TemplateSource:
    """Narrow *source* to *sub_path*, or return it unchanged when empty.

    Raises:
        FetchError: If *sub_path* is absolute, contains ``..``, or is not a
            directory inside the source.
    """
    if not sub_path:
        return source
    rel = PurePosixPath(sub_path.replace("\\", "/"))
    if rel.is_absolute() or ".." in rel.parts or PureWindowsPath(sub_path).drive:
        raise FetchError(f"requested subPath must stay inside the template: {sub_path}")
    if not source.is_dir(sub_path):
        raise FetchError(f"requested subPath of template does not exist: {sub_path}")
    return source.narrow(sub_path)
