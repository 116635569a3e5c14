"""Shared pytest fixtures for the Scafall test suite.

Provides reusable fixtures for:
- Building template trees on disk from a ``{path: content}`` mapping
- Sample single templates, collections and templated paths
- A scripted asker that records every prompt it is given
- Mock subprocess helpers for git
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from scafall.errors import PromptError
from scafall.models import Prompt


# ---------------------------------------------------------------------------
# Template tree builders
# ---------------------------------------------------------------------------

TreeSpec = dict[str, "str | bytes | None"]


def write_tree(root: Path, files: TreeSpec) -> Path:
    """Create *files* under *root*.

    Keys are POSIX relative paths.  ``str`` values are written as UTF-8 text,
    ``bytes`` as-is, and ``None`` creates an empty directory.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(textwrap.dedent(content), encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Factory: ``make_tree({"a.txt": "x"}, name="src")`` -> template root."""

    def factory(files: TreeSpec, name: str = "template") -> Path:
        return write_tree(tmp_path / name, files)

    return factory


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """A not-yet-existing output directory."""
    return tmp_path / "out" / "project"


STR_PROMPTS = """\
[[prompt]]
name = "name"
prompt = "Project name"
"""

REQUIRED_PROMPTS = """\
[[prompt]]
name = "name"
prompt = "Project name"
required = true
"""


@pytest.fixture
def single_template(make_tree) -> Path:
    """A template with one prompt, an override file, and a .git directory."""
    return make_tree(
        {
            "prompts.toml": STR_PROMPTS,
            ".override.toml": 'unused = "x"\n',
            ".git/HEAD": "ref: refs/heads/main\n",
            ".git/objects/ab/cdef": b"\x78\x01\x00",
            "template.go": "package {{ name }}\n",
        }
    )


@pytest.fixture
def collection_template(make_tree) -> Path:
    """Two collection members, each declaring the ``test`` prompt."""
    member_prompts = """\
    [[prompt]]
    name = "test"
    prompt = "Test value"
    """
    return make_tree(
        {
            "option1/prompts.toml": member_prompts,
            "option1/template.go": "// option1 {{ test }}\n",
            "option2/prompts.toml": member_prompts,
            "option2/other.go": "// option2 {{ test }}\n",
            "README.md": "A collection\n",
        },
        name="collection",
    )


@pytest.fixture
def templated_paths(make_tree) -> Path:
    """A directory and a file whose names are variable references."""
    return make_tree(
        {
            "prompts.toml": """\
            [[prompt]]
            name = "duck"
            prompt = "What does the duck say?"
            """,
            "{{duck}}/{{duck}}.go": "// {{ duck | upper }}\n",
        },
        name="template_folder",
    )


# ---------------------------------------------------------------------------
# Askers
# ---------------------------------------------------------------------------

class ScriptedAsker:
    """Asker that answers from a queue and records what it was asked.

    With an empty queue each prompt is answered with its default, which is
    what a user pressing Enter does.
    """

    def __init__(self, answers: list[str] | None = None) -> None:
        self.answers = list(answers or [])
        self.calls: list[tuple[Prompt, str]] = []

    def ask(self, prompt: Prompt, default: str) -> str:
        self.calls.append((prompt, default))
        if self.answers:
            return self.answers.pop(0)
        return default

    @property
    def asked_names(self) -> list[str]:
        return [p.name for p, _ in self.calls]


class FailingAsker:
    """Asker that always fails, as when stdin is closed."""

    def __init__(self) -> None:
        self.calls = 0

    def ask(self, prompt: Prompt, default: str) -> str:
        self.calls += 1
        raise PromptError(f"no answer given for '{prompt.name}'", name=prompt.name)


@pytest.fixture
def scripted_asker() -> Callable[..., ScriptedAsker]:
    """Factory returning a fresh ``ScriptedAsker``."""

    def factory(*answers: str) -> ScriptedAsker:
        return ScriptedAsker(list(answers))

    return factory


@pytest.fixture
def failing_asker() -> FailingAsker:
    return FailingAsker()


# ---------------------------------------------------------------------------
# Subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing git invocations.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """A sample ScaffoldConfig as a plain dict."""
    return {
        "output_dir": "/tmp/scafall-test-output",
        "overrides": {"project": "demo"},
        "defaults": {"license": "MIT"},
        "reserved_names": ["secret"],
        "prompt_file": "prompts.toml",
        "override_file": ".override.toml",
        "ignored_names": ["prompts.toml", ".override.toml", ".git"],
        "collection_prompt": "Choose a project template",
        "clone_depth": 1,
        "git_timeout": 120,
    }
