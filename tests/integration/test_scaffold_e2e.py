"""Integration tests for end-to-end scaffolding.

These tests run the real fetcher, resolver and materializer against template
trees on disk and check the generated project directory.  The git test
creates a throwaway local repository and clones it over ``file://``; it is
skipped when git is not installed.

No network access is required.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from scafall.errors import ReservedNameError, SubstitutionError, TargetExistsError
from scafall.scaffolder import Scaffolder, TemplateEngine, is_collection
from scafall.source.tree import DirectorySource


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _tree(root: Path) -> dict[str, bytes | None]:
    """Snapshot of every entry under *root*: files map to content, dirs to None."""
    snapshot: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        snapshot[rel] = None if path.is_dir() else path.read_bytes()
    return snapshot


def _git(*args: str, cwd: Path) -> None:
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
    }
    subprocess.run(["git", *args], cwd=cwd, env=env, check=True, capture_output=True)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestScaffoldScenarios:
    """Whole-pipeline scenarios against local template directories."""

    async def test_ignore_list(self, single_template, output_dir, scripted_asker):
        await Scaffolder(overrides={"name": "test"}, asker=scripted_asker()).scaffold(
            str(single_template), output_dir
        )
        assert _tree(output_dir) == {"template.go": b"package test\n"}

    async def test_path_substitution(self, templated_paths, output_dir, scripted_asker):
        await Scaffolder(asker=scripted_asker("quack")).scaffold(
            str(templated_paths), output_dir
        )
        assert _tree(output_dir) == {
            "quack": None,
            "quack/quack.go": b"// QUACK\n",
        }

    async def test_collection_round_trip(self, collection_template, output_dir, scripted_asker):
        source = DirectorySource(collection_template)
        assert is_collection(source) == (True, ["option1", "option2"])
        assert is_collection(source) == is_collection(source)

        result = await Scaffolder(asker=scripted_asker("option1", "hello")).scaffold(
            str(collection_template), output_dir
        )
        assert result.choice == "option1"
        assert _tree(output_dir) == {"template.go": b"// option1 hello\n"}

    async def test_no_prompts_never_asks(self, make_tree, output_dir, failing_asker):
        root = make_tree({"static/readme.txt": "plain\n", "logo.bin": b"\x00\x01\x02"})
        result = await Scaffolder(asker=failing_asker).scaffold(str(root), output_dir)
        assert failing_asker.calls == 0
        assert len(result.bindings) == 0
        assert _tree(output_dir) == {
            "logo.bin": b"\x00\x01\x02",
            "static": None,
            "static/readme.txt": b"plain\n",
        }

    @pytest.mark.parametrize(
        ("caller", "expected"),
        [
            ({"name": "c"}, "c"),
            ({}, "o"),
        ],
    )
    async def test_override_precedence(
        self, make_tree, output_dir, scripted_asker, caller, expected
    ):
        root = make_tree(
            {
                "prompts.toml": '[[prompt]]\nname = "name"\nprompt = "Name"\ndefault = "d"\n',
                ".override.toml": 'name = "o"\n',
                "out.txt": "{{ name }}\n",
            }
        )
        await Scaffolder(overrides=caller, asker=scripted_asker()).scaffold(str(root), output_dir)
        assert (output_dir / "out.txt").read_text() == f"{expected}\n"

    async def test_default_confirmed_without_overrides(
        self, make_tree, output_dir, scripted_asker
    ):
        root = make_tree(
            {
                "prompts.toml": '[[prompt]]\nname = "name"\nprompt = "Name"\ndefault = "d"\n',
                "out.txt": "{{ name }}\n",
            }
        )
        asker = scripted_asker()
        await Scaffolder(asker=asker).scaffold(str(root), output_dir)
        assert asker.calls[0][1] == "d"
        assert (output_dir / "out.txt").read_text() == "d\n"

    async def test_reserved_name_has_no_side_effects(
        self, single_template, output_dir, scripted_asker
    ):
        asker = scripted_asker()
        with pytest.raises(ReservedNameError):
            await Scaffolder(reserved_names=["name"], asker=asker).scaffold(
                str(single_template), output_dir
            )
        assert asker.calls == []
        assert not output_dir.exists()

    async def test_no_clobber(self, single_template, output_dir, scripted_asker):
        await Scaffolder(asker=scripted_asker("first")).scaffold(str(single_template), output_dir)
        before = _tree(output_dir)

        with pytest.raises(TargetExistsError):
            await Scaffolder(asker=scripted_asker("second")).scaffold(
                str(single_template), output_dir
            )
        assert _tree(output_dir) == before


@pytest.mark.integration
class TestSubstitutionCompleteness:
    @pytest.mark.parametrize(
        "text",
        [
            "{{ v }}",
            "prefix {{ v }} suffix",
            "{{v}}{{ v }}",
            "line one\n  {{ v }}\n",
        ],
    )
    def test_bound_reference_replaced(self, text):
        out = TemplateEngine().substitute(text, {"v": "VALUE"})
        assert "VALUE" in out
        assert "{{" not in out

    def test_unbound_reference_fails(self):
        with pytest.raises(SubstitutionError):
            TemplateEngine().substitute("x {{ nope }} y", {"v": "VALUE"})


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestGitSource:
    async def test_clone_over_file_url(self, single_template, tmp_path, output_dir, scripted_asker):
        repo = tmp_path / "repo"
        shutil.copytree(single_template, repo, ignore=shutil.ignore_patterns(".git"))
        _git("init", "-q", cwd=repo)
        _git("add", "-A", cwd=repo)
        _git("commit", "-q", "-m", "template", cwd=repo)

        result = await Scaffolder(asker=scripted_asker("cloned")).scaffold(
            repo.as_uri(), output_dir
        )
        assert result.bindings["name"] == "cloned"
        assert _tree(output_dir) == {"template.go": b"package cloned\n"}
