"""Scaffolding orchestrator.

Composes the fetcher, collection detection, prompt resolution and tree
materialization into the two public operations:

* :meth:`Scaffolder.scaffold` -- scaffold one template.  A collection source
  is still accepted: the user is asked to pick a member first.
* :meth:`Scaffolder.scaffold_collection` -- scaffold a member of a
  collection, asking with a caller-supplied label.

Each call moves through ``FETCHING -> DETECTING_COLLECTION ->
(SELECTING_OPTION) -> RESOLVING_PROMPTS -> MATERIALIZING -> DONE``; any
state may end in ``FAILED``.  No state is revisited.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from scafall.config import ScaffoldConfig
from scafall.errors import (
    CollectionSelectionError,
    PromptError,
    TargetExistsError,
)
from scafall.models import Prompt, PromptSet, VariableBindings
from scafall.prompts.asker import Asker, RichAsker
from scafall.prompts.files import check_reserved, read_overrides, read_prompt_file
from scafall.prompts.resolver import PromptResolver
from scafall.scaffolder.collection import is_collection
from scafall.scaffolder.engine import TemplateEngine
from scafall.scaffolder.materializer import Materializer, TextDetector, sniff_text
from scafall.source.fetcher import SourceFetcher, select_sub_path
from scafall.source.tree import TemplateSource
from scafall.utils import console, print_warning


# ---------------------------------------------------------------------------
# Collection selection variable
# ---------------------------------------------------------------------------

# Carries the user's collection choice.  Always reserved against template
# authors; never treated as reserved for the engine's own selection prompt.
COLLECTION_CHOICE_VARIABLE = "__ScaffoldUrl"


def user_reserved_names(reserved: Iterable[str]) -> frozenset[str]:
    """Names a template's prompts and override file may not declare."""
    return frozenset(reserved) | {COLLECTION_CHOICE_VARIABLE}


def selection_reserved_names(reserved: Iterable[str]) -> frozenset[str]:
    """Reserved names checked against the synthetic selection prompt."""
    return frozenset(reserved) - {COLLECTION_CHOICE_VARIABLE}


# ---------------------------------------------------------------------------
# State tracking
# ---------------------------------------------------------------------------


class ScaffoldState(str, Enum):
    """Stages of a single scaffold invocation."""

    FETCHING = "fetching"
    DETECTING_COLLECTION = "detecting_collection"
    SELECTING_OPTION = "selecting_option"
    RESOLVING_PROMPTS = "resolving_prompts"
    MATERIALIZING = "materializing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ScaffoldResult:
    """Outcome of a successful scaffold."""

    output_dir: Path
    bindings: VariableBindings
    files: list[Path] = field(default_factory=list)
    choice: str | None = None
    states: list[ScaffoldState] = field(default_factory=list)


class _Run:
    """Records the state transitions of one invocation."""

    def __init__(self) -> None:
        self.states: list[ScaffoldState] = []

    def enter(self, state: ScaffoldState) -> None:
        if state in self.states:
            raise RuntimeError(f"scaffold state revisited: {state.value}")
        self.states.append(state)

    @property
    def current(self) -> ScaffoldState | None:
        return self.states[-1] if self.states else None


# ---------------------------------------------------------------------------
# Scaffolder
# ---------------------------------------------------------------------------


class Scaffolder:
    """Creates projects from template sources.

    Attributes:
        overrides: Caller values that always win and skip prompting.
        defaults: Caller values used as interactive defaults.
        reserved_names: Names templates may not declare.
        last_state: Final state of the most recent invocation.
    """

    def __init__(
        self,
        overrides: Mapping[str, str] | None = None,
        defaults: Mapping[str, str] | None = None,
        reserved_names: Iterable[str] = (),
        *,
        asker: Asker | None = None,
        fetcher: SourceFetcher | None = None,
        engine: TemplateEngine | None = None,
        is_text: TextDetector = sniff_text,
        config: ScaffoldConfig | None = None,
    ) -> None:
        self.config = config or ScaffoldConfig()
        self.overrides = dict(overrides or {})
        self.defaults = dict(defaults or {})
        self.reserved_names = frozenset(reserved_names)
        self.asker = asker or RichAsker()
        self.fetcher = fetcher or SourceFetcher(
            depth=self.config.clone_depth, timeout=self.config.git_timeout
        )
        self.engine = engine or TemplateEngine()
        self.materializer = Materializer(
            self.engine, is_text=is_text, ignored_names=self.config.ignored_names
        )
        self.last_state: ScaffoldState | None = None

    @classmethod
    def from_config(
        cls, config: ScaffoldConfig, *, asker: Asker | None = None
    ) -> "Scaffolder":
        """Build a scaffolder whose overrides, defaults and reserved names come from *config*."""
        return cls(
            overrides=config.overrides,
            defaults=config.defaults,
            reserved_names=config.reserved_names,
            asker=asker,
            config=config,
        )

    # -- Public API --------------------------------------------------------

    async def scaffold(
        self,
        url: str,
        output_dir: str | Path,
        *,
        sub_path: str | None = None,
    ) -> ScaffoldResult:
        """Create a project in *output_dir* from the template at *url*.

        If the source turns out to be a collection the user first chooses a
        member with the default "Choose a project template" prompt.

        Raises:
            ScaffoldError: Any subclass, see :mod:`scafall.errors`.
        """
        return await self._run(url, output_dir, sub_path, collection_label=None)

    async def scaffold_collection(
        self,
        url: str,
        prompt_label: str,
        output_dir: str | Path,
        *,
        sub_path: str | None = None,
    ) -> ScaffoldResult:
        """Create a project from one member of the collection at *url*.

        Raises:
            CollectionSelectionError: If the source is not a collection or no
                valid member is chosen.
            ScaffoldError: Any other subclass, see :mod:`scafall.errors`.
        """
        return await self._run(url, output_dir, sub_path, collection_label=prompt_label)

    # -- Internals ---------------------------------------------------------

    async def _run(
        self,
        url: str,
        output_dir: str | Path,
        sub_path: str | None,
        collection_label: str | None,
    ) -> ScaffoldResult:
        run = _Run()
        target = Path(output_dir)
        source: TemplateSource | None = None
        try:
            if target.exists():
                raise TargetExistsError(target)

            run.enter(ScaffoldState.FETCHING)
            console.print(f"[dim]Using template {url}[/dim]")
            source = await self.fetcher.fetch(url)
            template = select_sub_path(source, sub_path)

            run.enter(ScaffoldState.DETECTING_COLLECTION)
            collection, choices = is_collection(template, self.config.prompt_file)

            choice: str | None = None
            if collection_label is not None and not collection:
                raise CollectionSelectionError(f"{url} is not a collection of templates")
            if collection:
                run.enter(ScaffoldState.SELECTING_OPTION)
                label = collection_label or self.config.collection_prompt
                choice = self._select(template, choices, label)
                template = template.narrow(choice)

            run.enter(ScaffoldState.RESOLVING_PROMPTS)
            bindings = self._resolve(template)

            run.enter(ScaffoldState.MATERIALIZING)
            files = await self.materializer.materialize(template, bindings, target)

            run.enter(ScaffoldState.DONE)
            return ScaffoldResult(
                output_dir=target,
                bindings=bindings,
                files=files,
                choice=choice,
                states=list(run.states),
            )
        except Exception:
            run.states.append(ScaffoldState.FAILED)
            raise
        finally:
            self.last_state = run.current
            if source is not None:
                source.close()

    def _select(self, source: TemplateSource, choices: list[str], label: str) -> str:
        """Ask which collection member to use, honouring overrides and defaults."""
        prompt = Prompt(
            name=COLLECTION_CHOICE_VARIABLE,
            prompt=label,
            required=True,
            choices=choices,
        )
        resolver = PromptResolver(
            self.asker, reserved_names=selection_reserved_names(self.reserved_names)
        )
        file_overrides = read_overrides(source, self.config.override_file)
        try:
            values = resolver.resolve(
                PromptSet.of(prompt),
                file_overrides=file_overrides,
                caller_overrides=self.overrides,
                caller_defaults=self.defaults,
                override_path=str(source.root / self.config.override_file),
            )
        except PromptError as exc:
            raise CollectionSelectionError(
                f"can not process the chosen element of collection: {exc}"
            ) from exc

        choice = values.get(COLLECTION_CHOICE_VARIABLE)
        if choice not in choices:
            raise CollectionSelectionError(
                f"can not process the chosen element of collection: '{choice}' "
                f"(expected one of: {', '.join(choices)})"
            )
        return choice

    def _resolve(self, source: TemplateSource) -> VariableBindings:
        """Resolve the template's prompts; no prompt file means no bindings."""
        if not source.exists(self.config.prompt_file):
            if self.overrides:
                print_warning(
                    f"Template has no {self.config.prompt_file}; overrides are not applied"
                )
            return VariableBindings()

        prompt_path = str(source.root / self.config.prompt_file)
        reserved = user_reserved_names(self.reserved_names)
        prompt_set = read_prompt_file(source, self.config.prompt_file)
        # A reserved name is reported before the override file is parsed.
        check_reserved(prompt_set.names, reserved, prompt_path)
        file_overrides = read_overrides(source, self.config.override_file)
        resolver = PromptResolver(self.asker, reserved_names=reserved)
        return resolver.resolve(
            prompt_set,
            file_overrides=file_overrides,
            caller_overrides=self.overrides,
            caller_defaults=self.defaults,
            prompt_path=prompt_path,
            override_path=str(source.root / self.config.override_file),
        )


# ---------------------------------------------------------------------------
# Synchronous convenience wrappers
# ---------------------------------------------------------------------------


def scaffold(
    url: str,
    output_dir: str | Path,
    *,
    overrides: Mapping[str, str] | None = None,
    defaults: Mapping[str, str] | None = None,
    reserved_names: Iterable[str] = (),
    sub_path: str | None = None,
    asker: Asker | None = None,
) -> ScaffoldResult:
    """Run :meth:`Scaffolder.scaffold` to completion with ``asyncio.run``."""
    scaffolder = Scaffolder(overrides, defaults, reserved_names, asker=asker)
    return asyncio.run(scaffolder.scaffold(url, output_dir, sub_path=sub_path))


def scaffold_collection(
    url: str,
    prompt_label: str,
    output_dir: str | Path,
    *,
    overrides: Mapping[str, str] | None = None,
    defaults: Mapping[str, str] | None = None,
    reserved_names: Iterable[str] = (),
    sub_path: str | None = None,
    asker: Asker | None = None,
) -> ScaffoldResult:
    """Run :meth:`Scaffolder.scaffold_collection` to completion with ``asyncio.run``."""
    scaffolder = Scaffolder(overrides, defaults, reserved_names, asker=asker)
    return asyncio.run(
        scaffolder.scaffold_collection(url, prompt_label, output_dir, sub_path=sub_path)
    )
