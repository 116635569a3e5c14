"""Jinja2 variable substitution for file contents and path segments.

Provides the TemplateEngine class which renders a single string against a
set of ``VariableBindings``.  Undefined variables are errors rather than
empty strings, so a typo in a template never silently produces broken code.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from jinja2 import Environment, StrictUndefined, TemplateError

from scafall.errors import SubstitutionError


# ---------------------------------------------------------------------------
# TemplateEngine
# ---------------------------------------------------------------------------


class TemplateEngine:
    """Substitutes variables into template text.

    Rendering is deterministic and side-effect free: the same text and the
    same bindings always produce the same output.  The environment exposes
    ``slugify``, ``pascal_case``, ``snake_case`` and ``camel_case`` filters in
    addition to the Jinja2 built-ins.
    """

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["snake_case"] = _snake_case_filter
        self.env.filters["camel_case"] = _camel_case_filter
        # Jinja2 rewrites every line ending to ``newline_sequence``.
        self.crlf_env = self.env.overlay(newline_sequence="\r\n")

    def substitute(
        self,
        text: str,
        bindings: Mapping[str, str],
        path: str = "<string>",
    ) -> str:
        """Render *text* with *bindings*.

        Args:
            text: File content or a single path segment.
            bindings: Resolved variables available inside the template.
            path: Source path being processed, reported on failure.

        Raises:
            SubstitutionError: On a syntax error or a reference to a variable
                that is not bound.
        """
        if "{" not in text:
            return text
        env = self.crlf_env if _uses_crlf(text) else self.env
        try:
            template = env.from_string(text)
            return template.render(**dict(bindings))
        except TemplateError as exc:
            raise SubstitutionError(path, exc.message or type(exc).__name__) from exc


def _uses_crlf(text: str) -> bool:
    """``True`` when most line endings in *text* are ``\\r\\n``."""
    crlf = text.count("\r\n")
    return crlf > text.count("\n") - crlf


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""
