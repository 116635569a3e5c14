"""Unit tests for the interactive and non-interactive askers (scafall.prompts.asker)."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from scafall.errors import PromptError
from scafall.models import Prompt
from scafall.prompts.asker import DefaultsAsker, RichAsker


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False)


# ---------------------------------------------------------------------------
# RichAsker
# ---------------------------------------------------------------------------

class TestRichAsker:
    @pytest.mark.unit
    def test_text_prompt_with_default(self, quiet_console):
        prompt = Prompt(name="name", prompt="Project name")
        with patch("scafall.prompts.asker.RichPrompt.ask", return_value="demo") as mock_ask:
            assert RichAsker(quiet_console).ask(prompt, "fallback") == "demo"
        args, kwargs = mock_ask.call_args
        assert args == ("Project name",)
        assert kwargs["default"] == "fallback"

    @pytest.mark.unit
    def test_text_prompt_without_default(self, quiet_console):
        prompt = Prompt(name="name", prompt="Project name")
        with patch("scafall.prompts.asker.RichPrompt.ask", return_value="") as mock_ask:
            assert RichAsker(quiet_console).ask(prompt, "") == ""
        assert "default" not in mock_ask.call_args.kwargs

    @pytest.mark.unit
    def test_required_prompt_reasks_on_empty(self, quiet_console):
        prompt = Prompt(name="name", prompt="Project name", required=True)
        with patch(
            "scafall.prompts.asker.RichPrompt.ask", side_effect=["", "", "demo"]
        ) as mock_ask:
            assert RichAsker(quiet_console).ask(prompt, "") == "demo"
        assert mock_ask.call_count == 3

    @pytest.mark.unit
    def test_choice_prompt_passes_choices(self, quiet_console):
        prompt = Prompt(name="db", prompt="Database", choices=["pg", "sqlite"])
        with patch("scafall.prompts.asker.RichPrompt.ask", return_value="pg") as mock_ask:
            assert RichAsker(quiet_console).ask(prompt, "sqlite") == "pg"
        kwargs = mock_ask.call_args.kwargs
        assert kwargs["choices"] == ["pg", "sqlite"]
        assert kwargs["default"] == "sqlite"

    @pytest.mark.unit
    def test_choice_prompt_drops_unknown_default(self, quiet_console):
        prompt = Prompt(name="db", prompt="Database", choices=["pg", "sqlite"])
        with patch("scafall.prompts.asker.RichPrompt.ask", return_value="pg") as mock_ask:
            RichAsker(quiet_console).ask(prompt, "mysql")
        assert "default" not in mock_ask.call_args.kwargs

    @pytest.mark.unit
    @pytest.mark.parametrize("exc", [EOFError, KeyboardInterrupt])
    def test_closed_input_raises_prompt_error(self, quiet_console, exc):
        prompt = Prompt(name="name", prompt="Project name")
        with patch("scafall.prompts.asker.RichPrompt.ask", side_effect=exc):
            with pytest.raises(PromptError, match="no answer given for 'name'") as exc_info:
                RichAsker(quiet_console).ask(prompt, "")
        assert exc_info.value.name == "name"


# ---------------------------------------------------------------------------
# DefaultsAsker
# ---------------------------------------------------------------------------

class TestDefaultsAsker:
    @pytest.mark.unit
    def test_returns_default(self):
        assert DefaultsAsker().ask(Prompt(name="a", prompt="A"), "x") == "x"

    @pytest.mark.unit
    def test_optional_without_default_is_empty(self):
        assert DefaultsAsker().ask(Prompt(name="a", prompt="A"), "") == ""

    @pytest.mark.unit
    def test_required_without_default_raises(self):
        with pytest.raises(PromptError, match="'a' is required and has no default"):
            DefaultsAsker().ask(Prompt(name="a", prompt="A", required=True), "")

    @pytest.mark.unit
    def test_choice_uses_valid_default(self):
        prompt = Prompt(name="db", prompt="Database", choices=["pg", "sqlite"])
        assert DefaultsAsker().ask(prompt, "sqlite") == "sqlite"

    @pytest.mark.unit
    def test_choice_falls_back_to_first(self):
        prompt = Prompt(name="db", prompt="Database", choices=["pg", "sqlite"])
        assert DefaultsAsker().ask(prompt, "mysql") == "pg"
