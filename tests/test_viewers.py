import click
import pytest

from core.exceptions import ConfigurationError
from core.models import Sign
from viewers.base import BaseViewer
from viewers.factory import ViewerFactory
from viewers.scripted import ScriptedViewer
from viewers.terminal import TerminalViewer


OPTIONS = [Sign.POSITIVE, Sign.NEGATIVE, Sign.UNSURE]


class TestScriptedViewer:



    def test_answers_by_fact_id(self):

        viewer = ScriptedViewer({"A": "+", "B": "negative"})
        assert viewer.ask_about("A", "Does A happen?", OPTIONS) is Sign.POSITIVE
        assert viewer.ask_about("B", "Does B happen?", OPTIONS) is Sign.NEGATIVE
        assert viewer.asked_facts == ["A", "B"]

    def test_answers_by_question_text(self):

        viewer = ScriptedViewer({"Is it raining?": "-"})
        assert viewer.ask("Is it raining?", OPTIONS) is Sign.NEGATIVE
        assert viewer.questions == [(None, "Is it raining?")]

    def test_default_answer(self):

        viewer = ScriptedViewer()
        assert viewer.ask_about("X", "Does X happen?", OPTIONS) is Sign.UNSURE

        viewer = ScriptedViewer(default="+")
        assert viewer.ask_about("X", "Does X happen?", OPTIONS) is Sign.POSITIVE

    def test_answer_outside_options_uses_default(self):

        viewer = ScriptedViewer({"A": "-"}, default="+")
        assert viewer.ask_about("A", "Does A happen?", [Sign.POSITIVE]) is Sign.POSITIVE

    def test_invalid_answer_raises(self):

        with pytest.raises(ValueError):
            ScriptedViewer({"A": "maybe"})

    def test_records_messages(self):

        viewer = ScriptedViewer()
        viewer.print("hello")
        viewer.print_error("oops")
        viewer.debug("detail")
        assert viewer.messages == ["hello"]
        assert viewer.errors == ["oops"]
        assert viewer.debug_messages == ["detail"]


class TestTerminalViewer:



    def test_debug_prefix(self, capsys):

        TerminalViewer().debug("reading rule 0")
        assert capsys.readouterr().out == "DEBUG: reading rule 0\n"

    def test_print(self, capsys):

        TerminalViewer().print("hello")
        assert capsys.readouterr().out == "hello\n"

    def test_print_error_goes_to_stderr(self, capsys):

        TerminalViewer().print_error("No inference was possible")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "ERROR: No inference was possible\n"

    def test_ask_returns_sign(self, monkeypatch):

        calls = []

        def fake_prompt(text, type=None, show_choices=None):
            calls.append((text, list(type.choices)))
            return "-"

        monkeypatch.setattr(click, "prompt", fake_prompt)
        answer = TerminalViewer().ask("Does A happen?", OPTIONS)

        assert answer is Sign.NEGATIVE
        assert calls == [("Does A happen?", ["+", "-", "~"])]

    def test_ask_about_delegates_to_ask(self, monkeypatch):

        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: "~")
        assert TerminalViewer().ask_about("A", "Does A happen?", OPTIONS) is Sign.UNSURE


class TestViewerFactory:



    def test_create_terminal(self):

        assert isinstance(ViewerFactory.create("terminal"), TerminalViewer)

    def test_create_scripted_with_params(self):

        viewer = ViewerFactory.create("Scripted", answers={"A": "+"})
        assert isinstance(viewer, ScriptedViewer)
        assert viewer.answers == {"A": Sign.POSITIVE}

    def test_unknown_kind_raises(self):

        with pytest.raises(ConfigurationError, match="Available"):
            ViewerFactory.create("gui")

    def test_empty_kind_raises(self):

        with pytest.raises(ConfigurationError):
            ViewerFactory.create("")

    def test_register(self):

        class SilentViewer(ScriptedViewer):
            pass

        ViewerFactory.register("silent", SilentViewer)
        try:
            assert isinstance(ViewerFactory.create("silent"), SilentViewer)
            assert "silent" in ViewerFactory.available()
        finally:
            ViewerFactory._registry.pop("silent")

    def test_base_viewer_is_abstract(self):

        with pytest.raises(TypeError):
            BaseViewer()
