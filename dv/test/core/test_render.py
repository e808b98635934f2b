"""Tests for dv/core/render.py and the bundled templates."""

from __future__ import annotations

from pathlib import Path

import jinja2
import pytest

from dv.core.render import render_template


def test_history_templates() -> None:
    assert render_template("History.md.j2", name="frob") == "# Release History for frob\n\n---"
    assert render_template("History.rdoc.j2", name="frob") == "= Release History for frob\n\n---"


def test_undefined_variable_is_an_error() -> None:
    with pytest.raises(jinja2.UndefinedError):
        render_template("History.md.j2")


def test_custom_templates_dir(tmp_path: Path) -> None:
    (tmp_path / "hello.j2").write_text("Hello {{ who }}!\n", encoding="utf-8")

    assert render_template("hello.j2", templates_dir=tmp_path, who="there") == "Hello there!"


def test_context_keys_do_not_clash_with_template_argument(tmp_path: Path) -> None:
    (tmp_path / "t.j2").write_text("{{ template }}/{{ name }}", encoding="utf-8")

    assert render_template("t.j2", templates_dir=tmp_path, template="x", name="frob") == "x/frob"
