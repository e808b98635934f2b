"""Template rendering for generated project files."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

__all__ = ["TEMPLATES_DIR", "render_template"]

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def _create_env(templates_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


def render_template(template: str, /, *, templates_dir: Path = TEMPLATES_DIR, **context: object) -> str:
    """Render ``template`` from the bundled templates.

    ``template`` is positional-only so a ``name`` value can be passed in
    the context.

    The result has no trailing newline; callers writing a file add one.

    Raises:
        jinja2.TemplateNotFound: If there is no such template.
    """
    return _create_env(templates_dir).get_template(template).render(**context)
