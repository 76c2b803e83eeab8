from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from jinja2 import Environment, StrictUndefined


class SqlTemplateRenderer:
    """Renders SQL files written as Jinja2 templates.

    Built-in assigns (``dev``, ``test``, ``prod``, ``date``) are merged with the
    caller's assigns; the caller wins on conflicts. Undefined variables are an
    error rather than an empty string.
    """

    def __init__(self, base_assigns: Optional[Mapping[str, Any]] = None):
        # SQL generation, not HTML.
        self.env = Environment(
            autoescape=False,  # noqa: S701
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.base_assigns: Dict[str, Any] = dict(base_assigns or {})

    def read_template(self, path: Union[str, Path]) -> str:
        """Reads the template source. Raises FileNotFoundError if it does not exist."""
        return Path(path).read_text(encoding="utf-8")

    def render(self, source: str, assigns: Optional[Mapping[str, Any]] = None) -> str:
        """Renders template source into SQL text.

        Raises:
            jinja2.TemplateSyntaxError: If the source is not a valid template.
            jinja2.UndefinedError: If the template uses an unknown variable.
        """
        context = {**self.base_assigns, **(assigns or {})}
        return self.env.from_string(source).render(**context)

    def render_file(self, path: Union[str, Path], assigns: Optional[Mapping[str, Any]] = None) -> str:
        return self.render(self.read_template(path), assigns)
