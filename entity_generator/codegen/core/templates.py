"""
Template engine wrapper for code generation.

Provides a small interface over Jinja2 for rendering the statement
snippets spliced into generated method bodies.
"""

from typing import Any, Dict

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateNotFound
from jinja2 import TemplateError as Jinja2TemplateError

from .errors import TemplateError
from .naming import to_camel_case, to_pascal_case, to_snake_case


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self):
        self._loader = DictLoader({})

        # Generated source is not markup: quotes must survive unescaped
        self._env = Environment(
            loader=self._loader,
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

        self._env.filters["snake_case"] = to_snake_case
        self._env.filters["camel_case"] = to_camel_case
        self._env.filters["pascal_case"] = to_pascal_case

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e
        except Jinja2TemplateError as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {e}"
            ) from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._loader.mapping[name] = content

    def add_templates(self, templates: Dict[str, str]):
        for name, content in templates.items():
            self.add_template(name, content)
