"""
Jinja2 environment used by the language generators.

Templates are rendered with StrictUndefined so a missing context key fails
the entity instead of silently emitting an empty string.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    select_autoescape,
)

from .errors import GeneratorError
from .naming import NameSanitizer, NamingCase


class TemplateError(GeneratorError):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """
    Jinja2 wrapper with filters for emitting source code.

    Args:
        template_dir: Directory of template files; None keeps templates in memory
        sanitizer: Name sanitizer backing the case-conversion filters
    """

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        sanitizer: Optional[NameSanitizer] = None,
    ):
        self.template_dir = template_dir
        self.sanitizer = sanitizer or NameSanitizer()

        if template_dir and template_dir.exists():
            loader = FileSystemLoader(str(template_dir))
        else:
            loader = DictLoader({})

        # Whitespace control lets block tags sit on their own lines
        self._env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        for name, case in (
            ("snake_case", NamingCase.SNAKE_CASE),
            ("camel_case", NamingCase.CAMEL_CASE),
            ("pascal_case", NamingCase.PASCAL_CASE),
            ("screaming_snake", NamingCase.SCREAMING_SNAKE),
        ):
            self._env.filters[name] = self._case_filter(case)
        self._env.filters["indent"] = indent_lines
        self._env.filters["comment"] = comment_lines

    def _case_filter(self, case: NamingCase):
        def convert(value: Any) -> str:
            return self.sanitizer.convert(str(value), case)

        return convert

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a named template.

        Raises:
            TemplateError: If the template is missing or fails to render
        """
        try:
            return self._env.get_template(template_name).render(**context)
        except Exception as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {e}"
            ) from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """Render an inline template string."""
        try:
            return self._env.from_string(template_string).render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def template_exists(self, template_name: str) -> bool:
        try:
            self._env.get_template(template_name)
            return True
        except TemplateNotFound:
            return False

    def add_template(self, name: str, content: str):
        """Register an in-memory template, replacing a file loader if needed."""
        if not isinstance(self._env.loader, DictLoader):
            self._env.loader = DictLoader({})
        self._env.loader.mapping[name] = content


def indent_lines(value: Any, width: Any = 4) -> str:
    """Prefix every non-blank line with `width` spaces, or with `width` itself if a string."""
    prefix = width if isinstance(width, str) else " " * width
    return "\n".join(
        prefix + line if line.strip() else line for line in str(value).split("\n")
    )


def comment_lines(value: Any, marker: str = "//") -> str:
    """Turn text into line comments; blank lines keep a bare marker."""
    return "\n".join(
        f"{marker} {line}" if line.strip() else marker
        for line in str(value).split("\n")
    )


def create_template_engine(
    template_dir: Optional[Path] = None, sanitizer: Optional[NameSanitizer] = None
) -> TemplateEngine:
    """Create a template engine, optionally bound to a template directory."""
    return TemplateEngine(template_dir, sanitizer)
