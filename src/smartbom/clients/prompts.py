"""Jinja2 prompts for the research clients.

The built-in prompts live in ``smartbom/clients/templates``.  A project can
override any of them by dropping a file of the same name into its own
template directory (``template_dir`` in the config); lookups fall back to
the built-in set for everything it does not override.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound
from jinja2 import exceptions as jinja_errors

from smartbom.exceptions import TemplateError

BUILTIN_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".jinja2"


class PromptTemplate:
    """Renders the system and user prompts sent to the research models.

    Args:
        override_dir: Optional directory searched before the built-in
            templates.

    Example::

        prompts = PromptTemplate()
        messages = prompts.messages(
            "alternatives_system", "find_alternatives",
            component=component, requirements=requirements, max_alternatives=2,
        )
    """

    def __init__(self, override_dir: Path | None = None) -> None:
        search_path = [BUILTIN_TEMPLATE_DIR]
        if override_dir is not None:
            if not override_dir.is_dir():
                raise TemplateError(f"Template directory does not exist: {override_dir}")
            search_path.insert(0, override_dir)
        self.search_path = search_path
        self._env = Environment(
            loader=FileSystemLoader([str(p) for p in search_path]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, name: str, **variables: Any) -> str:
        """Render prompt *name* (file name without ``.jinja2``).

        Raises:
            TemplateError: If no such prompt exists, it fails to compile, or
                it references a variable that was not supplied.
        """
        try:
            return self._env.get_template(name + TEMPLATE_SUFFIX).render(**variables)
        except TemplateNotFound:
            raise TemplateError(f"Prompt template '{name}' not found") from None
        except jinja_errors.TemplateError as exc:
            raise TemplateError(f"Cannot render prompt template '{name}': {exc}") from exc

    def messages(self, system: str, user: str, **variables: Any) -> list[dict[str, str]]:
        """Render a ``[system, user]`` chat message pair."""
        return [
            {"role": "system", "content": self.render(system, **variables)},
            {"role": "user", "content": self.render(user, **variables)},
        ]

    def list_templates(self) -> list[str]:
        return sorted(
            {
                t.removesuffix(TEMPLATE_SUFFIX)
                for t in self._env.list_templates()
                if t.endswith(TEMPLATE_SUFFIX)
            }
        )
