"""
Template engines and the delegating engine.

Each engine renders the template files of one extension:

- ``jinja``: Jinja2 templates. Templates can extend or include other views
  by reference, e.g. ``{% extends "acme:blog:layout" %}``.
- ``tmpl``: ``string.Template`` files for plain substitutions
  (``$title``), handy for text e-mails and simple fragments.

The delegating engine resolves a view reference once and hands the
resulting file to whichever engine supports it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Any

from jinja2 import BaseLoader, Environment, TemplateNotFound, select_autoescape

from cog import __version__
from cog.errors import InvalidReferenceError, StatusError
from cog.templating.view_name_parser import TemplateReference, ViewNameParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedView:
    """Rendered template output and the format it was rendered for."""

    content: str
    format: str


class Engine(ABC):
    """A template engine for one template file extension."""

    extension: str

    def __init__(self, parser: ViewNameParser):
        self._parser = parser

    def supports(self, name: str | TemplateReference) -> bool:
        try:
            return self._parser.parse(name).engine == self.extension
        except (StatusError, InvalidReferenceError):
            return False

    def exists(self, name: str | TemplateReference) -> bool:
        try:
            return self._parser.parse(name).path.is_file()
        except (StatusError, InvalidReferenceError):
            return False

    def render(self, name: str | TemplateReference, parameters: Mapping[str, Any] | None = None) -> str:
        return self.render_reference(self._parser.parse(name), parameters or {})

    @abstractmethod
    def render_reference(self, template: TemplateReference, parameters: Mapping[str, Any]) -> str:
        """Render an already-resolved template file."""


class ReferenceLoader(BaseLoader):
    """Jinja2 loader that resolves view references and plain file paths."""

    def __init__(self, parser: ViewNameParser):
        self._parser = parser

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool] | None]:
        try:
            reference = self._parser.parse(template)
        except (StatusError, InvalidReferenceError):
            path = Path(template)
            if not path.is_file():
                raise TemplateNotFound(template) from None
        else:
            path = reference.path

        source = path.read_text(encoding="utf-8")
        mtime = path.stat().st_mtime

        def uptodate() -> bool:
            try:
                return path.stat().st_mtime == mtime
            except OSError:
                return False

        return source, str(path), uptodate


class JinjaEngine(Engine):
    """Renders ``.jinja`` view files with Jinja2."""

    extension = "jinja"

    def __init__(self, parser: ViewNameParser, environment: Environment | None = None):
        super().__init__(parser)
        self.environment = environment or create_jinja_env(parser)

    def render_reference(self, template: TemplateReference, parameters: Mapping[str, Any]) -> str:
        return self.environment.get_template(str(template.path)).render(**parameters)


class StringTemplateEngine(Engine):
    """Renders ``.tmpl`` view files with :class:`string.Template`."""

    extension = "tmpl"

    def render_reference(self, template: TemplateReference, parameters: Mapping[str, Any]) -> str:
        source = template.path.read_text(encoding="utf-8")
        return Template(source).safe_substitute({k: str(v) for k, v in parameters.items()})


class DelegatingEngine:
    """Resolves a view once and renders it with the matching engine."""

    def __init__(self, engines: list[Engine], parser: ViewNameParser):
        self._engines = list(engines)
        self._parser = parser

    def add_engine(self, engine: Engine) -> None:
        self._engines.append(engine)

    def get_engine(self, template: TemplateReference) -> Engine:
        """
        Raises:
            RuntimeError: If no engine renders the template's extension
        """
        for engine in self._engines:
            if engine.extension == template.engine:
                return engine
        raise RuntimeError(f"No engine registered for `{template.engine}` templates ({template.path})")

    def supports(self, name: str | TemplateReference) -> bool:
        try:
            template = self._parser.parse(name)
        except (StatusError, InvalidReferenceError):
            return False
        return any(engine.extension == template.engine for engine in self._engines)

    def exists(self, name: str | TemplateReference) -> bool:
        try:
            self._parser.parse(name)
        except (StatusError, InvalidReferenceError):
            return False
        return True

    def render(
        self, name: str | TemplateReference, parameters: Mapping[str, Any] | None = None
    ) -> RenderedView:
        """
        Render a view.

        Raises:
            StatusError: 406 if no view matches the acceptable formats
        """
        template = self._parser.parse(name)
        engine = self.get_engine(template)
        logger.debug("Rendering %s with %s", template.path, engine.extension)
        content = engine.render_reference(template, parameters or {})
        return RenderedView(content=content, format=template.format)


def create_jinja_env(parser: ViewNameParser, autoescape: bool = True) -> Environment:
    """Create the Jinja2 environment used for Cog views."""
    env = Environment(
        loader=ReferenceLoader(parser),
        autoescape=select_autoescape(["html.jinja", "xml.jinja"]) if autoescape else False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals["cog_version"] = __version__
    return env
