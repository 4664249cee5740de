"""
View name parsing.

Resolves a view reference (``acme:blog:post:list``) to a concrete template
file by probing, in order:

1. every content type the current request accepts (most preferred first)
2. every search root: each override directory as
   ``<override>/<vendor>/<module>/<path>``, then the module's own
   ``<module dir>/view/<path>``
3. every template engine in order of preference

The first existing ``<base>.<format>.<engine>`` file wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from cog.errors import StatusError, UnknownModuleError
from cog.http.request import DEFAULT_CONTENT_TYPE, Request, get_current_request
from cog.module.locator import ModuleLocator
from cog.reference import VIEW_NAMESPACE, ReferenceParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateReference:
    """A resolved template file and the engine that renders it."""

    path: Path
    engine: str
    format: str = "html"

    @property
    def name(self) -> str:
        return str(self.path)


class ViewNameParser:
    """Turns view references into :class:`TemplateReference` objects."""

    def __init__(
        self,
        reference_parser: ReferenceParser,
        locator: ModuleLocator,
        engines: list[str],
        override_dirs: list[Path] | None = None,
    ):
        """
        Args:
            reference_parser: Parser used to split the view reference
            locator: Finds each module's directory
            engines: Template file extensions, in order of preference
            override_dirs: Application directories searched before modules
        """
        self._parser = reference_parser
        self._locator = locator
        self._engines = list(engines)
        self._override_dirs = [Path(d) for d in (override_dirs or [])]

    @property
    def engines(self) -> list[str]:
        return list(self._engines)

    def parse(self, reference: str | TemplateReference) -> TemplateReference:
        """
        Determine which view file to use for a reference.

        Raises:
            StatusError: 406 if no view exists for any acceptable format
        """
        if isinstance(reference, TemplateReference):
            return reference

        direct = self._parse_file_name(reference)
        if direct is not None:
            return direct

        self._parser.parse(reference)
        parts = self._parser.get_all_parts()
        roots = self._search_roots(parts.module_name)
        relative = Path(*parts.path)
        module_relative = Path(parts.vendor, parts.module, *parts.path)

        for format_name in self._formats():
            for root, is_override in roots:
                base = root / (module_relative if is_override else relative)
                for engine in self._engines:
                    file_name = base.with_name(f"{base.name}.{format_name}.{engine}")
                    if file_name.is_file():
                        logger.debug("Resolved view %s -> %s", reference, file_name)
                        return TemplateReference(file_name, engine, format_name)

        raise StatusError(
            f"View format could not be determined for reference `{reference}`",
            StatusError.NOT_ACCEPTABLE,
        )

    def _formats(self) -> list[str]:
        request = get_current_request()
        content_types = (
            request.get_allowed_content_types() if request is not None else [DEFAULT_CONTENT_TYPE]
        )
        formats: list[str] = []
        for mime_type in content_types:
            format_name = Request.get_format(mime_type)
            if format_name and format_name not in formats:
                formats.append(format_name)
        return formats

    def _search_roots(self, module_name: str) -> list[tuple[Path, bool]]:
        roots: list[tuple[Path, bool]] = [(d, True) for d in self._override_dirs]
        try:
            roots.append((self._locator.get_path(module_name) / VIEW_NAMESPACE, False))
        except UnknownModuleError:
            logger.debug("Module %s not importable, searching override dirs only", module_name)
        return roots

    def _parse_file_name(self, name: str) -> TemplateReference | None:
        """Accept a plain ``name.<format>.<engine>`` file path."""
        if ReferenceParser.is_valid_reference(name):
            return None
        path = Path(name)
        suffixes = path.suffixes
        if len(suffixes) < 2 or not path.is_file():
            return None
        engine = suffixes[-1].lstrip(".")
        if engine not in self._engines:
            return None
        return TemplateReference(path, engine, suffixes[-2].lstrip("."))
