"""
Reference parsing.

A reference is a compact way to point at a controller, view or class inside
a Cog module. The parser splits a reference into its parts and renders them
as filesystem paths, dotted class names or logical controller names.

Examples::

    acme:blog:Post#view           vendor=acme module=blog path=[Post] method=view
    acme:blog:admin:Post#edit     vendor=acme module=blog path=[admin, Post]
    acme:blog:post:list           a view: path=[post, list]
    ::Post#view                   vendor/module of the calling code
    ::post:list

Relative references (starting with ``::``) find the vendor and module of
the code that is parsing them by walking the call stack, so a module can
refer to its own controllers and views without naming itself.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from cog.errors import InvalidReferenceError, ReferenceNotParsedError

SEPARATOR = ":"
METHOD_SEPARATOR = "#"
RELATIVE_MARKER = "::"

CONTROLLER_NAMESPACE = "controller"
VIEW_NAMESPACE = "view"

_PART = r"[A-Za-z_][\w-]*"
_REFERENCE_RE = re.compile(
    rf"^(?:{re.escape(RELATIVE_MARKER)}|{_PART}{SEPARATOR}{_PART}{SEPARATOR})"
    rf"{_PART}(?:{SEPARATOR}{_PART})*"
    rf"(?:{METHOD_SEPARATOR}[A-Za-z_]\w*)?$"
)

PathNamespace = str | Sequence[str] | None


@dataclass(frozen=True)
class ReferenceParts:
    """The parts of a parsed reference."""

    vendor: str
    module: str
    path: list[str] = field(default_factory=list)
    method: str | None = None

    @property
    def module_name(self) -> str:
        """Importable package name of the owning module (``vendor.module``)."""
        return f"{self.vendor}.{self.module}"


class ReferenceParser:
    """
    Parses view/controller references.

    ``parse()`` stores the result on the instance and returns it, so the
    accessors can be chained::

        parser.parse("acme:blog:Post#view").get_class_name("controller")
    """

    def __init__(self, trace_calling_module: Callable[[], str] | None = None):
        """
        Args:
            trace_calling_module: Returns the ``vendor.module`` name of the
                code that triggered the parse. Needed for relative references.
        """
        self._trace_calling_module = trace_calling_module
        self._reference: str | None = None
        self._vendor: str | None = None
        self._module: str | None = None
        self._path: list[str] = []
        self._method: str | None = None

    @staticmethod
    def is_valid_reference(reference: object) -> bool:
        """Check whether a string looks like a reference.

        This is a syntax check only; relative references are not resolved.
        """
        return isinstance(reference, str) and bool(_REFERENCE_RE.match(reference))

    def parse(self, reference: str) -> ReferenceParser:
        """
        Parse a reference.

        Raises:
            InvalidReferenceError: If the vendor, module, path or method
                cannot be determined
        """
        self.clear()
        self._reference = reference
        try:
            self._parse_method()
            self._parse_vendor_and_module()
            self._parse_path()
        except InvalidReferenceError:
            self.clear()
            raise
        return self

    def clear(self) -> None:
        """Forget the last parsed reference."""
        self._reference = None
        self._vendor = None
        self._module = None
        self._path = []
        self._method = None

    @property
    def reference(self) -> str | None:
        return self._reference

    def is_relative(self) -> bool:
        """Whether the parsed reference used the relative marker."""
        reference = self._check_parsed()
        return reference.startswith(RELATIVE_MARKER)

    def get_all_parts(self) -> ReferenceParts:
        """Get all parts of the reference."""
        self._check_parsed()
        assert self._vendor is not None and self._module is not None
        return ReferenceParts(
            vendor=self._vendor,
            module=self._module,
            path=list(self._path),
            method=self._method,
        )

    def get_absolute_reference(self) -> str:
        """The parsed reference with the vendor and module written out."""
        self._check_parsed()
        reference = SEPARATOR.join([self._vendor or "", self._module or "", *self._path])
        if self._method:
            reference += METHOD_SEPARATOR + self._method
        return reference

    def get_full_path(
        self, path_namespace: PathNamespace = None, separator: str | None = None
    ) -> str:
        """
        Get the full path to the referenced file.

        ``path_namespace`` is inserted after the module name and before the
        reference's path (a list for more than one directory).
        """
        self._check_parsed()
        separator = os.sep if separator is None else separator
        return self._join(
            [self._vendor or "", self._module or "", *_namespace_parts(path_namespace), *self._path],
            separator,
        )

    def get_path(self, path_namespace: PathNamespace = None, separator: str | None = None) -> str:
        """Like :meth:`get_full_path` without the vendor and module."""
        self._check_parsed()
        separator = os.sep if separator is None else separator
        return self._join([*_namespace_parts(path_namespace), *self._path], separator)

    def get_class_name(self, path_namespace: PathNamespace = None) -> str:
        """Get the dotted import path of the referenced class."""
        return self.get_full_path(path_namespace, ".")

    def get_logical_controller_name(self) -> str:
        """
        Get the logical controller name for this reference.

        Formatted as ``package.module:Class.method`` so that it can be
        resolved with :func:`pkgutil.resolve_name`.

        Raises:
            InvalidReferenceError: If the reference has no method
        """
        self._check_parsed()
        if not self._method:
            raise InvalidReferenceError(
                f"Reference `{self._reference}` has no method to use as a controller",
                self._reference,
            )
        module_path, _, class_name = self.get_class_name(CONTROLLER_NAMESPACE).rpartition(".")
        return f"{module_path}:{class_name}.{self._method}"

    # ------------------------------------------------------------------
    # Parsing steps
    # ------------------------------------------------------------------

    def _parse_method(self) -> None:
        reference = self._reference or ""
        if METHOD_SEPARATOR not in reference:
            return
        method = reference.rpartition(METHOD_SEPARATOR)[2]
        if not method:
            raise InvalidReferenceError(
                f"Method name is empty in reference: `{reference}`", reference
            )
        self._method = method

    def _parse_vendor_and_module(self) -> None:
        reference = self._reference or ""
        if reference.startswith(RELATIVE_MARKER):
            if self._trace_calling_module is None:
                raise InvalidReferenceError(
                    f"Relative reference `{reference}` cannot be resolved without a module tracer",
                    reference,
                )
            full_module_name = self._trace_calling_module().split(".")
        else:
            # Text before the second separator
            full_module_name = reference.split(SEPARATOR, 2)[:2]
            if reference.count(SEPARATOR) < 2:
                full_module_name = full_module_name[:1]

        full_module_name = [part for part in full_module_name if part]

        if len(full_module_name) != 2:
            raise InvalidReferenceError(
                f"Vendor and module name could not be determined from reference: `{reference}`",
                reference,
            )

        self._vendor, self._module = full_module_name

    def _parse_path(self) -> None:
        reference = self._reference or ""

        if self._method:
            reference = reference[: -len(METHOD_SEPARATOR + self._method)]

        if reference.startswith(RELATIVE_MARKER):
            reference = reference[len(RELATIVE_MARKER) :]
        else:
            reference = reference[len(f"{self._vendor}{SEPARATOR}{self._module}{SEPARATOR}") :]

        path = reference.split(SEPARATOR)
        if not reference or not all(path):
            raise InvalidReferenceError(
                f"Path could not be determined from reference: `{self._reference}`",
                self._reference,
            )
        self._path = path

    def _check_parsed(self) -> str:
        if self._reference is None:
            raise ReferenceNotParsedError("No reference has been parsed yet.")
        return self._reference

    @staticmethod
    def _join(parts: list[str], separator: str) -> str:
        return separator.join(part for part in parts if part)


def _namespace_parts(path_namespace: PathNamespace) -> list[str]:
    if path_namespace is None:
        return []
    if isinstance(path_namespace, str):
        return [path_namespace]
    return list(path_namespace)
