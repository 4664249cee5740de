"""Shared pytest fixtures for Cog tests."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

ModuleFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _restore_cog_logging() -> Iterator[None]:
    """setup_logging() replaces handlers on the ``cog`` logger; undo it after each test."""
    cog_logger = logging.getLogger("cog")
    saved = (list(cog_logger.handlers), cog_logger.level, cog_logger.propagate)
    yield
    cog_logger.handlers[:] = saved[0]
    cog_logger.setLevel(saved[1])
    cog_logger.propagate = saved[2]


@pytest.fixture
def app_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """An importable application directory; packages created in it are unloaded afterwards."""
    root = tmp_path / "app"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))
    yield root

    for name, module in list(sys.modules.items()):
        location = getattr(module, "__file__", None) or ""
        search_path = list(getattr(module, "__path__", []) or [])
        if str(root) in location or any(str(root) in str(p) for p in search_path):
            del sys.modules[name]


@pytest.fixture
def make_module(app_root: Path) -> ModuleFactory:
    """
    Create a Cog module package under ``app_root``.

    ``make_module("acme.blog", {"controller/post.py": "...", "view/post.html.jinja": "..."})``
    creates ``acme/blog`` with every parent package and an ``__init__.py``
    in each directory that holds Python files.
    """

    def _make(name: str, files: dict[str, str] | None = None) -> Path:
        package_dir = app_root
        for part in name.split("."):
            package_dir = package_dir / part
            package_dir.mkdir(exist_ok=True)
            init = package_dir / "__init__.py"
            if not init.exists():
                init.write_text("")

        for relative, content in (files or {}).items():
            target = package_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.suffix == ".py":
                directory = target.parent
                while directory != package_dir and not (directory / "__init__.py").exists():
                    (directory / "__init__.py").write_text("")
                    directory = directory.parent
            target.write_text(content)
        return package_dir

    return _make
