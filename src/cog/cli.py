"""
The ``cog`` command.

Loads an application from its loader class and runs it::

    cog serve acme_site.loader:Loader
    cog console acme_site.loader:Loader routes
    cog console acme_site.loader:Loader blog:reindex --all
"""

from __future__ import annotations

import pkgutil
import sys
from pathlib import Path
from typing import Annotated

import typer

from cog._version import get_version
from cog.application.loader import AppLoader
from cog.environment import CogContext

app = typer.Typer(
    help="Cog application runner",
    no_args_is_help=True,
)

BaseDirOption = Annotated[
    Path,
    typer.Option("--base-dir", "-d", help="Application base directory (default: current directory)"),
]


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cog {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show the version"),
    ] = False,
) -> None:
    """Run Cog applications."""


def load_loader_class(target: str, base_dir: Path) -> type[AppLoader]:
    """
    Resolve ``package.module:LoaderClass`` with the base directory importable.

    Raises:
        typer.BadParameter: If the target cannot be imported or is not a loader
    """
    base = str(base_dir.resolve())
    if base not in sys.path:
        sys.path.insert(0, base)
    try:
        loader_class = pkgutil.resolve_name(target)
    except (ImportError, AttributeError, ValueError) as e:
        raise typer.BadParameter(f"Cannot load `{target}`: {e}") from e
    if not isinstance(loader_class, type) or not issubclass(loader_class, AppLoader):
        raise typer.BadParameter(f"`{target}` is not an AppLoader subclass")
    return loader_class


@app.command()
def serve(
    target: Annotated[str, typer.Argument(help="Loader class as package.module:Class")],
    base_dir: BaseDirOption = Path("."),
) -> None:
    """Serve the application over HTTP."""
    loader_class = load_loader_class(target, base_dir)
    loader_class(base_dir, context=CogContext.WEB).run()


@app.command(
    name="console",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_console(
    target: Annotated[str, typer.Argument(help="Loader class as package.module:Class")],
    args: Annotated[list[str] | None, typer.Argument(help="Console command and its arguments")] = None,
    base_dir: BaseDirOption = Path("."),
) -> None:
    """Run a console task or built-in console command."""
    loader_class = load_loader_class(target, base_dir)
    code = loader_class(base_dir, context=CogContext.CONSOLE).run(list(args or []))
    if code:
        raise typer.Exit(code=code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
