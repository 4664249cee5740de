"""
Console tasks.

Modules register tasks from a ``TasksBootstrap``; tasks only get
registered when the application runs in the console context::

    class Bootstrap(TasksBootstrap):
        def register_tasks(self, tasks):
            tasks.add(ReindexTask())
            tasks.add(PurgeTask(), "Delete expired drafts")

Each task becomes a Typer command named after the task. Arguments after the
task name are passed to :meth:`Task.run` untouched.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Annotated

import typer

from cog.errors import TaskError
from cog.service.container import Container, ContainerAware

logger = logging.getLogger(__name__)


class Task(ContainerAware, ABC):
    """A console task. Subclasses set ``name`` and implement :meth:`run`."""

    name: str = ""
    description: str = ""

    def __init__(self, name: str | None = None, description: str | None = None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description

    @abstractmethod
    def run(self, args: list[str]) -> int | None:
        """Run the task. A non-zero return value becomes the exit code."""


class TaskCollection:
    """Registered console tasks by name."""

    def __init__(self, container: Container | None = None):
        self._container = container
        self._tasks: dict[str, Task] = {}

    def add(self, task: Task, description: str | None = None) -> TaskCollection:
        """
        Register a task.

        Raises:
            TaskError: If the task has no name or the name is taken
        """
        if not isinstance(task, Task):
            raise TaskError(f"`{type(task).__name__}` is not a console task")
        if not task.name:
            raise TaskError(f"Task `{type(task).__name__}` has no name")
        if task.name in self._tasks:
            raise TaskError(f"Task `{task.name}` is already registered")

        if description is not None:
            task.description = description
        if self._container is not None:
            task.set_container(self._container)
        self._tasks[task.name] = task
        logger.debug("Registered task %s", task.name)
        return self

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def all(self) -> list[Task]:
        return sorted(self._tasks.values(), key=lambda t: t.name)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._tasks)


def _task_command(task: Task):  # type: ignore[no-untyped-def]
    def command(
        args: Annotated[list[str] | None, typer.Argument(help="Arguments passed to the task")] = None,
    ) -> None:
        result = task.run(list(args or []))
        if result:
            raise typer.Exit(code=int(result))

    command.__name__ = task.name.replace(":", "_").replace("-", "_")
    return command


def build_typer_app(collection: TaskCollection, app: typer.Typer | None = None) -> typer.Typer:
    """Add a command for every task in ``collection`` to a Typer app."""
    if app is None:
        app = typer.Typer(help="Cog console", no_args_is_help=True)

        @app.callback()
        def main() -> None:
            """Run a registered console task."""

    for task in collection.all():
        app.command(
            name=task.name,
            help=task.description or None,
            context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
        )(_task_command(task))
    return app
