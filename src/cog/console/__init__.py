"""Console tasks."""

from cog.console.tasks import Task, TaskCollection, build_typer_app

__all__ = ["Task", "TaskCollection", "build_typer_app"]
