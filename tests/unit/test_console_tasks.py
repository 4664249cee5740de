"""Tests for console tasks and their Typer commands."""

from __future__ import annotations

from typing import Any

import pytest
from typer.testing import CliRunner


def _task(name: str = "blog:reindex", result: int | None = None, seen: list[list[str]] | None = None) -> Any:
    from cog.console import Task

    class Recording(Task):
        description = "Rebuild the search index"

        def run(self, args: list[str]) -> int | None:
            if seen is not None:
                seen.append(args)
            return result

    return Recording(name)


class TestTask:
    """Tasks carry a name and description."""

    def test_constructor_overrides_class_attributes(self) -> None:
        from cog.console import Task

        class Purge(Task):
            name = "blog:purge"
            description = "Delete drafts"

            def run(self, args: list[str]) -> int | None:
                return None

        assert (Purge().name, Purge().description) == ("blog:purge", "Delete drafts")
        renamed = Purge("shop:purge", "Delete carts")
        assert (renamed.name, renamed.description) == ("shop:purge", "Delete carts")


class TestTaskCollection:
    """Registration rules."""

    def test_add_and_lookup(self) -> None:
        from cog.console import TaskCollection

        task = _task()
        tasks = TaskCollection()
        assert tasks.add(task) is tasks
        assert "blog:reindex" in tasks
        assert tasks.get("blog:reindex") is task
        assert tasks.get("missing") is None
        assert len(tasks) == 1

    def test_all_sorted_by_name(self) -> None:
        from cog.console import TaskCollection

        tasks = TaskCollection().add(_task("shop:sync")).add(_task("blog:reindex"))
        assert [t.name for t in tasks.all()] == ["blog:reindex", "shop:sync"]
        assert [t.name for t in tasks] == ["blog:reindex", "shop:sync"]

    def test_description_override(self) -> None:
        from cog.console import TaskCollection

        tasks = TaskCollection().add(_task(), "Reindex everything")
        assert tasks.get("blog:reindex").description == "Reindex everything"

    def test_container_injected(self) -> None:
        from cog.console import TaskCollection
        from cog.service import Container

        container = Container()
        task = _task()
        TaskCollection(container).add(task)
        assert task.services is container

    def test_duplicate_rejected(self) -> None:
        from cog.console import TaskCollection
        from cog.errors import TaskError

        tasks = TaskCollection().add(_task())
        with pytest.raises(TaskError, match="already registered"):
            tasks.add(_task())

    def test_nameless_task_rejected(self) -> None:
        from cog.console import TaskCollection
        from cog.errors import TaskError

        with pytest.raises(TaskError, match="has no name"):
            TaskCollection().add(_task(name=""))

    def test_non_task_rejected(self) -> None:
        from cog.console import TaskCollection
        from cog.errors import TaskError

        with pytest.raises(TaskError, match="is not a console task"):
            TaskCollection().add(object())  # type: ignore[arg-type]


class TestBuildTyperApp:
    """Each task becomes a command that passes its arguments through."""

    def test_arguments_passed_through(self) -> None:
        from cog.console import TaskCollection, build_typer_app

        seen: list[list[str]] = []
        app = build_typer_app(TaskCollection().add(_task(seen=seen)))

        result = CliRunner().invoke(app, ["blog:reindex", "posts", "--all", "-v"])
        assert result.exit_code == 0, result.output
        assert seen == [["posts", "--all", "-v"]]

    def test_no_arguments(self) -> None:
        from cog.console import TaskCollection, build_typer_app

        seen: list[list[str]] = []
        app = build_typer_app(TaskCollection().add(_task(seen=seen)))

        assert CliRunner().invoke(app, ["blog:reindex"]).exit_code == 0
        assert seen == [[]]

    def test_non_zero_result_is_exit_code(self) -> None:
        from cog.console import TaskCollection, build_typer_app

        app = build_typer_app(TaskCollection().add(_task(result=3)))
        assert CliRunner().invoke(app, ["blog:reindex"]).exit_code == 3

    def test_help_lists_tasks(self) -> None:
        from cog.console import TaskCollection, build_typer_app

        app = build_typer_app(TaskCollection().add(_task()).add(_task("shop:sync")))
        result = CliRunner().invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "blog:reindex" in result.output
        assert "shop:sync" in result.output
        assert "Rebuild the search index" in result.output

    def test_unknown_task(self) -> None:
        from cog.console import TaskCollection, build_typer_app

        app = build_typer_app(TaskCollection().add(_task()))
        assert CliRunner().invoke(app, ["missing"]).exit_code == 2
