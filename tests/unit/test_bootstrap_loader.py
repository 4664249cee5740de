"""Tests for the bootstrap loader's discovery and three-phase loading."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

ModuleFactory = Callable[..., Path]


def _container(context: str = "web") -> Any:
    from cog.console.tasks import TaskCollection
    from cog.environment import Environment
    from cog.event.dispatcher import EventDispatcher
    from cog.routing.router import Router
    from cog.service import Container

    container = Container()
    container["environment"] = container.share(lambda c: Environment(context=context))
    container["router"] = container.share(lambda c: Router())
    container["event.dispatcher"] = container.share(lambda c: EventDispatcher())
    container["task.collection"] = container.share(lambda c: TaskCollection(c))
    return container


def _recording_bootstrap(calls: list[str], label: str) -> Any:
    from cog.bootstrap import EventsBootstrap, RoutesBootstrap, ServicesBootstrap, TasksBootstrap

    class Everything(ServicesBootstrap, RoutesBootstrap, EventsBootstrap, TasksBootstrap):
        def register_services(self, container: Any) -> None:
            calls.append(f"{label}:services")

        def register_routes(self, router: Any) -> None:
            calls.append(f"{label}:routes")

        def register_events(self, dispatcher: Any) -> None:
            calls.append(f"{label}:events")

        def register_tasks(self, tasks: Any) -> None:
            calls.append(f"{label}:tasks")

    return Everything()


class TestAdd:
    """add() accepts bootstraps and injects the container."""

    def test_add_returns_self(self) -> None:
        from cog.bootstrap import BootstrapLoader

        loader = BootstrapLoader(_container())
        bootstrap = _recording_bootstrap([], "a")
        assert loader.add(bootstrap) is loader
        assert loader.bootstraps == [bootstrap]

    def test_add_rejects_non_bootstrap(self) -> None:
        from cog.bootstrap import BootstrapLoader

        with pytest.raises(TypeError, match="is not a Bootstrap"):
            BootstrapLoader(_container()).add(object())  # type: ignore[arg-type]

    def test_container_injected_into_aware_bootstrap(self) -> None:
        from cog.bootstrap import BootstrapLoader, ServicesBootstrap
        from cog.service import ContainerAware

        class Aware(ServicesBootstrap, ContainerAware):
            def register_services(self, container: Any) -> None:
                pass

        container = _container()
        bootstrap = Aware()
        BootstrapLoader(container).add(bootstrap)
        assert bootstrap.services is container

    def test_clear(self) -> None:
        from cog.bootstrap import BootstrapLoader

        loader = BootstrapLoader(_container()).add(_recording_bootstrap([], "a"))
        assert loader.clear() is loader
        assert loader.bootstraps == []


class TestLoadPhases:
    """Services for all, then routes for all, then events and tasks per bootstrap."""

    def test_phase_order_across_bootstraps(self) -> None:
        from cog.bootstrap import BootstrapLoader

        calls: list[str] = []
        loader = BootstrapLoader(_container(context="console"))
        loader.add(_recording_bootstrap(calls, "a")).add(_recording_bootstrap(calls, "b"))
        loader.load()

        assert calls == [
            "a:services",
            "b:services",
            "a:routes",
            "b:routes",
            "a:events",
            "a:tasks",
            "b:events",
            "b:tasks",
        ]

    def test_tasks_skipped_in_web_context(self) -> None:
        from cog.bootstrap import BootstrapLoader

        calls: list[str] = []
        BootstrapLoader(_container(context="web")).add(_recording_bootstrap(calls, "a")).load()
        assert "a:tasks" not in calls
        assert "a:events" in calls

    def test_load_clears_bootstraps(self) -> None:
        from cog.bootstrap import BootstrapLoader

        calls: list[str] = []
        loader = BootstrapLoader(_container())
        loader.add(_recording_bootstrap(calls, "a")).load()
        assert loader.bootstraps == []
        loader.load()
        assert calls.count("a:services") == 1

    def test_services_defined_in_first_phase_visible_to_routes(self) -> None:
        from cog.bootstrap import BootstrapLoader, RoutesBootstrap, ServicesBootstrap

        seen: list[str] = []

        class Routes(RoutesBootstrap):
            def __init__(self, container: Any) -> None:
                self._container = container

            def register_routes(self, router: Any) -> None:
                seen.append(self._container["blog.title"])

        class Services(ServicesBootstrap):
            def register_services(self, container: Any) -> None:
                container["blog.title"] = "My blog"

        container = _container()
        # Routes added first still see the service defined by the later bootstrap
        BootstrapLoader(container).add(Routes(container)).add(Services()).load()
        assert seen == ["My blog"]

    def test_services_only_phase_never_touches_router(self) -> None:
        from cog.bootstrap import BootstrapLoader, ServicesBootstrap
        from cog.service import Container

        class Services(ServicesBootstrap):
            def register_services(self, container: Any) -> None:
                container["x"] = 1

        # No router, dispatcher, task collection or environment defined
        container = Container()
        BootstrapLoader(container).add(Services()).load()
        assert container["x"] == 1


class TestAddFromDirectory:
    """Bootstrap classes are discovered from a module's bootstrap package."""

    def test_discovers_concrete_bootstraps(self, make_module: ModuleFactory) -> None:
        from cog.bootstrap import BootstrapLoader

        module_dir = make_module(
            "discovery.shop",
            {
                "bootstrap/services.py": (
                    "from cog.bootstrap import ServicesBootstrap\n\n"
                    "class Services(ServicesBootstrap):\n"
                    "    def register_services(self, container):\n"
                    "        container['shop.currency'] = 'GBP'\n"
                ),
                "bootstrap/routes.py": (
                    "from cog.bootstrap import RoutesBootstrap\n\n"
                    "class Routes(RoutesBootstrap):\n"
                    "    def register_routes(self, router):\n"
                    "        router['discovery.shop'].add('shop.index', '/', 'discovery:shop:Shop#index')\n"
                ),
            },
        )
        container = _container()
        loader = BootstrapLoader(container)
        loader.add_from_directory(module_dir / "bootstrap", "discovery.shop.bootstrap")

        assert [type(b).__name__ for b in loader.bootstraps] == ["Routes", "Services"]
        loader.load()
        assert container["shop.currency"] == "GBP"
        assert container["router"].get("shop.index") is not None

    def test_skips_imported_and_abstract_classes(self, make_module: ModuleFactory) -> None:
        from cog.bootstrap import BootstrapLoader

        module_dir = make_module(
            "discovery.news",
            {
                "bootstrap/events.py": (
                    "from cog.bootstrap import EventsBootstrap, ServicesBootstrap\n\n"
                    "class Events(EventsBootstrap):\n"
                    "    def register_events(self, dispatcher):\n"
                    "        pass\n"
                ),
            },
        )
        loader = BootstrapLoader(_container())
        loader.add_from_directory(module_dir / "bootstrap", "discovery.news.bootstrap")
        assert [type(b).__name__ for b in loader.bootstraps] == ["Events"]

    def test_skips_underscore_files(self, make_module: ModuleFactory) -> None:
        from cog.bootstrap import BootstrapLoader

        module_dir = make_module(
            "discovery.faq",
            {
                "bootstrap/_private.py": (
                    "from cog.bootstrap import ServicesBootstrap\n\n"
                    "class Hidden(ServicesBootstrap):\n"
                    "    def register_services(self, container):\n"
                    "        pass\n"
                ),
            },
        )
        loader = BootstrapLoader(_container())
        loader.add_from_directory(module_dir / "bootstrap", "discovery.faq.bootstrap")
        assert loader.bootstraps == []

    def test_missing_directory_is_ignored(self, tmp_path: Path) -> None:
        from cog.bootstrap import BootstrapLoader

        loader = BootstrapLoader(_container())
        assert loader.add_from_directory(tmp_path / "nope", "nope.bootstrap") is loader
        assert loader.bootstraps == []

    def test_add_from_package(self, make_module: ModuleFactory) -> None:
        from cog.bootstrap import BootstrapLoader

        make_module(
            "discovery.wiki",
            {
                "bootstrap/services.py": (
                    "from cog.bootstrap import ServicesBootstrap\n\n"
                    "class Services(ServicesBootstrap):\n"
                    "    def register_services(self, container):\n"
                    "        container['wiki'] = True\n"
                ),
            },
        )
        container = _container()
        BootstrapLoader(container).add_from_package("discovery.wiki.bootstrap").load()
        assert container["wiki"] is True
