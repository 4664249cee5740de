"""Tests for the service container."""

from __future__ import annotations

import pytest


class TestParametersAndFactories:
    """Plain values are returned as stored; callables are factories."""

    def test_parameter_returned_as_is(self) -> None:
        from cog.service import Container

        container = Container()
        container["app.name"] = "blog"
        assert container["app.name"] == "blog"

    def test_factory_called_on_every_access(self) -> None:
        from cog.service import Container

        container = Container()
        container["list"] = lambda c: []
        assert container["list"] is not container["list"]

    def test_factory_receives_container(self) -> None:
        from cog.service import Container

        container = Container({"name": "blog"})
        container["greeting"] = lambda c: f"hello {c['name']}"
        assert container["greeting"] == "hello blog"

    def test_undefined_identifier_raises(self) -> None:
        from cog.errors import ServiceNotFoundError
        from cog.service import Container

        with pytest.raises(ServiceNotFoundError, match="Identifier `nope` is not defined"):
            Container()["nope"]

    def test_not_found_is_a_key_error(self) -> None:
        from cog.service import Container

        with pytest.raises(KeyError):
            Container()["nope"]

    def test_contains_delete_and_keys(self) -> None:
        from cog.service import Container

        container = Container({"a": 1, "b": 2})
        assert "a" in container
        del container["a"]
        assert "a" not in container
        assert container.keys() == ["b"]
        assert len(container) == 1

    def test_get_with_default(self) -> None:
        from cog.service import Container

        container = Container({"a": 1})
        assert container.get("a") == 1
        assert container.get("missing", "fallback") == "fallback"


class TestShareAndProtect:
    """share() builds once; protect() stores callables as values."""

    def test_shared_factory_built_once(self) -> None:
        from cog.service import Container

        calls: list[int] = []
        container = Container()
        container["service"] = container.share(lambda c: calls.append(1) or object())

        first = container["service"]
        assert container["service"] is first
        assert calls == [1]
        assert container.is_shared("service")

    def test_plain_factory_not_shared(self) -> None:
        from cog.service import Container

        container = Container()
        container["service"] = lambda c: object()
        assert not container.is_shared("service")

    def test_protected_callable_not_invoked(self) -> None:
        from cog.service import Container

        def helper(x: int) -> int:
            return x * 2

        container = Container()
        container["helper"] = container.protect(helper)
        assert container["helper"] is helper

    def test_raw_returns_definition(self) -> None:
        from cog.service import Container

        def factory(c: Container) -> str:
            return "built"

        container = Container()
        container["service"] = factory
        assert container.raw("service") is factory


class TestExtend:
    """extend() wraps an existing factory."""

    def test_extend_wraps_service(self) -> None:
        from cog.service import Container

        container = Container()
        container["items"] = lambda c: ["a"]
        container.extend("items", lambda items, c: [*items, "b"])
        assert container["items"] == ["a", "b"]

    def test_extend_keeps_shared(self) -> None:
        from cog.service import Container

        container = Container()
        container["items"] = container.share(lambda c: ["a"])
        container.extend("items", lambda items, c: [*items, "b"])

        assert container.is_shared("items")
        assert container["items"] is container["items"]
        assert container["items"] == ["a", "b"]

    def test_extend_parameter_rejected(self) -> None:
        from cog.service import Container

        container = Container({"name": "blog"})
        with pytest.raises(TypeError):
            container.extend("name", lambda value, c: value.upper())

    def test_extend_undefined_raises(self) -> None:
        from cog.errors import ServiceNotFoundError
        from cog.service import Container

        with pytest.raises(ServiceNotFoundError):
            Container().extend("nope", lambda value, c: value)


class TestContainerAware:
    """ContainerAware objects receive the container after creation."""

    def test_services_after_injection(self) -> None:
        from cog.service import Container, ContainerAware

        aware = ContainerAware()
        container = Container()
        aware.set_container(container)
        assert aware.services is container

    def test_services_before_injection_raises(self) -> None:
        from cog.service import ContainerAware

        with pytest.raises(RuntimeError, match="no service container"):
            ContainerAware().services
