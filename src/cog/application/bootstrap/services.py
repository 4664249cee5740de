"""
Cog services bootstrap.

Registers the framework's own service definitions when the application is
loaded, before any module bootstrap runs.
"""

from __future__ import annotations

import logging

from cog.application.context import ConsoleContext, WebContext
from cog.bootstrap.interfaces import ServicesBootstrap
from cog.console.tasks import TaskCollection
from cog.controller.base import ResponseBuilder
from cog.controller.resolver import ControllerResolver
from cog.environment import Environment
from cog.event.dispatcher import Event, EventDispatcher
from cog.field.factory import FieldFactory
from cog.forms.validation import Validator
from cog.forms.wrapper import FormWrapper
from cog.http.request import get_current_request
from cog.manifest import CogManifest
from cog.module.loader import ModuleLoader
from cog.module.locator import ModuleLocator
from cog.reference import ReferenceParser
from cog.routing.router import Router
from cog.security.salt import Salt
from cog.service.container import Container
from cog.templating.engines import (
    DelegatingEngine,
    Engine,
    JinjaEngine,
    StringTemplateEngine,
    create_jinja_env,
)
from cog.templating.view_name_parser import ViewNameParser

logger = logging.getLogger(__name__)


def _create_templating(c: Container) -> DelegatingEngine:
    manifest: CogManifest = c["cfg"]
    parser: ViewNameParser = c["templating.view_name_parser"]

    engines: list[Engine] = []
    for name in manifest.templating.engines:
        if name == JinjaEngine.extension:
            env = create_jinja_env(parser, autoescape=manifest.templating.autoescape)
            engines.append(JinjaEngine(parser, env))
        elif name == StringTemplateEngine.extension:
            engines.append(StringTemplateEngine(parser))
        else:
            raise ValueError(f"Template engine `{name}` is not supported")
    return DelegatingEngine(engines, parser)


def _create_view_name_parser(c: Container) -> ViewNameParser:
    manifest: CogManifest = c["cfg"]
    base_dir = c["app.loader"].get_base_dir()
    return ViewNameParser(
        c["reference_parser"],
        c["module.locator"],
        manifest.templating.engines,
        [base_dir / d for d in manifest.templating.override_dirs],
    )


class Services(ServicesBootstrap):
    """Registers Cog's service definitions."""

    def register_services(self, container: Container) -> None:
        share = Container.share

        container["environment"] = share(lambda c: Environment.from_environ())
        container["env"] = lambda c: c["environment"].get()

        container["event"] = lambda c: Event()
        container["event.dispatcher"] = share(lambda c: EventDispatcher())

        container["router"] = share(lambda c: Router(c["reference_parser"]))
        container["controller.resolver"] = share(
            lambda c: ControllerResolver(c["reference_parser"], c)
        )

        # A new parser per lookup: parsers hold the last parsed reference
        container["reference_parser"] = lambda c: ReferenceParser(
            c["module.loader"].trace_calling_module_name
        )
        container["module.locator"] = share(lambda c: ModuleLocator())
        container["module.loader"] = share(
            lambda c: ModuleLoader(c["module.locator"], c["bootstrap.loader"], c["event.dispatcher"])
        )

        container["task.collection"] = share(lambda c: TaskCollection(c))

        container["templating.view_name_parser"] = share(_create_view_name_parser)
        container["templating"] = share(_create_templating)
        container["response_builder"] = share(lambda c: ResponseBuilder(c["templating"]))

        container["request"] = lambda c: get_current_request()
        container["validator"] = lambda c: Validator()
        container["form"] = lambda c: FormWrapper(c)
        container["field.factory"] = lambda c: FieldFactory()
        container["security.salt"] = share(lambda c: Salt())

        container["app.context.web"] = share(lambda c: WebContext(c))
        container["app.context.console"] = share(lambda c: ConsoleContext(c))

        logger.debug("Registered Cog services")
