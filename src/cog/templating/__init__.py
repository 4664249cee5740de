"""View resolution and template engine delegation."""

from cog.templating.engines import (
    DelegatingEngine,
    Engine,
    JinjaEngine,
    RenderedView,
    StringTemplateEngine,
    create_jinja_env,
)
from cog.templating.view_name_parser import TemplateReference, ViewNameParser

__all__ = [
    "DelegatingEngine",
    "Engine",
    "JinjaEngine",
    "RenderedView",
    "StringTemplateEngine",
    "TemplateReference",
    "ViewNameParser",
    "create_jinja_env",
]
