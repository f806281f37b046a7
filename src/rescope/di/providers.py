"""
Markers for ``dependency_injector`` wiring.

Use them as parameter defaults of functions decorated with
``dependency_injector.wiring.inject`` in modules wired with
:func:`rescope.di.wiring.wire`:

    @inject
    def render(scope=get_root_scope(), greeter=get_component("greeter")):
        ...
"""
import inspect
from logging import Logger
from typing import TYPE_CHECKING, Any

from dependency_injector.wiring import Provide, provided

from ..modules.recipes import clean_module_name

if TYPE_CHECKING:
    from dependency_injector.containers import DynamicContainer

    from ..config.models import RuntimeSettings
    from ..container import Runtime
    from ..scope.scope import Scope


def get_component(name: str) -> Any:
    return Provide["injector", provided().resolve.call(name)]


def get_root_scope() -> "Scope":
    return Provide["root_scope"]


def get_settings() -> "RuntimeSettings":
    return Provide["settings"]


def get_runtime() -> "Runtime":
    return Provide["api", provided()]


def get_raw_container() -> "DynamicContainer":
    return Provide["__self__", provided()]


def get_logger(*name: str) -> Logger:
    if not name:
        calling_frame = inspect.stack()[1]
        mod = inspect.getmodule(calling_frame[0])
        name = clean_module_name(mod.__name__) if mod else "logger"
    else:
        name = ".".join(name)

    return Provide["logger", provided().getChild.call(name)]
