import logging
from typing import Any, Optional

from dependency_injector import containers, providers

from .config.models import RuntimeSettings
from .config.setup import setup_logging
from .core import CORE_MODULE, define_core_module
from .di.injector import Injector
from .loader import import_definitions
from .modules.registry import Module, Registry
from .scope.scope import Scope

logger = logging.getLogger(__name__)


class RuntimeContainer(containers.DeclarativeContainer):
    __self__ = providers.Self()
    api = providers.Object(None)

    settings = providers.Object(None)
    logger = providers.Object(None)

    injector = providers.Object(None)
    root_scope = providers.Object(None)


class Runtime:
    """
    One registry, one injector and one scope tree.

    Modules are defined while the runtime is in the configuration phase;
    :meth:`bootstrap` loads them and switches to the run phase. Tests should
    build a fresh runtime each time instead of sharing one.
    """

    def __init__(
            self,
            settings: Optional[RuntimeSettings] = None,
            container: Optional[containers.DynamicContainer] = None
    ) -> None:
        self._settings = settings or RuntimeSettings()
        self._container = container or RuntimeContainer()
        self._registry = Registry(self._settings.duplicate_policy)
        self._injector: Optional[Injector] = None

        self._container.api.override(providers.Object(self))
        self._container.settings.override(providers.Object(self._settings))
        self._container.logger.override(
            providers.Singleton(setup_logging, CORE_MODULE, self._settings.logging_level)
        )

        define_core_module(self._registry, self._settings, self._container.logger())

    @property
    def settings(self) -> RuntimeSettings:
        return self._settings

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def logger(self) -> logging.Logger:
        return self._container.logger()

    @property
    def bootstrapped(self) -> bool:
        return self._injector is not None

    @property
    def injector(self) -> Injector:
        if self._injector is None:
            raise RuntimeError("Runtime not bootstrapped")
        return self._injector

    @property
    def root_scope(self) -> Scope:
        return self.resolve("root_scope")

    def raw_container(self) -> containers.DynamicContainer:
        return self._container

    def module(self, name: str, requires: Optional[list[str]] = None) -> Module:
        """
        Define a module when ``requires`` is given, otherwise fetch an existing one.

            runtime.module("app", ["rescope"]).constant("answer", 42)
            runtime.module("app").factory(...)
        """
        if requires is None:
            return self._registry.get_module(name)
        return self._registry.define_module(name, requires)

    def bootstrap(self, *module_names: str) -> Injector:
        """
        Load the core module and the given modules, then enter the run phase.

        :param module_names: Modules to load; defaults to ``settings.modules``.
        :return: The injector, now in the run phase.
        """
        if self._injector is not None:
            raise RuntimeError("Runtime already bootstrapped")

        import_definitions(self, self._settings.imports)

        names = module_names or tuple(self._settings.modules)
        logger.info("Bootstrapping runtime with modules: %s", ", ".join(names) or "<none>")

        injector = Injector(self._registry, strict=self._settings.strict_di)
        injector.load(CORE_MODULE, *names)
        self._injector = injector

        self._container.injector.override(providers.Object(injector))
        self._container.root_scope.override(providers.Callable(injector.resolve, "root_scope"))
        return injector

    def resolve(self, name: str) -> Any:
        return self.injector.resolve(name)
