"""
The built-in ``rescope`` module, loaded by every runtime before any other.

It provides:

* ``settings`` and ``logger`` constants,
* ``exception_handler``, the factory used by scopes to report errors raised
  by watchers, listeners and async expressions,
* ``root_scope``, a provider whose configuration surface
  (:class:`RootScopeProvider`) tunes the digest before the root scope exists.
"""
import logging
from logging import Logger
from typing import Optional

from .config.models import RuntimeSettings
from .modules.annotate import depends
from .modules.registry import Module, Registry
from .scope.digest import ExceptionHandler
from .scope.scope import Scope

CORE_MODULE = "rescope"


@depends("settings")
class RootScopeProvider:

    def __init__(self, settings: RuntimeSettings) -> None:
        self._digest_ttl = settings.digest_ttl

    def digest_ttl(self, value: Optional[int] = None) -> int:
        """Get or set the number of dirty iterations a digest may take."""
        if value is not None:
            if value < 1:
                raise ValueError(f"Digest TTL must be at least 1, got {value}")
            self._digest_ttl = value
        return self._digest_ttl

    @depends("exception_handler")
    def get(self, exception_handler: ExceptionHandler) -> Scope:
        return Scope(digest_ttl=self._digest_ttl, exception_handler=exception_handler)


@depends("logger")
def exception_handler_factory(logger: Logger) -> ExceptionHandler:

    def handle(exception: BaseException, cause: Optional[str] = None) -> None:
        logger.error("Error in %s: %s", cause or "scope callback", exception, exc_info=exception)
        raise exception

    return handle


def define_core_module(
        registry: Registry,
        settings: RuntimeSettings,
        logger: Optional[Logger] = None
) -> Module:
    return registry.define_module(CORE_MODULE) \
        .constant("settings", settings) \
        .constant("logger", logger or logging.getLogger(CORE_MODULE)) \
        .factory("exception_handler", exception_handler_factory) \
        .provider("root_scope", RootScopeProvider)
