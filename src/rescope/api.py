"""
Public API for the rescope runtime.

This module exports all public interfaces for consumers to use.
Import only from this module for stable API access.
"""
from typing import Any, Callable, Optional

from dependency_injector.wiring import inject

from .config.base import Settings
from .config.loaders import load_file, load_settings
from .config.models import RuntimeSettings
from .config.setup import setup_logging
from .container import Runtime, RuntimeContainer
from .core import CORE_MODULE, RootScopeProvider
from .di.injector import Injector, Phase, ResolutionState
from .di.providers import (
    get_component,
    get_logger,
    get_raw_container,
    get_root_scope,
    get_runtime,
    get_settings,
)
from .di.wiring import unwire, wire
from .errors import (
    AnnotationError,
    CircularDependencyError,
    DigestInProgressError,
    DigestNotStabilizingError,
    DuplicateComponentError,
    DuplicateModuleError,
    InjectorError,
    PhaseViolationError,
    RegistryError,
    RegistrySealedError,
    RescopeError,
    ScopeDestroyedError,
    ScopeError,
    UnknownComponentError,
    UnknownModuleError,
)
from .loader import import_definitions
from .modules.annotate import annotate, depends
from .modules.recipes import Recipe, RecipeKind, RegistrationInfo
from .modules.registry import DuplicatePolicy, Module, Registry
from .scope.events import DESTROY_EVENT, ScopeEvent
from .scope.scope import Deregister, Scope
from .scope.watchers import Expression


def create_child(parent: Scope, isolate: bool = False) -> Scope:
    return parent.new(isolate=isolate)


def destroy(scope: Scope) -> None:
    scope.destroy()


def watch(
        scope: Scope,
        accessor: Expression,
        listener: Optional[Callable[[Any, Any], Any]] = None,
        deep_compare: bool = False
) -> Deregister:
    return scope.watch(accessor, listener, deep=deep_compare)


def on(scope: Scope, event_name: str, handler: Callable[..., Any]) -> Deregister:
    return scope.on(event_name, handler)


def emit(scope: Scope, event_name: str, *args: Any) -> ScopeEvent:
    return scope.emit(event_name, *args)


def broadcast(scope: Scope, event_name: str, *args: Any) -> ScopeEvent:
    return scope.broadcast(event_name, *args)


def digest(root_scope: Scope) -> int:
    return root_scope.digest()


__all__ = [
    # Runtime
    "Runtime",
    "RuntimeContainer",
    "CORE_MODULE",
    "RootScopeProvider",
    # Registry
    "Registry",
    "Module",
    "Recipe",
    "RecipeKind",
    "RegistrationInfo",
    "DuplicatePolicy",
    "annotate",
    "depends",
    "import_definitions",
    # Injector
    "Injector",
    "Phase",
    "ResolutionState",
    # Scopes
    "Scope",
    "ScopeEvent",
    "DESTROY_EVENT",
    "create_child",
    "destroy",
    "watch",
    "on",
    "emit",
    "broadcast",
    "digest",
    # Wiring
    "get_component",
    "get_logger",
    "get_raw_container",
    "get_root_scope",
    "get_runtime",
    "get_settings",
    "wire",
    "unwire",
    "inject",
    # Config
    "Settings",
    "RuntimeSettings",
    "load_file",
    "load_settings",
    # Logging
    "setup_logging",
    # Errors
    "RescopeError",
    "RegistryError",
    "UnknownModuleError",
    "DuplicateModuleError",
    "DuplicateComponentError",
    "RegistrySealedError",
    "InjectorError",
    "UnknownComponentError",
    "CircularDependencyError",
    "PhaseViolationError",
    "AnnotationError",
    "ScopeError",
    "ScopeDestroyedError",
    "DigestInProgressError",
    "DigestNotStabilizingError",
]
