"""
rescope - dependency injection and reactive scopes for Python applications.

This module provides a clean public surface for the runtime.
Consumers should import from here for stable API access.
"""

from .api import (
    # Runtime
    Runtime,
    RuntimeContainer,
    CORE_MODULE,
    RootScopeProvider,
    # Registry
    Registry,
    Module,
    Recipe,
    RecipeKind,
    RegistrationInfo,
    DuplicatePolicy,
    annotate,
    depends,
    import_definitions,
    # Injector
    Injector,
    Phase,
    ResolutionState,
    # Scopes
    Scope,
    ScopeEvent,
    DESTROY_EVENT,
    create_child,
    destroy,
    watch,
    on,
    emit,
    broadcast,
    digest,
    # Wiring
    get_component,
    get_logger,
    get_raw_container,
    get_root_scope,
    get_runtime,
    get_settings,
    wire,
    unwire,
    inject,
    # Config
    Settings,
    RuntimeSettings,
    load_file,
    load_settings,
    # Logging
    setup_logging,
    # Errors
    RescopeError,
    RegistryError,
    UnknownModuleError,
    DuplicateModuleError,
    DuplicateComponentError,
    RegistrySealedError,
    InjectorError,
    UnknownComponentError,
    CircularDependencyError,
    PhaseViolationError,
    AnnotationError,
    ScopeError,
    ScopeDestroyedError,
    DigestInProgressError,
    DigestNotStabilizingError,
)

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
