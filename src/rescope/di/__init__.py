from .injector import (
    CacheEntry,
    Injector,
    Phase,
    ProviderResolver,
    ResolutionState,
)
from .providers import (
    get_component,
    get_logger,
    get_raw_container,
    get_root_scope,
    get_runtime,
    get_settings,
)
from .wiring import unwire, wire

__all__ = [
    "CacheEntry",
    "Injector",
    "Phase",
    "ProviderResolver",
    "ResolutionState",
    "get_component",
    "get_logger",
    "get_raw_container",
    "get_root_scope",
    "get_runtime",
    "get_settings",
    "unwire",
    "wire",
]
