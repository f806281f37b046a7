from .digest import DEFAULT_TTL, DigestEngine, log_and_raise
from .events import DESTROY_EVENT, ScopeEvent
from .scope import Scope
from .watchers import Watcher, compile_accessor, values_equal

__all__ = [
    "DEFAULT_TTL",
    "DigestEngine",
    "log_and_raise",
    "DESTROY_EVENT",
    "ScopeEvent",
    "Scope",
    "Watcher",
    "compile_accessor",
    "values_equal",
]
