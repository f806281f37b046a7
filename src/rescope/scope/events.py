"""
Scope events.

Events travel along the scope tree: ``emit`` walks upward through the
ancestors and can be stopped, ``broadcast`` walks downward through every
descendant and always completes.
"""
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .scope import Scope

logger = logging.getLogger(__name__)

# Type aliases
EventHandler = Callable[..., Any]

DESTROY_EVENT = "destroy"


@dataclass(eq=False)
class ScopeEvent:
    """An event dispatched through the scope tree."""
    name: str
    target_scope: "Scope"
    cancellable: bool = False
    current_scope: Optional["Scope"] = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        if not self.cancellable:
            logger.debug("Ignoring stop_propagation() on broadcast event '%s'", self.name)
            return
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass(eq=False)
class _RegisteredListener:
    """Internal representation of a registered listener."""
    handler: EventHandler
    active: bool = field(default=True)
