import itertools
import logging
from typing import Any, Callable, Iterable, Iterator, Optional

from ..errors import ScopeDestroyedError
from .digest import DEFAULT_TTL, DigestEngine, ExceptionHandler
from .events import DESTROY_EVENT, EventHandler, ScopeEvent, _RegisteredListener
from .watchers import (
    CollectionTracker,
    Expression,
    Listener,
    Watcher,
    compile_accessor,
    describe,
)

logger = logging.getLogger(__name__)

Deregister = Callable[[], None]


def _noop(*_: Any) -> None:
    pass


class Scope:
    """
    A node of the scope tree.

    Properties are read through the parent chain and always written locally:

        root = Scope()
        root.x = 1
        child = root.new()
        child.x        # 1, inherited
        child.x = 2    # shadows, root.x is still 1

    Properties are reachable both as attributes and as items. Names used by
    the scope API itself (``watch``, ``parent``...) can only be assigned as
    items (``scope["watch"] = ...``).
    """

    def __init__(
            self,
            parent: Optional["Scope"] = None,
            isolate: bool = False,
            digest_ttl: int = DEFAULT_TTL,
            exception_handler: Optional[ExceptionHandler] = None
    ) -> None:
        self._parent = parent
        self._isolate = isolate
        self._children: list[Scope] = []
        self._props: dict[str, Any] = {}
        self._watchers: list[Watcher] = []
        self._listeners: dict[str, list[_RegisteredListener]] = {}
        self._destroyed = False

        if parent is None:
            self._root = self
            self._ids = itertools.count(1)
            self._engine = DigestEngine(self, digest_ttl, exception_handler)
        else:
            self._root = parent._root
            self._ids = parent._ids
            self._engine = parent._engine

        self._id = next(self._ids)

    def __repr__(self) -> str:
        state = " destroyed" if self._destroyed else ""
        return f"<Scope #{self._id}{state} {self._props!r}>"

    # Properties

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal attribute lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        scope = self._owner_of(name)
        if scope is None:
            raise AttributeError(f"Scope #{self._id} has no property '{name}'")
        return scope._props[name]

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        if hasattr(type(self), name):
            raise AttributeError(f"'{name}' is reserved by the scope API; use scope['{name}']")
        self._props[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        try:
            del self._props[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, name: str) -> Any:
        scope = self._owner_of(name)
        if scope is None:
            raise KeyError(name)
        return scope._props[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._props[name] = value

    def __delitem__(self, name: str) -> None:
        del self._props[name]

    def __contains__(self, name: str) -> bool:
        return self._owner_of(name) is not None

    def get(self, name: str, default: Any = None) -> Any:
        scope = self._owner_of(name)
        return default if scope is None else scope._props[name]

    def has_own(self, name: str) -> bool:
        return name in self._props

    def own_properties(self) -> dict[str, Any]:
        return dict(self._props)

    def _owner_of(self, name: str) -> Optional["Scope"]:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope._props:
                return scope
            if scope._isolate:
                return None
            scope = scope._parent
        return None

    # Tree

    @property
    def id(self) -> int:
        return self._id

    @property
    def parent(self) -> Optional["Scope"]:
        return self._parent

    @property
    def root(self) -> "Scope":
        return self._root

    @property
    def isolate(self) -> bool:
        return self._isolate

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def children(self) -> tuple["Scope", ...]:
        return tuple(self._children)

    @property
    def watchers(self) -> tuple[Watcher, ...]:
        return tuple(self._watchers)

    @property
    def phase(self) -> Optional[str]:
        return self._engine.phase

    @property
    def digest_ttl(self) -> int:
        return self._engine.ttl

    def walk(self) -> Iterator["Scope"]:
        """Yield this scope and its descendants, depth-first."""
        stack = [self]
        while stack:
            scope = stack.pop()
            yield scope
            stack.extend(reversed(scope._children))

    def new(self, isolate: bool = False) -> "Scope":
        """
        Create a child scope.

        :param isolate: If True, the child does not inherit properties,
            but still takes part in digests, events and destruction.
        """
        self._ensure_alive("create a child")
        child = Scope(parent=self, isolate=isolate)
        self._children.append(child)
        logger.debug("Created %sscope #%d under #%d", "isolate " if isolate else "", child.id, self._id)
        return child

    def destroy(self) -> None:
        """
        Destroy this scope and all of its descendants.

        A ``"destroy"`` event is broadcast first, so listeners on the
        subtree can release their resources.
        """
        if self._destroyed:
            return
        logger.debug("Destroying scope #%d", self._id)
        try:
            self.broadcast(DESTROY_EVENT)
        finally:
            if self._parent is not None and self in self._parent._children:
                self._parent._children.remove(self)
            self._teardown()

    def _teardown(self) -> None:
        for child in self._children:
            child._teardown()
        self._children.clear()
        for watcher in self._watchers:
            watcher.active = False
        self._watchers.clear()
        for registered in itertools.chain.from_iterable(self._listeners.values()):
            registered.active = False
        self._listeners.clear()
        self._parent = None
        self._destroyed = True

    def _ensure_alive(self, operation: str) -> None:
        if self._destroyed:
            raise ScopeDestroyedError(self._id, operation)

    # Events

    def on(self, name: str, handler: EventHandler) -> Deregister:
        """
        Listen for ``name`` events reaching this scope.

        The handler receives ``(event, *args)``.

        :return: A function removing the listener.
        """
        self._ensure_alive("listen")
        registered = _RegisteredListener(handler=handler)
        self._listeners.setdefault(name, []).append(registered)

        def deregister() -> None:
            registered.active = False
            listeners = self._listeners.get(name)
            if listeners and registered in listeners:
                listeners.remove(registered)

        return deregister

    def emit(self, name: str, *args: Any) -> ScopeEvent:
        """
        Dispatch ``name`` to this scope, then to each ancestor up to the root.

        Dispatch stops as soon as a listener calls ``event.stop_propagation()``.
        """
        event = ScopeEvent(name=name, target_scope=self, cancellable=True)
        scope: Optional[Scope] = self
        while scope is not None:
            event.current_scope = scope
            for registered in list(scope._listeners.get(name, ())):
                scope._dispatch(registered, event, args)
                if event.propagation_stopped:
                    logger.debug("Event '%s' stopped at scope #%d", name, scope.id)
                    event.current_scope = None
                    return event
            scope = scope._parent
        event.current_scope = None
        return event

    def broadcast(self, name: str, *args: Any) -> ScopeEvent:
        """Dispatch ``name`` to this scope and every descendant, depth-first."""
        event = ScopeEvent(name=name, target_scope=self)
        for scope in self.walk():
            event.current_scope = scope
            for registered in list(scope._listeners.get(name, ())):
                scope._dispatch(registered, event, args)
        event.current_scope = None
        return event

    def _dispatch(self, registered: _RegisteredListener, event: ScopeEvent, args: tuple) -> None:
        if not registered.active:
            return
        try:
            registered.handler(event, *args)
        except Exception as e:
            self._engine.exception_handler(e, f"listener for event '{event.name}'")

    # Watchers

    def watch(
            self,
            expression: Expression,
            listener: Optional[Listener] = None,
            deep: bool = False
    ) -> Deregister:
        """
        Watch an expression of this scope.

        :param expression: A callable taking the scope, or a property path.
        :param listener: Called with ``(new, old)`` after a digest pass found a
            change. The first evaluation always counts as a change, with
            ``new is old``.
        :param deep: Compare structurally against a deep copy instead of by reference.
        :return: A function removing the watcher.
        """
        self._ensure_alive("watch")
        watcher = Watcher(
            accessor=compile_accessor(expression),
            listener=listener or _noop,
            deep=deep,
            label=f"{describe(expression)}@#{self._id}",
            since=self._engine.passes
        )
        self._watchers.append(watcher)

        def deregister() -> None:
            watcher.active = False
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        return deregister

    def watch_group(
            self,
            expressions: Iterable[Expression],
            listener: Callable[[list, list], Any]
    ) -> Deregister:
        """
        Watch several expressions at once.

        The listener is called at most once per digest with the lists of new
        and old values, in the order of ``expressions``.
        """
        expressions = list(expressions)
        new_values: list[Any] = [None] * len(expressions)
        old_values: list[Any] = [None] * len(expressions)
        pending = False
        first_call = True
        active = True

        def fire(_: "Scope") -> None:
            nonlocal pending, first_call
            pending = False
            if not active:
                return
            if first_call:
                first_call = False
                listener(list(new_values), list(new_values))
            else:
                listener(list(new_values), list(old_values))

        if not expressions:
            self.eval_async(fire)

            def deregister_empty() -> None:
                nonlocal active
                active = False

            return deregister_empty

        def tracker(index: int) -> Listener:
            def on_change(new: Any, old: Any) -> None:
                nonlocal pending
                new_values[index] = new
                old_values[index] = old
                if not pending:
                    pending = True
                    self.eval_async(fire)

            return on_change

        deregistrations = [
            self.watch(expression, tracker(index))
            for index, expression in enumerate(expressions)
        ]

        def deregister() -> None:
            nonlocal active
            active = False
            for fn in deregistrations:
                fn()

        return deregister

    def watch_collection(
            self,
            expression: Expression,
            listener: Callable[[Any, Any], Any]
    ) -> Deregister:
        """
        Watch a list, tuple, set or mapping for shallow changes: items added,
        removed or replaced by a different object.

        The listener receives the collection and a shallow copy of its
        previous state.
        """
        tracker = CollectionTracker(compile_accessor(expression))
        tracker.__qualname__ = describe(expression)

        def on_change(_new: int, _old: int) -> None:
            listener(tracker.value, tracker.old_value())

        return self.watch(tracker, on_change)

    # Evaluation and digest

    def eval(self, expression: Expression = None, **locals: Any) -> Any:
        accessor = compile_accessor(expression)
        return accessor(self, **locals) if locals else accessor(self)

    def eval_async(self, expression: Expression) -> None:
        """
        Evaluate ``expression`` at the start of the next digest iteration.

        Outside of a digest, a root digest is scheduled on the running asyncio
        loop if there is one; otherwise the expression waits for the next digest.
        """
        self._engine.eval_async(self, expression)

    def apply(self, expression: Expression = None) -> Any:
        """Evaluate ``expression`` then digest the whole tree from the root."""
        self._ensure_alive("apply")
        return self._engine.apply(self, expression)

    def apply_async(self, expression: Expression = None) -> None:
        self._engine.apply_async(self, expression)

    def post_digest(self, fn: Callable[[], Any]) -> None:
        self._engine.post_digest(fn)

    def digest(self) -> int:
        self._ensure_alive("digest")
        return self._engine.digest(self)
