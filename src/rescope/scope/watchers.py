import copy
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

if TYPE_CHECKING:
    from .scope import Scope

Accessor = Callable[["Scope"], Any]
Listener = Callable[[Any, Any], Any]
Expression = Union[str, Callable[..., Any], None]


class _Initial:
    """Marks a watcher that has never been evaluated."""

    def __repr__(self) -> str:
        return "<initial>"


INITIAL = _Initial()

PRIMITIVE_TYPES = (int, float, complex, str, bytes, bool, type(None))


def _both_nan(a: Any, b: Any) -> bool:
    return isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b)


def values_equal(new: Any, old: Any, deep: bool = False) -> bool:
    """
    Compare a freshly computed value with the last observed one.

    By reference, except for primitives of the same type, which compare by
    value. NaN is equal to NaN so it does not keep a digest dirty.
    """
    if new is old or _both_nan(new, old):
        return True
    if deep:
        try:
            return bool(new == old)
        except Exception:
            return False
    if type(new) is type(old) and isinstance(new, PRIMITIVE_TYPES):
        return new == old
    return False


def compile_accessor(expression: Expression) -> Accessor:
    """
    Turn an expression into an accessor of a scope.

    Callables are returned as-is; strings are dotted property paths
    (``"user.address.city"``) where every segment after the first is read
    as a mapping key or an attribute. Missing segments yield ``None``.
    """
    if expression is None:
        return lambda scope: None
    if callable(expression):
        return expression
    if not isinstance(expression, str):
        raise TypeError(f"Cannot watch {expression!r}: expected a callable or a property path")

    head, *rest = expression.split(".")

    def accessor(scope: "Scope", **locals: Any) -> Any:
        if head in locals:
            value = locals[head]
        else:
            value = scope.get(head)
        for segment in rest:
            if value is None:
                return None
            if isinstance(value, Mapping):
                value = value.get(segment)
            else:
                value = getattr(value, segment, None)
        return value

    accessor.__qualname__ = expression
    return accessor


def describe(expression: Expression) -> str:
    if isinstance(expression, str):
        return expression
    return getattr(expression, "__qualname__", repr(expression))


@dataclass(eq=False)
class Watcher:
    accessor: Accessor
    listener: Listener
    deep: bool = False
    label: str = ""
    since: int = 0  # digest pass during which the watcher was added
    last: Any = INITIAL
    active: bool = True

    def check(self, scope: "Scope") -> Optional[tuple[Any, Any]]:
        """Evaluate the accessor; return ``(new, old)`` on change, else None."""
        value = self.accessor(scope)
        if self.last is not INITIAL and values_equal(value, self.last, self.deep):
            return None
        previous = self.last
        self.last = copy.deepcopy(value) if self.deep else value
        return value, (value if previous is INITIAL else previous)


def _shallow_copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, list):
        return list(value)
    if isinstance(value, set):
        return set(value)
    return value


def _shallow_equal(value: Any, snapshot: Any) -> bool:
    if snapshot is INITIAL:
        return False
    if isinstance(value, Mapping):
        if not isinstance(snapshot, Mapping) or value.keys() != snapshot.keys():
            return False
        return all(values_equal(value[key], snapshot[key]) for key in value)
    if isinstance(value, (list, tuple)):
        if not isinstance(snapshot, (list, tuple)) or len(value) != len(snapshot):
            return False
        return all(values_equal(a, b) for a, b in zip(value, snapshot))
    if isinstance(value, (set, frozenset)):
        return isinstance(snapshot, (set, frozenset)) and value == snapshot
    return values_equal(value, snapshot)


class CollectionTracker:
    """
    Accessor wrapper detecting shallow changes of a collection.

    The wrapped accessor's result is compared item by item with a shallow copy
    taken at the previous evaluation; every difference bumps a counter, which
    is what the underlying watcher actually observes.
    """

    def __init__(self, accessor: Accessor) -> None:
        self._accessor = accessor
        self.changes = 0
        self.value: Any = None
        self.snapshot: Any = INITIAL
        self.previous: Any = INITIAL

    def __call__(self, scope: "Scope") -> int:
        value = self._accessor(scope)
        self.value = value
        if not _shallow_equal(value, self.snapshot):
            self.changes += 1
            self.previous = self.snapshot
            self.snapshot = _shallow_copy(value)
        return self.changes

    def old_value(self) -> Any:
        return self.value if self.previous is INITIAL else self.previous
