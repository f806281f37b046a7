"""
Exception hierarchy for the rescope runtime.

Every error is raised synchronously by the call that triggers it
(registration, resolution or digest) and is never retried automatically.
"""
from typing import Iterable, Optional, Sequence


class RescopeError(Exception):
    """Base class for all rescope errors."""


class RegistryError(RescopeError):
    """Raised for invalid module or recipe registration."""


class UnknownModuleError(RegistryError):

    def __init__(self, name: str, required_by: Optional[str] = None) -> None:
        self.name = name
        self.required_by = required_by
        message = f"Module '{name}' is not defined"
        if required_by is not None:
            message += f" (required by module '{required_by}')"
        super().__init__(message)


class DuplicateModuleError(RegistryError):

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Module '{name}' is already defined")


class DuplicateComponentError(RegistryError):

    def __init__(self, name: str, existing_module: str, module: str) -> None:
        self.name = name
        self.existing_module = existing_module
        self.module = module
        super().__init__(
            f"Component '{name}' is already registered by module "
            f"'{existing_module}' (attempted again from '{module}')"
        )


class InjectorError(RescopeError):
    """Raised when a component cannot be resolved."""


class UnknownComponentError(InjectorError):

    def __init__(self, name: str, path: Sequence[str] = ()) -> None:
        self.name = name
        self.path = list(path)
        message = f"Unknown component '{name}'"
        if self.path:
            message += f" (while resolving {' <- '.join(reversed(self.path))})"
        super().__init__(message)


class CircularDependencyError(InjectorError):
    """Carries the full cycle, e.g. ``['a', 'b', 'a']``."""

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"Circular dependency found: {' -> '.join(self.path)}")


class PhaseViolationError(InjectorError):

    def __init__(self, name: str, phase: str, message: Optional[str] = None) -> None:
        self.name = name
        self.phase = phase
        super().__init__(
            message or f"Component '{name}' is not available during the {phase} phase"
        )


class RegistrySealedError(PhaseViolationError):

    def __init__(self, name: str) -> None:
        super().__init__(
            name,
            "run",
            f"Cannot register '{name}': the registry is sealed once the run phase begins",
        )


class AnnotationError(InjectorError):

    def __init__(self, target: object) -> None:
        self.target = target
        name = getattr(target, "__qualname__", repr(target))
        super().__init__(
            f"'{name}' does not declare its dependencies explicitly "
            "and strict dependency injection is enabled"
        )


class ScopeError(RescopeError):
    """Raised by scope and digest operations."""


class ScopeDestroyedError(ScopeError):

    def __init__(self, scope_id: int, operation: str) -> None:
        self.scope_id = scope_id
        self.operation = operation
        super().__init__(f"Cannot {operation} on destroyed scope #{scope_id}")


class DigestInProgressError(ScopeError):

    def __init__(self, phase: str) -> None:
        self.phase = phase
        super().__init__(f"A {phase} is already in progress")


class DigestNotStabilizingError(ScopeError):
    """
    The digest loop was still finding changes after ``ttl`` dirty iterations.

    :ivar watchers: Labels of the watchers that changed in the last iteration.
    :ivar iterations: For the last few iterations, the ``(label, new, old)``
        tuples of every change observed.
    """

    def __init__(
            self,
            ttl: int,
            watchers: Iterable[str],
            iterations: Sequence[Sequence[tuple]] = ()
    ) -> None:
        self.ttl = ttl
        self.watchers = list(watchers)
        self.iterations = [list(it) for it in iterations]
        super().__init__(
            f"{ttl} digest iterations reached without stabilizing; "
            f"still changing: {', '.join(self.watchers) or '<none>'}"
        )
