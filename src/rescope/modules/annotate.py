"""
Dependency annotation.

Dependencies of a recipe are declared in one of three ways, in order of
precedence:

1. an explicit list given at registration time,
2. an ``__inject__`` attribute on the callable (see :func:`depends`),
3. the parameter names of the callable's signature.

The third form is convenient but breaks when identifiers are renamed, so it
can be forbidden with ``strict_di``.
"""
import inspect
import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

from cachetools import LRUCache, cached

from ..errors import AnnotationError

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])

INJECT_ATTRIBUTE = "__inject__"

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)

Parameters = tuple[tuple[str, ...], tuple[str, ...]]


def depends(*names: str) -> Callable[[_F], _F]:
    """
    Declare the dependencies of a callable explicitly.

        @depends("http", "logger")
        def make_client(h, log):
            ...

    :param names: Component names, in parameter order.
    """

    def decorator(fn: _F) -> _F:
        setattr(fn, INJECT_ATTRIBUTE, tuple(names))
        return fn

    return decorator


def _inspect_parameters(target: Callable[..., Any]) -> Parameters:
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        logger.debug("No signature available for %r", target)
        return (), ()

    positional = []
    keyword_only = []
    for name, parameter in signature.parameters.items():
        if parameter.kind in _SKIPPED_KINDS:
            continue
        if parameter.kind is inspect.Parameter.KEYWORD_ONLY:
            keyword_only.append(name)
        else:
            positional.append(name)
    return tuple(positional), tuple(keyword_only)


_cached_parameters = cached(cache=LRUCache(maxsize=1024))(_inspect_parameters)


def _signature_parameters(target: Callable[..., Any]) -> Parameters:
    """Positional and keyword-only parameter names, memoised for hashable targets."""
    if inspect.ismethod(target):
        # The bound instance may be unhashable; inspect the function and drop ``self``
        positional, keyword_only = _signature_parameters(target.__func__)
        return positional[1:], keyword_only
    try:
        hash(target)
    except TypeError:
        return _inspect_parameters(target)
    return _cached_parameters(target)


def annotate(
        target: Callable[..., Any],
        dependencies: Optional[Iterable[str]] = None,
        strict: bool = False
) -> tuple[str, ...]:
    """
    Compute the dependency names of a callable.

    Inferred names list positional parameters first, then keyword-only ones
    (see :func:`keyword_dependencies`).

    :param target: Function, class, bound method or callable object to analyze.
    :param dependencies: Explicit names; returned unchanged when given.
    :param strict: Raise instead of inferring names from the signature.
    :return: Dependency names in call order.
    :raises AnnotationError: If inference is needed while ``strict`` is set.
    """
    if dependencies is not None:
        return tuple(dependencies)

    declared = getattr(target, INJECT_ATTRIBUTE, None)
    if declared is not None:
        return tuple(declared)

    if strict:
        logger.error("Implicit annotation of %r refused (strict_di enabled)", target)
        raise AnnotationError(target)

    positional, keyword_only = _signature_parameters(target)
    return positional + keyword_only


def keyword_dependencies(
        target: Callable[..., Any],
        dependencies: Optional[Iterable[str]] = None
) -> tuple[str, ...]:
    """
    The trailing dependencies of ``target`` that must be passed by keyword.

    Only inferred dependencies can be keyword-only; explicit and ``__inject__``
    names are always passed positionally.
    """
    if dependencies is not None or getattr(target, INJECT_ATTRIBUTE, None) is not None:
        return ()
    return _signature_parameters(target)[1]
