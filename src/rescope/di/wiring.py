import importlib
import logging
import sys
from types import ModuleType
from typing import TYPE_CHECKING, Iterable, Optional, Union

if TYPE_CHECKING:
    from ..container import Runtime

logger = logging.getLogger(__name__)

_ModuleRef = Union[str, ModuleType]


def _as_module(ref: _ModuleRef) -> Optional[ModuleType]:
    if isinstance(ref, ModuleType):
        return ref
    module = sys.modules.get(ref)
    if module is None:
        try:
            module = importlib.import_module(ref)
        except ImportError as e:
            logger.warning("Could not import module '%s' for wiring: %s", ref, e)
            return None
    return module


def wire(
        runtime: "Runtime",
        modules: Optional[Iterable[_ModuleRef]] = None,
        packages: Optional[Iterable[_ModuleRef]] = None
) -> None:
    """
    Wire consumer modules to the runtime container so that ``@inject``
    functions receive components, the root scope, settings or loggers.

    :param runtime: A bootstrapped runtime.
    :param modules: Modules (objects or dotted names) to wire.
    :param packages: Packages whose modules are all wired.
    """
    assert runtime.bootstrapped, "Runtime must be bootstrapped before wiring"

    module_objects = [m for m in map(_as_module, modules or ()) if m is not None]
    package_objects = [p for p in map(_as_module, packages or ()) if p is not None]

    logger.debug("Wiring %d modules and %d packages: %s",
                 len(module_objects), len(package_objects),
                 [m.__name__ for m in (*module_objects, *package_objects)])
    runtime.raw_container().wire(modules=module_objects, packages=package_objects)
    logger.debug("Container wiring complete")


def unwire(runtime: "Runtime") -> None:
    logger.debug("Unwiring container")
    runtime.raw_container().unwire()
