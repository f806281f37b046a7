import importlib
import logging
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .container import Runtime

logger = logging.getLogger(__name__)

DEFAULT_HOOK = "define_modules"


def import_definitions(runtime: "Runtime", references: Iterable[str]) -> None:
    """
    Import Python modules and let them define rescope modules.

    Each reference is either ``"package.module"``, whose ``define_modules``
    function is called, or ``"package.module:function"``. The hook receives
    the runtime.

    :raises ImportError: If a module cannot be imported.
    :raises AttributeError: If the hook is missing or not callable.
    """
    for reference in references:
        module_path, _, hook_name = reference.partition(":")
        hook_name = hook_name or DEFAULT_HOOK

        logger.debug("Importing definitions from %s (hook: %s)", module_path, hook_name)
        module = importlib.import_module(module_path)

        hook = getattr(module, hook_name, None)
        if not callable(hook):
            logger.error("Module '%s' has no callable '%s'", module_path, hook_name)
            raise AttributeError(f"Module '{module_path}' has no callable '{hook_name}'")

        hook(runtime)
