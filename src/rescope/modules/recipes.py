import inspect
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional


class RecipeKind(Enum):
    CONSTANT = "constant"
    VALUE = "value"
    SERVICE = "service"
    FACTORY = "factory"
    PROVIDER = "provider"
    DECORATOR = "decorator"
    CONFIG_BLOCK = "config_block"
    RUN_BLOCK = "run_block"


# Kinds stored in the shared component namespace
NAMED_KINDS = frozenset({
    RecipeKind.CONSTANT,
    RecipeKind.VALUE,
    RecipeKind.SERVICE,
    RecipeKind.FACTORY,
    RecipeKind.PROVIDER,
})

# Kinds resolvable before the run phase begins
CONFIG_PHASE_KINDS = frozenset({RecipeKind.CONSTANT, RecipeKind.PROVIDER})


@dataclass
class RegistrationInfo:
    """Information about who/what registered a recipe."""
    registered_by: str  # Module/caller that registered the recipe
    registered_at: datetime  # Timestamp when registration occurred
    file: Optional[str] = None  # File path where registration occurred
    line: Optional[int] = None  # Line number where registration occurred

    def __str__(self) -> str:
        parts = [f"by '{self.registered_by}'", f"at {self.registered_at.isoformat()}"]
        if self.file:
            location = f"{self.file}:{self.line}" if self.line else self.file
            parts.append(f"from {location}")
        return f"RegistrationInfo({', '.join(parts)})"


@dataclass(frozen=True)
class Recipe:
    """
    A registered, not-yet-invoked description of how to build a component.

    Attributes:
        name (str): Component name, unique across the registry namespace.
        kind (RecipeKind): How the recipe is turned into an instance.
        module (str): Name of the module that owns the recipe.
        constructor (Optional[Callable]): Class, factory function, provider or block.
            Unused for constants and values.
        dependencies (Optional[tuple[str, ...]]): Explicit dependency names, or None
            to infer them from the constructor signature.
        value (Any): Stored value of constant and value recipes.
        registration (Optional[RegistrationInfo]): Where the recipe was registered.
    """
    name: str
    kind: RecipeKind
    module: str
    constructor: Optional[Callable[..., Any]] = None
    dependencies: Optional[tuple[str, ...]] = None
    value: Any = None
    registration: Optional[RegistrationInfo] = None

    def __str__(self) -> str:
        return f"{self.kind.value} '{self.name}' (module '{self.module}')"


def clean_module_name(name: str) -> str:
    """
    Clean up module name for display, removing __init__ and __main__ parts.

    :param name: The raw module name (e.g., "__init__.dashboard").
    :return: Cleaned module name (e.g., "dashboard").
    """
    if not name:
        return "unknown"
    parts = [p for p in name.split(".") if p not in ("__init__", "__main__")]
    return ".".join(parts) if parts else name


def capture_registration_info(skip_prefix: str = "rescope.modules") -> RegistrationInfo:
    """Capture registration info from the first caller frame outside ``skip_prefix``."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            module_name = frame.f_globals.get("__name__", "unknown")
            if not module_name.startswith(skip_prefix):
                return RegistrationInfo(
                    registered_by=clean_module_name(module_name),
                    registered_at=datetime.now(),
                    file=frame.f_code.co_filename,
                    line=frame.f_lineno
                )
            frame = frame.f_back
    finally:
        del frame
    return RegistrationInfo(registered_by="unknown", registered_at=datetime.now())
