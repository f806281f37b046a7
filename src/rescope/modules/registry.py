import logging
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional

from .recipes import NAMED_KINDS, Recipe, RecipeKind, capture_registration_info
from ..errors import (
    DuplicateComponentError,
    DuplicateModuleError,
    RegistrySealedError,
    UnknownModuleError,
)

logger = logging.getLogger(__name__)


class DuplicatePolicy(str, Enum):
    OVERWRITE = "overwrite"
    ERROR = "error"


class Module:
    """
    A named group of recipes plus the names of the modules it requires.

    Recipes are stored in the owning :class:`Registry`; the helpers below
    only forward to it so that definitions can be chained:

        registry.define_module("app", ["rescope"]) \\
            .constant("greeting", "hello") \\
            .factory("greeter", lambda greeting: greeting.upper())
    """

    def __init__(self, registry: "Registry", name: str, requires: Iterable[str] = ()) -> None:
        self._registry = registry
        self.name = name
        self.requires: tuple[str, ...] = tuple(requires)
        self.recipes: dict[str, Recipe] = {}
        self.config_blocks: list[Recipe] = []
        self.run_blocks: list[Recipe] = []
        self.decorators: list[Recipe] = []

    def __repr__(self) -> str:
        return f"Module({self.name!r}, requires={list(self.requires)!r})"

    def constant(self, name: str, value: Any) -> "Module":
        self._registry.register(self.name, name, RecipeKind.CONSTANT, value=value)
        return self

    def value(self, name: str, value: Any) -> "Module":
        self._registry.register(self.name, name, RecipeKind.VALUE, value=value)
        return self

    def service(
            self,
            name: str,
            cls: type,
            dependencies: Optional[Iterable[str]] = None
    ) -> "Module":
        self._registry.register(self.name, name, RecipeKind.SERVICE, dependencies, cls)
        return self

    def factory(
            self,
            name: str,
            fn: Callable[..., Any],
            dependencies: Optional[Iterable[str]] = None
    ) -> "Module":
        self._registry.register(self.name, name, RecipeKind.FACTORY, dependencies, fn)
        return self

    def provider(
            self,
            name: str,
            provider: Any,
            dependencies: Optional[Iterable[str]] = None
    ) -> "Module":
        """
        Register a provider: a class (or ready-made object) whose instance is the
        configuration surface and whose ``get`` method produces the run-time value.
        """
        self._registry.register(self.name, name, RecipeKind.PROVIDER, dependencies, provider)
        return self

    def decorator(
            self,
            name: str,
            fn: Callable[..., Any],
            dependencies: Optional[Iterable[str]] = None
    ) -> "Module":
        """Register ``fn(delegate, *dependencies)`` to wrap the instance of ``name``."""
        self._registry.register(self.name, name, RecipeKind.DECORATOR, dependencies, fn)
        return self

    def config(self, fn: Callable[..., Any], dependencies: Optional[Iterable[str]] = None) -> "Module":
        self._registry.config_block(self.name, fn, dependencies)
        return self

    def run(self, fn: Callable[..., Any], dependencies: Optional[Iterable[str]] = None) -> "Module":
        self._registry.run_block(self.name, fn, dependencies)
        return self


class Registry:
    """Stores modules and the recipes they contribute to one shared namespace."""

    def __init__(self, duplicate_policy: DuplicatePolicy = DuplicatePolicy.OVERWRITE) -> None:
        self.duplicate_policy = DuplicatePolicy(duplicate_policy)
        self._modules: dict[str, Module] = {}
        self._owners: dict[str, str] = {}
        self._sealed = False

    def __contains__(self, name: str) -> bool:
        return name in self._owners

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    @property
    def modules(self) -> dict[str, Module]:
        return dict(self._modules)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        logger.debug("Sealing registry (%d modules, %d components)",
                     len(self._modules), len(self._owners))
        self._sealed = True

    def define_module(self, name: str, requires: Iterable[str] = ()) -> Module:
        if self._sealed:
            raise RegistrySealedError(name)
        if name in self._modules:
            logger.error("Module '%s' defined twice", name)
            raise DuplicateModuleError(name)

        module = Module(self, name, requires)
        self._modules[name] = module
        logger.debug("Defined module '%s' requiring %s", name, list(module.requires))
        return module

    def get_module(self, name: str) -> Module:
        try:
            return self._modules[name]
        except KeyError:
            raise UnknownModuleError(name) from None

    def owner_of(self, name: str) -> Optional[str]:
        return self._owners.get(name)

    def find_recipe(self, name: str) -> Optional[Recipe]:
        owner = self._owners.get(name)
        if owner is None:
            return None
        return self._modules[owner].recipes[name]

    def register(
            self,
            module_name: str,
            component_name: str,
            kind: RecipeKind,
            dependencies: Optional[Iterable[str]] = None,
            constructor: Optional[Callable[..., Any]] = None,
            value: Any = None
    ) -> Recipe:
        """
        Store a recipe without invoking it.

        :raises UnknownModuleError: If ``module_name`` is not defined.
        :raises DuplicateComponentError: If the name is taken and the policy is ``error``.
        :raises RegistrySealedError: If the run phase already began.
        """
        kind = RecipeKind(kind)
        if self._sealed:
            raise RegistrySealedError(component_name)

        module = self.get_module(module_name)

        if kind not in (RecipeKind.CONSTANT, RecipeKind.VALUE):
            assert callable(constructor) or kind is RecipeKind.PROVIDER, \
                f"{kind.value} '{component_name}' needs a callable constructor"

        recipe = Recipe(
            name=component_name,
            kind=kind,
            module=module_name,
            constructor=constructor,
            dependencies=tuple(dependencies) if dependencies is not None else None,
            value=value,
            registration=capture_registration_info()
        )

        if kind in NAMED_KINDS:
            self._store(module, recipe)
        elif kind is RecipeKind.DECORATOR:
            module.decorators.append(recipe)
        elif kind is RecipeKind.CONFIG_BLOCK:
            module.config_blocks.append(recipe)
        else:
            module.run_blocks.append(recipe)

        logger.debug("Registered %s", recipe)
        return recipe

    def config_block(
            self,
            module_name: str,
            fn: Callable[..., Any],
            dependencies: Optional[Iterable[str]] = None
    ) -> Recipe:
        name = getattr(fn, "__qualname__", repr(fn))
        return self.register(module_name, name, RecipeKind.CONFIG_BLOCK, dependencies, fn)

    def run_block(
            self,
            module_name: str,
            fn: Callable[..., Any],
            dependencies: Optional[Iterable[str]] = None
    ) -> Recipe:
        name = getattr(fn, "__qualname__", repr(fn))
        return self.register(module_name, name, RecipeKind.RUN_BLOCK, dependencies, fn)

    def _store(self, module: Module, recipe: Recipe) -> None:
        existing_owner = self._owners.get(recipe.name)
        if existing_owner is not None:
            if self.duplicate_policy is DuplicatePolicy.ERROR:
                logger.error("Component '%s' already registered by module '%s'",
                             recipe.name, existing_owner)
                raise DuplicateComponentError(recipe.name, existing_owner, module.name)

            logger.warning("Component '%s' from module '%s' overwritten by module '%s'",
                           recipe.name, existing_owner, module.name)
            del self._modules[existing_owner].recipes[recipe.name]

        module.recipes[recipe.name] = recipe
        self._owners[recipe.name] = module.name
