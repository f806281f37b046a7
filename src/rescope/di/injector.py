"""
Lazy singleton resolution with a two-phase lifecycle.

During the configuration phase only constants and provider configuration
surfaces are resolvable. Once :meth:`Injector.load` has run every config
block it seals the registry and switches to the run phase, where every recipe
is instantiated on first request and cached for the life of the injector.
"""
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

from ..errors import (
    CircularDependencyError,
    PhaseViolationError,
    UnknownComponentError,
    UnknownModuleError,
)
from ..modules.annotate import INJECT_ATTRIBUTE, annotate, keyword_dependencies
from ..modules.recipes import CONFIG_PHASE_KINDS, Recipe, RecipeKind
from ..modules.registry import Module, Registry

logger = logging.getLogger(__name__)

INJECTOR_NAME = "injector"
PRODUCER_METHOD = "get"


class Phase(str, Enum):
    CONFIG = "config"
    RUN = "run"


class ResolutionState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


@dataclass
class CacheEntry:
    state: ResolutionState = ResolutionState.UNRESOLVED
    instance: Any = None


class ProviderResolver:
    """
    Builds provider configuration surfaces and their run-time products.

    The surface is the provider instance itself (or the registered object when
    it is not a class); the product is whatever its ``get`` method returns.
    Both are cached separately by the owning :class:`Injector`.
    """

    def __init__(self, injector: "Injector") -> None:
        self._injector = injector

    def surface(self, recipe: Recipe) -> Any:
        provider = recipe.constructor
        if inspect.isclass(provider):
            logger.debug("Instantiating provider surface for '%s'", recipe.name)
            return self._injector.instantiate(provider, recipe.dependencies)
        if callable(getattr(provider, PRODUCER_METHOD, None)):
            return provider
        if callable(provider):
            # A plain function returning the surface
            return self._injector.invoke(provider, recipe.dependencies)
        raise TypeError(
            f"Provider '{recipe.name}' must be a class or expose a '{PRODUCER_METHOD}' method"
        )

    def product(self, recipe: Recipe, surface: Any) -> Any:
        producer = getattr(surface, PRODUCER_METHOD, None)
        if not callable(producer):
            raise TypeError(
                f"Provider '{recipe.name}' surface {surface!r} has no '{PRODUCER_METHOD}' method"
            )
        logger.debug("Invoking producer of provider '%s'", recipe.name)
        return self._injector.invoke(producer)


class Injector:
    """Resolves recipe names from a :class:`Registry` into singletons."""

    def __init__(self, registry: Registry, strict: bool = False) -> None:
        self._registry = registry
        self._strict = strict
        self._phase = Phase.CONFIG
        self._cache: dict[str, CacheEntry] = {}
        self._surfaces: dict[str, CacheEntry] = {}
        self._path: list[str] = []
        self._loaded: list[str] = []
        self._providers = ProviderResolver(self)

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def loaded_modules(self) -> list[str]:
        return list(self._loaded)

    def annotate(self, fn: Callable[..., Any], dependencies: Optional[Iterable[str]] = None) -> tuple[str, ...]:
        return annotate(fn, dependencies, strict=self._strict)

    def has(self, name: str) -> bool:
        return name == INJECTOR_NAME or self._lookup(name) is not None

    def cache_state(self, name: str) -> ResolutionState:
        entry = self._cache.get(name)
        return entry.state if entry is not None else ResolutionState.UNRESOLVED

    def load(self, *module_names: str) -> "Injector":
        """
        Load modules and their requirements, then enter the run phase.

        Config blocks run in dependency order while still in the configuration
        phase; run blocks run afterwards in the same order.
        """
        assert self._phase is Phase.CONFIG, "Injector already loaded"

        ordered: list[Module] = []
        self._collect(module_names, ordered, set(), required_by=None)
        self._loaded = [module.name for module in ordered]
        logger.info("Loading modules: %s", ", ".join(self._loaded))

        for module in ordered:
            for block in module.config_blocks:
                logger.debug("Running config block %s of module '%s'", block.name, module.name)
                self.invoke(block.constructor, block.dependencies)

        self._registry.seal()
        self._phase = Phase.RUN
        logger.debug("Entered run phase")

        for module in ordered:
            for block in module.run_blocks:
                logger.debug("Running run block %s of module '%s'", block.name, module.name)
                self.invoke(block.constructor, block.dependencies)

        return self

    def resolve(self, name: str) -> Any:
        """
        Resolve a component by name.

        :raises UnknownComponentError: If no loaded module provides ``name``.
        :raises CircularDependencyError: If ``name`` is already being resolved.
        :raises PhaseViolationError: If ``name`` is not available in the current phase.
        """
        if name == INJECTOR_NAME:
            return self

        recipe = self._lookup(name)
        if recipe is None:
            logger.error("Unknown component '%s' (path: %s)", name, self._path)
            raise UnknownComponentError(name, self._path)

        if recipe.kind is RecipeKind.CONSTANT:
            return recipe.value

        if self._phase is Phase.CONFIG:
            if recipe.kind not in CONFIG_PHASE_KINDS:
                logger.error("%s requested during the configuration phase", recipe)
                raise PhaseViolationError(name, self._phase.value)
            return self._resolve_entry(self._surfaces, recipe, self._build_surface)

        return self._resolve_entry(self._cache, recipe, self._build_instance)

    def invoke(
            self,
            fn: Callable[..., Any],
            dependencies: Optional[Iterable[str]] = None,
            locals: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Call ``fn`` with its dependencies resolved.

        :param fn: Any callable.
        :param dependencies: Explicit dependency names; inferred when omitted.
        :param locals: Values used instead of resolving matching names.
        """
        args, kwargs = self._arguments(fn, dependencies, locals)
        return fn(*args, **kwargs)

    def instantiate(
            self,
            cls: type,
            dependencies: Optional[Iterable[str]] = None,
            locals: Optional[Mapping[str, Any]] = None
    ) -> Any:
        return self.invoke(cls, dependencies, locals)

    def _arguments(
            self,
            fn: Callable[..., Any],
            dependencies: Optional[Iterable[str]] = None,
            locals: Optional[Mapping[str, Any]] = None,
            skip: int = 0
    ) -> tuple[list[Any], dict[str, Any]]:
        names = self.annotate(fn, dependencies)[skip:]
        keywords = keyword_dependencies(fn, dependencies)
        values = [
            locals[name] if locals is not None and name in locals else self.resolve(name)
            for name in names
        ]
        split = len(values) - len(keywords)
        return values[:split], dict(zip(keywords, values[split:]))

    def _collect(
            self,
            names: Iterable[str],
            ordered: list[Module],
            visiting: set[str],
            required_by: Optional[str]
    ) -> None:
        for name in names:
            if name in visiting:
                continue
            try:
                module = self._registry.get_module(name)
            except UnknownModuleError:
                logger.error("Module '%s' required by '%s' is not defined", name, required_by)
                raise UnknownModuleError(name, required_by) from None
            visiting.add(name)
            # Requirements load before the module requiring them
            self._collect(module.requires, ordered, visiting, required_by=name)
            ordered.append(module)

    def _lookup(self, name: str) -> Optional[Recipe]:
        recipe = self._registry.find_recipe(name)
        if recipe is None or recipe.module not in self._loaded:
            return None
        return recipe

    def _resolve_entry(
            self,
            cache: dict[str, CacheEntry],
            recipe: Recipe,
            build: Callable[[Recipe], Any]
    ) -> Any:
        name = recipe.name
        entry = cache.get(name)
        if entry is not None:
            if entry.state is ResolutionState.RESOLVED:
                return entry.instance
            if entry.state is ResolutionState.RESOLVING:
                cycle = self._path[self._path.index(name):] + [name]
                logger.error("Circular dependency: %s", " -> ".join(cycle))
                raise CircularDependencyError(cycle)

        cache[name] = CacheEntry(state=ResolutionState.RESOLVING)
        self._path.append(name)
        try:
            instance = build(recipe)
        except BaseException:
            del cache[name]
            raise
        finally:
            self._path.pop()

        cache[name] = CacheEntry(state=ResolutionState.RESOLVED, instance=instance)
        logger.debug("Resolved %s", recipe)
        return instance

    def _build_surface(self, recipe: Recipe) -> Any:
        return self._providers.surface(recipe)

    def _build_instance(self, recipe: Recipe) -> Any:
        if recipe.kind is RecipeKind.VALUE:
            instance = recipe.value
        elif recipe.kind is RecipeKind.SERVICE:
            instance = self.instantiate(recipe.constructor, recipe.dependencies)
        elif recipe.kind is RecipeKind.FACTORY:
            instance = self.invoke(recipe.constructor, recipe.dependencies)
        elif recipe.kind is RecipeKind.PROVIDER:
            surface = self._resolve_entry(self._surfaces, recipe, self._build_surface)
            instance = self._providers.product(recipe, surface)
        else:  # pragma: no cover
            raise AssertionError(f"Unexpected recipe kind: {recipe.kind}")

        return self._decorate(recipe.name, instance)

    def _decorate(self, name: str, instance: Any) -> Any:
        for module_name in self._loaded:
            for decorator in self._registry.get_module(module_name).decorators:
                if decorator.name != name:
                    continue
                logger.debug("Applying decorator from module '%s' to '%s'", module_name, name)
                fn = decorator.constructor
                # Inferred names start with the delegate parameter
                inferred = decorator.dependencies is None and not hasattr(fn, INJECT_ATTRIBUTE)
                args, kwargs = self._arguments(fn, decorator.dependencies, skip=1 if inferred else 0)
                instance = fn(instance, *args, **kwargs)
        return instance
