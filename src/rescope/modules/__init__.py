from .annotate import annotate, depends
from .recipes import (
    CONFIG_PHASE_KINDS,
    NAMED_KINDS,
    Recipe,
    RecipeKind,
    RegistrationInfo,
    clean_module_name,
)
from .registry import DuplicatePolicy, Module, Registry

__all__ = [
    "annotate",
    "depends",
    "CONFIG_PHASE_KINDS",
    "NAMED_KINDS",
    "Recipe",
    "RecipeKind",
    "RegistrationInfo",
    "clean_module_name",
    "DuplicatePolicy",
    "Module",
    "Registry",
]
