import logging
from pathlib import Path
from typing import Optional

import pydantic

from .base import Settings
from ..modules.registry import DuplicatePolicy
from ..scope.digest import DEFAULT_TTL
from ..utils import expanded_path

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RuntimeSettings(Settings):
    digest_ttl: int = pydantic.Field(
        default=DEFAULT_TTL,
        ge=1,
        description="Dirty digest iterations allowed before giving up"
    )

    duplicate_policy: DuplicatePolicy = pydantic.Field(
        default=DuplicatePolicy.OVERWRITE,
        description="What to do when a component name is registered twice"
    )

    strict_di: bool = pydantic.Field(
        default=False,
        description="Refuse to infer dependencies from parameter names"
    )

    log_level: str = pydantic.Field(
        default="INFO",
        description="Level used by setup_logging"
    )

    modules: list[str] = pydantic.Field(
        default_factory=list,
        description="Modules bootstrapped when none are given explicitly"
    )

    imports: list[str] = pydantic.Field(
        default_factory=list,
        description="Python modules defining rescope modules ('pkg.mod' or 'pkg.mod:hook')"
    )

    config_path: Optional[Path] = pydantic.Field(
        default=None,
        description="YAML/JSON file with runtime settings",
        exclude=True
    )

    @pydantic.field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        v = str(v).upper()
        if v not in _LEVELS:
            raise ValueError(f"Invalid log level '{v}', expected one of {', '.join(_LEVELS)}")
        return v

    @pydantic.field_validator("config_path", mode="before")
    @classmethod
    def validate_config_path(cls, v):
        return expanded_path(v) if v else None

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)
