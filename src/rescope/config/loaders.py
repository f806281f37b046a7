import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .models import RuntimeSettings
from ..utils import expanded_path

logger = logging.getLogger(__name__)


def load_file(path: Path) -> dict:
    """
    Load settings from a YAML or JSON file.

    :param path: Path to the settings file.
    :return: Dictionary with the file contents.
    :raises FileNotFoundError: If the file does not exist.
    :raises IsADirectoryError: If the path is a directory.
    :raises RuntimeError: If the file type is not supported.
    """
    logger.debug("Loading settings file: %s", path)
    assert path is not None

    if not path.exists():
        logger.error("Settings file not found: %s", path.absolute())
        raise FileNotFoundError(f"Settings file not found: {path.absolute()}")

    if path.is_dir():
        logger.error("Path is a directory, not a file: %s", path.absolute())
        raise IsADirectoryError(path.absolute())

    with open(path, "r", encoding="utf-8") as fp:
        if fp.read(1) == "":
            logger.debug("Settings file is empty: %s", path)
            return {}

        fp.seek(0)

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(fp)
        elif path.suffix == ".json":
            data = json.load(fp)
        else:
            logger.error("Unsupported settings file type: %s", path.name)
            raise RuntimeError(f"Unsupported settings file type: {path.name}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"Settings file {path.name} must contain a mapping")
    return data


def load_settings(
        path: Optional[Union[str, Path]] = None,
        **overrides: Any
) -> RuntimeSettings:
    """
    Build runtime settings from the environment, a settings file and overrides.

    Overrides win over file values, which win over environment variables.

    :param path: Settings file; defaults to ``RESCOPE_CONFIG_PATH`` when set.
    :param overrides: Explicit field values.
    """
    if path is None:
        path = RuntimeSettings().config_path

    data: dict = {}
    if path is not None:
        path = expanded_path(path)
        data = load_file(path)
        data["config_path"] = path

    data.update(overrides)
    runtime_settings = RuntimeSettings(**data)
    logger.debug("Loaded settings: %s", runtime_settings)
    return runtime_settings
