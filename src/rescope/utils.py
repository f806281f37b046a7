import os

from pathlib import Path
from typing import Union


def expanded_path(path: Union[str, Path]) -> Path:
    """
    Expands environment variables and user tilde in a given path.

    :param path: The path to expand.
    :return: The expanded path as a Path object.
    """
    if isinstance(path, Path):
        path = str(path)

    return Path(os.path.expandvars(os.path.expanduser(path)))
