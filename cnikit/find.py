"""Locating plugin executables on a search path."""

from __future__ import annotations

import json
import os

EXECUTABLE_FILE_EXTENSIONS: list[str] = [".exe", ""] if os.name == "nt" else [""]


def find_in_path(plugin: str, paths) -> str:
    """Return the full path of ``plugin`` found in one of ``paths``."""
    if not plugin:
        raise ValueError("no plugin name provided")
    if os.sep in plugin:
        raise ValueError(f"invalid plugin name: {plugin}")
    if not paths:
        raise ValueError("no paths provided")

    for directory in paths:
        for ext in EXECUTABLE_FILE_EXTENSIONS:
            full = os.path.join(directory, plugin) + ext
            if os.path.isfile(full):
                return full

    listed = "[" + " ".join(paths) + "]"
    raise FileNotFoundError(f"failed to find plugin {json.dumps(plugin)} in path {listed}")