"""Locate ``acltree.toml``.

``ACLTREE_CONFIG`` names the file explicitly; otherwise the nearest
``acltree.toml`` in the start directory or one of its parents is used.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "acltree.toml"
CONFIG_ENV_VAR = "ACLTREE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file for *start* (default: CWD), or None.

    An ``ACLTREE_CONFIG`` pointing at a missing file disables discovery.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
