"""Test package for the recipe catalog client.

Importing it puts the repository root on ``sys.path`` so ``recipe_catalog`` and
the shared doubles under ``tests.recipe_catalog.support`` resolve without an
editable install.
"""

from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parent.parent


def _ensure_repo_on_path() -> None:
    root = str(_REPO_ROOT)
    if root not in sys.path:
        sys.path.insert(0, root)


_ensure_repo_on_path()
