"""Root conftest.py: test against the local variantforge package rather than an installed copy."""

from __future__ import annotations

import sys
from pathlib import Path

_project_root = str(Path(__file__).parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)
