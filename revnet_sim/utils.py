"""
Shared tolerances and filesystem helpers (no plotting imports).
"""
from __future__ import annotations

from pathlib import Path

# token supply ~ zero for redemption
EPS_SUPPLY = 1e-12


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
