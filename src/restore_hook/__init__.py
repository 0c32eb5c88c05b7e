"""GitHub push webhook receiver that fires a restore script."""

from __future__ import annotations

__version__ = "0.1.0"
