"""
graphsource CLI - Command line tools for sourcing runs.
"""

from __future__ import annotations

from .main import main, app

__all__ = ["main", "app"]
