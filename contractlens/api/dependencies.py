"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from contractlens.core.analyzer import SolidityAnalyzer


@lru_cache
def get_analyzer() -> SolidityAnalyzer:
    """Shared analyzer singleton. Safe for concurrent requests."""
    return SolidityAnalyzer()
