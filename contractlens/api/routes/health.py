"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from contractlens.api.dependencies import get_analyzer
from contractlens.core.analyzer import SolidityAnalyzer

router = APIRouter()


@router.get("/health")
async def health(analyzer: SolidityAnalyzer = Depends(get_analyzer)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "rules": len(analyzer.engine.rule_ids),
    }
