"""
ContractLens — POST /analyze endpoint.

Accepts {"source": str} and returns the full AnalysisResult with camelCase
field names.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from contractlens.api.dependencies import get_analyzer
from contractlens.config import settings
from contractlens.core.analyzer import SolidityAnalyzer
from contractlens.models.analysis_models import AnalysisResult

logger = logging.getLogger("contractlens.api")
router = APIRouter()


class AnalyzeRequest(BaseModel):
    source: str = Field(..., description="Solidity source code to analyze")


_SAFE_FALLBACK = AnalysisResult()


@router.post("/analyze", response_model=AnalysisResult, response_model_by_alias=True)
async def analyze_source(
    req: AnalyzeRequest,
    analyzer: SolidityAnalyzer = Depends(get_analyzer),
):
    """Run every rule family and metric over the submitted source."""
    try:
        # Input size guard
        if len(req.source) > settings.api_max_source_length:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Source exceeds maximum length of "
                    f"{settings.api_max_source_length} characters"
                ),
            )
        return analyzer.analyze(req.source)

    except HTTPException:
        raise
    except Exception:
        logger.exception("Unexpected analysis error")
        return _SAFE_FALLBACK
