"""
Rules Route — GET /rules

Lists the registered rule catalog, optionally filtered by family.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from contractlens.api.dependencies import get_analyzer
from contractlens.core.analyzer import SolidityAnalyzer
from contractlens.models.finding_models import Severity
from contractlens.models.rule_models import RuleCategory

router = APIRouter()


class RuleInfo(BaseModel):
    id: str
    category: RuleCategory
    severity: Severity
    title: str


@router.get("/rules", response_model=list[RuleInfo])
async def list_rules(
    category: RuleCategory | None = None,
    analyzer: SolidityAnalyzer = Depends(get_analyzer),
):
    """Registered rules in execution order."""
    return [
        RuleInfo(id=r.id, category=r.category, severity=r.severity, title=r.title)
        for r in analyzer.engine.rules(category)
    ]
