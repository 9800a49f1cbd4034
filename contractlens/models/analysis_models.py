"""
Analysis Result Models — The aggregate returned by SolidityAnalyzer.

AnalysisResult always carries all six fields, whatever the input looked
like. Run statistics travel next to it in AnalysisReport rather than being
kept on the analyzer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from contractlens.models.finding_models import Finding, Optimization
from contractlens.models.metrics_models import (
    ComplexityMetrics,
    GasEstimate,
    QualityScore,
)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    issues: list[Finding] = Field(
        default_factory=list, description="Style and documentation findings"
    )
    vulnerabilities: list[Finding] = Field(
        default_factory=list, description="Security findings"
    )
    optimizations: list[Optimization] = Field(default_factory=list)
    gas_estimate: GasEstimate = Field(
        default_factory=GasEstimate, alias="gasEstimate"
    )
    complexity: ComplexityMetrics = Field(default_factory=ComplexityMetrics)
    quality: QualityScore = Field(default_factory=QualityScore)


class RuleRunStats(BaseModel):
    """Diagnostics for a single analyze() call."""

    rules_executed: list[str] = Field(default_factory=list)
    rules_failed: list[str] = Field(default_factory=list)
    duration_ms: float = 0.0


class AnalysisReport(BaseModel):
    result: AnalysisResult
    stats: RuleRunStats = Field(default_factory=RuleRunStats)
