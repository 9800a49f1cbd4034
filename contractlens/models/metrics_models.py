"""
Metric Data Models — Complexity, gas estimate, and quality score.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ComplexityMetrics(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cyclomatic: int = Field(default=1, ge=1)
    cognitive: int = Field(default=0, ge=0)
    lines: int = Field(default=0, ge=0, description="Non-blank, non-comment lines")
    per_function: dict[str, int] = Field(
        default_factory=dict,
        alias="perFunction",
        description="Cyclomatic complexity of each function",
    )


class GasEstimate(BaseModel):
    """Heuristic, relative gas cost. Not ledger accurate."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    deployment: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    per_function: dict[str, int] = Field(
        default_factory=dict, alias="perFunction"
    )


class QualityScore(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: int = Field(default=0, ge=0, le=100)
    maintainability: int = Field(default=0, ge=0, le=100)
    testability: int = Field(default=0, ge=0, le=100)
    documentation: int = Field(default=0, ge=0, le=100)
