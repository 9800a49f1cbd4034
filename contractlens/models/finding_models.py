"""
Finding Data Models — Vulnerabilities, style issues, and gas optimizations.

These are the values every rule produces. They are frozen once built and
live only for the duration of one analyze() call.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position in the low < medium < high < critical ordering."""
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    # str already defines these, so each one has to be spelled out
    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 10,
    Severity.HIGH: 7,
    Severity.MEDIUM: 4,
    Severity.LOW: 1,
}


class Finding(BaseModel):
    """A single security vulnerability or style/documentation issue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = Field(..., description="Stable identifier, e.g. 'reentrancy'")
    rule_id: str = Field(..., description="Rule that produced this finding")
    severity: Severity
    title: str
    description: str
    mitigation: str = Field(default="", description="Actionable guidance")
    references: list[str] = Field(default_factory=list)
    weakness_id: str | None = Field(
        default=None,
        alias="weaknessId",
        description="External classification, e.g. 'SWC-107'",
    )
    line: int = Field(default=0, description="1-based line number, 0 if unknown")
    column: int = Field(default=0, description="1-based column, 0 if unknown")
    function: str = Field(default="", description="Enclosing function name")


class Optimization(BaseModel):
    """A gas-saving suggestion."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    rule_id: str
    title: str
    explanation: str = Field(..., min_length=1)
    original_code: str = Field(default="", alias="originalCode")
    optimized_code: str = Field(..., alias="optimizedCode")
    estimated_savings: int | None = Field(
        default=None, alias="estimatedSavings"
    )
    impact: Severity = Severity.LOW
    line: int = 0
