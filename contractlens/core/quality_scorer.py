"""
Quality Scorer — Folds findings and complexity into a 0-100 quality score.

documentation   = documented functions / functions × 100
maintainability = 100 − 8 × (avg cyclomatic − 1) − 3 × avg cognitive
                  − 2 × Σ issue severity weights
testability     = 100 − 10 × avg dependencies − avg lines over 30

score = 0.30 × maintainability + 0.25 × testability + 0.45 × documentation
        − 3 × Σ vulnerability severity weights − 1 × optimizations

Every term is clamped to [0, 100]. The coefficients are calibration
choices; only the ordering they produce is relied on.
"""

from __future__ import annotations

from contractlens.core import patterns
from contractlens.models.finding_models import Finding, Optimization, SEVERITY_WEIGHTS
from contractlens.models.metrics_models import ComplexityMetrics, QualityScore
from contractlens.models.source_models import FunctionDef, SourceUnit

MAINTAINABILITY_WEIGHT = 0.30
TESTABILITY_WEIGHT = 0.25
DOCUMENTATION_WEIGHT = 0.45

CYCLOMATIC_PENALTY = 8
COGNITIVE_PENALTY = 3
ISSUE_PENALTY = 2
MAX_ISSUE_PENALTY = 60
DEPENDENCY_PENALTY = 10
EXTERNAL_CALL_WEIGHT = 3
LONG_FUNCTION_LINES = 30
VULNERABILITY_PENALTY = 3
OPTIMIZATION_PENALTY = 1


def compute_quality(
    unit: SourceUnit,
    complexity: ComplexityMetrics,
    vulnerabilities: list[Finding],
    optimizations: list[Optimization],
    issues: list[Finding],
) -> QualityScore:
    """
    Compute the QualityScore for one analyzed source.

    Args:
        unit: Parsed source.
        complexity: Output of calculate_complexity for the same unit.
        vulnerabilities: Security findings.
        optimizations: Gas findings.
        issues: Style and documentation findings.

    Returns:
        QualityScore. Empty input scores 0 across the board.
    """
    if unit.is_empty:
        return QualityScore()

    bodies = [f for f in unit.functions if f.has_body and f.kind != "modifier"]
    documentation = _documentation(unit)
    maintainability = _maintainability(complexity, issues, max(len(bodies), 1))
    testability = _testability(unit, bodies)

    weighted = (
        MAINTAINABILITY_WEIGHT * maintainability
        + TESTABILITY_WEIGHT * testability
        + DOCUMENTATION_WEIGHT * documentation
    )
    vulnerability_penalty = VULNERABILITY_PENALTY * sum(
        SEVERITY_WEIGHTS.get(v.severity, 1) for v in vulnerabilities
    )
    score = weighted - vulnerability_penalty - OPTIMIZATION_PENALTY * len(optimizations)

    return QualityScore(
        score=_clamp(score),
        maintainability=_clamp(maintainability),
        testability=_clamp(testability),
        documentation=_clamp(documentation),
    )


def _documentation(unit: SourceUnit) -> float:
    functions = [f for f in unit.functions if f.kind == "function"]
    if not functions:
        return 100.0 if unit.has_natspec else 0.0
    documented = sum(1 for f in functions if f.has_natspec)
    return documented / len(functions) * 100


def _maintainability(
    complexity: ComplexityMetrics, issues: list[Finding], function_count: int
) -> float:
    avg_cyclomatic = complexity.cyclomatic / function_count
    avg_cognitive = complexity.cognitive / function_count
    issue_penalty = ISSUE_PENALTY * sum(SEVERITY_WEIGHTS.get(i.severity, 1) for i in issues)
    return (
        100
        - CYCLOMATIC_PENALTY * max(0.0, avg_cyclomatic - 1)
        - COGNITIVE_PENALTY * avg_cognitive
        - min(issue_penalty, MAX_ISSUE_PENALTY)
    )


def _testability(unit: SourceUnit, bodies: list[FunctionDef]) -> float:
    if not bodies:
        return 100.0

    dependencies = 0
    long_lines = 0
    for func in bodies:
        dependencies += dependency_count(func, unit)
        long_lines += max(0, func.end_line - func.line + 1 - LONG_FUNCTION_LINES)

    count = len(bodies)
    return 100 - DEPENDENCY_PENALTY * dependencies / count - long_lines / count


def dependency_count(func: FunctionDef, unit: SourceUnit) -> int:
    """
    Things a test has to arrange or observe to exercise `func`.

    External calls weigh triple. Storage writes, msg/block/tx reads and
    calls to other functions count once each.
    """
    body = func.body
    return (
        EXTERNAL_CALL_WEIGHT * len(patterns.external_calls(body))
        + len(patterns.storage_writes(func, unit))
        + sum(1 for _ in patterns.GLOBAL_READ_RE.finditer(body))
        + len(patterns.call_sites(body))
    )


def _clamp(value: float) -> int:
    return min(100, max(0, int(round(value))))
