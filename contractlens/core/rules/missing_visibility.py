"""
Missing Visibility Rule — Detects functions without an explicit visibility.
"""

from __future__ import annotations

from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "missing-visibility"


def check(unit: SourceUnit) -> list[Finding]:
    findings: list[Finding] = []

    for func in unit.functions:
        if func.kind != "function" or func.visibility is not None:
            continue
        column = unit.line_text(func.line).find("function") + 1
        findings.append(
            Finding(
                type="style",
                rule_id=RULE_ID,
                severity=Severity.MEDIUM,
                title="Missing Visibility Specifier",
                description=(
                    f"Function '{func.name}' has no explicit visibility. Older "
                    f"compilers default to public, which can expose internal logic."
                ),
                mitigation=(
                    "Add an explicit visibility specifier (public, private, "
                    "internal, or external)."
                ),
                references=["https://swcregistry.io/docs/SWC-100"],
                weakness_id="SWC-100",
                line=func.line,
                column=max(column, 1),
                function=func.name,
            )
        )

    return findings


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.STYLE,
    severity=Severity.MEDIUM,
    title="Missing Visibility Specifier",
    check=check,
)
