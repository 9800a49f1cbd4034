"""
Missing Documentation Rule — Detects functions with no NatSpec comment.

A function counts as documented when the nearest non-blank line above it
is a `///` comment or closes a `/** ... */` block.
"""

from __future__ import annotations

from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "missing-documentation"

_DOCUMENTED_KINDS = ("function", "constructor", "modifier")


def check(unit: SourceUnit) -> list[Finding]:
    findings: list[Finding] = []

    for func in unit.functions:
        if func.kind not in _DOCUMENTED_KINDS or func.has_natspec:
            continue
        findings.append(
            Finding(
                type="documentation",
                rule_id=RULE_ID,
                severity=Severity.LOW,
                title="Missing Function Documentation",
                description=f"'{func.name}' has no NatSpec documentation.",
                mitigation=(
                    "Add a NatSpec block above the function describing it with "
                    "@notice, its inputs with @param and outputs with @return."
                ),
                references=["https://docs.soliditylang.org/en/latest/natspec-format.html"],
                line=func.line,
                column=1,
                function=func.name,
            )
        )

    return findings


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.STYLE,
    severity=Severity.LOW,
    title="Missing Documentation",
    check=check,
)
