"""
Timestamp Dependence Rule — Detects block.timestamp / now in decisions.

Validators can skew the block timestamp within a small window, so using it
in a condition or an assignment that drives later logic is reported.
"""

from __future__ import annotations

import re

from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "timestamp-dependence"

_TIMESTAMP_RE = re.compile(r"\bblock\s*\.\s*timestamp\b|(?<![\w$.])now\b")
_DECISION_RE = re.compile(r"\b(require|if|while|assert)\b|[<>]=?|==|!=|(?<![=!<>])=(?![=>])")


def check(unit: SourceUnit) -> list[Finding]:
    """Flag one finding per line that bases a decision on the timestamp."""
    findings: list[Finding] = []
    seen_lines: set[int] = set()

    for m in _TIMESTAMP_RE.finditer(unit.masked):
        line = unit.line_of(m.start())
        if line in seen_lines:
            continue
        start = unit.line_offsets[line - 1]
        end = unit.masked.find("\n", start)
        text = unit.masked[start:] if end == -1 else unit.masked[start:end]
        if not _DECISION_RE.search(text):
            continue
        seen_lines.add(line)
        findings.append(
            Finding(
                type="timestamp",
                rule_id=RULE_ID,
                severity=Severity.LOW,
                title="Timestamp Dependence",
                description=(
                    "Block timestamp can be manipulated by validators within "
                    "certain bounds and should not drive critical logic."
                ),
                mitigation=(
                    "Avoid block.timestamp for randomness or tight deadlines; "
                    "tolerate a drift of several seconds or use block.number."
                ),
                references=[
                    "https://swcregistry.io/docs/SWC-116",
                    "https://consensys.github.io/smart-contract-best-practices/development-recommendations/solidity-specific/timestamp-dependence/",
                ],
                weakness_id="SWC-116",
                line=line,
                column=unit.column_of(m.start()),
            )
        )

    return findings


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.SECURITY,
    severity=Severity.LOW,
    title="Timestamp Dependence",
    check=check,
)
