"""
tx.origin Rule — Detects authorization based on the transaction origin.

tx.origin is the externally owned account that started the transaction,
not the immediate caller, so a malicious intermediate contract passes any
check built on it. msg.sender is the safe equivalent and is never flagged.
"""

from __future__ import annotations

import re
from bisect import bisect_right

from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import FunctionDef, SourceUnit


RULE_ID = "tx-origin"

_TX_ORIGIN_RE = re.compile(r"\btx\s*\.\s*origin\b")


def check(unit: SourceUnit) -> list[Finding]:
    """Flag every tx.origin occurrence outside comments and strings."""
    findings: list[Finding] = []
    bodies = [f for f in unit.functions if f.has_body]
    starts = [f.body_offset for f in bodies]

    for m in _TX_ORIGIN_RE.finditer(unit.masked):
        findings.append(
            Finding(
                type=RULE_ID,
                rule_id=RULE_ID,
                severity=Severity.MEDIUM,
                title="Use of tx.origin",
                description=(
                    "tx.origin should not be used for authorization: it is the "
                    "account that started the transaction and is preserved across "
                    "call chains, so any contract the owner interacts with can "
                    "impersonate them."
                ),
                mitigation="Use msg.sender instead of tx.origin for authorization.",
                references=[
                    "https://swcregistry.io/docs/SWC-115",
                    "https://consensys.github.io/smart-contract-best-practices/development-recommendations/solidity-specific/tx-origin/",
                ],
                weakness_id="SWC-115",
                line=unit.line_of(m.start()),
                column=unit.column_of(m.start()),
                function=_enclosing_function(bodies, starts, m.start()),
            )
        )

    return findings


def _enclosing_function(bodies: list[FunctionDef], starts: list[int], offset: int) -> str:
    # Bodies are in source order and never overlap
    i = bisect_right(starts, offset) - 1
    if i >= 0 and offset <= starts[i] + len(bodies[i].body):
        return bodies[i].name
    return ""


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.SECURITY,
    severity=Severity.MEDIUM,
    title="Use of tx.origin",
    check=check,
)
