"""
Unchecked Call Rule — Detects low-level calls whose result is ignored.

.call, .delegatecall and .send return false instead of reverting. When the
boolean is neither captured nor tested, a failed call goes unnoticed.
"""

from __future__ import annotations

import re

from contractlens.core import patterns
from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "unchecked-call"

_LOW_LEVEL_KINDS = {"call", "delegatecall", "send"}
_HANDLED_RE = re.compile(r"\b(require|assert|if|return|bool)\b|(?<![=!<>])=(?![=>])|\(\s*$")


def check(unit: SourceUnit) -> list[Finding]:
    """Flag low-level calls used as bare expression statements."""
    findings: list[Finding] = []
    masked = unit.masked

    for call in patterns.external_calls(masked, _LOW_LEVEL_KINDS):
        start, _ = patterns.statement_bounds(masked, call.start())
        prefix = masked[start:call.start()]
        if _HANDLED_RE.search(prefix):
            continue
        findings.append(
            Finding(
                type="unchecked-call",
                rule_id=RULE_ID,
                severity=Severity.MEDIUM,
                title="Unchecked External Call",
                description=(
                    f"The return value of '.{call.group(1)}' is not checked. "
                    f"Low-level calls report failure by returning false rather "
                    f"than reverting."
                ),
                mitigation=(
                    "Capture the boolean result and require it, e.g. "
                    "(bool ok, ) = target.call{value: amount}(\"\"); require(ok);"
                ),
                references=[
                    "https://swcregistry.io/docs/SWC-104",
                    "https://consensys.github.io/smart-contract-best-practices/development-recommendations/general/external-calls/",
                ],
                weakness_id="SWC-104",
                line=unit.line_of(call.start()),
                column=unit.column_of(call.start()),
            )
        )

    return findings


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.SECURITY,
    severity=Severity.MEDIUM,
    title="Unchecked External Call",
    check=check,
)
