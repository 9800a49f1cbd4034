"""
Reentrancy Rule — Detects storage writes that follow an external call.

Triggers when a value transfer or low-level call is textually followed,
inside the same function, by a write to contract storage with no guard in
between. Each unsafe call is reported on its own. Writes that come before
the call (checks-effects-interactions order) are fine.
"""

from __future__ import annotations

import re

from contractlens.core import patterns
from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "reentrancy"

_GUARD_MODIFIERS = ("nonreentrant", "noreentrant", "reentrancyguard")
_SUCCESS_FLAG_RE = re.compile(r"\bbool\s+([A-Za-z_$][\w$]*)")

REFERENCES = [
    "https://swcregistry.io/docs/SWC-107",
    "https://consensys.github.io/smart-contract-best-practices/attacks/reentrancy/",
    "https://docs.openzeppelin.com/contracts/api/security#ReentrancyGuard",
]


def check(unit: SourceUnit) -> list[Finding]:
    """Flag every external call followed by an unguarded storage write."""
    findings: list[Finding] = []

    for func in unit.functions:
        if not func.has_body:
            continue
        if any(m.lower() in _GUARD_MODIFIERS for m in func.modifiers):
            continue

        calls = patterns.external_calls(func.body, patterns.REENTRANT_CALL_KINDS)
        if not calls:
            continue
        writes = patterns.storage_writes(func, unit)
        if not writes:
            continue

        for call in calls:
            stmt_start, stmt_end = patterns.statement_bounds(func.body, call.start())
            success_flags = set(_SUCCESS_FLAG_RE.findall(func.body[stmt_start:call.start()]))

            write = next((w for w in writes if w.start >= stmt_end), None)
            if write is None:
                continue
            if patterns.has_check_between(func.body, stmt_end, write.start, success_flags):
                continue

            offset = func.body_offset + call.start()
            write_line = unit.line_of(func.body_offset + write.start)
            findings.append(
                Finding(
                    type=RULE_ID,
                    rule_id=RULE_ID,
                    severity=Severity.HIGH,
                    title="Potential Reentrancy Vulnerability",
                    description=(
                        f"In '{func.name}', the external '.{call.group(1)}' call hands "
                        f"control to another contract before '{write.target}' is "
                        f"updated on line {write_line}. A malicious callee can re-enter "
                        f"and act on the stale state."
                    ),
                    mitigation=(
                        "Follow the checks-effects-interactions pattern: update "
                        f"'{write.target}' before making the external call, or protect "
                        "the function with a reentrancy guard (nonReentrant)."
                    ),
                    references=list(REFERENCES),
                    weakness_id="SWC-107",
                    line=unit.line_of(offset),
                    column=unit.column_of(offset),
                    function=func.name,
                )
            )

    return findings


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.SECURITY,
    severity=Severity.HIGH,
    title="Reentrancy",
    check=check,
)
