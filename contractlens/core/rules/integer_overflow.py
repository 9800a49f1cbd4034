"""
Integer Overflow Rule — Advisory for naive arithmetic that can wrap.

Compilers before 0.8 wrap on overflow silently, so plain arithmetic without
SafeMath is reported once per function. On 0.8+ only arithmetic inside an
`unchecked { }` block can wrap, and that is reported at low severity.
Sources without a pragma are treated as 0.8+.
"""

from __future__ import annotations

import re

from contractlens.core.source_parser import find_closing
from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import FunctionDef, SourceUnit


RULE_ID = "integer-overflow"

_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")
_ARITHMETIC_RE = re.compile(r"[\w\])]\s*(?:[+\-*](?![+\-=])|[+\-*]=)\s*[\w(]")
_UNCHECKED_RE = re.compile(r"\bunchecked\s*\{")
_SAFE_MATH_RE = re.compile(r"\bSafeMath\b|\.\s*(?:add|sub|mul)\s*\(")

REFERENCES = [
    "https://swcregistry.io/docs/SWC-101",
    "https://docs.soliditylang.org/en/latest/080-breaking-changes.html",
]


def is_legacy_compiler(pragma_version: str | None) -> bool:
    """True when the pragma pins a compiler older than 0.8."""
    if not pragma_version:
        return False
    m = _VERSION_RE.search(pragma_version)
    if m is None:
        return False
    major, minor = int(m.group(1)), int(m.group(2))
    return major == 0 and minor < 8


def check(unit: SourceUnit) -> list[Finding]:
    """Flag wrapping-prone arithmetic per function."""
    findings: list[Finding] = []
    legacy = is_legacy_compiler(unit.pragma_version)
    uses_safe_math = bool(_SAFE_MATH_RE.search(unit.masked))

    for func in unit.functions:
        if not func.has_body:
            continue

        if legacy and not uses_safe_math:
            m = _ARITHMETIC_RE.search(func.body)
            if m is not None:
                findings.append(_finding(unit, func, m.start(), Severity.HIGH, legacy=True))
            continue

        for block in _UNCHECKED_RE.finditer(func.body):
            brace = block.end() - 1
            end = find_closing(func.body, brace)
            m = _ARITHMETIC_RE.search(func.body, brace, end)
            if m is not None:
                findings.append(_finding(unit, func, m.start(), Severity.LOW, legacy=False))

    return findings


def _finding(
    unit: SourceUnit, func: FunctionDef, body_pos: int, severity: Severity, legacy: bool
) -> Finding:
    offset = func.body_offset + body_pos
    if legacy:
        description = (
            f"'{func.name}' performs unchecked arithmetic under pragma "
            f"'{unit.pragma_version}'. Compilers before 0.8 wrap on overflow "
            f"and underflow without reverting."
        )
        mitigation = (
            "Upgrade to Solidity 0.8 or later for built-in overflow checks, "
            "or route arithmetic through SafeMath."
        )
    else:
        description = (
            f"'{func.name}' performs arithmetic inside an unchecked block, which "
            f"disables the compiler's overflow checks."
        )
        mitigation = (
            "Keep unchecked blocks to operations whose bounds are proven, such "
            "as loop counters compared against a length."
        )
    return Finding(
        type="overflow",
        rule_id=RULE_ID,
        severity=severity,
        title="Integer Overflow/Underflow",
        description=description,
        mitigation=mitigation,
        references=list(REFERENCES),
        weakness_id="SWC-101",
        line=unit.line_of(offset),
        column=unit.column_of(offset),
        function=func.name,
    )


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.SECURITY,
    severity=Severity.HIGH,
    title="Integer Overflow",
    check=check,
)
