"""
Naming Convention Rule — Checks names against the Solidity style guide.

Contracts use PascalCase, functions use mixedCase, constants use
UPPER_CASE_WITH_UNDERSCORES and ordinary state variables use mixedCase.
A leading underscore is allowed on functions and variables.
"""

from __future__ import annotations

import re

from contractlens.models.finding_models import Finding, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "naming-convention"

_PASCAL_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_MIXED_RE = re.compile(r"^_*[a-z][A-Za-z0-9]*$")
_UPPER_RE = re.compile(r"^_*[A-Z][A-Z0-9_]*$")

_STYLE_GUIDE = "https://docs.soliditylang.org/en/latest/style-guide.html#naming-conventions"


def check(unit: SourceUnit) -> list[Finding]:
    findings: list[Finding] = []

    for contract in unit.contracts:
        if not _PASCAL_RE.match(contract.name):
            findings.append(
                _finding(
                    unit,
                    contract.line,
                    contract.name,
                    "Contract Naming Convention",
                    f"Contract '{contract.name}' should use PascalCase.",
                    f"Rename to {contract.name[:1].upper()}{contract.name[1:].replace('_', '')}",
                )
            )

    for func in unit.functions:
        if func.kind not in ("function", "modifier") or _MIXED_RE.match(func.name):
            continue
        findings.append(
            _finding(
                unit,
                func.line,
                func.name,
                "Function Naming Convention",
                f"Function '{func.name}' should use mixedCase.",
                f"Rename to {_mixed_case(func.name)}",
                function=func.name,
            )
        )

    for var in unit.state_variables:
        if var.is_constant or var.is_immutable:
            if _UPPER_RE.match(var.name) or (var.is_immutable and _MIXED_RE.match(var.name)):
                continue
            findings.append(
                _finding(
                    unit,
                    var.line,
                    var.name,
                    "Constant Naming Convention",
                    f"Constant '{var.name}' should use UPPER_CASE_WITH_UNDERSCORES.",
                    f"Rename to {_upper_case(var.name)}",
                )
            )
        elif not _MIXED_RE.match(var.name):
            findings.append(
                _finding(
                    unit,
                    var.line,
                    var.name,
                    "Variable Naming Convention",
                    (
                        f"State variable '{var.name}' should use mixedCase; "
                        f"UPPER_CASE is reserved for constants."
                    ),
                    f"Rename to {_mixed_case(var.name)} or declare it constant",
                )
            )

    return findings


def _finding(
    unit: SourceUnit,
    line: int,
    name: str,
    title: str,
    description: str,
    mitigation: str,
    function: str = "",
) -> Finding:
    return Finding(
        type="style",
        rule_id=RULE_ID,
        severity=Severity.LOW,
        title=title,
        description=description,
        mitigation=mitigation,
        references=[_STYLE_GUIDE],
        line=line,
        column=unit.line_text(line).find(name) + 1,
        function=function,
    )


def _mixed_case(name: str) -> str:
    parts = [p for p in name.split("_") if p]
    if not parts:
        return name
    if all(p.isupper() for p in parts):
        parts = [p.lower() for p in parts]
    head = parts[0][:1].lower() + parts[0][1:]
    return head + "".join(p[:1].upper() + p[1:] for p in parts[1:])


def _upper_case(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name).upper()


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.STYLE,
    severity=Severity.LOW,
    title="Naming Convention",
    check=check,
)
