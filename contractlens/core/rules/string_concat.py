"""
String Concatenation Rule — Suggests string.concat over string(abi.encodePacked(...)).
"""

from __future__ import annotations

import re

from contractlens.models.finding_models import Optimization, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "string-concat"

_ENCODE_PACKED_RE = re.compile(r"\bstring\s*\(\s*abi\s*\.\s*encodePacked\s*\(")


def check(unit: SourceUnit) -> list[Optimization]:
    optimizations: list[Optimization] = []

    for m in _ENCODE_PACKED_RE.finditer(unit.masked):
        line = unit.line_of(m.start())
        original = unit.line_text(line).strip()
        optimizations.append(
            Optimization(
                type="string-concat",
                rule_id=RULE_ID,
                title="Optimize String Concatenation",
                explanation=(
                    "bytes.concat() avoids the ABI encoding overhead of "
                    "abi.encodePacked() when joining strings (string.concat() on 0.8.12+)."
                ),
                original_code=original,
                optimized_code=original.replace("abi.encodePacked", "bytes.concat"),
                estimated_savings=30,
                impact=Severity.LOW,
                line=line,
            )
        )

    return optimizations


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.GAS,
    severity=Severity.LOW,
    title="String Concatenation",
    check=check,
)
