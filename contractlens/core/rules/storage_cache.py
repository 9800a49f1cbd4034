"""
Storage Cache Rule — Detects repeated reads of one state variable.

Each storage read costs far more than a memory read, so a state variable
read three or more times in one function is worth copying into a local.
"""

from __future__ import annotations

import re
from collections import Counter

from contractlens.models.finding_models import Optimization, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "storage-cache"

MIN_READS = 3
# Warm SLOAD (100) minus MLOAD (3)
SAVINGS_PER_READ = 97

_IDENT_RE = re.compile(r"(?<![\w$.])([A-Za-z_$][\w$]*)\b")


def check(unit: SourceUnit) -> list[Optimization]:
    optimizations: list[Optimization] = []
    state = unit.mutable_state_names
    if not state:
        return optimizations
    types = {v.name: v.type_name for v in unit.state_variables}

    for func in unit.functions:
        if not func.has_body:
            continue
        counts = Counter(m.group(1) for m in _IDENT_RE.finditer(func.body))
        for name in sorted(state.intersection(counts)):
            reads = counts[name]
            if reads < MIN_READS or types[name].startswith("mapping"):
                continue
            optimizations.append(
                Optimization(
                    type="storage-cache",
                    rule_id=RULE_ID,
                    title="Cache Storage Variable",
                    explanation=(
                        f"'{name}' is accessed in storage {reads} times in "
                        f"'{func.name}'. Copy it into a memory variable once and "
                        f"reuse the copy."
                    ),
                    original_code=unit.line_text(func.line).strip(),
                    optimized_code=f"{types[name]} _{name} = {name};",
                    estimated_savings=SAVINGS_PER_READ * (reads - 1),
                    impact=Severity.LOW,
                    line=func.line,
                )
            )

    return optimizations


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.GAS,
    severity=Severity.LOW,
    title="Cache Storage Variables",
    check=check,
)
