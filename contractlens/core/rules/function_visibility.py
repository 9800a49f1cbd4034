"""
Function Visibility Rule — Suggests `external` for public functions that
are never called from inside the contract.

External functions can read reference-type arguments straight from
calldata instead of copying them into memory.
"""

from __future__ import annotations

import re
from collections import Counter

from contractlens.core import patterns
from contractlens.models.finding_models import Optimization, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "function-visibility"

BASE_SAVINGS = 24
MEMORY_PARAM_SAVINGS = 300

_PUBLIC_RE = re.compile(r"\bpublic\b")
_MEMORY_RE = re.compile(r"\bmemory\b")


def check(unit: SourceUnit) -> list[Optimization]:
    optimizations: list[Optimization] = []

    candidates = [
        f
        for f in unit.functions
        if f.kind == "function"
        and f.visibility == "public"
        and not f.is_virtual
        and not f.is_override
    ]
    if not candidates:
        return optimizations

    # Every `name(` in the source, minus the declarations themselves
    call_counts = Counter(patterns.call_sites(unit.masked))
    declared = Counter(f.name for f in unit.functions)

    for func in candidates:
        if call_counts[func.name] > declared[func.name]:
            continue
        memory_params = [p for p in func.parameters if p.location == "memory"]
        header = unit.line_text(func.line).strip()
        optimized = _PUBLIC_RE.sub("external", header, count=1)
        if memory_params:
            optimized = _MEMORY_RE.sub("calldata", optimized)
        optimizations.append(
            Optimization(
                type="function-visibility",
                rule_id=RULE_ID,
                title=f"Declare '{func.name}' external",
                explanation=(
                    f"'{func.name}' is public but never called internally. Marking it "
                    f"external lets reference-type arguments stay in calldata "
                    f"instead of being copied to memory."
                ),
                original_code=header,
                optimized_code=optimized,
                estimated_savings=BASE_SAVINGS + MEMORY_PARAM_SAVINGS * len(memory_params),
                impact=Severity.MEDIUM if memory_params else Severity.LOW,
                line=func.line,
            )
        )

    return optimizations


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.GAS,
    severity=Severity.LOW,
    title="Function Visibility",
    check=check,
)
