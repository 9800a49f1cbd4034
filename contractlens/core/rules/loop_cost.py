"""
Loop Cost Rule — Detects per-iteration work that can be hoisted.

Two shapes are reported: a loop condition that re-reads `.length` on every
iteration, and a loop body that writes contract storage on every iteration.
"""

from __future__ import annotations

import re

from contractlens.core import patterns
from contractlens.models.finding_models import Optimization, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "loop-cost"

_LENGTH_RE = re.compile(r"([A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)\s*\.\s*length\b")

# Warm SLOAD vs MLOAD, and SSTORE on a dirty slot, per iteration
LENGTH_READ_SAVINGS = 97
STORAGE_WRITE_SAVINGS = 2_900


def check(unit: SourceUnit) -> list[Optimization]:
    optimizations: list[Optimization] = []

    for func in unit.functions:
        if not func.has_body:
            continue
        loops = patterns.find_loops(func.body)
        if not loops:
            continue
        writes = patterns.storage_writes(func, unit)

        for loop in loops:
            offset = func.body_offset + loop.start
            line = unit.line_of(offset)
            header = unit.line_text(line).strip()

            length = _LENGTH_RE.search(loop.condition)
            if length is not None:
                array = length.group(1)
                cached = "len"
                optimizations.append(
                    Optimization(
                        type="cache-array-length",
                        rule_id=RULE_ID,
                        title="Cache Array Length",
                        explanation=(
                            f"'{array}.length' is evaluated on every iteration of the "
                            f"loop in '{func.name}'. Reading it once before the loop "
                            f"saves gas per iteration."
                        ),
                        original_code=header,
                        optimized_code=(
                            f"uint256 {cached} = {array}.length;\n"
                            + _LENGTH_RE.sub(cached, header, count=1)
                        ),
                        estimated_savings=LENGTH_READ_SAVINGS,
                        impact=Severity.LOW,
                        line=line,
                    )
                )

            in_loop = [w for w in writes if loop.body_start <= w.start < loop.body_end]
            if in_loop:
                targets = sorted({w.target for w in in_loop})
                optimizations.append(
                    Optimization(
                        type="storage-in-loop",
                        rule_id=RULE_ID,
                        title="Storage Write Inside Loop",
                        explanation=(
                            f"The loop in '{func.name}' writes storage "
                            f"({', '.join(targets)}) on every iteration. Accumulate in "
                            f"a memory variable and write storage once after the loop."
                        ),
                        original_code=header,
                        optimized_code=(
                            f"// accumulate in memory\n{header}\n"
                            f"    ...\n}}\n// single storage write for {', '.join(targets)}"
                        ),
                        estimated_savings=STORAGE_WRITE_SAVINGS * len(in_loop),
                        impact=Severity.MEDIUM,
                        line=line,
                    )
                )

    return optimizations


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.GAS,
    severity=Severity.LOW,
    title="Loop Cost",
    check=check,
)
