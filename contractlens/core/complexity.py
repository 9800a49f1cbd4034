"""
Complexity Calculator — Cyclomatic and cognitive complexity plus line count.

Cyclomatic complexity starts at 1 per function and adds 1 for every
decision point (if, else if, ternary, for, while, case, catch, && and ||).
The reported value is the sum over all function bodies, or 1 plus the
global count when no function body is found.

Cognitive complexity weights each branching construct by how deeply it is
nested, adds 1 for each else, and adds 1 for each run of like boolean
operators.

Everything works on the masked source, so keywords inside comments and
strings are not counted.
"""

from __future__ import annotations

import re

from contractlens.models.metrics_models import ComplexityMetrics
from contractlens.models.source_models import SourceUnit

_DECISION_RE = re.compile(r"\b(?:if|for|while|case|catch)\b|&&|\|\||\?")
_COGNITIVE_TOKEN_RE = re.compile(r"\b(if|else|for|while|catch)\b|(&&|\|\|)|(\?)|([{};])")


def calculate_complexity(unit: SourceUnit) -> ComplexityMetrics:
    """Compute ComplexityMetrics for a parsed source unit."""
    if unit.is_empty:
        return ComplexityMetrics()

    lines = sum(1 for line in unit.masked.split("\n") if line.strip())
    bodies = [f for f in unit.functions if f.has_body]

    if not bodies:
        return ComplexityMetrics(
            cyclomatic=1 + decision_points(unit.masked),
            cognitive=cognitive_complexity(unit.masked),
            lines=lines,
        )

    per_function: dict[str, int] = {}
    cyclomatic = 0
    cognitive = 0
    for func in bodies:
        value = 1 + decision_points(func.body)
        cyclomatic += value
        cognitive += cognitive_complexity(func.body)
        per_function[func.name] = max(per_function.get(func.name, 0), value)

    return ComplexityMetrics(
        cyclomatic=max(1, cyclomatic),
        cognitive=cognitive,
        lines=lines,
        per_function=per_function,
    )


def decision_points(text: str) -> int:
    """Number of branch points in masked text."""
    return sum(1 for _ in _DECISION_RE.finditer(text))


def cognitive_complexity(text: str) -> int:
    """
    Nesting-weighted complexity of masked text.

    Depth is the number of open braces, so a branch nested two blocks deep
    costs 3 where a top-level branch costs 1. `else if` is charged like an
    else: a flat +1.
    """
    score = 0
    depth = 0
    last_bool_op = ""
    after_else = False

    for m in _COGNITIVE_TOKEN_RE.finditer(text):
        keyword, bool_op, ternary, punct = m.groups()

        if punct:
            if punct == "{":
                depth += 1
            elif punct == "}":
                depth = max(0, depth - 1)
            last_bool_op = ""
            after_else = False
            continue

        if bool_op:
            if bool_op != last_bool_op:
                score += 1
                last_bool_op = bool_op
            continue

        if ternary:
            score += 1 + depth
            continue

        if keyword == "else":
            score += 1
            after_else = True
            continue
        if keyword == "if" and after_else:
            after_else = False
            continue

        after_else = False
        score += 1 + depth

    return score
