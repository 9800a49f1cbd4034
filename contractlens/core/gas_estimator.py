"""
Gas Estimator — Heuristic gas cost model over a parsed source unit.

deployment = DEPLOYMENT_BASE + PER_BYTE × non-whitespace code bytes
per function = FUNCTION_BASE + Σ (operation cost × loop multiplier)
total = deployment + Σ per function

The loop multiplier is loop_iteration_estimate ** depth, with depth capped
at 2. The figures are relative, suitable for comparing two versions of a
contract, and are not what a node would charge.
"""

from __future__ import annotations

import re

from contractlens.config import settings
from contractlens.core import patterns
from contractlens.models.metrics_models import GasEstimate
from contractlens.models.source_models import FunctionDef, SourceUnit

GAS_COSTS: dict[str, int] = {
    "storage_write": 20_000,
    "storage_read": 2_100,
    "external_call": 2_600,
    "event": 1_125,
    "loop_overhead": 200,
    "arithmetic": 5,
    "hash": 42,
    "create": 32_000,
    "function_base": 21_000,
    "deployment_base": 32_000,
    "per_byte": 200,
}

MAX_LOOP_DEPTH = 2

_EVENT_RE = re.compile(r"\bemit\s+[A-Za-z_$]")
_HASH_RE = re.compile(r"\b(?:keccak256|sha256|ripemd160)\s*\(")
_CREATE_RE = re.compile(r"\bnew\s+[A-Z][\w$]*\s*[({]")
_ARITH_RE = re.compile(r"\+\+|--|\*\*|[+\-*/%]")
_WHITESPACE_RE = re.compile(r"\s+")
_IDENT_RE = re.compile(r"(?<![\w$.])[A-Za-z_$][\w$]*")


def estimate_gas(unit: SourceUnit, loop_iterations: int | None = None) -> GasEstimate:
    """
    Estimate deployment and per-function gas for a source unit.

    Args:
        unit: Parsed source.
        loop_iterations: Assumed iterations per loop. Defaults to
            settings.loop_iteration_estimate.

    Returns:
        GasEstimate. Only the empty string gives all zeros; whitespace-only
        source still pays the base deployment cost.
    """
    if not unit.source:
        return GasEstimate()

    iterations = loop_iterations or settings.loop_iteration_estimate
    code_bytes = len(_WHITESPACE_RE.sub("", unit.masked))
    deployment = GAS_COSTS["deployment_base"] + GAS_COSTS["per_byte"] * code_bytes

    per_function: dict[str, int] = {}
    for func in unit.functions:
        if not func.has_body or func.kind == "modifier":
            continue
        # Overloads share a name; their costs are added together
        per_function[func.name] = per_function.get(func.name, 0) + function_cost(
            func, unit, iterations
        )

    return GasEstimate(
        deployment=deployment,
        total=deployment + sum(per_function.values()),
        per_function=per_function,
    )


def function_cost(func: FunctionDef, unit: SourceUnit, iterations: int) -> int:
    """Estimated cost of one call to `func`."""
    body = func.body
    loops = patterns.find_loops(body)

    def scaled(cost: int, pos: int) -> int:
        depth = min(patterns.loop_depth(loops, pos), MAX_LOOP_DEPTH)
        return cost * iterations**depth

    total = GAS_COSTS["function_base"]

    for loop in loops:
        total += scaled(GAS_COSTS["loop_overhead"] * iterations, loop.start)

    locals_ = patterns.local_names(func)
    writes = patterns.storage_writes(func, unit, locals_)
    write_starts = {w.start for w in writes}
    for write in writes:
        total += scaled(GAS_COSTS["storage_write"], write.start)

    state = unit.mutable_state_names
    for m in _IDENT_RE.finditer(body):
        name = m.group()
        if name in state and name not in locals_ and m.start() not in write_starts:
            total += scaled(GAS_COSTS["storage_read"], m.start())

    for m in patterns.external_calls(body):
        total += scaled(GAS_COSTS["external_call"], m.start())
    for m in _EVENT_RE.finditer(body):
        total += scaled(GAS_COSTS["event"], m.start())
    for m in _HASH_RE.finditer(body):
        total += scaled(GAS_COSTS["hash"], m.start())
    for m in _CREATE_RE.finditer(body):
        total += scaled(GAS_COSTS["create"], m.start())
    for m in _ARITH_RE.finditer(body):
        total += scaled(GAS_COSTS["arithmetic"], m.start())

    return total
