"""
Storage Packing Rule — Detects declaration orders that waste storage slots.

Storage is laid out in 32-byte slots and consecutive small values share a
slot only when they fit together. The rule simulates the declared layout of
every struct and every contract's state variables, compares it with a
first-fit-decreasing packing of the same members, and suggests the tighter
order when it uses fewer slots.
"""

from __future__ import annotations

import re

from contractlens.models.finding_models import Optimization, Severity
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit


RULE_ID = "storage-packing"

SLOT_SIZE = 32
GAS_PER_SLOT = 20_000

_SIZED_INT_RE = re.compile(r"u?int(\d+)$")
_FIXED_BYTES_RE = re.compile(r"bytes(\d+)$")


def type_size(type_name: str) -> int:
    """Bytes a value of this type occupies in storage (32 = full slot)."""
    name = type_name.replace(" ", "")
    if "[" in name or name.startswith("mapping") or name in ("string", "bytes"):
        return SLOT_SIZE
    if name == "bool":
        return 1
    if name.startswith("address"):
        return 20
    m = _SIZED_INT_RE.match(name)
    if m:
        return max(1, min(SLOT_SIZE, int(m.group(1)) // 8))
    m = _FIXED_BYTES_RE.match(name)
    if m:
        return max(1, min(SLOT_SIZE, int(m.group(1))))
    return SLOT_SIZE


def count_slots(sizes: list[int]) -> int:
    """Slots used when values are stored in the given order."""
    slots, used = 0, SLOT_SIZE
    for size in sizes:
        if used + size > SLOT_SIZE:
            slots += 1
            used = size
        else:
            used += size
    return slots


def pack(members: list[tuple[str, str]]) -> list[list[tuple[str, str]]]:
    """First-fit-decreasing packing of (type, name) pairs into slots."""
    bins: list[list[tuple[str, str]]] = []
    free: list[int] = []
    for member in sorted(members, key=lambda m: type_size(m[0]), reverse=True):
        size = type_size(member[0])
        for i, room in enumerate(free):
            if size <= room:
                bins[i].append(member)
                free[i] -= size
                break
        else:
            bins.append([member])
            free.append(SLOT_SIZE - size)
    return bins


def check(unit: SourceUnit) -> list[Optimization]:
    """Suggest a reordered layout wherever it saves at least one slot."""
    optimizations: list[Optimization] = []

    for struct in unit.structs:
        members = [(m.type_name, m.name) for m in struct.members]
        suggestion = _suggest(members)
        if suggestion is None:
            continue
        saved, bins = suggestion
        body = "\n".join(f"    {t} {n};" for slot in bins for t, n in slot)
        optimizations.append(
            Optimization(
                type="storage-packing",
                rule_id=RULE_ID,
                title=f"Pack struct '{struct.name}'",
                explanation=(
                    f"The members of '{struct.name}' occupy {saved + len(bins)} storage "
                    f"slots in declaration order but fit in {len(bins)} when small "
                    f"types are grouped together. Each slot saved avoids a "
                    f"{GAS_PER_SLOT} gas storage write."
                ),
                original_code=unit.line_text(struct.line).strip(),
                optimized_code=f"struct {struct.name} {{\n{body}\n}}",
                estimated_savings=saved * GAS_PER_SLOT,
                impact=Severity.MEDIUM,
                line=struct.line,
            )
        )

    by_contract: dict[str, list] = {}
    for var in unit.state_variables:
        if var.is_constant or var.is_immutable:
            continue
        by_contract.setdefault(var.contract, []).append(var)

    for contract, variables in by_contract.items():
        members = [(v.type_name, v.name) for v in variables]
        suggestion = _suggest(members)
        if suggestion is None:
            continue
        saved, bins = suggestion
        lookup = {v.name: v for v in variables}
        lines = []
        for slot in bins:
            for t, n in slot:
                visibility = lookup[n].visibility
                lines.append(f"{t} {visibility + ' ' if visibility else ''}{n};")
        label = f"'{contract}'" if contract else "the contract"
        optimizations.append(
            Optimization(
                type="storage-packing",
                rule_id=RULE_ID,
                title=f"Reorder state variables of {label}",
                explanation=(
                    f"State variables of {label} use {saved + len(bins)} slots in "
                    f"declaration order but fit in {len(bins)} when small types are "
                    f"declared next to each other."
                ),
                original_code="\n".join(unit.line_text(v.line).strip() for v in variables),
                optimized_code="\n".join(lines),
                estimated_savings=saved * GAS_PER_SLOT,
                impact=Severity.MEDIUM,
                line=variables[0].line,
            )
        )

    return optimizations


def _suggest(members: list[tuple[str, str]]) -> tuple[int, list[list[tuple[str, str]]]] | None:
    if len(members) < 2:
        return None
    current = count_slots([type_size(t) for t, _ in members])
    bins = pack(members)
    saved = current - len(bins)
    if saved <= 0:
        return None
    return saved, bins


RULE = Rule(
    id=RULE_ID,
    category=RuleCategory.GAS,
    severity=Severity.MEDIUM,
    title="Storage Packing",
    check=check,
)
