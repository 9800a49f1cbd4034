"""
Shared lexical patterns over masked function bodies.

Used by the rules, the gas estimator and the quality scorer so that they
agree on what an external call, a storage write or a loop looks like.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from contractlens.core.source_parser import find_closing
from contractlens.models.source_models import FunctionDef, SourceUnit

# Value transfers and low-level calls hand control to another address
EXTERNAL_CALL_RE = re.compile(
    r"\.\s*(call|send|transfer|delegatecall|staticcall)\s*(?:\{[^{}]*\}\s*)?\("
)
REENTRANT_CALL_KINDS = {"call", "send", "transfer", "delegatecall"}

_ASSIGN_RE = re.compile(
    r"(?P<target>[A-Za-z_$][\w$]*)"
    r"(?P<access>(?:\s*\[[^\]\n]*\]|\s*\.\s*[A-Za-z_$][\w$]*)*)"
    r"\s*(?P<op>\*\*|<<|>>|[+\-*/%|&^])?=(?![=>])"
)
_INCDEC_RE = re.compile(
    r"(?:\+\+|--)\s*(?P<pre>[A-Za-z_$][\w$]*)"
    r"|(?P<post>[A-Za-z_$][\w$]*)(?:\s*\[[^\]\n]*\]|\s*\.\s*[A-Za-z_$][\w$]*)*\s*(?:\+\+|--)"
)
_DELETE_RE = re.compile(r"\bdelete\s+(?P<target>[A-Za-z_$][\w$]*)")

_LOCAL_DECL_RE = re.compile(
    r"\b(?:u?int\d*|bool|address(?:\s+payable)?|bytes\d*|string|var|[A-Z][\w$]*)"
    r"(?:\s*\[[^\]]*\])*\s+(?:memory\s+|storage\s+|calldata\s+)?"
    r"(?P<name>[A-Za-z_$][\w$]*)\s*[=;,)]"
)
_RETURNS_RE = re.compile(r"\breturns\s*\((.*)\)\s*$")
_LOOP_RE = re.compile(r"\b(for|while)\s*\(")
_CHECK_RE = re.compile(r"\b(require|assert|revert|if)\b")
_GUARD_WORDS = {"require", "assert", "revert", "if", "true", "false"}
_WORD_RE = re.compile(r"[A-Za-z_$][\w$]*")
_OPEN_BRACE_RE = re.compile(r"\s*\{")
_TRAILING_TOKEN_RE = re.compile(r"([\w$\]\)]+)$")
_TYPE_WORD_RE = re.compile(
    r"u?int\d*|bool|address|payable|bytes\d*|string|var|memory|storage|calldata"
)
_LOCATION_WORDS = {"memory", "storage", "calldata", "payable"}
GLOBAL_READ_RE = re.compile(r"\b(msg|block|tx)\s*\.\s*[a-z]+")
_CALL_SITE_RE = re.compile(r"(?<![\w$.])([A-Za-z_$][\w$]*)\s*\(")

_NOT_STORAGE = {"msg", "tx", "block", "this", "super", "abi"}
_NON_CALL_WORDS = {
    "if",
    "for",
    "while",
    "require",
    "assert",
    "revert",
    "return",
    "returns",
    "emit",
    "new",
    "keccak256",
    "sha256",
    "ecrecover",
    "address",
    "payable",
    "type",
    "unchecked",
    "catch",
}


@dataclass(frozen=True)
class StorageWrite:
    target: str
    start: int
    end: int


@dataclass(frozen=True)
class LoopSpan:
    keyword: str
    start: int
    condition: str
    body_start: int
    body_end: int


def local_names(func: FunctionDef) -> set[str]:
    """Parameter names, named return values and variables declared in the body."""
    names = {p.name for p in func.parameters if p.name}
    returns = _RETURNS_RE.search(func.header)
    if returns:
        for part in returns.group(1).split(","):
            tokens = part.split()
            if len(tokens) > 1 and tokens[-1] not in _LOCATION_WORDS:
                names.add(tokens[-1])
    names.update(m.group("name") for m in _LOCAL_DECL_RE.finditer(func.body))
    return names


def storage_writes(
    func: FunctionDef, unit: SourceUnit, locals_: set[str] | None = None
) -> list[StorageWrite]:
    """
    Writes that land in contract storage, in textual order.

    A write counts when its target is a declared state variable, or is not
    a local at all (inherited state, or state in a snippet with no contract
    around it). Local `storage` pointers are not followed.
    """
    body = func.body
    if not body:
        return []
    locals_ = local_names(func) if locals_ is None else locals_
    state = unit.state_variable_names

    def _is_storage(name: str) -> bool:
        if name in _NOT_STORAGE:
            return False
        return name in state or name not in locals_

    writes: list[StorageWrite] = []
    for m in _ASSIGN_RE.finditer(body):
        target = m.group("target")
        if _is_declaration(body, m.start()):
            continue
        if _is_storage(target):
            writes.append(StorageWrite(target, m.start(), m.end()))
    for m in _INCDEC_RE.finditer(body):
        target = m.group("pre") or m.group("post")
        if _is_storage(target):
            writes.append(StorageWrite(target, m.start(), m.end()))
    for m in _DELETE_RE.finditer(body):
        if _is_storage(m.group("target")):
            writes.append(StorageWrite(m.group("target"), m.start(), m.end()))
    writes.sort(key=lambda w: w.start)
    return writes


def _is_declaration(body: str, start: int) -> bool:
    """True when the identifier at `start` is the name in `type name = ...`."""
    prefix = body[max(0, start - 48):start].rstrip()
    if not prefix:
        return False
    tail = _TRAILING_TOKEN_RE.search(prefix)
    if tail is None:
        return False
    word = tail.group(1)
    return bool(
        _TYPE_WORD_RE.fullmatch(word)
        or word.endswith("]")
        or word[:1].isupper()
    )


def external_calls(body: str, kinds: set[str] | None = None) -> list[re.Match]:
    matches = EXTERNAL_CALL_RE.finditer(body)
    if kinds is None:
        return list(matches)
    return [m for m in matches if m.group(1) in kinds]


def statement_bounds(body: str, pos: int) -> tuple[int, int]:
    """Start and end offsets of the statement containing `pos`."""
    start = max(body.rfind(";", 0, pos), body.rfind("{", 0, pos), body.rfind("}", 0, pos)) + 1
    end = body.find(";", pos)
    return start, (len(body) if end == -1 else end + 1)


def has_check_between(body: str, start: int, end: int, ignore: set[str] | None = None) -> bool:
    """
    True when a require/assert/revert/if guard sits between two offsets.

    Guards whose statement only mentions names in `ignore` (typically the
    success flag of the call being examined) do not count, and neither does
    a bare `revert();`.
    """
    ignore = ignore or set()
    for m in _CHECK_RE.finditer(body, start, end):
        s, e = statement_bounds(body, m.start())
        words = set(_WORD_RE.findall(body[s:e])) - _GUARD_WORDS
        if words <= ignore:
            continue
        return True
    return False


def find_loops(body: str) -> list[LoopSpan]:
    """Every for/while loop in the body with its condition and body span."""
    loops: list[LoopSpan] = []
    for m in _LOOP_RE.finditer(body):
        paren = m.end() - 1
        close = find_closing(body, paren)
        condition = body[paren + 1:close]
        rest = close + 1
        opening = _OPEN_BRACE_RE.match(body, rest)
        if opening:
            brace = opening.end() - 1
            body_end = find_closing(body, brace)
            body_start = brace + 1
        else:
            body_start = rest
            semi = body.find(";", rest)
            body_end = len(body) if semi == -1 else semi + 1
        loops.append(LoopSpan(m.group(1), m.start(), condition, body_start, body_end))
    return loops


def loop_depth(loops: list[LoopSpan], pos: int) -> int:
    """Number of loop bodies enclosing the offset."""
    return sum(1 for loop in loops if loop.body_start <= pos < loop.body_end)


def call_sites(text: str) -> list[str]:
    """Names of plain function calls (`name(`), excluding keywords and builtins."""
    return [
        m.group(1) for m in _CALL_SITE_RE.finditer(text) if m.group(1) not in _NON_CALL_WORDS
    ]
