"""
Source Parser — Lightweight lexical extraction for Solidity.

No compiler is involved. Comments and string literals are blanked out
first (newlines kept, so offsets and line numbers survive), then contracts,
callables, state variables and structs are located with regexes and brace
matching. Every pass is linear in the source length.

Malformed or truncated input never raises: an unterminated body simply
extends to the end of the text and missing pieces are left out.
"""

from __future__ import annotations

import re
from bisect import bisect_right

from contractlens.models.source_models import (
    ContractDef,
    FunctionDef,
    Parameter,
    SourceUnit,
    StateVariable,
    StructDef,
    StructMember,
)

_LEXEME_RE = re.compile(
    r"//[^\n]*"
    r"|/\*.*?(?:\*/|\Z)"
    r'|"(?:\\.|[^"\\\n])*"?'
    r"|'(?:\\.|[^'\\\n])*'?",
    re.S,
)
_NON_NEWLINE_RE = re.compile(r"[^\n]")

_CONTRACT_RE = re.compile(
    r"\b(abstract\s+contract|contract|library|interface)\s+([A-Za-z_$][\w$]*)"
)
_CALLABLE_RE = re.compile(r"\b(function|constructor|modifier|fallback|receive)\b")
_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_LEADING_IDENT_RE = re.compile(r"\s*([A-Za-z_$][\w$]*)")
_OPEN_PAREN_RE = re.compile(r"\s*\(")
_PRAGMA_RE = re.compile(r"\bpragma\s+solidity\s+([^;]+);")
_RETURNS_RE = re.compile(r"\breturns\b")
_PAREN_GROUP_RE = re.compile(r"\([^()]*\)")
_HEADER_STOP_RE = re.compile(r"[(){};]")
_STATEMENT_RE = re.compile(r"[{};]")
_ASSIGN_SPLIT_RE = re.compile(r"(?<![=!<>])=(?![=>])")
_DECL_RE = re.compile(
    r"^(?P<type>mapping\s*\(.*\)"
    r"|[A-Za-z_$][\w$.]*(?:\s+payable)?(?:\s*\[[^\]]*\])*)"
    r"\s+(?P<rest>.+)$",
    re.S,
)

_CLOSING = {"{": "}", "(": ")", "[": "]"}
_PAIR_RES = {
    opener: re.compile(re.escape(opener) + "|" + re.escape(closer))
    for opener, closer in _CLOSING.items()
}

VISIBILITIES = ("public", "private", "internal", "external")
MUTABILITIES = ("pure", "view", "payable")
DATA_LOCATIONS = ("memory", "storage", "calldata")

_HEADER_KEYWORDS = set(VISIBILITIES) | set(MUTABILITIES) | {
    "virtual",
    "override",
    "constant",
}
_NON_VARIABLE_HEADS = {
    "event",
    "error",
    "using",
    "import",
    "pragma",
    "function",
    "modifier",
    "constructor",
    "fallback",
    "receive",
    "struct",
    "enum",
    "type",
    "emit",
    "return",
    "contract",
    "library",
    "interface",
    "abstract",
}


def mask_source(source: str) -> str:
    """Blank out comments and string contents, keeping quotes and newlines."""

    def _blank(match: re.Match) -> str:
        text = match.group(0)
        if text[0] in "\"'":
            closed = len(text) > 1 and text[-1] == text[0]
            inner = text[1:-1] if closed else text[1:]
            return text[0] + _NON_NEWLINE_RE.sub(" ", inner) + (text[-1] if closed else "")
        return _NON_NEWLINE_RE.sub(" ", text)

    return _LEXEME_RE.sub(_blank, source)


def find_closing(text: str, open_idx: int, end: int | None = None) -> int:
    """
    Index of the bracket matching the one at open_idx.

    Returns `end` (default len(text)) when the bracket is never closed.
    """
    limit = len(text) if end is None else end
    opener = text[open_idx]
    closer = _CLOSING[opener]
    depth = 0
    for m in _PAIR_RES[opener].finditer(text, open_idx, limit):
        if m.group(0) == opener:
            depth += 1
        else:
            depth -= 1
            if depth == 0:
                return m.start()
    return limit


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on `sep` where it is not nested inside brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        if ch == sep and depth <= 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [p for p in parts if p.strip()]


def parse_source(source: str) -> SourceUnit:
    """Parse Solidity source text into a SourceUnit."""
    if not source:
        return SourceUnit()

    masked = mask_source(source)
    line_offsets = [0] + [m.end() for m in re.finditer("\n", source)]
    raw_lines = source.split("\n")
    ctx = _ParseContext(source, masked, line_offsets, raw_lines)

    contracts = ctx.find_contracts()
    functions = ctx.find_functions()
    state_variables, structs = ctx.find_declarations()

    pragma = _PRAGMA_RE.search(masked)

    return SourceUnit(
        source=source,
        masked=masked,
        pragma_version=" ".join(pragma.group(1).split()) if pragma else None,
        contracts=contracts,
        functions=functions,
        state_variables=state_variables,
        structs=structs,
        line_offsets=line_offsets,
        has_natspec="///" in source or "/**" in source,
    )


class _ParseContext:
    """Holds the per-call parse state shared by the extraction passes."""

    def __init__(
        self,
        source: str,
        masked: str,
        line_offsets: list[int],
        raw_lines: list[str],
    ) -> None:
        self.source = source
        self.masked = masked
        self.line_offsets = line_offsets
        self.raw_lines = raw_lines
        # (name, body_start, body_end) for each contract
        self._spans: list[tuple[str, int, int]] = []
        self._span_starts: list[int] = []

    def line_of(self, offset: int) -> int:
        return bisect_right(self.line_offsets, offset)

    def contract_at(self, offset: int) -> str:
        # Spans are recorded in source order and never overlap
        i = bisect_right(self._span_starts, offset) - 1
        if i >= 0:
            name, _, end = self._spans[i]
            if offset <= end:
                return name
        return ""

    # ── Contracts ──

    def find_contracts(self) -> list[ContractDef]:
        masked = self.masked
        contracts: list[ContractDef] = []
        cursor = 0
        for m in _CONTRACT_RE.finditer(masked):
            if m.start() < cursor:
                continue
            brace = masked.find("{", m.end())
            if brace == -1 or masked.find(";", m.end(), brace) != -1:
                continue
            end = find_closing(masked, brace)
            kind = "contract" if m.group(1).startswith("abstract") else m.group(1)
            contracts.append(
                ContractDef(
                    name=m.group(2),
                    kind=kind,
                    line=self.line_of(m.start()),
                    end_line=self.line_of(min(end, len(masked) - 1)),
                )
            )
            self._spans.append((m.group(2), brace + 1, end))
            self._span_starts.append(brace + 1)
            cursor = end
        return contracts

    # ── Callables ──

    def find_functions(self) -> list[FunctionDef]:
        masked = self.masked
        functions: list[FunctionDef] = []
        cursor = 0
        for m in _CALLABLE_RE.finditer(masked):
            if m.start() < cursor:
                continue
            parsed = self._parse_callable(m)
            if parsed is None:
                continue
            func, resume_at = parsed
            functions.append(func)
            cursor = resume_at
        return functions

    def _parse_callable(self, m: re.Match) -> tuple[FunctionDef, int] | None:
        masked = self.masked
        kind = m.group(1)
        name_match = _LEADING_IDENT_RE.match(masked, m.end())

        if kind in ("function", "modifier"):
            if name_match:
                name = name_match.group(1)
                after_name = name_match.end()
            elif kind == "function":
                # Pre-0.6 unnamed fallback or a function-type declaration
                name, kind, after_name = "fallback", "fallback", m.end()
            else:
                return None
        else:
            name, after_name = kind, m.end()
            if not _OPEN_PAREN_RE.match(masked, after_name):
                return None

        # Header runs until '{' or ';' outside parentheses
        stop, depth = len(masked), 0
        stop_char = ""
        for hm in _HEADER_STOP_RE.finditer(masked, after_name):
            ch = hm.group(0)
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
            elif depth <= 0:
                stop, stop_char = hm.start(), ch
                break

        header = masked[m.start():stop]
        params_text, tail = _split_params(masked[after_name:stop])

        if kind == "fallback" and name_match is None and stop_char == ";":
            # `function (uint) external f;` is a variable, not a callable
            return None

        has_body = stop_char == "{"
        if has_body:
            body_end = find_closing(masked, stop)
            body = masked[stop + 1:body_end]
            body_offset = stop + 1
            resume_at = body_end
        else:
            body_end = stop
            body, body_offset = "", stop
            resume_at = stop

        before_returns = _RETURNS_RE.split(tail, maxsplit=1)[0]
        flat = _PAREN_GROUP_RE.sub(" ", before_returns)
        words = _IDENT_RE.findall(flat)
        visibility = next((w for w in words if w in VISIBILITIES), None)
        mutability = next((w for w in words if w in MUTABILITIES), None)
        modifiers = [w for w in words if w not in _HEADER_KEYWORDS]

        line = self.line_of(m.start())
        func = FunctionDef(
            name=name,
            kind=kind,
            contract=self.contract_at(m.start()),
            line=line,
            end_line=self.line_of(max(m.start(), min(body_end, len(masked) - 1))),
            header=" ".join(header.split()),
            parameters=_parse_parameters(params_text),
            visibility=visibility,
            mutability=mutability,
            modifiers=modifiers,
            is_virtual="virtual" in words,
            is_override="override" in words,
            has_body=has_body,
            body=body,
            body_offset=body_offset,
            has_natspec=self._preceded_by_natspec(line - 1),
        )
        return func, resume_at

    def _preceded_by_natspec(self, line_index: int) -> bool:
        """True when the nearest non-blank line above is a NatSpec comment."""
        lines = self.raw_lines
        i = line_index - 1
        while i >= 0 and not lines[i].strip():
            i -= 1
        if i < 0:
            return False
        text = lines[i].strip()
        if text.startswith("///"):
            return True
        if text.endswith("*/"):
            while i >= 0:
                if "/*" in lines[i]:
                    return "/**" in lines[i]
                i -= 1
        return False

    # ── State variables and structs ──

    def find_declarations(self) -> tuple[list[StateVariable], list[StructDef]]:
        variables: list[StateVariable] = []
        structs: list[StructDef] = []
        spans = self._spans or [("", 0, len(self.masked))]
        for contract, start, end in spans:
            self._scan_container(contract, start, end, variables, structs)
        return variables, structs

    def _scan_container(
        self,
        contract: str,
        start: int,
        end: int,
        variables: list[StateVariable],
        structs: list[StructDef],
    ) -> None:
        masked = self.masked
        pos = stmt_start = start
        while pos < end:
            m = _STATEMENT_RE.search(masked, pos, end)
            if m is None:
                break
            text = masked[stmt_start:m.start()]
            ch = m.group(0)
            if ch == "{":
                close = find_closing(masked, m.start(), end)
                head = text.split()
                if len(head) >= 2 and head[0] == "struct":
                    structs.append(
                        StructDef(
                            name=head[1],
                            contract=contract,
                            line=self.line_of(m.start()),
                            members=_parse_members(masked[m.start() + 1:close]),
                        )
                    )
                pos = stmt_start = close + 1
            elif ch == ";":
                var = self._parse_state_variable(contract, text, stmt_start)
                if var is not None:
                    variables.append(var)
                pos = stmt_start = m.end()
            else:
                pos = stmt_start = m.end()

    def _parse_state_variable(
        self, contract: str, text: str, offset: int
    ) -> StateVariable | None:
        stmt = " ".join(text.split())
        if not stmt:
            return None
        if stmt.split(" ", 1)[0] in _NON_VARIABLE_HEADS:
            return None
        lhs = _ASSIGN_SPLIT_RE.split(stmt, maxsplit=1)[0].strip()
        decl = _DECL_RE.match(lhs)
        if decl is None:
            return None
        words = decl.group("rest").split()
        name = words[-1]
        if not _IDENT_RE.fullmatch(name) or name in _HEADER_KEYWORDS:
            return None
        attributes = words[:-1]
        leading = len(text) - len(text.lstrip())
        return StateVariable(
            name=name,
            type_name=" ".join(decl.group("type").split()),
            contract=contract,
            visibility=next((a for a in attributes if a in VISIBILITIES), None),
            is_constant="constant" in attributes,
            is_immutable="immutable" in attributes,
            line=self.line_of(offset + leading),
        )


def _split_params(text: str) -> tuple[str, str]:
    """Split a callable header (after its name) into parameter text and tail."""
    open_idx = text.find("(")
    if open_idx == -1:
        return "", text
    close = find_closing(text, open_idx)
    return text[open_idx + 1:close], text[close + 1:]


def _parse_parameters(text: str) -> list[Parameter]:
    params: list[Parameter] = []
    for raw in split_top_level(text):
        tokens = raw.split()
        if not tokens:
            continue
        location = next((t for t in tokens if t in DATA_LOCATIONS), None)
        rest = [t for t in tokens[1:] if t not in DATA_LOCATIONS and t != "indexed"]
        name = ""
        if rest and rest[-1] != "payable" and _IDENT_RE.fullmatch(rest[-1]):
            name = rest[-1]
        params.append(Parameter(type_name=tokens[0], name=name, location=location))
    return params


def _parse_members(text: str) -> list[StructMember]:
    members: list[StructMember] = []
    for raw in text.split(";"):
        decl = _DECL_RE.match(" ".join(raw.split()))
        if decl is None:
            continue
        name = decl.group("rest").split()[-1]
        if _IDENT_RE.fullmatch(name):
            members.append(
                StructMember(type_name=" ".join(decl.group("type").split()), name=name)
            )
    return members
