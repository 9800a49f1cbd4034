"""
Source Data Models — Lexical structure extracted from Solidity source.

These models are the output of the source parser and the input to the
rule engine, complexity calculator, gas estimator and quality scorer.
Body text is stored with comments and string contents blanked out, so
offsets and line numbers match the original source.
"""

from __future__ import annotations

from bisect import bisect_right

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class Parameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_name: str
    name: str = ""
    location: str | None = Field(
        default=None, description="'memory', 'storage' or 'calldata'"
    )


class FunctionDef(BaseModel):
    """A function, constructor, modifier, fallback or receive definition."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: str = Field(
        default="function",
        description="'function', 'constructor', 'modifier', 'fallback' or 'receive'",
    )
    contract: str = Field(default="", description="Enclosing contract, '' if free")
    line: int
    end_line: int
    header: str = Field(default="", description="Masked text from keyword to body")
    parameters: list[Parameter] = Field(default_factory=list)
    visibility: str | None = None
    mutability: str | None = None
    modifiers: list[str] = Field(default_factory=list)
    is_virtual: bool = False
    is_override: bool = False
    has_body: bool = False
    body: str = Field(default="", description="Masked body between the braces")
    body_offset: int = Field(default=0, description="Source offset of body[0]")
    has_natspec: bool = False


class StateVariable(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type_name: str
    contract: str = ""
    visibility: str | None = None
    is_constant: bool = False
    is_immutable: bool = False
    line: int = 0


class StructMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_name: str
    name: str


class StructDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    contract: str = ""
    line: int = 0
    members: list[StructMember] = Field(default_factory=list)


class ContractDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: str = Field(default="contract", description="'contract', 'library' or 'interface'")
    line: int = 0
    end_line: int = 0


class SourceUnit(BaseModel):
    """Complete lexical representation of one Solidity source string."""

    model_config = ConfigDict(frozen=True)

    source: str = ""
    masked: str = Field(default="", description="Source with comments/strings blanked")
    pragma_version: str | None = None
    contracts: list[ContractDef] = Field(default_factory=list)
    functions: list[FunctionDef] = Field(default_factory=list)
    state_variables: list[StateVariable] = Field(default_factory=list)
    structs: list[StructDef] = Field(default_factory=list)
    line_offsets: list[int] = Field(
        default_factory=lambda: [0], description="Offset at which each line starts"
    )
    has_natspec: bool = False

    _state_names: frozenset[str] = PrivateAttr(default=frozenset())
    _mutable_state_names: frozenset[str] = PrivateAttr(default=frozenset())

    def model_post_init(self, __context) -> None:
        # Rules look these up once per function
        self._state_names = frozenset(v.name for v in self.state_variables)
        self._mutable_state_names = frozenset(
            v.name
            for v in self.state_variables
            if not v.is_constant and not v.is_immutable
        )

    @property
    def is_empty(self) -> bool:
        return not self.source.strip()

    @property
    def source_lines(self) -> list[str]:
        return self.source.split("\n")

    @property
    def state_variable_names(self) -> frozenset[str]:
        return self._state_names

    @property
    def mutable_state_names(self) -> frozenset[str]:
        """State variables that live in storage (not constant/immutable)."""
        return self._mutable_state_names

    def line_of(self, offset: int) -> int:
        """1-based line number containing the given source offset."""
        return bisect_right(self.line_offsets, offset)

    def column_of(self, offset: int) -> int:
        line = self.line_of(offset)
        return offset - self.line_offsets[line - 1] + 1

    def line_text(self, line: int) -> str:
        """Raw text of a 1-based line, '' when out of range."""
        if line < 1 or line > len(self.line_offsets):
            return ""
        start = self.line_offsets[line - 1]
        end = self.source.find("\n", start)
        return self.source[start:] if end == -1 else self.source[start:end]
