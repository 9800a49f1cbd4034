"""
Rule Data Models — Categories and the rule descriptor held by the registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Union

from contractlens.models.finding_models import Finding, Optimization, Severity

if TYPE_CHECKING:
    from contractlens.models.source_models import SourceUnit


class RuleCategory(str, Enum):
    SECURITY = "security"
    GAS = "gas"
    STYLE = "style"


# A matcher maps a parsed source unit to zero or more results
RuleCheckFn = Callable[["SourceUnit"], list[Union[Finding, Optimization]]]


@dataclass(frozen=True)
class Rule:
    """An immutable detection rule."""

    id: str
    category: RuleCategory
    severity: Severity
    title: str
    check: RuleCheckFn

    @property
    def output_type(self) -> type:
        """Model class this rule's matcher must return."""
        return Optimization if self.category is RuleCategory.GAS else Finding
