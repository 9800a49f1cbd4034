"""
Rule Engine — Holds the rule catalog and runs it against a source unit.

Rules are grouped into three families (security, gas, style) and registered
once. A rule that raises or returns something other than its declared
model contributes nothing; the fault is logged and the run continues.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from contractlens.config import settings
from contractlens.models.finding_models import Finding, Optimization
from contractlens.models.rule_models import Rule, RuleCategory
from contractlens.models.source_models import SourceUnit

# Import all rule modules
from contractlens.core.rules import (
    function_visibility,
    integer_overflow,
    loop_cost,
    missing_documentation,
    missing_visibility,
    naming_convention,
    reentrancy,
    storage_cache,
    storage_packing,
    string_concat,
    timestamp_dependence,
    tx_origin,
    unchecked_call,
)

logger = logging.getLogger("contractlens.rules")

# Registry of all built-in rules, in execution order
RULE_REGISTRY: tuple[Rule, ...] = (
    # security
    reentrancy.RULE,
    tx_origin.RULE,
    integer_overflow.RULE,
    timestamp_dependence.RULE,
    unchecked_call.RULE,
    # gas
    storage_packing.RULE,
    loop_cost.RULE,
    function_visibility.RULE,
    storage_cache.RULE,
    string_concat.RULE,
    # style
    missing_visibility.RULE,
    naming_convention.RULE,
    missing_documentation.RULE,
)


@dataclass
class RuleRun:
    """Outcome of running one family of rules."""

    results: list = field(default_factory=list)
    executed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    duration_ms: float = 0.0


class RuleEngine:
    """
    Deterministic rule engine.

    The catalog is fixed at construction and only read afterwards, so one
    engine can serve concurrent callers.
    """

    def __init__(
        self,
        rules: tuple[Rule, ...] | list[Rule] | None = None,
        parallel: bool | None = None,
        workers: int | None = None,
    ) -> None:
        catalog = tuple(RULE_REGISTRY if rules is None else rules)
        ids = [r.id for r in catalog]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate rule ids in catalog: {ids}")
        self._rules = catalog
        self._by_id = {r.id: r for r in catalog}
        self.parallel = settings.parallel_rules if parallel is None else parallel
        self.workers = workers or settings.rule_workers

    @property
    def rule_ids(self) -> list[str]:
        return [r.id for r in self._rules]

    def rules(self, category: RuleCategory | None = None) -> list[Rule]:
        """Registered rules, optionally limited to one family."""
        if category is None:
            return list(self._rules)
        return [r for r in self._rules if r.category is category]

    def run_security(self, unit: SourceUnit) -> RuleRun:
        return self.run_category(RuleCategory.SECURITY, unit)

    def run_gas(self, unit: SourceUnit) -> RuleRun:
        return self.run_category(RuleCategory.GAS, unit)

    def run_style(self, unit: SourceUnit) -> RuleRun:
        return self.run_category(RuleCategory.STYLE, unit)

    def run_category(self, category: RuleCategory, unit: SourceUnit) -> RuleRun:
        """
        Run every rule of one family against the unit.

        Args:
            category: Rule family to run.
            unit: Parsed source snapshot shared by all rules.

        Returns:
            RuleRun with results in registration order.
        """
        start = time.monotonic()
        rules = self.rules(category)
        run = RuleRun(executed=[r.id for r in rules])

        if self.parallel and len(rules) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(lambda r: self._execute(r, unit), rules))
        else:
            outcomes = [self._execute(r, unit) for r in rules]

        for rule, outcome in zip(rules, outcomes):
            if outcome is None:
                run.failed.append(rule.id)
            else:
                run.results.extend(outcome)

        run.duration_ms = round((time.monotonic() - start) * 1000, 2)
        return run

    def run_single_rule(self, rule_id: str, unit: SourceUnit) -> list[Finding | Optimization]:
        """Run a single rule. Unlike the family runners, errors propagate."""
        if rule_id not in self._by_id:
            raise ValueError(f"Unknown rule: {rule_id}")
        return list(self._by_id[rule_id].check(unit))

    @staticmethod
    def _execute(rule: Rule, unit: SourceUnit) -> list | None:
        """Run one rule in isolation. None means the rule faulted."""
        try:
            output = rule.check(unit)
        except Exception:
            # Rule failures should not crash the engine
            logger.exception(f"Rule '{rule.id}' failed; it contributes no findings")
            return None

        expected = rule.output_type
        if not isinstance(output, list) or not all(isinstance(o, expected) for o in output):
            logger.error(
                f"Rule '{rule.id}' returned invalid output "
                f"(expected list[{expected.__name__}]); discarding it"
            )
            return None
        return output
