"""
Solidity Analyzer — Public entry point running the full analysis pipeline.

Pipeline:
1. Parse the source once into an immutable SourceUnit
2. Run security, gas and style rule families
3. Compute complexity metrics
4. Estimate gas
5. Score quality from findings + complexity
6. Assemble AnalysisResult

analyze() never raises. A stage that fails is logged and replaced by its
minimal value, so the result always has the same shape.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, TypeVar

from contractlens.config import Settings, settings as default_settings
from contractlens.core.complexity import calculate_complexity
from contractlens.core.gas_estimator import estimate_gas
from contractlens.core.quality_scorer import compute_quality
from contractlens.core.rule_engine import RuleEngine, RuleRun
from contractlens.core.source_parser import parse_source
from contractlens.models.analysis_models import AnalysisReport, AnalysisResult, RuleRunStats
from contractlens.models.metrics_models import ComplexityMetrics, GasEstimate, QualityScore
from contractlens.models.source_models import SourceUnit

logger = logging.getLogger("contractlens.analyzer")

T = TypeVar("T")


class SolidityAnalyzer:
    """
    Stateless analysis orchestrator.

    The rule catalog is built once here and only read afterwards. All
    per-call state is local to analyze_with_stats, so one instance can
    serve concurrent callers.
    """

    def __init__(
        self,
        engine: RuleEngine | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.engine = engine or RuleEngine(
            parallel=self.settings.parallel_rules,
            workers=self.settings.rule_workers,
        )

    def analyze(self, source: Any) -> AnalysisResult:
        """Analyze Solidity source text. Never raises."""
        return self.analyze_with_stats(source).result

    def analyze_with_stats(self, source: Any) -> AnalysisReport:
        """
        Analyze Solidity source text and report which rules ran.

        Args:
            source: Source text. None or a non-string is treated as "".

        Returns:
            AnalysisReport with the result and rule run statistics.
        """
        try:
            return self._run(source)
        except Exception:
            logger.exception("Analysis failed unexpectedly; returning empty result")
            return AnalysisReport(result=AnalysisResult())

    def _run(self, source: Any) -> AnalysisReport:
        run_id = str(uuid.uuid4())[:8]
        start_time = time.monotonic()

        text = source if isinstance(source, str) else ""
        limit = self.settings.max_source_length
        if len(text) > limit:
            logger.warning(
                f"[{run_id}] Source is {len(text)} characters; truncating to {limit}"
            )
            text = text[:limit]

        # ── Step 1: Parse ──
        unit = self._stage(run_id, "parse", lambda: parse_source(text), SourceUnit(source=text))
        logger.debug(
            f"[{run_id}] Parsed {len(unit.contracts)} contracts, "
            f"{len(unit.functions)} functions"
        )

        # ── Step 2: Rule families ──
        empty = RuleRun()
        security = self._stage(run_id, "security rules", lambda: self.engine.run_security(unit), empty)
        gas = self._stage(run_id, "gas rules", lambda: self.engine.run_gas(unit), empty)
        style = self._stage(run_id, "style rules", lambda: self.engine.run_style(unit), empty)

        # ── Step 3: Complexity ──
        complexity = self._stage(
            run_id, "complexity", lambda: calculate_complexity(unit), ComplexityMetrics()
        )

        # ── Step 4: Gas estimate ──
        gas_estimate = self._stage(
            run_id,
            "gas estimate",
            lambda: estimate_gas(unit, self.settings.loop_iteration_estimate),
            GasEstimate(),
        )

        # ── Step 5: Quality ──
        quality = self._stage(
            run_id,
            "quality",
            lambda: compute_quality(
                unit, complexity, security.results, gas.results, style.results
            ),
            QualityScore(),
        )

        # ── Step 6: Assemble ──
        result = AnalysisResult(
            issues=style.results,
            vulnerabilities=security.results,
            optimizations=gas.results,
            gas_estimate=gas_estimate,
            complexity=complexity,
            quality=quality,
        )
        duration_ms = round((time.monotonic() - start_time) * 1000, 2)
        stats = RuleRunStats(
            rules_executed=security.executed + gas.executed + style.executed,
            rules_failed=security.failed + gas.failed + style.failed,
            duration_ms=duration_ms,
        )

        logger.info(
            f"[{run_id}] Analysis complete: {len(result.vulnerabilities)} vulnerabilities, "
            f"{len(result.optimizations)} optimizations, {len(result.issues)} issues, "
            f"quality {quality.score}/100 ({duration_ms:.1f}ms)"
        )
        return AnalysisReport(result=result, stats=stats)

    @staticmethod
    def _stage(run_id: str, name: str, fn: Callable[[], T], fallback: T) -> T:
        """Run one pipeline stage, falling back to its minimal value on error."""
        try:
            return fn()
        except Exception:
            logger.exception(f"[{run_id}] Stage '{name}' failed; using minimal value")
            return fallback
