"""
Tests for SolidityAnalyzer — end-to-end behaviour of analyze().
"""

import time

import pytest

from contractlens.config import Settings
from contractlens.core import analyzer as analyzer_module
from contractlens.core.analyzer import SolidityAnalyzer
from contractlens.core.rule_engine import RULE_REGISTRY, RuleEngine
from contractlens.core.rules import tx_origin
from contractlens.models.analysis_models import AnalysisResult
from contractlens.models.finding_models import Severity
from contractlens.models.rule_models import Rule, RuleCategory


def _assert_shape(result):
    assert isinstance(result, AnalysisResult)
    assert isinstance(result.issues, list)
    assert isinstance(result.vulnerabilities, list)
    assert isinstance(result.optimizations, list)
    assert result.gas_estimate.total >= result.gas_estimate.deployment >= 0
    assert result.complexity.cyclomatic >= 1
    assert 0 <= result.quality.score <= 100


def test_empty_source(analyzer):
    result = analyzer.analyze("")
    _assert_shape(result)
    assert result.issues == []
    assert result.vulnerabilities == []
    assert result.optimizations == []
    assert (result.complexity.cyclomatic, result.complexity.cognitive, result.complexity.lines) == (1, 0, 0)
    assert (result.gas_estimate.deployment, result.gas_estimate.total) == (0, 0)
    assert result.gas_estimate.per_function == {}
    assert result.quality.score == 0


@pytest.mark.parametrize("source", [None, 42, b"contract A {}", ["x"]])
def test_non_string_input_is_treated_as_empty(analyzer, source):
    result = analyzer.analyze(source)
    _assert_shape(result)
    assert result.vulnerabilities == []
    assert result.gas_estimate.total == 0


def test_vulnerable_contract(analyzer, vulnerable_contract):
    result = analyzer.analyze(vulnerable_contract)
    _assert_shape(result)

    reentrancy = [v for v in result.vulnerabilities if v.type == "reentrancy"]
    assert len(reentrancy) == 1
    assert reentrancy[0].severity == Severity.HIGH
    assert "checks-effects-interactions" in reentrancy[0].mitigation

    origin = [v for v in result.vulnerabilities if v.type == "tx-origin"]
    assert len(origin) == 1
    assert origin[0].severity == Severity.MEDIUM

    assert all(v.mitigation and v.references for v in result.vulnerabilities)
    assert any(i.type == "documentation" for i in result.issues)


def test_safe_contract(analyzer, safe_contract):
    result = analyzer.analyze(safe_contract)
    assert [v for v in result.vulnerabilities if v.type == "reentrancy"] == []
    assert [v for v in result.vulnerabilities if v.type == "tx-origin"] == []


def test_complexity_in_result(analyzer, complex_contract):
    result = analyzer.analyze(complex_contract)
    assert result.complexity.cyclomatic > 1
    assert result.complexity.cognitive > 0


def test_gas_estimate_positive_with_function(analyzer, documented_contract):
    estimate = analyzer.analyze(documented_contract).gas_estimate
    assert estimate.total >= estimate.deployment > 0


def test_quality_ordering(analyzer, documented_contract, poor_snippet):
    assert analyzer.analyze(documented_contract).quality.score > 0
    assert analyzer.analyze(poor_snippet).quality.score < 50


@pytest.mark.parametrize(
    "source",
    [
        "contract Broken { function oops( uint x ",
        "function f() public { if (x > 1) { y = 2;",
        "pragma solidity ^0.4.0; contract { function ( { } ) ;",
        "}}}}",
        "/* unterminated",
        "\x00\x01\x02 function é() {}",
    ],
)
def test_malformed_input_does_not_raise(analyzer, source):
    _assert_shape(analyzer.analyze(source))


def test_thousand_repetitions_within_budget(analyzer):
    source = "function f() public {}\n" * 1000
    start = time.monotonic()
    result = analyzer.analyze(source)
    elapsed = time.monotonic() - start
    _assert_shape(result)
    assert elapsed < 5.0
    assert result.gas_estimate.per_function["f"] > 0


def test_many_contracts_within_budget(analyzer):
    template = (
        "contract C%d { uint256 x%d; address o%d; function f() public { "
        "require(tx.origin == o%d); msg.sender.call{value: 1}(\"\"); x%d = 1; } }\n"
    )
    source = "".join(template % ((i,) * 5) for i in range(3000))
    start = time.monotonic()
    result = analyzer.analyze(source)
    elapsed = time.monotonic() - start
    _assert_shape(result)
    assert elapsed < 5.0
    assert len([v for v in result.vulnerabilities if v.type == "tx-origin"]) == 3000
    assert len([v for v in result.vulnerabilities if v.type == "reentrancy"]) == 3000
    assert result.gas_estimate.per_function["f"] > 0


def test_whitespace_only_source(analyzer):
    result = analyzer.analyze("   \n ")
    _assert_shape(result)
    assert result.vulnerabilities == []
    assert result.gas_estimate.deployment > 0
    assert result.gas_estimate.per_function == {}


def test_analyze_with_stats(analyzer, vulnerable_contract):
    report = analyzer.analyze_with_stats(vulnerable_contract)
    assert report.stats.rules_executed == [r.id for r in RULE_REGISTRY]
    assert report.stats.rules_failed == []
    assert report.stats.duration_ms >= 0
    assert report.result == analyzer.analyze(vulnerable_contract)


def test_faulty_rule_reported_in_stats(vulnerable_contract):
    def explode(unit):
        raise RuntimeError("boom")

    faulty = Rule(
        id="exploding",
        category=RuleCategory.SECURITY,
        severity=Severity.HIGH,
        title="Exploding",
        check=explode,
    )
    analyzer = SolidityAnalyzer(engine=RuleEngine(rules=[faulty, tx_origin.RULE]))
    report = analyzer.analyze_with_stats(vulnerable_contract)
    assert report.stats.rules_failed == ["exploding"]
    assert [v.type for v in report.result.vulnerabilities] == ["tx-origin"]


def test_failing_stage_falls_back(monkeypatch, complex_contract):
    def broken(unit):
        raise RuntimeError("complexity exploded")

    monkeypatch.setattr(analyzer_module, "calculate_complexity", broken)
    result = SolidityAnalyzer().analyze(complex_contract)
    _assert_shape(result)
    assert result.complexity.cyclomatic == 1
    assert result.gas_estimate.deployment > 0


def test_oversized_source_is_truncated(vulnerable_contract):
    analyzer = SolidityAnalyzer(settings=Settings(max_source_length=40))
    result = analyzer.analyze(vulnerable_contract)
    _assert_shape(result)
    assert result.vulnerabilities == []


def test_serializes_with_camel_case(analyzer, vulnerable_contract):
    data = analyzer.analyze(vulnerable_contract).model_dump(by_alias=True)
    assert set(data) == {
        "issues",
        "vulnerabilities",
        "optimizations",
        "gasEstimate",
        "complexity",
        "quality",
    }
    assert "perFunction" in data["gasEstimate"]
    assert "weaknessId" in data["vulnerabilities"][0]


def test_parallel_rules_give_same_result(vulnerable_contract):
    sequential = SolidityAnalyzer(engine=RuleEngine(parallel=False))
    parallel = SolidityAnalyzer(engine=RuleEngine(parallel=True, workers=4))
    assert parallel.analyze(vulnerable_contract) == sequential.analyze(vulnerable_contract)
