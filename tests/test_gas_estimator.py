"""
Tests for Gas Estimator — cost model invariants.
"""

from contractlens.core.gas_estimator import GAS_COSTS, estimate_gas, function_cost
from contractlens.core.source_parser import parse_source


def test_total_at_least_deployment(documented_contract):
    estimate = estimate_gas(parse_source(documented_contract))
    assert estimate.deployment > 0
    assert estimate.total >= estimate.deployment
    assert set(estimate.per_function) == {"set", "get"}
    assert estimate.total == estimate.deployment + sum(estimate.per_function.values())


def test_empty_source_is_zero():
    estimate = estimate_gas(parse_source(""))
    assert estimate.deployment == 0
    assert estimate.total == 0
    assert estimate.per_function == {}


def test_comment_only_source_has_base_deployment():
    estimate = estimate_gas(parse_source("// nothing here\n/* at all */"))
    assert estimate.deployment == GAS_COSTS["deployment_base"]
    assert estimate.total == estimate.deployment


def test_whitespace_only_source_has_base_deployment():
    estimate = estimate_gas(parse_source("   \n "))
    assert estimate.deployment == GAS_COSTS["deployment_base"]
    assert estimate.total == estimate.deployment
    assert estimate.per_function == {}


def test_storage_write_costs_more_than_read():
    unit = parse_source(
        """
contract A {
    uint256 value;
    function write(uint256 x) external { value = x; }
    function read() external view returns (uint256) { return value; }
}
"""
    )
    estimate = estimate_gas(unit)
    base = GAS_COSTS["function_base"]
    assert estimate.per_function["write"] == base + GAS_COSTS["storage_write"]
    assert estimate.per_function["read"] == base + GAS_COSTS["storage_read"]


def test_loop_multiplies_cost():
    unit = parse_source(
        """
contract A {
    uint256 total;
    function once() external { total = 1; }
    function looped(uint256 n) external {
        for (uint256 i = 0; i < n; i++) {
            total = i;
        }
    }
}
"""
    )
    estimate = estimate_gas(unit, loop_iterations=10)
    assert estimate.per_function["looped"] > estimate.per_function["once"] * 5
    more = estimate_gas(unit, loop_iterations=20)
    assert more.per_function["looped"] > estimate.per_function["looped"]


def test_nested_loop_depth_is_capped():
    unit = parse_source(
        """
contract A {
    function deep() external pure {
        for (uint i; i < 2; i++) { for (uint j; j < 2; j++) { for (uint k; k < 2; k++) { emit E(); } } }
    }
}
"""
    )
    func = unit.functions[0]
    # The innermost emit is three loops deep but scaled as if two
    cost = function_cost(func, unit, iterations=10)
    assert cost < GAS_COSTS["function_base"] + GAS_COSTS["event"] * 1000


def test_external_calls_events_and_creates():
    unit = parse_source(
        """
contract Factory {
    function make(address payable to) external {
        to.transfer(1);
        emit Made(to);
        new Child(to);
        keccak256(abi.encode(to));
    }
}
"""
    )
    cost = estimate_gas(unit).per_function["make"]
    expected_minimum = (
        GAS_COSTS["function_base"]
        + GAS_COSTS["external_call"]
        + GAS_COSTS["event"]
        + GAS_COSTS["create"]
        + GAS_COSTS["hash"]
    )
    assert cost >= expected_minimum


def test_overloads_are_summed_and_modifiers_skipped():
    unit = parse_source(
        """
contract A {
    modifier onlyOwner() { _; }
    function f() external {}
    function f(uint256 x) external {}
}
"""
    )
    estimate = estimate_gas(unit)
    assert estimate.per_function == {"f": 2 * GAS_COSTS["function_base"]}


def test_interface_has_deployment_but_no_functions():
    unit = parse_source("interface I { function f() external; }")
    estimate = estimate_gas(unit)
    assert estimate.deployment > GAS_COSTS["deployment_base"]
    assert estimate.per_function == {}
