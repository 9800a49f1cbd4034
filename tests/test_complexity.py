"""
Tests for Complexity Calculator.
"""

from contractlens.core.complexity import (
    calculate_complexity,
    cognitive_complexity,
    decision_points,
)
from contractlens.core.source_parser import parse_source


def test_branch_free_function_is_one():
    unit = parse_source(
        "contract A { function f() public pure returns (uint256) { return 1; } }"
    )
    metrics = calculate_complexity(unit)
    assert metrics.cyclomatic == 1
    assert metrics.cognitive == 0
    assert metrics.per_function == {"f": 1}


def test_nested_conditionals_and_loop(complex_contract):
    metrics = calculate_complexity(parse_source(complex_contract))
    # for + if + if
    assert metrics.cyclomatic == 4
    # for (1) + if nested once (2) + if nested twice (3)
    assert metrics.cognitive == 6
    assert metrics.per_function == {"process": 4}


def test_cyclomatic_sums_over_functions():
    unit = parse_source(
        """
contract A {
    function f(uint256 x) public pure returns (bool) {
        return x > 1 && x < 10;
    }
    function g(uint256 x) public pure returns (uint256) {
        if (x == 0) { return 1; } else if (x == 1) { return 2; }
        return x > 5 ? 3 : 4;
    }
}
"""
    )
    metrics = calculate_complexity(unit)
    assert metrics.per_function == {"f": 2, "g": 4}
    assert metrics.cyclomatic == 6


def test_cognitive_else_and_boolean_sequences():
    # if (+1), else (+1), else-if charged as else only
    assert cognitive_complexity("if (a) { x; } else if (b) { y; } else { z; }") == 3
    # one && run and one || run
    assert cognitive_complexity("return a && b && c || d;") == 2


def test_keywords_in_comments_and_strings_ignored():
    unit = parse_source(
        """
contract A {
    function f() public pure returns (string memory) {
        // if (x) { while (y) {} }
        return "if for while && ||";
    }
}
"""
    )
    metrics = calculate_complexity(unit)
    assert metrics.cyclomatic == 1
    assert metrics.cognitive == 0


def test_lines_skip_blank_and_comment_lines():
    unit = parse_source(
        """
// header comment
contract A {

    /* multi
       line */
    uint256 x;
}
"""
    )
    assert calculate_complexity(unit).lines == 3


def test_no_functions_uses_global_count():
    unit = parse_source("if (a) { b; }")
    metrics = calculate_complexity(unit)
    assert metrics.cyclomatic == 2
    assert metrics.per_function == {}


def test_empty_source():
    metrics = calculate_complexity(parse_source(""))
    assert (metrics.cyclomatic, metrics.cognitive, metrics.lines) == (1, 0, 0)


def test_decision_points_counts_each_kind():
    text = "if (a) {} for (;;) {} while (b) {} x ? y : z; a && b; a || b; catch {}"
    assert decision_points(text) == 7
