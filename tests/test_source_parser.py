"""
Tests for Source Parser — masking, declarations and malformed input.
"""

from contractlens.core.source_parser import (
    find_closing,
    mask_source,
    parse_source,
    split_top_level,
)


def test_mask_blanks_comments_and_strings():
    source = 'a = "tx.origin"; // tx.origin\n/* block\n tx.origin */ b = 1;'
    masked = mask_source(source)
    assert len(masked) == len(source)
    assert masked.count("\n") == source.count("\n")
    assert "tx.origin" not in masked
    assert 'a = "         ";' in masked
    assert masked.endswith(" b = 1;")


def test_mask_unterminated_comment_runs_to_end():
    masked = mask_source("x = 1; /* never closed\nfunction f() {}")
    assert "function" not in masked
    assert masked.startswith("x = 1;")


def test_find_closing_matches_nested():
    text = "{ a { b } c }"
    assert find_closing(text, 0) == len(text) - 1
    assert find_closing(text, 4) == 8


def test_find_closing_unclosed_returns_end():
    text = "( a ( b )"
    assert find_closing(text, 0) == len(text)


def test_split_top_level_ignores_nested_commas():
    parts = split_top_level("mapping(address => uint) m, uint[2] x, f(a, b)")
    assert [p.strip() for p in parts] == ["mapping(address => uint) m", "uint[2] x", "f(a, b)"]


def test_parse_contract_and_functions(vulnerable_contract):
    unit = parse_source(vulnerable_contract)
    assert unit.pragma_version == "^0.8.0"
    assert [c.name for c in unit.contracts] == ["VulnerableBank"]

    by_name = {f.name: f for f in unit.functions}
    assert set(by_name) == {"constructor", "deposit", "withdraw", "transferOwnership"}
    assert by_name["constructor"].kind == "constructor"
    assert by_name["deposit"].mutability == "payable"
    assert by_name["withdraw"].visibility == "public"
    assert by_name["withdraw"].parameters[0].name == "amount"
    assert by_name["withdraw"].contract == "VulnerableBank"
    assert "msg.sender.call" in by_name["withdraw"].body


def test_parse_line_numbers(vulnerable_contract):
    unit = parse_source(vulnerable_contract)
    withdraw = next(f for f in unit.functions if f.name == "withdraw")
    assert "function withdraw" in unit.line_text(withdraw.line)
    assert withdraw.end_line == withdraw.line + 5


def test_parse_state_variables():
    unit = parse_source(
        """
contract Token {
    mapping(address => mapping(address => uint256)) private allowances;
    uint256 public constant MAX_SUPPLY = 1000;
    address immutable owner;
    uint8 decimals = 18;
    event Transfer(address indexed from, address indexed to, uint256 value);
    using SafeMath for uint256;
}
"""
    )
    names = {v.name: v for v in unit.state_variables}
    assert set(names) == {"allowances", "MAX_SUPPLY", "owner", "decimals"}
    assert names["allowances"].type_name.startswith("mapping")
    assert names["MAX_SUPPLY"].is_constant
    assert names["MAX_SUPPLY"].visibility == "public"
    assert names["owner"].is_immutable
    assert names["decimals"].type_name == "uint8"
    assert unit.mutable_state_names == {"allowances", "decimals"}


def test_parse_struct_members():
    unit = parse_source(
        """
contract Registry {
    struct User {
        uint8 age;
        address wallet;
        string name;
    }
}
"""
    )
    assert len(unit.structs) == 1
    struct = unit.structs[0]
    assert struct.name == "User"
    assert struct.contract == "Registry"
    assert [(m.type_name, m.name) for m in struct.members] == [
        ("uint8", "age"),
        ("address", "wallet"),
        ("string", "name"),
    ]


def test_natspec_detection(documented_contract):
    unit = parse_source(documented_contract)
    assert unit.has_natspec
    assert all(f.has_natspec for f in unit.functions)


def test_interface_functions_have_no_body():
    unit = parse_source(
        """
interface IERC20 {
    function transfer(address to, uint256 amount) external returns (bool);
}
"""
    )
    assert unit.contracts[0].kind == "interface"
    func = unit.functions[0]
    assert func.name == "transfer"
    assert not func.has_body
    assert func.visibility == "external"


def test_modifiers_are_collected():
    unit = parse_source(
        "contract A { function f() external onlyOwner nonReentrant returns (uint) { return 1; } }"
    )
    assert unit.functions[0].modifiers == ["onlyOwner", "nonReentrant"]


def test_free_function_without_contract(poor_snippet):
    unit = parse_source(poor_snippet)
    assert unit.contracts == []
    assert len(unit.functions) == 1
    assert unit.functions[0].visibility is None
    assert unit.functions[0].contract == ""


def test_many_contracts_keep_their_members():
    source = "".join(
        "contract C%d { uint256 x%d; function f%d() public { x%d = 1; } }\n" % ((i,) * 4)
        for i in range(200)
    )
    source += "function loose() pure { }\n"
    unit = parse_source(source)
    assert len(unit.contracts) == 200
    assert [f.contract for f in unit.functions[:3]] == ["C0", "C1", "C2"]
    assert unit.functions[199].contract == "C199"
    assert unit.functions[-1].name == "loose"
    assert unit.functions[-1].contract == ""
    assert len(unit.state_variable_names) == 200
    assert "x150" in unit.mutable_state_names


def test_empty_source():
    unit = parse_source("")
    assert unit.is_empty
    assert unit.functions == []
    assert unit.contracts == []


def test_malformed_source_does_not_raise():
    for source in (
        "contract Broken { function oops( uint x ",
        "function f() public { if (x > 1) { y = 2;",
        "}}}{{{ ;;; function",
        '"unterminated string',
    ):
        unit = parse_source(source)
        assert unit.source == source
