"""
Test fixtures shared across all ContractLens tests.
"""

import pytest

from contractlens.core.analyzer import SolidityAnalyzer
from contractlens.core.source_parser import parse_source


@pytest.fixture
def vulnerable_contract():
    """Solidity contract with a reentrancy bug and tx.origin authorization."""
    return '''
pragma solidity ^0.8.0;

contract VulnerableBank {
    mapping(address => uint256) public balances;
    address public owner;

    constructor() {
        owner = msg.sender;
    }

    function deposit() public payable {
        balances[msg.sender] += msg.value;
    }

    function withdraw(uint256 amount) public {
        require(balances[msg.sender] >= amount);
        (bool success, ) = msg.sender.call{value: amount}("");
        require(success);
        balances[msg.sender] -= amount;
    }

    function transferOwnership(address newOwner) public {
        require(tx.origin == owner);
        owner = newOwner;
    }
}
'''


@pytest.fixture
def safe_contract():
    """Same withdraw flow in checks-effects-interactions order."""
    return '''
pragma solidity ^0.8.0;

/// @title Safe bank
contract SafeBank {
    mapping(address => uint256) public balances;

    /// @notice Withdraw previously deposited funds
    function withdraw(uint256 amount) external {
        require(balances[msg.sender] >= amount, "Insufficient balance");
        balances[msg.sender] -= amount;
        (bool success, ) = msg.sender.call{value: amount}("");
        require(success, "Transfer failed");
    }

    /// @notice Only the sender is trusted
    function whoAmI() external view returns (address) {
        return msg.sender;
    }
}
'''


@pytest.fixture
def documented_contract():
    """Small, fully documented getter/setter contract."""
    return '''
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

/// @title Simple storage
/// @notice Stores a single number
contract SimpleStorage {
    uint256 private storedData;

    /// @notice Store a new value
    /// @param x The value to store
    function set(uint256 x) public {
        storedData = x;
    }

    /**
     * @notice Read the stored value
     * @return The stored value
     */
    function get() public view returns (uint256) {
        return storedData;
    }
}
'''


@pytest.fixture
def complex_contract():
    """A function with a loop and two nested conditionals."""
    return '''
pragma solidity ^0.8.0;

contract Complex {
    function process(uint256[] memory values, uint256 limit) public pure returns (uint256 total) {
        for (uint256 i = 0; i < values.length; i++) {
            if (values[i] > limit) {
                if (values[i] % 2 == 0) {
                    total += values[i];
                }
            }
        }
    }
}
'''


@pytest.fixture
def poor_snippet():
    """One undocumented line with hidden side effects."""
    return "function a(uint b) { c = b + d; if (e) f(); }"


@pytest.fixture
def parse():
    """Shortcut for parse_source."""
    return parse_source


@pytest.fixture
def analyzer():
    return SolidityAnalyzer()
