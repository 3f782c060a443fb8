"""Shared fixtures: a throwaway project root with stub contract artifacts."""

import json
from pathlib import Path

import pytest

from bbx import gas
from bbx.config import load_config

# Init code that deploys a one-byte runtime (STOP) and ignores constructor args:
#   PUSH1 1 PUSH1 12 PUSH1 0 CODECOPY PUSH1 1 PUSH1 0 RETURN | 00
STUB_BYTECODE = "0x6001600c60003960016000f300"

VRF_MOCK_ABI = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "_baseFee", "type": "uint96"},
            {"name": "_gasPriceLink", "type": "uint96"},
        ],
        "stateMutability": "nonpayable",
    },
]

FACTORY_ABI = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "_link", "type": "address"},
            {"name": "_oracle", "type": "address"},
            {"name": "_vrfCoordinator", "type": "address"},
            {"name": "_jobId", "type": "bytes32"},
            {"name": "_keyHash", "type": "bytes32"},
        ],
        "stateMutability": "nonpayable",
    },
]

BUILD_INFO_ID = "4f1b2c"
SOLC_LONG_VERSION = "0.8.7+commit.e28d00a7"


def write_artifact(artifacts_dir: Path, name: str, abi: list, bytecode: str = STUB_BYTECODE) -> Path:
    """Write a Hardhat-style artifact (+ .dbg.json) for contracts/<name>.sol."""
    contract_dir = artifacts_dir / "contracts" / f"{name}.sol"
    contract_dir.mkdir(parents=True, exist_ok=True)
    path = contract_dir / f"{name}.json"
    path.write_text(json.dumps({
        "_format": "hh-sol-artifact-1",
        "contractName": name,
        "sourceName": f"contracts/{name}.sol",
        "abi": abi,
        "bytecode": bytecode,
        "deployedBytecode": "0x00",
    }))
    (contract_dir / f"{name}.dbg.json").write_text(json.dumps({
        "_format": "hh-sol-dbg-1",
        "buildInfo": f"../../build-info/{BUILD_INFO_ID}.json",
    }))
    return path


def write_build_info(artifacts_dir: Path, source_names: list[str]) -> Path:
    build_dir = artifacts_dir / "build-info"
    build_dir.mkdir(parents=True, exist_ok=True)
    path = build_dir / f"{BUILD_INFO_ID}.json"
    path.write_text(json.dumps({
        "solcVersion": "0.8.7",
        "solcLongVersion": SOLC_LONG_VERSION,
        "input": {
            "language": "Solidity",
            "sources": {name: {"content": "// stub"} for name in source_names},
            "settings": {"optimizer": {"enabled": False, "runs": 200}},
        },
    }))
    return path


@pytest.fixture
def project_root(tmp_path):
    """Project root with stub VRFCoordinatorV2Mock and CompetitionFactory artifacts."""
    artifacts = tmp_path / "artifacts"
    write_artifact(artifacts, "VRFCoordinatorV2Mock", VRF_MOCK_ABI)
    write_artifact(artifacts, "CompetitionFactory", FACTORY_ABI)
    write_build_info(
        artifacts,
        ["contracts/VRFCoordinatorV2Mock.sol", "contracts/CompetitionFactory.sol"],
    )
    return tmp_path


@pytest.fixture
def config(project_root):
    """Config rooted at project_root with an empty environment."""
    return load_config(env={}, root=project_root)


# ============================================================================
# Gas report
# ============================================================================


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    lines = gas.get_reporter().format_report()
    if not lines:
        return
    terminalreporter.section("gas report")
    for line in lines:
        terminalreporter.write_line(line)
