"""Load Foundry build artifacts as web3.py contracts."""

import json
from pathlib import Path

from eth_typing import ChecksumAddress
from web3 import Web3
from web3.contract import Contract

#: The part of AccessControl the deploy scripts call on existing contracts
ACCESS_CONTROL_ABI = [
    {
        "type": "function",
        "name": "grantRole",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "role", "type": "bytes32"},
            {"name": "account", "type": "address"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "hasRole",
        "stateMutability": "view",
        "inputs": [
            {"name": "role", "type": "bytes32"},
            {"name": "account", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


def get_artifact_path(out_dir: Path, contract_file: Path | str, contract_name: str) -> Path:
    """Forge writes ``out/<File.sol>/<Contract>.json``."""
    return out_dir / Path(contract_file).name / f"{contract_name}.json"


def load_artifact(path: Path) -> dict:
    """Read a Forge artifact JSON.

    :return:
        Dict with at least ``abi`` key
    """
    assert path.exists(), f"No contract artifact: {path.resolve()}"
    with open(path, "rt") as f:
        artifact = json.load(f)
    assert "abi" in artifact, f"Not a contract artifact, abi missing: {path}"
    return artifact


def get_deployed_contract(web3: Web3, artifact_path: Path, address: ChecksumAddress | str) -> Contract:
    """Bind a Forge artifact ABI to an address."""
    artifact = load_artifact(artifact_path)
    return web3.eth.contract(address=Web3.to_checksum_address(address), abi=artifact["abi"])


def get_access_control(web3: Web3, address: str) -> Contract:
    """Bind the AccessControl ABI to any contract with roles."""
    return web3.eth.contract(address=Web3.to_checksum_address(address), abi=ACCESS_CONTROL_ABI)
