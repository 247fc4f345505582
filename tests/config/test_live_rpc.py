"""Check named accounts against the live Base chain.

Read-only calls, no transactions.
"""

import os

import pytest
from web3 import Web3

from vortex_deploy.abi import get_access_control
from vortex_deploy.config import DeploymentSettings, build_network_configs, create_web3
from vortex_deploy.constants import DeploymentNetwork
from vortex_deploy.named_accounts import build_named_accounts, resolve_named_accounts
from vortex_deploy.roles import Roles

JSON_RPC_BASE = os.environ.get("JSON_RPC_BASE")

pytestmark = pytest.mark.skipif(
    JSON_RPC_BASE is None,
    reason="Set JSON_RPC_BASE env",
)


@pytest.fixture(scope="module")
def settings() -> DeploymentSettings:
    return DeploymentSettings.from_environment({"JSON_RPC_BASE": JSON_RPC_BASE, "TENDERLY_NETWORK_NAME": "base"})


def test_base_rpc_chain_id(settings):
    config = build_network_configs(settings)[DeploymentNetwork.base]
    web3 = create_web3(config)
    assert web3.eth.chain_id == 8453


def test_base_vortex_deployed(settings):
    """The Base Vortex and vault have code and answer AccessControl calls."""
    config = build_network_configs(settings)[DeploymentNetwork.base]
    web3 = create_web3(config)
    accounts = resolve_named_accounts(build_named_accounts(settings.fork), DeploymentNetwork.tenderly)

    for role in ("vortex", "vault"):
        address = Web3.to_checksum_address(accounts.require(role))
        assert len(web3.eth.get_code(address)) > 0, f"No code at {role}"

    vortex = get_access_control(web3, accounts.require("vortex"))
    deployer = Web3.to_checksum_address(accounts.require("deployer"))
    assert isinstance(vortex.functions.hasRole(Roles.Upgradeable.ROLE_ADMIN, deployer).call(), bool)
