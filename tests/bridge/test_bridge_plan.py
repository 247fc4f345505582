"""Vortex bridge selection and deployment planning.

No RPC or forge needed.
"""

import pytest
from web3 import Web3

from vortex_deploy.bridge import BridgeKind, encode_initialize_call, get_bridge_kind, plan_bridge_deployment
from vortex_deploy.constants import DEFAULT_SLIPPAGE_PPM, NATIVE_TOKEN_ADDRESS, DeploymentNetwork
from vortex_deploy.fork import ForkEnvironment
from vortex_deploy.named_accounts import BRIDGE_DEPLOYER, CARBON_VAULT, MissingNamedAccount, build_named_accounts, resolve_named_accounts
from vortex_deploy.roles import ROLE_IDS, Roles, role_id

#: Minimal bridge implementation ABI for the initialiser
BRIDGE_ABI = [
    {
        "type": "function",
        "name": "initialize",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "withdrawTokenInit", "type": "address"},
            {"name": "slippagePPMInit", "type": "uint32"},
        ],
        "outputs": [],
    }
]


@pytest.fixture(scope="module")
def table():
    return build_named_accounts(ForkEnvironment.create(DeploymentNetwork.base))


def test_bridge_kind_per_network():
    assert get_bridge_kind(DeploymentNetwork.blast) == BridgeKind.across
    assert get_bridge_kind(DeploymentNetwork.telos) == BridgeKind.layerzero
    assert get_bridge_kind(DeploymentNetwork.base) == BridgeKind.stargate
    assert get_bridge_kind(DeploymentNetwork.sei) == BridgeKind.stargate


def test_bridge_kind_contract_names():
    assert BridgeKind.across.contract_name == "VortexAcrossBridge"
    assert BridgeKind.stargate.contract_file == "VortexStargateBridge.sol"
    assert BridgeKind.layerzero.grants_admin
    assert not BridgeKind.stargate.grants_admin


def test_across_plan_on_blast(table):
    accounts = resolve_named_accounts(table, DeploymentNetwork.blast)
    plan = plan_bridge_deployment(BridgeKind.across, accounts)

    assert plan.contract_name == "VortexAcrossBridge"
    assert plan.deployer == BRIDGE_DEPLOYER
    assert plan.constructor_args == (
        "0x0f54099D787e26c90c487625B4dE819eC5A9BDAA",  # vortex
        "0x2D509190Ed0172ba588407D4c2df918F955Cc6E1",  # across spoke pool
        CARBON_VAULT,
        "0x4300000000000000000000000000000000000004",  # weth
    )
    assert plan.initialize_args == ("0x4300000000000000000000000000000000000004", DEFAULT_SLIPPAGE_PPM)
    assert plan.grant_admin
    assert not plan.uses_ledger


def test_stargate_plan_on_base_fork(table):
    """On a fork of Base the Base accounts are used."""
    accounts = resolve_named_accounts(table, DeploymentNetwork.tenderly)
    plan = plan_bridge_deployment(get_bridge_kind(DeploymentNetwork.base), accounts, slippage_ppm=1000)

    assert plan.kind == BridgeKind.stargate
    assert plan.vortex == "0xA4682A2A5Fe02feFF8Bd200240A41AD0E6EaF8d5"
    assert len(plan.constructor_args) == 3
    assert plan.initialize_args == (NATIVE_TOKEN_ADDRESS, 1000)
    assert not plan.grant_admin


def test_layerzero_plan_on_telos(table):
    accounts = resolve_named_accounts(table, DeploymentNetwork.telos)
    plan = plan_bridge_deployment(BridgeKind.layerzero, accounts)
    assert plan.constructor_args[1] == "0x9c5ebCbE531aA81bD82013aBF97401f5C6111d76"
    assert plan.grant_admin


def test_no_bridge_on_mainnet(table):
    accounts = resolve_named_accounts(table, DeploymentNetwork.mainnet)
    with pytest.raises(MissingNamedAccount):
        plan_bridge_deployment(BridgeKind.stargate, accounts)


def test_bad_slippage(table):
    accounts = resolve_named_accounts(table, DeploymentNetwork.base)
    with pytest.raises(AssertionError):
        plan_bridge_deployment(BridgeKind.stargate, accounts, slippage_ppm=2_000_000)


def test_encode_initialize_call():
    web3 = Web3()
    implementation = web3.eth.contract(address="0x0000000000000000000000000000000000000001", abi=BRIDGE_ABI)
    data = encode_initialize_call(implementation, (NATIVE_TOKEN_ADDRESS, DEFAULT_SLIPPAGE_PPM))

    selector = Web3.keccak(text="initialize(address,uint32)")[:4].hex()
    assert data.removeprefix("0x").startswith(selector.removeprefix("0x"))
    # selector + two 32 byte words
    assert len(data.removeprefix("0x")) == 8 + 64 * 2
    assert data.lower().endswith(hex(DEFAULT_SLIPPAGE_PPM)[2:].rjust(64, "0"))


def test_role_ids():
    assert Roles.Upgradeable.ROLE_ADMIN == Web3.keccak(text="ROLE_ADMIN")
    assert role_id("ROLE_ASSET_MANAGER") == Roles.Vault.ROLE_ASSET_MANAGER
    assert len(set(ROLE_IDS)) == len(ROLE_IDS)
    assert all(len(r) == 32 for r in ROLE_IDS)
