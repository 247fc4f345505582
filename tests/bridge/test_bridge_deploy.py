"""deploy_vortex_bridge with forge and transaction sending stubbed out.

Checks the deployment sequence: implementation, proxy with the encoded
initialiser, ROLE_ADMIN grant for bridges that withdraw from the Vortex,
then the deployment record.
"""

from pathlib import Path

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3

from vortex_deploy import bridge
from vortex_deploy.bridge import BridgeKind, deploy_vortex_bridge, encode_initialize_call, plan_bridge_deployment
from vortex_deploy.constants import PROXY_CONTRACT, DeploymentNetwork
from vortex_deploy.deployments import load_deployment
from vortex_deploy.fork import ForkEnvironment
from vortex_deploy.named_accounts import build_named_accounts, resolve_named_accounts
from vortex_deploy.roles import Roles

#: First two contract addresses Anvil account #0 deploys
IMPLEMENTATION = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
PROXY = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"

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
    return build_named_accounts(ForkEnvironment.create(DeploymentNetwork.mainnet))


@pytest.fixture()
def web3(monkeypatch) -> Web3:
    """Offline web3, only the chain id is answered."""
    web3 = Web3()
    monkeypatch.setattr(type(web3.eth), "chain_id", 81457)
    return web3


@pytest.fixture()
def sent(monkeypatch) -> dict:
    """Record forge deployments and transactions instead of sending them."""
    sent = {"forge": [], "tx": []}

    def deploy_contract_with_forge(web3, project_folder, contract_file, contract_name, deployer, constructor_args=None, verification=None, gas_price="auto", rpc_headers=None):
        sent["forge"].append(
            {
                "contract_name": contract_name,
                "deployer": deployer,
                "constructor_args": constructor_args,
                "gas_price": gas_price,
                "rpc_headers": rpc_headers,
            }
        )
        if contract_name == PROXY_CONTRACT:
            return web3.eth.contract(address=PROXY, abi=[]), HexBytes("0x" + "22" * 32)
        return web3.eth.contract(address=IMPLEMENTATION, abi=BRIDGE_ABI), HexBytes("0x" + "11" * 32)

    def send_contract_tx(web3, func, sender, account=None, gas=None, gas_price="auto"):
        sent["tx"].append({"func": func, "sender": sender, "account": account, "gas_price": gas_price})
        return HexBytes("0x" + "33" * 32)

    monkeypatch.setattr(bridge, "deploy_contract_with_forge", deploy_contract_with_forge)
    monkeypatch.setattr(bridge, "send_contract_tx", send_contract_tx)
    monkeypatch.setattr(bridge, "assert_transaction_success", lambda web3, tx_hash: None)
    return sent


def test_across_deploy_on_blast(web3, table, sent, tmp_path: Path):
    accounts = resolve_named_accounts(table, DeploymentNetwork.blast)
    plan = plan_bridge_deployment(BridgeKind.across, accounts)

    result = deploy_vortex_bridge(
        web3,
        plan,
        project_folder=tmp_path,
        network=DeploymentNetwork.blast,
        deployments_folder=tmp_path / "deployments",
        gas_price=7,
        rpc_headers={"x-apikey": "secret"},
    )

    implementation, proxy = sent["forge"]
    assert implementation["contract_name"] == "VortexAcrossBridge"
    assert implementation["constructor_args"] == list(plan.constructor_args)

    init_data = encode_initialize_call(web3.eth.contract(address=IMPLEMENTATION, abi=BRIDGE_ABI), plan.initialize_args)
    assert proxy["contract_name"] == PROXY_CONTRACT
    assert proxy["constructor_args"] == [IMPLEMENTATION, plan.deployer, init_data]

    for call in sent["forge"]:
        assert call["deployer"] == plan.deployer
        assert call["gas_price"] == 7
        assert call["rpc_headers"] == {"x-apikey": "secret"}

    # Across withdraws from the Vortex, so it gets ROLE_ADMIN
    [grant] = sent["tx"]
    assert grant["func"].fn_name == "grantRole"
    assert grant["func"].args == (Roles.Upgradeable.ROLE_ADMIN, PROXY)
    assert grant["func"].address.lower() == plan.vortex.lower()
    assert grant["sender"] == plan.deployer
    assert grant["gas_price"] == 7

    assert result.proxy_address == PROXY
    assert result.implementation_address == IMPLEMENTATION
    assert result.bridge.address == PROXY
    assert result.bridge.abi == BRIDGE_ABI
    assert result.grant_tx_hash == HexBytes("0x" + "33" * 32)

    record = load_deployment(tmp_path / "deployments", DeploymentNetwork.blast, "VortexAcrossBridge")
    assert record.address == PROXY
    assert record.implementation == IMPLEMENTATION
    assert record.chain_id == 81457
    assert record.tx_hash == result.proxy_tx_hash.hex()


def test_layerzero_deploy_grants_admin(web3, table, sent, tmp_path: Path):
    accounts = resolve_named_accounts(table, DeploymentNetwork.telos)
    plan = plan_bridge_deployment(BridgeKind.layerzero, accounts)
    deploy_vortex_bridge(web3, plan, project_folder=tmp_path, network=DeploymentNetwork.telos)
    assert [tx["func"].fn_name for tx in sent["tx"]] == ["grantRole"]


def test_stargate_deploy_without_record(web3, table, sent, tmp_path: Path):
    """Stargate needs no admin role, and nothing is written without a deployments folder."""
    accounts = resolve_named_accounts(table, DeploymentNetwork.base)
    plan = plan_bridge_deployment(BridgeKind.stargate, accounts)

    result = deploy_vortex_bridge(web3, plan, project_folder=tmp_path, network=DeploymentNetwork.base, proxy_admin=IMPLEMENTATION)

    assert sent["tx"] == []
    assert result.grant_tx_hash is None
    assert sent["forge"][1]["constructor_args"][1] == IMPLEMENTATION
    assert sent["forge"][0]["gas_price"] == "auto"
    assert list(tmp_path.iterdir()) == []


def test_deploy_rejects_wrong_private_key(web3, table, sent, tmp_path: Path):
    accounts = resolve_named_accounts(table, DeploymentNetwork.base)
    plan = plan_bridge_deployment(BridgeKind.stargate, accounts)
    with pytest.raises(AssertionError):
        deploy_vortex_bridge(web3, plan, project_folder=tmp_path, network=DeploymentNetwork.base, deployer=Account.create())
    assert sent["forge"] == []
