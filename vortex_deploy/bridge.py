"""Deploy a Vortex bridge on a network.

A Vortex bridge sends the tokens the Carbon Vortex collects over a third party bridge.
Which bridge protocol is used depends on the network:

- Blast uses Across (:py:attr:`BridgeKind.across`)
- Telos uses LayerZero (:py:attr:`BridgeKind.layerzero`)
- Other networks use Stargate (:py:attr:`BridgeKind.stargate`)

The deployment is

1. Implementation contract, constructed with the Vortex, bridge and vault addresses
2. Transparent proxy, initialised with the withdraw token and slippage
3. For Across and LayerZero, the Vortex grants the bridge ``ROLE_ADMIN`` so it can withdraw funds

All addresses come from :py:class:`~vortex_deploy.named_accounts.NamedAccounts`.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping

from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from vortex_deploy.abi import get_access_control
from vortex_deploy.constants import DEFAULT_SLIPPAGE_PPM, INITIALIZE, PPM_RESOLUTION, PROXY_CONTRACT, DeploymentNetwork
from vortex_deploy.deployments import DeploymentRecord, save_deployment
from vortex_deploy.forge import ForgeVerification, deploy_contract_with_forge
from vortex_deploy.named_accounts import NamedAccounts
from vortex_deploy.roles import Roles
from vortex_deploy.tx import assert_transaction_success, send_contract_tx

logger = logging.getLogger(__name__)

#: Proxy source in the Foundry project
PROXY_CONTRACT_FILE = f"proxy/{PROXY_CONTRACT}.sol"


class BridgeKind(enum.Enum):
    """Bridge protocol a Vortex bridge contract talks to."""

    across = "across"
    stargate = "stargate"
    layerzero = "layerzero"

    @property
    def contract_name(self) -> str:
        return _CONTRACT_NAMES[self]

    @property
    def contract_file(self) -> str:
        return f"{self.contract_name}.sol"

    @property
    def grants_admin(self) -> bool:
        """The Vortex must grant this bridge ``ROLE_ADMIN`` to let it withdraw."""
        return self in (BridgeKind.across, BridgeKind.layerzero)

    @property
    def needs_weth(self) -> bool:
        return self == BridgeKind.across


_CONTRACT_NAMES = {
    BridgeKind.across: "VortexAcrossBridge",
    BridgeKind.stargate: "VortexStargateBridge",
    BridgeKind.layerzero: "VortexLayerZeroBridge",
}

#: Networks not using the default Stargate bridge
BRIDGE_KIND_BY_NETWORK: dict[DeploymentNetwork, BridgeKind] = {
    DeploymentNetwork.blast: BridgeKind.across,
    DeploymentNetwork.telos: BridgeKind.layerzero,
}

DEFAULT_BRIDGE_KIND = BridgeKind.stargate


def get_bridge_kind(network: DeploymentNetwork) -> BridgeKind:
    """Which bridge to deploy on a network.

    Pass the impersonated network, not the fork identity, when deploying on a fork.
    """
    return BRIDGE_KIND_BY_NETWORK.get(network, DEFAULT_BRIDGE_KIND)


@dataclass(slots=True, frozen=True)
class BridgeDeploymentPlan:
    """Everything needed to deploy one Vortex bridge, resolved from named accounts."""

    kind: BridgeKind
    deployer: HexAddress

    #: Vortex contract the bridge withdraws from
    vortex: HexAddress

    #: Implementation constructor arguments
    constructor_args: tuple[HexAddress, ...]

    #: Proxy initialiser arguments: withdraw token and slippage in ppm
    initialize_args: tuple[HexAddress, int]

    #: Deployer signs with a Ledger
    uses_ledger: bool = False

    @property
    def contract_name(self) -> str:
        return self.kind.contract_name

    @property
    def grant_admin(self) -> bool:
        return self.kind.grants_admin


def plan_bridge_deployment(
    kind: BridgeKind,
    accounts: NamedAccounts,
    slippage_ppm: int = DEFAULT_SLIPPAGE_PPM,
) -> BridgeDeploymentPlan:
    """Resolve bridge constructor and initialiser arguments.

    :raise MissingNamedAccount:
        A role the bridge needs is not configured on the network
    """
    assert 0 <= slippage_ppm <= PPM_RESOLUTION, f"Bad slippage {slippage_ppm} ppm"

    vortex = accounts.require("vortex")
    constructor_args = [vortex, accounts.require("bridge"), accounts.require("vault")]
    if kind.needs_weth:
        constructor_args.append(accounts.require("weth"))

    return BridgeDeploymentPlan(
        kind=kind,
        deployer=accounts.address("deployer"),
        vortex=vortex,
        constructor_args=tuple(constructor_args),
        initialize_args=(accounts.require("withdrawToken"), slippage_ppm),
        uses_ledger=accounts.uses_ledger("deployer"),
    )


@dataclass(slots=True)
class BridgeDeploymentResult:
    """Deployed Vortex bridge."""

    #: Implementation ABI bound to the proxy address
    bridge: Contract

    implementation_address: HexAddress
    proxy_address: HexAddress
    implementation_tx_hash: HexBytes
    proxy_tx_hash: HexBytes

    #: ``grantRole`` transaction, if the bridge needed admin
    grant_tx_hash: HexBytes | None = None


def encode_initialize_call(implementation: Contract, args: tuple) -> str:
    """ABI encode the proxy initialiser call data."""
    if hasattr(implementation, "encode_abi"):
        return implementation.encode_abi(INITIALIZE, args=list(args))
    # web3.py 6
    return implementation.encodeABI(INITIALIZE, args=list(args))


def deploy_vortex_bridge(
    web3: Web3,
    plan: BridgeDeploymentPlan,
    project_folder: Path,
    network: DeploymentNetwork,
    deployer: LocalAccount | None = None,
    verification: ForgeVerification | None = None,
    deployments_folder: Path | None = None,
    proxy_admin: HexAddress | None = None,
    gas_price: int | Literal["auto"] = "auto",
    rpc_headers: Mapping[str, str] | None = None,
) -> BridgeDeploymentResult:
    """Deploy a Vortex bridge behind a proxy.

    :param project_folder:
        Foundry project with the bridge and proxy sources.

    :param network:
        Network name for the deployment record.

    :param deployer:
        Local account matching ``plan.deployer``.

        ``None`` sends from ``plan.deployer`` unlocked on the node,
        e.g. on a Tenderly fork.

    :param deployments_folder:
        Write deployment records here. ``None`` to not write.

    :param proxy_admin:
        Address allowed to upgrade the proxy. Defaults to the deployer.

    :param gas_price:
        Fixed gas price in wei for every transaction, or ``auto``.

    :param rpc_headers:
        Extra JSON-RPC headers forge must send, see :py:attr:`~vortex_deploy.config.NetworkConfig.http_headers`.
    """
    if deployer is not None:
        assert deployer.address.lower() == plan.deployer.lower(), f"Private key is for {deployer.address}, but {network.value} deployer is {plan.deployer}"
    elif plan.uses_ledger:
        logger.warning("Deployer %s is a Ledger account, sending unlocked from the node", plan.deployer)

    forge_deployer = deployer if deployer is not None else plan.deployer
    proxy_admin = proxy_admin or plan.deployer

    logger.info("Deploying %s on %s, constructor args %s", plan.contract_name, network.value, plan.constructor_args)

    implementation, implementation_tx_hash = deploy_contract_with_forge(
        web3,
        project_folder,
        plan.kind.contract_file,
        plan.contract_name,
        forge_deployer,
        constructor_args=list(plan.constructor_args),
        verification=verification,
        gas_price=gas_price,
        rpc_headers=rpc_headers,
    )

    init_data = encode_initialize_call(implementation, plan.initialize_args)

    proxy, proxy_tx_hash = deploy_contract_with_forge(
        web3,
        project_folder,
        PROXY_CONTRACT_FILE,
        PROXY_CONTRACT,
        forge_deployer,
        constructor_args=[implementation.address, proxy_admin, init_data],
        verification=verification,
        gas_price=gas_price,
        rpc_headers=rpc_headers,
    )

    bridge = web3.eth.contract(address=proxy.address, abi=implementation.abi)

    grant_tx_hash = None
    if plan.grant_admin:
        # Let the bridge withdraw funds from the Vortex
        vortex = get_access_control(web3, plan.vortex)
        func = vortex.functions.grantRole(Roles.Upgradeable.ROLE_ADMIN, bridge.address)
        grant_tx_hash = send_contract_tx(web3, func, plan.deployer, account=deployer, gas_price=gas_price)
        assert_transaction_success(web3, grant_tx_hash)
        logger.info("Granted ROLE_ADMIN on Vortex %s to %s", plan.vortex, bridge.address)

    if deployments_folder is not None:
        record = DeploymentRecord(
            name=plan.contract_name,
            address=bridge.address,
            tx_hash=proxy_tx_hash.hex(),
            chain_id=web3.eth.chain_id,
            args=[str(a) for a in plan.constructor_args],
            implementation=implementation.address,
            initialize_args=[str(a) for a in plan.initialize_args],
        )
        save_deployment(deployments_folder, network, record)

    return BridgeDeploymentResult(
        bridge=bridge,
        implementation_address=implementation.address,
        proxy_address=proxy.address,
        implementation_tx_hash=implementation_tx_hash,
        proxy_tx_hash=proxy_tx_hash,
        grant_tx_hash=grant_tx_hash,
    )
