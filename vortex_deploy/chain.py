"""Chain ids, RPC endpoints and block explorers for the deployment networks.

Static tables only. The chain id table is also used to detect
which network a Tenderly fork impersonates, see :py:mod:`vortex_deploy.fork`.
"""

import os
from dataclasses import dataclass
from typing import Mapping

from vortex_deploy.constants import DeploymentNetwork

#: Network to EVM chain id.
#:
#: Fork identities are not listed, as their chain id
#: is the chain id of the network they fork.
CHAIN_IDS: dict[DeploymentNetwork, int] = {
    DeploymentNetwork.arbitrum: 42161,
    DeploymentNetwork.astar: 592,
    DeploymentNetwork.aurora: 1313161554,
    DeploymentNetwork.avalanche: 43114,
    DeploymentNetwork.base: 8453,
    DeploymentNetwork.bsc: 56,
    DeploymentNetwork.blast: 81457,
    DeploymentNetwork.canto: 7700,
    DeploymentNetwork.celo: 42220,
    DeploymentNetwork.cronos: 25,
    DeploymentNetwork.fantom: 250,
    DeploymentNetwork.fusion: 32659,
    DeploymentNetwork.gnosis: 100,
    DeploymentNetwork.hedera: 295,
    DeploymentNetwork.kava: 2222,
    DeploymentNetwork.klaytn: 8217,
    DeploymentNetwork.linea: 59144,
    DeploymentNetwork.mainnet: 1,
    DeploymentNetwork.manta: 169,
    DeploymentNetwork.mantle: 5000,
    DeploymentNetwork.metis: 1088,
    DeploymentNetwork.mode: 34443,
    DeploymentNetwork.moonbeam: 1284,
    DeploymentNetwork.optimism: 10,
    DeploymentNetwork.polygon: 137,
    DeploymentNetwork.pulsechain: 369,
    DeploymentNetwork.rootstock: 30,
    DeploymentNetwork.scroll: 534352,
    DeploymentNetwork.telos: 40,
    DeploymentNetwork.zksync: 324,
    DeploymentNetwork.sei: 1329,
    DeploymentNetwork.iota: 8822,
    DeploymentNetwork.coti: 2632500,
    DeploymentNetwork.tac: 239,
    DeploymentNetwork.sepolia: 11155111,
    DeploymentNetwork.hardhat: 31337,
}

#: Default public RPC endpoints.
#:
#: Override with ``JSON_RPC_<NETWORK>`` environment variable,
#: see :py:func:`get_rpc_url`.
RPC_URLS: dict[DeploymentNetwork, str] = {
    DeploymentNetwork.arbitrum: "https://arb1.arbitrum.io/rpc",
    DeploymentNetwork.astar: "https://evm.astar.network",
    DeploymentNetwork.aurora: "https://mainnet.aurora.dev",
    DeploymentNetwork.avalanche: "https://api.avax.network/ext/bc/C/rpc",
    DeploymentNetwork.base: "https://mainnet.base.org",
    DeploymentNetwork.bsc: "https://bsc-dataseed.binance.org",
    DeploymentNetwork.blast: "https://rpc.blast.io",
    DeploymentNetwork.canto: "https://canto.slingshot.finance",
    DeploymentNetwork.celo: "https://forno.celo.org",
    DeploymentNetwork.cronos: "https://evm.cronos.org",
    DeploymentNetwork.fantom: "https://rpcapi.fantom.network",
    DeploymentNetwork.fusion: "https://mainnet.fusionnetwork.io",
    DeploymentNetwork.gnosis: "https://rpc.gnosischain.com",
    DeploymentNetwork.hedera: "https://mainnet.hashio.io/api",
    DeploymentNetwork.kava: "https://evm.kava.io",
    DeploymentNetwork.klaytn: "https://public-en-cypress.klaytn.net",
    DeploymentNetwork.linea: "https://rpc.linea.build",
    DeploymentNetwork.mainnet: "https://ethereum-rpc.publicnode.com",
    DeploymentNetwork.manta: "https://pacific-rpc.manta.network/http",
    DeploymentNetwork.mantle: "https://rpc.mantle.xyz",
    DeploymentNetwork.metis: "https://andromeda.metis.io/?owner=1088",
    DeploymentNetwork.mode: "https://mainnet.mode.network",
    DeploymentNetwork.moonbeam: "https://rpc.api.moonbeam.network",
    DeploymentNetwork.optimism: "https://mainnet.optimism.io",
    DeploymentNetwork.polygon: "https://polygon-rpc.com",
    DeploymentNetwork.pulsechain: "https://rpc.pulsechain.com",
    DeploymentNetwork.rootstock: "https://public-node.rsk.co",
    DeploymentNetwork.scroll: "https://rpc.scroll.io",
    DeploymentNetwork.telos: "https://mainnet.telos.net/evm",
    DeploymentNetwork.zksync: "https://mainnet.era.zksync.io",
    DeploymentNetwork.sei: "https://evm-rpc.sei-apis.com",
    DeploymentNetwork.iota: "https://json-rpc.evm.iotaledger.net",
    DeploymentNetwork.coti: "https://mainnet.coti.io/rpc",
    DeploymentNetwork.tac: "https://rpc.tac.build",
    DeploymentNetwork.sepolia: "https://rpc.sepolia.org",
    DeploymentNetwork.hardhat: "http://127.0.0.1:8545",
}

#: Human readable names, when different from the capitalised network name
CHAIN_NAMES: dict[DeploymentNetwork, str] = {
    DeploymentNetwork.mainnet: "Ethereum",
    DeploymentNetwork.bsc: "Binance Smart Chain",
    DeploymentNetwork.zksync: "zkSync Era",
    DeploymentNetwork.pulsechain: "PulseChain",
    DeploymentNetwork.iota: "IOTA EVM",
    DeploymentNetwork.coti: "COTI",
    DeploymentNetwork.tac: "TAC",
    DeploymentNetwork.hardhat: "Local",
    DeploymentNetwork.tenderly: "Tenderly fork",
    DeploymentNetwork.tenderly_testnet: "Tenderly testnet",
}


@dataclass(slots=True, frozen=True)
class ExplorerInfo:
    """Etherscan-compatible block explorer used for contract verification."""

    #: Verification API endpoint
    api_url: str

    #: Explorer front page
    browser_url: str

    def get_address_url(self, address: str) -> str:
        return f"{self.browser_url.rstrip('/')}/address/{address}"

    def get_tx_url(self, tx_hash: str) -> str:
        return f"{self.browser_url.rstrip('/')}/tx/{tx_hash}"


#: Explorers that are not known to the default Etherscan verifier
EXPLORERS: dict[DeploymentNetwork, ExplorerInfo] = {
    DeploymentNetwork.blast: ExplorerInfo(
        api_url="https://api.blastscan.io/api",
        browser_url="https://blastscan.io",
    ),
    DeploymentNetwork.celo: ExplorerInfo(
        api_url="https://api.celoscan.io/api",
        browser_url="https://celoscan.io",
    ),
    DeploymentNetwork.mantle: ExplorerInfo(
        api_url="https://api.mantlescan.xyz/api",
        browser_url="https://mantlescan.xyz",
    ),
    DeploymentNetwork.linea: ExplorerInfo(
        api_url="https://api.lineascan.build/api",
        browser_url="https://lineascan.build",
    ),
    DeploymentNetwork.sei: ExplorerInfo(
        api_url="https://seitrace.com/pacific-1/api",
        browser_url="https://seitrace.com/?chain=pacific-1",
    ),
    DeploymentNetwork.iota: ExplorerInfo(
        api_url="https://explorer.evm.iota.org/api",
        browser_url="https://explorer.evm.iota.org",
    ),
    DeploymentNetwork.coti: ExplorerInfo(
        api_url="https://mainnet.cotiscan.io/api",
        browser_url="https://mainnet.cotiscan.io",
    ),
    DeploymentNetwork.tac: ExplorerInfo(
        api_url="https://explorer.tac.build/api",
        browser_url="https://explorer.tac.build",
    ),
}


def get_chain_id(network: DeploymentNetwork) -> int | None:
    """Get the chain id of a network.

    :return:
        ``None`` for networks without a fixed chain id (forks)
    """
    return CHAIN_IDS.get(network)


def get_network_by_chain_id(chain_id: int) -> DeploymentNetwork | None:
    """Reverse lookup of :py:data:`CHAIN_IDS`."""
    for network, network_chain_id in CHAIN_IDS.items():
        if network_chain_id == chain_id:
            return network
    return None


def get_chain_name(network: DeploymentNetwork) -> str:
    """Get a human readable network name for logging and tables."""
    return CHAIN_NAMES.get(network, network.value.capitalize())


def get_rpc_url(network: DeploymentNetwork, environ: Mapping[str, str] = os.environ) -> str | None:
    """Get the JSON-RPC URL for a network.

    ``JSON_RPC_BASE``, ``JSON_RPC_MAINNET`` etc. environment variables
    take precedence over the public endpoints in :py:data:`RPC_URLS`.
    """
    env_name = "JSON_RPC_" + network.value.upper().replace("-", "_")
    return environ.get(env_name) or RPC_URLS.get(network)
