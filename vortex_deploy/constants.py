"""Deployment network identities and well-known constant values.

- :py:class:`DeploymentNetwork` lists every network a Vortex bridge can be deployed on,
  plus the local, public testnet and Tenderly fork identities

- Sentinel addresses used in the named account tables
"""

import enum

from eth_typing import HexAddress, HexStr


class UnknownNetwork(ValueError):
    """Network name is not one of the supported deployment networks."""


class DeploymentNetwork(enum.Enum):
    """Supported deployment networks.

    Values are the network names used in environment variables,
    deploy script folders and deployment record folders.
    """

    arbitrum = "arbitrum"
    astar = "astar"
    aurora = "aurora"
    avalanche = "avalanche"
    base = "base"
    bsc = "bsc"
    blast = "blast"
    canto = "canto"
    celo = "celo"
    cronos = "cronos"
    fantom = "fantom"
    fusion = "fusion"
    gnosis = "gnosis"
    hedera = "hedera"
    kava = "kava"
    klaytn = "klaytn"
    linea = "linea"
    mainnet = "mainnet"
    manta = "manta"
    mantle = "mantle"
    metis = "metis"
    mode = "mode"
    moonbeam = "moonbeam"
    optimism = "optimism"
    polygon = "polygon"
    pulsechain = "pulsechain"
    rootstock = "rootstock"
    scroll = "scroll"
    telos = "telos"
    zksync = "zksync"
    sei = "sei"
    iota = "iota"
    coti = "coti"
    tac = "tac"

    #: Local in-process chain
    hardhat = "hardhat"

    #: Public testnet
    sepolia = "sepolia"

    #: Tenderly fork of the network named by ``TENDERLY_NETWORK_NAME``
    tenderly = "tenderly"

    #: Tenderly virtual testnet forked from the same network
    tenderly_testnet = "tenderly-testnet"

    @property
    def is_mainnet(self) -> bool:
        return self in MAINNET_NETWORKS

    @property
    def is_fork(self) -> bool:
        return self in FORK_NETWORKS


#: Identities that impersonate another network
FORK_NETWORKS: frozenset[DeploymentNetwork] = frozenset(
    {
        DeploymentNetwork.tenderly,
        DeploymentNetwork.tenderly_testnet,
    }
)

#: Non-production identities
TESTNET_NETWORKS: frozenset[DeploymentNetwork] = frozenset(
    {
        DeploymentNetwork.hardhat,
        DeploymentNetwork.sepolia,
    }
    | FORK_NETWORKS
)

#: Production networks
MAINNET_NETWORKS: frozenset[DeploymentNetwork] = frozenset(n for n in DeploymentNetwork if n not in TESTNET_NETWORKS)


def parse_network(name: str | DeploymentNetwork) -> DeploymentNetwork:
    """Turn a network name to :py:class:`DeploymentNetwork`.

    :param name:
        Network name like ``base`` or ``tenderly-testnet``.
        Case-insensitive, surrounding whitespace ignored.

    :raise UnknownNetwork:
        If the name is not a supported network
    """
    if isinstance(name, DeploymentNetwork):
        return name

    assert isinstance(name, str), f"Expected network name, got {type(name)}: {name}"

    try:
        return DeploymentNetwork(name.strip().lower())
    except ValueError as e:
        supported = ", ".join(n.value for n in DeploymentNetwork)
        raise UnknownNetwork(f"Unknown network {name!r}. Supported networks are: {supported}") from e


#: Placeholder for a role that is not applicable on a network.
#:
#: Callers must treat this as "not available here".
ZERO_ADDRESS = HexAddress(HexStr("0x0000000000000000000000000000000000000000"))

#: Pseudo-address that stands for the chain native gas token
NATIVE_TOKEN_ADDRESS = HexAddress(HexStr("0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"))

#: Named account prefix for addresses that sign with a Ledger hardware wallet
LEDGER_PREFIX = "ledger://"

#: Parts per million, used for slippage
PPM_RESOLUTION = 1_000_000

#: 0.5% slippage the bridges are initialised with
DEFAULT_SLIPPAGE_PPM = 5000

#: Proxy the bridge implementations are deployed behind
PROXY_CONTRACT = "OptimizedTransparentUpgradeableProxy"

#: Proxy initialiser function
INITIALIZE = "initialize"
