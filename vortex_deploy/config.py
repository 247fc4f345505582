"""Per-network deployment configuration.

All settings come from environment variables, read once in
:py:meth:`DeploymentSettings.from_environment`.

Environment variables
---------------------

``VERIFY_API_KEY``
    Etherscan-compatible API key for contract verification.

``GAS_PRICE``
    ``auto`` (default) or a fixed gas price in wei.

``TENDERLY_NETWORK_NAME``
    Network the Tenderly fork impersonates. Defaults to ``mainnet``.
    The local ``hardhat`` node simulates the same network.

``TENDERLY_IS_FORK``
    ``true`` to use a classic Tenderly fork by ``TENDERLY_FORK_ID``.
    Otherwise ``TENDERLY_TESTNET_PROVIDER_URL`` virtual testnet is used.

``TENDERLY_FORK_ID``, ``TENDERLY_TESTNET_PROVIDER_URL``, ``TENDERLY_PROJECT``, ``TENDERLY_TEST_PROJECT``, ``TENDERLY_USERNAME``
    Tenderly account details.

``SEI_RPC_API_KEY``
    Sent as ``x-apikey`` header to the Sei RPC.

``JSON_RPC_<NETWORK>``
    Override the default public RPC of a network.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Literal, Mapping

from web3 import Web3

from vortex_deploy.chain import EXPLORERS, ExplorerInfo, get_chain_id, get_rpc_url
from vortex_deploy.constants import MAINNET_NETWORKS, DeploymentNetwork
from vortex_deploy.fork import ForkEnvironment

logger = logging.getLogger(__name__)

#: Tenderly fork RPC, formatted with the fork id
TENDERLY_FORK_RPC_URL = "https://rpc.tenderly.co/fork/{fork_id}"

#: (connect, read) timeout for JSON-RPC calls
DEFAULT_HTTP_TIMEOUT = (3, 250.0)


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def _parse_gas_price(value: str | None) -> int | Literal["auto"]:
    if not value or value.strip().lower() == "auto":
        return "auto"
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"GAS_PRICE must be 'auto' or gas price in wei, got {value!r}") from e


@dataclass(slots=True, frozen=True)
class DeploymentSettings:
    """Settings shared by all networks in one deployment run."""

    fork: ForkEnvironment
    verify_api_key: str = ""
    gas_price: int | Literal["auto"] = "auto"
    tenderly_is_fork: bool = False
    tenderly_fork_id: str = ""
    tenderly_testnet_provider_url: str = ""
    tenderly_project: str = ""
    tenderly_username: str = ""
    sei_rpc_api_key: str = ""

    #: ``JSON_RPC_<NETWORK>`` overrides
    rpc_overrides: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] = os.environ, strict=True) -> "DeploymentSettings":
        """Read settings from environment variables.

        :param strict:
            Fail on an unknown ``TENDERLY_NETWORK_NAME``.
            See :py:meth:`ForkEnvironment.create`.
        """
        return cls(
            fork=ForkEnvironment.from_environment(environ, strict=strict),
            verify_api_key=environ.get("VERIFY_API_KEY", ""),
            gas_price=_parse_gas_price(environ.get("GAS_PRICE")),
            tenderly_is_fork=_env_flag(environ.get("TENDERLY_IS_FORK")),
            tenderly_fork_id=environ.get("TENDERLY_FORK_ID", ""),
            tenderly_testnet_provider_url=environ.get("TENDERLY_TESTNET_PROVIDER_URL", ""),
            tenderly_project=environ.get("TENDERLY_PROJECT") or environ.get("TENDERLY_TEST_PROJECT", ""),
            tenderly_username=environ.get("TENDERLY_USERNAME", ""),
            sei_rpc_api_key=environ.get("SEI_RPC_API_KEY", ""),
            rpc_overrides={k: v for k, v in environ.items() if k.startswith("JSON_RPC_") and v},
        )


@dataclass(slots=True, frozen=True)
class NetworkConfig:
    """How to connect to and deploy on one network."""

    network: DeploymentNetwork
    chain_id: int | None
    url: str | None
    gas_price: int | Literal["auto"] = "auto"

    #: Write deployment records under ``deployments/<network>``
    save_deployments: bool = True

    #: Real chain, not a local node
    live: bool = True

    #: Network whose deploy script runs here.
    #:
    #: Differs from :py:attr:`network` on forks and on the local node,
    #: which both stand in for the ``TENDERLY_NETWORK_NAME`` network.
    deploy_network: DeploymentNetwork | None = None

    #: Contract verification key, empty if the network is not verified
    verify_api_key: str = ""

    #: Extra headers sent with each JSON-RPC request
    http_headers: Mapping[str, str] = field(default_factory=dict)

    #: The node accepts transactions from any address
    auto_impersonate: bool = False

    explorer: ExplorerInfo | None = None

    @property
    def verify(self) -> bool:
        return bool(self.verify_api_key) and self.live and not self.auto_impersonate


def build_network_configs(settings: DeploymentSettings) -> dict[DeploymentNetwork, NetworkConfig]:
    """Build connection configuration for every supported network."""
    configs: dict[DeploymentNetwork, NetworkConfig] = {}

    overrides = settings.rpc_overrides

    for network in sorted(MAINNET_NETWORKS, key=lambda n: n.value):
        headers = {}
        if network == DeploymentNetwork.sei:
            headers["x-apikey"] = settings.sei_rpc_api_key

        configs[network] = NetworkConfig(
            network=network,
            chain_id=get_chain_id(network),
            url=get_rpc_url(network, overrides),
            gas_price=settings.gas_price,
            deploy_network=network,
            verify_api_key=settings.verify_api_key,
            http_headers=headers,
            explorer=EXPLORERS.get(network),
        )

    configs[DeploymentNetwork.sepolia] = NetworkConfig(
        network=DeploymentNetwork.sepolia,
        chain_id=get_chain_id(DeploymentNetwork.sepolia),
        url=get_rpc_url(DeploymentNetwork.sepolia, overrides),
        deploy_network=DeploymentNetwork.sepolia,
        verify_api_key=settings.verify_api_key,
    )

    fork_network = settings.fork.fork_network

    # Local node, e.g. anvil --fork-url <rpc> --chain-id 31337
    configs[DeploymentNetwork.hardhat] = NetworkConfig(
        network=DeploymentNetwork.hardhat,
        chain_id=get_chain_id(DeploymentNetwork.hardhat),
        url=get_rpc_url(DeploymentNetwork.hardhat, overrides),
        save_deployments=False,
        live=False,
        deploy_network=fork_network,
    )

    if settings.tenderly_is_fork:
        tenderly_url = TENDERLY_FORK_RPC_URL.format(fork_id=settings.tenderly_fork_id)
    else:
        tenderly_url = settings.tenderly_testnet_provider_url or None

    for network in (DeploymentNetwork.tenderly, DeploymentNetwork.tenderly_testnet):
        configs[network] = NetworkConfig(
            network=network,
            chain_id=settings.fork.fork_chain_id,
            url=tenderly_url,
            deploy_network=fork_network,
            auto_impersonate=True,
        )

    return configs


def create_web3(config: NetworkConfig, timeout=DEFAULT_HTTP_TIMEOUT, check_chain_id=True) -> Web3:
    """Connect to the network JSON-RPC.

    :param check_chain_id:
        Check the node reports the chain id we expect
    """
    assert config.url, f"No JSON-RPC URL configured for {config.network.value}"

    request_kwargs = {"timeout": timeout}
    if config.http_headers:
        request_kwargs["headers"] = dict(config.http_headers)

    web3 = Web3(Web3.HTTPProvider(config.url, request_kwargs=request_kwargs))

    if check_chain_id and config.chain_id is not None:
        chain_id = web3.eth.chain_id
        assert chain_id == config.chain_id, f"{config.network.value} RPC reports chain id {chain_id}, expected {config.chain_id}"

    logger.info("Connected to %s, chain id %s", config.network.value, config.chain_id)
    return web3
