"""Tenderly fork network identity.

A Tenderly fork (``tenderly``) and a Tenderly virtual testnet (``tenderly-testnet``)
impersonate one real network, named by ``TENDERLY_NETWORK_NAME`` environment variable.
Named accounts must resolve on the fork exactly like on the network it impersonates,
and on no other network.

Example:

.. code-block:: python

    from vortex_deploy.constants import DeploymentNetwork
    from vortex_deploy.fork import ForkEnvironment

    fork = ForkEnvironment.create(DeploymentNetwork.base)

    entry = fork.address_entry(DeploymentNetwork.base, "0xA4682A2A5Fe02feFF8Bd200240A41AD0E6EaF8d5")
    assert entry[DeploymentNetwork.tenderly] == "0xA4682A2A5Fe02feFF8Bd200240A41AD0E6EaF8d5"

    entry = fork.address_entry(DeploymentNetwork.blast, "0x0f54099D787e26c90c487625B4dE819eC5A9BDAA")
    assert DeploymentNetwork.tenderly not in entry
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from vortex_deploy.chain import get_chain_id
from vortex_deploy.constants import FORK_NETWORKS, DeploymentNetwork, UnknownNetwork, parse_network

logger = logging.getLogger(__name__)

#: Environment variable naming the network a fork impersonates
FORK_NETWORK_ENV = "TENDERLY_NETWORK_NAME"

#: Forks impersonate Ethereum mainnet unless told otherwise
DEFAULT_FORK_NETWORK = DeploymentNetwork.mainnet

#: Partial address mapping for one role, network -> address
AddressEntry = dict[DeploymentNetwork, str]


@dataclass(slots=True, frozen=True)
class ForkEnvironment:
    """Which network the fork identities stand for during one deployment run.

    Resolved once at startup and passed explicitly to the named account
    table builder. Immutable.
    """

    #: Network name the fork impersonates, as given.
    #:
    #: Kept as a string, as with ``strict=False`` it may be an unknown name.
    fork_network_name: str

    #: Chain id of the impersonated network.
    #:
    #: ``None`` if the network name was not recognised,
    #: in which case fork aliasing never applies.
    fork_chain_id: int | None

    @classmethod
    def create(cls, fork_network: DeploymentNetwork | str = DEFAULT_FORK_NETWORK, strict=True) -> "ForkEnvironment":
        """Create fork environment for a named network.

        :param fork_network:
            Network the fork impersonates.

        :param strict:
            Raise on network names without a chain id.

            If ``False``, an unknown name silently disables
            fork aliasing.

        :raise UnknownNetwork:
            Unknown network in the strict mode
        """
        try:
            network = parse_network(fork_network)
            chain_id = get_chain_id(network)
        except UnknownNetwork:
            if strict:
                raise
            network = None
            chain_id = None

        if network in FORK_NETWORKS:
            raise UnknownNetwork(f"A fork cannot impersonate another fork identity: {fork_network}")

        if chain_id is None:
            if strict:
                raise UnknownNetwork(f"Network {fork_network} has no chain id, cannot be used as a fork target")
            logger.warning("Fork network %s has no chain id, fork named accounts are not available", fork_network)

        name = network.value if network else str(fork_network)
        return cls(fork_network_name=name, fork_chain_id=chain_id)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] = os.environ, strict=True) -> "ForkEnvironment":
        """Read the fork target from ``TENDERLY_NETWORK_NAME`` environment variable.

        Defaults to ``mainnet``.
        """
        name = environ.get(FORK_NETWORK_ENV) or DEFAULT_FORK_NETWORK.value
        fork = cls.create(name, strict=strict)
        logger.info("Fork network is %s, chain id %s", fork.fork_network_name, fork.fork_chain_id)
        return fork

    @property
    def fork_network(self) -> DeploymentNetwork | None:
        """The impersonated network, or ``None`` if the name was not recognised."""
        try:
            return parse_network(self.fork_network_name)
        except UnknownNetwork:
            return None

    def is_aliased(self, network: DeploymentNetwork) -> bool:
        """Do fork identities resolve to the addresses of this network."""
        if self.fork_chain_id is None:
            return False
        return get_chain_id(network) == self.fork_chain_id

    def address_entry(self, network: DeploymentNetwork, address: str) -> AddressEntry:
        """Create the address entry of one role on one network.

        - The network always maps to the address

        - If the fork impersonates this network, both fork identities
          map to the same address

        The result is a fresh dict on every call, equal for equal input.

        :param network:
            A real network. Fork identities get their addresses through aliasing.

        :param address:
            Address, sentinel address or ``ledger://`` prefixed address
        """
        assert isinstance(network, DeploymentNetwork), f"Expected DeploymentNetwork, got {type(network)}: {network}"
        assert network not in FORK_NETWORKS, f"Cannot give a literal address for a fork identity: {network}"
        assert type(address) == str and address, f"Got bad address for {network.value}: {address!r}"

        entry: AddressEntry = {network: address}
        if self.is_aliased(network):
            entry[DeploymentNetwork.tenderly] = address
            entry[DeploymentNetwork.tenderly_testnet] = address
        return entry
