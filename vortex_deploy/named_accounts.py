"""Named accounts: per-network addresses of the contracts and accounts deployment scripts use.

- A *role* like ``vortex``, ``vault`` or ``bridge`` has a different address on each network

- :py:func:`build_named_accounts` composes the role table for one
  :py:class:`~vortex_deploy.fork.ForkEnvironment`

- :py:func:`resolve_named_accounts` flattens the table for the network we deploy on

Unavailable roles are represented two ways, as in the historical tables:

- Token accounts use :py:data:`~vortex_deploy.constants.ZERO_ADDRESS`
  on networks where the token does not exist. Deployment scripts may pass
  this sentinel on as is.

- All other groups leave the network out. The role resolves to ``None``.

Use :py:meth:`NamedAccounts.is_available` or :py:meth:`NamedAccounts.require`
to treat both the same.

Example:

.. code-block:: python

    fork = ForkEnvironment.from_environment()
    table = build_named_accounts(fork)
    accounts = resolve_named_accounts(table, DeploymentNetwork.base)

    vortex = accounts["vortex"]
    weth = accounts.get("weth")
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Sequence

from eth_typing import HexAddress, HexStr

from vortex_deploy.constants import FORK_NETWORKS, LEDGER_PREFIX, NATIVE_TOKEN_ADDRESS, ZERO_ADDRESS, DeploymentNetwork
from vortex_deploy.fork import ForkEnvironment

logger = logging.getLogger(__name__)


class AddressCollision(ValueError):
    """Two contributions tried to set an address for the same role and network."""


class MissingNamedAccount(KeyError):
    """Role has no usable address on the network."""


class AddressEntryBuilder:
    """Accumulate the per-network addresses of one role.

    Each :py:meth:`add` contributes the network itself, and the fork identities
    if the fork impersonates the network. Writing any network twice is an error,
    so a fork identity can never silently end up with an address from the wrong chain.
    """

    def __init__(self, role: str, fork: ForkEnvironment):
        self.role = role
        self.fork = fork
        self.entries: dict[DeploymentNetwork, str] = {}

    def add(self, network: DeploymentNetwork, address: str) -> "AddressEntryBuilder":
        """Set the role address on a network.

        :raise AddressCollision:
            The network, or a fork identity it aliases, already has an address
        """
        contribution = self.fork.address_entry(network, address)
        for key, value in contribution.items():
            if key in self.entries:
                raise AddressCollision(f"Role {self.role}: {key.value} already set to {self.entries[key]}, tried to set {value} via {network.value}")
        self.entries.update(contribution)
        return self

    def add_optional(self, network: DeploymentNetwork, address: str | None) -> "AddressEntryBuilder":
        """Set the role address on a network, if there is one.

        ``None`` contributes nothing and the network stays unset.
        """
        if address is None:
            return self
        return self.add(network, address)

    def build(self) -> Mapping[DeploymentNetwork, str]:
        return MappingProxyType(dict(self.entries))


@dataclass(slots=True, frozen=True)
class NamedAccount:
    """One role in the named account table."""

    #: Role name, e.g. ``vortex``
    role: str

    #: Network -> address
    addresses: Mapping[DeploymentNetwork, str]

    #: Index in the local node accounts to use on networks without an address
    default: int | None = None

    def get_address(self, network: DeploymentNetwork) -> str | None:
        return self.addresses.get(network)


#: Role name -> named account
RoleTable = Mapping[str, NamedAccount]


def _role(fork: ForkEnvironment, role: str, entries: Sequence[tuple[DeploymentNetwork, str | None]], default: int | None = None, optional=False) -> NamedAccount:
    builder = AddressEntryBuilder(role, fork)
    for network, address in entries:
        if optional:
            builder.add_optional(network, address)
        else:
            builder.add(network, address)
    return NamedAccount(role=role, addresses=builder.build(), default=default)


def build_test_accounts(fork: ForkEnvironment) -> list[NamedAccount]:
    """Large token holders we impersonate on forks to fund test accounts."""
    return [
        _role(
            fork,
            "ethWhale",
            [
                (DeploymentNetwork.mainnet, "0xDA9dfA130Df4dE4673b89022EE50ff26f6EA73Cf"),
                (DeploymentNetwork.base, "0xF977814e90dA44bFA03b6295A0616a897441aceC"),
                (DeploymentNetwork.arbitrum, "0xF977814e90dA44bFA03b6295A0616a897441aceC"),
            ],
        ),
        _role(
            fork,
            "daiWhale",
            [
                (DeploymentNetwork.mainnet, "0xb527a981e1d415AF696936B3174f2d7aC8D11369"),
                (DeploymentNetwork.base, "0xe9b14a1Be94E70900EDdF1E22A4cB8c56aC9e10a"),
                (DeploymentNetwork.arbitrum, "0xd85E038593d7A098614721EaE955EC2022B9B91B"),
            ],
        ),
        _role(
            fork,
            "usdcWhale",
            [
                (DeploymentNetwork.mainnet, "0x55FE002aefF02F77364de339a1292923A15844B8"),
                (DeploymentNetwork.base, "0x20FE51A9229EEf2cF8Ad9E89d91CAb9312cF3b7A"),
                (DeploymentNetwork.arbitrum, "0x489ee077994B6658eAfA855C308275EAd8097C4A"),
            ],
        ),
        _role(
            fork,
            "wbtcWhale",
            [
                (DeploymentNetwork.mainnet, "0x6daB3bCbFb336b29d06B9C793AEF7eaA57888922"),
                (DeploymentNetwork.arbitrum, "0x489ee077994B6658eAfA855C308275EAd8097C4A"),
            ],
        ),
        _role(
            fork,
            "linkWhale",
            [
                (DeploymentNetwork.mainnet, "0xc6bed363b30DF7F35b601a5547fE56cd31Ec63DA"),
                (DeploymentNetwork.arbitrum, "0x191c10Aa4AF7C30e871E70C95dB0E4eb77237530"),
            ],
        ),
        _role(
            fork,
            "bntWhale",
            [
                (DeploymentNetwork.mainnet, "0x221A0e3C9AcEa6B3f1CC9DfC7063509c89bE7BC3"),
            ],
        ),
    ]


def build_token_accounts(fork: ForkEnvironment) -> list[NamedAccount]:
    """ERC-20 tokens.

    Tokens not deployed on a network are set to the zero address sentinel.
    """
    return [
        _role(
            fork,
            "dai",
            [
                (DeploymentNetwork.mainnet, "0x6B175474E89094C44Da98b954EedeAC495271d0F"),
                (DeploymentNetwork.base, "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb"),
                (DeploymentNetwork.arbitrum, "0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1"),
                (DeploymentNetwork.fantom, "0x8D11eC38a3EB5E956B052f67Da8Bdc9bef8Abf3E"),
            ],
        ),
        _role(
            fork,
            "link",
            [
                (DeploymentNetwork.mainnet, "0x514910771AF9Ca656af840dff83E8264EcF986CA"),
                (DeploymentNetwork.base, ZERO_ADDRESS),
                (DeploymentNetwork.arbitrum, "0xf97f4df75117a78c1A5a0DBb814Af92458539FB4"),
                # Same as dai on Fantom in the deployed configuration
                (DeploymentNetwork.fantom, "0x8D11eC38a3EB5E956B052f67Da8Bdc9bef8Abf3E"),
            ],
        ),
        _role(
            fork,
            "weth",
            [
                (DeploymentNetwork.mainnet, "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"),
                (DeploymentNetwork.base, "0x4200000000000000000000000000000000000006"),
                (DeploymentNetwork.blast, "0x4300000000000000000000000000000000000004"),
                (DeploymentNetwork.arbitrum, "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"),
                (DeploymentNetwork.fantom, "0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83"),  # wftm
                (DeploymentNetwork.mantle, "0x78c1b0C915c4FAA5FffA6CAbf0219DA63d7f4cb8"),  # wmnt
                (DeploymentNetwork.linea, "0xe5D7C2a44FfDDf6b295A15c148167daaAf5Cf34f"),
                (DeploymentNetwork.coti, "0x639aCc80569c5FC83c6FBf2319A6Cc38bBfe26d1"),
            ],
        ),
        _role(
            fork,
            "usdc",
            [
                (DeploymentNetwork.mainnet, "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"),
                (DeploymentNetwork.base, "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"),
                (DeploymentNetwork.arbitrum, "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"),
                (DeploymentNetwork.fantom, "0x04068DA6C83AFCFA0e13ba15A6696662335D5B75"),
                (DeploymentNetwork.mantle, "0x09Bc4E0D864854c6aFB6eB9A9cdF58aC190D0dF9"),
            ],
        ),
        _role(
            fork,
            "wbtc",
            [
                (DeploymentNetwork.mainnet, "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"),
                (DeploymentNetwork.base, ZERO_ADDRESS),
                (DeploymentNetwork.arbitrum, "0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f"),
                (DeploymentNetwork.fantom, ZERO_ADDRESS),
                (DeploymentNetwork.mantle, ZERO_ADDRESS),
            ],
        ),
        _role(
            fork,
            "bnt",
            [
                (DeploymentNetwork.mainnet, "0x1F573D6Fb3F13d689FF844B4cE37794d79a7FF1C"),
                (DeploymentNetwork.base, ZERO_ADDRESS),
                (DeploymentNetwork.arbitrum, ZERO_ADDRESS),
                (DeploymentNetwork.fantom, ZERO_ADDRESS),
                (DeploymentNetwork.mantle, ZERO_ADDRESS),
            ],
        ),
    ]


#: Carbon vault, same address on every network
CARBON_VAULT = "0x60917e542aDdd13bfd1a7f81cD654758052dAdC4"

#: Networks with Carbon Vortex deployed
VORTEX_NETWORKS = [
    DeploymentNetwork.mainnet,
    DeploymentNetwork.base,
    DeploymentNetwork.blast,
    DeploymentNetwork.celo,
    DeploymentNetwork.fantom,
    DeploymentNetwork.mantle,
    DeploymentNetwork.linea,
    DeploymentNetwork.sei,
    DeploymentNetwork.telos,
    DeploymentNetwork.iota,
    DeploymentNetwork.coti,
]


def build_bancor_accounts(fork: ForkEnvironment) -> list[NamedAccount]:
    """Carbon vault, Vortex and the token the Vortex withdraws in."""
    return [
        _role(fork, "vault", [(network, CARBON_VAULT) for network in VORTEX_NETWORKS], optional=True),
        _role(
            fork,
            "vortex",
            [
                (DeploymentNetwork.mainnet, "0xD053Dcd7037AF7204cecE544Ea9F227824d79801"),
                (DeploymentNetwork.base, "0xA4682A2A5Fe02feFF8Bd200240A41AD0E6EaF8d5"),
                (DeploymentNetwork.blast, "0x0f54099D787e26c90c487625B4dE819eC5A9BDAA"),
                (DeploymentNetwork.celo, "0xa15E3295465439A361dBcac79C1DBCE6Cd01E562"),
                (DeploymentNetwork.fantom, "0x4A0c4eF72e0BA9d6A2d34dAD6E794378d9Ad4130"),
                (DeploymentNetwork.mantle, "0x59f21012B2E9BA67ce6a7605E74F945D0D4C84EA"),
                (DeploymentNetwork.linea, "0x5bCA3389786385a35bca14C2D0582adC6cb2482e"),
                (DeploymentNetwork.sei, "0x5715203B16F15d7349Cb1E3537365E9664EAf933"),
                (DeploymentNetwork.telos, "0x5E994Ac7d65d81f51a76e0bB5a236C6fDA8dBF9A"),
                (DeploymentNetwork.iota, "0xe4816658ad10bF215053C533cceAe3f59e1f1087"),
                (DeploymentNetwork.coti, "0x20216f3056BF98E245562940E6c9c65aD9B31271"),
            ],
            optional=True,
        ),
        # Mainnet Vortex is not bridged, so no withdraw token there
        _role(
            fork,
            "withdrawToken",
            [
                (DeploymentNetwork.base, NATIVE_TOKEN_ADDRESS),
                (DeploymentNetwork.blast, "0x4300000000000000000000000000000000000004"),
                (DeploymentNetwork.celo, "0x66803FB87aBd4aaC3cbB3fAd7C3aa01f6F3FB207"),
                (DeploymentNetwork.fantom, "0x695921034f0387eAc4e11620EE91b1b15A6A09fE"),
                (DeploymentNetwork.mantle, "0xdEAddEaDdeadDEadDEADDEAddEADDEAddead1111"),
                (DeploymentNetwork.linea, NATIVE_TOKEN_ADDRESS),
                (DeploymentNetwork.sei, "0x160345fC359604fC6e70E3c5fAcbdE5F7A9342d8"),
                (DeploymentNetwork.telos, "0xA0fB8cd450c8Fd3a11901876cD5f17eB47C6bc50"),
                (DeploymentNetwork.iota, "0x160345fC359604fC6e70E3c5fAcbdE5F7A9342d8"),
                (DeploymentNetwork.coti, "0x639aCc80569c5FC83c6FBf2319A6Cc38bBfe26d1"),
            ],
            optional=True,
        ),
    ]


def build_bridge_accounts(fork: ForkEnvironment) -> list[NamedAccount]:
    """Third party bridge entry points the Vortex bridges call."""
    return [
        _role(
            fork,
            "bridge",
            [
                (DeploymentNetwork.base, "0xdc181Bd607330aeeBEF6ea62e03e5e1Fb4B6F7C7"),
                (DeploymentNetwork.blast, "0x2D509190Ed0172ba588407D4c2df918F955Cc6E1"),
                (DeploymentNetwork.celo, "0x796Dff6D74F3E27060B71255Fe517BFb23C93eed"),
                (DeploymentNetwork.fantom, "0x86355f02119bdbc28ed6a4d5e0ca327ca7730fff"),
                (DeploymentNetwork.mantle, "0x4c1d3Fc3fC3c177c3b633427c2F769276c547463"),
                (DeploymentNetwork.linea, "0x81F6138153d473E8c5EcebD3DC8Cd4903506B075"),
                (DeploymentNetwork.sei, "0x5c386D85b1B82FD9Db681b9176C8a4248bb6345B"),
                (DeploymentNetwork.telos, "0x9c5ebCbE531aA81bD82013aBF97401f5C6111d76"),
                (DeploymentNetwork.iota, "0x9c2dc7377717603eB92b2655c5f2E7997a4945BD"),
                (DeploymentNetwork.coti, "0x639aCc80569c5FC83c6FBf2319A6Cc38bBfe26d1"),
            ],
            optional=True,
        ),
        _role(
            fork,
            "wormhole",
            [
                (DeploymentNetwork.celo, "0xa321448d90d4e5b0A732867c18eA198e75CAC48E"),
            ],
            optional=True,
        ),
    ]


#: Deployer of all non-mainnet Vortex bridges
BRIDGE_DEPLOYER = "0xe01EA58F6DA98488E4C92fD9b3E49607639C5370"


def build_deployer_account(fork: ForkEnvironment) -> NamedAccount:
    """The account deployments are sent from.

    Mainnet deploys sign with a Ledger. Local networks use the first node account.
    """
    networks = [
        DeploymentNetwork.base,
        DeploymentNetwork.blast,
        DeploymentNetwork.celo,
        DeploymentNetwork.fantom,
        DeploymentNetwork.mantle,
        DeploymentNetwork.linea,
        DeploymentNetwork.sei,
        DeploymentNetwork.telos,
        DeploymentNetwork.iota,
    ]
    entries = [(DeploymentNetwork.mainnet, f"{LEDGER_PREFIX}0x5bEBA4D3533a963Dedb270a95ae5f7752fA0Fe22")]
    entries += [(network, BRIDGE_DEPLOYER) for network in networks]
    return _role(fork, "deployer", entries, default=0)


def build_named_accounts(fork: ForkEnvironment) -> RoleTable:
    """Build the full named account table.

    :param fork:
        Which network the fork identities impersonate.

    :raise AddressCollision:
        The same role is defined twice
    """
    accounts = [build_deployer_account(fork)]
    accounts += build_token_accounts(fork)
    accounts += build_test_accounts(fork)
    accounts += build_bancor_accounts(fork)
    accounts += build_bridge_accounts(fork)

    table: dict[str, NamedAccount] = {}
    for account in accounts:
        if account.role in table:
            raise AddressCollision(f"Role {account.role} defined twice")
        table[account.role] = account

    logger.debug("Built %d named accounts, fork chain id %s", len(table), fork.fork_chain_id)
    return MappingProxyType(table)


@dataclass(frozen=True, eq=False)
class NamedAccounts(Mapping):
    """Named accounts resolved for one network.

    Read-only role -> address mapping. Roles without an address
    on the network are not in the mapping.

    Compares equal to any mapping with the same items and, like ``dict``, is not hashable.
    """

    #: Network these accounts were resolved for
    network: DeploymentNetwork

    accounts: Mapping[str, str] = field(default_factory=dict)

    def __getitem__(self, role: str) -> str:
        try:
            return self.accounts[role]
        except KeyError:
            raise MissingNamedAccount(f"No {role} address configured on {self.network.value}") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self.accounts)

    def __len__(self) -> int:
        return len(self.accounts)

    def is_available(self, role: str) -> bool:
        """Role has a real address on this network.

        ``False`` for absent roles and roles set to the zero address sentinel.
        """
        value = self.accounts.get(role)
        return value is not None and value != ZERO_ADDRESS

    def require(self, role: str) -> HexAddress:
        """Get a role address that must be usable.

        :return:
            The address, ``ledger://`` prefix removed

        :raise MissingNamedAccount:
            Role is absent, or set to the zero address sentinel
        """
        if not self.is_available(role):
            raise MissingNamedAccount(f"{role} is not available on {self.network.value}, got {self.accounts.get(role)}")
        return self.address(role)

    def address(self, role: str) -> HexAddress:
        """Get the plain address of a role, ``ledger://`` prefix removed."""
        value = self[role]
        if value.startswith(LEDGER_PREFIX):
            value = value[len(LEDGER_PREFIX) :]
        return HexAddress(HexStr(value))

    def uses_ledger(self, role: str) -> bool:
        """Does this role sign with a Ledger hardware wallet."""
        value = self.accounts.get(role)
        return value is not None and value.startswith(LEDGER_PREFIX)


def resolve_named_accounts(
    table: RoleTable,
    network: DeploymentNetwork,
    local_accounts: Sequence[str] | None = None,
) -> NamedAccounts:
    """Flatten the named account table for one network.

    - Roles with an address on the network get that address

    - Roles with a ``default`` account index get the local node account,
      if ``local_accounts`` is given

    - Everything else is left out

    :param network:
        The network we deploy on

    :param local_accounts:
        Unlocked accounts of a local node, e.g. ``web3.eth.accounts``
    """
    resolved: dict[str, str] = {}
    for role, account in table.items():
        address = account.get_address(network)
        if address is None and account.default is not None and local_accounts:
            if account.default < len(local_accounts):
                address = local_accounts[account.default]
        if address is not None:
            resolved[role] = address

    logger.info("Resolved %d named accounts out of %d for %s", len(resolved), len(table), network.value)
    return NamedAccounts(network=network, accounts=MappingProxyType(resolved))


def resolve_local_named_accounts(
    table: RoleTable,
    simulated_network: DeploymentNetwork,
    local_accounts: Sequence[str],
    network: DeploymentNetwork = DeploymentNetwork.hardhat,
) -> NamedAccounts:
    """Named accounts on a local node forked from a real network.

    Contracts resolve to their ``simulated_network`` addresses.
    Roles with a ``default`` account index, like ``deployer``, use the node's
    own unlocked account instead, as the real key or Ledger is not available locally.

    :param simulated_network:
        The network the local node is forked from

    :param local_accounts:
        Unlocked accounts of the local node, ``web3.eth.accounts``
    """
    assert simulated_network not in FORK_NETWORKS, f"Resolve the fork target, not {simulated_network.value}"
    resolved = dict(resolve_named_accounts(table, simulated_network).accounts)
    for role, account in table.items():
        if account.default is None:
            continue
        if account.default < len(local_accounts):
            resolved[role] = local_accounts[account.default]
        else:
            resolved.pop(role, None)

    logger.info("Resolved %d %s named accounts for the local node", len(resolved), simulated_network.value)
    return NamedAccounts(network=network, accounts=MappingProxyType(resolved))
