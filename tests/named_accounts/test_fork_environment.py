"""Tenderly fork identity and the per-network address helper.

Pure logic, no RPC needed.
"""

import pytest

from vortex_deploy.chain import CHAIN_IDS
from vortex_deploy.constants import FORK_NETWORKS, DeploymentNetwork, UnknownNetwork
from vortex_deploy.fork import ForkEnvironment

VORTEX_BASE = "0xA4682A2A5Fe02feFF8Bd200240A41AD0E6EaF8d5"

FORK_KEYS = {DeploymentNetwork.tenderly, DeploymentNetwork.tenderly_testnet}

#: Every network that can carry a literal address
REAL_NETWORKS = [n for n in DeploymentNetwork if n not in FORK_NETWORKS]


@pytest.fixture(scope="module")
def mainnet_fork() -> ForkEnvironment:
    return ForkEnvironment.create(DeploymentNetwork.mainnet)


@pytest.fixture(scope="module")
def base_fork() -> ForkEnvironment:
    return ForkEnvironment.create("base")


def test_default_fork_is_mainnet():
    """Without TENDERLY_NETWORK_NAME forks impersonate mainnet."""
    fork = ForkEnvironment.from_environment({})
    assert fork.fork_network == DeploymentNetwork.mainnet
    assert fork.fork_chain_id == 1


def test_fork_from_environment():
    fork = ForkEnvironment.from_environment({"TENDERLY_NETWORK_NAME": "base"})
    assert fork.fork_network == DeploymentNetwork.base
    assert fork.fork_chain_id == 8453


def test_unknown_fork_network_fails_fast():
    with pytest.raises(UnknownNetwork):
        ForkEnvironment.from_environment({"TENDERLY_NETWORK_NAME": "solana"})


def test_fork_cannot_impersonate_fork():
    with pytest.raises(UnknownNetwork):
        ForkEnvironment.create(DeploymentNetwork.tenderly)


def test_unknown_fork_network_lenient():
    """Non-strict mode keeps going without any fork aliasing."""
    fork = ForkEnvironment.from_environment({"TENDERLY_NETWORK_NAME": "solana"}, strict=False)
    assert fork.fork_chain_id is None
    assert fork.fork_network is None
    assert fork.fork_network_name == "solana"

    for network in REAL_NETWORKS:
        entry = fork.address_entry(network, VORTEX_BASE)
        assert entry == {network: VORTEX_BASE}


@pytest.mark.parametrize("network", REAL_NETWORKS)
def test_address_entry_always_has_network(mainnet_fork, network):
    entry = mainnet_fork.address_entry(network, VORTEX_BASE)
    assert entry[network] == VORTEX_BASE


def test_only_impersonated_network_gets_fork_keys(base_fork):
    """Fork identities alias Base and nothing else."""
    for network in REAL_NETWORKS:
        entry = base_fork.address_entry(network, VORTEX_BASE)
        if network == DeploymentNetwork.base:
            assert entry == {
                DeploymentNetwork.base: VORTEX_BASE,
                DeploymentNetwork.tenderly: VORTEX_BASE,
                DeploymentNetwork.tenderly_testnet: VORTEX_BASE,
            }
        else:
            assert not FORK_KEYS & entry.keys(), f"{network} got fork keys"


def test_exactly_one_network_aliased():
    """For any fork target, exactly one network is aliased."""
    for target in CHAIN_IDS:
        fork = ForkEnvironment.create(target)
        aliased = [n for n in REAL_NETWORKS if fork.is_aliased(n)]
        assert aliased == [target]


def test_address_entry_idempotent(base_fork):
    a = base_fork.address_entry(DeploymentNetwork.base, VORTEX_BASE)
    b = base_fork.address_entry(DeploymentNetwork.base, VORTEX_BASE)
    assert a == b
    assert a is not b


def test_address_entry_rejects_fork_identity(base_fork):
    with pytest.raises(AssertionError):
        base_fork.address_entry(DeploymentNetwork.tenderly, VORTEX_BASE)


def test_address_entry_rejects_empty_address(base_fork):
    with pytest.raises(AssertionError):
        base_fork.address_entry(DeploymentNetwork.base, "")
