"""Deploy the Vortex bridge on one network.

The bridge protocol is picked by the network: Across on Blast,
LayerZero on Telos, Stargate elsewhere. On a Tenderly fork, the bridge
of the impersonated network (``TENDERLY_NETWORK_NAME``) is deployed.

Environment variables
---------------------

``NETWORK``
    Network to deploy on, e.g. ``base``, ``blast``, ``tenderly`` or ``hardhat``.

``DEPLOYER_PRIVATE_KEY``
    Private key of the named ``deployer`` account.
    Not needed on Tenderly, where the deployer is impersonated.
    Not needed on a local node, which deploys from its first unlocked account.

``CONTRACTS_ROOT``
    Foundry project with the Vortex bridge sources. Defaults to ``contracts``.

``DEPLOYMENTS_FOLDER``
    Where deployment records are written. Defaults to ``deployments``.

``SLIPPAGE_PPM``
    Bridge slippage in parts per million. Defaults to ``5000`` (0.5%).

``VERIFY_API_KEY``, ``GAS_PRICE``, ``TENDERLY_*``, ``SEI_RPC_API_KEY``, ``JSON_RPC_<NETWORK>``
    See :py:mod:`vortex_deploy.config`.

``LOG_LEVEL``
    Logging level (default: ``info``)

Usage:

.. code-block:: shell

    NETWORK=blast DEPLOYER_PRIVATE_KEY=0x... VERIFY_API_KEY=... \\
        python scripts/deploy-vortex-bridge.py

    # Rehearse the Base deployment on a Tenderly fork
    NETWORK=tenderly TENDERLY_NETWORK_NAME=base TENDERLY_IS_FORK=true TENDERLY_FORK_ID=... \\
        python scripts/deploy-vortex-bridge.py

    # Rehearse on a local Anvil fork of Blast, deploying from the first Anvil account
    anvil --fork-url https://rpc.blast.io --chain-id 31337 &
    NETWORK=hardhat TENDERLY_NETWORK_NAME=blast python scripts/deploy-vortex-bridge.py
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from eth_account import Account
from tabulate import tabulate

from vortex_deploy.bridge import deploy_vortex_bridge, get_bridge_kind, plan_bridge_deployment
from vortex_deploy.chain import get_chain_name
from vortex_deploy.config import DeploymentSettings, build_network_configs, create_web3
from vortex_deploy.constants import DEFAULT_SLIPPAGE_PPM, parse_network
from vortex_deploy.deployments import DEFAULT_DEPLOYMENTS_FOLDER
from vortex_deploy.forge import ForgeVerification
from vortex_deploy.named_accounts import build_named_accounts, resolve_local_named_accounts, resolve_named_accounts
from vortex_deploy.utils import format_named_accounts, setup_console_logging

logger = logging.getLogger(__name__)


def main():
    load_dotenv()
    setup_console_logging(default_log_level=os.environ.get("LOG_LEVEL", "info"))

    network = parse_network(os.environ["NETWORK"])
    settings = DeploymentSettings.from_environment()
    config = build_network_configs(settings)[network]

    assert config.deploy_network is not None, f"Nothing to deploy on {network.value}"

    web3 = create_web3(config)

    table = build_named_accounts(settings.fork)
    if config.live:
        accounts = resolve_named_accounts(table, network)
    else:
        accounts = resolve_local_named_accounts(table, config.deploy_network, web3.eth.accounts)
    print(format_named_accounts(accounts))

    kind = get_bridge_kind(config.deploy_network)
    slippage_ppm = int(os.environ.get("SLIPPAGE_PPM", DEFAULT_SLIPPAGE_PPM))
    plan = plan_bridge_deployment(kind, accounts, slippage_ppm=slippage_ppm)

    private_key = os.environ.get("DEPLOYER_PRIVATE_KEY")
    if private_key:
        deployer = Account.from_key(private_key)
    else:
        assert config.auto_impersonate or not config.live, f"DEPLOYER_PRIVATE_KEY needed to deploy on {network.value}"
        deployer = None

    verification = None
    if config.verify:
        verification = ForgeVerification.for_explorer(config.verify_api_key, config.explorer)

    deployments_folder = Path(os.environ.get("DEPLOYMENTS_FOLDER", DEFAULT_DEPLOYMENTS_FOLDER))

    result = deploy_vortex_bridge(
        web3,
        plan,
        project_folder=Path(os.environ.get("CONTRACTS_ROOT", "contracts")).absolute(),
        network=network,
        deployer=deployer,
        verification=verification,
        deployments_folder=deployments_folder if config.save_deployments else None,
        gas_price=config.gas_price,
        rpc_headers=config.http_headers,
    )

    rows = [
        ["Network", get_chain_name(network)],
        ["Bridge", plan.contract_name],
        ["Proxy", result.proxy_address],
        ["Implementation", result.implementation_address],
        ["Proxy tx", result.proxy_tx_hash.hex()],
        ["ROLE_ADMIN granted", "yes" if result.grant_tx_hash else "no"],
    ]
    print("\nDeployment results:")
    print(tabulate(rows, tablefmt="simple"))


if __name__ == "__main__":
    main()
