"""Print the named accounts a deployment on a network would use.

Use to check the fork aliasing before running a deploy on Tenderly.

Environment variables
---------------------

``NETWORK``
    Network to resolve for, e.g. ``base`` or ``tenderly``. Defaults to ``mainnet``.

``TENDERLY_NETWORK_NAME``
    Network the Tenderly fork identities impersonate. Defaults to ``mainnet``.

Usage:

.. code-block:: shell

    NETWORK=tenderly TENDERLY_NETWORK_NAME=base python scripts/show-named-accounts.py
"""

import os

from dotenv import load_dotenv

from vortex_deploy.constants import parse_network
from vortex_deploy.fork import ForkEnvironment
from vortex_deploy.named_accounts import build_named_accounts, resolve_named_accounts
from vortex_deploy.utils import format_named_accounts, setup_console_logging


def main():
    load_dotenv()
    setup_console_logging()

    network = parse_network(os.environ.get("NETWORK", "mainnet"))
    fork = ForkEnvironment.from_environment()
    accounts = resolve_named_accounts(build_named_accounts(fork), network)

    print(f"Fork identities impersonate {fork.fork_network_name} (chain id {fork.fork_chain_id})")
    print(format_named_accounts(accounts))


if __name__ == "__main__":
    main()
