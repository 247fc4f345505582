"""Logging setup for deployment scripts."""

import logging
import os

from tabulate import tabulate

from vortex_deploy.chain import get_chain_name
from vortex_deploy.constants import ZERO_ADDRESS
from vortex_deploy.named_accounts import NamedAccounts


def setup_console_logging(default_log_level="warning") -> logging.Logger:
    """Set up coloured log output.

    - ``LOG_LEVEL`` environment variable overrides the default level
    - Tune down some noisy dependency library logging

    :return:
        Root logger
    """

    level = os.environ.get("LOG_LEVEL", default_log_level).upper()
    numeric_level = getattr(logging, level, None)
    assert numeric_level, f"No level: {level}"

    fmt = "%(asctime)s %(name)-30s %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"

    try:
        # Optional dev dependency
        import coloredlogs

        coloredlogs.install(level=numeric_level, fmt=fmt, datefmt=date_fmt)
    except ImportError:
        # non-ANSI e.g. Docker
        logging.basicConfig(level=numeric_level, format=fmt, datefmt=date_fmt)

    # Mute noise
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    return logging.getLogger()


def format_named_accounts(accounts: NamedAccounts) -> str:
    """Render resolved named accounts as a text table.

    Sentinel addresses are marked, so operators do not mistake them for real contracts.
    """
    rows = []
    for role, address in sorted(accounts.items()):
        note = "not available" if address == ZERO_ADDRESS else ""
        if accounts.uses_ledger(role):
            note = "ledger"
        rows.append([role, address, note])
    title = f"Named accounts on {get_chain_name(accounts.network)}"
    return title + "\n" + tabulate(rows, headers=["Role", "Address", "Note"], tablefmt="simple")
