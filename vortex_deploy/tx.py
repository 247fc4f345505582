"""Send transactions and check they went through."""

import logging
from typing import Literal

from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract.contract import ContractConstructor, ContractFunction

logger = logging.getLogger(__name__)


class TransactionFailed(Exception):
    """Transaction reverted."""


def assert_transaction_success(
    web3: Web3,
    tx_hash: HexBytes | str,
    timeout: float = 180.0,
    RaisedException=TransactionFailed,
) -> dict:
    """Wait for a transaction receipt and raise if the transaction reverted.

    :param RaisedException:
        Exception class to raise, so callers can raise their own error types.

    :return:
        Transaction receipt
    """
    receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt["status"] != 1:
        tx_hash = HexBytes(tx_hash)
        raise RaisedException(f"Transaction {tx_hash.hex()} failed in block {receipt['blockNumber']}, gas used {receipt['gasUsed']}")
    return receipt


def send_contract_tx(
    web3: Web3,
    func: ContractFunction | ContractConstructor,
    sender: HexAddress,
    account: LocalAccount | None = None,
    gas: int | None = None,
    gas_price: int | Literal["auto"] = "auto",
) -> HexBytes:
    """Send a contract call or deployment, either signed locally or from an unlocked account.

    :param account:
        When provided, signs and broadcasts via ``eth_sendRawTransaction``.
        When ``None``, uses ``eth_sendTransaction`` (requires unlocked account, e.g. Anvil or Tenderly).

    :param gas_price:
        Fixed gas price in wei. ``auto`` lets the node price the transaction.
    """
    tx_params = {"from": Web3.to_checksum_address(sender)}
    if gas is not None:
        tx_params["gas"] = gas
    if gas_price != "auto":
        tx_params["gasPrice"] = gas_price

    if account is None:
        return func.transact(tx_params)

    assert account.address.lower() == sender.lower(), f"Signer {account.address} is not the sender {sender}"
    tx_params["nonce"] = web3.eth.get_transaction_count(account.address)
    tx = func.build_transaction(tx_params)
    signed_tx = account.sign_transaction(tx)
    # web3.py 6 vs 7 naming
    raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
    return web3.eth.send_raw_transaction(raw_tx)
