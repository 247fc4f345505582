"""Deploy and verify the Vortex bridge contracts with Forge.

- The Solidity sources live in a Foundry project outside this package

- Verification goes to Etherscan, or to the custom explorer
  of the network, see :py:data:`vortex_deploy.chain.EXPLORERS`

- See `Foundry book <https://book.getfoundry.sh/>`__ for more information.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from shutil import which
from subprocess import DEVNULL, PIPE
from typing import Literal, Mapping

import psutil
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from vortex_deploy.abi import get_artifact_path, get_deployed_contract
from vortex_deploy.chain import ExplorerInfo
from vortex_deploy.tx import assert_transaction_success

logger = logging.getLogger(__name__)

#: Crash unless forge completes in 4 minutes
DEFAULT_TIMEOUT = 4 * 60

Verifier = Literal["etherscan", "blockscout", "sourcify"]


class ForgeFailed(Exception):
    """Forge command failed."""


@dataclass(slots=True, frozen=True)
class ForgeVerification:
    """How ``forge create --verify`` verifies the deployed contract."""

    verifier: Verifier = "etherscan"

    #: Needed for Etherscan
    api_key: str = ""

    #: Custom explorer API, e.g. Blastscan
    verifier_url: str | None = None

    retries: int = 9
    delay: int = 20

    @classmethod
    def for_explorer(cls, api_key: str, explorer: ExplorerInfo | None) -> "ForgeVerification":
        """Verify on the default Etherscan, or the custom explorer when the network has one."""
        return cls(
            verifier="etherscan",
            api_key=api_key,
            verifier_url=explorer.api_url if explorer else None,
        )

    def get_args(self) -> list[str]:
        if self.verifier == "etherscan" and not self.api_key:
            raise ValueError("Etherscan verification needs an API key")
        if self.verifier == "blockscout" and not self.verifier_url:
            raise ValueError("verifier_url is required when using Blockscout verifier")

        # Tuned retry parameters
        # https://github.com/foundry-rs/foundry/issues/6953
        args = [
            "--verify",
            "--verifier",
            self.verifier,
            "--retries",
            str(self.retries),
            "--delay",
            str(self.delay),
        ]
        if self.api_key:
            args += ["--etherscan-api-key", self.api_key]
        if self.verifier_url:
            args += ["--verifier-url", self.verifier_url]
        return args


def build_forge_create_command(
    forge: str,
    json_rpc_url: str,
    contract_file: Path | str,
    contract_name: str,
    constructor_args: list[str] | None = None,
    verification: ForgeVerification | None = None,
    unlocked_sender: str | None = None,
    gas_price: int | Literal["auto"] = "auto",
    rpc_headers: Mapping[str, str] | None = None,
    censored=False,
) -> list[str]:
    """Build ``forge create`` command line.

    The private key is never part of the command.

    :param unlocked_sender:
        Send from an account unlocked on the node, e.g. on a Tenderly fork.

    :param gas_price:
        Fixed gas price in wei, or ``auto`` to let forge estimate.

    :param rpc_headers:
        Extra headers for the JSON-RPC requests, e.g. Sei ``x-apikey``.

    :param censored:
        Replace header values with ``***``, for logging.
    """
    contract_file = Path(contract_file)
    assert contract_file.suffix == ".sol", f"Not Solidity source file: {contract_file}"

    cmd = [
        forge,
        "create",
        "--broadcast",
        "--rpc-url",
        json_rpc_url,
    ]

    for name, value in (rpc_headers or {}).items():
        cmd += ["--rpc-headers", f"{name}: {'***' if censored else value}"]

    if gas_price != "auto":
        assert type(gas_price) == int, f"Bad gas price: {gas_price}"
        cmd += ["--gas-price", str(gas_price)]

    if unlocked_sender:
        cmd += ["--unlocked", "--from", unlocked_sender]

    if verification:
        cmd += verification.get_args()

    cmd.append(f"{Path('src') / contract_file}:{contract_name}")

    if constructor_args:
        cmd.append("--constructor-args")
        cmd += [str(a) for a in constructor_args]

    return cmd


def parse_forge_output(output: str) -> tuple[str, str]:
    """Read deployed address and transaction hash from ``forge create`` output.

    :raise ForgeFailed:
        Output does not have both
    """
    address = tx_hash = None

    for line in output.split("\n"):
        # Deployed to: 0x604Da6680Cb97A87403600B9AafBE60eeda97CA4
        if line.startswith("Deployed to: "):
            address = line.split(":")[1].strip()

        if line.startswith("Transaction hash: "):
            tx_hash = line.split(":")[1].strip()

    if not (address and tx_hash):
        raise ForgeFailed(f"Could not parse forge output:\n{output}")

    return address, tx_hash


def _exec_cmd(
    cmd_line: list[str],
    censored_command: str,
    cwd: Path,
    timeout=DEFAULT_TIMEOUT,
) -> tuple[str, str]:
    """Run forge.

    :return:
        Tuple(deployed contract address, tx hash)
    """
    for x in cmd_line:
        assert type(x) == str, f"Got non-string in command line: {x} in {cmd_line}"

    proc = psutil.Popen(cmd_line, stdin=DEVNULL, stdout=PIPE, stderr=PIPE, cwd=cwd)
    result = proc.wait(timeout)

    try:
        output = proc.stdout.read().decode("utf-8") + proc.stderr.read().decode("utf-8")
    finally:
        proc.stdout.close()
        proc.stderr.close()

    # Cached compilation still prints "Deployed to:" on success
    if result != 0 and "Deployed to:" not in output:
        raise ForgeFailed(f"forge return code {result} when running: {censored_command}\nOutput is:\n{output}")

    logger.debug("forge result:\n%s", output)
    return parse_forge_output(output)


def deploy_contract_with_forge(
    web3: Web3,
    project_folder: Path,
    contract_file: Path | str,
    contract_name: str,
    deployer: LocalAccount | str,
    constructor_args: list[str] | None = None,
    verification: ForgeVerification | None = None,
    gas_price: int | Literal["auto"] = "auto",
    rpc_headers: Mapping[str, str] | None = None,
    json_rpc_url: str | None = None,
    timeout=DEFAULT_TIMEOUT,
    deploy_retries: int = 1,
) -> tuple[Contract, HexBytes]:
    """Deploy and verify a contract with ``forge create``.

    Example:

    .. code-block:: python

        bridge, tx_hash = deploy_contract_with_forge(
            web3,
            CONTRACTS_ROOT,
            "VortexStargateBridge.sol",
            "VortexStargateBridge",
            deployer,
            constructor_args=[vortex, bridge, vault],
            verification=ForgeVerification.for_explorer(api_key, EXPLORERS.get(network)),
        )

    Assumes standard Foundry project layout with foundry.toml, src and out.

    :param project_folder:
        Foundry project with `foundry.toml` in the root.

    :param contract_file:
        Contract path relative to ``src``.

    :param deployer:
        Local account with a private key, or an address unlocked on the node.

    :param constructor_args:
        Constructor arguments, stringified for forge.

    :param verification:
        Verify the contract after deployment. ``None`` to skip.

    :param gas_price:
        Fixed gas price in wei, or ``auto``.

    :param rpc_headers:
        Extra JSON-RPC headers. Values are kept out of the logs.

    :param json_rpc_url:
        RPC forge talks to. Defaults to the web3 provider URL.

    :param deploy_retries:
        Number of attempts when forge reports ``"contract was not deployed"``.

        Forge turns lost receipts on load-balanced RPCs into this error (foundry#1362).

    :raise ForgeFailed:
        Running forge failed, or the deployment transaction reverted.

    :return:
        Contract and deployment tx hash.
    """
    assert isinstance(project_folder, Path), f"Got non-Path project folder: {type(project_folder)} {project_folder}"
    assert type(contract_name) == str
    assert (project_folder / "foundry.toml").exists(), f"foundry.toml missing: {project_folder}"

    src_contract_file = project_folder / "src" / contract_file
    assert src_contract_file.exists(), f"Contract does not exist: {src_contract_file}"

    forge = which("forge")
    assert forge is not None, "No forge command in path, needed for the contract deployment"

    if json_rpc_url is None:
        json_rpc_url = web3.provider.endpoint_uri

    if isinstance(deployer, LocalAccount):
        private_key = deployer.key.hex()
        deployer_address = deployer.address
        unlocked_sender = None
    else:
        private_key = None
        deployer_address = deployer
        unlocked_sender = deployer

    command_args = dict(
        constructor_args=constructor_args,
        verification=verification,
        unlocked_sender=unlocked_sender,
        gas_price=gas_price,
        rpc_headers=rpc_headers,
    )
    cmd_line = build_forge_create_command(forge, json_rpc_url, contract_file, contract_name, **command_args)
    censored_command = " ".join(build_forge_create_command(forge, json_rpc_url, contract_file, contract_name, censored=True, **command_args))

    if private_key:
        # Inject private key after logging (not shown in logs)
        cmd_line = cmd_line[0:2] + ["--private-key", private_key] + cmd_line[2:]

    for attempt in range(1, deploy_retries + 1):
        logger.info(
            "Deploying %s with forge (attempt %d/%d), deployer %s, command: %s",
            contract_name,
            attempt,
            deploy_retries,
            deployer_address,
            censored_command,
        )
        try:
            contract_address, tx_hash = _exec_cmd(cmd_line, censored_command=censored_command, cwd=project_folder, timeout=timeout)
            break
        except ForgeFailed as e:
            if attempt < deploy_retries and "contract was not deployed" in str(e):
                logger.warning("Forge deploy of %s failed, retrying in 5s: %s", contract_name, str(e)[:120])
                time.sleep(5)
                continue
            raise

    artifact = get_artifact_path(project_folder / "out", contract_file, contract_name)
    instance = get_deployed_contract(web3, artifact, ChecksumAddress(contract_address))

    tx_hash = HexBytes(tx_hash)
    assert_transaction_success(web3, tx_hash, RaisedException=ForgeFailed)

    logger.info("%s deployed at %s, tx %s", contract_name, instance.address, tx_hash.hex())
    return instance, tx_hash
