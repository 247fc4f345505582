"""Deployment records.

Each deployed contract is written to ``deployments/<network>/<name>.json``,
so later runs and other tooling can find the addresses.
"""

import datetime
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from vortex_deploy.constants import DeploymentNetwork

logger = logging.getLogger(__name__)

#: Default folder for deployment records, relative to the working directory
DEFAULT_DEPLOYMENTS_FOLDER = Path("deployments")


@dataclass(slots=True)
class DeploymentRecord:
    """One deployed contract."""

    #: Deployment name, e.g. ``VortexAcrossBridge``
    name: str

    #: The address users interact with. The proxy address for proxied contracts.
    address: str

    #: Deployment transaction
    tx_hash: str

    chain_id: int | None

    #: Constructor arguments
    args: list[str] = field(default_factory=list)

    #: Implementation behind the proxy, if proxied
    implementation: str | None = None

    #: Proxy initialiser arguments
    initialize_args: list[str] = field(default_factory=list)

    #: UTC, ISO 8601
    deployed_at: str = field(default_factory=lambda: datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None, microsecond=0).isoformat())


def get_deployment_path(folder: Path, network: DeploymentNetwork, name: str) -> Path:
    return folder / network.value / f"{name}.json"


def save_deployment(folder: Path, network: DeploymentNetwork, record: DeploymentRecord) -> Path:
    """Write a deployment record, replacing an earlier one of the same name.

    :return:
        Path of the written file
    """
    assert isinstance(folder, Path), f"Expected Path, got {type(folder)}"
    path = get_deployment_path(folder, network, record.name)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wt") as f:
        json.dump(asdict(record), f, indent=2)
    logger.info("Saved %s deployment on %s to %s", record.name, network.value, path)
    return path


def load_deployment(folder: Path, network: DeploymentNetwork, name: str) -> DeploymentRecord | None:
    """Read a deployment record.

    :return:
        ``None`` if the contract has not been deployed on the network
    """
    path = get_deployment_path(folder, network, name)
    if not path.exists():
        return None
    with open(path, "rt") as f:
        data = json.load(f)
    return DeploymentRecord(**data)
