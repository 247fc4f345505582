"""Access control role ids of the Carbon and Vortex contracts."""

from hexbytes import HexBytes
from web3 import Web3


def role_id(name: str) -> HexBytes:
    """keccak256 of the role name, as OpenZeppelin AccessControl roles are defined."""
    return Web3.keccak(text=name)


class Roles:
    """Role ids grouped by the contract that checks them."""

    class Upgradeable:
        ROLE_ADMIN = role_id("ROLE_ADMIN")

    class Vault:
        ROLE_ASSET_MANAGER = role_id("ROLE_ASSET_MANAGER")


#: All role ids
ROLE_IDS: list[HexBytes] = [
    Roles.Upgradeable.ROLE_ADMIN,
    Roles.Vault.ROLE_ASSET_MANAGER,
]
