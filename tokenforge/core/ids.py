"""
Deterministic address derivation.

Addresses are EIP-55 checksummed hex strings. Contract addresses never depend
on deployment order when created through create2.
"""

from typing import Union

from eth_hash.auto import keccak
from eth_utils import to_bytes, to_canonical_address, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEAD_ADDRESS = "0x000000000000000000000000000000000000dEaD"

BytesLike = Union[bytes, str]


def _as_bytes(value: BytesLike) -> bytes:
    if isinstance(value, bytes):
        return value
    return to_bytes(hexstr=value)


def checksum(address: BytesLike) -> str:
    """Normalize an address to its checksummed form."""
    return to_checksum_address(address)


def salt_for(address: str) -> bytes:
    """
    Salt used by the factories: keccak256 of the packed 20-byte address.

    Example:
        salt_for(token.address) -> 32 bytes
    """
    return keccak(to_canonical_address(address))


def init_code_hash(init_code: bytes) -> bytes:
    return keccak(init_code)


def create2_address(deployer: str, salt: BytesLike, code_hash: BytesLike) -> str:
    """
    EIP-1014 address: keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]

    Args:
        deployer: Address of the deploying contract
        salt: 32-byte salt
        code_hash: keccak256 of the init code

    Returns:
        Checksummed address
    """
    salt_bytes = _as_bytes(salt)
    hash_bytes = _as_bytes(code_hash)
    if len(salt_bytes) != 32 or len(hash_bytes) != 32:
        raise ValueError("salt and init code hash must be 32 bytes")
    data = b"\xff" + to_canonical_address(deployer) + salt_bytes + hash_bytes
    return to_checksum_address(keccak(data)[12:])


def create_address(sender: str, nonce: int) -> str:
    """
    Address for a plain (non-create2) deployment by sender.

    Derived from keccak256(sender ++ nonce as 32 bytes); stable for a given
    sender and nonce.
    """
    data = to_canonical_address(sender) + nonce.to_bytes(32, "big")
    return to_checksum_address(keccak(data)[12:])


def account_address(label: str) -> str:
    """Externally-owned account address derived from a label."""
    return to_checksum_address(keccak(label.encode("utf-8"))[12:])
