"""secp256k1 public-key loading using eth-keys."""

from __future__ import annotations

from eth_keys import keys
from eth_keys.exceptions import ValidationError
from eth_utils import to_checksum_address

from treasury_core.exceptions import InvalidPublicKey


def load_public_key(raw: bytes) -> keys.PublicKey:
    """Load a secp256k1 public key.

    Parameters
    ----------
    raw:
        33-byte compressed key, 64-byte raw ``X || Y`` key, or 65-byte
        uncompressed key with the ``0x04`` prefix.

    Raises
    ------
    InvalidPublicKey
        If the bytes have another length or are not a point on the curve.
    """
    length = len(raw)
    if length == 65 and raw[0] == 0x04:
        raw = raw[1:]
    if len(raw) not in (33, 64):
        raise InvalidPublicKey(
            f"Unsupported public key encoding ({length} bytes); expected a "
            "33-byte compressed, 64-byte raw or 65-byte 0x04-prefixed key."
        )
    try:
        if len(raw) == 33:
            return keys.PublicKey.from_compressed_bytes(raw)
        key = keys.PublicKey(raw)
        # eth-keys checks only the length of raw X || Y keys.
        on_curve = keys.PublicKey.from_compressed_bytes(key.to_compressed_bytes())
    except (ValidationError, ValueError) as exc:
        raise InvalidPublicKey(f"Invalid secp256k1 public key: {exc}") from exc
    if on_curve != key:
        raise InvalidPublicKey("Invalid secp256k1 public key: point is not on the curve.")
    return key


def public_key_to_address(key: keys.PublicKey) -> str:
    """Return the EIP-55 checksummed Ethereum address of *key*."""
    return to_checksum_address(key.to_canonical_address())
