"""Ethereum wallet adapter: classifies unsigned transactions as ETH or ERC-20 transfers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import rlp
from eth_utils import big_endian_to_int, keccak
from rlp.exceptions import RLPException
from rlp.sedes import Binary, big_endian_int, binary

from treasury_core.exceptions import (
    DecodeError,
    MalformedAddress,
    SelectorMismatch,
    ShapeViolation,
    ShortPayload,
)
from treasury_core.wallet.base import Transfer, WalletAdapter
from treasury_core.wallet.chains import Chain
from treasury_core.wallet.keys import load_public_key, public_key_to_address

logger = logging.getLogger(__name__)

# keccak256("transfer(address,uint256)")[:4]
ERC20_TRANSFER_SELECTOR = bytes.fromhex("a9059cbb")
_WORD = 32
_ERC20_TRANSFER_LENGTH = len(ERC20_TRANSFER_SELECTOR) + 2 * _WORD

address_sedes = Binary.fixed_length(20, allow_empty=True)

_UNSIGNED_FIELDS = (
    ("nonce", big_endian_int),
    ("gas_price", big_endian_int),
    ("gas", big_endian_int),
    ("to", address_sedes),
    ("value", big_endian_int),
    ("data", binary),
)


class UnsignedLegacyTransaction(rlp.Serializable):
    """Pre-EIP-155 unsigned legacy transaction (six fields)."""

    fields = _UNSIGNED_FIELDS


class LegacyTransaction(rlp.Serializable):
    """Legacy transaction envelope. Unsigned transactions carry ``v = r = s = 0``."""

    fields = _UNSIGNED_FIELDS + (
        ("v", big_endian_int),
        ("r", big_endian_int),
        ("s", big_endian_int),
    )


@dataclass(frozen=True)
class EthereumTransfer:
    """An ETH transfer or an ERC-20 transfer.

    ``contract`` is ``None`` when the native currency is moved, otherwise
    the address of the token contract.
    """

    to: bytes
    amount: int
    contract: Optional[bytes]
    data_for_signing: bytes


def decode_transaction(raw: bytes) -> LegacyTransaction:
    """Decode a legacy RLP transaction envelope.

    Both the 9-field envelope and the 6-field unsigned list are accepted.
    A 9-field transaction that already carries a signature is accepted too;
    ``v``, ``r`` and ``s`` are ignored by the parser, which only ever
    computes the EIP-155 signing hash.

    Raises
    ------
    DecodeError
        If *raw* is empty, a typed (EIP-2718) envelope, or not a well-formed
        legacy transaction.
    """
    if not raw:
        raise DecodeError("Invalid Ethereum transaction: empty input.")
    if raw[0] < 0xC0:
        raise DecodeError(
            f"Invalid Ethereum transaction: unsupported envelope prefix "
            f"0x{raw[0]:02x}, only legacy RLP transactions are supported."
        )
    try:
        items = rlp.decode(raw)
        if len(items) == len(_UNSIGNED_FIELDS):
            unsigned = UnsignedLegacyTransaction.deserialize(items)
            return LegacyTransaction(**unsigned.as_dict(), v=0, r=0, s=0)
        if len(items) == len(_UNSIGNED_FIELDS) + 3:
            return LegacyTransaction.deserialize(items)
    except RLPException as exc:
        raise DecodeError(f"Invalid Ethereum transaction: {exc}") from exc
    raise DecodeError(
        f"Invalid Ethereum transaction: expected 6 or 9 fields, got {len(items)}."
    )


def signing_hash(tx: LegacyTransaction, chain_id: int) -> bytes:
    """EIP-155 replay-protected hash the signer must sign."""
    return keccak(rlp.encode(tx.copy(v=chain_id, r=0, s=0)))


def parse_ethereum_transaction(chain_id: int, raw: bytes) -> EthereumTransfer:
    """Parse an unsigned transaction that is either an ETH or an ERC-20 transfer.

    Normal ETH transfers set only ``value``; contract calls (ERC-20
    transfers) set only ``data``.
    """
    tx = decode_transaction(raw)
    if not tx.to:
        raise ShapeViolation(
            "Invalid Ethereum transaction: recipient is empty "
            "(contract creation is not a transfer)."
        )

    has_value = tx.value > 0
    has_data = len(tx.data) > 0

    if has_value and has_data:
        raise ShapeViolation(
            "Invalid Ethereum transaction: both value and data are set. "
            "For normal ETH transfers set only value, for contract calls "
            "(e.g. ERC-20 transfers) set only data."
        )
    elif not has_value and not has_data:
        raise ShapeViolation(
            "Invalid Ethereum transaction: both value and data are empty. "
            "For normal ETH transfers set only value, for contract calls "
            "(e.g. ERC-20 transfers) set only data."
        )
    elif has_value:
        logger.debug("Native transfer of %d wei to 0x%s", tx.value, tx.to.hex())
        return EthereumTransfer(
            to=tx.to,
            amount=tx.value,
            contract=None,
            data_for_signing=signing_hash(tx, chain_id),
        )
    else:
        return parse_erc20_transfer(chain_id, tx)


def parse_erc20_transfer(chain_id: int, tx: LegacyTransaction) -> EthereumTransfer:
    """Interpret the call data of *tx* as ``transfer(address,uint256)``.

    Layout: 4-byte selector, 32-byte left-padded recipient, 32-byte amount.
    """
    data = tx.data
    if len(data) < _ERC20_TRANSFER_LENGTH:
        raise ShortPayload(
            f"Invalid ERC-20 transfer: data is too short "
            f"({len(data)} bytes, need {_ERC20_TRANSFER_LENGTH})."
        )

    method = data[:4]
    recipient = data[4:4 + _WORD]
    amount = data[4 + _WORD:_ERC20_TRANSFER_LENGTH]

    if method != ERC20_TRANSFER_SELECTOR:
        raise SelectorMismatch(
            f"Invalid ERC-20 transfer: method 0x{method.hex()} is not "
            f"transfer(address,uint256) (0x{ERC20_TRANSFER_SELECTOR.hex()})."
        )

    if any(recipient[:12]):
        raise MalformedAddress(
            "Invalid ERC-20 transfer: recipient address is not 20 bytes."
        )

    logger.debug(
        "ERC-20 transfer on contract 0x%s to 0x%s",
        tx.to.hex(),
        recipient[12:].hex(),
    )
    return EthereumTransfer(
        to=recipient[12:],
        amount=big_endian_to_int(amount),
        contract=tx.to,
        data_for_signing=signing_hash(tx, chain_id),
    )


class EthereumWallet(WalletAdapter):
    """Wallet adapter for Ethereum and EVM chains sharing its transaction format.

    Parameters
    ----------
    public_key:
        The wallet's secp256k1 public key (compressed or uncompressed).
    chain:
        Network whose chain id is used for EIP-155 signing hashes.
    """

    def __init__(self, public_key: bytes, chain: Chain) -> None:
        self._key = load_public_key(public_key)
        self.chain = chain

    @property
    def address(self) -> str:
        return public_key_to_address(self._key)

    def parse_tx(self, raw: bytes) -> Transfer:
        tx = parse_ethereum_transaction(self.chain.chain_id, raw)

        coin_identifier = self.chain.coin_prefix
        if tx.contract is not None:
            coin_identifier += tx.contract

        return Transfer(
            to=tx.to,
            amount=tx.amount,
            coin_identifier=coin_identifier,
            data_for_signing=tx.data_for_signing,
        )
