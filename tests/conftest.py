"""Shared fixtures for the Treasury Core test suite."""

from __future__ import annotations

import pytest
import rlp
from eth_keys import keys

from treasury_core.wallet.chains import get_chain
from treasury_core.wallet.ethereum import ERC20_TRANSFER_SELECTOR, EthereumWallet, LegacyTransaction

PRIVATE_KEY = keys.PrivateKey(bytes.fromhex("4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"))

RECIPIENT = bytes.fromhex("3535353535353535353535353535353535353535")
TOKEN_CONTRACT = bytes.fromhex("dac17f958d2ee523a2206206994597c13d831ec7")

# threshold(1, signer("foo"), signer("bar")), i.e. "foo OR bar"
FOO_OR_BAR = bytes.fromhex("080210011a0708032203666f6f1a0708032203626172")


def make_raw_tx(
    *,
    to: bytes = RECIPIENT,
    value: int = 0,
    data: bytes = b"",
    nonce: int = 9,
    gas_price: int = 20 * 10**9,
    gas: int = 21000,
) -> bytes:
    """Encode an unsigned legacy transaction (``v = r = s = 0``)."""
    tx = LegacyTransaction(
        nonce=nonce,
        gas_price=gas_price,
        gas=gas,
        to=to,
        value=value,
        data=data,
        v=0,
        r=0,
        s=0,
    )
    return rlp.encode(tx)


def erc20_call(recipient: bytes, amount: int) -> bytes:
    """ABI-encode ``transfer(recipient, amount)``."""
    return ERC20_TRANSFER_SELECTOR + recipient.rjust(32, b"\x00") + amount.to_bytes(32, "big")


@pytest.fixture
def private_key() -> keys.PrivateKey:
    return PRIVATE_KEY


@pytest.fixture
def mainnet():
    return get_chain("ethereum")


@pytest.fixture
def wallet(mainnet) -> EthereumWallet:
    return EthereumWallet(PRIVATE_KEY.public_key.to_bytes(), mainnet)
