"""Tests for the Ethereum wallet adapter and transaction classifier."""

from __future__ import annotations

import pytest
import rlp
from eth_account import Account
from eth_keys import keys

from conftest import (
    PRIVATE_KEY,
    RECIPIENT,
    TOKEN_CONTRACT,
    erc20_call,
    make_raw_tx,
)
from treasury_core.exceptions import (
    DecodeError,
    InvalidPublicKey,
    MalformedAddress,
    ParseError,
    SelectorMismatch,
    ShapeViolation,
    ShortPayload,
)
from treasury_core.wallet.chains import get_chain
from treasury_core.wallet.ethereum import (
    EthereumWallet,
    UnsignedLegacyTransaction,
    decode_transaction,
    parse_ethereum_transaction,
    signing_hash,
)


# ============================================================
# ADDRESS
# ============================================================


class TestAddress:
    def test_address_matches_eth_account(self, wallet):
        expected = Account.from_key(PRIVATE_KEY.to_bytes()).address
        assert wallet.address == expected

    def test_compressed_and_prefixed_keys(self, mainnet):
        public_key = PRIVATE_KEY.public_key
        expected = public_key.to_checksum_address()

        compressed = EthereumWallet(public_key.to_compressed_bytes(), mainnet)
        prefixed = EthereumWallet(b"\x04" + public_key.to_bytes(), mainnet)

        assert compressed.address == expected
        assert prefixed.address == expected

    def test_rejects_bad_key_length(self, mainnet):
        with pytest.raises(InvalidPublicKey):
            EthereumWallet(b"\x02" * 20, mainnet)

    def test_rejects_off_curve_key(self, mainnet):
        with pytest.raises(InvalidPublicKey):
            EthereumWallet(b"\x00" * 64, mainnet)
        with pytest.raises(InvalidPublicKey):
            EthereumWallet(b"\x04" + b"\x00" * 64, mainnet)


# ============================================================
# NATIVE TRANSFERS
# ============================================================


class TestNativeTransfer:
    def test_native_transfer(self, wallet):
        transfer = wallet.parse_tx(make_raw_tx(value=10**18))

        assert transfer.to == RECIPIENT
        assert transfer.amount == 10**18
        assert transfer.coin_identifier == b"ETH/"
        assert transfer.contract is None
        assert not transfer.is_token

    def test_amount_above_64_bits(self, wallet):
        transfer = wallet.parse_tx(make_raw_tx(value=2**64))
        assert transfer.amount == 2**64

    def test_eip155_signing_hash(self, wallet):
        # Example transaction from EIP-155.
        raw = make_raw_tx(value=10**18)
        transfer = wallet.parse_tx(raw)
        assert transfer.data_for_signing.hex() == (
            "daf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"
        )

    def test_signing_hash_depends_on_chain(self, mainnet):
        raw = make_raw_tx(value=1)
        public_key = PRIVATE_KEY.public_key.to_bytes()
        on_mainnet = EthereumWallet(public_key, mainnet).parse_tx(raw)
        on_sepolia = EthereumWallet(public_key, get_chain("sepolia")).parse_tx(raw)
        assert on_mainnet.data_for_signing != on_sepolia.data_for_signing

    def test_signing_hash_recovers_signer(self, wallet):
        tx = {
            "nonce": 3,
            "gasPrice": 10**9,
            "gas": 21000,
            "to": Account.from_key(b"\x01" * 32).address,
            "value": 12345,
            "data": b"",
            "chainId": 1,
        }
        signed = Account.sign_transaction(tx, PRIVATE_KEY.to_bytes())
        raw = make_raw_tx(
            to=bytes.fromhex(tx["to"][2:]),
            value=tx["value"],
            nonce=tx["nonce"],
            gas_price=tx["gasPrice"],
            gas=tx["gas"],
        )

        transfer = wallet.parse_tx(raw)

        recovery_id = signed.v - 35 - 2 * tx["chainId"]
        signature = keys.Signature(vrs=(recovery_id, signed.r, signed.s))
        recovered = signature.recover_public_key_from_msg_hash(transfer.data_for_signing)
        assert recovered == PRIVATE_KEY.public_key

    def test_six_field_unsigned_transaction(self, wallet):
        raw = rlp.encode(
            UnsignedLegacyTransaction(
                nonce=9,
                gas_price=20 * 10**9,
                gas=21000,
                to=RECIPIENT,
                value=10**18,
                data=b"",
            )
        )
        assert wallet.parse_tx(raw) == wallet.parse_tx(make_raw_tx(value=10**18))

    def test_signed_transaction_is_parsed_as_unsigned(self, wallet):
        unsigned = make_raw_tx(value=10**18)
        signed = rlp.encode(decode_transaction(unsigned).copy(v=37, r=1, s=2))

        assert wallet.parse_tx(signed) == wallet.parse_tx(unsigned)


# ============================================================
# ERC-20 TRANSFERS
# ============================================================


class TestERC20Transfer:
    def test_token_transfer(self, wallet):
        raw = make_raw_tx(to=TOKEN_CONTRACT, data=erc20_call(RECIPIENT, 1000))
        transfer = wallet.parse_tx(raw)

        assert transfer.to == RECIPIENT
        assert transfer.amount == 1000
        assert transfer.coin_identifier == b"ETH/" + TOKEN_CONTRACT
        assert transfer.contract == TOKEN_CONTRACT
        assert transfer.is_token
        assert len(transfer.data_for_signing) == 32

    def test_intermediate_transfer(self, mainnet):
        raw = make_raw_tx(to=TOKEN_CONTRACT, data=erc20_call(RECIPIENT, 5))
        tx = parse_ethereum_transaction(mainnet.chain_id, raw)

        assert tx.contract == TOKEN_CONTRACT
        assert tx.to == RECIPIENT
        assert tx.amount == 5
        assert tx.data_for_signing == signing_hash(decode_transaction(raw), 1)

    def test_max_amount(self, wallet):
        raw = make_raw_tx(to=TOKEN_CONTRACT, data=erc20_call(RECIPIENT, 2**256 - 1))
        assert wallet.parse_tx(raw).amount == 2**256 - 1

    def test_trailing_call_data_is_ignored(self, wallet):
        data = erc20_call(RECIPIENT, 7) + b"\xff" * 4
        transfer = wallet.parse_tx(make_raw_tx(to=TOKEN_CONTRACT, data=data))
        assert transfer.amount == 7

    def test_short_payload(self, wallet):
        data = erc20_call(RECIPIENT, 1000)[:-1]
        with pytest.raises(ShortPayload):
            wallet.parse_tx(make_raw_tx(to=TOKEN_CONTRACT, data=data))

    def test_wrong_selector(self, wallet):
        # approve(address,uint256)
        data = bytes.fromhex("095ea7b3") + erc20_call(RECIPIENT, 1000)[4:]
        with pytest.raises(SelectorMismatch):
            wallet.parse_tx(make_raw_tx(to=TOKEN_CONTRACT, data=data))

    def test_malformed_address(self, wallet):
        data = bytearray(erc20_call(RECIPIENT, 1000))
        data[4] = 0x01
        with pytest.raises(MalformedAddress):
            wallet.parse_tx(make_raw_tx(to=TOKEN_CONTRACT, data=bytes(data)))


# ============================================================
# SHAPE AND DECODING ERRORS
# ============================================================


class TestInvalidTransactions:
    def test_value_and_data(self, wallet):
        raw = make_raw_tx(value=1, data=erc20_call(RECIPIENT, 1))
        with pytest.raises(ShapeViolation, match="both value and data are set"):
            wallet.parse_tx(raw)

    def test_neither_value_nor_data(self, wallet):
        with pytest.raises(ShapeViolation, match="both value and data are empty"):
            wallet.parse_tx(make_raw_tx())

    def test_contract_creation(self, wallet):
        with pytest.raises(ShapeViolation, match="recipient is empty"):
            wallet.parse_tx(make_raw_tx(to=b"", value=1))

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"\x02\xc0",
            b"\xc5\x01\x02\x03\x04\x05",
            b"\xff\xff\xff",
            b"not rlp at all",
        ],
        ids=["empty", "typed", "wrong-field-count", "truncated", "garbage"],
    )
    def test_undecodable(self, wallet, raw):
        with pytest.raises(DecodeError):
            wallet.parse_tx(raw)

    def test_trailing_bytes(self, wallet):
        with pytest.raises(DecodeError):
            wallet.parse_tx(make_raw_tx(value=1) + b"\x00")

    def test_errors_are_parse_errors(self, wallet):
        with pytest.raises(ParseError):
            wallet.parse_tx(b"")
        with pytest.raises(ValueError):
            wallet.parse_tx(make_raw_tx())


# ============================================================
# PROPERTIES
# ============================================================


def test_parsing_is_idempotent(wallet):
    raw = make_raw_tx(to=TOKEN_CONTRACT, data=erc20_call(RECIPIENT, 42))
    assert wallet.parse_tx(raw) == wallet.parse_tx(raw)


def test_end_to_end_token_transfer(wallet):
    destination = bytes.fromhex("00000000000000000000000000000000000000aa")
    data = (
        bytes.fromhex("a9059cbb")
        + b"\x00" * 12 + destination
        + (1000).to_bytes(32, "big")
    )
    transfer = wallet.parse_tx(make_raw_tx(to=TOKEN_CONTRACT, data=data))

    assert transfer.to == destination
    assert transfer.amount == 1000
    assert transfer.coin_identifier == b"ETH/" + TOKEN_CONTRACT
