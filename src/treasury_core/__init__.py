"""Treasury Core - transfer normalization and approval policies for custody wallets."""

from treasury_core.policy import (
    BlackbirdPolicy,
    PolicyEnvelope,
    build_approver_set,
    pack_policy,
    unpack_policy,
)
from treasury_core.wallet import EthereumWallet, Transfer, WalletAdapter, build_wallet

__all__ = [
    "BlackbirdPolicy",
    "EthereumWallet",
    "PolicyEnvelope",
    "Transfer",
    "WalletAdapter",
    "build_approver_set",
    "build_wallet",
    "pack_policy",
    "unpack_policy",
]
