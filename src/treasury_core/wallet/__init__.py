"""Chain adapters for Treasury Core.

Each adapter turns a chain's raw unsigned transaction bytes into a
chain-agnostic :class:`~treasury_core.wallet.base.Transfer` that the
authorization pipeline checks against the wallet's approval policy.
"""

from treasury_core.wallet.base import Transfer, WalletAdapter
from treasury_core.wallet.chains import CHAINS, Chain, get_chain, list_chain_names
from treasury_core.wallet.ethereum import (
    ERC20_TRANSFER_SELECTOR,
    EthereumTransfer,
    EthereumWallet,
    parse_ethereum_transaction,
)
from treasury_core.wallet.factory import build_wallet, list_wallet_types

__all__ = [
    "CHAINS",
    "Chain",
    "ERC20_TRANSFER_SELECTOR",
    "EthereumTransfer",
    "EthereumWallet",
    "Transfer",
    "WalletAdapter",
    "build_wallet",
    "get_chain",
    "list_chain_names",
    "list_wallet_types",
    "parse_ethereum_transaction",
]
