"""Wallet factory that maps wallet type names to concrete adapters."""

from __future__ import annotations

import importlib
import logging

from treasury_core.wallet.base import WalletAdapter
from treasury_core.wallet.chains import get_chain

logger = logging.getLogger(__name__)

# Registry of supported wallet types -> their implementation classes.
_WALLET_FACTORIES: dict[str, str] = {
    "ethereum": "treasury_core.wallet.ethereum.EthereumWallet",
}


def _import_wallet_class(dotted_path: str) -> type[WalletAdapter]:
    """Dynamically import a wallet class from its fully-qualified path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    if not (isinstance(cls, type) and issubclass(cls, WalletAdapter)):
        raise TypeError(
            f"Expected a WalletAdapter subclass at '{dotted_path}', got {cls!r}"
        )
    return cls


def list_wallet_types() -> list[str]:
    """Return the names of all supported wallet types."""
    return sorted(_WALLET_FACTORIES)


def build_wallet(
    wallet_type: str,
    public_key: bytes,
    chain_name: str = "ethereum",
) -> WalletAdapter:
    """Create a wallet adapter for *public_key* on the named chain.

    Raises
    ------
    ValueError
        If *wallet_type* is unknown.
    KeyError
        If *chain_name* is not a supported chain.
    treasury_core.exceptions.InvalidPublicKey
        If the key cannot be loaded.
    """
    if wallet_type not in _WALLET_FACTORIES:
        raise ValueError(
            f"Unknown wallet type '{wallet_type}'. "
            f"Supported wallet types: {list_wallet_types()}"
        )
    chain = get_chain(chain_name)
    wallet_cls = _import_wallet_class(_WALLET_FACTORIES[wallet_type])
    wallet = wallet_cls(public_key, chain)
    logger.info(
        "Created %s wallet %s (chain=%s, chain_id=%d)",
        wallet_type,
        wallet.address,
        chain.name,
        chain.chain_id,
    )
    return wallet
