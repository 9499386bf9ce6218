"""Chain definitions for supported EVM networks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chain:
    """An EVM-compatible blockchain network."""

    name: str
    chain_id: int
    native_symbol: str

    @property
    def coin_prefix(self) -> bytes:
        """Coin identifier of the native currency, e.g. ``b"ETH/"``.

        Token coin identifiers append the 20-byte contract address to it.
        """
        return f"{self.native_symbol}/".encode("ascii")


CHAINS: dict[str, Chain] = {
    "ethereum": Chain(name="ethereum", chain_id=1, native_symbol="ETH"),
    "sepolia": Chain(name="sepolia", chain_id=11155111, native_symbol="ETH"),
    "holesky": Chain(name="holesky", chain_id=17000, native_symbol="ETH"),
}


def get_chain(name: str) -> Chain:
    """Get a chain by name. Raises ``KeyError`` if not found."""
    if name not in CHAINS:
        raise KeyError(
            f"Unknown chain '{name}'. Available: {list_chain_names()}"
        )
    return CHAINS[name]


def list_chain_names() -> list[str]:
    """Return the names of all supported chains."""
    return list(CHAINS.keys())
