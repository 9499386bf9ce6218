"""Chain-agnostic transfer model and the adapter interface every chain implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Transfer(BaseModel):
    """A parsed outgoing transfer, independent of the chain it came from.

    ``coin_identifier`` is the chain currency prefix (e.g. ``b"ETH/"``) for
    native transfers, or the prefix followed by the token contract address
    for token transfers.  ``data_for_signing`` holds the exact bytes whose
    signature authorizes the transaction.
    """

    model_config = ConfigDict(frozen=True)

    to: bytes
    amount: int = Field(ge=0)
    coin_identifier: bytes
    data_for_signing: bytes

    @property
    def contract(self) -> Optional[bytes]:
        """Token contract address, or ``None`` for a native transfer."""
        _, sep, suffix = self.coin_identifier.partition(b"/")
        if not sep or not suffix:
            return None
        return suffix

    @property
    def is_token(self) -> bool:
        return self.contract is not None


class WalletAdapter(ABC):
    """A wallet on one chain that can read its own unsigned transactions."""

    @property
    @abstractmethod
    def address(self) -> str:
        """The wallet's public address in the chain's native encoding."""

    @abstractmethod
    def parse_tx(self, raw: bytes) -> Transfer:
        """Parse raw unsigned transaction bytes into a :class:`Transfer`.

        Raises
        ------
        treasury_core.exceptions.ParseError
            If the bytes are malformed or are not a supported transfer.
        """
