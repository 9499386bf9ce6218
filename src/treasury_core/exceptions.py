"""Error types raised by transaction parsing and policy evaluation."""

from __future__ import annotations

from typing import Iterable


class TreasuryError(Exception):
    """Base class for every error raised by treasury-core."""


# ---------------------------------------------------------------------------
# Transaction parsing
# ---------------------------------------------------------------------------


class ParseError(TreasuryError, ValueError):
    """Raw transaction bytes could not be turned into a transfer."""


class DecodeError(ParseError):
    """The bytes are not a valid transaction envelope."""


class ShapeViolation(ParseError):
    """The transaction is not shaped like a transfer (value vs. data)."""


class ERC20Error(ParseError):
    """The call data is not an ERC-20 ``transfer(address,uint256)`` call."""


class ShortPayload(ERC20Error):
    pass


class SelectorMismatch(ERC20Error):
    pass


class MalformedAddress(ERC20Error):
    pass


class InvalidPublicKey(TreasuryError, ValueError):
    """A wallet public key has an unsupported length or encoding."""


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


class PolicyError(TreasuryError):
    """Base class for policy envelope and policy evaluation errors."""


class UnknownPolicyType(PolicyError):
    """An envelope payload does not resolve to a registered policy variant."""

    def __init__(self, type_url: str, reason: str = "") -> None:
        self.type_url = type_url
        message = f"unknown policy type '{type_url}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidPolicy(PolicyError):
    """A policy is structurally misconfigured."""


class EmptyParticipants(InvalidPolicy):
    def __init__(self) -> None:
        super().__init__("policy has no participants")


class _AbbreviationsError(InvalidPolicy):
    _template = "{}"

    def __init__(self, abbreviations: Iterable[str]) -> None:
        self.abbreviations = tuple(sorted(set(abbreviations)))
        super().__init__(self._template.format(", ".join(self.abbreviations)))


class MissingParticipant(_AbbreviationsError):
    _template = "policy references participants missing from the directory: {}"


class DuplicateParticipant(_AbbreviationsError):
    _template = "participant abbreviations listed more than once: {}"


class InvalidExpression(InvalidPolicy):
    """The approval expression blob is malformed."""


class PolicyNotSatisfied(PolicyError):
    """The approver set does not satisfy the approval expression."""

    def __init__(self, approvers: Iterable[str]) -> None:
        self.approvers = tuple(sorted(approvers))
        super().__init__(
            "policy not satisfied by approvers: "
            + (", ".join(self.approvers) or "<none>")
        )
