"""Policy variant interface and the inputs of policy verification."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, FrozenSet, Iterable, Mapping

ApproverSet = FrozenSet[str]


def build_approver_set(abbreviations: Iterable[str]) -> ApproverSet:
    """Build the set of participant abbreviations that approved a payload."""
    return frozenset(abbreviations)


@dataclass(frozen=True)
class PolicyPayload:
    """Context a policy is verified against (e.g. a transfer digest).

    Only the approval evaluator gives meaning to its contents.
    """

    data: bytes = b""
    metadata: Mapping[str, Any] = field(default_factory=dict)


def empty_policy_payload() -> PolicyPayload:
    return PolicyPayload()


class PolicyVariant(ABC):
    """A concrete kind of approval policy that can live inside a PolicyEnvelope.

    Subclasses declare a unique ``type_url`` and know how to serialize
    themselves so the envelope can store them in a type-tagged slot.
    """

    type_url: ClassVar[str]

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Serialize this policy for storage in an envelope."""

    @classmethod
    @abstractmethod
    def from_bytes(cls, data: bytes) -> "PolicyVariant":
        """Rebuild a policy from :meth:`to_bytes` output."""

    @abstractmethod
    def validate(self) -> None:
        """Check the policy is well formed. Raises ``InvalidPolicy`` if not."""

    @abstractmethod
    def verify(self, approvers: ApproverSet, payload: PolicyPayload) -> None:
        """Check *approvers* satisfy the policy. Raises ``PolicyNotSatisfied`` if not.

        Must only be called on a policy whose :meth:`validate` succeeded.
        """
