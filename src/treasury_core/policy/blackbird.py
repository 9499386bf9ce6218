"""Blackbird policies: an approval expression plus a directory of its participants."""

from __future__ import annotations

import logging
from collections import Counter
from typing import ClassVar, Optional

from google.protobuf.message import DecodeError as ProtoDecodeError
from pydantic import BaseModel, ConfigDict, Field

from treasury_core.exceptions import (
    DuplicateParticipant,
    EmptyParticipants,
    MissingParticipant,
    PolicyNotSatisfied,
)
from treasury_core.policy import messages
from treasury_core.policy.base import ApproverSet, PolicyPayload, PolicyVariant
from treasury_core.policy.expression import ApprovalEvaluator, BlackbirdEvaluator
from treasury_core.policy.registry import register_policy

logger = logging.getLogger(__name__)

_default_evaluator = BlackbirdEvaluator()


class BlackbirdPolicyParticipant(BaseModel):
    """Maps an abbreviation used in the expression to a participant address."""

    model_config = ConfigDict(frozen=True)

    abbreviation: str
    address: str


@register_policy
class BlackbirdPolicy(BaseModel, PolicyVariant):
    """A policy whose approval rule is an opaque Blackbird expression.

    ``data`` is handed unchanged to the evaluator; ``participants`` must
    resolve every abbreviation it references.  Listing participants the
    expression does not use is allowed.
    """

    model_config = ConfigDict(frozen=True)

    type_url: ClassVar[str] = messages.type_url(
        messages.BlackbirdPolicy.DESCRIPTOR.full_name
    )

    data: bytes
    participants: tuple[BlackbirdPolicyParticipant, ...] = Field(default_factory=tuple)

    def to_bytes(self) -> bytes:
        msg = messages.BlackbirdPolicy(data=self.data)
        for p in self.participants:
            msg.participants.add(abbreviation=p.abbreviation, address=p.address)
        return msg.SerializeToString()

    @classmethod
    def from_bytes(cls, data: bytes) -> BlackbirdPolicy:
        msg = messages.BlackbirdPolicy()
        try:
            msg.ParseFromString(data)
        except ProtoDecodeError as exc:
            raise ValueError(f"Invalid Blackbird policy: {exc}") from exc
        return cls(
            data=msg.data,
            participants=tuple(
                BlackbirdPolicyParticipant(abbreviation=p.abbreviation, address=p.address)
                for p in msg.participants
            ),
        )

    def validate(self, evaluator: Optional[ApprovalEvaluator] = None) -> None:
        """Check every participant the expression references is listed.

        Raises
        ------
        EmptyParticipants
            If no participants are listed.
        DuplicateParticipant
            If an abbreviation is listed more than once.
        MissingParticipant
            If the expression references abbreviations that are not listed.
        InvalidExpression
            If the expression cannot be parsed.
        """
        if not self.participants:
            raise EmptyParticipants()

        counts = Counter(p.abbreviation for p in self.participants)
        duplicates = [abbr for abbr, n in counts.items() if n > 1]
        if duplicates:
            raise DuplicateParticipant(duplicates)

        referenced = (evaluator or _default_evaluator).participants(self.data)
        missing = referenced - set(counts)
        if missing:
            raise MissingParticipant(missing)

    def verify(
        self,
        approvers: ApproverSet,
        payload: PolicyPayload,
        evaluator: Optional[ApprovalEvaluator] = None,
    ) -> None:
        """Raise ``PolicyNotSatisfied`` unless *approvers* satisfy the expression."""
        if not (evaluator or _default_evaluator).evaluate(self.data, approvers, payload):
            logger.info("Blackbird policy rejected approvers %s", sorted(approvers))
            raise PolicyNotSatisfied(approvers)
