"""Approval expressions and the evaluators that decide them.

A Blackbird expression is a serialized :data:`~treasury_core.policy.messages.PolicyNode`
tree.  Leaves name a participant by abbreviation; inner nodes require
either all of their children or at least ``threshold`` of them.  Policies
only hand the opaque blob to an :class:`ApprovalEvaluator`, so a different
grammar can be plugged in without touching envelopes or policies.
"""

from __future__ import annotations

from enum import IntEnum
from typing import FrozenSet, Protocol

from google.protobuf.message import DecodeError as ProtoDecodeError

from treasury_core.exceptions import InvalidExpression
from treasury_core.policy import messages
from treasury_core.policy.base import ApproverSet, PolicyPayload


class NodeType(IntEnum):
    UNSPECIFIED = 0
    ALL = 1
    THRESHOLD = 2
    SIGNER = 3


class ApprovalEvaluator(Protocol):
    """Strategy that understands the grammar of an expression blob."""

    def participants(self, expression: bytes) -> FrozenSet[str]:
        """Every abbreviation *expression* references."""
        ...

    def evaluate(
        self,
        expression: bytes,
        approvers: ApproverSet,
        payload: PolicyPayload,
    ) -> bool:
        """Whether *approvers* satisfy *expression*."""
        ...


# ---------------------------------------------------------------------------
# Blackbird expression trees
# ---------------------------------------------------------------------------


def signer(abbreviation: str):
    return messages.PolicyNode(type=NodeType.SIGNER, signer=abbreviation)


def all_of(*children):
    return messages.PolicyNode(type=NodeType.ALL, children=children)


def threshold(count: int, *children):
    return messages.PolicyNode(
        type=NodeType.THRESHOLD, threshold=count, children=children
    )


def any_of(*children):
    return threshold(1, *children)


def encode_expression(node) -> bytes:
    return node.SerializeToString()


def decode_expression(expression: bytes):
    """Parse and structurally check an expression blob.

    Raises ``InvalidExpression`` if the blob is not a well-formed tree.
    """
    node = messages.PolicyNode()
    try:
        node.ParseFromString(expression)
    except ProtoDecodeError as exc:
        raise InvalidExpression(f"Invalid approval expression: {exc}") from exc
    _check_node(node)
    return node


def _check_node(node) -> None:
    if node.type == NodeType.SIGNER:
        if not node.signer:
            raise InvalidExpression("Signer node without an abbreviation.")
        if node.children:
            raise InvalidExpression(f"Signer node '{node.signer}' has children.")
        return

    if node.type not in (NodeType.ALL, NodeType.THRESHOLD):
        raise InvalidExpression(f"Unknown expression node type {node.type}.")
    if not node.children:
        raise InvalidExpression(f"{NodeType(node.type).name} node has no children.")
    if node.type == NodeType.THRESHOLD and not 0 < node.threshold <= len(node.children):
        raise InvalidExpression(
            f"Threshold {node.threshold} is out of range for "
            f"{len(node.children)} children."
        )
    for child in node.children:
        _check_node(child)


def _collect_signers(node, into: set[str]) -> None:
    if node.type == NodeType.SIGNER:
        into.add(node.signer)
        return
    for child in node.children:
        _collect_signers(child, into)


def _is_satisfied(node, approvers: ApproverSet) -> bool:
    if node.type == NodeType.SIGNER:
        return node.signer in approvers
    approved = sum(1 for child in node.children if _is_satisfied(child, approvers))
    if node.type == NodeType.ALL:
        return approved == len(node.children)
    return approved >= node.threshold


class BlackbirdEvaluator:
    """Default evaluator for serialized ``PolicyNode`` trees.

    The payload is not inspected: a leaf is approved iff its abbreviation
    is in the approver set.
    """

    def participants(self, expression: bytes) -> FrozenSet[str]:
        found: set[str] = set()
        _collect_signers(decode_expression(expression), found)
        return frozenset(found)

    def evaluate(
        self,
        expression: bytes,
        approvers: ApproverSet,
        payload: PolicyPayload,
    ) -> bool:
        return _is_satisfied(decode_expression(expression), approvers)
