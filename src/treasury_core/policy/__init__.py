"""Approval policies for Treasury Core.

Policies are stored in type-tagged :class:`PolicyEnvelope` containers and
unpacked against a closed registry of variants.  The Blackbird variant
checks an approval expression against the set of participants that
approved a payload.
"""

from treasury_core.policy.base import (
    ApproverSet,
    PolicyPayload,
    PolicyVariant,
    build_approver_set,
    empty_policy_payload,
)
from treasury_core.policy.blackbird import BlackbirdPolicy, BlackbirdPolicyParticipant
from treasury_core.policy.envelope import (
    PackedPolicy,
    PolicyEnvelope,
    pack_policy,
    unpack_policy,
)
from treasury_core.policy.expression import ApprovalEvaluator, BlackbirdEvaluator
from treasury_core.policy.registry import PolicyRegistry, register_policy

__all__ = [
    "ApprovalEvaluator",
    "ApproverSet",
    "BlackbirdEvaluator",
    "BlackbirdPolicy",
    "BlackbirdPolicyParticipant",
    "PackedPolicy",
    "PolicyEnvelope",
    "PolicyPayload",
    "PolicyRegistry",
    "PolicyVariant",
    "build_approver_set",
    "empty_policy_payload",
    "pack_policy",
    "register_policy",
    "unpack_policy",
]
