"""PolicyEnvelope - type-tagged storage for heterogeneous policy variants."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from google.protobuf.message import DecodeError as ProtoDecodeError
from pydantic import BaseModel, ConfigDict, Field

from treasury_core.exceptions import UnknownPolicyType
from treasury_core.policy import messages
from treasury_core.policy.base import PolicyVariant
from treasury_core.policy.registry import PolicyRegistry

logger = logging.getLogger(__name__)


class WireMessage(Protocol):
    """Anything that can be placed in an envelope's payload slot."""

    type_url: str

    def to_bytes(self) -> bytes: ...


class PackedPolicy(BaseModel):
    """A serialized payload tagged with the type URL that decodes it."""

    model_config = ConfigDict(frozen=True)

    type_url: str
    value: bytes = b""


class PolicyEnvelope(BaseModel):
    """A stored policy: numeric id, display name and a packed policy variant."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    name: str
    policy: PackedPolicy

    @classmethod
    def wrap(cls, policy_id: int, name: str, message: WireMessage) -> PolicyEnvelope:
        """Pack any wire message, without checking it is a policy variant."""
        return cls(
            id=policy_id,
            name=name,
            policy=PackedPolicy(type_url=message.type_url, value=message.to_bytes()),
        )

    def to_bytes(self) -> bytes:
        msg = messages.Policy(id=self.id, name=self.name)
        msg.policy.type_url = self.policy.type_url
        msg.policy.value = self.policy.value
        return msg.SerializeToString()

    @classmethod
    def from_bytes(cls, data: bytes) -> PolicyEnvelope:
        """Decode an envelope from its protobuf wire form.

        Raises ``ValueError`` if *data* is not a valid envelope.
        """
        msg = messages.Policy()
        try:
            msg.ParseFromString(data)
        except ProtoDecodeError as exc:
            raise ValueError(f"Invalid policy envelope: {exc}") from exc
        return cls(
            id=msg.id,
            name=msg.name,
            policy=PackedPolicy(type_url=msg.policy.type_url, value=msg.policy.value),
        )


def pack_policy(policy_id: int, name: str, policy: PolicyVariant) -> PolicyEnvelope:
    """Wrap a policy variant into a new envelope."""
    return PolicyEnvelope.wrap(policy_id, name, policy)


def unpack_policy(
    envelope: PolicyEnvelope,
    registry: Optional[PolicyRegistry] = None,
) -> PolicyVariant:
    """Rebuild the policy variant stored in *envelope*.

    Raises
    ------
    UnknownPolicyType
        If the type URL is not registered, the payload cannot be decoded,
        or the decoded value is not a policy variant.
    """
    registry = registry or PolicyRegistry.get()
    type_url = envelope.policy.type_url

    decoder = registry.get_decoder(type_url)
    if decoder is None:
        raise UnknownPolicyType(type_url, "no decoder registered")

    try:
        policy = decoder(envelope.policy.value)
    except (ProtoDecodeError, ValueError) as exc:
        raise UnknownPolicyType(type_url, f"payload does not decode: {exc}") from exc

    if not isinstance(policy, PolicyVariant):
        raise UnknownPolicyType(
            type_url, f"{type(policy).__name__} is not a policy variant"
        )

    logger.debug("Unpacked policy %d (%s) as %s", envelope.id, envelope.name, type_url)
    return policy
