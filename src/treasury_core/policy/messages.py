"""Protobuf wire messages for policies.

The descriptors are built at import time into a private descriptor pool,
so no generated ``*_pb2`` modules are needed:

.. code-block:: proto

    message PolicyNode {
      uint32 type = 1;
      uint32 threshold = 2;
      repeated PolicyNode children = 3;
      string signer = 4;
    }

    message BlackbirdPolicyParticipant {
      string abbreviation = 1;
      string address = 2;
    }

    message BlackbirdPolicy {
      bytes data = 1;
      repeated BlackbirdPolicyParticipant participants = 2;
    }

    message Policy {
      uint64 id = 1;
      string name = 2;
      google.protobuf.Any policy = 3;
    }
"""

from __future__ import annotations

from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "treasury_core.policy"

_Field = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    *,
    repeated: bool = False,
    type_name: str = "",
) -> None:
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = type_name


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(
        name="treasury_core/policy.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    fdp.dependency.append(any_pb2.DESCRIPTOR.name)

    node = fdp.message_type.add(name="PolicyNode")
    _add_field(node, "type", 1, _Field.TYPE_UINT32)
    _add_field(node, "threshold", 2, _Field.TYPE_UINT32)
    _add_field(
        node, "children", 3, _Field.TYPE_MESSAGE,
        repeated=True, type_name=f".{PACKAGE}.PolicyNode",
    )
    _add_field(node, "signer", 4, _Field.TYPE_STRING)

    participant = fdp.message_type.add(name="BlackbirdPolicyParticipant")
    _add_field(participant, "abbreviation", 1, _Field.TYPE_STRING)
    _add_field(participant, "address", 2, _Field.TYPE_STRING)

    blackbird = fdp.message_type.add(name="BlackbirdPolicy")
    _add_field(blackbird, "data", 1, _Field.TYPE_BYTES)
    _add_field(
        blackbird, "participants", 2, _Field.TYPE_MESSAGE,
        repeated=True, type_name=f".{PACKAGE}.BlackbirdPolicyParticipant",
    )

    policy = fdp.message_type.add(name="Policy")
    _add_field(policy, "id", 1, _Field.TYPE_UINT64)
    _add_field(policy, "name", 2, _Field.TYPE_STRING)
    _add_field(
        policy, "policy", 3, _Field.TYPE_MESSAGE,
        type_name=".google.protobuf.Any",
    )
    return fdp


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(any_pb2.DESCRIPTOR.serialized_pb)
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


def type_url(full_name: str) -> str:
    """Type URL used in ``Any`` payloads, e.g. ``/treasury_core.policy.BlackbirdPolicy``."""
    return f"/{full_name}"


PolicyNode = _message_class("PolicyNode")
BlackbirdPolicyParticipant = _message_class("BlackbirdPolicyParticipant")
BlackbirdPolicy = _message_class("BlackbirdPolicy")
Policy = _message_class("Policy")
