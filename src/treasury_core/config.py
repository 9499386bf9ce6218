"""Configuration system for Treasury Core.

Loads treasury wallets and approval policies from a YAML file, supports
environment variable expansion, and turns the result into wallet adapters
and validated policy envelopes.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from treasury_core.policy.blackbird import BlackbirdPolicy, BlackbirdPolicyParticipant
from treasury_core.policy.envelope import PolicyEnvelope, pack_policy, unpack_policy
from treasury_core.wallet.base import WalletAdapter
from treasury_core.wallet.factory import build_wallet

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    Unset variables are left as-is so that validation can catch them later.
    """

    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


def _decode_hex(value: str) -> str:
    """Normalize a hex string, raising ``ValueError`` if it is not hex."""
    digits = value[2:] if value.startswith(("0x", "0X")) else value
    bytes.fromhex(digits)
    return "0x" + digits.lower()


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class WalletConfig(BaseModel):
    """A treasury wallet identified by its public key."""

    type: str = "ethereum"
    chain: str = "ethereum"
    public_key: str  # hex, compressed or uncompressed secp256k1

    @field_validator("public_key")
    @classmethod
    def normalize_public_key(cls, value: str) -> str:
        return _decode_hex(value)


class ParticipantConfig(BaseModel):
    abbreviation: str
    address: str


class PolicyConfig(BaseModel):
    """An approval policy as written in the config file."""

    id: int = Field(ge=0)
    name: str
    type: str = "blackbird"
    data: str  # hex-encoded approval expression
    participants: list[ParticipantConfig] = Field(default_factory=list)

    @field_validator("data")
    @classmethod
    def normalize_data(cls, value: str) -> str:
        return _decode_hex(value)


class TreasuryConfig(BaseModel):
    """Root configuration object."""

    name: str = "treasury"
    wallets: list[WalletConfig] = Field(default_factory=list)
    policies: list[PolicyConfig] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config(path: Path) -> TreasuryConfig:
    """Load and validate a treasury configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = path.read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    config = TreasuryConfig.model_validate(expanded)
    logger.info(
        "Loaded config '%s' from %s (%d wallets, %d policies)",
        config.name,
        path,
        len(config.wallets),
        len(config.policies),
    )
    return config


def save_config(config: TreasuryConfig, path: Path) -> None:
    """Serialize a :class:`TreasuryConfig` to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)


def build_wallets(config: TreasuryConfig) -> list[WalletAdapter]:
    """Create a wallet adapter for every configured wallet."""
    return [
        build_wallet(w.type, bytes.fromhex(w.public_key[2:]), w.chain)
        for w in config.wallets
    ]


def _to_policy(policy: PolicyConfig) -> BlackbirdPolicy:
    if policy.type != "blackbird":
        raise ValueError(
            f"Policy {policy.id} ('{policy.name}') has unsupported type "
            f"'{policy.type}'. Supported types: ['blackbird']"
        )
    return BlackbirdPolicy(
        data=bytes.fromhex(policy.data[2:]),
        participants=tuple(
            BlackbirdPolicyParticipant(abbreviation=p.abbreviation, address=p.address)
            for p in policy.participants
        ),
    )


def build_policies(config: TreasuryConfig) -> list[PolicyEnvelope]:
    """Pack every configured policy into an envelope.

    Each policy is validated here so that a misconfigured policy is
    rejected before it can be used to authorize a transfer.

    Raises
    ------
    ValueError
        If a policy has an unsupported type.
    treasury_core.exceptions.InvalidPolicy
        If a policy fails validation.
    """
    envelopes = []
    for policy in config.policies:
        envelope = pack_policy(policy.id, policy.name, _to_policy(policy))
        unpack_policy(envelope).validate()
        envelopes.append(envelope)
        logger.info("Policy %d ('%s') validated", envelope.id, envelope.name)
    return envelopes
