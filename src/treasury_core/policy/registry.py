"""Policy registry - the closed set of policy variants an envelope may hold."""

from __future__ import annotations

import logging
from typing import Any, Callable

from treasury_core.policy.base import PolicyVariant

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], Any]


class PolicyRegistry:
    """Maps envelope type URLs to the decoders that rebuild their payloads."""

    _instance: PolicyRegistry | None = None
    _decoders: dict[str, Decoder]

    def __init__(self):
        self._decoders = {}

    @classmethod
    def get(cls) -> PolicyRegistry:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register_decoder(self, type_url: str, decoder: Decoder) -> None:
        existing = self._decoders.get(type_url)
        if existing is not None and existing != decoder:
            raise ValueError(f"Type URL '{type_url}' is already registered.")
        self._decoders[type_url] = decoder

    def register_policy(self, cls: type[PolicyVariant]) -> None:
        if not (isinstance(cls, type) and issubclass(cls, PolicyVariant)):
            raise TypeError(f"Expected a PolicyVariant subclass, got {cls!r}")
        self.register_decoder(cls.type_url, cls.from_bytes)
        logger.debug("Registered policy type %s", cls.type_url)

    def get_decoder(self, type_url: str) -> Decoder | None:
        return self._decoders.get(type_url)

    def list_type_urls(self) -> list[str]:
        return list(self._decoders.keys())


def register_policy(cls: type[PolicyVariant]) -> type[PolicyVariant]:
    """Class decorator adding a policy variant to the default registry.

    Usage:
        @register_policy
        class MyPolicy(PolicyVariant):
            type_url = "/my.package.MyPolicy"
            ...
    """
    PolicyRegistry.get().register_policy(cls)
    return cls
