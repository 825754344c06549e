"""Capability provider contracts and loader.

A provider supplies the enclave key and the attest/verify pair. The concrete
report type is opaque to the service; it only has to be a dataclass (or expose
__dict__) so it can be rendered.
"""
from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ..keys.enclave import EnclaveKeyProvider


@dataclass(frozen=True)
class VerificationResult:
    verified: bool
    detail: str = ""


@runtime_checkable
class AttestationProvider(Protocol):
    async def attest(self, message: bytes) -> Any: ...
    async def verify(self, report: Any, message: bytes) -> VerificationResult: ...


@runtime_checkable
class CapabilityProvider(EnclaveKeyProvider, AttestationProvider, Protocol):
    pass


def load_provider(ref: str, **kwargs: Any) -> CapabilityProvider:
    """Resolve "simulated" or a "package.module:factory" reference.

    The factory is called with kwargs and must return an object satisfying
    CapabilityProvider.
    """
    if ref == "simulated":
        from .simulated import SimulatedProvider
        return SimulatedProvider(**kwargs)
    mod_name, sep, attr = ref.partition(":")
    if not sep or not mod_name or not attr:
        raise ValueError(f"provider reference must be 'simulated' or 'module:attribute', got {ref!r}")
    factory = getattr(importlib.import_module(mod_name), attr)
    provider = factory(**kwargs)
    if not isinstance(provider, CapabilityProvider):
        raise TypeError(f"{ref} did not produce a capability provider")
    return provider
