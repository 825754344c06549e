from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..crypto.digest import key_id
from ..errors import EnclaveError
from ..utils.logging import get_logger

ENCLAVE_KEY_LEN = 32


@runtime_checkable
class EnclaveKeyProvider(Protocol):
    def get_derived_key(self) -> bytes: ...


class EnclaveKey:
    """32 bytes bound to the local root of trust. Never rendered or stored in app state."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        if len(raw) != ENCLAVE_KEY_LEN:
            raise EnclaveError(f"enclave key must be {ENCLAVE_KEY_LEN} bytes, got {len(raw)}")
        self._raw = bytes(raw)

    @property
    def key_id(self) -> str:
        return key_id(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def __bytes__(self) -> bytes:
        return self._raw

    def __repr__(self) -> str:
        return f"EnclaveKey(id={self.key_id}, <redacted>)"


def acquire_enclave_key(provider: EnclaveKeyProvider) -> EnclaveKey:
    log = get_logger()
    log.info("Fetching enclave key")
    try:
        raw = provider.get_derived_key()
    except Exception as e:
        raise EnclaveError(f"Failed to get enclave key: {e}") from e
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise EnclaveError(f"enclave key provider returned {type(raw).__name__}, expected bytes")
    key = EnclaveKey(bytes(raw))
    log.debug("Enclave key acquired: %r", key)
    return key
