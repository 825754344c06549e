from __future__ import annotations

import dataclasses
import hashlib
import os
import struct
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..crypto.digest import sha512
from ..errors import AttestationError
from ..utils.logging import get_logger
from .provider import VerificationResult

REPORT_VERSION = 2
GUEST_POLICY = 0x30000


@dataclass(frozen=True)
class SimulatedReport:
    """Shaped after an SEV-SNP guest report; carries no hardware guarantees."""

    version: int
    guest_svn: int
    policy: int
    vmpl: int
    signature_algo: int
    report_data: bytes
    measurement: bytes
    host_data: bytes
    chip_id: bytes
    report_id: bytes
    signature: bytes


def _hkdf(seed: bytes, info: bytes, length: int) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=length, salt=None, info=info).derive(seed)


def _signed_body(r: SimulatedReport) -> bytes:
    head = struct.pack("<IIQII", r.version, r.guest_svn, r.policy, r.vmpl, r.signature_algo)
    return head + r.report_data + r.measurement + r.host_data + r.chip_id + r.report_id


class SimulatedProvider:
    """Local dev provider (DEV-ONLY).

    Keys derive from a seed with HKDF-SHA256; reports are Ed25519-signed so that
    verify() does real checking of the message binding and signature.
    """

    def __init__(self, seed: str | bytes = b"reporteer-simulated"):
        self._seed = seed.encode() if isinstance(seed, str) else seed
        self._signing_key = Ed25519PrivateKey.from_private_bytes(_hkdf(self._seed, b"report-signing", 32))
        get_logger().warning("Using simulated attestation provider. SECURITY: NONE.")

    def get_derived_key(self) -> bytes:
        return _hkdf(self._seed, b"enclave-derived-key", 32)

    async def attest(self, message: bytes) -> SimulatedReport:
        unsigned = SimulatedReport(
            version=REPORT_VERSION,
            guest_svn=0,
            policy=GUEST_POLICY,
            vmpl=0,
            signature_algo=1,
            report_data=sha512(message),
            measurement=hashlib.sha384(self._seed + b"launch").digest(),
            host_data=bytes(32),
            chip_id=_hkdf(self._seed, b"chip-id", 64),
            report_id=os.urandom(32),
            signature=b"",
        )
        sig = self._signing_key.sign(_signed_body(unsigned))
        return dataclasses.replace(unsigned, signature=sig)

    async def verify(self, report: SimulatedReport, message: bytes) -> VerificationResult:
        if not isinstance(report, SimulatedReport):
            raise AttestationError(f"cannot verify {type(report).__name__} with simulated provider")
        if report.report_data != sha512(message):
            return VerificationResult(False, "report_data does not match message")
        try:
            self._signing_key.public_key().verify(report.signature, _signed_body(report))
        except InvalidSignature:
            return VerificationResult(False, "bad signature")
        return VerificationResult(True, "signature and report_data ok")
