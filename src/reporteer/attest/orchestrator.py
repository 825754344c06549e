"""Startup attestation: Idle -> Attesting -> {Verifying | SkipVerify} -> Rendered.

Runs once. Attest failures leave the report slot at NoReport; verify failures
keep the report (status "generated") and attach the outcome as metadata.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from ..keys.enclave import EnclaveKey
from ..state import NoReport, ReportView
from ..utils.logging import get_logger
from .provider import AttestationProvider, VerificationResult
from .render import render_report


class Phase(str, Enum):
    IDLE = "Idle"
    ATTESTING = "Attesting"
    VERIFYING = "Verifying"
    SKIP_VERIFY = "SkipVerify"
    RENDERED = "Rendered"
    FAILED = "Failed"


class AttestationOrchestrator:
    def __init__(self, provider: AttestationProvider, message: str, verify_at_start: bool = False):
        self.provider = provider
        self.message = message
        self.verify_at_start = verify_at_start
        self.phase = Phase.IDLE
        self.log = get_logger()

    def _enter(self, phase: Phase):
        self.phase = phase
        self.log.info("Attestation phase: %s", phase.value)

    async def run(self, key: EnclaveKey) -> ReportView:
        if self.phase is not Phase.IDLE:
            raise RuntimeError(f"attestation already ran (phase={self.phase.value})")
        self.log.info("Attesting with enclave key %s, message=%r", key.key_id, self.message)
        msg = self.message.encode("utf-8")

        self._enter(Phase.ATTESTING)
        try:
            report: Any = await self.provider.attest(msg)
        except Exception as e:
            self.log.warning("Failed to generate attestation report: %s", e)
            self._enter(Phase.FAILED)
            return NoReport()
        self.log.debug("Report: %r", report)

        verification: Optional[VerificationResult] = None
        if self.verify_at_start:
            self._enter(Phase.VERIFYING)
            verification = await self._verify(report, msg)
        else:
            self._enter(Phase.SKIP_VERIFY)

        try:
            view = render_report(report, self.message, verification)
        except Exception as e:
            self.log.warning("Failed to render attestation report: %s", e)
            self._enter(Phase.FAILED)
            return NoReport()
        self._enter(Phase.RENDERED)
        return view

    async def _verify(self, report: Any, msg: bytes) -> VerificationResult:
        try:
            result = await self.provider.verify(report, msg)
        except Exception as e:
            self.log.warning("Attestation verification errored: %s", e)
            return VerificationResult(False, f"verification error: {e}")
        if not isinstance(result, VerificationResult):
            self.log.warning("Verification returned %s, expected VerificationResult", type(result).__name__)
            return VerificationResult(False, f"unexpected verification result: {result!r}")
        if result.verified:
            self.log.info("Verification: ok (%s)", result.detail)
        else:
            self.log.warning("Verification failed: %s", result.detail)
        return result
