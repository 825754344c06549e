"""Reporteer error taxonomy.

Only EnclaveError is fatal; the startup sequence absorbs the rest into
degraded state values (sentinel fingerprint, "no report" placeholder).
"""
from __future__ import annotations


class ReporteerError(Exception):
    pass


class ConfigError(ReporteerError):
    """Invalid endpoint URL or server port; callers fall back to defaults."""


class FetchError(ReporteerError):
    """Network, transport or read failure while fetching the derived key."""


class EnclaveError(ReporteerError):
    """Enclave key provider failed or returned a malformed key."""


class AttestationError(ReporteerError):
    """Attestation provider failed to attest or verify."""
