"""Ordered startup sequence: fetch derived key, acquire enclave key, attest.

Each step is awaited in turn before the HTTP listener binds. Only the enclave
key step can abort (EnclaveError propagates to the caller).
"""
from __future__ import annotations

import dataclasses
from typing import Optional

import httpx

from .attest.orchestrator import AttestationOrchestrator
from .attest.provider import CapabilityProvider
from .config import ReporteerConfig
from .errors import FetchError
from .keys.enclave import acquire_enclave_key
from .keys.fetch import FINGERPRINT_SENTINEL, fetch_derived_key
from .obs.prom import observe_state
from .state import ApplicationState, StateStore
from .utils.logging import get_logger


async def resolve_fingerprint(cfg: ReporteerConfig, client: Optional[httpx.AsyncClient] = None) -> str:
    log = get_logger()
    try:
        return await fetch_derived_key(cfg.endpoint_url, client=client, timeout_s=cfg.fetch_timeout_sec)
    except FetchError as e:
        log.warning("%s. Using placeholder.", e)
        return FINGERPRINT_SENTINEL


async def run_startup(
    cfg: ReporteerConfig,
    provider: CapabilityProvider,
    store: StateStore,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> ApplicationState:
    log = get_logger()

    fingerprint = await resolve_fingerprint(cfg, client)
    store.write(lambda s: dataclasses.replace(s, fingerprint=fingerprint))
    log.info("Initial derived key hash: %s", fingerprint)
    log.info("Configuration: Server port=%s, Verify on start=%s", cfg.server_port, cfg.verify_at_start)

    # EnclaveError is fatal; let it reach main()
    key = acquire_enclave_key(provider)
    log.info("Enclave key acquired (%d bytes, id=%s)", len(key), key.key_id)

    orchestrator = AttestationOrchestrator(provider, cfg.attest_message, cfg.verify_at_start)
    view = await orchestrator.run(key)
    state = store.write(lambda s: dataclasses.replace(s, report=view))

    observe_state(state, degraded=fingerprint == FINGERPRINT_SENTINEL)
    return state
