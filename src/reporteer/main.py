from __future__ import annotations

import argparse
import asyncio
from typing import Optional, Sequence

import uvicorn

from .app import create_app
from .attest.provider import CapabilityProvider, load_provider
from .config import ReporteerConfig, parse_port, load_config
from .errors import ConfigError, EnclaveError
from .startup import run_startup
from .state import StateStore
from .utils.logging import get_logger

EXIT_ENCLAVE_FAILURE = 1

_UVICORN_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def build_provider(cfg: ReporteerConfig) -> CapabilityProvider:
    try:
        if cfg.provider == "simulated":
            return load_provider("simulated", seed=cfg.sim_seed)
        return load_provider(cfg.provider)
    except Exception as e:
        raise EnclaveError(f"Failed to load capability provider {cfg.provider!r}: {e}") from e


def serve(cfg: ReporteerConfig, store: StateStore):
    log = get_logger()
    log.info("Starting server on %s:%s", cfg.bind_host, cfg.server_port)
    level = cfg.log_level.lower()
    uvicorn.run(
        create_app(store),
        host=cfg.bind_host,
        port=cfg.server_port,
        log_level=level if level in _UVICORN_LEVELS else "info",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="reporteer", description="Confidential-computing status service")
    ap.add_argument("--verify-at-start", action="store_true", help="verify the attestation report before serving")
    ap.add_argument("--port", help="override REPORTEER_SERVER_PORT")
    args = ap.parse_args(argv)

    cfg = load_config()
    if args.verify_at_start:
        cfg = cfg.model_copy(update={"verify_at_start": True})
    log = get_logger(cfg.log_level)
    if args.port is not None:
        try:
            cfg = cfg.model_copy(update={"server_port": parse_port(args.port)})
        except ConfigError as e:
            log.warning("%s. Keeping port %s.", e, cfg.server_port)

    store = StateStore()
    try:
        provider = build_provider(cfg)
        asyncio.run(run_startup(cfg, provider, store))
    except EnclaveError as e:
        log.warning("%s. Not starting HTTP server.", e)
        return EXIT_ENCLAVE_FAILURE

    serve(cfg, store)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
