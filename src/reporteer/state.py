"""Shared application state.

Implements:
 - NoReport / RenderedReport: the report slot as a tagged optional. Both the
   text and JSON views live on one RenderedReport so they always describe the
   same report generation.
 - ApplicationState: frozen (fingerprint, report) snapshot
 - ReadWriteLock: many concurrent readers, one exclusive writer
 - StateStore: handle passed to request handlers via app.state

Writers replace the whole snapshot under the write lock; readers get the
current immutable snapshot, so a torn read is impossible even if a background
refresh is added later.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Union

from .keys.fetch import FINGERPRINT_SENTINEL

NO_REPORT_TEXT = "No attestation report available."
REPORT_TYPE = "AMD SEV-SNP Attestation"

__all__ = [
    "NO_REPORT_TEXT",
    "REPORT_TYPE",
    "NoReport",
    "RenderedReport",
    "ReportView",
    "ApplicationState",
    "ReadWriteLock",
    "StateStore",
]


@dataclass(frozen=True)
class NoReport:
    text: str = NO_REPORT_TEXT


@dataclass(frozen=True)
class RenderedReport:
    message: str
    status: str  # "verified" | "generated"
    text: str
    verification: Optional[Dict[str, Any]] = None
    report_type: str = REPORT_TYPE

    @property
    def envelope(self) -> Dict[str, Any]:
        return {
            "report_type": self.report_type,
            "message": self.message,
            "status": self.status,
            "details": self.text,
        }


ReportView = Union[NoReport, RenderedReport]


@dataclass(frozen=True)
class ApplicationState:
    fingerprint: str = FINGERPRINT_SENTINEL
    report: ReportView = field(default_factory=NoReport)

    @property
    def report_text(self) -> str:
        return self.report.text


class ReadWriteLock:
    """Writer-preferring readers-writer lock usable from threads and the event loop.

    Critical sections here are a reference swap or copy, so holding a
    threading lock inside an async handler never blocks for long.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class StateStore:
    def __init__(self, initial: Optional[ApplicationState] = None):
        self._lock = ReadWriteLock()
        self._state = initial or ApplicationState()

    def read(self) -> ApplicationState:
        with self._lock.read():
            return self._state

    def write(self, mutator: Callable[[ApplicationState], ApplicationState]) -> ApplicationState:
        with self._lock.write():
            new_state = mutator(self._state)
            if not isinstance(new_state, ApplicationState):
                raise TypeError("state mutator must return an ApplicationState")
            self._state = new_state
            return new_state
