import dataclasses
import threading
import time

import pytest

from reporteer.keys.fetch import FINGERPRINT_SENTINEL
from reporteer.state import (
    NO_REPORT_TEXT,
    ApplicationState,
    NoReport,
    ReadWriteLock,
    RenderedReport,
    StateStore,
)


def test_defaults():
    st = StateStore().read()
    assert st.fingerprint == FINGERPRINT_SENTINEL
    assert isinstance(st.report, NoReport)
    assert st.report_text == NO_REPORT_TEXT


def test_write_replaces_snapshot():
    store = StateStore()
    before = store.read()
    store.write(lambda s: dataclasses.replace(s, fingerprint="ab" * 32))
    assert store.read().fingerprint == "ab" * 32
    # old snapshots are immutable
    assert before.fingerprint == FINGERPRINT_SENTINEL
    with pytest.raises(dataclasses.FrozenInstanceError):
        before.fingerprint = "x"


def test_mutator_must_return_state():
    with pytest.raises(TypeError):
        StateStore().write(lambda s: None)


def test_readers_do_not_block_each_other():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=2)

    def reader():
        with lock.read():
            inside.wait()  # all three must be inside together

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(2)
    assert not inside.broken


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events = []
    with lock.write():
        def reader():
            with lock.read():
                events.append("read")
        t = threading.Thread(target=reader)
        t.start()
        time.sleep(0.05)
        assert events == []
    t.join(2)
    assert events == ["read"]


def _report(n):
    msg = f"m{n}"
    return RenderedReport(message=msg, status="verified" if n % 2 else "generated", text=f"Report {{ n: {n} }}")


def test_concurrent_readers_never_see_mixed_views():
    store = StateStore(ApplicationState(fingerprint="f", report=_report(0)))
    stop = threading.Event()
    bad = []

    def writer():
        n = 1
        while not stop.is_set():
            store.write(lambda s, n=n: dataclasses.replace(s, report=_report(n)))
            n += 1

    def reader():
        while not stop.is_set():
            r = store.read().report
            env = r.envelope
            n = int(env["message"][1:])
            expected_status = "verified" if n % 2 else "generated"
            if env["details"] != f"Report {{ n: {n} }}" or env["status"] != expected_status:
                bad.append(env)

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    time.sleep(0.3)
    stop.set()
    for t in threads:
        t.join(2)
    assert bad == []
