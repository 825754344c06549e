from dataclasses import dataclass

import httpx
import pytest

from reporteer.attest.provider import VerificationResult
from reporteer.config import ReporteerConfig


@dataclass(frozen=True)
class FakeReport:
    message: bytes
    measurement: bytes = b"\x01\x02"
    vmpl: int = 0


class FakeProvider:
    """Scriptable provider: key length and attest/verify outcomes are knobs."""

    def __init__(self, key=b"k" * 32, attest_error=None, verify_ok=True, verify_error=None):
        self.key = key
        self.attest_error = attest_error
        self.verify_ok = verify_ok
        self.verify_error = verify_error
        self.calls = []

    def get_derived_key(self):
        self.calls.append("get_derived_key")
        if isinstance(self.key, Exception):
            raise self.key
        return self.key

    async def attest(self, message):
        self.calls.append(("attest", message))
        if self.attest_error:
            raise self.attest_error
        return FakeReport(message=message)

    async def verify(self, report, message):
        self.calls.append(("verify", message))
        if self.verify_error:
            raise self.verify_error
        ok = self.verify_ok and report.message == message
        return VerificationResult(ok, "ok" if ok else "mismatch")


def mock_client(body="secret-derived-key", status=200, exc=None):
    def handler(request: httpx.Request):
        if exc is not None:
            raise exc("connection refused", request=request)
        return httpx.Response(status, text=body)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def cfg():
    return ReporteerConfig()


@pytest.fixture
def fake_provider():
    return FakeProvider()
