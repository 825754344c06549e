from starlette.testclient import TestClient

from reporteer.app import create_app
from reporteer.state import NO_REPORT_TEXT, REPORT_TYPE, ApplicationState, RenderedReport, StateStore


def client_for(state=None):
    return TestClient(create_app(StateStore(state)))


REPORT = RenderedReport(message="reporteer", status="generated", text="Report {\n    vmpl: 0,\n}")


def test_hash_endpoint():
    r = client_for(ApplicationState(fingerprint="test_hash")).get("/api/hash")
    assert r.status_code == 200
    assert r.json() == {"derived_key_hash": "test_hash"}


def test_report_placeholder_when_absent():
    r = client_for().get("/api/report")
    assert r.status_code == 200
    assert r.json() == {"attestation_report": NO_REPORT_TEXT}


def test_report_envelope_when_present():
    r = client_for(ApplicationState(fingerprint="h", report=REPORT)).get("/api/report")
    assert r.status_code == 200
    assert r.json() == {
        "report_type": REPORT_TYPE,
        "message": "reporteer",
        "status": "generated",
        "details": REPORT.text,
    }


def test_index_renders_hash_and_report():
    r = client_for(ApplicationState(fingerprint="abc123", report=REPORT)).get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "abc123" in r.text
    assert "vmpl: 0" in r.text
    assert "generated" in r.text


def test_index_escapes_report_text():
    rep = RenderedReport(message="m", status="generated", text="<script>x</script>")
    r = client_for(ApplicationState(report=rep)).get("/")
    assert "<script>x</script>" not in r.text
    assert "&lt;script&gt;" in r.text


def test_index_degraded():
    r = client_for().get("/")
    assert r.status_code == 200
    assert "ERROR_FETCHING_KEY" in r.text
    assert NO_REPORT_TEXT in r.text


def test_health_always_healthy():
    r = client_for().get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}


def test_metrics_exposition():
    c = client_for()
    c.get("/api/hash")
    r = c.get("/metrics")
    assert r.status_code == 200
    assert "reporteer_http_requests_total" in r.text


def test_health_and_metrics_are_counted():
    from reporteer.obs.prom import REGISTRY

    def count(route):
        return REGISTRY.get_sample_value("reporteer_http_requests_total", {"route": route}) or 0.0

    before = count("/health"), count("/metrics")
    c = client_for()
    c.get("/health")
    c.get("/metrics")
    assert (count("/health"), count("/metrics")) == (before[0] + 1, before[1] + 1)
