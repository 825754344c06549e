from __future__ import annotations

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from jinja2 import Template

from .obs.prom import observe_request, prometheus_latest
from .state import ApplicationState, RenderedReport, StateStore

INDEX_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Reporteer</title>
  <style>
    body { font-family: sans-serif; margin: 2rem; }
    pre { background: #f4f4f4; padding: 1rem; overflow-x: auto; }
    code { word-break: break-all; }
  </style>
</head>
<body>
  <h1>Reporteer</h1>
  <h2>Derived key hash</h2>
  <p><code>{{ derived_key_hash }}</code></p>
  <h2>Attestation report</h2>
  {% if status %}<p>Status: <strong>{{ status }}</strong>{% if verification %} ({{ verification.detail }}){% endif %}</p>{% endif %}
  <pre>{{ attestation_report }}</pre>
</body>
</html>
""",
    autoescape=True,
)


def get_state(request: Request) -> ApplicationState:
    store: StateStore = request.app.state.store
    return store.read()


def create_app(store: StateStore) -> FastAPI:
    app = FastAPI(title="Reporteer")
    app.state.store = store

    @app.get("/", response_class=HTMLResponse)
    async def index(state: ApplicationState = Depends(get_state)):
        observe_request("/")
        report = state.report
        html = INDEX_TEMPLATE.render(
            derived_key_hash=state.fingerprint,
            attestation_report=report.text,
            status=report.status if isinstance(report, RenderedReport) else None,
            verification=report.verification if isinstance(report, RenderedReport) else None,
        )
        return HTMLResponse(html)

    @app.get("/api/hash")
    async def get_hash(state: ApplicationState = Depends(get_state)):
        observe_request("/api/hash")
        return JSONResponse({"derived_key_hash": state.fingerprint})

    @app.get("/api/report")
    async def get_report(state: ApplicationState = Depends(get_state)):
        observe_request("/api/report")
        report = state.report
        if isinstance(report, RenderedReport):
            return JSONResponse(report.envelope)
        return JSONResponse({"attestation_report": report.text})

    @app.get("/health")
    async def health():
        observe_request("/health")
        return {"status": "healthy"}

    @app.get("/metrics")
    def prometheus_metrics():
        observe_request("/metrics")
        body, content_type = prometheus_latest()
        return Response(body, media_type=content_type)

    return app
