# sansay_exporter/api.py
from __future__ import annotations

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from pydantic import BaseModel

from . import __version__
from .collector import SansayCollector
from .config import Settings

# ---------- I/O schema -------------------------------------------------
class HealthResponse(BaseModel):
    status: str
    version: str

# ---------- FastAPI ----------------------------------------------------
def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Sansay Exporter")
    app.state.settings = settings

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", version=__version__)

    @app.get("/metrics")
    def own_metrics():
        return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    # sync endpoint: FastAPI runs it in a worker thread, one registry per pull
    @app.get("/sansay")
    def probe(target: str | None = Query(None)):
        target = target or settings.target
        if not target:
            raise HTTPException(400, "'target' parameter must be specified")
        registry = CollectorRegistry()
        registry.register(
            SansayCollector(target, settings.username, settings.password, timeout=settings.timeout)
        )
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
