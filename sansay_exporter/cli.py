#!/usr/bin/env python
"""
sansay_exporter serve            # HTTP exporter, scrape with /sansay?target=...
sansay_exporter scrape <target>  # one cycle, exposition text on stdout
"""
from __future__ import annotations

from typing import Optional

import typer
from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.parser import text_string_to_metric_families

from .collector import SansayCollector
from .collector.metrics import ERROR_METRIC
from .config import Settings, configure_logging

app = typer.Typer(add_completion=False)


def _settings(**overrides) -> Settings:
    settings = Settings.from_env()
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _error_count(text: str) -> float:
    for family in text_string_to_metric_families(text):
        if family.name == ERROR_METRIC:
            return sum(s.value for s in family.samples)
    return 0.0


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="listen address [env SANSAY_LISTEN_HOST]"),
    port: Optional[int] = typer.Option(None, help="listen port [env SANSAY_LISTEN_PORT]"),
    target: Optional[str] = typer.Option(None, help="default target when /sansay has no ?target="),
    username: Optional[str] = typer.Option(None, help="HTTP basic auth user [env SANSAY_USERNAME]"),
    password: Optional[str] = typer.Option(None, help="HTTP basic auth password [env SANSAY_PASSWORD]"),
    timeout: Optional[float] = typer.Option(None, help="device request timeout, seconds"),
):
    """Serve /sansay, /metrics and /health."""
    import uvicorn

    from .api import create_app

    settings = _settings(
        host=host, port=port, target=target, username=username, password=password, timeout=timeout
    )
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


@app.command()
def scrape(
    target: str = typer.Argument(..., help="device address or URL"),
    username: Optional[str] = typer.Option(None, help="HTTP basic auth user [env SANSAY_USERNAME]"),
    password: Optional[str] = typer.Option(None, help="HTTP basic auth password [env SANSAY_PASSWORD]"),
    timeout: Optional[float] = typer.Option(None, help="device request timeout, seconds"),
):
    """Scrape <target> once and print the metrics."""
    settings = _settings(username=username, password=password, timeout=timeout)
    configure_logging(settings.log_level)

    registry = CollectorRegistry()
    registry.register(SansayCollector(target, settings.username, settings.password, timeout=settings.timeout))
    text = generate_latest(registry).decode()
    typer.echo(text, nl=False)

    if _error_count(text):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()          # `python -m sansay_exporter.cli scrape 10.0.0.5`
