# collector/sansay.py
from __future__ import annotations

import logging
import time
from typing import Dict, Iterator, List, Optional

import requests
from prometheus_client.core import GaugeMetricFamily, Metric as MetricFamily
from prometheus_client.registry import Collector

from ..exceptions import FetchError, ParseError
from .metrics import ERROR_HELP, ERROR_METRIC, Gauge, InvalidMetric, Metric
from .parsers import parse_document
from .poller import fetch
from .projector import project

log = logging.getLogger(__name__)


def describe() -> List[MetricFamily]:
    """Placeholder description; real names depend on the fields the device sends."""
    return [GaugeMetricFamily("dummy", "dummy")]


def collect(
    target: str,
    username: str = "",
    password: str = "",
    *,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> Iterator[Metric]:
    """Run one scrape cycle against <target> and yield its metrics in order.

    A fetch or parse failure yields a single InvalidMetric and nothing else.
    """
    start = time.perf_counter()
    try:
        body = fetch(target, username, password, timeout=timeout, session=session)
        document = parse_document(body)
    except (FetchError, ParseError) as exc:
        log.info("Error scraping target %s: %s", target, exc)
        yield InvalidMetric(exc)
        return
    yield from project(document, start)


class SansayCollector(Collector):
    """prometheus_client adapter: one scrape cycle per registry collection.

    Gauges sharing a name are merged into one family. InvalidMetrics are
    logged and counted into `sansay_error`, which is always exported.
    """

    def __init__(
        self,
        target: str,
        username: str = "",
        password: str = "",
        timeout: Optional[float] = None,
    ):
        self.target = target
        self.username = username
        self.password = password
        self.timeout = timeout

    def describe(self) -> List[MetricFamily]:
        return describe()

    def collect(self) -> Iterator[MetricFamily]:
        families: Dict[str, GaugeMetricFamily] = {}
        errors = 0
        for metric in collect(self.target, self.username, self.password, timeout=self.timeout):
            if isinstance(metric, InvalidMetric):
                errors += 1
                log.warning("%s target=%s err=%s", metric.documentation, self.target, metric.error)
                continue
            _add_gauge(families, metric)
        yield from families.values()

        yield GaugeMetricFamily(ERROR_METRIC, ERROR_HELP, value=errors)


def _add_gauge(families: Dict[str, GaugeMetricFamily], gauge: Gauge) -> None:
    family = families.get(gauge.name)
    if family is None:
        family = families[gauge.name] = GaugeMetricFamily(
            gauge.name, gauge.documentation, labels=list(gauge.labels)
        )
    family.add_metric(list(gauge.labels.values()), gauge.value)
