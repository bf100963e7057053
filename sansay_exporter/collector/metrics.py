from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Union

ERROR_METRIC = "sansay_error"
ERROR_HELP = "Error scraping target"

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")


def valid_metric_name(name: str) -> bool:
    return bool(_METRIC_NAME_RE.match(name))


@dataclass(frozen=True)
class Gauge:
    name: str
    value: float
    labels: Dict[str, str] = field(default_factory=dict)
    documentation: str = ""


@dataclass(frozen=True)
class InvalidMetric:
    """An error travelling through the metric stream in place of a value."""

    error: Exception
    name: str = ERROR_METRIC
    documentation: str = ERROR_HELP


Metric = Union[Gauge, InvalidMetric]
