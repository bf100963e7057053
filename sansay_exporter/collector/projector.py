# collector/projector.py
"""
Turns a parsed Sansay document into a stream of gauges.

Two table shapes are understood:

* ``system_stat`` - one row of flat counters, each field becomes
  ``sansay_<field>``. Values that are not numbers are dropped quietly.
* ``XBResourceRealTimeStatList`` - one row per trunk (group rows plus their
  member rows). Only group rows are exported, as ``sansay_trunk_<counter>``
  labelled with the trunk id and alias. Every field or value that cannot be
  handled shows up as an InvalidMetric next to the good gauges.

Other tables are skipped so new upstream tables do not break the exporter.
"""
from __future__ import annotations

import enum
import logging
import math
import time
from typing import Callable, Dict, Generator, Iterator, Set, Tuple

from ..exceptions import FieldError, ProjectionError
from .fields import TRUNK_COUNTERS, TrunkRecord, get_field, set_field
from .metrics import ERROR_METRIC, Gauge, InvalidMetric, Metric, valid_metric_name
from .parsers import Document, Row, Table

log = logging.getLogger(__name__)

NAMESPACE = "sansay"
TRUNK_PREFIX = f"{NAMESPACE}_trunk_"
DURATION_METRIC = f"{NAMESPACE}_scrape_duration_seconds"
DURATION_HELP = "Total sansay time scrape took (walk and processing)."

# textual HA states, never numeric
SKIPPED_SYSTEM_FIELDS = frozenset({"ha_pre_state", "ha_current_state"})


class TableKind(enum.Enum):
    SYSTEM_STAT = "system_stat"
    TRUNK_RESOURCES = "XBResourceRealTimeStatList"
    UNKNOWN = ""

    @classmethod
    def of(cls, table_name: str) -> "TableKind":
        try:
            return cls(table_name)
        except ValueError:
            return cls.UNKNOWN


# spellings the upstream float grammar accepts for non-finite values
_NON_FINITE = frozenset({"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity", "nan", "+nan", "-nan"})


def parse_float(text: str) -> float:
    """float() with the upstream's grammar.

    No padding and no `1_000`. Hex floats need a `p` exponent. Finite-looking
    text that overflows (`1e400`) is a range error, not infinity.
    """
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid syntax: {text!r}")
    lowered = text.lower()
    if lowered.lstrip("+-").startswith("0x"):
        if "p" not in lowered:
            raise ValueError(f"hexadecimal mantissa requires a 'p' exponent: {text!r}")
        try:
            value = float.fromhex(text)
        except OverflowError as exc:
            raise ValueError(f"value out of range: {text!r}") from exc
    else:
        value = float(text)
    if not math.isfinite(value) and lowered not in _NON_FINITE:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _reserved(name: str) -> bool:
    """Names owned by the exporter itself or by the trunk families."""
    return name in (ERROR_METRIC, DURATION_METRIC) or name.startswith(TRUNK_PREFIX)


def _project_system_stat(table: Table) -> Iterator[Metric]:
    # first occurrence wins, within a row and across rows
    seen: Set[str] = set()
    for row in table.rows:
        for f in row.unique():
            if f.name in SKIPPED_SYSTEM_FIELDS or f.name in seen:
                continue
            seen.add(f.name)
            try:
                value = parse_float(f.text)
            except ValueError:
                log.debug("Dropping non-numeric system_stat field %s=%r", f.name, f.text)
                continue
            name = f"{NAMESPACE}_{f.name}"
            if not valid_metric_name(name):
                yield InvalidMetric(ProjectionError(f.name, f.text, f"invalid metric name {name!r}"))
                continue
            if _reserved(name):
                yield InvalidMetric(ProjectionError(f.name, f.text, f"reserved metric name {name!r}"))
                continue
            yield Gauge(name, value)


def _trunk_record(row: Row) -> Generator[Metric, None, TrunkRecord]:
    """Fill a TrunkRecord from <row>; mapping errors are yielded, the record is returned."""
    record = TrunkRecord()
    for f in row.unique():
        try:
            set_field(record, f.name, f.text)
        except FieldError as exc:
            yield InvalidMetric(exc)
    return record


def _trunk_gauges(trunk: TrunkRecord) -> Iterator[Metric]:
    labels = {"trunkgroup": trunk.trunk_id, "alias": trunk.alias}
    for counter in TRUNK_COUNTERS:
        try:
            text = get_field(trunk, counter)
        except FieldError as exc:
            yield InvalidMetric(exc)
            continue
        try:
            value = parse_float(text)
        except ValueError as exc:
            yield InvalidMetric(ProjectionError(counter, text, str(exc)))
            continue
        yield Gauge(TRUNK_PREFIX + counter.lower(), value, dict(labels))


def _project_trunks(table: Table) -> Iterator[Metric]:
    exported: Set[Tuple[str, str]] = set()
    for row in table.rows:
        trunk = yield from _trunk_record(row)
        if not trunk.is_group:
            continue
        key = (trunk.trunk_id, trunk.alias)
        if key in exported:
            reason = f"duplicate trunk group alias={trunk.alias!r}"
            yield InvalidMetric(ProjectionError("TrunkId", trunk.trunk_id, reason))
            continue
        exported.add(key)
        yield from _trunk_gauges(trunk)


_PROJECTIONS: Dict[TableKind, Callable[[Table], Iterator[Metric]]] = {
    TableKind.SYSTEM_STAT: _project_system_stat,
    TableKind.TRUNK_RESOURCES: _project_trunks,
}


def project(document: Document, started_at: float) -> Iterator[Metric]:
    """Yield every metric for <document>, then the scrape duration.

    <started_at> is a `time.perf_counter()` reading taken before the fetch.
    """
    for table in document.database.tables:
        kind = TableKind.of(table.name)
        if kind is TableKind.UNKNOWN:
            log.debug("Skipping table %r", table.name)
            continue
        yield from _PROJECTIONS[kind](table)

    yield Gauge(DURATION_METRIC, time.perf_counter() - started_at, documentation=DURATION_HELP)
