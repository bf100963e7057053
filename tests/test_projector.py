import time

import pytest

from sansay_exporter.collector.metrics import Gauge, InvalidMetric
from sansay_exporter.collector.parsers import parse_document
from sansay_exporter.collector.projector import DURATION_METRIC, TableKind, parse_float, project
from sansay_exporter.exceptions import FieldError, ProjectionError

from helpers import GROUP_ROW, dump, table


def run(body: bytes):
    return list(project(parse_document(body), time.perf_counter()))


def gauges(metrics):
    return [m for m in metrics if isinstance(m, Gauge) and m.name != DURATION_METRIC]


def errors(metrics):
    return [m for m in metrics if isinstance(m, InvalidMetric)]


# ---------- dispatch --------------------------------------------------

@pytest.mark.parametrize("name,kind", [
    ("system_stat", TableKind.SYSTEM_STAT),
    ("XBResourceRealTimeStatList", TableKind.TRUNK_RESOURCES),
    ("XBMediaStatList", TableKind.UNKNOWN),
    ("System_Stat", TableKind.UNKNOWN),
    ("", TableKind.UNKNOWN),
])
def test_table_kind(name, kind):
    assert TableKind.of(name) is kind


def test_unknown_tables_emit_nothing():
    metrics = run(dump(table("XBMediaStatList", {"numOrig": "1", "cpu": "2"}), table("", {"a": "1"})))
    assert len(metrics) == 1
    assert metrics[0].name == DURATION_METRIC


def test_duration_is_last_and_positive():
    started = time.perf_counter() - 0.25
    metrics = list(project(parse_document(dump()), started))
    assert [m.name for m in metrics] == [DURATION_METRIC]
    assert metrics[0].value >= 0.25
    assert metrics[0].documentation


# ---------- system_stat -----------------------------------------------

def test_system_stat_end_to_end():
    metrics = run(dump(table("system_stat", {"cpu": "3.5", "ha_current_state": "active"})))
    assert gauges(metrics) == [Gauge("sansay_cpu", 3.5)]
    assert metrics[-1].name == DURATION_METRIC
    assert len(metrics) == 2


def test_ha_states_never_exported_even_if_numeric():
    metrics = run(dump(table("system_stat", {"ha_pre_state": "1", "ha_current_state": "2", "mem": "7"})))
    assert [g.name for g in gauges(metrics)] == ["sansay_mem"]


def test_non_numeric_system_fields_are_dropped_silently():
    metrics = run(dump(table("system_stat", {"version": "4.1.0", "up": "", "pad": " 3", "big": "1_000", "ok": "1e3"})))
    assert gauges(metrics) == [Gauge("sansay_ok", 1000.0)]
    assert errors(metrics) == []


def test_every_system_row_is_walked():
    metrics = run(dump(table("system_stat", {"a": "1"}, {"b": "2"})))
    assert [(g.name, g.value) for g in gauges(metrics)] == [("sansay_a", 1.0), ("sansay_b", 2.0)]


def test_unusable_metric_name_is_reported():
    metrics = run(dump(table("system_stat", {"bad-name": "1", "good": "2"})))
    assert [g.name for g in gauges(metrics)] == ["sansay_good"]
    (err,) = errors(metrics)
    assert isinstance(err.error, ProjectionError)
    assert err.error.field == "bad-name"


# ---------- trunks ----------------------------------------------------

def test_group_row_emits_eight_labelled_gauges():
    metrics = run(dump(table("XBResourceRealTimeStatList", GROUP_ROW)))
    found = gauges(metrics)
    assert [g.name for g in found] == [
        "sansay_trunk_numorig",
        "sansay_trunk_numterm",
        "sansay_trunk_cps",
        "sansay_trunk_numpeak",
        "sansay_trunk_totalclz",
        "sansay_trunk_numclzcps",
        "sansay_trunk_totallimit",
        "sansay_trunk_cpslimit",
    ]
    assert all(g.labels == {"trunkgroup": "T1", "alias": "A1"} for g in found)
    assert found[0].value == 10.0
    assert found[2].value == 0.5
    assert errors(metrics) == []
    assert metrics[-1].name == DURATION_METRIC


def test_member_rows_are_not_exported():
    member = dict(GROUP_ROW, fqdn="10.1.1.1")
    metrics = run(dump(table("XBResourceRealTimeStatList", member)))
    assert gauges(metrics) == []
    assert errors(metrics) == []


def test_row_without_fqdn_is_not_a_group():
    row = {k: v for k, v in GROUP_ROW.items() if k != "fqdn"}
    assert gauges(run(dump(table("XBResourceRealTimeStatList", row)))) == []


def test_bad_counters_are_isolated():
    row = dict(GROUP_ROW, numTerm="n/a")
    del row["cpsLimit"]
    metrics = run(dump(table("XBResourceRealTimeStatList", row)))

    assert len(gauges(metrics)) == 6
    errs = errors(metrics)
    assert len(errs) == 2
    assert [e.error.field for e in errs] == ["NumTerm", "CpsLimit"]
    assert all(isinstance(e.error, ProjectionError) for e in errs)
    assert all(e.name == "sansay_error" for e in errs)


def test_unknown_trunk_fields_error_per_field_and_row_survives():
    row = dict(GROUP_ROW, extraOne="1", extraTwo="2")
    metrics = run(dump(table("XBResourceRealTimeStatList", row)))

    errs = errors(metrics)
    assert [e.error.name for e in errs] == ["ExtraOne", "ExtraTwo"]
    assert all(isinstance(e.error, FieldError) for e in errs)
    assert len(gauges(metrics)) == 8


def test_errors_are_interleaved_in_production_order():
    row = {"bogus": "x", **GROUP_ROW, "numOrig": "?"}
    metrics = run(dump(table("XBResourceRealTimeStatList", row)))
    kinds = [type(m).__name__ for m in metrics]
    assert kinds[:3] == ["InvalidMetric", "InvalidMetric", "Gauge"]
    assert isinstance(metrics[0].error, FieldError)
    assert isinstance(metrics[1].error, ProjectionError)


def test_sample_document(sample_xml):
    metrics = run(sample_xml)
    names = [g.name for g in gauges(metrics)]
    assert names[:3] == ["sansay_cpu", "sansay_numCore", "sansay_sum_active_session"]
    assert len(names) == 3 + 8
    assert errors(metrics) == []


def test_parse_float():
    assert parse_float("3.5") == 3.5
    assert parse_float("-2e-3") == -0.002
    for text in ("", " 1", "1 ", "1_0", "abc"):
        with pytest.raises(ValueError):
            parse_float(text)


# ---------- duplicates and reserved names -----------------------------

def test_first_duplicate_system_field_wins():
    body = dump('<table name="system_stat"><row><field name="cpu">1</field><field name="cpu">2</field></row></table>')
    assert gauges(run(body)) == [Gauge("sansay_cpu", 1.0)]


def test_system_field_repeated_in_later_row_is_ignored():
    metrics = run(dump(table("system_stat", {"cpu": "1"}, {"cpu": "2", "mem": "3"})))
    assert [(g.name, g.value) for g in gauges(metrics)] == [("sansay_cpu", 1.0), ("sansay_mem", 3.0)]


def test_first_duplicate_trunk_field_wins():
    fields = "".join(f'<field name="{k}">{v}</field>' for k, v in GROUP_ROW.items())
    fields += '<field name="fqdn">10.1.1.1</field><field name="numOrig">99</field>'
    metrics = run(dump(f'<table name="XBResourceRealTimeStatList"><row>{fields}</row></table>'))

    found = gauges(metrics)
    assert len(found) == 8
    assert found[0] == Gauge("sansay_trunk_numorig", 10.0, {"trunkgroup": "T1", "alias": "A1"})
    assert errors(metrics) == []


def test_repeated_trunk_group_is_exported_once():
    again = dict(GROUP_ROW, numOrig="99")
    metrics = run(dump(table("XBResourceRealTimeStatList", GROUP_ROW, again)))

    found = gauges(metrics)
    assert len(found) == 8
    assert found[0].value == 10.0
    (err,) = errors(metrics)
    assert isinstance(err.error, ProjectionError)
    assert err.error.value == "T1"


def test_same_trunk_id_with_other_alias_is_a_separate_group():
    other = dict(GROUP_ROW, alias="A2")
    metrics = run(dump(table("XBResourceRealTimeStatList", GROUP_ROW, other)))
    assert len(gauges(metrics)) == 16
    assert errors(metrics) == []


@pytest.mark.parametrize("field", ["error", "scrape_duration_seconds", "trunk_numorig"])
def test_reserved_system_names_are_reported(field):
    metrics = run(dump(table("system_stat", {field: "5", "cpu": "1"})))

    assert gauges(metrics) == [Gauge("sansay_cpu", 1.0)]
    (err,) = errors(metrics)
    assert isinstance(err.error, ProjectionError)
    assert err.error.field == field
    assert [m.name for m in metrics].count(DURATION_METRIC) == 1


# ---------- number grammar --------------------------------------------

@pytest.mark.parametrize("text,value", [
    ("0x1p-2", 0.25),
    ("-0X1P1", -2.0),
    ("1e308", 1e308),
])
def test_parse_float_accepts(text, value):
    assert parse_float(text) == value


@pytest.mark.parametrize("text", ["1e400", "-1e400", "0x1p2000", "0x1A"])
def test_parse_float_range_and_hex_errors(text):
    with pytest.raises(ValueError):
        parse_float(text)


def test_parse_float_explicit_non_finite():
    assert parse_float("Inf") == float("inf")
    assert parse_float("-infinity") == float("-inf")
    assert parse_float("NaN") != parse_float("NaN")


def test_overflowing_system_field_is_dropped():
    metrics = run(dump(table("system_stat", {"huge": "1e400", "cpu": "1"})))
    assert gauges(metrics) == [Gauge("sansay_cpu", 1.0)]
    assert errors(metrics) == []
