"""sansay_exporter.collector
Scrape-parse-map pipeline for Sansay status dumps.

Modules
-------
poller   : one authenticated HTTP GET of the device status page
parsers  : `mysqldump` XML -> read-only Document/Table/Row/Field tree
fields   : by-wire-name get/set over TrunkRecord
projector: Document -> stream of Gauge / InvalidMetric
metrics  : Gauge and InvalidMetric records
sansay   : per-scrape `collect()` and the prometheus_client collector
"""
from .sansay import SansayCollector, collect, describe

__all__ = ["SansayCollector", "collect", "describe", "poller", "parsers", "fields", "metrics", "projector", "sansay"]
