"""Prometheus exporter for Sansay session border controllers."""

__version__ = "0.1.0"
