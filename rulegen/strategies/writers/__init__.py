"""Concrete rule writer implementations."""

from rulegen.strategies.writers.grafana import GrafanaRuleWriter
from rulegen.strategies.writers.prometheus import PrometheusRuleWriter

__all__ = [
    "GrafanaRuleWriter",
    "PrometheusRuleWriter",
]
