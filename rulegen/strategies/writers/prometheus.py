"""Prometheus rule-file writer."""

from collections.abc import Sequence

from rulegen.interfaces.profile_store import Profile
from rulegen.interfaces.writer import BaseRuleWriter
from rulegen.strategies.generator.models import FOLDER_LABEL, GeneratedRule
from rulegen.strategies.writers.base_yaml import dump_document


class PrometheusRuleWriter(BaseRuleWriter):
    """Writes Prometheus alerting rule files, one group per profile.

    The rule UID becomes the alert name and the title is kept as an
    annotation. Queries are wrapped in the threshold comparison so that the
    rule fires under the same condition as the Grafana rendering.
    """

    def __init__(self, evaluation_interval: str = "1m") -> None:
        self._evaluation_interval = evaluation_interval

    @property
    def format_name(self) -> str:
        return "prometheus"

    def render_profile(self, profile: Profile, rules: Sequence[GeneratedRule]) -> str:
        document = {
            "groups": [
                {
                    "name": f"{profile.routing_folder}-alerts",
                    "interval": self._evaluation_interval,
                    "rules": [self._rule(rule) for rule in rules],
                }
            ]
        }
        header = f"# Generated by rulegen for profile {profile.identifier}. Do not edit."
        return dump_document(document, header=header)

    def _rule(self, rule: GeneratedRule) -> dict:
        return {
            "alert": rule.uid,
            "expr": f"({rule.query}) > {rule.threshold:g}",
            "for": rule.for_duration,
            "labels": {**rule.labels, FOLDER_LABEL: rule.folder},
            "annotations": {"title": rule.title, **rule.annotations},
        }
