"""Grafana alerting provisioning writer.

Produces one provisioning file per profile:

    apiVersion: 1
    groups:
      - orgId: 1
        name: prod
        folder: prod
        interval: 1m
        rules: [...]

Each rule runs its PromQL query as node A and fires through a threshold
expression node B.
"""

from collections.abc import Sequence

from rulegen.interfaces.profile_store import Profile
from rulegen.interfaces.writer import BaseRuleWriter
from rulegen.strategies.generator.models import GeneratedRule
from rulegen.strategies.writers.base_yaml import dump_document

EXPRESSION_DATASOURCE = "__expr__"


class GrafanaRuleWriter(BaseRuleWriter):
    """Writes Grafana alert-rule provisioning documents."""

    def __init__(
        self,
        datasource_uid: str = "prometheus",
        evaluation_interval: str = "1m",
        org_id: int = 1,
        query_range_seconds: int = 600,
    ) -> None:
        """Initialize the writer.

        Args:
            datasource_uid: Prometheus datasource the queries run against.
            evaluation_interval: Fixed interval of every rule group.
            org_id: Grafana organization of the rule groups.
            query_range_seconds: Relative time range of the query node.
        """
        self._datasource_uid = datasource_uid
        self._evaluation_interval = evaluation_interval
        self._org_id = org_id
        self._query_range_seconds = query_range_seconds

    @property
    def format_name(self) -> str:
        return "grafana"

    def render_profile(self, profile: Profile, rules: Sequence[GeneratedRule]) -> str:
        document = {
            "apiVersion": 1,
            "groups": [
                {
                    "orgId": self._org_id,
                    "name": profile.identifier,
                    "folder": profile.routing_folder,
                    "interval": self._evaluation_interval,
                    "rules": [self._rule(rule) for rule in rules],
                }
            ],
        }
        header = f"# Generated by rulegen for profile {profile.identifier}. Do not edit."
        return dump_document(document, header=header)

    def _rule(self, rule: GeneratedRule) -> dict:
        return {
            "uid": rule.uid,
            "title": rule.title,
            "condition": "B",
            "data": [
                {
                    "refId": "A",
                    "relativeTimeRange": {"from": self._query_range_seconds, "to": 0},
                    "datasourceUid": self._datasource_uid,
                    "model": {
                        "refId": "A",
                        "expr": rule.query,
                        "instant": True,
                    },
                },
                {
                    "refId": "B",
                    "relativeTimeRange": {"from": 0, "to": 0},
                    "datasourceUid": EXPRESSION_DATASOURCE,
                    "model": {
                        "refId": "B",
                        "type": "threshold",
                        "expression": "A",
                        "conditions": [
                            {"evaluator": {"type": "gt", "params": [rule.threshold]}}
                        ],
                    },
                },
            ],
            "noDataState": rule.no_data_state,
            "execErrState": rule.exec_err_state,
            "for": rule.for_duration,
            "annotations": dict(rule.annotations),
            "labels": dict(rule.labels),
            "isPaused": False,
        }
