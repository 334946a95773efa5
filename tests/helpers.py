"""Test data and file helpers shared by the unit tests."""

from pathlib import Path

import yaml

APP_NOT_SYNCED = """\
query: 'argocd_app_info{project="{{project}}", dest_namespace="{{dest_namespace}}", sync_status!="Synced"} * on (name, project) group_left(label_committer) argocd_app_labels'
for: 10m
labels:
  env: "{{env}}"
annotations:
  summary: "{{ $labels.name }} is out of sync in {{env}}"
  committer: "{{ $labels.label_committer }}"
"""

APP_DEGRADED = """\
query: 'argocd_app_info{project="{{project}}", health_status="Degraded"}'
annotations:
  summary: "{{ $labels.name }} is degraded"
"""

PROD_VALUES = {"project": "production", "dest_namespace": "prod", "env": "prod"}
STAGING_VALUES = {"project": "staging", "dest_namespace": "staging", "env": "staging"}


def write_profile(
    directory: Path,
    name: str,
    values: dict | None = None,
    *,
    enabled: bool = True,
    folder: str | None = None,
    filename: str | None = None,
) -> Path:
    """Write a profile file and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    data: dict = {"name": name, "enabled": enabled}
    if folder is not None:
        data["folder"] = folder
    data["values"] = values or {}
    path = directory / (filename or f"{name}.yaml")
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


def write_fragment(root: Path, category: str, name: str, text: str) -> Path:
    """Write a template fragment below root/category and return its path."""
    directory = root / category
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(text)
    return path


