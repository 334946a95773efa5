"""Shared fixtures for rulegen tests."""

import os
from pathlib import Path

import pytest

from rulegen.core import config as config_module
from tests.helpers import (
    APP_DEGRADED,
    APP_NOT_SYNCED,
    PROD_VALUES,
    STAGING_VALUES,
    write_fragment,
    write_profile,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Drop cached settings and RULEGEN_ environment around each test."""
    for key in list(os.environ):
        if key.startswith("RULEGEN_"):
            monkeypatch.delenv(key, raising=False)
    config_module.reset_settings()
    yield
    config_module.reset_settings()


@pytest.fixture
def profiles_dir(tmp_path: Path) -> Path:
    """Profiles directory with prod and staging."""
    directory = tmp_path / "profiles"
    write_profile(directory, "prod", PROD_VALUES, filename="1-prod.yaml")
    write_profile(directory, "staging", STAGING_VALUES, filename="2-staging.yaml")
    return directory


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Templates tree with two argo-applications fragments."""
    root = tmp_path / "templates"
    write_fragment(root, "backend/argo-applications", "app-not-synced.yaml", APP_NOT_SYNCED)
    write_fragment(root, "backend/argo-applications", "app-degraded.yaml", APP_DEGRADED)
    return root
