"""Shared fixtures for GitOps Tools tests."""

from pathlib import Path

import pytest
import yaml

from gitops_tools import config

ENV_VARS = (
    "GITOPS_DIR",
    "GITOPS_SOURCE_CONFIG",
    "JENKINS_OUT_DIR_NAME",
    "JENKINS_DEFAULT_XML_TEMPLATE",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Start every test with a fresh configuration and no overrides."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def write_source_config():
    """Write a source-config.yaml under <dir>/.jx/gitops and return its path."""

    def _write(dir: Path, groups: list) -> Path:
        path = dir / ".jx" / "gitops" / "source-config.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "apiVersion": "gitops.jenkins-x.io/v1alpha1",
            "kind": "SourceConfig",
            "metadata": {"name": "config"},
            "spec": {"groups": groups},
        }
        path.write_text(yaml.safe_dump(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_manifest():
    """Write a Kubernetes manifest with the given kind and name."""

    def _write(path: Path, kind: str, name: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        document = {"apiVersion": "v1", "metadata": {"name": name}}
        if kind:
            document["kind"] = kind
        path.write_text(yaml.safe_dump(document), encoding="utf-8")
        return path

    return _write
