"""Tests for the deployment config parser."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from aksdeploy.config.parser import ConfigParser
from aksdeploy.config.schema import DeployConfig, DeployTarget


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = ConfigParser.load()
    assert config == DeployConfig()
    assert config.location == "eastus"
    assert config.node_count == 1
    assert config.vm_size == "Standard_DC2as_v5"
    assert config.network_plugin == "kubenet"
    assert config.network_policy is None
    assert config.rollout_timeout == 300
    assert config.ip_timeout is None
    assert [s.name for s in config.services] == ["backend", "frontend"]


def test_default_file_is_picked_up(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "aks.yaml").write_text("location: westeurope\nnode_count: 2\n")
    config = ConfigParser.load()
    assert config.location == "westeurope"
    assert config.node_count == 2


def test_explicit_file(tmp_path):
    yaml_content = """
    vm_size: Standard_D2s_v5
    manifests:
      directory: deploy/k8s
    deployments:
      - api
    ip_timeout: 120
    """
    path = tmp_path / "custom.yaml"
    path.write_text(yaml_content)

    config = ConfigParser.load(str(path))
    assert config.vm_size == "Standard_D2s_v5"
    assert config.manifests.path("secret") == Path("deploy/k8s/secret-aks.yaml")
    assert config.manifests.placeholder == "ACR_NAME"
    assert config.deployments == ["api"]
    assert config.ip_timeout == 120


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("vm_sise: Standard_D2s_v5\n")
    with pytest.raises(ValidationError):
        ConfigParser.load(str(path))


def test_invalid_node_count(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("node_count: 0\n")
    with pytest.raises(ValidationError):
        ConfigParser.load(str(path))


def test_nonexistent_explicit_file():
    with pytest.raises(FileNotFoundError):
        ConfigParser.load("nonexistent.yaml")


def test_image_tag():
    target = DeployTarget(resource_group="rg", cluster_name="aks", registry_name="myacr")
    assert target.login_server == "myacr.azurecr.io"
    assert target.image_tag(DeployConfig(), "backend") == "myacr.azurecr.io/nodejs-fullstack/backend:latest"
