"""Tests for deployment manifest templating."""
import pytest

from aksdeploy.manifests.render import render_manifest, substitute

BASE = """apiVersion: apps/v1
kind: Deployment
metadata:
  name: task-manager-backend
spec:
  template:
    spec:
      containers:
        - name: backend
          image: ACR_NAME.azurecr.io/nodejs-fullstack/backend:latest
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: task-manager-frontend
  annotations:
    registry: "ACR_NAME"
spec:
  template:
    spec:
      containers:
        - name: frontend
          image: ACR_NAME.azurecr.io/nodejs-fullstack/frontend:latest
"""


def test_render_replaces_every_placeholder(tmp_path):
    base = tmp_path / "deployment-aks.yaml"
    base.write_text(BASE)
    out = tmp_path / "deployment-aks-temp.yaml"

    path = render_manifest(base, out, "ACR_NAME", "myacr")

    rendered = path.read_text()
    assert "ACR_NAME" not in rendered
    assert rendered == BASE.replace("ACR_NAME", "myacr")
    assert rendered.count("myacr") == BASE.count("ACR_NAME") == 3
    # the base manifest is left untouched
    assert base.read_text() == BASE


def test_substitute_is_plain_text():
    # no YAML parsing: invalid YAML is substituted all the same
    assert substitute("image: [ACR_NAME", "ACR_NAME", "x") == "image: [x"


def test_substitute_without_placeholder_is_identity():
    assert substitute("kind: Service\n", "ACR_NAME", "myacr") == "kind: Service\n"


def test_empty_placeholder_rejected():
    with pytest.raises(ValueError):
        substitute("abc", "", "x")


def test_missing_base_manifest(tmp_path):
    with pytest.raises(FileNotFoundError):
        render_manifest(tmp_path / "missing.yaml", tmp_path / "out.yaml", "ACR_NAME", "myacr")
    assert not (tmp_path / "out.yaml").exists()
