"""Shared fixtures: a scripted command runner and a manifest workspace."""
import io
from typing import List

import pytest
from rich.console import Console

from aksdeploy.runner import CommandResult, CommandRunner


class FakeRunner:
    """Records commands and answers them from prefix rules.

    Responses are (returncode, stdout, stderr) tuples or exceptions. Each
    response is used once; the last one repeats. Unmatched commands succeed.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self._rules = []

    def on(self, prefix: str, *responses):
        self._rules.insert(0, (prefix.split(), list(responses)))
        return self

    def __call__(self, cmd, capture=True, timeout=None):
        self.calls.append(list(cmd))
        for prefix, responses in self._rules:
            if cmd[:len(prefix)] == prefix:
                response = responses.pop(0) if len(responses) > 1 else responses[0]
                if isinstance(response, BaseException):
                    raise response
                returncode, stdout, stderr = (tuple(response) + ("", ""))[:3]
                return CommandResult(list(cmd), returncode, stdout, stderr)
        return CommandResult(list(cmd), 0, "", "")

    def matching(self, prefix: str) -> List[List[str]]:
        words = prefix.split()
        return [c for c in self.calls if c[:len(words)] == words]

    def index(self, prefix: str) -> int:
        words = prefix.split()
        for i, cmd in enumerate(self.calls):
            if cmd[:len(words)] == words:
                return i
        raise ValueError(f"{prefix!r} was never run")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def runner(fake_runner):
    return CommandRunner(fake_runner)


@pytest.fixture
def quiet_console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A working directory holding the k8s manifests a deployment reads."""
    k8s = tmp_path / "k8s"
    k8s.mkdir()
    (k8s / "configmap.yaml").write_text("kind: ConfigMap\n")
    (k8s / "service-aks.yaml").write_text("kind: Service\n")
    (k8s / "secret-aks.yaml.template").write_text("kind: Secret\n")
    (k8s / "secret-aks.yaml").write_text("kind: Secret\n")
    (k8s / "deployment-aks.yaml").write_text(
        "kind: Deployment\n"
        "image: ACR_NAME.azurecr.io/nodejs-fullstack/backend:latest\n"
        "---\n"
        "kind: Deployment\n"
        "image: ACR_NAME.azurecr.io/nodejs-fullstack/frontend:latest\n"
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path
