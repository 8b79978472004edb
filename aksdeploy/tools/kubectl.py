"""kubectl wrapper."""
import subprocess
from pathlib import Path
from typing import Union

from ..errors import CommandError, RolloutTimeout
from ..runner import CommandResult, CommandRunner

EXTERNAL_IP_JSONPATH = "jsonpath={.status.loadBalancer.ingress[0].ip}"

# Extra seconds the subprocess may run past kubectl's own --timeout
ROLLOUT_GRACE_SECONDS = 30


class Kubectl:
    """Thin wrapper over the ``kubectl`` commands used by a deployment."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def apply(self, manifest: Union[str, Path]) -> CommandResult:
        return self.runner.run(["kubectl", "apply", "-f", str(manifest)])

    def rollout_status(self, deployment: str, timeout: int) -> CommandResult:
        """Block until a deployment is ready.

        Args:
            deployment: Deployment name.
            timeout: Seconds to wait before giving up.

        Raises:
            RolloutTimeout: If the deployment is not ready in time.
        """
        cmd = [
            "kubectl", "rollout", "status",
            f"deployment/{deployment}",
            f"--timeout={timeout}s",
        ]
        step = f"rollout {deployment}"
        try:
            return self.runner.run(cmd, timeout=timeout + ROLLOUT_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            raise RolloutTimeout(step, f"deployment/{deployment} not ready after {timeout}s")
        except CommandError as e:
            raise RolloutTimeout(step, e.output or f"deployment/{deployment} not ready after {timeout}s", cause=e)

    def get(self, kind: str) -> CommandResult:
        return self.runner.run(["kubectl", "get", kind])

    def service_external_ip(self, service: str) -> str:
        """Return the LoadBalancer ingress IP of a service, or "" if not assigned yet."""
        result = self.runner.run(
            ["kubectl", "get", "service", service, "-o", EXTERNAL_IP_JSONPATH],
            check=False,
        )
        if not result.ok:
            return ""
        return result.stdout.strip().strip("'")
