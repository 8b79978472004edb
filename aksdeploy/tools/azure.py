"""Azure CLI wrapper."""
import logging
from typing import Optional

from ..config.schema import DeployConfig, DeployTarget
from ..errors import AuthenticationRequired, CommandError
from ..runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class AzureCli:
    """Thin wrapper over the ``az`` commands used by a deployment."""

    def __init__(self, runner: CommandRunner, config: DeployConfig):
        self.runner = runner
        self.config = config

    def check_login(self) -> CommandResult:
        """Verify there is an active Azure CLI session.

        Raises:
            AuthenticationRequired: If ``az account show`` fails.
        """
        try:
            return self.runner.run(["az", "account", "show", "-o", "json"])
        except CommandError as e:
            raise AuthenticationRequired(e.output or "No active Azure CLI session")

    def login(self) -> CommandResult:
        """Run the interactive ``az login``; output goes to the terminal."""
        return self.runner.run(["az", "login"], capture=False)

    def subscription_id(self) -> str:
        result = self.runner.run(["az", "account", "show", "--query", "id", "-o", "tsv"])
        return result.stdout.strip()

    def create_group(self, target: DeployTarget) -> CommandResult:
        return self.runner.run([
            "az", "group", "create",
            "--name", target.resource_group,
            "--location", self.config.location,
            "-o", "none",
        ])

    def registry_exists(self, target: DeployTarget) -> bool:
        return self._exists([
            "az", "acr", "show",
            "--resource-group", target.resource_group,
            "--name", target.registry_name,
            "-o", "none",
        ])

    def create_registry(self, target: DeployTarget) -> CommandResult:
        return self.runner.run([
            "az", "acr", "create",
            "--resource-group", target.resource_group,
            "--name", target.registry_name,
            "--sku", self.config.registry_sku,
            "--location", self.config.location,
            "-o", "none",
        ])

    def login_registry(self, target: DeployTarget) -> CommandResult:
        return self.runner.run(["az", "acr", "login", "--name", target.registry_name])

    def register_provider(self, namespace: str) -> CommandResult:
        return self.runner.run(["az", "provider", "register", "--namespace", namespace, "--wait"])

    def cluster_exists(self, target: DeployTarget) -> bool:
        return self._exists([
            "az", "aks", "show",
            "--resource-group", target.resource_group,
            "--name", target.cluster_name,
            "-o", "none",
        ])

    def create_cluster(self, target: DeployTarget) -> CommandResult:
        """Create the AKS cluster; this may take 5-10 minutes."""
        cmd = [
            "az", "aks", "create",
            "--resource-group", target.resource_group,
            "--name", target.cluster_name,
            "--node-count", str(self.config.node_count),
            "--node-vm-size", self.config.vm_size,
            "--location", self.config.location,
            "--attach-acr", target.registry_name,
            "--enable-managed-identity",
            "--generate-ssh-keys",
            "--network-plugin", self.config.network_plugin,
        ]
        if self.config.network_policy:
            cmd.extend(["--network-policy", self.config.network_policy])
        cmd.extend(["--yes", "-o", "none"])
        return self.runner.run(cmd)

    def get_credentials(self, target: DeployTarget) -> CommandResult:
        return self.runner.run([
            "az", "aks", "get-credentials",
            "--resource-group", target.resource_group,
            "--name", target.cluster_name,
            "--overwrite-existing",
        ])

    def _exists(self, cmd: list) -> bool:
        """Probe a resource with a show command.

        Only "not found" answers count as absent; any other failure propagates.
        """
        try:
            self.runner.run(cmd)
            return True
        except CommandError as e:
            code = (e.error_code or "").lower()
            if code.endswith("notfound") or "not found" in e.output.lower() or "could not be found" in e.output.lower():
                logger.debug("%s reports not found (%s)", " ".join(cmd[:3]), e.error_code)
                return False
            raise
