"""The AKS deployment sequence."""
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from azure.core.exceptions import AzureError
from rich.console import Console

from .. import report
from ..config.schema import DeployConfig, DeployTarget
from ..console import console as default_console
from ..errors import (
    AuthenticationRequired,
    CommandError,
    InsufficientQuota,
    PreconditionMissing,
    QuotaError,
    ToleratedProvisioningConflict,
    UsageError,
)
from ..manifests.render import render_manifest
from ..quota.checker import ComputeQuotaChecker
from ..runner import CommandRunner, check_tools
from ..tools.azure import AzureCli
from ..tools.docker import DockerCli
from ..tools.kubectl import Kubectl
from .polling import wait_for_external_ip
from .steps import Pipeline, Step, StepPolicy, StepRecord

logger = logging.getLogger(__name__)

USAGE = "Usage: deploy RESOURCE_GROUP CLUSTER_NAME ACR_NAME"
EXAMPLE = "Example: deploy myResourceGroup myAKSCluster myACR"


def validate_target(resource_group: Optional[str], cluster_name: Optional[str], registry_name: Optional[str]) -> DeployTarget:
    """Build the deployment target from the three positional arguments.

    Raises:
        UsageError: If any of the names is missing or blank.
    """
    values = [resource_group, cluster_name, registry_name]
    if any(not (value or "").strip() for value in values):
        raise UsageError("Missing required parameters")
    return DeployTarget(
        resource_group=resource_group.strip(),
        cluster_name=cluster_name.strip(),
        registry_name=registry_name.strip(),
    )


class AksDeployer:
    """Provisions Azure resources and rolls the application out to AKS."""

    def __init__(
        self,
        target: DeployTarget,
        config: DeployConfig,
        runner: Optional[CommandRunner] = None,
        console: Optional[Console] = None,
        check_quota: bool = False,
        quota_checker_factory: Callable[..., ComputeQuotaChecker] = ComputeQuotaChecker,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the deployer.

        Args:
            target: Resource group, cluster and registry names.
            config: Deployment settings.
            runner: Command runner; a subprocess runner if omitted.
            console: Console for progress output.
            check_quota: Run the vCPU quota preflight before creating the cluster.
            quota_checker_factory: Builds the quota checker from (subscription_id, location).
            sleep: Sleep function used by the external IP loop.
            clock: Monotonic clock used by the external IP loop.
        """
        self.target = target
        self.config = config
        self.runner = runner or CommandRunner()
        self.console = console or default_console
        self.check_quota = check_quota
        self.quota_checker_factory = quota_checker_factory
        self.sleep = sleep
        self.clock = clock

        self.azure = AzureCli(self.runner, config)
        self.docker = DockerCli(self.runner)
        self.kubectl = Kubectl(self.runner)

        self.rendered_path = config.manifests.path("rendered_deployment")
        self.external_ip: Optional[str] = None
        self.records: List[StepRecord] = []

    def deploy(self) -> str:
        """Run the full deployment.

        Returns:
            str: The frontend's external IP.

        Raises:
            MissingDependencyError: If az, docker or kubectl is missing.
            PreconditionMissing: If the secret manifest has not been created.
            FatalProvisioningFailure: If a fatal step fails.
            ExternalIpTimeout: If ``ip_timeout`` is set and elapses.
        """
        check_tools()
        self.console.print(report.banner(self.target, self.config))

        pipeline = Pipeline(self.steps(), console=self.console)
        try:
            pipeline.run()
        finally:
            self.records = pipeline.records
            self.cleanup()

        self.console.print()
        self.console.print(report.summary(self.target, self.config, self.external_ip))
        return self.external_ip

    def steps(self) -> List[Step]:
        """The ordered deployment steps."""
        target = self.target
        steps = [
            Step("login", self.authenticate, title="Checking Azure login status", emoji="🔐"),
            Step("resource-group", lambda: self.azure.create_group(target), StepPolicy.ENSURE,
                 title="Creating Resource Group (if not exists)", emoji="📦"),
            Step("registry", self.ensure_registry, StepPolicy.ENSURE,
                 title="Creating Azure Container Registry (if not exists)", emoji="🐳"),
            Step("registry-login", lambda: self.azure.login_registry(target),
                 title="Logging in to Azure Container Registry", emoji="🔑"),
        ]

        for service in self.config.services:
            tag = target.image_tag(self.config, service.name)
            steps.append(Step(f"build-{service.name}", self._bind(self.docker.build, tag, service.context),
                              title=f"Building {service.name} image {tag}", emoji="🔧"))
            steps.append(Step(f"push-{service.name}", self._bind(self.docker.push, tag),
                              title=f"Pushing {service.name} to ACR", emoji="🔧"))

        for namespace in self.config.providers:
            steps.append(Step(f"provider-{namespace}", self._bind(self.azure.register_provider, namespace),
                              StepPolicy.BEST_EFFORT, title=f"Registering provider {namespace}", emoji="📝"))

        if self.check_quota:
            steps.append(Step("quota", self.preflight_quota,
                              title=f"Checking vCPU quota for {self.config.vm_size}", emoji="📏"))

        steps.extend([
            Step("cluster", self.ensure_cluster, StepPolicy.ENSURE,
                 title="Creating AKS cluster (this may take 5-10 minutes)", emoji="☸️ "),
            Step("credentials", lambda: self.azure.get_credentials(target),
                 title="Getting AKS credentials", emoji="🔑"),
            Step("render", self.render,
                 title="Updating K8s manifests with ACR name", emoji="🔧"),
            Step("secret", self.apply_secret, title="Creating secrets", emoji="🔐"),
            Step("config", self._bind(self.kubectl.apply, self.config.manifests.path("config")),
                 title="Applying ConfigMaps", emoji="📋"),
            Step("deployment", self._bind(self.kubectl.apply, self.rendered_path),
                 title="Deploying applications", emoji="🚀"),
            Step("service", self._bind(self.kubectl.apply, self.config.manifests.path("service")),
                 title="Creating services", emoji="🚀"),
        ])

        for deployment in self.config.deployments:
            steps.append(Step(f"rollout-{deployment}",
                              self._bind(self.kubectl.rollout_status, deployment, self.config.rollout_timeout),
                              title=f"Waiting for deployment/{deployment} to be ready", emoji="⏳"))

        for kind in ("nodes", "pods", "services"):
            steps.append(Step(f"status-{kind}", self._bind(self.show, kind), StepPolicy.BEST_EFFORT,
                              title=f"Checking cluster {kind}", emoji="📊"))

        steps.append(Step("external-ip", self.discover_external_ip,
                          title="Getting external IP address", emoji="🌐"))
        return steps

    def authenticate(self) -> None:
        try:
            self.azure.check_login()
        except AuthenticationRequired:
            self.console.print("Please login to Azure...")
            self.azure.login()

    def ensure_registry(self) -> None:
        if self.azure.registry_exists(self.target):
            raise ToleratedProvisioningConflict(f"Container registry {self.target.registry_name}")
        self.azure.create_registry(self.target)

    def ensure_cluster(self) -> None:
        if self.azure.cluster_exists(self.target):
            raise ToleratedProvisioningConflict(f"AKS cluster {self.target.cluster_name}")
        self.azure.create_cluster(self.target)

    def preflight_quota(self) -> None:
        """Stop the run when vCPU quota is definitely insufficient; warn if it can't be checked."""
        try:
            checker = self.quota_checker_factory(self.azure.subscription_id(), self.config.location)
            quota = checker.check(self.config.vm_size, self.config.node_count)
        except (CommandError, QuotaError, AzureError) as e:
            self.console.print(f"[yellow]Warning: could not check quota, continuing: {e}[/]")
            return

        for unit, info in quota.quotas.items():
            self.console.print(f"   {unit}: {info.required:g} required / {info.available:g} available")
        if not quota.is_sufficient():
            raise InsufficientQuota(
                "quota",
                f"Not enough vCPU quota for {self.config.node_count} x {self.config.vm_size} in {self.config.location}",
            )

    def render(self) -> Path:
        manifests = self.config.manifests
        base = manifests.path("deployment")
        if not base.exists():
            raise PreconditionMissing(f"{base} not found!")
        return render_manifest(
            base,
            self.rendered_path,
            manifests.placeholder,
            self.target.registry_name,
        )

    def apply_secret(self) -> None:
        secret = self.config.manifests.path("secret")
        if not secret.exists():
            raise PreconditionMissing(f"{secret} not found!", report.missing_secret(self.config))
        self.kubectl.apply(secret)

    def show(self, kind: str) -> None:
        result = self.kubectl.get(kind)
        self.console.print(result.stdout.rstrip())

    def discover_external_ip(self) -> str:
        self.console.print("Waiting for LoadBalancer to assign external IP (this may take 1-2 minutes)...")
        self.external_ip = wait_for_external_ip(
            lambda: self.kubectl.service_external_ip(self.config.frontend_service),
            self.config.frontend_service,
            interval=self.config.ip_poll_interval,
            initial_delay=self.config.ip_initial_delay,
            timeout=self.config.ip_timeout,
            sleep=self.sleep,
            clock=self.clock,
        )
        return self.external_ip

    def cleanup(self) -> None:
        if self.rendered_path.exists():
            self.rendered_path.unlink()
            logger.debug("Removed rendered manifest %s", self.rendered_path)

    @staticmethod
    def _bind(func: Callable, *args) -> Callable[[], object]:
        return lambda: func(*args)
