"""Error taxonomy for the AKS deployer."""
import re
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .runner import CommandResult

# Azure CLI prints ARM errors as "(Code) message" and/or "Code: Code"
_ERROR_CODE_PATTERNS = (
    re.compile(r"^\s*Code:\s*(\w+)", re.MULTILINE),
    re.compile(r"^\s*(?:ERROR:\s*)?\((\w+)\)", re.MULTILINE),
)

ALREADY_EXISTS_CODES = {
    "alreadyexists",
    "resourceexists",
    "resourcegroupexists",
    "alreadyinuse",
    "registrynamealreadyinuse",
}


class DeployError(Exception):
    """Base class for errors that stop a deployment."""
    exit_code = 1


class UsageError(DeployError):
    """Raised when required CLI arguments are missing or empty."""
    pass


class MissingDependencyError(DeployError):
    """Raised when a required command-line tool is not installed."""

    def __init__(self, tool: str, install_url: str):
        self.tool = tool
        self.install_url = install_url
        super().__init__(f"{tool} is not installed. Please install it first: {install_url}")


class AuthenticationRequired(DeployError):
    """Raised when the Azure CLI has no valid session; recovered by an interactive login."""
    pass


class PreconditionMissing(DeployError):
    """Raised when an operator-provided file the run depends on is absent."""

    def __init__(self, message: str, remediation: str = ""):
        self.remediation = remediation
        super().__init__(message)


class CommandError(Exception):
    """Raised by the runner when an external command exits non-zero."""

    def __init__(self, result: "CommandResult", message: Optional[str] = None):
        self.result = result
        super().__init__(message or f"Command failed with exit code {result.returncode}: {result.display}")

    @property
    def output(self) -> str:
        """Diagnostic output of the tool, stderr first."""
        return (self.result.stderr or self.result.stdout).strip()

    @property
    def error_code(self) -> Optional[str]:
        """The ARM error code reported by the Azure CLI, if any."""
        text = f"{self.result.stderr}\n{self.result.stdout}"
        for pattern in _ERROR_CODE_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return None

    @property
    def already_exists(self) -> bool:
        """Whether the failure means the target resource is already there."""
        code = self.error_code
        if code and code.lower() in ALREADY_EXISTS_CODES:
            return True
        text = f"{self.result.stderr}\n{self.result.stdout}".lower()
        return "already exists" in text or "already in use" in text


class ToleratedProvisioningConflict(Exception):
    """An ensure step found its resource already present; logged, never propagated."""

    def __init__(self, resource: str, detail: str = ""):
        self.resource = resource
        self.detail = detail
        super().__init__(f"{resource} already exists")


class FatalProvisioningFailure(DeployError):
    """Raised when a fatal step fails; carries the tool's output verbatim."""

    def __init__(self, step: str, detail: str = "", cause: Optional[CommandError] = None):
        self.step = step
        self.detail = detail
        self.cause = cause
        super().__init__(f"Step '{step}' failed" + (f": {detail}" if detail else ""))


class RolloutTimeout(FatalProvisioningFailure):
    """Raised when a deployment does not become ready within the rollout timeout."""
    pass


class ExternalIpTimeout(DeployError):
    """Raised when the LoadBalancer has not assigned an IP before the configured deadline."""

    def __init__(self, service: str, timeout: float):
        self.service = service
        self.timeout = timeout
        super().__init__(f"No external IP assigned to service '{service}' after {timeout:g}s")


class QuotaError(DeployError):
    """Raised when the quota preflight cannot be evaluated."""
    pass


class InsufficientQuota(FatalProvisioningFailure):
    """Raised when the subscription lacks vCPU quota for the requested cluster."""
    pass
