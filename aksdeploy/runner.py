"""External command execution."""
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .errors import CommandError, MissingDependencyError

logger = logging.getLogger(__name__)

# Tool name -> installation docs
REQUIRED_TOOLS: Dict[str, str] = {
    "az": "https://docs.microsoft.com/en-us/cli/azure/install-azure-cli",
    "docker": "https://docs.docker.com/get-docker/",
    "kubectl": "https://kubernetes.io/docs/tasks/tools/ (or run: az aks install-cli)",
}


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""
    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def display(self) -> str:
        return " ".join(self.command)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def subprocess_runner(cmd: List[str], capture: bool = True, timeout: Optional[float] = None) -> CommandResult:
    """Run a command with subprocess.

    Args:
        cmd: Command and arguments.
        capture: If False, the tool writes straight to the terminal.
        timeout: Seconds before the process is killed.

    Returns:
        CommandResult: Exit code and captured output.

    Raises:
        subprocess.TimeoutExpired: If the command outlives ``timeout``.
    """
    result = subprocess.run(
        cmd,
        text=True,
        capture_output=capture,
        timeout=timeout,
    )
    return CommandResult(cmd, result.returncode, result.stdout or "", result.stderr or "")


Runner = Callable[..., CommandResult]


class CommandRunner:
    """Runs external commands, logging each one and raising on failure."""

    def __init__(self, runner: Optional[Runner] = None):
        self._runner = runner or subprocess_runner

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run a command.

        Args:
            cmd: Command and arguments.
            check: Raise CommandError on a non-zero exit code.
            capture: Capture output instead of streaming it to the terminal.
            timeout: Seconds before the process is killed.

        Returns:
            CommandResult: Exit code and captured output.

        Raises:
            CommandError: If ``check`` is set and the command fails.
        """
        logger.debug("Running command: %s", " ".join(cmd))
        result = self._runner(cmd, capture=capture, timeout=timeout)
        if result.stdout:
            logger.debug("stdout: %s", result.stdout.strip())
        if result.stderr:
            logger.debug("stderr: %s", result.stderr.strip())
        if check and not result.ok:
            raise CommandError(result)
        return result


def check_tools(tools: Optional[Dict[str, str]] = None) -> None:
    """Ensure every required tool is on PATH.

    Raises:
        MissingDependencyError: For the first tool that cannot be found.
    """
    for tool, install_url in (tools or REQUIRED_TOOLS).items():
        if shutil.which(tool) is None:
            raise MissingDependencyError(tool, install_url)
        logger.debug("Found %s at %s", tool, shutil.which(tool))
