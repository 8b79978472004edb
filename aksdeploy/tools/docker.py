"""Docker CLI wrapper."""
from ..runner import CommandResult, CommandRunner


class DockerCli:
    """Builds and pushes images; output is streamed so build logs stay visible."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def build(self, tag: str, context: str) -> CommandResult:
        return self.runner.run(["docker", "build", "-t", tag, context], capture=False)

    def push(self, tag: str) -> CommandResult:
        return self.runner.run(["docker", "push", tag], capture=False)
