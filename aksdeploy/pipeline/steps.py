"""Ordered step pipeline with per-step failure policy."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from rich.console import Console

from ..console import console as default_console
from ..errors import CommandError, FatalProvisioningFailure, ToleratedProvisioningConflict

logger = logging.getLogger(__name__)


class StepPolicy(Enum):
    FATAL = "fatal"  # any failure stops the run
    ENSURE = "ensure"  # "already exists" is fine, anything else stops the run
    BEST_EFFORT = "best_effort"  # any failure is logged and skipped


class StepOutcome(Enum):
    DONE = "done"
    ALREADY_EXISTS = "already_exists"
    SKIPPED = "skipped"


@dataclass
class Step:
    """One external operation of a deployment."""
    name: str
    action: Callable[[], object]
    policy: StepPolicy = StepPolicy.FATAL
    title: Optional[str] = None
    emoji: str = "▶️"

    @property
    def label(self) -> str:
        return self.title or self.name


@dataclass
class StepRecord:
    """What happened to a step during a run."""
    step: Step
    outcome: StepOutcome
    detail: str = ""


@dataclass
class Pipeline:
    """Runs steps in order, halting on fatal failures."""
    steps: List[Step]
    console: Console = field(default_factory=lambda: default_console)
    records: List[StepRecord] = field(default_factory=list)

    def run(self) -> List[StepRecord]:
        """Execute every step.

        Returns:
            List[StepRecord]: One record per step, in order.

        Raises:
            FatalProvisioningFailure: On the first failure a step's policy does not tolerate.
        """
        self.records = []
        for number, step in enumerate(self.steps, 1):
            self.console.print(f"\n{step.emoji} Step {number}: {step.label}...")
            record = self._run_step(step)
            self.records.append(record)
        return self.records

    def _run_step(self, step: Step) -> StepRecord:
        try:
            step.action()
        except ToleratedProvisioningConflict as e:
            if step.policy is StepPolicy.FATAL:
                raise FatalProvisioningFailure(step.name, str(e))
            self.console.print(f"[yellow]{e.resource} already exists, continuing...[/]")
            logger.debug("Tolerated conflict in %s: %s", step.name, e.detail)
            return StepRecord(step, StepOutcome.ALREADY_EXISTS, e.detail)
        except CommandError as e:
            if step.policy is StepPolicy.ENSURE and e.already_exists:
                self.console.print(f"[yellow]{step.label}: already exists, continuing...[/]")
                return StepRecord(step, StepOutcome.ALREADY_EXISTS, e.output)
            if step.policy is StepPolicy.BEST_EFFORT:
                self.console.print(f"[yellow]Warning: {step.label} failed, continuing: {e.output or e}[/]")
                return StepRecord(step, StepOutcome.SKIPPED, e.output)
            raise FatalProvisioningFailure(step.name, e.output, cause=e)
        except FatalProvisioningFailure as e:
            if step.policy is StepPolicy.BEST_EFFORT:
                self.console.print(f"[yellow]Warning: {step.label} failed, continuing: {e.detail}[/]")
                return StepRecord(step, StepOutcome.SKIPPED, e.detail)
            raise

        self.console.print(f"[green]✅ {step.label}[/]")
        return StepRecord(step, StepOutcome.DONE)
