"""Ordered deploy pipeline that halts on the first failing step."""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from userdesk.core.exceptions import DeployError
from userdesk.deploy.steps import CommandRunner, Step, StepResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineReport:
    """Results of the steps that ran, in order."""

    results: List[Tuple[Step, StepResult]] = field(default_factory=list)
    skipped: List[Step] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for _, result in self.results)

    @property
    def failed_step(self) -> Optional[Step]:
        for step, result in self.results:
            if not result.ok:
                return step
        return None

    def raise_for_failure(self) -> None:
        """
        Raises:
            DeployError: If any step failed
        """
        for step, result in self.results:
            if not result.ok:
                raise DeployError(f"Step '{step.name}' failed: {result.detail}", step=step.name)


class Pipeline:
    """Runs steps in order; later steps are skipped once one fails."""

    def __init__(self, steps: List[Step], runner: Optional[CommandRunner] = None):
        self.steps = list(steps)
        self.runner = runner if runner is not None else CommandRunner()

    def run(
        self,
        on_step: Optional[Callable[[Step, StepResult], None]] = None,
        on_start: Optional[Callable[[Step], None]] = None,
    ) -> PipelineReport:
        """
        Execute the pipeline.

        Args:
            on_step: Optional callback invoked after each step with its result
            on_start: Optional callback invoked before each step runs

        Returns:
            Report of executed and skipped steps
        """
        report = PipelineReport()
        for index, step in enumerate(self.steps):
            logger.info(f"Running step: {step.name}")
            if on_start is not None:
                on_start(step)
            result = step.run(self.runner)
            report.results.append((step, result))
            if on_step is not None:
                on_step(step, result)

            if not result.ok:
                logger.error(f"Step '{step.name}' failed: {result.detail}")
                report.skipped = self.steps[index + 1:]
                break

        return report
