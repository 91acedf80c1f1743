"""Deploy steps: each wraps one external command and reports success or failure."""

import logging
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def last_error_line(self, fallback: str) -> str:
        return self.stderr.strip().split("\n")[-1] or fallback


class CommandRunner:
    """Runs external commands. In dry-run mode commands are logged instead of executed."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def run(self, args: List[str]) -> CommandResult:
        if self.dry_run:
            logger.info(f"[dry-run] {' '.join(args)}")
            return CommandResult(0)

        logger.debug(f"Running {' '.join(args)}")
        try:
            result = subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError as e:
            return CommandResult(127, "", str(e))
        return CommandResult(result.returncode, result.stdout, result.stderr)

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def sleep(self, seconds: float) -> None:
        if not self.dry_run:
            time.sleep(seconds)


@dataclass
class StepResult:
    ok: bool
    detail: str = ""


class Step(ABC):
    """Base class for all deploy steps."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def run(self, runner: CommandRunner) -> StepResult:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CheckPrerequisite(Step):
    """Verify that a CLI tool is installed."""

    def __init__(self, tool: str):
        self.tool = tool

    @property
    def name(self) -> str:
        return f"check {self.tool}"

    def run(self, runner: CommandRunner) -> StepResult:
        path = runner.which(self.tool)
        if path is None:
            return StepResult(False, f"{self.tool} is not installed or not on PATH")
        return StepResult(True, path)


class BuildImage(Step):
    """``docker build -t TAG CONTEXT``"""

    def __init__(self, tag: str, context: str):
        self.tag = tag
        self.context = context

    @property
    def name(self) -> str:
        return f"build {self.tag}"

    def run(self, runner: CommandRunner) -> StepResult:
        result = runner.run(["docker", "build", "-t", self.tag, self.context])
        if not result.ok:
            return StepResult(False, result.last_error_line("build failed"))
        return StepResult(True, self.tag)


class PushImage(Step):
    """``docker push TAG``"""

    def __init__(self, tag: str):
        self.tag = tag

    @property
    def name(self) -> str:
        return f"push {self.tag}"

    def run(self, runner: CommandRunner) -> StepResult:
        result = runner.run(["docker", "push", self.tag])
        if not result.ok:
            return StepResult(False, result.last_error_line("push failed"))
        return StepResult(True, self.tag)


class ApplyManifest(Step):
    """``kubectl apply -f PATH``"""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def name(self) -> str:
        return f"apply {self.path}"

    def run(self, runner: CommandRunner) -> StepResult:
        result = runner.run(["kubectl", "apply", "-f", str(self.path)])
        if not result.ok:
            return StepResult(False, result.last_error_line("apply failed"))
        return StepResult(True, result.stdout.strip())


class WaitForCondition(Step):
    """
    Poll a command until it succeeds with non-empty output.

    The probe runs at most ``attempts`` times with a fixed ``interval``
    sleep between attempts; there is no backoff.
    """

    def __init__(self, description: str, probe: List[str], attempts: int = 30, interval: float = 10.0):
        self.description = description
        self.probe = probe
        self.attempts = attempts
        self.interval = interval

    @property
    def name(self) -> str:
        return f"wait for {self.description}"

    def run(self, runner: CommandRunner) -> StepResult:
        if runner.dry_run:
            runner.run(self.probe)
            return StepResult(True, "skipped in dry run")

        for attempt in range(1, self.attempts + 1):
            result = runner.run(self.probe)
            output = result.stdout.strip()
            if result.ok and output:
                return StepResult(True, output)

            logger.info(f"Waiting for {self.description} ({attempt}/{self.attempts})...")
            if attempt < self.attempts:
                runner.sleep(self.interval)

        return StepResult(False, f"{self.description} not ready after {self.attempts} attempts")
