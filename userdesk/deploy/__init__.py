from userdesk.deploy.pipeline import Pipeline, PipelineReport
from userdesk.deploy.plan import build_plan
from userdesk.deploy.steps import (
    ApplyManifest,
    BuildImage,
    CheckPrerequisite,
    CommandRunner,
    PushImage,
    Step,
    StepResult,
    WaitForCondition,
)

__all__ = [
    "ApplyManifest",
    "BuildImage",
    "CheckPrerequisite",
    "CommandRunner",
    "Pipeline",
    "PipelineReport",
    "PushImage",
    "Step",
    "StepResult",
    "WaitForCondition",
    "build_plan",
]
