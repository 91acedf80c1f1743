"""userdesk-deploy: build, push and roll out the demo to a Kubernetes cluster."""

import logging
from typing import List, Optional, Sequence

import typer

from userdesk import __version__
from userdesk.config import get_settings
from userdesk.core.exceptions import DeployError
from userdesk.deploy.pipeline import Pipeline
from userdesk.deploy.plan import build_plan, next_steps, prerequisite_steps
from userdesk.deploy.steps import ApplyManifest, BuildImage, CommandRunner, Step, StepResult

app = typer.Typer(help="Deploy the user directory demo", no_args_is_help=True)

# Printed once, before the first step of each kind
PHASE_BANNERS = {
    BuildImage: "Building Docker images...",
    ApplyManifest: "Deploying to AKS...",
}


def _echo_step(step: Step, result: StepResult) -> None:
    status = "ok" if result.ok else "FAILED"
    typer.echo(f"  [{status}] {step.name}" + (f": {result.detail}" if not result.ok else ""))


def run_steps(steps: List[Step], runner: CommandRunner) -> None:
    """
    Run steps and print their status.

    Raises:
        DeployError: On the first failed step
    """
    announced = set()

    def announce_phase(step: Step) -> None:
        banner = PHASE_BANNERS.get(type(step))
        if banner is not None and banner not in announced:
            announced.add(banner)
            typer.echo(banner)

    report = Pipeline(steps, runner).run(on_step=_echo_step, on_start=announce_phase)
    if report.skipped:
        typer.echo(f"  Skipped {len(report.skipped)} remaining step(s)")
    report.raise_for_failure()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(level=level)


@app.command()
def check(verbose: bool = typer.Option(False, "--verbose", help="Debug logging")) -> None:
    """Verify that docker, kubectl and az are installed."""
    _configure_logging(verbose)
    typer.echo("Checking prerequisites...")
    try:
        run_steps(prerequisite_steps(), CommandRunner())
    except DeployError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    typer.echo("All prerequisites found.")


@app.command()
def deploy(
    registry: Optional[str] = typer.Option(None, "--registry", "-r", help="Image registry prefix"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Image tag"),
    manifests_dir: Optional[str] = typer.Option(None, "--manifests-dir", help="Directory with Kubernetes manifests"),
    with_ingress: bool = typer.Option(False, "--with-ingress/--no-ingress", help="Apply the ingress and wait for it"),
    attempts: Optional[int] = typer.Option(None, "--attempts", help="Ingress readiness attempts"),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between readiness attempts"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
) -> None:
    """Build and push both images, apply the manifests and optionally wait for the ingress."""
    _configure_logging(verbose)
    settings = get_settings()
    steps = build_plan(
        registry=registry or settings.registry,
        tag=tag or settings.image_tag,
        manifests_dir=manifests_dir or settings.manifests_dir,
        namespace=settings.namespace,
        with_ingress=with_ingress,
        attempts=attempts if attempts is not None else settings.ingress_attempts,
        interval=interval if interval is not None else settings.ingress_interval,
    )

    try:
        run_steps(steps, CommandRunner(dry_run=dry_run))
    except DeployError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)

    typer.echo("Deployment complete!")
    for hint in next_steps(settings.namespace):
        typer.echo(hint)


def version_callback(v: bool) -> None:
    if v:
        typer.echo(f"v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "-v", "--version", is_eager=True, callback=version_callback
    )
) -> None:
    pass


def main(argv: Optional[Sequence[str]] = None) -> None:
    app(args=list(argv) if argv is not None else None)


if __name__ == "__main__":
    main()
