"""
CLI interface for pipepub.

The CLI is the build-step driver: the host build system calls
``pipepub publish`` after the build step finishes. The job state written by
the source integration is loaded from a YAML/JSON state file, registered in
a JobStateStore and handed to the publisher explicitly.
"""

import sys
from pathlib import Path

import click
import yaml

from pipepub import __version__
from pipepub.errors import ConfigError, ReportError


BUILD_RESULTS = ["SUCCESS", "UNSTABLE", "FAILURE", "ABORTED", "NOT_BUILT"]


@click.group()
@click.version_option(version=__version__, prog_name="pipepub")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to config.yaml (defaults to $PIPEPUB_HOME/config.yaml)")
@click.pass_context
def main(ctx, config_path):
    """
    pipepub - Publish build outputs and report pipeline job results.
    """
    from pipepub.config import PublisherConfig, load_config
    from pipepub.utils import setup_logging

    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        if config_path is not None:
            raise click.ClickException(str(e))
        # No settings file: run with defaults
        config = PublisherConfig()
    except ConfigError as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    ctx.obj["config"] = config
    setup_logging(
        log_file=config.get_log_file_path(),
        log_level=config.get_log_level(),
        log_format=config.get_log_format(),
        console_output=config.should_log_to_console(),
    )


def _load_state_file(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid state file {path}: {e}")
    if not isinstance(data, dict):
        raise click.ClickException(f"State file {path} must contain a mapping")
    return data


@main.command("publish")
@click.option("--state", "state_file", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Job state file written by the source integration")
@click.option("--build-id", required=True, help="Build/action identifier")
@click.option("--project", required=True, help="Build project name")
@click.option("--result", "build_result", type=click.Choice(BUILD_RESULTS, case_sensitive=False),
              default="SUCCESS", show_default=True, help="Result of the build step")
@click.option("--workspace", type=click.Path(file_okay=False, path_type=Path), default=Path("."),
              show_default=True, help="Build workspace")
@click.option("--output", "outputs", multiple=True,
              help="Output location (repeatable); overrides output_locations in config")
@click.option("--dry-run", is_flag=True, help="Do not write any artifacts")
@click.pass_context
def publish(ctx, state_file, build_id, project, build_result, workspace, outputs, dry_run):
    """
    Publish build outputs and report the job result.

    Examples:

        pipepub publish --state job.yaml --build-id 42 --project web --output dist

        pipepub publish --state job.yaml --build-id 42 --project web --result FAILURE
    """
    from pipepub.client import ClientFactory
    from pipepub.publisher import PublishOrchestrator
    from pipepub.schemas import BuildContext, BuildOutcome, JobStateModel
    from pipepub.state_store import InMemoryJobStateStore
    from pipepub.transfer import ArchiveTransferWorker, NoOpTransferWorker

    config = ctx.obj["config"]

    if dry_run:
        click.echo("=" * 50)
        click.echo("=== DRY RUN MODE === (no artifacts written)")
        click.echo("=" * 50)

    entries = [{"output": o} for o in outputs] if outputs else config.output_locations
    try:
        model = JobStateModel.from_dict(_load_state_file(state_file))
        worker = NoOpTransferWorker() if dry_run else ArchiveTransferWorker(config.get_artifact_root())
        publisher = PublishOrchestrator.from_config(
            entries,
            transfer_worker=worker,
            client_factory=ClientFactory(),
            max_outputs=config.max_outputs,
        )
    except (ConfigError, KeyError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    build = BuildContext(
        build_id=build_id,
        project_name=project,
        outcome=BuildOutcome(build_result.upper()),
        workspace=workspace,
    )
    store = InMemoryJobStateStore()
    store.put_model(build.key, model)

    try:
        result = publisher.perform(build, store)
    except ReportError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(2)

    if result.succeeded:
        click.echo(f"✓ {project} #{build_id} published")
    else:
        click.echo(f"✗ {project} #{build_id} failed: {result.message}", err=True)
        sys.exit(1)


@main.command("validate")
@click.argument("outputs", nargs=-1)
@click.pass_context
def validate(ctx, outputs):
    """
    Validate output locations without publishing.

    Uses the OUTPUTS arguments, or output_locations from config when none are given.
    """
    from pipepub.config import parse_output_locations, validate_output_count

    config = ctx.obj["config"]
    entries = [{"output": o} for o in outputs] if outputs else config.output_locations
    try:
        declarations = parse_output_locations(entries)
        validate_output_count(declarations, config.max_outputs)
    except ConfigError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ {len(declarations)} output location(s)")
    for declaration in declarations:
        click.echo(f"  {declaration.output}")


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize pipepub configuration."""
    from pipepub.config import MAX_OUTPUTS, get_pipepub_home

    home = get_pipepub_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / "config.yaml"
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    default_cfg = {
        "output_locations": [],
        "max_outputs": MAX_OUTPUTS,
        "artifact_root": str(home / "artifacts"),
        "env_file": str(home / ".env"),
        "logging": {"level": "INFO", "format": "pretty", "console": True},
    }
    cfg_path.write_text(yaml.safe_dump(default_cfg, sort_keys=False))

    env_path = home / ".env"
    if not env_path.exists():
        env_path.write_text("# PIPEPUB_REGION=...\n")

    click.echo(f"Initialized pipepub config at {cfg_path}")


if __name__ == "__main__":
    main()
