# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/cli/app.py
from __future__ import annotations

import tempfile
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
import yaml

from gpuinit.config.loader import load_metadata_file
from gpuinit.config.metadata import (
    ChainedMetadataAccessor,
    GceMetadataAccessor,
    StaticMetadataAccessor,
)
from gpuinit.config.resolver import resolve
from gpuinit.host.probe import HostProbe
from gpuinit.logging.log import init_logging
from gpuinit.observers.dispatcher import EventBus
from gpuinit.observers.events import StepRetried, new_ctx, stamp
from gpuinit.observers.jsonfile import JsonFileObserver
from gpuinit.observers.logger import LoggerObserver
from gpuinit.provision.orchestrator import APT_ENV, Orchestrator
from gpuinit.system.services import build_system
from gpuinit.utils.execution import ExecutionContext
from gpuinit.utils.retry import RetryPolicy


app = typer.Typer(help="GPU driver provisioning for compute nodes")


def _accessor(metadata_file: Optional[Path], use_metadata_server: bool):
    accessors = []
    if metadata_file is not None:
        accessors.append(StaticMetadataAccessor(load_metadata_file(metadata_file)))
    if use_metadata_server:
        accessors.append(GceMetadataAccessor())
    return ChainedMetadataAccessor(accessors)


@app.command()
def install(
    metadata_file: Optional[Path] = typer.Option(
        None, "--metadata-file", "-f", exists=True, dir_okay=False,
        help="YAML file of option overrides (gpu-driver-provider, cuda-version, ...)",
    ),
    use_metadata_server: bool = typer.Option(
        True, "--metadata-server/--no-metadata-server",
        help="Read options from the compute metadata server",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Probe and log the plan without mutating the host"
    ),
    root: Path = typer.Option(
        Path("/"), "--root", help="Filesystem root for generated files"
    ),
    workdir: Optional[Path] = typer.Option(
        None, "--workdir", help="Directory for downloaded installers (default: a temp dir)"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for run logs (default: /var/log/gpuinit)"
    ),
    max_attempts: int = typer.Option(10, "--max-attempts", min=1, help="Attempts per retried step"),
    retry_delay: float = typer.Option(5.0, "--retry-delay", min=0, help="Seconds between attempts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output on the console"),
):
    """
    Detect the GPU, install the driver stack and, if requested, the
    GPU utilization agent.

    Exit status: 0 when installed or skipped (no GPU), 1 on failure.
    """
    logger, run_id, log_path = init_logging(base_dir=log_dir, verbose=verbose)

    bus = EventBus(
        observers=[
            LoggerObserver(logger),
            JsonFileObserver(log_path.with_suffix(".jsonl")),
        ]
    )
    run_ctx = new_ctx(run_id=run_id)

    def on_retry(step: str, attempt: int, reason: str) -> None:
        bus.emit(StepRetried(step=step, attempt=attempt, reason=reason, **stamp(run_ctx)))

    ctx = ExecutionContext(dry_run=dry_run, root=root, env=dict(APT_ENV))
    system = build_system(
        ctx,
        RetryPolicy(max_attempts=max_attempts, delay=retry_delay),
        workdir=workdir or Path(tempfile.mkdtemp(prefix="gpuinit-")),
        on_retry=on_retry,
    )

    # resolved once, before the first mutation
    config = resolve(_accessor(metadata_file, use_metadata_server))

    outcome = Orchestrator(system=system, config=config, bus=bus, run_ctx=run_ctx).run()
    typer.echo(outcome.summary())
    raise typer.Exit(code=outcome.exit_code)


@app.command()
def probe():
    """
    Print what the node looks like. Read-only.
    """
    system = build_system(ExecutionContext(dry_run=True))
    host = HostProbe(system.runner, system.files).detect_host()
    data = asdict(host)
    data["os_family"] = host.os_family.value
    typer.echo(yaml.safe_dump(data, sort_keys=False))


@app.command("show-config")
def show_config(
    metadata_file: Optional[Path] = typer.Option(
        None, "--metadata-file", "-f", exists=True, dir_okay=False,
        help="YAML file of option overrides",
    ),
    use_metadata_server: bool = typer.Option(
        True, "--metadata-server/--no-metadata-server",
        help="Read options from the compute metadata server",
    ),
):
    """
    Print the resolved provisioning configuration as YAML.
    """
    config = resolve(_accessor(metadata_file, use_metadata_server))
    typer.echo(yaml.safe_dump(config.model_dump(), sort_keys=False))


if __name__ == "__main__":
    app()
