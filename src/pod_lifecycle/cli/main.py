import asyncio
import signal
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pod_lifecycle import __version__
from pod_lifecycle.config.loader import ConfigError, ConfigLoader
from pod_lifecycle.config.schema import AgentConfig

console = Console(stderr=True)


def _run_async(coro):
    """Run an async function from sync Click commands."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context) -> AgentConfig:
    path = ctx.obj.get("config_path")
    loader = ConfigLoader(Path(path) if path else None)
    try:
        return loader.load(**ctx.obj["overrides"])
    except ConfigError as e:
        console.print(f"[red]Config error: {escape(str(e))}[/red]")
        raise SystemExit(1)


def _connect(config: AgentConfig):
    from kubernetes.config import ConfigException

    from pod_lifecycle.sources.kubernetes import KubernetesSnapshotSource

    try:
        return KubernetesSnapshotSource.from_kubeconfig(config.namespace, config.kubeconfig)
    except (ConfigException, OSError) as e:
        console.print(f"[red]Cluster config error: {escape(str(e))}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="pod-lifecycle")
@click.option("--config", "config_path", default=None, type=click.Path(), help="Agent YAML config file")
@click.option("--kubeconfig", default=None, help="Absolute path to the kubeconfig file")
@click.option("--logdir", "log_dir", default=None, help="Absolute path to the event log directory")
@click.option("--namespace", default=None, help="Namespace to watch")
@click.option("--interval", "interval_seconds", default=None, type=float, help="Seconds between ticks")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    kubeconfig: str | None,
    log_dir: str | None,
    namespace: str | None,
    interval_seconds: float | None,
) -> None:
    """Pod lifecycle agent: logs pod lifecycle events and metrics samples."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["overrides"] = {
        "kubeconfig": kubeconfig,
        "log_dir": log_dir,
        "namespace": namespace,
        "interval_seconds": interval_seconds,
    }


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Run the agent in the foreground, writing events to the log directory."""
    from pod_lifecycle.engine.driver import TickDriver
    from pod_lifecycle.engine.reconciler import ReconciliationEngine
    from pod_lifecycle.logging_config import configure_logging, get_logger
    from pod_lifecycle.sinks.event_log import EventLogger
    from pod_lifecycle.sinks.rotation import RotatingLogFile

    config = _load_config(ctx)
    configure_logging(config.log_level)
    log = get_logger(component="agent", namespace=config.namespace)
    source = _connect(config)

    try:
        log_file = RotatingLogFile(Path(config.log_dir), rotation=config.rotation_interval)
    except OSError as e:
        console.print(f"[red]Can't write log to {config.log_dir}: {escape(str(e))}[/red]")
        raise SystemExit(1)

    sink = EventLogger(log_file)
    engine = ReconciliationEngine.from_config(config, source, sink)
    driver = TickDriver(
        engine,
        interval_seconds=config.interval_seconds,
        tick_timeout_seconds=config.tick_timeout_seconds,
    )
    log.info("write log to", log_dir=config.log_dir)

    async def run_agent() -> None:
        await driver.start()
        stop_event = asyncio.Event()

        def handle_signal() -> None:
            console.print("\n[yellow]Shutting down...[/yellow]")
            stop_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_signal)

        console.print("[green]Pod lifecycle agent running.[/green] Press Ctrl+C to stop.")
        await stop_event.wait()
        await driver.stop()

    try:
        _run_async(run_agent())
    finally:
        sink.close()


@cli.command()
@click.pass_context
def once(ctx: click.Context) -> None:
    """Run a single tick against the cluster, printing events to stdout."""
    from pod_lifecycle.engine.reconciler import ReconciliationEngine
    from pod_lifecycle.logging_config import configure_logging
    from pod_lifecycle.sinks.event_log import EventLogger

    config = _load_config(ctx)
    configure_logging(config.log_level)

    source = _connect(config)
    engine = ReconciliationEngine.from_config(config, source, EventLogger(sys.stdout))
    result = _run_async(engine.tick())

    table = Table(title=f"Tick: {config.namespace}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Aborted", "yes" if result.aborted else "no")
    table.add_row("Active", str(len(engine.state.active)))
    table.add_row("Retired", str(len(engine.state.retired)))
    for event_type, count in sorted(result.counts().items()):
        table.add_row(event_type, str(count))
    console.print(table)

    if result.aborted:
        raise SystemExit(1)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the config file and show the effective settings."""
    config = _load_config(ctx)

    table = Table(title="Agent config", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in config.model_dump().items():
        table.add_row(name, "-" if value is None else str(value))
    console.print("[green]Config valid.[/green]")
    console.print(table)
