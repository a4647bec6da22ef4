from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from labsweep.device import MockSpectrumAnalyzer, SCPISpectrumAnalyzer
from labsweep.types import SPECTRUM_ANALYZER, LabsweepError
from labsweep.util import (
    DEFAULT_LOGLEVEL,
    list_visa_devices,
    shutdown_log,
    start_log,
)


def print_tree(cmd, prefix="", parent_ctx=None):
    """Print command tree starting from given command."""
    ctx = click.Context(cmd, info_name=cmd.name, parent=parent_ctx)

    # Only print root name if no parent
    if not parent_ctx:
        click.echo(cmd.name)

    for sub in sorted(cmd.list_commands(ctx)):
        sub_cmd = cmd.get_command(ctx, sub)
        if isinstance(sub_cmd, click.Group):
            click.echo(f"{prefix}└── {sub}")
            print_tree(sub_cmd, prefix + "    ", ctx)
        else:
            click.echo(f"{prefix}└── {sub}")


def tree_option(f):
    """Add --tree option to command."""

    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        print_tree(ctx.command)
        ctx.exit()

    return click.option(
        "--tree",
        is_flag=True,
        help="Show command tree from this point",
        expose_value=False,
        is_eager=True,
        callback=callback,
    )(f)


@click.group()
@tree_option
def cli():
    """labsweep - laboratory instrument drivers and sweeps.

    - Acquire spectrum analyzer traces from real or mock hardware

    - List connected VISA instruments
    """
    pass


@cli.command()
@click.option("--address", "-a", type=str, default=None, help="VISA address of the analyzer")
@click.option("--mock", is_flag=True, help="Use a simulated analyzer")
@click.option("--trace", "-t", "trace_num", type=click.IntRange(1, 3), default=1, help="Trace number")
@click.option("--start", type=float, default=None, help="Start frequency (Hz)")
@click.option("--stop", type=float, default=None, help="Stop frequency (Hz)")
@click.option("--points", "-p", type=click.IntRange(min=1), default=None, help="Number of sweep points to set")
@click.option(
    "--query-points/--no-query-points",
    default=True,
    help="Whether the analyzer can report its number of sweep points",
)
@click.option("--hardwired-points", type=click.IntRange(min=1), default=None, help="Fixed number of sweep points")
@click.option("--timeout", type=float, default=None, help="Sweep timeout (s)")
@click.option("--strict", is_flag=True, help="Fail if trace length and point count disagree")
@click.option("--trace-log", type=click.Path(dir_okay=False), default=None, help="Log every VISA exchange to this file")
@click.option("--log-to-stdout/--no-log-to-stdout", default=False, help="Print log to stderr")
@click.option("--log-level", default=DEFAULT_LOGLEVEL, help="Log level")
def trace(
    address: Optional[str],
    mock: bool,
    trace_num: int,
    start: Optional[float],
    stop: Optional[float],
    points: Optional[int],
    query_points: bool,
    hardwired_points: Optional[int],
    timeout: Optional[float],
    strict: bool,
    trace_log: Optional[str],
    log_to_stdout: bool,
    log_level: str,
):
    """Acquire one XY trace from a spectrum analyzer and print it."""
    if mock == (address is not None):
        raise click.UsageError("Give exactly one of --address or --mock")

    start_log(log_to_file=False, log_to_stdout=log_to_stdout, log_level=log_level)
    profile = dict(
        capable_to_query_number_of_x_points_in_hardware=query_points,
        hardwired_number_of_x_points=hardwired_points,
    )
    try:
        if mock:
            device = MockSpectrumAnalyzer(**profile)
        else:
            device = SCPISpectrumAnalyzer(address, trace_logfile=trace_log, **profile)
        device.open()
        try:
            sa = SPECTRUM_ANALYZER.get_interface(device)
            if start is not None:
                sa.set_frequency_start(start)
            if stop is not None:
                sa.set_frequency_stop(stop)
            if points is not None:
                sa.set_sweep_points(points)
            freqs, values = sa.get_trace_xy(trace=trace_num, timeout=timeout, strict=strict)
            unit = device.get_power_unit()
            capability = sa.capability
        finally:
            device.close()
    except LabsweepError as e:
        logger.error(f"Trace acquisition failed: {e}")
        raise click.ClickException(str(e))
    finally:
        shutdown_log()

    table = Table(title=f"Trace {trace_num} ({capability} point count)")
    if len(freqs) == len(values):
        table.add_column("Frequency (Hz)", justify="right")
        table.add_column(f"Value ({unit})", justify="right")
        for f, v in zip(freqs, values):
            table.add_row(f"{f:.6g}", f"{v:.3f}")
    else:
        # no frequency axis for these samples, show them by index
        click.echo(
            f"Warning: trace length {len(values)} differs from {capability} "
            f"point count {len(freqs)}, frequencies are not shown",
            err=True,
        )
        table.add_column("Sample", justify="right")
        table.add_column(f"Value ({unit})", justify="right")
        for i, v in enumerate(values):
            table.add_row(str(i), f"{v:.3f}")
    Console().print(table)


@cli.command()
@click.option("--filter", "-f", "filter_string", type=str, default=None, help="Only resources containing this string")
def visa(filter_string: Optional[str]):
    """List connected VISA instruments."""
    devices = list_visa_devices(filter_string=filter_string)
    if not devices:
        click.echo("No VISA devices found")
        return

    table = Table(title="VISA devices")
    table.add_column("Address")
    table.add_column("Status")
    table.add_column("IDN / error")
    for addr, info in devices.items():
        table.add_row(addr, info["status"], info["idn"] or info["error"])
    Console().print(table)
