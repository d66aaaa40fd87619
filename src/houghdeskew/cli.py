import math
from pathlib import Path

import click
from rich.console import Console

from .config import load_config
from .estimator import EstimateStatus
from .exceptions import ConfigurationError, DeskewError
from .logging_utils import setup_script_logging
from .pipeline import process_pairs
from .preview import select_preview

# Logger name; module loggers are its children
SCRIPT_NAME = "houghdeskew"

USAGE = "usage: deskew [-preview] <origfile> <destfile> [<origfile> <destfile> ...]"


def format_report(estimate):
    """The two report lines printed for each processed pair."""
    lines = f"{estimate.total} lines in total, {estimate.ignored} lines ignored."

    if estimate.status is EstimateStatus.NO_SEGMENTS:
        note = " (no lines detected)"
    elif estimate.status is EstimateStatus.NO_CANDIDATES:
        note = " (no usable lines)"
    elif estimate.status is EstimateStatus.LOW_CONFIDENCE:
        note = (
            f" (low confidence: {estimate.candidates}/{estimate.total} lines usable,"
            f" raw estimate {math.degrees(estimate.raw_angle):.3f} degrees)"
        )
    else:
        note = ""

    skew = f"Skew is {estimate.angle_degrees:.3f} degrees{note}"
    return lines, skew


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "-preview", "--preview", "preview", is_flag=True,
    help="Show each intermediate stage and wait for a key press",
)
@click.option(
    "--config", type=click.Path(path_type=Path), help="Path to a TOML configuration file"
)
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output for debugging"
)
@click.option(
    "--jobs", "-j", type=click.IntRange(min=1), default=1, show_default=True,
    help="Number of file pairs processed in parallel",
)
@click.option(
    "--fail-fast", is_flag=True, help="Stop at the first file pair that fails"
)
@click.option(
    "--snapshot-dir", type=click.Path(file_okay=False, path_type=Path),
    help="Write intermediate stages as PNG files into this directory",
)
@click.pass_context
def main(ctx, files, preview, config, verbose, jobs, fail_fast, snapshot_dir):
    """Estimate and correct the skew of scanned document images.

    FILES are pairs of source and destination images.
    """
    console = Console()

    if len(files) < 2 or len(files) % 2:
        console.print(USAGE, markup=False, highlight=False, soft_wrap=True)
        return

    try:
        config_data = load_config(config)
    except ConfigurationError as e:
        click.echo(f"✗ Failed to load configuration: {e}", err=True)
        ctx.exit(2)

    logger = setup_script_logging(SCRIPT_NAME, config_data.debug, verbose)

    if snapshot_dir is None and config_data.debug.save_intermediate:
        snapshot_dir = Path(config_data.debug.snapshot_dir)
    sink = select_preview(preview, snapshot_dir)
    if jobs > 1 and sink.interactive:
        raise click.UsageError("-preview cannot be combined with --jobs greater than 1")

    pairs = list(zip(files[::2], files[1::2]))
    logger.debug("Processing %s file pairs with %s job(s)", len(pairs), jobs)
    logger.debug(
        "Estimate config: window=±%s°, trim=%s, min ratio=%s",
        config_data.estimate.angle_window,
        config_data.estimate.trim_fraction,
        config_data.estimate.min_good_ratio,
    )

    def report(result):
        if not result.ok:
            return
        for line in format_report(result.estimate):
            console.print(line, markup=False, highlight=False, soft_wrap=True)

    try:
        results = process_pairs(
            pairs, config_data, sink, jobs=jobs, fail_fast=fail_fast, on_result=report
        )
    except DeskewError:
        logger.error("Stopped after the first failure")
        ctx.exit(1)

    failed = [r for r in results if not r.ok]
    logger.debug("Successfully processed: %s pairs", len(results) - len(failed))
    if failed:
        logger.error("Failed to process: %s of %s pairs", len(failed), len(results))
        ctx.exit(1)


if __name__ == "__main__":
    main()
