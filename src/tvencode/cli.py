"""Command-line interface for TVEncode."""

import sys
from pathlib import Path
from typing import NoReturn

import click

from tvencode import __version__
from tvencode.config import EncodeSettings, load_config
from tvencode.core.executor import missing_tools
from tvencode.core.pipeline import BatchEncoder
from tvencode.core.probe import StreamProbe
from tvencode.core.scanner import FileScanner
from tvencode.models.encode import AudioMode, EncoderProfile
from tvencode.models.result import EncodeResult
from tvencode.utils.logger import get_logger, setup_logging

STATUS_STYLES = {
    "success": "green",
    "skipped": "yellow",
    "dry_run": "cyan",
    "failed": "red",
    "error": "red",
}


def _fail(message: str) -> NoReturn:
    click.echo(f"ERROR: {message}", err=True)
    sys.exit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """TVEncode - Batch-encode a directory of TV episodes with ffmpeg."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_dir", required=False, type=click.Path(path_type=Path))
@click.option(
    "--encoder",
    "-e",
    default=None,
    metavar="|".join(p.value for p in EncoderProfile),
    help="Video encoder (default from config: cpu-x265). hw-hevc uses Apple VideoToolbox.",
)
@click.option(
    "--out",
    "-o",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default: <input>_encoded).",
)
@click.option(
    "--audio",
    "audio_selection",
    default=None,
    metavar="LIST",
    help="Comma-separated 1-based audio indices in the order to keep, e.g. 5,1,3. "
    "Default: first audio only.",
)
@click.option(
    "--audio-mode",
    default=AudioMode.TRANSCODE.value,
    metavar="copy|transcode",
    help="'copy' remuxes selected audio as-is, 'transcode' (alias 'aac') re-encodes.",
)
@click.option(
    "--subs",
    "subtitle_selection",
    default=None,
    metavar="LIST",
    help="Comma-separated 1-based subtitle indices in the desired order. Default: all.",
)
@click.option(
    "--tune-grain",
    is_flag=True,
    default=False,
    help="Apply x265 tune=grain (better film grain retention, larger files).",
)
@click.option(
    "--stop-on-failure/--keep-going",
    default=False,
    help="Abort the batch on the first failed file (default: keep going).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Log the ffmpeg commands without running them.",
)
@click.pass_context
def encode(
    ctx,
    input_dir,
    encoder,
    out_dir,
    audio_selection,
    audio_mode,
    subtitle_selection,
    tune_grain,
    stop_on_failure,
    dry_run,
):
    """Encode every video file under INPUT_DIR.

    Outputs mirror the input tree under the output directory; files whose
    output already exists are skipped.

    \b
    Examples:
      tvencode encode "/path/to/Season 1"
      tvencode encode "/path/to/Season 1" --encoder hw-hevc
      tvencode encode "/path/to/Season 1" --audio=5,1,3 --audio-mode copy --subs=1,2,3
    """
    config = ctx.obj["config"]
    logger = get_logger(__name__)

    if input_dir is None:
        click.echo(ctx.get_help(), err=True)
        _fail("No input directory provided.")

    if not input_dir.is_dir():
        _fail(f"Input directory not found: {input_dir}")

    try:
        profile = EncoderProfile(encoder) if encoder else config.encoder
    except ValueError:
        _fail(f"Unknown encoder: {encoder}")

    try:
        mode = AudioMode(audio_mode)
    except ValueError:
        _fail(f"Unknown audio mode: {audio_mode}")

    input_dir = input_dir.resolve()
    if out_dir is None:
        out_dir = input_dir.with_name(input_dir.name + config.files.output_suffix)

    missing = missing_tools(config.tools)
    if missing:
        _fail(f"Missing {', '.join(missing)}. Install ffmpeg (e.g. brew install ffmpeg).")

    settings = EncodeSettings(
        input_dir=input_dir,
        output_dir=out_dir.resolve(),
        encoder=profile,
        audio_selection=audio_selection or None,
        audio_mode=mode,
        subtitle_selection=subtitle_selection or None,
        tune_grain=tune_grain,
        stop_on_failure=stop_on_failure,
        dry_run=dry_run,
    )

    scanner = FileScanner(config.files.extensions)
    try:
        files = scanner.plan(settings.input_dir, settings.output_dir, config.files.container)
    except (OSError, ValueError) as e:
        _fail(f"Error scanning {input_dir}: {e}")

    if not files:
        _fail(f"No video files found in: {input_dir}")

    if not dry_run:
        settings.output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(
        "Starting batch",
        encoder=settings.encoder.value,
        audio=settings.audio_selection or "(first audio only)",
        audio_mode=settings.audio_mode.value,
        subs=settings.subtitle_selection or "all",
        input=str(settings.input_dir),
        output=str(settings.output_dir),
        found=len(files),
    )

    def _show(position, total, media_file, result: EncodeResult):
        click.secho(f"[{position}/{total}] {result}", fg=STATUS_STYLES.get(result.status))

    batch = BatchEncoder(config, settings)
    report = batch.run(files, on_result=_show)

    click.echo("=" * 60)
    click.echo("Summary:")
    click.secho(f"  Done:      {report.count('success')}", fg="green")
    if dry_run:
        click.secho(f"  Dry run:   {report.count('dry_run')}", fg="cyan")
    click.secho(f"  Skipped:   {report.count('skipped')}", fg="yellow")
    click.secho(f"  Failed:    {report.count('failed')}", fg="red")
    click.secho(f"  Errors:    {report.count('error')}", fg="red")
    if report.stopped_early:
        click.secho(
            f"  Not tried: {report.total - report.attempted} (stopped on failure)", fg="red"
        )
    click.echo(f"  Total:     {report.total}")
    click.echo(f"All done. Output in: {report.output_dir}")

    if not report.ok:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def probe(ctx, file):
    """Show the audio and subtitle streams of FILE."""
    config = ctx.obj["config"]
    stream_probe = StreamProbe(config.tools)

    inventory = stream_probe.inventory(file)
    stream_probe.add_channels(file, inventory, range(inventory.audio_count))

    click.echo(f"File: {file}")
    click.echo(f"Audio streams: {inventory.audio_count}")
    for index in range(inventory.audio_count):
        click.echo(f"  {index + 1}: {inventory.channels_for(index)} channel(s)")
    click.echo(f"Subtitle streams: {inventory.subtitle_count}")


@cli.command()
def version():
    """Show version information."""
    click.echo(f"TVEncode v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
