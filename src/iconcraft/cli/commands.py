import logging
import sys
import os
import time
from pathlib import Path
import click
from rich import print
from rich.panel import Panel
from rich.table import Table

from iconcraft import __version__
from iconcraft.builder import BuildOptions, IconBuilder
from iconcraft.errors import IconCraftError, ToolError
from iconcraft.presets import default_targets
from iconcraft.services.verify_service import VerifyService
from iconcraft.utils.config import IconCraftConfig
from iconcraft.utils.logging_handler import setup_session_logging

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Setup structured logging format based on debug mode setting."""
    try:
        debug_enabled = debug or IconCraftConfig.is_debug_mode()
    except ValueError:
        # Reported by the command once it loads its options
        debug_enabled = debug
    root = logging.getLogger()

    if debug_enabled:
        # Structured debug logging format for easy parsing
        logging.basicConfig(
            level=logging.DEBUG,
            format='[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_level = logging.DEBUG
    else:
        logging.basicConfig(level=logging.WARNING)
        console_level = logging.WARNING

    for handler in root.handlers:
        handler.setLevel(console_level)

    if not os.environ.get("ICONCRAFT_NO_SESSION_LOG"):
        try:
            log_path = setup_session_logging(root, debug=debug_enabled)
            logger.debug(f"Session log: {log_path}")
        except OSError as e:
            logger.warning(f"Session log disabled: {e}")

    if debug_enabled:
        logger.info("=" * 60)
        logger.info(f"IconCraft v{__version__} - Debug Log")
        logger.info("=" * 60)
        logger.info(f"Python: {sys.version}")
        logger.info(f"Platform: {sys.platform}")


def _fail(error: Exception):
    """Prints a build failure and exits non-zero."""
    title = "Tool Failed" if isinstance(error, ToolError) else "Build Failed"
    print(Panel(f"[red]{error}[/red]", title=title, border_style="red"))
    sys.exit(1)


def _load_options(**overrides) -> BuildOptions:
    """Reads config with command line overrides; bad config values end the run."""
    try:
        return BuildOptions.from_config(**overrides)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        print(Panel(f"[red]{e}[/red]", title="Invalid Configuration", border_style="red"))
        sys.exit(1)


@click.group()
@click.option('--debug', '-d', is_flag=True, help="Verbose logging")
@click.version_option(__version__, message='IconCraft v%(version)s')
@click.pass_context
def cli(ctx, debug):
    """IconCraft: Build app and toolbar icons (PNG, ICO, ICNS, Store tiles) from SVG sources."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logging(debug)


@cli.command()
@click.option('--source-dir', type=click.Path(file_okay=False), help="Directory holding app.svg and toolbar.svg")
@click.option('--dist-dir', type=click.Path(file_okay=False), help="Output directory (wiped first)")
@click.option('--build-dir', type=click.Path(file_okay=False), help="Scratch directory (wiped first)")
@click.option('--only', 'only', multiple=True, help="Build only this target (repeatable)")
@click.option('--light/--no-light', default=None, help="Also build the inverted Windows toolbar icon")
@click.option('--jobs', '-j', type=click.IntRange(min=1), help="Maximum concurrent tool processes")
def build(source_dir, dist_dir, build_dir, only, light, jobs):
    """Clean, then render every target."""
    options = _load_options(
        source_dir=source_dir, dist_dir=dist_dir, build_dir=build_dir,
        targets=only or None, light_variant=light, jobs=jobs,
    )
    try:
        options.resolve_targets()
    except KeyError as e:
        raise click.BadParameter(str(e.args[0]), param_hint="--only")
    builder = IconBuilder(options)

    started = time.monotonic()
    try:
        bundles = builder.build()
    except (IconCraftError, OSError) as e:
        logger.error(f"Build failed: {e}")
        _fail(e)

    table = Table(title="IconCraft Build Result")
    table.add_column("Target", style="cyan")
    table.add_column("Output")
    table.add_column("Images", justify="right")
    for bundle in bundles:
        table.add_row(bundle.target, str(bundle.path), str(len(bundle.assets)))
    print(table)
    print(f"[green]Built {len(bundles)} target(s) in {time.monotonic() - started:.1f}s[/green]")


@cli.command()
@click.option('--light/--no-light', default=True, help="Include the inverted Windows toolbar icon")
def targets(light):
    """List targets and their size sets."""
    table = Table(title="IconCraft Targets")
    table.add_column("Target", style="cyan")
    table.add_column("Source")
    table.add_column("Output")
    table.add_column("Sizes")
    for target in default_targets(light):
        sizes = []
        for entry in target.size_set:
            w, h = entry.spec.canvas
            label = str(w) if w == h else f"{w}x{h}"
            if label not in sizes:
                sizes.append(label)
        table.add_row(target.name, target.source, target.output, ", ".join(sizes))
    print(table)


@cli.command()
@click.option('--dist-dir', type=click.Path(file_okay=False), help="Output directory to check")
@click.option('--only', 'only', multiple=True, help="Check only this target (repeatable)")
@click.option('--light/--no-light', default=None, help="Expect the inverted Windows toolbar icon")
def verify(dist_dir, only, light):
    """Check produced files against the size tables."""
    options = _load_options(dist_dir=dist_dir, targets=only or None, light_variant=light)
    try:
        selected = options.resolve_targets()
    except KeyError as e:
        raise click.BadParameter(str(e.args[0]), param_hint="--only")

    problems = VerifyService.verify(options.dist_dir, selected)
    if problems:
        print(Panel("\n".join(f"[red]{p}[/red]" for p in problems), title="Verify Failed", border_style="red"))
        sys.exit(1)
    print(f"[green]All {len(selected)} target(s) in {options.dist_dir} look correct.[/green]")


@cli.command()
@click.option('--dist-dir', type=click.Path(file_okay=False))
@click.option('--build-dir', type=click.Path(file_okay=False))
def clean(dist_dir, build_dir):
    """Wipe the output and scratch directories."""
    options = _load_options(dist_dir=dist_dir, build_dir=build_dir)
    IconBuilder(options).clean()
    print(f"Cleaned {Path(options.dist_dir)} and {Path(options.build_dir)}")
