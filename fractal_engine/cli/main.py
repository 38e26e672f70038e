"""
Command-line interface for fractal generation.

This module provides a CLI host around the engine: it builds a viewport
from options (optionally on top of a JSON config file), computes the grid
and writes a colored image.
"""

import click
import sys
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from .. import __version__
from ..api import FractalRenderer, RenderConfig
from ..core.fractal_types import JULIA_PRESETS, Mandelbrot, list_variants, parse_julia_constant
from ..core.viewport import ViewportConfig
from ..engine import BACKENDS
from ..rendering.coloring import get_palette, list_palette_names
from ..rendering.image_output import ImageExporter

logger = logging.getLogger(__name__)


def parse_complex(text: str) -> complex:
    """Parse "real,imag" into a complex number."""
    parts = [part.strip() for part in text.split(',')]
    if len(parts) != 2:
        raise click.BadParameter(f"'{text}' is not in 'real,imag' format")
    try:
        return complex(float(parts[0]), float(parts[1]))
    except ValueError:
        raise click.BadParameter(f"'{text}' is not in 'real,imag' format")


def parse_size(text: str):
    """Parse "WIDTHxHEIGHT"."""
    try:
        width, height = map(int, text.lower().split('x'))
    except ValueError:
        raise click.BadParameter(f"'{text}' is not in 'widthxheight' format")
    return width, height


def load_config_file(config_file: Optional[str]) -> Dict[str, Any]:
    """Load a JSON render configuration, or an empty one."""
    if not config_file:
        return {}
    with open(config_file, 'r') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{config_file} must contain a JSON object")
    logger.debug(f"Loaded configuration from {config_file}")
    return data


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='JSON configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Fractal Engine - escape-time Mandelbrot and Julia set renderer.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Engine v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            ctx.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('fractal_type', type=click.Choice(['mandelbrot', 'julia']))
@click.argument('output', type=click.Path())
@click.option('--size', type=str, help='Image size "widthxheight"')
@click.option('--center', type=str, help='Center point "real,imag"')
@click.option('--scale', type=float, help='Viewport width in complex-plane units')
@click.option('--max-iter', type=int, help='Maximum iterations')
@click.option('--julia-c', type=str, help='Julia constant "real,imag" or preset name')
@click.option('--palette', type=str, help='Color palette name')
@click.option('--backend', type=click.Choice(BACKENDS), help='Parallel backend')
@click.option('--workers', type=int, help='Worker threads for the threads backend')
@click.pass_context
def render(ctx, fractal_type, output, size, center, scale, max_iter, julia_c,
           palette, backend, workers):
    """
    Render a single fractal image.

    FRACTAL_TYPE: mandelbrot or julia
    OUTPUT: Output image file path (.png, .tiff or .jpg)
    """
    try:
        render_config = RenderConfig.from_dict(load_config_file(ctx.obj.get('config_file')))
        viewport = render_config.viewport

        changes: Dict[str, Any] = {}
        if size:
            changes['width'], changes['height'] = parse_size(size)
        if center:
            changes['center'] = parse_complex(center)
        if scale is not None:
            changes['scale'] = scale
        if max_iter is not None:
            changes['max_iterations'] = max_iter

        if fractal_type == 'julia':
            if julia_c:
                changes['variant'] = parse_julia_constant(julia_c)
            elif isinstance(viewport.variant, Mandelbrot):
                changes['variant'] = parse_julia_constant('dragon')
        else:
            changes['variant'] = Mandelbrot()

        viewport = replace(viewport, **changes)

        overrides: Dict[str, Any] = {'viewport': viewport}
        if palette:
            overrides['color_palette'] = palette
        if backend:
            overrides['backend'] = backend
        if workers is not None:
            overrides['num_workers'] = workers
        render_config = replace(render_config, **overrides)

        renderer = FractalRenderer(render_config)
        renderer.render(output_path=Path(output))

        click.echo(f"Rendered {viewport.variant.name} {viewport.width}x{viewport.height} "
                   f"in {renderer.last_render_time:.2f}s -> {output}")

    except (ValueError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj.get('verbose'):
            import traceback
            traceback.print_exc()
        sys.exit(1)


@main.command()
@click.option('--size', type=str, default='800x600', help='Benchmark image size (widthxheight)')
@click.option('--iterations', type=int, default=500, help='Maximum iterations for benchmark')
@click.option('--repeats', type=int, default=3, help='Timed runs per backend')
@click.pass_context
def benchmark(ctx, size, iterations, repeats):
    """
    Benchmark grid computation with each parallel backend.
    """
    width, height = parse_size(size)
    try:
        viewport = ViewportConfig(width=width, height=height, max_iterations=iterations,
                                  scale=3.0, center=complex(-0.5, 0.0))
        renderer = FractalRenderer(RenderConfig(viewport=viewport))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("Fractal Engine Performance Benchmark")
    click.echo(f"Image size: {width}x{height} ({width*height:,} pixels)")
    click.echo(f"Max iterations: {iterations}")
    click.echo("")

    results = renderer.benchmark_performance(repeats=repeats)
    click.echo("Performance Results:")
    for method, result in results['benchmarks'].items():
        click.echo(f"  {method}: {result['time']:.3f}s ({result['pixels_per_second']:,.0f} pixels/sec)")


@main.command()
@click.pass_context
def list_fractals(ctx):
    """List available fractal types and Julia presets."""
    click.echo("Available fractal types:")
    for name, description in list_variants().items():
        click.echo(f"  {name}")
        if ctx.obj.get('verbose'):
            click.echo(f"    {description}")

    click.echo("\nJulia set presets:")
    for name, c in JULIA_PRESETS.items():
        click.echo(f"  {name}: c = {c}")


@main.command()
@click.pass_context
def list_palettes(ctx):
    """List available color palettes."""
    click.echo("Available color palettes:")
    for name in list_palette_names():
        if ctx.obj.get('verbose'):
            palette = get_palette(name)
            click.echo(f"  {name} ({len(palette)} colors, {palette.color_mode.value})")
        else:
            click.echo(f"  {name}")


@main.command()
@click.argument('image', type=click.Path(exists=True))
def info(image):
    """Show the viewport an image was rendered from."""
    image_info = ImageExporter().get_image_info(Path(image))
    click.echo(f"{image_info['filepath']}: {image_info['format']} "
               f"{image_info['dimensions'][0]}x{image_info['dimensions'][1]}")
    metadata = image_info['fractal_metadata']
    if metadata is None:
        click.echo("No fractal metadata found")
        return
    click.echo(json.dumps(metadata, indent=2))


if __name__ == '__main__':
    main()
