"""
Escape-time fractal engine.

This library computes Mandelbrot and Julia sets over a rectangular viewport
into a dense grid of samples, in parallel one row at a time, and maps the
samples to colors through finite palettes.

Key Features:
- Square-pixel viewport mapping in both directions (pixel <-> plane)
- Row-parallel grid computation (numba prange or a thread pool over row views)
- Interpolated palettes with linear-scale or modulus color mapping
- Image export with embedded viewport metadata

Example usage:
    >>> from fractal_engine import Grid, ViewportConfig, compute, colorize, get_palette
    >>> grid = compute(Grid(ViewportConfig(width=640, height=480, center=-0.5+0j, scale=3.0)))
    >>> image = colorize(grid, get_palette('color1_mod'))
"""

__version__ = "1.0.0"
__author__ = "Fractal Engine Team"

from fractal_engine.core.fractal_types import Mandelbrot, Julia, JULIA_PRESETS
from fractal_engine.core.math_functions import ESCAPE_RADIUS, Sample, iterate
from fractal_engine.core.viewport import ConfigurationError, ViewportConfig
from fractal_engine.core.grid import Grid, GridSizeError
from fractal_engine.engine import compute
from fractal_engine.rendering.coloring import (
    ColorMode, Palette, build_palette, color_step, colorize, get_palette, map_escape,
)
from fractal_engine.rendering.image_output import ImageExporter

# Main API classes
from fractal_engine.api import FractalRenderer, FractalExplorer, RenderConfig

__all__ = [
    "FractalRenderer",
    "FractalExplorer",
    "RenderConfig",
    "ViewportConfig",
    "ConfigurationError",
    "Grid",
    "GridSizeError",
    "Mandelbrot",
    "Julia",
    "JULIA_PRESETS",
    "Sample",
    "ESCAPE_RADIUS",
    "iterate",
    "compute",
    "ColorMode",
    "Palette",
    "build_palette",
    "color_step",
    "colorize",
    "get_palette",
    "map_escape",
    "ImageExporter",
]
