"""
Palette construction and escape-time color mapping.

A palette is a finite ordered sequence of 8-bit RGB colors plus the mode used
to index it. Palettes are built from segments that interpolate linearly
between two control colors, and are immutable once built. Named presets are
built on demand rather than kept as shared tables.
"""

import numpy as np
from typing import Callable, Dict, Iterable, List, Sequence, Tuple
from dataclasses import dataclass
from enum import Enum
import logging
import numbers

import matplotlib

from ..core.grid import Grid

logger = logging.getLogger(__name__)

ColorRGB = Tuple[int, int, int]
ColorFloat = Tuple[float, float, float]
Segment = Tuple[ColorFloat, ColorFloat, int]

# Color of points that never escape
INSIDE_COLOR: ColorRGB = (0, 0, 0)


class ColorMode(Enum):
    """How an escape count is turned into a palette index."""

    LINEAR_SCALE = 'linear'
    MODULUS = 'modulus'


@dataclass(frozen=True)
class Palette:
    """Immutable color palette."""

    colors: Tuple[ColorRGB, ...]
    color_mode: ColorMode = ColorMode.LINEAR_SCALE
    name: str = "Custom"

    def __post_init__(self):
        if len(self.colors) == 0:
            raise ValueError("Palette must contain at least 1 color")
        object.__setattr__(self, "colors", tuple(_check_color(color) for color in self.colors))

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, index: int) -> ColorRGB:
        return self.colors[index]

    def with_mode(self, color_mode: ColorMode, name: str = None) -> 'Palette':
        """Same colors, different mapping mode."""
        return Palette(self.colors, color_mode, name or self.name)

    def as_array(self) -> np.ndarray:
        """Palette as an (N, 3) uint8 array."""
        return np.array(self.colors, dtype=np.uint8).reshape(len(self.colors), 3)

    def to_packed(self) -> List[int]:
        """Palette as 0xRRGGBB integers."""
        return [(r << 16) | (g << 8) | b for r, g, b in self.colors]

    @classmethod
    def from_matplotlib(cls, cmap_name: str, steps: int = 256,
                        color_mode: ColorMode = ColorMode.LINEAR_SCALE) -> 'Palette':
        """
        Create palette by sampling a matplotlib colormap.

        Args:
            cmap_name: Registered matplotlib colormap name
            steps: Number of palette entries
            color_mode: Mapping mode of the new palette
        """
        if steps <= 0:
            raise ValueError("steps must be positive")
        cmap = matplotlib.colormaps[cmap_name]
        colors = tuple(scale_rgb(*cmap(t)[:3]) for t in np.linspace(0.0, 1.0, steps))
        return cls(colors, color_mode, name=cmap_name)


def _check_color(color) -> ColorRGB:
    """Normalize one palette entry to an (r, g, b) tuple of 8-bit ints."""
    try:
        color = tuple(color)
    except TypeError:
        raise ValueError(f"Palette colors must be (r, g, b) sequences, got {color!r}")
    if len(color) != 3:
        raise ValueError(f"Palette colors must have 3 channels, got {color!r}")
    for channel in color:
        if not isinstance(channel, numbers.Integral) or isinstance(channel, bool) \
                or not 0 <= channel <= 255:
            raise ValueError(f"Palette channels must be integers in [0, 255], got {color!r}")
    return tuple(int(channel) for channel in color)


def _scale_channel(value: float) -> int:
    scaled = value * 255.0
    if not scaled > 0:
        # negative and NaN both saturate to 0
        return 0
    return min(255, int(scaled))


def scale_rgb(r: float, g: float, b: float) -> ColorRGB:
    """Scale normalized [0, 1] channels to 8-bit, clamping to [0, 255]."""
    return (_scale_channel(r), _scale_channel(g), _scale_channel(b))


def color_step(start: ColorFloat, end: ColorFloat, steps: int) -> List[ColorRGB]:
    """
    Interpolate linearly from start towards end.

    The start color is the first entry; the end color itself is not
    included, so chained segments do not repeat their shared control color.

    Args:
        start: Normalized (r, g, b) start color
        end: Normalized (r, g, b) end color
        steps: Number of entries to produce

    Returns:
        List of 8-bit RGB colors
    """
    cur_r, cur_g, cur_b = start
    if steps <= 0:
        return []
    delta_r = (end[0] - cur_r) / steps
    delta_g = (end[1] - cur_g) / steps
    delta_b = (end[2] - cur_b) / steps

    colors = []
    for _ in range(steps):
        colors.append(scale_rgb(cur_r, cur_g, cur_b))
        cur_r += delta_r
        cur_g += delta_g
        cur_b += delta_b
    return colors


def build_palette(segments: Iterable[Segment],
                  color_mode: ColorMode = ColorMode.LINEAR_SCALE,
                  name: str = "Custom") -> Palette:
    """
    Build a palette from interpolation segments.

    Args:
        segments: (start, end, step_count) triples, concatenated in order
        color_mode: How escape counts index the palette
        name: Human-readable name

    Returns:
        Palette
    """
    colors = []
    for start, end, steps in segments:
        colors.extend(color_step(start, end, steps))
    return Palette(tuple(colors), color_mode, name)


def map_escape(escape: int, max_iterations: int, palette: Palette) -> ColorRGB:
    """
    Map an escape count to a palette color.

    Args:
        escape: Iteration count at which the point escaped
        max_iterations: Iteration budget of the computation
        palette: Palette to index

    Returns:
        8-bit RGB color; INSIDE_COLOR if the point never escaped
    """
    if escape >= max_iterations:
        return INSIDE_COLOR
    if palette.color_mode is ColorMode.LINEAR_SCALE:
        index = escape * (len(palette) - 1) // max_iterations
    else:
        index = escape % len(palette)
    return palette[index]


def colorize(grid: Grid, palette: Palette) -> np.ndarray:
    """
    Map every sample of a grid through a palette.

    Args:
        grid: Computed grid
        palette: Palette to apply

    Returns:
        RGB image array (height, width, 3), uint8
    """
    max_iter = grid.config.max_iterations
    escape = grid.escape.astype(np.int64)
    colors = palette.as_array()

    if palette.color_mode is ColorMode.LINEAR_SCALE:
        indices = escape * (len(colors) - 1) // max_iter
    else:
        indices = escape % len(colors)

    inside = escape >= max_iter
    indices = np.where(inside, 0, indices)

    rgb_image = colors[indices]
    rgb_image[inside] = INSIDE_COLOR
    return rgb_image


# Built-in palettes

def create_palette_bw() -> Palette:
    """Grayscale ramp, black to near-white."""
    return Palette(tuple((i, i, i) for i in range(255)), ColorMode.LINEAR_SCALE, name="bw")


COLOR1_SEGMENTS: Sequence[Segment] = (
    ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 100),  # black -> red
    ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 100),  # red -> green
    ((0.0, 1.0, 0.0), (1.0, 1.0, 0.0), 100),  # green -> yellow
    ((1.0, 1.0, 0.0), (0.0, 0.0, 0.7), 100),  # yellow -> dark blue
)


def create_palette_color1_mod() -> Palette:
    """Four-segment color ramp with repeating bands."""
    return build_palette(COLOR1_SEGMENTS, ColorMode.MODULUS, name="color1_mod")


def create_palette_color1_lin() -> Palette:
    """Four-segment color ramp spread once over the iteration range."""
    return create_palette_color1_mod().with_mode(ColorMode.LINEAR_SCALE, name="color1_lin")


# Registry of built-in palettes.
# Keys are names, values are factory functions.
PALETTE_PRESETS: Dict[str, Callable[[], Palette]] = {
    'bw': create_palette_bw,
    'color1_mod': create_palette_color1_mod,
    'color1_lin': create_palette_color1_lin,
}

MATPLOTLIB_PALETTES = ('viridis', 'plasma', 'inferno', 'magma', 'cividis')


def get_palette(name: str) -> Palette:
    """
    Get a palette by name.

    Built-in presets are checked first, then matplotlib colormaps.

    Raises:
        ValueError if name is neither
    """
    factory = PALETTE_PRESETS.get(name)
    if factory is not None:
        return factory()
    if name in matplotlib.colormaps:
        return Palette.from_matplotlib(name)
    available = ', '.join(list_palette_names())
    raise ValueError(f"Unknown color palette '{name}'. Available: {available}")


def list_palette_names() -> List[str]:
    """Get list of suggested palette names."""
    return list(PALETTE_PRESETS.keys()) + list(MATPLOTLIB_PALETTES)
