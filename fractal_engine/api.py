"""
Main API classes for fractal generation.

This module provides the high-level interface around the grid engine: a
renderer that owns a grid and turns it into images, and an explorer that
keeps navigation history for interactive hosts.
"""

import numpy as np
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import logging
import time

from .core.fractal_types import FractalVariant
from .core.grid import Grid
from .core.viewport import ConfigurationError, ViewportConfig
from .acceleration.numba_backend import get_thread_count
from .engine import BACKENDS, DEFAULT_BACKEND, benchmark, compute
from .rendering.coloring import Palette, colorize, get_palette
from .rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)

# Iteration budget step used by the explorer's increase/decrease controls
ITERATION_STEP = 25
MIN_ADJUSTABLE_ITERATIONS = 200


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    viewport: ViewportConfig = field(default_factory=ViewportConfig)

    # Coloring
    color_palette: str = 'color1_mod'

    # Performance
    backend: str = DEFAULT_BACKEND
    num_workers: Optional[int] = None

    # Output
    jpeg_quality: int = 95
    save_metadata: bool = True

    def validate(self):
        """Validate configuration parameters."""
        if not isinstance(self.viewport, ViewportConfig):
            raise ConfigurationError(f"viewport must be a ViewportConfig, got {self.viewport!r}")
        self.viewport.validate()

        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'. Available: {', '.join(BACKENDS)}")

        if not isinstance(self.color_palette, str):
            raise ConfigurationError(f"color_palette must be a name, got {self.color_palette!r}")

        if self.num_workers is not None and (not isinstance(self.num_workers, int)
                                             or self.num_workers < 1):
            raise ConfigurationError("num_workers must be an integer >= 1")

        if not isinstance(self.jpeg_quality, int) or not 1 <= self.jpeg_quality <= 100:
            raise ConfigurationError("jpeg_quality must be an integer between 1 and 100")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderConfig':
        """Create configuration from a dictionary, e.g. a parsed JSON file."""
        data = dict(data)
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(f"Unknown render config keys: {', '.join(sorted(map(str, unknown)))}")
        if not isinstance(data.get('viewport', {}), dict):
            raise ConfigurationError("viewport must be an object")
        if 'viewport' in data:
            data['viewport'] = ViewportConfig.from_dict(data['viewport'])
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'viewport': self.viewport.to_dict(),
            'color_palette': self.color_palette,
            'backend': self.backend,
            'num_workers': self.num_workers,
            'jpeg_quality': self.jpeg_quality,
            'save_metadata': self.save_metadata,
        }


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.grid = Grid(self.config.viewport)
        self.palette = get_palette(self.config.color_palette)
        self._image_exporter = None
        self.last_render_time = 0.0

        viewport = self.config.viewport
        logger.info(f"FractalRenderer initialized: {viewport.width}x{viewport.height}, "
                    f"backend={self.config.backend}")

    @property
    def viewport(self) -> ViewportConfig:
        return self.config.viewport

    @property
    def image_exporter(self) -> ImageExporter:
        if self._image_exporter is None:
            self._image_exporter = ImageExporter()
        return self._image_exporter

    def compute(self) -> Grid:
        """Recompute the whole grid for the current viewport."""
        start_time = time.perf_counter()
        compute(self.grid, backend=self.config.backend, workers=self.config.num_workers)
        self.last_render_time = time.perf_counter() - start_time
        return self.grid

    def render(self, output_path: Optional[Path] = None) -> np.ndarray:
        """
        Compute the grid and color it.

        Args:
            output_path: Optional output file path

        Returns:
            RGB image array (height, width, 3), uint8
        """
        self.compute()
        rgb_image = colorize(self.grid, self.palette)

        if output_path:
            self._save_image(rgb_image, output_path)

        return rgb_image

    def _save_image(self, rgb_image: np.ndarray, output_path: Path) -> Path:
        metadata = None
        if self.config.save_metadata:
            metadata = RenderMetadata.for_viewport(self.viewport, self.palette.name,
                                                   self.config.backend, self.last_render_time)
        return self.image_exporter.save_image(rgb_image, output_path, metadata,
                                              quality=self.config.jpeg_quality)

    def update_viewport(self, viewport: Optional[ViewportConfig] = None, **changes) -> ViewportConfig:
        """
        Replace the viewport with a new snapshot.

        Either pass a full ViewportConfig or keyword changes to apply to the
        current one. The grid is reallocated if the dimensions change.
        """
        new_viewport = viewport if viewport is not None else replace(self.viewport, **changes)
        self.grid.reconfigure(new_viewport)
        self.config = replace(self.config, viewport=new_viewport)
        return new_viewport

    def set_palette(self, palette: Palette) -> None:
        self.palette = palette
        self.config = replace(self.config, color_palette=palette.name)

    def benchmark_performance(self, repeats: int = 1) -> Dict[str, Any]:
        """Benchmark all backends on the current viewport."""
        results = benchmark(self.grid, repeats=repeats)
        return {
            'config': {
                'resolution': f'{self.viewport.width}x{self.viewport.height}',
                'max_iterations': self.viewport.max_iterations,
                'variant': self.viewport.variant.name,
                'numba_threads': get_thread_count(),
            },
            'benchmarks': results,
        }


class FractalExplorer:
    """Interactive fractal exploration with zoom, pan and history."""

    def __init__(self, initial_config: Optional[RenderConfig] = None):
        """Initialize fractal explorer."""
        self.renderer = FractalRenderer(initial_config)
        self.initial_viewport = self.renderer.viewport
        self.history: List[ViewportConfig] = []
        self.current_image = None

    @property
    def viewport(self) -> ViewportConfig:
        return self.renderer.viewport

    def render_current(self) -> np.ndarray:
        self.current_image = self.renderer.render()
        return self.current_image

    def _navigate(self, new_viewport: ViewportConfig) -> ViewportConfig:
        previous = self.viewport
        self.renderer.update_viewport(new_viewport)
        self.history.append(previous)
        return new_viewport

    def zoom_in(self, factor: float = 0.9) -> ViewportConfig:
        return self._navigate(self.viewport.zoom(factor))

    def zoom_out(self, factor: float = 1.1) -> ViewportConfig:
        return self._navigate(self.viewport.zoom(factor))

    def zoom_to_point(self, x: int, y: int, zoom_factor: float = 0.5) -> ViewportConfig:
        """
        Re-center on a pixel and zoom.

        Args:
            x, y: Pixel coordinates of the new center
            zoom_factor: Scale multiplier (< 1 zooms in)
        """
        new_viewport = self.viewport.recenter(x, y).zoom(zoom_factor)
        logger.info(f"Zoomed to {new_viewport.center} with factor {zoom_factor}")
        return self._navigate(new_viewport)

    def pan(self, dx: float, dy: float) -> ViewportConfig:
        """
        Pan the view.

        Args:
            dx, dy: Pan amounts as fractions of the current scale
        """
        return self._navigate(self.viewport.pan(dx, dy))

    def adjust_iterations(self, delta: int) -> ViewportConfig:
        """Change the iteration budget by delta, keeping it above the floor."""
        new_iterations = self.viewport.max_iterations + delta
        if delta < 0 and new_iterations < MIN_ADJUSTABLE_ITERATIONS:
            logger.warning(f"Not lowering iterations below {MIN_ADJUSTABLE_ITERATIONS}")
            return self.viewport
        viewport = self._navigate(self.viewport.with_iterations(new_iterations))
        logger.info(f"Set max iterations to {new_iterations}")
        return viewport

    def increase_iterations(self) -> ViewportConfig:
        return self.adjust_iterations(ITERATION_STEP)

    def decrease_iterations(self) -> ViewportConfig:
        return self.adjust_iterations(-ITERATION_STEP)

    def toggle_variant(self) -> ViewportConfig:
        """Switch between Mandelbrot and the Julia set of the current center."""
        viewport = self._navigate(self.viewport.toggle_variant())
        logger.info(f"Switched to {viewport.variant.get_description()}")
        return viewport

    def set_variant(self, variant: FractalVariant) -> ViewportConfig:
        return self._navigate(self.viewport.with_variant(variant))

    def resize(self, width: int, height: int) -> ViewportConfig:
        return self._navigate(self.viewport.with_size(width, height))

    def change_palette(self, palette_name: str) -> None:
        self.renderer.set_palette(get_palette(palette_name))
        logger.info(f"Changed palette to {palette_name}")

    def go_back(self) -> ViewportConfig:
        """Return to previous view from history."""
        if not self.history:
            logger.warning("No history available")
            return self.viewport

        previous = self.history.pop()
        self.renderer.update_viewport(previous)
        logger.info("Returned to previous view")
        return previous

    def reset_view(self) -> ViewportConfig:
        """Reset to the initial view, keeping the current window size."""
        viewport = replace(self.initial_viewport,
                           width=self.viewport.width, height=self.viewport.height)
        self.renderer.update_viewport(viewport)
        self.history = []
        logger.info("Reset to default view")
        return viewport

    def pick(self, x: int, y: int) -> complex:
        """Complex-plane point under a pixel of the current view."""
        return self.viewport.pixel_to_complex(x, y)

    def get_exploration_info(self) -> Dict[str, Any]:
        """Get current exploration state information."""
        viewport = self.viewport
        return {
            'fractal': viewport.variant.name,
            'bounds': viewport.bounds(),
            'center': (viewport.center.real, viewport.center.imag),
            'scale': viewport.scale,
            'max_iterations': viewport.max_iterations,
            'palette': self.renderer.palette.name,
            'history_depth': len(self.history),
            'pixels_per_unit': viewport.width / viewport.scale,
        }
