"""
Viewport description and pixel/complex-plane coordinate mapping.

A viewport is described by its pixel dimensions, the complex-plane point
shown at the grid's visual center and a scale, the width of the view in
plane units. The visible height is derived from the scale and the pixel
aspect ratio so pixels are always square. Pixel rows grow downwards while
the imaginary axis grows upwards.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Tuple
import logging
import math
import numbers

from .fractal_types import FractalVariant, Julia, Mandelbrot, variant_from_dict

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised for a viewport configuration that cannot address a grid."""


def _is_integer(value: Any) -> bool:
    # bool is an Integral but never a valid size
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class ViewportConfig:
    """Immutable viewport and iteration configuration."""

    width: int = 1024
    height: int = 768
    max_iterations: int = 500
    scale: float = 2.0
    center: complex = 0j
    variant: FractalVariant = field(default_factory=Mandelbrot)

    def __post_init__(self):
        try:
            center = complex(self.center)
        except (TypeError, ValueError):
            raise ConfigurationError(f"center must be a complex number, got {self.center!r}")
        object.__setattr__(self, "center", center)

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: if the grid dimensions or the iteration budget
                are not positive integers, the scale/center are not finite
                numbers, or the variant is not Mandelbrot or Julia
        """
        for name in ("width", "height", "max_iterations"):
            value = getattr(self, name)
            if not _is_integer(value):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")

        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Bad dimensions in fractal state: {self.width}x{self.height}")

        if self.max_iterations <= 0:
            raise ConfigurationError("max_iterations must be positive")

        if not isinstance(self.scale, numbers.Real) or isinstance(self.scale, bool):
            raise ConfigurationError(f"scale must be a number, got {self.scale!r}")

        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ConfigurationError(f"scale must be a positive finite number, got {self.scale}")

        if not isinstance(self.variant, (Mandelbrot, Julia)):
            raise ConfigurationError(f"Unsupported fractal variant: {self.variant!r}")

        if not (math.isfinite(self.center.real) and math.isfinite(self.center.imag)):
            raise ConfigurationError(f"center must be finite, got {self.center}")

    @property
    def aspect(self) -> float:
        """Pixel aspect ratio (width / height)."""
        return self.width / self.height

    @property
    def view_height(self) -> float:
        """Height of the viewport in complex-plane units."""
        return self.scale / self.aspect

    def increments(self) -> Tuple[float, float]:
        """
        Plane distance covered by one pixel step.

        Returns:
            Tuple of (x_increment, y_increment)
        """
        return (self.scale / self.width,
                (self.scale / self.aspect) / self.height)

    def origin(self) -> complex:
        """Plane coordinate of the top-left pixel."""
        return complex(self.center.real - self.scale / 2.0,
                       self.center.imag + (self.scale / self.aspect) / 2.0)

    def bounds(self) -> Tuple[float, float, float, float]:
        """Get viewing bounds (xmin, xmax, ymin, ymax)."""
        top_left = self.origin()
        return (top_left.real, top_left.real + self.scale,
                top_left.imag - self.view_height, top_left.imag)

    def pixel_to_complex(self, x: float, y: float) -> complex:
        """
        Convert pixel coordinates to the complex-plane point under them.

        Args:
            x: Column, 0 at the left edge
            y: Row, 0 at the top edge

        Returns:
            Complex-plane coordinate
        """
        x_incr, y_incr = self.increments()
        top_left = self.origin()
        return complex(top_left.real + x * x_incr, top_left.imag - y * y_incr)

    def complex_to_pixel(self, z: complex) -> Tuple[float, float]:
        """
        Convert a complex-plane point to (fractional) pixel coordinates.

        Exact inverse of pixel_to_complex; round the result if integer pixel
        indices are needed.
        """
        x_incr, y_incr = self.increments()
        top_left = self.origin()
        return ((z.real - top_left.real) / x_incr,
                (top_left.imag - z.imag) / y_incr)

    # Navigation helpers. Each returns a new configuration.

    def zoom(self, factor: float) -> 'ViewportConfig':
        """Scale the visible width by factor (< 1 zooms in)."""
        return replace(self, scale=self.scale * factor)

    def pan(self, dx: float, dy: float) -> 'ViewportConfig':
        """Move the center by (dx, dy) in units of the current scale."""
        return replace(self, center=self.center + complex(dx, dy) * self.scale)

    def recenter(self, x: float, y: float) -> 'ViewportConfig':
        """Move the center to the plane point under pixel (x, y)."""
        return replace(self, center=self.pixel_to_complex(x, y))

    def with_iterations(self, max_iterations: int) -> 'ViewportConfig':
        new_config = replace(self, max_iterations=max_iterations)
        new_config.validate()
        return new_config

    def with_size(self, width: int, height: int) -> 'ViewportConfig':
        new_config = replace(self, width=width, height=height)
        new_config.validate()
        return new_config

    def with_variant(self, variant: FractalVariant) -> 'ViewportConfig':
        return replace(self, variant=variant)

    def toggle_variant(self) -> 'ViewportConfig':
        """
        Switch between the Mandelbrot set and the Julia set of the current
        center point.
        """
        if isinstance(self.variant, Mandelbrot):
            return replace(self, variant=Julia(self.center))
        return replace(self, variant=Mandelbrot())

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "max_iterations": self.max_iterations,
            "scale": self.scale,
            "center": [self.center.real, self.center.imag],
            "variant": self.variant.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ViewportConfig':
        """
        Create configuration from dictionary (inverse of to_dict).

        The variant may also be given by type name alone ("julia").

        Raises:
            ConfigurationError: for unknown keys or a malformed center
            ValueError: for an unknown variant type
        """
        data = dict(data)
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(f"Unknown viewport keys: {', '.join(sorted(map(str, unknown)))}")

        if "center" in data:
            center = data["center"]
            if isinstance(center, (list, tuple)):
                if len(center) != 2:
                    raise ConfigurationError(f"center must be [real, imag], got {center!r}")
                try:
                    data["center"] = complex(float(center[0]), float(center[1]))
                except (TypeError, ValueError):
                    raise ConfigurationError(f"center must be [real, imag], got {center!r}")

        variant = data.get("variant")
        if isinstance(variant, str):
            data["variant"] = variant_from_dict({"type": variant})
        elif isinstance(variant, dict):
            data["variant"] = variant_from_dict(variant)
        return cls(**data)
