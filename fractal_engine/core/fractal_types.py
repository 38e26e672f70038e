"""
Fractal variant definitions.

Only two variants exist and they share one iteration rule; they differ in how
the additive constant and the starting value are chosen per grid cell:

- Mandelbrot: c is the pixel's own coordinate, z0 = c
- Julia: c is a fixed constant, z0 is the pixel's coordinate

The variants are plain frozen dataclasses. The engine dispatches on them at a
single point with ``isinstance``.
"""

from dataclasses import dataclass
from typing import Dict, Union
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mandelbrot:
    """Mandelbrot set: z_{n+1} = z_n^2 + c, c = z_0 = pixel coordinate."""

    name = "mandelbrot"

    def get_description(self) -> str:
        return "Mandelbrot set: z_{n+1} = z_n^2 + c, where c is the complex coordinate"

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.name}


@dataclass(frozen=True)
class Julia:
    """Julia set for a fixed constant c."""

    c: complex = complex(-0.75, 0.1)

    name = "julia"

    def __post_init__(self):
        # Normalise ints/floats so equality and hashing behave
        object.__setattr__(self, "c", complex(self.c))

    def get_description(self) -> str:
        return f"Julia set: z_{{n+1}} = z_n^2 + c, where c = {self.c} and z_0 is the complex coordinate"

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.name, "c_real": self.c.real, "c_imag": self.c.imag}


FractalVariant = Union[Mandelbrot, Julia]


# Predefined interesting Julia set constants
JULIA_PRESETS: Dict[str, complex] = {
    'dragon': complex(-0.75, 0.1),
    'spiral': complex(-0.4, 0.6),
    'dendrite': complex(-0.235125, 0.827215),
    'lightning': complex(-0.8, 0.156),
    'rabbit': complex(-0.123, 0.745),
    'airplane': complex(-1.25, 0.0),
    'san_marco': complex(-0.75, 0.0),
    'siegel_disk': complex(-0.391, -0.587),
}


def julia_preset(name: str) -> Julia:
    """
    Create a Julia variant from a named preset.

    Args:
        name: Key of JULIA_PRESETS (case-insensitive)

    Returns:
        Julia variant with the preset constant
    """
    c = JULIA_PRESETS.get(name.lower())
    if c is None:
        available = ', '.join(JULIA_PRESETS.keys())
        raise ValueError(f"Unknown Julia preset '{name}'. Available: {available}")
    return Julia(c)


def parse_julia_constant(text: str) -> Julia:
    """Parse "real,imag" or a preset name into a Julia variant."""
    if ',' not in text:
        return julia_preset(text.strip())
    try:
        real, imag = (float(part.strip()) for part in text.split(','))
    except ValueError:
        raise ValueError(f"Invalid Julia constant '{text}'. Use 'real,imag' or a preset name")
    return Julia(complex(real, imag))


def variant_from_dict(data: Dict[str, object]) -> FractalVariant:
    """
    Create a fractal variant from its dictionary form.

    Args:
        data: Mapping with a "type" key and, for Julia, "c_real"/"c_imag"
              or "preset"

    Returns:
        Configured fractal variant
    """
    kind = str(data.get("type", "mandelbrot")).lower()
    if kind == Mandelbrot.name:
        return Mandelbrot()
    if kind == Julia.name:
        if "preset" in data:
            return julia_preset(str(data["preset"]))
        return Julia(complex(float(data.get("c_real", -0.75)), float(data.get("c_imag", 0.1))))
    raise ValueError(f"Unknown fractal type '{kind}'. Available: {Mandelbrot.name}, {Julia.name}")


def list_variants() -> Dict[str, str]:
    """Get a dictionary of available variants and their descriptions."""
    return {
        Mandelbrot.name: Mandelbrot().get_description(),
        Julia.name: Julia().get_description(),
    }
