"""
Core mathematical functions for escape-time iteration.

This module provides the scalar reference iteration used by both fractal
variants. The grid engine runs a JIT-compiled twin of the same loop (see
``fractal_engine.acceleration.numba_backend``); this version is the one to
reach for when evaluating single points, e.g. for probing a clicked pixel.
"""

from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

# Any point whose modulus reaches this threshold is divergent for z^2 + c.
ESCAPE_RADIUS = 2.0


@dataclass(frozen=True)
class Sample:
    """Result of iterating a single grid cell."""

    final_z: complex
    escape: int

    def is_inside(self, max_iterations: int) -> bool:
        """True if the point did not escape within the iteration budget."""
        return self.escape >= max_iterations


def iterate(c: complex, z0: complex, start_iter: int, max_iter: int) -> Sample:
    """
    Iterate z <- z*z + c starting from z0.

    Iteration stops as soon as |z| reaches the escape radius or the
    iteration count reaches max_iter, whichever happens first.

    Args:
        c: Additive constant of the quadratic map
        z0: Starting value
        start_iter: Iteration count to start from
        max_iter: Iteration budget

    Returns:
        Sample with the final z and the iteration count reached
    """
    z = complex(z0)
    i = start_iter
    while i < max_iter and abs(z) < ESCAPE_RADIUS:
        z = z * z + c
        i += 1
    return Sample(final_z=z, escape=i)
