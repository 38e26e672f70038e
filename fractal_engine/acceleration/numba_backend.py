"""
Numba JIT compilation backend for escape-time computation.

This module provides JIT-compiled versions of the escape-time iteration. The
row kernels fill one pixel row each and release the GIL, so they can be run
either from the parallel grid kernels below (prange over rows) or from a
thread pool (see ``row_pool``).
"""

import numpy as np
import logging
import numba
from numba import njit, prange

from ..core.math_functions import ESCAPE_RADIUS

logger = logging.getLogger(__name__)
logger.debug(f"Numba version: {numba.__version__}")


@njit(cache=True, nogil=True)
def escape_point(c, z, start_iter, max_iter):
    """
    JIT-compiled twin of ``core.math_functions.iterate``.

    Returns:
        Tuple of (final_z, escape)
    """
    i = start_iter
    while i < max_iter and abs(z) < ESCAPE_RADIUS:
        z = z * z + c
        i += 1
    return z, i


@njit(cache=True, nogil=True)
def mandelbrot_row(x_start, y_cur, x_incr, max_iter, escape_row, final_z_row):
    """Fill one row of Mandelbrot samples: c = z0 = pixel coordinate."""
    x_cur = x_start
    for x in range(escape_row.shape[0]):
        z = complex(x_cur, y_cur)
        final_z, escape = escape_point(z, z, 0, max_iter)
        escape_row[x] = escape
        final_z_row[x] = final_z
        x_cur += x_incr


@njit(cache=True, nogil=True)
def julia_row(x_start, y_cur, x_incr, c, max_iter, escape_row, final_z_row):
    """Fill one row of Julia samples: fixed c, z0 = pixel coordinate."""
    x_cur = x_start
    for x in range(escape_row.shape[0]):
        z = complex(x_cur, y_cur)
        final_z, escape = escape_point(c, z, 0, max_iter)
        escape_row[x] = escape
        final_z_row[x] = final_z
        x_cur += x_incr


@njit(parallel=True, cache=True)
def mandelbrot_kernel(x_start, y_top, x_incr, y_incr, max_iter, escape, final_z):
    """
    JIT-compiled Mandelbrot grid kernel.

    Each prange iteration owns exactly one row of ``escape`` and ``final_z``.
    """
    for y in prange(escape.shape[0]):
        mandelbrot_row(x_start, y_top - y * y_incr, x_incr, max_iter, escape[y], final_z[y])


@njit(parallel=True, cache=True)
def julia_kernel(x_start, y_top, x_incr, y_incr, c, max_iter, escape, final_z):
    """JIT-compiled Julia grid kernel, row-parallel like mandelbrot_kernel."""
    for y in prange(escape.shape[0]):
        julia_row(x_start, y_top - y * y_incr, x_incr, c, max_iter, escape[y], final_z[y])


def warm_up():
    """Compile all kernels on a tiny grid so timings exclude JIT compilation."""
    escape = np.zeros((2, 2), dtype=np.uint32)
    final_z = np.zeros((2, 2), dtype=np.complex128)
    mandelbrot_kernel(-1.0, 1.0, 1.0, 1.0, 4, escape, final_z)
    julia_kernel(-1.0, 1.0, 1.0, 1.0, complex(0.0, 0.0), 4, escape, final_z)
    logger.debug("Numba kernels compiled")


def get_thread_count() -> int:
    """Number of threads numba uses for parallel kernels."""
    return numba.get_num_threads()
