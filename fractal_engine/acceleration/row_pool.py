"""
Thread-pool backend for row-parallel grid computation.

Work is fanned out over the grid's non-overlapping per-row views
(``Grid.rows()``); each task receives exactly one row and writes nothing else. The
row kernels are numba-compiled with ``nogil=True`` so the pool threads run
truly in parallel.
"""

import numpy as np
from typing import Iterable, Optional, Tuple
import logging
import os
from concurrent.futures import ThreadPoolExecutor

from .numba_backend import julia_row, mandelbrot_row

logger = logging.getLogger(__name__)

RowView = Tuple[int, np.ndarray, np.ndarray]


def get_optimal_worker_count() -> int:
    """Get the number of workers to use: one per hardware thread."""
    return os.cpu_count() or 1


class RowPoolAccelerator:
    """Thread-pool row fan-out."""

    def __init__(self, num_workers: Optional[int] = None):
        """
        Initialize the accelerator.

        Args:
            num_workers: Number of worker threads (None for CPU count)
        """
        if num_workers is None:
            self.num_workers = get_optimal_worker_count()
        else:
            self.num_workers = max(1, num_workers)
        logger.debug(f"Row pool accelerator: {self.num_workers} workers")

    def compute_mandelbrot(self, x_start: float, y_top: float, x_incr: float, y_incr: float,
                           max_iter: int, rows: Iterable[RowView]) -> None:
        """
        Fill every row of a Mandelbrot grid.

        Args:
            rows: Disjoint (y, escape_row, final_z_row) views, e.g. Grid.rows()
        """
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            futures = [executor.submit(mandelbrot_row, x_start, y_top - y * y_incr, x_incr,
                                       max_iter, escape_row, final_z_row)
                       for y, escape_row, final_z_row in rows]
            for future in futures:
                future.result()

    def compute_julia(self, x_start: float, y_top: float, x_incr: float, y_incr: float,
                      c: complex, max_iter: int, rows: Iterable[RowView]) -> None:
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            futures = [executor.submit(julia_row, x_start, y_top - y * y_incr, x_incr, c,
                                       max_iter, escape_row, final_z_row)
                       for y, escape_row, final_z_row in rows]
            for future in futures:
                future.result()
