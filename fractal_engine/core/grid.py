"""
Dense sample grid owned by the computation engine.

Samples are stored as two row-major numpy arrays, one per Sample field. Each
pixel row is a pair of non-overlapping views into those arrays, so row
buffers can be handed to independent workers without copying.
"""

import numpy as np
from typing import Iterator, Tuple
import logging

from .math_functions import Sample
from .viewport import ViewportConfig

logger = logging.getLogger(__name__)

ESCAPE_DTYPE = np.uint32
FINAL_Z_DTYPE = np.complex128


class GridSizeError(RuntimeError):
    """Raised when sample storage does not match the grid's configuration."""


class Grid:
    """Sample grid for one viewport configuration."""

    def __init__(self, config: ViewportConfig):
        """
        Allocate a zeroed grid.

        Args:
            config: Viewport configuration; validated before allocation
        """
        self.config = config
        self.escape, self.final_z = self._allocate(config)

    @staticmethod
    def _allocate(config: ViewportConfig) -> Tuple[np.ndarray, np.ndarray]:
        config.validate()
        shape = (config.height, config.width)
        logger.debug(f"Allocating {config.width}x{config.height} sample grid")
        return np.zeros(shape, dtype=ESCAPE_DTYPE), np.zeros(shape, dtype=FINAL_Z_DTYPE)

    def resize(self, config: ViewportConfig) -> None:
        """
        Replace the configuration and reallocate storage for it.

        All previous samples are dropped, even if the dimensions are unchanged.
        """
        self.escape, self.final_z = self._allocate(config)
        self.config = config
        logger.info(f"Grid resized to {config.width}x{config.height}")

    def reconfigure(self, config: ViewportConfig) -> None:
        """Swap in a new configuration, reallocating only if dimensions change."""
        if (config.width, config.height) != (self.config.width, self.config.height):
            self.resize(config)
        else:
            config.validate()
            self.config = config

    @property
    def height(self) -> int:
        return self.escape.shape[0]

    @property
    def width(self) -> int:
        return self.escape.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.escape.shape

    def __len__(self) -> int:
        return self.height

    def rows(self) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
        """Yield (y, escape_row, final_z_row) views, top row first."""
        for y in range(self.height):
            yield y, self.escape[y], self.final_z[y]

    def row_samples(self, y: int) -> Iterator[Sample]:
        for x in range(self.width):
            yield self.sample(x, y)

    def sample(self, x: int, y: int) -> Sample:
        """Get the sample at column x, row y."""
        return Sample(final_z=complex(self.final_z[y, x]), escape=int(self.escape[y, x]))

    def check_size(self) -> None:
        """
        Verify that storage matches the configured dimensions.

        Raises:
            GridSizeError: if the row count or any row's length is wrong
        """
        if self.escape.ndim != 2 or self.final_z.shape != self.escape.shape:
            raise GridSizeError("sample arrays are malformed")
        if self.escape.shape[0] != self.config.height:
            raise GridSizeError(
                f"sample array is the wrong size: {self.escape.shape[0]} rows, "
                f"configured height {self.config.height}")
        if self.escape.shape[1] != self.config.width:
            raise GridSizeError(
                f"sample array is the wrong size: {self.escape.shape[1]} columns, "
                f"configured width {self.config.width}")

    def inside_mask(self) -> np.ndarray:
        """Boolean mask of cells that did not escape within the budget."""
        return self.escape >= self.config.max_iterations
