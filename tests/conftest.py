import pytest

from fractal_engine.core.fractal_types import Julia, Mandelbrot
from fractal_engine.core.grid import Grid
from fractal_engine.core.viewport import ViewportConfig


@pytest.fixture
def mandelbrot_config():
    """Small classic Mandelbrot view."""
    return ViewportConfig(width=48, height=32, max_iterations=100,
                          scale=3.0, center=complex(-0.5, 0.0), variant=Mandelbrot())


@pytest.fixture
def julia_config():
    return ViewportConfig(width=40, height=30, max_iterations=80,
                          scale=3.2, center=0j, variant=Julia(complex(-0.8, 0.156)))


@pytest.fixture
def dyadic_config():
    """View whose pixel coordinates are all exactly representable."""
    return ViewportConfig(width=16, height=16, max_iterations=60,
                          scale=4.0, center=0j, variant=Mandelbrot())


@pytest.fixture
def mandelbrot_grid(mandelbrot_config):
    return Grid(mandelbrot_config)
