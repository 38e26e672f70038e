import itertools
from dataclasses import replace
from types import SimpleNamespace

import numpy as np
import pytest

from fractal_engine.core.fractal_types import Julia, Mandelbrot
from fractal_engine.core.grid import Grid, GridSizeError
from fractal_engine.core.math_functions import ESCAPE_RADIUS, iterate
from fractal_engine.core.viewport import ViewportConfig
from fractal_engine import engine
from fractal_engine.acceleration.row_pool import RowPoolAccelerator
from fractal_engine.engine import BACKENDS, benchmark, compute


def reference_grid(config):
    """Evaluate a viewport point by point with the scalar iterator."""
    x_incr, y_incr = config.increments()
    top_left = config.origin()
    escape = np.zeros((config.height, config.width), dtype=np.int64)
    final_z = np.zeros((config.height, config.width), dtype=np.complex128)
    for y in range(config.height):
        y_cur = top_left.imag - y * y_incr
        x_cur = top_left.real
        for x in range(config.width):
            z = complex(x_cur, y_cur)
            c = z if isinstance(config.variant, Mandelbrot) else config.variant.c
            sample = iterate(c, z, 0, config.max_iterations)
            escape[y, x] = sample.escape
            final_z[y, x] = sample.final_z
            x_cur += x_incr
    return escape, final_z


@pytest.mark.parametrize("backend", BACKENDS)
@pytest.mark.parametrize("config_fixture", ["mandelbrot_config", "julia_config"])
def test_matches_scalar_iteration(request, backend, config_fixture):
    config = request.getfixturevalue(config_fixture)
    grid = compute(Grid(config), backend=backend)

    escape, final_z = reference_grid(config)
    np.testing.assert_array_equal(grid.escape, escape)
    np.testing.assert_allclose(grid.final_z, final_z)


@pytest.mark.parametrize("backend", BACKENDS)
def test_escape_within_budget(mandelbrot_config, backend):
    grid = compute(Grid(mandelbrot_config), backend=backend)
    max_iter = mandelbrot_config.max_iterations

    assert grid.escape.max() <= max_iter
    inside = grid.inside_mask()
    assert inside.any() and (~inside).any()
    assert (np.abs(grid.final_z[~inside]) >= ESCAPE_RADIUS).all()


def test_deterministic_across_runs_and_backends(julia_config):
    first = compute(Grid(julia_config), backend='numba')
    second = compute(Grid(julia_config), backend='numba')
    threaded = compute(Grid(julia_config), backend='threads', workers=3)

    np.testing.assert_array_equal(first.escape, second.escape)
    np.testing.assert_array_equal(first.final_z, second.final_z)
    np.testing.assert_array_equal(first.escape, threaded.escape)
    np.testing.assert_array_equal(first.final_z, threaded.final_z)


def test_origin_pixel_never_escapes():
    # A 1x1 grid whose only pixel sits at c = 0
    config = ViewportConfig(width=1, height=1, max_iterations=321, scale=2.0,
                            center=complex(1.0, -1.0))
    assert config.pixel_to_complex(0, 0) == 0j
    grid = compute(Grid(config))
    assert grid.sample(0, 0).escape == 321


def test_far_pixel_escapes_immediately():
    config = ViewportConfig(width=1, height=1, max_iterations=50, scale=2.0,
                            center=complex(4.0, -1.0))
    assert config.pixel_to_complex(0, 0) == 3 + 0j
    sample = compute(Grid(config)).sample(0, 0)
    assert sample.escape == 0
    assert sample.final_z == 3 + 0j


@pytest.mark.parametrize("backend", BACKENDS)
def test_mandelbrot_is_symmetric_about_real_axis(dyadic_config, backend):
    """Rows y and height - y sample complex-conjugate points."""
    grid = compute(Grid(dyadic_config), backend=backend)
    height = dyadic_config.height

    for y in range(1, height):
        np.testing.assert_array_equal(grid.escape[y], grid.escape[height - y])
        np.testing.assert_array_equal(grid.final_z[y], np.conj(grid.final_z[height - y]))


def test_julia_uses_constant(julia_config):
    grid = compute(Grid(julia_config))
    mandelbrot = compute(Grid(julia_config.with_variant(Mandelbrot())))
    assert not np.array_equal(grid.escape, mandelbrot.escape)


def test_recompute_overwrites_everything(mandelbrot_config):
    grid = Grid(mandelbrot_config)
    grid.escape[:] = 12345
    grid.final_z[:] = 99 + 99j
    compute(grid)

    expected = compute(Grid(mandelbrot_config))
    np.testing.assert_array_equal(grid.escape, expected.escape)
    np.testing.assert_array_equal(grid.final_z, expected.final_z)


def test_resize_then_compute(mandelbrot_config):
    grid = compute(Grid(mandelbrot_config))
    grid.resize(mandelbrot_config.with_size(21, 9))
    compute(grid)

    assert grid.shape == (9, 21)
    expected = compute(Grid(mandelbrot_config.with_size(21, 9)))
    np.testing.assert_array_equal(grid.escape, expected.escape)


def test_iteration_change_recomputes(mandelbrot_config):
    grid = compute(Grid(mandelbrot_config))
    grid.reconfigure(mandelbrot_config.with_iterations(10))
    compute(grid)
    assert grid.escape.max() == 10


def test_size_mismatch_is_fatal(mandelbrot_grid):
    mandelbrot_grid.config = replace(mandelbrot_grid.config, height=3)
    with pytest.raises(GridSizeError):
        compute(mandelbrot_grid)


def test_unknown_backend(mandelbrot_grid):
    with pytest.raises(ValueError, match="Unknown backend"):
        compute(mandelbrot_grid, backend='gpu')


def test_benchmark_reports_every_backend():
    grid = Grid(ViewportConfig(width=8, height=6, max_iterations=20, scale=3.0))
    results = benchmark(grid)
    assert set(results) == set(BACKENDS)
    for result in results.values():
        assert result['time'] >= 0


def fake_clock():
    ticks = itertools.count()
    # only perf_counter is provided, so any other clock call fails loudly
    return SimpleNamespace(perf_counter=lambda: float(next(ticks)))


def test_benchmark_uses_performance_counter(monkeypatch):
    monkeypatch.setattr(engine, "time", fake_clock())
    grid = Grid(ViewportConfig(width=8, height=6, max_iterations=20, scale=3.0))

    results = benchmark(grid)

    for result in results.values():
        # outer start/stop around compute's own start/stop
        assert result['time'] == 3.0
        assert result['pixels_per_second'] == pytest.approx(48 / 3.0)


def test_row_pool_writes_only_rows_it_is_given(mandelbrot_grid):
    config = mandelbrot_grid.config
    x_incr, y_incr = config.increments()
    top_left = config.origin()
    mandelbrot_grid.escape[:] = 12345

    odd_rows = [row for row in mandelbrot_grid.rows() if row[0] % 2 == 1]
    RowPoolAccelerator(3).compute_mandelbrot(top_left.real, top_left.imag, x_incr, y_incr,
                                             config.max_iterations, odd_rows)

    expected, _ = reference_grid(config)
    np.testing.assert_array_equal(mandelbrot_grid.escape[1::2], expected[1::2])
    assert (mandelbrot_grid.escape[0::2] == 12345).all()
