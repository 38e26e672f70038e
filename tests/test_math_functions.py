import pytest

from fractal_engine.core.math_functions import ESCAPE_RADIUS, Sample, iterate


@pytest.mark.parametrize("max_iter", [1, 10, 250, 1000])
def test_origin_never_escapes(max_iter):
    """z = 0 is a fixed point of z^2 + 0."""
    sample = iterate(0j, 0j, 0, max_iter)
    assert sample.escape == max_iter
    assert sample.final_z == 0j
    assert sample.is_inside(max_iter)


def test_point_outside_radius_escapes_immediately():
    sample = iterate(3 + 0j, 3 + 0j, 0, 100)
    assert sample.escape == 0
    assert sample.final_z == 3 + 0j
    assert not sample.is_inside(100)


def test_escaped_sample_is_past_radius():
    sample = iterate(0.5 + 0.5j, 0.5 + 0.5j, 0, 500)
    assert sample.escape < 500
    assert abs(sample.final_z) >= ESCAPE_RADIUS


def test_escape_counts_steps():
    # 1 -> 1 + 1 = 2, which is on the escape radius
    sample = iterate(1 + 0j, 1 + 0j, 0, 50)
    assert sample.escape == 1
    assert sample.final_z == 2 + 0j


def test_julia_uses_fixed_constant():
    # z0 = 0 with c = -1 cycles 0, -1, 0, -1 ... and never escapes
    sample = iterate(-1 + 0j, 0j, 0, 33)
    assert sample == Sample(final_z=-1 + 0j, escape=33)


def test_start_iteration_offsets_count():
    sample = iterate(1 + 0j, 1 + 0j, 5, 50)
    assert sample.escape == 6


def test_start_iteration_at_budget_does_nothing():
    sample = iterate(0.25j, 0.1 + 0j, 10, 10)
    assert sample == Sample(final_z=0.1 + 0j, escape=10)
