import pytest

from fractal_engine.core.fractal_types import (
    JULIA_PRESETS, Julia, Mandelbrot, julia_preset, list_variants, parse_julia_constant,
    variant_from_dict,
)


def test_variants_are_values():
    assert Mandelbrot() == Mandelbrot()
    assert Julia(1) == Julia(1 + 0j)
    assert hash(Julia(0.5j)) == hash(Julia(complex(0.0, 0.5)))


def test_julia_presets():
    assert julia_preset("Rabbit") == Julia(JULIA_PRESETS["rabbit"])
    with pytest.raises(ValueError, match="Available"):
        julia_preset("nope")


@pytest.mark.parametrize("text, expected", [
    ("-0.8,0.156", complex(-0.8, 0.156)),
    (" 0.25 , -0.5 ", complex(0.25, -0.5)),
    ("dendrite", JULIA_PRESETS["dendrite"]),
])
def test_parse_julia_constant(text, expected):
    assert parse_julia_constant(text) == Julia(expected)


@pytest.mark.parametrize("text", ["1,2,3", "a,b", "unknown"])
def test_parse_julia_constant_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_julia_constant(text)


def test_variant_dict_round_trip():
    for variant in (Mandelbrot(), Julia(complex(-0.391, -0.587))):
        assert variant_from_dict(variant.to_dict()) == variant


def test_list_variants():
    assert set(list_variants()) == {"mandelbrot", "julia"}
