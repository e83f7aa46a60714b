"""
Unit tests for sRGB/linear color conversion.
"""

import numpy as np
import pytest

from demoscript.compiler.color import (
    LinearColor,
    SrgbColor,
    linear_to_srgb,
    parse_color_literal,
    srgb_to_linear,
)


class TestTransferFunctions:
    """Tests for the sRGB transfer functions."""

    def test_boundaries_are_exact(self):
        assert srgb_to_linear([0.0, 1.0]).tolist() == [0.0, 1.0]
        assert linear_to_srgb([0.0, 1.0]).tolist() == [0.0, 1.0]

    def test_results_are_float32(self):
        assert srgb_to_linear([0.5]).dtype == np.float32
        assert linear_to_srgb([0.5]).dtype == np.float32

    def test_linear_segment(self):
        value = srgb_to_linear(0.04)
        assert float(value) == pytest.approx(0.04 / 12.92, rel=1e-6)

    def test_mid_grey(self):
        """sRGB 0.5 is roughly 21.4% linear intensity."""
        assert float(srgb_to_linear(0.5)) == pytest.approx(0.21404, abs=1e-4)

    def test_inputs_are_clamped(self):
        assert srgb_to_linear([-0.5, 2.0]).tolist() == [0.0, 1.0]
        assert linear_to_srgb([-0.5, 2.0]).tolist() == [0.0, 1.0]

    def test_monotonic(self):
        values = np.linspace(0.0, 1.0, 256, dtype=np.float32)
        linear = srgb_to_linear(values)
        assert np.all(np.diff(linear) >= 0)

    def test_inverse(self):
        values = np.linspace(0.0, 1.0, 33, dtype=np.float32)
        restored = linear_to_srgb(srgb_to_linear(values))
        np.testing.assert_allclose(restored, values, atol=1e-5)


class TestColorTypes:
    """Tests for SrgbColor and LinearColor."""

    def test_unpack_rgba(self):
        color = SrgbColor.from_rgba(0xFF0000FF)
        assert color.as_tuple() == (1.0, 0.0, 0.0, 1.0)

    def test_byte_order(self):
        color = SrgbColor.from_rgba(0x00FF0000)
        assert (color.r, color.g, color.b, color.a) == (0.0, 1.0, 0.0, 0.0)

    def test_alpha_is_not_gamma_converted(self):
        srgb = SrgbColor.from_rgba(0x80808080)
        linear = srgb.to_linear()
        assert linear.a == srgb.a
        assert linear.r < srgb.r

    def test_linear_to_srgb_roundtrip(self):
        linear = LinearColor(0.25, 0.5, 0.75, 0.5)
        back = linear.to_srgb().to_linear()
        for got, want in zip(back.as_tuple(), linear.as_tuple()):
            assert got == pytest.approx(want, abs=1e-5)


class TestColorLiterals:
    """Tests for literal text conversion."""

    def test_black(self):
        assert parse_color_literal("#000000").as_tuple() == (0.0, 0.0, 0.0, 1.0)

    def test_white(self):
        assert parse_color_literal("#FFFFFF").as_tuple() == (1.0, 1.0, 1.0, 1.0)

    def test_transparent_black(self):
        assert parse_color_literal("#00000000").as_tuple() == (0.0, 0.0, 0.0, 0.0)

    def test_lowercase_digits(self):
        assert parse_color_literal("#ffffff") == parse_color_literal("#FFFFFF")

    def test_six_digits_are_opaque(self):
        assert parse_color_literal("#336699").a == 1.0

    def test_alpha_byte(self):
        color = parse_color_literal("#FFFFFF80")
        assert color.a == pytest.approx(128 / 255)

    @pytest.mark.parametrize("text", ["#FFF", "#FFFFFFF", "FF00"])
    def test_invalid_length(self, text):
        with pytest.raises(ValueError):
            parse_color_literal(text)
