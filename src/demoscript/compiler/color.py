"""
Color spaces for DemoScript color literals.

Color literals are written as sRGB bytes (``#RRGGBB`` or ``#RRGGBBAA``) but the
renderer works in linear space, so literals are converted once while parsing.
All arithmetic is done in float32, the precision the renderer uses.
Alpha is linear in both spaces and is never gamma-converted.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def srgb_to_linear(values) -> np.ndarray:
    """
    Apply the sRGB decoding transfer function.

    Inputs are clamped to [0, 1]; 0 maps to exactly 0.0 and 1 to exactly 1.0.

    Args:
        values: A scalar or array of sRGB-encoded components

    Returns:
        A float32 array of linear components with the same shape.
    """
    c = np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
    curve = np.power((c + np.float32(0.055)) / np.float32(1.055), np.float32(2.4))
    linear = np.where(c <= np.float32(0.04045), c / np.float32(12.92), curve)
    return np.where(c >= 1.0, np.float32(1.0), linear).astype(np.float32)


def linear_to_srgb(values) -> np.ndarray:
    """
    Apply the sRGB encoding transfer function (inverse of srgb_to_linear).

    Args:
        values: A scalar or array of linear components

    Returns:
        A float32 array of sRGB-encoded components with the same shape.
    """
    c = np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
    curve = np.power(c, np.float32(1.0 / 2.4)) * np.float32(1.055) - np.float32(0.055)
    encoded = np.where(c < np.float32(0.0031308), c * np.float32(12.92), curve)
    return np.where(c >= 1.0, np.float32(1.0), encoded).astype(np.float32)


@dataclass(frozen=True, slots=True)
class LinearColor:
    """Linear space color with alpha."""

    r: float
    g: float
    b: float
    a: float

    def to_srgb(self) -> "SrgbColor":
        r, g, b = (float(v) for v in linear_to_srgb([self.r, self.g, self.b]))
        return SrgbColor(r, g, b, self.a)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


@dataclass(frozen=True, slots=True)
class SrgbColor:
    """sRGB color with alpha (alpha is linear)."""

    r: float
    g: float
    b: float
    a: float

    @classmethod
    def from_rgba(cls, rgba: int) -> "SrgbColor":
        """
        Unpack a 32-bit ``0xRRGGBBAA`` value into [0, 1] components.

        Args:
            rgba: Packed color, red in the most significant byte

        Returns:
            The unpacked sRGB color.
        """
        channels = np.array(
            [(rgba >> 24) & 0xFF, (rgba >> 16) & 0xFF, (rgba >> 8) & 0xFF, rgba & 0xFF],
            dtype=np.float32,
        ) / np.float32(255.0)
        r, g, b, a = (float(v) for v in channels)
        return cls(r, g, b, a)

    def to_linear(self) -> LinearColor:
        r, g, b = (float(v) for v in srgb_to_linear([self.r, self.g, self.b]))
        return LinearColor(r, g, b, self.a)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


def parse_color_literal(text: str) -> LinearColor:
    """
    Convert a ``#RRGGBB`` or ``#RRGGBBAA`` literal into a linear color.

    Six-digit literals get an implicit alpha of ``0xFF``.

    Raises:
        ValueError: If the text is not a well-formed color literal.
    """
    digits = text[1:] if text.startswith("#") else text
    if len(digits) not in (6, 8):
        raise ValueError(f"color literal must have 6 or 8 hex digits: {text!r}")
    packed = int(digits, 16)
    if len(digits) == 6:
        packed = (packed << 8) | 0xFF
    return SrgbColor.from_rgba(packed).to_linear()
