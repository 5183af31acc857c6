"""Bilinear and bicubic image sampling, and colour maps for visualisation.

Images are numpy arrays of shape (h, w) or (h, w, channels), indexed at
(x, y) with x the column. Coordinates are truncated toward zero to find the
base pixel, as integer conversion does.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

Color3b = Tuple[int, int, int]
Color3f = Tuple[float, float, float]


def _array(mat) -> np.ndarray:
    arr = np.asarray(mat, dtype=np.float64)
    if arr.ndim not in (2, 3):
        raise ValueError(f"expected an image of 2 or 3 dimensions, got {arr.ndim}")
    return arr


def _plane(mat) -> np.ndarray:
    arr = _array(mat)
    return arr[:, :, 0] if arr.ndim == 3 else arr


def _cell(arr: np.ndarray, x: float, y: float, lo: int, hi: int):
    ix, iy = int(x), int(y)
    h, w = arr.shape[:2]
    if ix + lo < 0 or iy + lo < 0 or ix + hi >= w or iy + hi >= h:
        raise IndexError(f"sample at ({x}, {y}) needs pixels outside {w}x{h} image")
    return ix, iy, x - ix, y - iy


def _blend(arr: np.ndarray, ix: int, iy: int, dx: float, dy: float):
    dxdy = dx * dy
    return (
        dxdy * arr[iy + 1, ix + 1]
        + (dy - dxdy) * arr[iy + 1, ix]
        + (dx - dxdy) * arr[iy, ix + 1]
        + (1 - dx - dy + dxdy) * arr[iy, ix]
    )


def _result(value):
    return float(value) if np.ndim(value) == 0 else np.asarray(value)


def bilinear(mat, x: float, y: float):
    """Sample bilinearly; a scalar for one-channel images, else a vector."""
    arr = _array(mat)
    ix, iy, dx, dy = _cell(arr, x, y, 0, 1)
    return _result(_blend(arr, ix, iy, dx, dy))


def bilinear_channels(mat, x: float, y: float, channels: int) -> np.ndarray:
    """Sample the first ``channels`` channels of a multi-channel image."""
    arr = _array(mat)
    if arr.ndim != 3 or not 1 <= channels <= arr.shape[2]:
        raise ValueError(f"cannot take {channels} channels of shape {arr.shape}")
    ix, iy, dx, dy = _cell(arr, x, y, 0, 1)
    return np.asarray(_blend(arr[:, :, :channels], ix, iy, dx, dy))


def _corners(over, ix: int, iy: int) -> list[bool]:
    flags = np.asarray(over, dtype=bool)
    return [
        bool(flags[iy + 1, ix + 1]),
        bool(flags[iy, ix + 1]),
        bool(flags[iy + 1, ix]),
        bool(flags[iy, ix]),
    ]


def bilinear_over_and(mat, over, x: float, y: float):
    """Sample bilinearly; the flag is true when all four corner flags are."""
    arr = _array(mat)
    ix, iy, dx, dy = _cell(arr, x, y, 0, 1)
    return _result(_blend(arr, ix, iy, dx, dy)), all(_corners(over, ix, iy))


def bilinear_over_or(mat, over, x: float, y: float):
    """Sample bilinearly; the flag is true when any corner flag is."""
    arr = _array(mat)
    ix, iy, dx, dy = _cell(arr, x, y, 0, 1)
    return _result(_blend(arr, ix, iy, dx, dy)), any(_corners(over, ix, iy))


def bilinear_gradient(mat, x: float, y: float) -> np.ndarray:
    """Return [value, d/dx, d/dy] of the first channel, bilinearly."""
    arr = _plane(mat)
    ix, iy, dx, dy = _cell(arr, x, y, 0, 1)
    tl = arr[iy, ix]
    tr = arr[iy, ix + 1]
    bl = arr[iy + 1, ix]
    br = arr[iy + 1, ix + 1]
    top = dx * tr + (1 - dx) * tl
    bot = dx * br + (1 - dx) * bl
    left = dy * bl + (1 - dy) * tl
    right = dy * br + (1 - dy) * tr
    return np.array([dx * right + (1 - dx) * left, right - left, bot - top])


def cubic(p: Sequence[float], x: float) -> float:
    """Cubic interpolation between p[1] (x = 0) and p[2] (x = 1)."""
    p0, p1, p2, p3 = (float(v) for v in p[:4])
    return p1 + 0.5 * x * (
        p2 - p0 + x * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3 + x * (3.0 * (p1 - p2) + p3 - p0))
    )


def cubic_with_derivative(p: Sequence[float], x: float) -> tuple[float, float]:
    """Return the cubic interpolant at ``x`` and its derivative."""
    p0, p1, p2, p3 = (float(v) for v in p[:4])
    c1 = 0.5 * (p2 - p0)
    c2 = p0 - 2.5 * p1 + 2 * p2 - 0.5 * p3
    c3 = 0.5 * (3.0 * (p1 - p2) + p3 - p0)
    xx = x * x
    return (p1 + x * c1 + xx * c2 + xx * x * c3, c1 + x * 2.0 * c2 + xx * 3.0 * c3)


def _rows(arr: np.ndarray, x: float, y: float):
    ix, iy, dx, dy = _cell(arr, x, y, -1, 2)
    return [arr[iy + r, ix - 1 : ix + 3] for r in (-1, 0, 1, 2)], dx, dy


def bicubic(mat, x: float, y: float) -> float:
    """Sample the first channel bicubically."""
    rows, dx, dy = _rows(_plane(mat), x, y)
    return cubic([cubic(row, dx) for row in rows], dy)


def bicubic_gradient(mat, x: float, y: float) -> np.ndarray:
    """Return [value, d/dx, d/dy] of the first channel, bicubically."""
    rows, dx, dy = _rows(_plane(mat), x, y)
    pairs = [cubic_with_derivative(row, dx) for row in rows]
    value, d_dy = cubic_with_derivative([v for v, _ in pairs], dy)
    d_dx = cubic([g for _, g in pairs], dy)
    return np.array([value, d_dx, d_dy])


def rainbow_f3(value: float, scale: float = 1.0) -> Color3f:
    """Cyclic rainbow colour with components in [0, 1]; white below zero."""
    v = value * scale
    if not v >= 0:
        return (1.0, 1.0, 1.0)
    whole = int(v)
    frac = v - whole
    phase = whole % 3
    if phase == 0:
        return (1 - frac, frac, 0.0)
    if phase == 1:
        return (0.0, 1 - frac, frac)
    return (frac, 0.0, 1 - frac)


def rainbow_3b(value: float, scale: float = 1.0) -> Color3b:
    """Cyclic rainbow colour in bytes; white unless the value is positive."""
    v = value * scale
    if not v > 0:
        return (255, 255, 255)
    whole = int(v)
    frac = v - whole
    phase = whole % 3
    if phase == 0:
        return (int(255 * (1 - frac)), int(255 * frac), 0)
    if phase == 1:
        return (0, int(255 * (1 - frac)), int(255 * frac))
    return (int(255 * frac), 0, int(255 * (1 - frac)))


def jet_3b(value: float) -> Color3b:
    """Jet colour map over [0, 1], in BGR byte order."""
    if value <= 0:
        return (128, 0, 0)
    if value >= 1:
        return (0, 0, 128)
    if math.isnan(value):
        return (255, 255, 255)
    seg = int(value * 8)
    f = value * 8 - seg
    table = {
        0: (255 * (0.5 + 0.5 * f), 0, 0),
        1: (255, 255 * (0.5 * f), 0),
        2: (255, 255 * (0.5 + 0.5 * f), 0),
        3: (255 * (1 - 0.5 * f), 255, 255 * (0.5 * f)),
        4: (255 * (0.5 - 0.5 * f), 255, 255 * (0.5 + 0.5 * f)),
        5: (0, 255 * (1 - 0.5 * f), 255),
        6: (0, 255 * (0.5 - 0.5 * f), 255),
        7: (0, 0, 255 * (1 - 0.5 * f)),
    }
    color = table.get(seg, (255, 255, 255))
    return tuple(int(c) for c in color)  # type: ignore[return-value]


def red_green_3b(value: float) -> Color3b:
    """BGR colour from red (0) through yellow (0.5) to green (1)."""
    if value < 0:
        return (0, 0, 255)
    if value < 0.5:
        return (0, int(255 * 2 * value), 255)
    if value < 1:
        return (0, 255, int(255 - 255 * 2 * (value - 0.5)))
    return (0, 255, 0)