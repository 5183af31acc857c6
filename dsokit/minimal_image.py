"""A small two-dimensional image container addressed by (x, y)."""

from __future__ import annotations

from typing import Any

import numpy as np


class MinimalImage:
    """Image of ``w`` x ``h`` pixels backed by a numpy array of shape (h, w, ...).

    Without ``data`` the image owns a zeroed float32 buffer. Given an array,
    the image wraps it: writes through the image show in that array.
    """

    def __init__(self, w: int, h: int, data: Any = None) -> None:
        if w < 0 or h < 0:
            raise ValueError(f"invalid image size {w}x{h}")
        self.w = int(w)
        self.h = int(h)
        if data is None:
            self.data = np.zeros((self.h, self.w), dtype=np.float32)
            return
        arr = np.asarray(data)
        if arr.ndim >= 2 and arr.shape[:2] == (self.h, self.w):
            self.data = arr
        elif arr.ndim >= 1 and arr.shape[0] == self.w * self.h:
            self.data = arr.reshape((self.h, self.w) + arr.shape[1:])
        else:
            raise ValueError(
                f"data of shape {arr.shape} does not fit a {self.w}x{self.h} image"
            )

    def clone(self) -> "MinimalImage":
        """Return an image owning a copy of this image's pixels."""
        return MinimalImage(self.w, self.h, self.data.copy())

    def _index(self, x: float, y: float) -> tuple[int, int]:
        ix, iy = int(x), int(y)
        if not (0 <= ix < self.w and 0 <= iy < self.h):
            raise IndexError(f"pixel ({ix}, {iy}) outside {self.w}x{self.h} image")
        return iy, ix

    def at(self, x: float, y: float) -> Any:
        """Return the pixel at (x, y); coordinates are truncated to integers."""
        return self.data[self._index(x, y)]

    def set_at(self, x: float, y: float, val: Any) -> None:
        """Set the pixel at (x, y); coordinates are truncated to integers."""
        self.data[self._index(x, y)] = val

    def set_black(self) -> None:
        """Set every pixel to zero."""
        self.data[...] = 0

    def set_const(self, val: Any) -> None:
        """Set every pixel to ``val``."""
        self.data[...] = val

    def set_pixel1(self, u: float, v: float, val: Any) -> None:
        """Set the pixel nearest to (u, v)."""
        self.set_at(u + 0.5, v + 0.5, val)

    def set_pixel4(self, u: float, v: float, val: Any) -> None:
        """Set the 2x2 block whose top-left corner holds (u, v)."""
        for dx, dy in ((1.0, 1.0), (1.0, 0.0), (0.0, 1.0), (0.0, 0.0)):
            self.set_at(u + dx, v + dy, val)

    def set_pixel9(self, u: int, v: int, val: Any) -> None:
        """Set the 3x3 block centred on (u, v)."""
        for dx in (1, 0, -1):
            for dy in (-1, 0, 1):
                self.set_at(u + dx, v + dy, val)

    def set_pixel_circ(self, u: int, v: int, val: Any) -> None:
        """Draw a square ring two pixels thick, 7x7 wide, around (u, v)."""
        for i in range(-3, 4):
            for d in (3, -3, 2, -2):
                self.set_at(u + d, v + i, val)
                self.set_at(u + i, v + d, val)