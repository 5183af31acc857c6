"""Gradient-based selection of candidate pixels on a regular grid."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

MIN_USE_GRAD_PIXSEL = 10.0


@dataclass
class PixelStatus:
    """Result of a pixel selection.

    ``map`` is a boolean (h, w) array of the selected pixels, ``num_good`` is
    how many were selected and ``sparsity_factor`` is the grid size to use on
    the next call.
    """

    map: np.ndarray
    num_good: int
    sparsity_factor: int


def _check_grads(grads) -> np.ndarray:
    arr = np.asarray(grads, dtype=np.float32)
    if arr.ndim != 3 or arr.shape[2] < 3:
        raise ValueError(
            f"gradients must have shape (h, w, 3), got {arr.shape}"
        )
    return arr


def grid_max_selection(grads, pot: int, th_fac: float = 1.0) -> PixelStatus:
    """Pick, in each ``pot`` x ``pot`` cell, the pixels with the strongest gradients.

    ``grads`` holds (intensity, d/dx, d/dy) per pixel. In every cell the pixel
    with the largest |gx|, |gy|, |gx - gy| and |gx + gy| is chosen among those
    whose gradient is above the threshold; a pixel chosen twice counts once.
    """
    if pot < 1:
        raise ValueError("pot must be at least 1")
    arr = _check_grads(grads)
    h, w = arr.shape[:2]
    selected = np.zeros((h, w), dtype=bool)

    th = np.float32(th_fac * MIN_USE_GRAD_PIXSEL * 0.75)
    th_sq = th * th
    num_good = 0

    for y in range(1, h - pot, pot):
        for x in range(1, w - pot, pot):
            # Order the cell with x outermost so ties go to the first pixel seen.
            block = arr[y : y + pot, x : x + pot].transpose(1, 0, 2)
            gx = block[:, :, 1].ravel()
            gy = block[:, :, 2].ravel()
            strong = gx * gx + gy * gy > th_sq
            if not strong.any():
                continue
            for score in (np.abs(gx), np.abs(gy), np.abs(gx - gy), np.abs(gx + gy)):
                masked = np.where(strong, score, np.float32(0))
                best = int(np.argmax(masked))
                if not masked[best] > 0:
                    continue
                dx, dy = divmod(best, pot)
                if not selected[y + dy, x + dx]:
                    num_good += 1
                    selected[y + dy, x + dx] = True

    return PixelStatus(selected, num_good, pot)


def make_pixel_status(
    grads,
    desired_density: float,
    sparsity_factor: int = 1,
    recs_left: int = 5,
    th_fac: float = 1.0,
) -> PixelStatus:
    """Select pixels, adapting the grid size until the count nears ``desired_density``.

    The number of selected points grows roughly with the inverse square of the
    grid size, so the grid is rescaled by the square root of the ratio found.
    """
    if not desired_density > 0:
        raise ValueError("desired_density must be positive")
    arr = _check_grads(grads)

    while True:
        if sparsity_factor < 1:
            sparsity_factor = 1

        result = grid_max_selection(arr, sparsity_factor, th_fac)
        quotia = result.num_good / float(desired_density)
        new_sparsity = int(sparsity_factor * math.sqrt(quotia) + 0.7)
        if new_sparsity < 1:
            new_sparsity = 1

        old_th_fac = th_fac
        if new_sparsity == 1 and sparsity_factor == 1:
            th_fac = 0.5

        settled = abs(new_sparsity - sparsity_factor) < 1 and th_fac == old_th_fac
        near_target = quotia > 0.8 and 1.0 / quotia > 0.8
        if settled or near_target or recs_left == 0:
            return PixelStatus(result.map, result.num_good, new_sparsity)

        sparsity_factor = new_sparsity
        recs_left -= 1