"""Shared numeric constants and the affine brightness model."""

from __future__ import annotations

import math
from dataclasses import dataclass

MAX_RES_PER_POINT = 8
NUM_THREADS = 6
CPARS = 4


@dataclass
class AffLight:
    """Affine brightness transfer: I_frame = exp(a) * I_global + b."""

    a: float = 0.0
    b: float = 0.0

    @staticmethod
    def from_to_vec_exposure(
        exposure_from: float,
        exposure_to: float,
        g2f: "AffLight",
        g2t: "AffLight",
    ) -> tuple[float, float]:
        """Return the (a, b) mapping intensities of one frame into another.

        A zero exposure on either side makes both exposures count as 1.
        """
        if exposure_from == 0 or exposure_to == 0:
            exposure_from = exposure_to = 1.0
        a = math.exp(g2t.a - g2f.a) * exposure_to / exposure_from
        b = g2t.b - a * g2f.b
        return (a, b)

    def vec(self) -> tuple[float, float]:
        """Return the parameters as an (a, b) pair."""
        return (self.a, self.b)