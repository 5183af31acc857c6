"""Projection of pixels with inverse depth between camera frames."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Intrinsics:
    """Pinhole camera intrinsics."""

    fx: float
    fy: float
    cx: float
    cy: float

    @property
    def fxi(self) -> float:
        return 1.0 / self.fx

    @property
    def fyi(self) -> float:
        return 1.0 / self.fy

    def matrix(self) -> np.ndarray:
        """Return the 3x3 camera matrix."""
        return np.array(
            [[self.fx, 0.0, self.cx], [0.0, self.fy, self.cy], [0.0, 0.0, 1.0]]
        )


@dataclass(frozen=True)
class Projection:
    """Outcome of projecting a host pixel into a target frame.

    ``valid`` is false when the point lands behind the camera or outside the
    image bounds; ``u``, ``v``, ``ku``, ``kv`` are NaN when it is behind.
    """

    valid: bool
    drescale: float
    new_idepth: float
    u: float
    v: float
    ku: float
    kv: float
    klip: np.ndarray


def _inside(ku: float, kv: float, w_bound: float, h_bound: float) -> bool:
    return bool(ku > 1.1 and kv > 1.1 and ku < w_bound and kv < h_bound)


def derive_idepth(
    t,
    u: float,
    v: float,
    dx_interp: float,
    dy_interp: float,
    drescale: float,
    scale_idepth: float = 1.0,
) -> float:
    """Derivative of the residual with respect to the point's inverse depth."""
    t0, t1, t2 = (float(c) for c in np.asarray(t, dtype=np.float64)[:3])
    return (
        dx_interp * drescale * (t0 - t2 * u) + dy_interp * drescale * (t1 - t2 * v)
    ) * scale_idepth


def project_point(
    u: float,
    v: float,
    idepth: float,
    krki,
    kt,
    w_bound: float,
    h_bound: float,
) -> tuple[float, float, bool]:
    """Project pixel (u, v) with ``K R K^-1`` and ``K t``; return (ku, kv, inside)."""
    ptp = np.asarray(krki, dtype=np.float64) @ np.array([u, v, 1.0]) + np.asarray(
        kt, dtype=np.float64
    ) * idepth
    with np.errstate(divide="ignore", invalid="ignore"):
        ku = float(np.float64(ptp[0]) / ptp[2])
        kv = float(np.float64(ptp[1]) / ptp[2])
    return ku, kv, _inside(ku, kv, w_bound, h_bound)


def project_point_full(
    u: float,
    v: float,
    idepth: float,
    dx: int,
    dy: int,
    intrinsics: Intrinsics,
    rot,
    t,
    w_bound: float,
    h_bound: float,
) -> Projection:
    """Project pixel (u + dx, v + dy) by rotation ``rot`` and translation ``t``."""
    klip = np.array(
        [
            (u + dx - intrinsics.cx) * intrinsics.fxi,
            (v + dy - intrinsics.cy) * intrinsics.fyi,
            1.0,
        ]
    )
    ptp = np.asarray(rot, dtype=np.float64) @ klip + np.asarray(
        t, dtype=np.float64
    ) * idepth
    with np.errstate(divide="ignore", invalid="ignore"):
        drescale = float(np.float64(1.0) / ptp[2])
        new_idepth = float(np.float64(idepth) * drescale)

    if not drescale > 0:
        nan = float("nan")
        return Projection(False, drescale, new_idepth, nan, nan, nan, nan, klip)

    pu = float(ptp[0] * drescale)
    pv = float(ptp[1] * drescale)
    ku = pu * intrinsics.fx + intrinsics.cx
    kv = pv * intrinsics.fy + intrinsics.cy
    return Projection(
        _inside(ku, kv, w_bound, h_bound), drescale, new_idepth, pu, pv, ku, kv, klip
    )