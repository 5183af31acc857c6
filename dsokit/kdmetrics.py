"""Distance functors for k-d tree searches, and the search options.

Each metric is bound to a data set of points (an ``(n, dim)`` array). Calling
a metric with a query vector and a point index gives the distance between
them. ``accum_dist`` gives the contribution of one coordinate.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def _as_points(points) -> np.ndarray:
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"points must be a 2-D array, got {arr.ndim} dimensions")
    return arr


class _BoundMetric:
    """Common part of the metrics: the data set and access to its points."""

    def __init__(self, points) -> None:
        self.points = _as_points(points)

    def _pair(self, a, b: int) -> tuple[list[float], list[float]]:
        n = self.points.shape[0]
        if not 0 <= b < n:
            raise IndexError(f"point index {b} outside data set of {n} points")
        query = [float(c) for c in np.asarray(a, dtype=np.float64).ravel()]
        if len(query) != self.points.shape[1]:
            raise ValueError(
                f"query has {len(query)} components, points have {self.points.shape[1]}"
            )
        return query, [float(c) for c in self.points[b]]


class L1Distance(_BoundMetric):
    """Manhattan distance, summed four components at a time.

    With a positive ``worst_dist`` the sum stops early, after a group of four,
    once it has grown beyond ``worst_dist``.
    """

    def __call__(self, a, b: int, worst_dist: float = -1) -> float:
        query, point = self._pair(a, b)
        size = len(query)
        result = 0.0
        d = 0
        while d + 4 <= size:
            result += sum(abs(query[k] - point[k]) for k in range(d, d + 4))
            d += 4
            if worst_dist > 0 and result > worst_dist:
                return result
        result += sum(abs(q - p) for q, p in zip(query[d:], point[d:]))
        return result

    def accum_dist(self, a: float, b: float) -> float:
        """Distance along a single coordinate."""
        return abs(a - b)


class L2Distance(_BoundMetric):
    """Squared Euclidean distance, summed four components at a time.

    With a positive ``worst_dist`` the sum stops early, after a group of four,
    once it has grown beyond ``worst_dist``.
    """

    def __call__(self, a, b: int, worst_dist: float = -1) -> float:
        query, point = self._pair(a, b)
        size = len(query)
        result = 0.0
        d = 0
        while d + 4 <= size:
            result += sum((query[k] - point[k]) ** 2 for k in range(d, d + 4))
            d += 4
            if worst_dist > 0 and result > worst_dist:
                return result
        result += sum((q - p) ** 2 for q, p in zip(query[d:], point[d:]))
        return result

    def accum_dist(self, a: float, b: float) -> float:
        """Squared distance along a single coordinate."""
        return (a - b) * (a - b)


class L2SimpleDistance(_BoundMetric):
    """Squared Euclidean distance for low-dimensional points; never stops early."""

    def __call__(self, a, b: int, worst_dist: float = -1) -> float:
        query, point = self._pair(a, b)
        return sum((q - p) ** 2 for q, p in zip(query, point))

    def accum_dist(self, a: float, b: float) -> float:
        """Squared distance along a single coordinate."""
        return (a - b) * (a - b)


@dataclass
class SearchParams:
    """Options for a neighbour search.

    ``checks`` is ignored and kept for compatibility; ``eps`` allows
    approximate neighbours; ``sorted`` orders radius-search results by
    distance.
    """

    checks: int = 32
    eps: float = 0.0
    sorted: bool = True