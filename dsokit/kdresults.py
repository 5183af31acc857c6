"""Result sets that collect neighbours during a k-d tree search."""

from __future__ import annotations

import math


class KNNResultSet:
    """Keeps the ``capacity`` closest points seen so far, sorted by distance.

    A point whose distance equals one already held goes after it.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = int(capacity)
        self._dists: list[float] = [math.inf] * self.capacity
        self._indices: list[int] = [0] * self.capacity
        self._count = 0

    def size(self) -> int:
        """Return how many points are held."""
        return self._count

    def full(self) -> bool:
        """Return whether ``capacity`` points are held."""
        return self._count == self.capacity

    def add_point(self, dist: float, index: int) -> None:
        """Insert a point, dropping the farthest one if the set is full."""
        i = self._count
        while i > 0 and self._dists[i - 1] > dist:
            if i < self.capacity:
                self._dists[i] = self._dists[i - 1]
                self._indices[i] = self._indices[i - 1]
            i -= 1
        if i < self.capacity:
            self._dists[i] = dist
            self._indices[i] = index
        if self._count < self.capacity:
            self._count += 1

    def worst_dist(self) -> float:
        """Return the distance a point must beat to enter; infinite until full."""
        if self.capacity == 0:
            return math.inf
        return self._dists[self.capacity - 1]

    def results(self) -> list[tuple[int, float]]:
        """Return the held points as (index, distance) pairs, nearest first."""
        return list(zip(self._indices[: self._count], self._dists[: self._count]))


class RadiusResultSet:
    """Collects every point closer than ``radius``, in the order found."""

    def __init__(self, radius: float) -> None:
        self.radius = radius
        self.indices_dists: list[tuple[int, float]] = []

    def size(self) -> int:
        """Return how many points are held."""
        return len(self.indices_dists)

    def full(self) -> bool:
        """A radius set never limits the search, so it is always full."""
        return True

    def add_point(self, dist: float, index: int) -> None:
        """Keep the point when its distance is strictly below the radius."""
        if dist < self.radius:
            self.indices_dists.append((index, dist))

    def worst_dist(self) -> float:
        """Return the search radius."""
        return self.radius

    def set_radius_and_clear(self, r: float) -> None:
        """Drop all points and set a new radius."""
        self.radius = r
        self.indices_dists.clear()

    def worst_item(self) -> tuple[int, float]:
        """Return the largest (index, distance) pair held, compared as tuples."""
        if not self.indices_dists:
            raise LookupError("worst_item() called on an empty result set")
        return max(self.indices_dists)