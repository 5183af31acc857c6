"""A k-d tree over a fixed set of points, searched with pluggable metrics.

The tree holds only point indices; the points themselves stay in the array
the tree was built from. A saved index holds no point data, so it must be
loaded into a tree built over the same points.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

import numpy as np

from dsokit.kdmetrics import L2Distance, SearchParams
from dsokit.kdresults import KNNResultSet, RadiusResultSet

_SPLIT_EPS = 0.00001


@dataclass
class _Node:
    """Tree node: a leaf covers vind[left:right], an inner node splits on divfeat."""

    left: int = 0
    right: int = 0
    divfeat: int = 0
    divlow: float = 0.0
    divhigh: float = 0.0
    child1: Optional["_Node"] = None
    child2: Optional["_Node"] = None

    @property
    def is_leaf(self) -> bool:
        return self.child1 is None and self.child2 is None


def _read(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if data is None or len(data) != size:
        raise EOFError("cannot read k-d tree index from stream")
    return struct.unpack(fmt, data)


class KDTree:
    """Index over the rows of an ``(n, dim)`` array for nearest-neighbour search.

    ``metric`` is a metric class from :mod:`dsokit.kdmetrics`, bound here to
    the points, or an already bound metric instance. The index is built on
    construction.
    """

    def __init__(self, points, leaf_max_size: int = 10, metric: Any = L2Distance) -> None:
        if leaf_max_size < 1:
            raise ValueError("leaf_max_size must be at least 1")
        arr = np.asarray(points, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"points must be a 2-D array, got {arr.ndim} dimensions")
        self.points = arr
        self.leaf_max_size = int(leaf_max_size)
        self.distance = metric(arr) if isinstance(metric, type) else metric
        self._dim = arr.shape[1]
        self._size = 0
        self._size_at_index_build = 0
        self._vind: list[int] = []
        self._root: Optional[_Node] = None
        self._root_bbox: list[list[float]] = []
        self._init_vind()
        self.build_index()

    # ----------------------------------------------------------------- building

    def _init_vind(self) -> None:
        self._size = self.points.shape[0]
        self._vind = list(range(self._size))

    def free_index(self) -> None:
        """Drop the built tree."""
        self._root = None
        self._size_at_index_build = 0

    def build_index(self) -> None:
        """Build (or rebuild) the tree over all points."""
        self._init_vind()
        self.free_index()
        self._size_at_index_build = self._size
        if self._size == 0:
            return
        self._root_bbox = self._compute_bounding_box()
        self._root = self._divide_tree(0, self._size, self._root_bbox)

    def size(self) -> int:
        """Return the number of points in the data set."""
        return self._size

    def veclen(self) -> int:
        """Return the dimensionality of the points."""
        return self._dim

    def _compute_bounding_box(self) -> list[list[float]]:
        if self.points.shape[0] == 0:
            raise RuntimeError("bounding box requested but no data points found")
        lows = self.points.min(axis=0)
        highs = self.points.max(axis=0)
        return [[float(lo), float(hi)] for lo, hi in zip(lows, highs)]

    def _get(self, idx: int, component: int) -> float:
        return float(self.points[idx, component])

    def _divide_tree(self, left: int, right: int, bbox: list[list[float]]) -> _Node:
        node = _Node()
        if right - left <= self.leaf_max_size:
            node.left, node.right = left, right
            pts = self.points[self._vind[left:right]]
            for i in range(self._dim):
                bbox[i] = [float(pts[:, i].min()), float(pts[:, i].max())]
            return node

        idx, cutfeat, cutval = self._middle_split(left, right - left, bbox)
        node.divfeat = cutfeat

        left_bbox = [list(iv) for iv in bbox]
        left_bbox[cutfeat][1] = cutval
        node.child1 = self._divide_tree(left, left + idx, left_bbox)

        right_bbox = [list(iv) for iv in bbox]
        right_bbox[cutfeat][0] = cutval
        node.child2 = self._divide_tree(left + idx, right, right_bbox)

        node.divlow = left_bbox[cutfeat][1]
        node.divhigh = right_bbox[cutfeat][0]

        for i in range(self._dim):
            bbox[i] = [
                min(left_bbox[i][0], right_bbox[i][0]),
                max(left_bbox[i][1], right_bbox[i][1]),
            ]
        return node

    def _min_max(self, offset: int, count: int, element: int) -> tuple[float, float]:
        vals = self.points[self._vind[offset : offset + count], element]
        return float(vals.min()), float(vals.max())

    def _middle_split(
        self, offset: int, count: int, bbox: list[list[float]]
    ) -> tuple[int, int, float]:
        max_span = max(high - low for low, high in bbox)
        max_spread = -1.0
        cutfeat = 0
        for i, (low, high) in enumerate(bbox):
            if high - low > (1 - _SPLIT_EPS) * max_span:
                # The spread is measured along the current best feature.
                min_elem, max_elem = self._min_max(offset, count, cutfeat)
                spread = max_elem - min_elem
                if spread > max_spread:
                    cutfeat = i
                    max_spread = spread

        split_val = (bbox[cutfeat][0] + bbox[cutfeat][1]) / 2
        min_elem, max_elem = self._min_max(offset, count, cutfeat)
        if split_val < min_elem:
            cutval = min_elem
        elif split_val > max_elem:
            cutval = max_elem
        else:
            cutval = split_val

        lim1, lim2 = self._plane_split(offset, count, cutfeat, cutval)
        half = count // 2
        if lim1 > half:
            index = lim1
        elif lim2 < half:
            index = lim2
        else:
            index = half
        return index, cutfeat, cutval

    def _plane_split(
        self, offset: int, count: int, cutfeat: int, cutval: float
    ) -> tuple[int, int]:
        """Partition so that values < cutval come first, then == cutval, then >."""
        ind = self._vind

        def value(k: int) -> float:
            return float(self.points[ind[offset + k], cutfeat])

        def swap(a: int, b: int) -> None:
            ind[offset + a], ind[offset + b] = ind[offset + b], ind[offset + a]

        left, right = 0, count - 1
        while True:
            while left <= right and value(left) < cutval:
                left += 1
            while right and left <= right and value(right) >= cutval:
                right -= 1
            if left > right or not right:
                break
            swap(left, right)
            left += 1
            right -= 1
        lim1 = left

        right = count - 1
        while True:
            while left <= right and value(left) <= cutval:
                left += 1
            while right and left <= right and value(right) > cutval:
                right -= 1
            if left > right or not right:
                break
            swap(left, right)
            left += 1
            right -= 1
        return lim1, left

    # ---------------------------------------------------------------- searching

    def _query(self, vec) -> list[float]:
        query = [float(c) for c in np.asarray(vec, dtype=np.float64).ravel()]
        if len(query) != self._dim:
            raise ValueError(
                f"query has {len(query)} components, points have {self._dim}"
            )
        return query

    def find_neighbors(self, result, vec, params: Optional[SearchParams] = None) -> bool:
        """Fill ``result`` with neighbours of ``vec``; return whether it is full."""
        if params is None:
            params = SearchParams()
        query = self._query(vec)
        if self.size() == 0:
            return False
        if self._root is None:
            raise RuntimeError("find_neighbors() called before building the index")
        eps_error = 1 + params.eps
        dists = [0.0] * self._dim
        distsq = self._initial_distances(query, dists)
        self._search_level(result, query, self._root, distsq, dists, eps_error)
        return result.full()

    def knn_search(self, query, k: int) -> list[tuple[int, float]]:
        """Return up to ``k`` nearest points as (index, distance) pairs, nearest first."""
        result = KNNResultSet(k)
        self.find_neighbors(result, query, SearchParams())
        return result.results()

    def radius_search(
        self, query, radius: float, params: Optional[SearchParams] = None
    ) -> list[tuple[int, float]]:
        """Return every point closer than ``radius`` as (index, distance) pairs.

        With ``params.sorted`` (the default) the pairs are ordered by distance.
        """
        if params is None:
            params = SearchParams()
        result = RadiusResultSet(radius)
        self.find_neighbors(result, query, params)
        pairs = list(result.indices_dists)
        if params.sorted:
            pairs.sort(key=lambda pair: pair[1])
        return pairs

    def _initial_distances(self, query: list[float], dists: list[float]) -> float:
        distsq = 0.0
        for i, (low, high) in enumerate(self._root_bbox):
            if query[i] < low:
                dists[i] = self.distance.accum_dist(query[i], low)
                distsq += dists[i]
            if query[i] > high:
                dists[i] = self.distance.accum_dist(query[i], high)
                distsq += dists[i]
        return distsq

    def _search_level(
        self,
        result,
        query: list[float],
        node: _Node,
        mindistsq: float,
        dists: list[float],
        eps_error: float,
    ) -> None:
        if node.is_leaf:
            worst = result.worst_dist()
            for i in range(node.left, node.right):
                index = self._vind[i]
                dist = self.distance(query, index)
                if dist < worst:
                    result.add_point(dist, index)
            return

        idx = node.divfeat
        val = query[idx]
        diff1 = val - node.divlow
        diff2 = val - node.divhigh
        if diff1 + diff2 < 0:
            best, other = node.child1, node.child2
            cut_dist = self.distance.accum_dist(val, node.divhigh)
        else:
            best, other = node.child2, node.child1
            cut_dist = self.distance.accum_dist(val, node.divlow)

        self._search_level(result, query, best, mindistsq, dists, eps_error)

        dst = dists[idx]
        mindistsq = mindistsq + cut_dist - dst
        dists[idx] = cut_dist
        if mindistsq * eps_error <= result.worst_dist():
            self._search_level(result, query, other, mindistsq, dists, eps_error)
        dists[idx] = dst

    # ---------------------------------------------------------- serialisation

    def save_index(self, stream: BinaryIO) -> None:
        """Write the index (not the points) to a binary stream."""
        stream.write(struct.pack("<Qi", self._size, self._dim))
        stream.write(struct.pack("<Q", len(self._root_bbox)))
        for low, high in self._root_bbox:
            stream.write(struct.pack("<dd", low, high))
        stream.write(struct.pack("<Q", self.leaf_max_size))
        stream.write(struct.pack("<Q", len(self._vind)))
        if self._vind:
            stream.write(struct.pack(f"<{len(self._vind)}Q", *self._vind))
        if self._root is not None:
            self._save_tree(stream, self._root)

    def _save_tree(self, stream: BinaryIO, node: _Node) -> None:
        stream.write(struct.pack("<BB", node.child1 is not None, node.child2 is not None))
        if node.is_leaf:
            stream.write(struct.pack("<QQ", node.left, node.right))
        else:
            stream.write(struct.pack("<idd", node.divfeat, node.divlow, node.divhigh))
        if node.child1 is not None:
            self._save_tree(stream, node.child1)
        if node.child2 is not None:
            self._save_tree(stream, node.child2)

    def load_index(self, stream: BinaryIO) -> None:
        """Read an index written by :meth:`save_index` for the same points."""
        self._size, self._dim = _read(stream, "<Qi")
        (nbox,) = _read(stream, "<Q")
        self._root_bbox = [list(_read(stream, "<dd")) for _ in range(nbox)]
        (self.leaf_max_size,) = _read(stream, "<Q")
        (nvind,) = _read(stream, "<Q")
        self._vind = list(_read(stream, f"<{nvind}Q")) if nvind else []
        self._root = self._load_tree(stream)

    def _load_tree(self, stream: BinaryIO) -> _Node:
        has1, has2 = _read(stream, "<BB")
        node = _Node()
        if not has1 and not has2:
            node.left, node.right = _read(stream, "<QQ")
        else:
            node.divfeat, node.divlow, node.divhigh = _read(stream, "<idd")
        if has1:
            node.child1 = self._load_tree(stream)
        if has2:
            node.child2 = self._load_tree(stream)
        return node