import io

import numpy as np
import pytest

from dsokit.kdmetrics import L1Distance, L2SimpleDistance, SearchParams
from dsokit.kdresults import KNNResultSet
from dsokit.kdtree import KDTree


@pytest.fixture
def cloud():
    rng = np.random.default_rng(7)
    return rng.random((200, 3))


def _brute(points, query, k):
    d = ((points - query) ** 2).sum(axis=1)
    order = np.argsort(d)[:k]
    return [int(i) for i in order], d[order]


def test_size_and_veclen(cloud):
    tree = KDTree(cloud, 5)
    assert tree.size() == 200
    assert tree.veclen() == 3


def test_knn_matches_brute_force(cloud):
    tree = KDTree(cloud, 4)
    rng = np.random.default_rng(3)
    for query in rng.random((20, 3)):
        found = tree.knn_search(query, 5)
        idx, dist = _brute(cloud, query, 5)
        assert [i for i, _ in found] == idx
        assert [d for _, d in found] == pytest.approx(list(dist))


def test_knn_exact_point():
    points = [[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [3.0, 3.0]]
    tree = KDTree(points, 1)
    found = tree.knn_search([2.0, 2.0], 1)
    assert found == [(2, 0.0)]


def test_knn_more_than_available():
    points = [[0.0, 0.0], [5.0, 5.0]]
    tree = KDTree(points, 10)
    result = KNNResultSet(4)
    assert tree.find_neighbors(result, [0.0, 0.0]) is False
    assert result.size() == 2


def test_radius_search_sorted(cloud):
    tree = KDTree(cloud, 8)
    query = np.array([0.5, 0.5, 0.5])
    radius = 0.05
    found = tree.radius_search(query, radius)
    d = ((cloud - query) ** 2).sum(axis=1)
    assert sorted(i for i, _ in found) == sorted(int(i) for i in np.nonzero(d < radius)[0])
    dists = [dist for _, dist in found]
    assert dists == sorted(dists)


def test_radius_search_unsorted_same_set(cloud):
    tree = KDTree(cloud, 8)
    query = [0.2, 0.7, 0.4]
    a = tree.radius_search(query, 0.1, SearchParams(sorted=False))
    b = tree.radius_search(query, 0.1)
    assert sorted(a) == sorted(b)


def test_empty_tree():
    tree = KDTree(np.zeros((0, 2)))
    assert tree.size() == 0
    assert tree.knn_search([0.0, 0.0], 3) == []


def test_search_after_free_raises(cloud):
    tree = KDTree(cloud)
    tree.free_index()
    with pytest.raises(RuntimeError):
        tree.knn_search([0.1, 0.2, 0.3], 1)


def test_rebuild_after_free(cloud):
    tree = KDTree(cloud)
    before = tree.knn_search([0.3, 0.3, 0.3], 3)
    tree.free_index()
    tree.build_index()
    assert tree.knn_search([0.3, 0.3, 0.3], 3) == before


def test_wrong_query_length(cloud):
    tree = KDTree(cloud)
    with pytest.raises(ValueError):
        tree.knn_search([0.1, 0.2], 1)


def test_invalid_construction():
    with pytest.raises(ValueError):
        KDTree([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        KDTree([[1.0, 2.0]], 0)


def test_l1_metric(cloud):
    tree = KDTree(cloud, 6, L1Distance)
    query = np.array([0.4, 0.1, 0.9])
    found = tree.knn_search(query, 3)
    d = np.abs(cloud - query).sum(axis=1)
    assert [i for i, _ in found] == [int(i) for i in np.argsort(d)[:3]]


def test_l2_simple_metric_matches_l2(cloud):
    a = KDTree(cloud, 6).knn_search([0.6, 0.6, 0.1], 4)
    b = KDTree(cloud, 6, L2SimpleDistance).knn_search([0.6, 0.6, 0.1], 4)
    assert [i for i, _ in a] == [i for i, _ in b]


def test_duplicate_points():
    points = np.ones((30, 2))
    tree = KDTree(points, 2)
    found = tree.knn_search([1.0, 1.0], 30)
    assert sorted(i for i, _ in found) == list(range(30))
    assert all(d == 0.0 for _, d in found)


def test_approximate_search_returns_valid_points(cloud):
    tree = KDTree(cloud, 4)
    query = np.array([0.5, 0.2, 0.8])
    result = KNNResultSet(3)
    assert tree.find_neighbors(result, query, SearchParams(eps=0.5)) is True
    for idx, dist in result.results():
        assert dist == pytest.approx(float(((cloud[idx] - query) ** 2).sum()))


def test_save_load_round_trip(cloud):
    tree = KDTree(cloud, 5)
    buf = io.BytesIO()
    tree.save_index(buf)
    data = buf.getvalue()

    other = KDTree(cloud, 5)
    other.free_index()
    other.load_index(io.BytesIO(data))
    queries = np.random.default_rng(11).random((10, 3))
    for q in queries:
        assert other.knn_search(q, 4) == tree.knn_search(q, 4)

    again = io.BytesIO()
    other.save_index(again)
    assert again.getvalue() == data


def test_load_truncated_stream(cloud):
    tree = KDTree(cloud)
    buf = io.BytesIO()
    tree.save_index(buf)
    truncated = buf.getvalue()[:-5]
    with pytest.raises(EOFError):
        KDTree(cloud).load_index(io.BytesIO(truncated))