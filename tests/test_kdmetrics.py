import pytest

from dsokit.kdmetrics import L1Distance, L2Distance, L2SimpleDistance, SearchParams

POINTS = [
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    [1.0, -2.0, 3.0, 0.5, -1.5, 2.0],
    [4.0, 4.0, 4.0, 4.0, 4.0, 4.0],
]


def test_search_params_defaults():
    params = SearchParams()
    assert params.checks == 32
    assert params.eps == 0
    assert params.sorted is True


def test_l1_and_l2_small_example():
    pts = [[0.0, 0.0], [3.0, 4.0]]
    assert L1Distance(pts)([0.0, 0.0], 1) == pytest.approx(7.0)
    assert L2Distance(pts)([0.0, 0.0], 1) == pytest.approx(25.0)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance, L2SimpleDistance])
def test_distance_to_itself_is_zero(metric_cls):
    metric = metric_cls(POINTS)
    for idx, point in enumerate(POINTS):
        assert metric(point, idx) == 0.0


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance, L2SimpleDistance])
def test_distance_is_sum_of_accumulated_components(metric_cls):
    metric = metric_cls(POINTS)
    query = [0.5, 1.0, -1.0, 2.0, 0.0, 3.5]
    for idx, point in enumerate(POINTS):
        expected = sum(metric.accum_dist(q, p) for q, p in zip(query, point))
        assert metric(query, idx) == pytest.approx(expected)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance, L2SimpleDistance])
def test_accum_dist_is_symmetric_and_nonnegative(metric_cls):
    metric = metric_cls(POINTS)
    for a, b in [(1.5, -2.0), (0.0, 0.0), (-3.0, 7.25)]:
        assert metric.accum_dist(a, b) == metric.accum_dist(b, a)
        assert metric.accum_dist(a, b) >= 0


def test_l2_simple_matches_l2_without_bound():
    query = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    full = L2Distance(POINTS)
    simple = L2SimpleDistance(POINTS)
    for idx in range(len(POINTS)):
        assert simple(query, idx) == pytest.approx(full(query, idx))


def test_l2_simple_ignores_worst_dist():
    simple = L2SimpleDistance(POINTS)
    query = [10.0, 10.0, 10.0, 10.0, 1.0, 1.0]
    assert simple(query, 0, 1.0) == simple(query, 0)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance])
def test_early_exit_stops_after_first_group(metric_cls):
    metric = metric_cls(POINTS)
    query = [10.0, 10.0, 10.0, 10.0, 1.0, 1.0]
    full = metric(query, 0)
    partial = metric(query, 0, 1.0)
    assert partial > 1.0
    assert partial < full
    first_group = sum(metric.accum_dist(q, 0.0) for q in query[:4])
    assert partial == pytest.approx(first_group)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance])
def test_nonpositive_worst_dist_gives_full_distance(metric_cls):
    metric = metric_cls(POINTS)
    query = [10.0, 10.0, 10.0, 10.0, 1.0, 1.0]
    assert metric(query, 0, 0) == metric(query, 0)
    assert metric(query, 0, -5.0) == metric(query, 0)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance])
def test_large_worst_dist_gives_full_distance(metric_cls):
    metric = metric_cls(POINTS)
    query = [1.0, 1.0, 1.0, 1.0, 1.0, 1.0]
    assert metric(query, 2, 1e9) == metric(query, 2)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance, L2SimpleDistance])
def test_index_out_of_range(metric_cls):
    metric = metric_cls(POINTS)
    with pytest.raises(IndexError):
        metric([0.0] * 6, len(POINTS))
    with pytest.raises(IndexError):
        metric([0.0] * 6, -1)


@pytest.mark.parametrize("metric_cls", [L1Distance, L2Distance, L2SimpleDistance])
def test_dimension_mismatch(metric_cls):
    metric = metric_cls(POINTS)
    with pytest.raises(ValueError):
        metric([0.0, 0.0], 0)


def test_points_must_be_two_dimensional():
    with pytest.raises(ValueError):
        L2Distance([1.0, 2.0, 3.0])