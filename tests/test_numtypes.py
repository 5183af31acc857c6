import pytest

from dsokit.numtypes import AffLight


def test_default_is_zero():
    assert AffLight().vec() == (0.0, 0.0)


def test_vec_returns_parameters():
    light = AffLight(0.25, -3.5)
    assert light.vec() == (0.25, -3.5)


def test_same_frame_maps_to_identity():
    g = AffLight(0.7, 12.0)
    a, b = AffLight.from_to_vec_exposure(5.0, 5.0, g, g)
    assert a == pytest.approx(1.0)
    assert b == pytest.approx(0.0)


def test_zero_exposure_treated_as_one():
    g2f = AffLight(0.0, 2.0)
    g2t = AffLight(0.0, 5.0)
    with_zero = AffLight.from_to_vec_exposure(0.0, 4.0, g2f, g2t)
    with_ones = AffLight.from_to_vec_exposure(1.0, 1.0, g2f, g2t)
    assert with_zero == pytest.approx(with_ones)
    assert with_zero == pytest.approx((1.0, 3.0))


def test_exposure_ratio_scales_gain():
    g2f = AffLight(0.0, 2.0)
    g2t = AffLight(0.0, 5.0)
    a, b = AffLight.from_to_vec_exposure(2.0, 4.0, g2f, g2t)
    assert a == pytest.approx(2.0)
    assert b == pytest.approx(1.0)


def test_inverse_mapping_composes_to_identity():
    g2f = AffLight(0.3, 4.0)
    g2t = AffLight(-0.2, 9.0)
    a1, b1 = AffLight.from_to_vec_exposure(3.0, 6.0, g2f, g2t)
    a2, b2 = AffLight.from_to_vec_exposure(6.0, 3.0, g2t, g2f)
    assert a1 * a2 == pytest.approx(1.0)
    value = 17.0
    assert a2 * (a1 * value + b1) + b2 == pytest.approx(value)