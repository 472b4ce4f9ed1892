import numpy as np
import pytest
from scipy import signal

from combustion import filters
from combustion.filters import (
    MovingAverage,
    NoFilter,
    SavitzkyGolay,
    apply_filter,
    gauss_jordan_solve,
    make_filter,
    moving_average,
    parse_filter,
    reflect_indices,
    savgol_coefficients,
    savitzky_golay,
)


@pytest.fixture
def noisy():
    rng = np.random.default_rng(7)
    x = np.linspace(0, 4 * np.pi, 200)
    return np.sin(x) * 50 + rng.normal(0, 5, size=x.size)


def test_moving_average_zero_half_window_is_identity(noisy):
    np.testing.assert_array_equal(moving_average(noisy, 0), noisy)


def test_moving_average_truncates_at_boundaries():
    out = moving_average(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 1)
    np.testing.assert_allclose(out, [1.5, 2.0, 3.0, 4.0, 4.5])


def test_moving_average_window_wider_than_signal():
    out = moving_average(np.array([1.0, 2.0, 6.0]), 10)
    np.testing.assert_allclose(out, [3.0, 3.0, 3.0])


def test_moving_average_empty():
    assert moving_average(np.array([]), 3).size == 0


def test_moving_average_half_window_clamped():
    assert MovingAverage(half_window=-4).half_window == 0
    assert MovingAverage(half_window=2.7).half_window == 2


@pytest.mark.parametrize(
    "window,order,expected",
    [
        (7, 3, (7, 3)),
        (4, 2, (5, 2)),
        (1, 1, (3, 1)),
        (5, 9, (5, 4)),
        (9, 0, (9, 1)),
        (6.7, 2, (7, 2)),
    ],
)
def test_savgol_params_clamped(window, order, expected):
    params = SavitzkyGolay(window=window, order=order)
    assert (params.window, params.order) == expected


def test_savgol_coefficients_match_scipy():
    for window, order in [(5, 2), (7, 3), (11, 4), (3, 1), (21, 5)]:
        np.testing.assert_allclose(
            savgol_coefficients(window, order), signal.savgol_coeffs(window, order), atol=1e-10
        )


def test_savgol_matches_scipy_mirror_mode(noisy):
    out = savitzky_golay(noisy, 9, 3)
    expected = signal.savgol_filter(noisy, 9, 3, mode="mirror")
    np.testing.assert_allclose(out, expected, atol=1e-8)


def test_savgol_window3_order1_is_three_point_average(noisy):
    sg = savitzky_golay(noisy, 3, 1)
    ma = moving_average(noisy, 1)
    np.testing.assert_allclose(sg[1:-1], ma[1:-1], atol=1e-10)
    # 경계: reflect -> (x1 + x0 + x1) / 3
    assert sg[0] == pytest.approx((2 * noisy[1] + noisy[0]) / 3)


def test_savgol_preserves_polynomial_of_its_order():
    x = np.arange(50, dtype=float)
    poly = 0.02 * x**3 - x**2 + 3 * x - 7
    out = savitzky_golay(poly, 7, 3)
    np.testing.assert_allclose(out[3:-3], poly[3:-3], atol=1e-7)


def test_savgol_single_sample():
    np.testing.assert_allclose(savitzky_golay(np.array([4.2]), 7, 3), [4.2])


def test_savgol_signal_shorter_than_window():
    data = np.array([1.0, 3.0, 2.0])
    out = savitzky_golay(data, 9, 2)
    assert out.shape == data.shape
    assert np.all(np.isfinite(out))


def test_savgol_singular_falls_back_to_moving_average(monkeypatch, noisy):
    # 모든 피벗이 허용 하한 미만 -> Gauss-Jordan 이 실제로 특이 행렬로 판정
    monkeypatch.setattr(filters, "SINGULAR_PIVOT", 1e300)
    assert savgol_coefficients(7, 3) is None
    out = savitzky_golay(noisy, 7, 3)
    np.testing.assert_allclose(out, moving_average(noisy, 3))


def test_reflect_indices_bounce_off_both_ends():
    np.testing.assert_array_equal(reflect_indices(np.array([-2, -1, 0, 4, 5, 6]), 5), [2, 1, 0, 4, 3, 2])
    # 여러 번 반사
    np.testing.assert_array_equal(reflect_indices(np.array([-7, 9]), 3), [1, 1])
    np.testing.assert_array_equal(reflect_indices(np.array([-3, 0, 3]), 1), [0, 0, 0])


def test_gauss_jordan_solves_with_pivoting():
    lhs = np.array([[0.0, 2.0, 1.0], [1.0, 1.0, 0.0], [3.0, 0.0, 1.0]])
    rhs = np.array([3.0, 2.0, 4.0])
    x = gauss_jordan_solve(lhs, rhs)
    np.testing.assert_allclose(x[:, 0], np.linalg.solve(lhs, rhs))


def test_gauss_jordan_singular_returns_none():
    assert gauss_jordan_solve(np.array([[1.0, 2.0], [2.0, 4.0]]), np.eye(2)) is None


def test_apply_filter_dispatch(noisy):
    np.testing.assert_array_equal(apply_filter(noisy, None), noisy)
    np.testing.assert_array_equal(apply_filter(noisy, NoFilter()), noisy)
    np.testing.assert_allclose(apply_filter(noisy, MovingAverage(half_window=2)), moving_average(noisy, 2))
    np.testing.assert_allclose(
        apply_filter(noisy, SavitzkyGolay(window=7, order=3)), savitzky_golay(noisy, 7, 3)
    )


def test_apply_filter_returns_copy(noisy):
    out = apply_filter(noisy, NoFilter())
    out[0] = 1e9
    assert noisy[0] != 1e9


def test_parse_and_make_filter():
    assert isinstance(parse_filter({"kind": "savitzky_golay", "window": 8}), SavitzkyGolay)
    assert parse_filter({"kind": "savitzky_golay", "window": 8}).window == 9
    assert parse_filter({"kind": "moving_average", "half_window": 3}).half_window == 3
    assert isinstance(make_filter("unfiltered"), NoFilter)
    with pytest.raises(ValueError):
        make_filter("butterworth")
