import numpy as np
import pytest

from combustion import (
    AnalysisWindow,
    CombustionAnalysisPipeline,
    InvalidGammaError,
    MovingAverage,
    NoFilter,
    PressureTrace,
    RawSample,
    SavitzkyGolay,
    analyze,
)
from combustion.metrics import PeakPressure, format_metric

from conftest import triangular_pulse


def test_end_to_end_triangular_pulse(geometry, triangular_trace):
    window = AnalysisWindow(start=-30, end=90)
    res = analyze(triangular_trace, geometry, shift_deg=0.0, gamma=1.33, filter_config=NoFilter(), window=window)

    assert res.metrics.peak_pressure_angle == 0.0
    assert res.metrics.peak_pressure == pytest.approx(41.0)

    series = res.series
    for s in series:
        if s.angle < -30 or s.angle > 90:
            assert s.chr is None and s.mfb is None
        else:
            assert s.chr is not None and s.mfb is not None

    # 압축 측 (-30..0) 에서 MFB 는 강하게 단조 증가.
    # TDC 직후에는 dV/dθ ≈ 0, dP < 0 이므로 HRR < 0 -> 창 전체 단조 증가는 성립하지 않음
    rising = [s.mfb for s in series if -30 <= s.angle <= 0]
    assert all(b > a for a, b in zip(rising, rising[1:]))
    assert max(s.mfb for s in series if s.mfb is not None) == pytest.approx(1.0)

    assert res.metrics.ca10 is not None
    assert res.metrics.ca10 < res.metrics.ca50


def test_analyze_is_deterministic(geometry, triangular_trace):
    kwargs = dict(gamma=1.33, filter_config=SavitzkyGolay(window=7, order=3), window=AnalysisWindow(start=-30, end=90))
    first = analyze(triangular_trace, geometry, 2.0, **kwargs)
    second = analyze(triangular_trace, geometry, 2.0, **kwargs)
    assert first.metrics == second.metrics
    assert first.signal.to_frame().equals(second.signal.to_frame())
    assert first.series == second.series


def test_single_sample_trace(geometry):
    res = analyze([RawSample(0.0, 12.5)], geometry, filter_config=SavitzkyGolay(window=7, order=3))
    assert res.metrics.peak_pressure == 12.5
    assert res.metrics.peak_pressure_angle == 0.0
    for key in ("ca05", "ca10", "ca50", "ca90", "burn_duration"):
        assert getattr(res.metrics, key) is None
    assert len(res.series) == 1


def test_empty_trace_returns_zeroed_result(geometry):
    res = analyze([], geometry)
    assert res.series == []
    m = res.metrics
    assert (m.peak_pressure, m.peak_hrr, m.peak_ropr, m.imep) == (0.0, 0.0, 0.0, 0.0)
    assert m.ca50 is None and m.burn_duration is None


def test_accepts_tuples_and_traces(geometry):
    tuples = [(-1.0, 10.0), (0.0, 20.0), (1.0, 15.0)]
    a = analyze(tuples, geometry, filter_config=NoFilter())
    b = analyze(PressureTrace.from_samples(tuples), geometry, filter_config=NoFilter())
    assert a.metrics == b.metrics


def test_does_not_resort_input(geometry):
    res = analyze([(5.0, 10.0), (0.0, 20.0)], geometry, filter_config=NoFilter())
    np.testing.assert_array_equal(res.signal.angle_deg, [5.0, 0.0])


def test_shift_moves_peak_angle(geometry, triangular_trace):
    res = analyze(triangular_trace, geometry, shift_deg=-4.0, filter_config=NoFilter())
    assert res.metrics.peak_pressure_angle == -4.0


def test_metrics_are_display_rounded(geometry, triangular_trace):
    res = analyze(triangular_trace, geometry, filter_config=MovingAverage(half_window=2))
    for value in res.metrics.model_dump().values():
        if value is not None:
            assert format_metric(value) == value


def test_burn_duration_consistent(geometry, triangular_trace):
    res = analyze(triangular_trace, geometry, filter_config=NoFilter(), window=AnalysisWindow(start=-30, end=90))
    m = res.metrics
    if m.ca10 is not None and m.ca90 is not None:
        assert m.burn_duration == pytest.approx(m.ca90 - m.ca10, abs=2e-4)
    else:
        assert m.burn_duration is None


def test_narrow_window_gives_no_late_phasing(geometry):
    trace = triangular_pulse()
    res = analyze(trace, geometry, filter_config=NoFilter(), window=AnalysisWindow(start=0, end=0))
    assert res.metrics.ca50 is None


def test_gamma_one_rejected(geometry, triangular_trace):
    with pytest.raises(InvalidGammaError):
        analyze(triangular_trace, geometry, gamma=1.0)


def test_imep_of_symmetric_pulse_cancels(geometry, triangular_trace):
    # 대칭 펄스 -> 팽창 일이 압축 일과 거의 상쇄
    res = analyze(triangular_trace, geometry, filter_config=NoFilter())
    assert res.metrics.imep == pytest.approx(0.0, abs=1e-6)


def test_custom_pipeline(geometry, triangular_trace):
    pipeline = CombustionAnalysisPipeline()
    pipeline.add_metric(PeakPressure())
    res = pipeline.run(triangular_trace, geometry, filter_config=NoFilter())
    assert res.metrics.peak_pressure == pytest.approx(41.0)
    assert res.metrics.imep == 0.0


def test_defaults_from_settings(triangular_trace):
    res = analyze(triangular_trace)
    assert res.metrics.peak_pressure == pytest.approx(41.0)
