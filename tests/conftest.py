import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from combustion.core import CombustionSignal, PressureTrace
from combustion.geometry import EngineGeometry


@pytest.fixture
def geometry():
    return EngineGeometry(
        compression_ratio=9.9,
        rod_length_mm=94.0,
        swept_volume_cc=97.2,
        stroke_mm=49.5,
    )


def triangular_pulse(peak_bar=40.0, base_bar=1.0, half_width_deg=40.0, step_deg=1.0):
    """-180..180 deg, 삼각 펄스 (0 deg 에서 최대)"""
    angle = np.arange(-180.0, 180.0 + step_deg / 2, step_deg)
    pulse = np.clip(1.0 - np.abs(angle) / half_width_deg, 0.0, None)
    return PressureTrace(angle, base_bar + peak_bar * pulse)


@pytest.fixture
def triangular_trace():
    return triangular_pulse()


def make_signal(angle, mfb=None, hrr=None, ropr=None, pressure=None, work_j=0.0, swept_volume_m3=97.2e-6):
    """Metric 단위 테스트용 최소 신호"""
    angle = np.asarray(angle, dtype=np.float64)
    zeros = np.zeros_like(angle)
    mfb = zeros if mfb is None else np.asarray(mfb, dtype=np.float64)
    hrr = zeros if hrr is None else np.asarray(hrr, dtype=np.float64)
    ropr = zeros if ropr is None else np.asarray(ropr, dtype=np.float64)
    pressure = zeros if pressure is None else np.asarray(pressure, dtype=np.float64)
    peak_idx = int(np.argmax(pressure)) if pressure.size else 0
    return CombustionSignal(
        angle_deg=angle,
        pressure_bar=pressure,
        volume_m3=zeros,
        dvdtheta_m3=zeros,
        hrr_raw=hrr,
        hrr_filtered=hrr,
        ropr_raw=ropr,
        ropr_filtered=ropr,
        chr_j=mfb,
        mfb=mfb,
        log_volume=zeros,
        log_pressure=zeros,
        work_j=work_j,
        swept_volume_m3=swept_volume_m3,
        peak_pressure_bar=float(pressure[peak_idx]) if pressure.size else 0.0,
        peak_pressure_angle=float(angle[peak_idx]) if angle.size else 0.0,
    )
