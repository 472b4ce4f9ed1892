"""
Peak metrics (P_max, HRR_max, RoPR_max) and their crank angles.
"""

from typing import Any, Dict

import numpy as np

from .base import MetricStrategy
from combustion.core import CombustionSignal


def _peak(values: np.ndarray, angle: np.ndarray):
    # argmax -> 동률일 경우 첫 번째 위치
    if values.size == 0:
        return 0.0, 0.0
    idx = int(np.argmax(values))
    return float(values[idx]), float(angle[idx])


class PeakPressure(MetricStrategy):
    """최대 압력 (raw, 필터 미적용, 전 구간)"""

    def calculate(self, sig: CombustionSignal) -> Dict[str, Any]:
        return {
            "peak_pressure": sig.peak_pressure_bar,
            "peak_pressure_angle": sig.peak_pressure_angle,
        }


class PeakHeatRelease(MetricStrategy):
    """최대 열발생률 (filtered HRR)"""

    def calculate(self, sig: CombustionSignal) -> Dict[str, Any]:
        peak, angle = _peak(sig.hrr_filtered, sig.angle_deg)
        return {"peak_hrr": peak, "peak_hrr_angle": angle}


class PeakPressureRise(MetricStrategy):
    """최대 압력상승률 (filtered RoPR)"""

    def calculate(self, sig: CombustionSignal) -> Dict[str, Any]:
        peak, angle = _peak(sig.ropr_filtered, sig.angle_deg)
        return {"peak_ropr": peak, "peak_ropr_angle": angle}
