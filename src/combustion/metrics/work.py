"""
Indicated work metrics.
"""

from typing import Any, Dict

from .base import MetricStrategy
from combustion.core import CombustionSignal

PA_TO_BAR = 1e-5


class IndicatedMeanEffectivePressure(MetricStrategy):
    """IMEP = W / Vs, 전체 트레이스의 P-dV 적분 기준 (bar)"""

    def calculate(self, sig: CombustionSignal) -> Dict[str, Any]:
        imep_pa = sig.work_j / sig.swept_volume_m3
        return {"imep": imep_pa * PA_TO_BAR}
