"""
Base interface for all combustion metrics.
Strategy Pattern implementation.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from combustion.core import CombustionSignal

# 정수 스냅 허용오차
INTEGER_SNAP_TOL = 1e-6


class MetricStrategy(ABC):
    """모든 연소 메트릭의 부모 클래스"""

    # 일부 메트릭은 임계값 등 추가 파라미터가 필요할 수 있음
    def __init__(self, **kwargs):
        self.params = kwargs

    @abstractmethod
    def calculate(self, signal: CombustionSignal) -> Dict[str, Any]:
        """신호를 받아 분석 결과를 딕셔너리로 반환 (full precision)"""
        pass


def format_metric(value: Optional[float]) -> Optional[float]:
    """
    Display rounding: values within 1e-6 of an integer snap to it,
    everything else is rounded (not truncated) to 4 decimals, matching
    JavaScript Number.toFixed(4). None passes through.
    """
    if value is None:
        return None
    if not math.isfinite(value):
        return float(value)
    nearest = round(value)
    if abs(value - nearest) < INTEGER_SNAP_TOL:
        return float(nearest)
    return round(float(value), 4)
