"""
Combustion Analysis Pipeline Manager.
One call = one trace + one parameter set; no state survives between calls.
"""

import math
from typing import Any, Dict, List, Optional

from loguru import logger

from combustion.config import settings
from combustion.core import AnalysisResult, AnalysisWindow, CombustionMetrics, TraceLike, as_trace
from combustion.errors import InvalidGammaError
from combustion.filters import FilterConfig
from combustion.geometry import EngineGeometry
from combustion.metrics import (
    CombustionPhasing,
    IndicatedMeanEffectivePressure,
    MetricStrategy,
    PeakHeatRelease,
    PeakPressure,
    PeakPressureRise,
    format_metric,
)
from combustion.processing import ThermodynamicProcessor


class CombustionAnalysisPipeline:
    def __init__(self):
        self.metrics: List[MetricStrategy] = []

    def add_metric(self, metric: MetricStrategy):
        self.metrics.append(metric)

    @classmethod
    def default(cls) -> "CombustionAnalysisPipeline":
        pipeline = cls()
        pipeline.add_metric(PeakPressure())
        pipeline.add_metric(PeakHeatRelease())
        pipeline.add_metric(PeakPressureRise())
        pipeline.add_metric(IndicatedMeanEffectivePressure())
        pipeline.add_metric(CombustionPhasing())
        return pipeline

    def run(
        self,
        samples: TraceLike,
        geometry: EngineGeometry,
        shift_deg: float = 0.0,
        gamma: float = 1.33,
        filter_config: Optional[FilterConfig] = None,
        window: Optional[AnalysisWindow] = None,
    ) -> AnalysisResult:
        """
        트레이스를 받아 열역학 처리 후 등록된 메트릭을 계산합니다.
        메트릭은 전체 정밀도로 계산한 뒤 반환 직전에만 표시용 반올림을 적용합니다.
        """
        if not math.isfinite(gamma) or gamma == 1:
            raise InvalidGammaError(f"gamma must be finite and != 1, got {gamma}")

        trace = as_trace(samples)
        if len(trace) == 0:
            logger.warning("Empty pressure trace; returning zeroed metrics")

        # 1. 열역학 처리 (Thermodynamic Pass + Filter Bank)
        signal = ThermodynamicProcessor.process(
            trace,
            geometry,
            shift_deg=shift_deg,
            gamma=gamma,
            window=window,
            filter_config=filter_config,
        )

        # 2. 메트릭 계산 (Metric Calculation)
        results: Dict[str, Any] = {}
        for metric in self.metrics:
            results.update(metric.calculate(signal))

        metrics = CombustionMetrics(**{k: format_metric(v) for k, v in results.items()})
        logger.debug(
            f"Analysis done: shift={shift_deg}, P_max={metrics.peak_pressure} bar "
            f"@ {metrics.peak_pressure_angle}, IMEP={metrics.imep} bar, CA50={metrics.ca50}"
        )
        return AnalysisResult(signal=signal, metrics=metrics)


def analyze(
    samples: TraceLike,
    geometry: Optional[EngineGeometry] = None,
    shift_deg: float = 0.0,
    gamma: Optional[float] = None,
    filter_config: Optional[FilterConfig] = None,
    window: Optional[AnalysisWindow] = None,
) -> AnalysisResult:
    """
    Run the full combustion analysis on one trace.

    Omitted geometry, gamma, filter and window fall back to ``settings``.
    Pass ``NoFilter()`` explicitly for unfiltered HRR/RoPR.
    """
    return CombustionAnalysisPipeline.default().run(
        samples,
        geometry if geometry is not None else settings.default_geometry(),
        shift_deg=shift_deg,
        gamma=gamma if gamma is not None else settings.GAMMA,
        filter_config=filter_config if filter_config is not None else settings.default_filter(),
        window=window if window is not None else settings.default_window(),
    )
