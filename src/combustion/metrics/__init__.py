from .base import MetricStrategy, format_metric
from .peaks import PeakHeatRelease, PeakPressure, PeakPressureRise
from .phasing import CombustionPhasing, crank_angle_at_fraction, mass_fraction_burned
from .work import IndicatedMeanEffectivePressure

__all__ = [
    "MetricStrategy",
    "format_metric",
    "PeakPressure",
    "PeakHeatRelease",
    "PeakPressureRise",
    "IndicatedMeanEffectivePressure",
    "CombustionPhasing",
    "crank_angle_at_fraction",
    "mass_fraction_burned",
]
