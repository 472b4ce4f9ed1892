"""
Combustion analysis of engine cylinder-pressure traces.
"""

from combustion.core import (
    AnalysisResult,
    AnalysisWindow,
    CombustionMetrics,
    CombustionSignal,
    DerivedSample,
    PressureTrace,
    RawSample,
)
from combustion.errors import (
    CombustionAnalysisError,
    InvalidGammaError,
    InvalidGeometryError,
    TraceFormatError,
)
from combustion.filters import MovingAverage, NoFilter, SavitzkyGolay
from combustion.geometry import EngineGeometry, cylinder_volume
from combustion.pipeline import CombustionAnalysisPipeline, analyze

__version__ = "1.0.0"

__all__ = [
    "AnalysisResult",
    "AnalysisWindow",
    "CombustionMetrics",
    "CombustionSignal",
    "DerivedSample",
    "PressureTrace",
    "RawSample",
    "CombustionAnalysisError",
    "InvalidGammaError",
    "InvalidGeometryError",
    "TraceFormatError",
    "MovingAverage",
    "NoFilter",
    "SavitzkyGolay",
    "EngineGeometry",
    "cylinder_volume",
    "CombustionAnalysisPipeline",
    "analyze",
]
