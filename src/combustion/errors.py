"""
Exception hierarchy for the combustion analysis engine.
"""


class CombustionAnalysisError(Exception):
    """Base class for every error raised by this package."""


class InvalidGeometryError(CombustionAnalysisError, ValueError):
    """Engine geometry that would make the volume model produce Inf/NaN."""


class TraceFormatError(CombustionAnalysisError, ValueError):
    """A trace file without two usable numeric columns (angle, pressure)."""


class InvalidGammaError(CombustionAnalysisError, ValueError):
    """Ratio of specific heats equal to 1 or non-finite (γ/(γ-1) undefined)."""
