"""
Combustion phasing: mass fraction burned and CA05/CA10/CA50/CA90.
"""

from typing import Any, Dict, Optional, Sequence

import numpy as np

from .base import MetricStrategy
from combustion.core import CombustionSignal

DEFAULT_THRESHOLDS = (0.05, 0.10, 0.50, 0.90)


def mass_fraction_burned(chr_j: np.ndarray) -> np.ndarray:
    """
    MFB = CHR / max(CHR in window). NaN (outside window) stays NaN.
    A non-positive maximum is replaced by 1 so the curve is never flipped.
    """
    valid = ~np.isnan(chr_j)
    chr_max = float(np.max(chr_j[valid])) if np.any(valid) else 1.0
    if chr_max <= 0:
        chr_max = 1.0
    return chr_j / chr_max


def crank_angle_at_fraction(
    angle: np.ndarray, mfb: np.ndarray, target: float
) -> Optional[float]:
    """
    첫 번째 교차 구간 (p1.mfb <= target <= p2.mfb) 에서 선형 보간한 각도.
    교차가 없으면 None.
    """
    if mfb.size < 2:
        return None

    m1, m2 = mfb[:-1], mfb[1:]
    valid = ~np.isnan(m1) & ~np.isnan(m2)
    with np.errstate(invalid="ignore"):
        crossing = valid & (m1 <= target) & (m2 >= target)

    hits = np.flatnonzero(crossing)
    if hits.size == 0:
        return None

    i = int(hits[0])
    a1, a2 = float(angle[i]), float(angle[i + 1])
    span = float(m2[i] - m1[i])
    # 평탄 구간 (m1 == m2 == target) 은 앞 점 각도
    if span == 0:
        return a1
    frac = (target - float(m1[i])) / span
    return a1 + frac * (a2 - a1)


class CombustionPhasing(MetricStrategy):
    """
    CA05 / CA10 / CA50 / CA90 and burn duration (CA90 - CA10).

    Optional param ``thresholds``: fractions to report, keys are named
    ``ca{int(100*t):02d}``.
    """

    def calculate(self, sig: CombustionSignal) -> Dict[str, Any]:
        thresholds: Sequence[float] = self.params.get("thresholds", DEFAULT_THRESHOLDS)

        results: Dict[str, Any] = {}
        for t in thresholds:
            key = f"ca{int(round(t * 100)):02d}"
            results[key] = crank_angle_at_fraction(sig.angle_deg, sig.mfb, t)

        ca10, ca90 = results.get("ca10"), results.get("ca90")
        if ca10 is not None and ca90 is not None:
            results["burn_duration"] = ca90 - ca10
        else:
            results["burn_duration"] = None
        return results
