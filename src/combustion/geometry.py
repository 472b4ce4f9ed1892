"""
Slider-crank kinematics: crank angle -> instantaneous cylinder volume.
"""

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from combustion.errors import InvalidGeometryError

ArrayLike = Union[float, np.ndarray]


@dataclass(frozen=True)
class EngineGeometry:
    """
    엔진 형상 파라미터.
    rc <= 1 또는 0 이하 치수는 생성 시점에 거부합니다 (rc-1, a 로 나누기 때문).
    """

    compression_ratio: float
    rod_length_mm: float
    swept_volume_cc: float
    stroke_mm: float

    def __post_init__(self):
        for name in ("compression_ratio", "rod_length_mm", "swept_volume_cc", "stroke_mm"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError) as e:
                raise InvalidGeometryError(f"{name} must be a number, got {value!r}") from e
            if not math.isfinite(value) or value <= 0:
                raise InvalidGeometryError(f"{name} must be a positive finite number, got {value}")
            object.__setattr__(self, name, value)

        if self.compression_ratio <= 1:
            raise InvalidGeometryError(
                f"compression_ratio must be > 1, got {self.compression_ratio}"
            )

    @property
    def swept_volume_m3(self) -> float:
        return self.swept_volume_cc * 1e-6

    @property
    def clearance_volume_m3(self) -> float:
        return self.swept_volume_m3 / (self.compression_ratio - 1)

    @property
    def crank_radius_mm(self) -> float:
        return self.stroke_mm / 2.0

    @property
    def rod_ratio(self) -> float:
        """Connecting-rod length over crank radius."""
        return self.rod_length_mm / self.crank_radius_mm


def cylinder_volume(theta_deg: ArrayLike, geometry: EngineGeometry) -> ArrayLike:
    """
    Cylinder volume [m^3] at crank angle theta (deg, TDC = 0).

    V = Vc + Vs/2 * (1 - cos θ + R - sqrt(max(0, R² - sin² θ)))

    :param theta_deg: scalar or array of crank angles, shift already applied.
    """
    vs = geometry.swept_volume_m3
    vc = geometry.clearance_volume_m3
    r = geometry.rod_ratio

    theta_rad = np.radians(np.asarray(theta_deg, dtype=np.float64))
    # 부동소수점 오차로 인한 음수 루트 방지
    root = np.sqrt(np.maximum(0.0, r**2 - np.sin(theta_rad) ** 2))
    volume = vc + (vs / 2.0) * (1.0 - np.cos(theta_rad) + r - root)

    if np.ndim(volume) == 0:
        return float(volume)
    return volume
