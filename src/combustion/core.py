"""
Core data structures for combustion analysis.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, model_validator


@dataclass(frozen=True)
class RawSample:
    """단일 측정점 (crank angle [deg], cylinder pressure [bar])"""

    angle: float
    pressure: float


@dataclass(frozen=True)
class PressureTrace:
    """
    압력 트레이스 컨테이너 (struct-of-arrays).
    정렬은 호출자 책임이며, 엔진은 재정렬하지 않습니다.
    """

    angle_deg: np.ndarray
    pressure_bar: np.ndarray

    def __post_init__(self):
        angle = np.asarray(self.angle_deg, dtype=np.float64).ravel()
        pressure = np.asarray(self.pressure_bar, dtype=np.float64).ravel()
        if angle.shape != pressure.shape:
            raise ValueError(
                f"angle/pressure length mismatch: {angle.size} != {pressure.size}"
            )
        object.__setattr__(self, "angle_deg", angle)
        object.__setattr__(self, "pressure_bar", pressure)

    def __len__(self) -> int:
        return int(self.angle_deg.size)

    @classmethod
    def from_samples(
        cls, samples: Iterable[Union[RawSample, Tuple[float, float]]]
    ) -> "PressureTrace":
        angles: List[float] = []
        pressures: List[float] = []
        for s in samples:
            if isinstance(s, RawSample):
                angles.append(s.angle)
                pressures.append(s.pressure)
            else:
                angle, pressure = s
                angles.append(angle)
                pressures.append(pressure)
        return cls(np.array(angles, dtype=np.float64), np.array(pressures, dtype=np.float64))

    def samples(self) -> List[RawSample]:
        return [
            RawSample(float(a), float(p))
            for a, p in zip(self.angle_deg, self.pressure_bar)
        ]


TraceLike = Union[PressureTrace, Sequence[RawSample], Sequence[Tuple[float, float]]]


def as_trace(samples: TraceLike) -> PressureTrace:
    if isinstance(samples, PressureTrace):
        return samples
    return PressureTrace.from_samples(samples)


class AnalysisWindow(BaseModel):
    """Crank-angle span [deg] over which cumulative heat release accumulates."""

    model_config = ConfigDict(frozen=True)

    start: float = -30.0
    end: float = 90.0

    @model_validator(mode="before")
    @classmethod
    def order_bounds(cls, data):
        # start > end 입력은 거부하지 않고 교환
        if isinstance(data, dict):
            start, end = data.get("start"), data.get("end")
            if start is not None and end is not None and start > end:
                data = {**data, "start": end, "end": start}
        return data

    def contains(self, angle: np.ndarray) -> np.ndarray:
        return (angle >= self.start) & (angle <= self.end)


@dataclass(frozen=True)
class DerivedSample:
    angle: float
    pressure: float
    volume_m3: float
    hrr_raw: float
    hrr_filtered: float
    ropr_raw: float
    ropr_filtered: float
    chr: Optional[float]
    mfb: Optional[float]
    log_volume: float
    log_pressure: float


def _optional(value: float) -> Optional[float]:
    return None if math.isnan(value) else float(value)


@dataclass(frozen=True)
class CombustionSignal:
    """
    연소 해석 신호 데이터 컨테이너.
    이 객체 하나만 있으면 어떤 분석기(Metric)든 계산이 가능합니다.
    창(window) 밖의 CHR/MFB는 NaN으로 저장됩니다.
    """

    angle_deg: np.ndarray  # shift 적용된 크랭크 각도 (deg)
    pressure_bar: np.ndarray  # 원본 압력 (bar)
    volume_m3: np.ndarray  # 실린더 체적 (m^3)
    dvdtheta_m3: np.ndarray  # dV/dθ (m^3/deg)
    hrr_raw: np.ndarray  # 열발생률 (J/deg)
    hrr_filtered: np.ndarray
    ropr_raw: np.ndarray  # 압력상승률 (bar/deg)
    ropr_filtered: np.ndarray
    chr_j: np.ndarray  # 누적 열발생량 (J), NaN outside window
    mfb: np.ndarray  # 연소질량분율 (-), NaN outside window
    log_volume: np.ndarray  # log10(V [cc])
    log_pressure: np.ndarray  # log10(P [Pa])
    work_j: float  # 전체 사이클 일 (J)
    swept_volume_m3: float
    peak_pressure_bar: float
    peak_pressure_angle: float

    def __len__(self) -> int:
        return int(self.angle_deg.size)

    def samples(self) -> List[DerivedSample]:
        return [
            DerivedSample(
                angle=float(self.angle_deg[i]),
                pressure=float(self.pressure_bar[i]),
                volume_m3=float(self.volume_m3[i]),
                hrr_raw=float(self.hrr_raw[i]),
                hrr_filtered=float(self.hrr_filtered[i]),
                ropr_raw=float(self.ropr_raw[i]),
                ropr_filtered=float(self.ropr_filtered[i]),
                chr=_optional(self.chr_j[i]),
                mfb=_optional(self.mfb[i]),
                log_volume=float(self.log_volume[i]),
                log_pressure=float(self.log_pressure[i]),
            )
            for i in range(len(self))
        ]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "angle": self.angle_deg,
                "pressure": self.pressure_bar,
                "volume_m3": self.volume_m3,
                "hrr_raw": self.hrr_raw,
                "hrr_filtered": self.hrr_filtered,
                "ropr_raw": self.ropr_raw,
                "ropr_filtered": self.ropr_filtered,
                "chr": self.chr_j,
                "mfb": self.mfb,
                "log_volume": self.log_volume,
                "log_pressure": self.log_pressure,
            }
        )


class CombustionMetrics(BaseModel):
    """
    Scalar combustion metrics, already passed through the display rounding.
    """

    model_config = ConfigDict(frozen=True)

    peak_pressure: float = 0.0
    peak_pressure_angle: float = 0.0
    peak_hrr: float = 0.0
    peak_hrr_angle: float = 0.0
    peak_ropr: float = 0.0
    peak_ropr_angle: float = 0.0
    imep: float = 0.0
    ca05: Optional[float] = None
    ca10: Optional[float] = None
    ca50: Optional[float] = None
    ca90: Optional[float] = None
    burn_duration: Optional[float] = None


@dataclass(frozen=True)
class AnalysisResult:
    signal: CombustionSignal
    metrics: CombustionMetrics

    @property
    def series(self) -> List[DerivedSample]:
        return self.signal.samples()
