"""
Smoothing filters for derived combustion signals (HRR, RoPR).

Two strategies with deliberately different edge handling:
  - moving average: window truncated asymmetrically at the boundaries
  - Savitzky-Golay: reflected boundary padding
Invalid parameters are clamped, never rejected.
"""

import math
from typing import Annotated, Literal, Optional, Union

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

# Gauss-Jordan 피벗 허용 하한
SINGULAR_PIVOT = 1e-12


class NoFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unfiltered"] = "unfiltered"


class MovingAverage(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["moving_average"] = "moving_average"
    half_window: int = 2

    @model_validator(mode="before")
    @classmethod
    def clamp_half_window(cls, data):
        if isinstance(data, dict) and "half_window" in data:
            raw = data["half_window"]
            clamped = max(0, int(math.floor(float(raw))))
            if clamped != raw:
                logger.debug(f"Moving-average half window clamped: {raw} -> {clamped}")
            data = {**data, "half_window": clamped}
        return data


class SavitzkyGolay(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["savitzky_golay"] = "savitzky_golay"
    window: int = 7
    order: int = 3

    @model_validator(mode="before")
    @classmethod
    def clamp_window_and_order(cls, data):
        if not isinstance(data, dict):
            return data

        raw_window = data.get("window", 7)
        raw_order = data.get("order", 3)

        # 1. 윈도우: 최소 3, 홀수 강제
        window = max(3, int(math.floor(float(raw_window))))
        if window % 2 == 0:
            window += 1

        # 2. 차수: 최소 1, window 미만
        order = max(1, int(math.floor(float(raw_order))))
        if order >= window:
            order = window - 1

        if (window, order) != (raw_window, raw_order):
            logger.debug(
                f"Savitzky-Golay params clamped: window {raw_window} -> {window}, "
                f"order {raw_order} -> {order}"
            )
        return {**data, "window": window, "order": order}

    @property
    def half(self) -> int:
        return (self.window - 1) // 2


FilterConfig = Annotated[
    Union[NoFilter, MovingAverage, SavitzkyGolay], Field(discriminator="kind")
]

_filter_adapter = TypeAdapter(FilterConfig)


def parse_filter(data) -> FilterConfig:
    """Validate a plain dict (e.g. {"kind": "moving_average", "half_window": 3})."""
    return _filter_adapter.validate_python(data)


def make_filter(
    kind: str, half_window: int = 2, window: int = 7, order: int = 3
) -> FilterConfig:
    if kind == "unfiltered":
        return NoFilter()
    if kind == "moving_average":
        return MovingAverage(half_window=half_window)
    if kind == "savitzky_golay":
        return SavitzkyGolay(window=window, order=order)
    raise ValueError(f"Unknown filter type: {kind}")


def moving_average(values: np.ndarray, half_window: int) -> np.ndarray:
    """
    Centered moving average; the window [max(0, i-h), min(n-1, i+h)]
    shrinks at the boundaries instead of reflecting.
    """
    data = np.asarray(values, dtype=np.float64)
    n = data.size
    if n == 0 or half_window <= 0:
        return data.copy()

    idx = np.arange(n)
    start = np.maximum(0, idx - half_window)
    end = np.minimum(n - 1, idx + half_window)

    csum = np.concatenate(([0.0], np.cumsum(data)))
    return (csum[end + 1] - csum[start]) / (end - start + 1)


def gauss_jordan_solve(lhs: np.ndarray, rhs: np.ndarray) -> Optional[np.ndarray]:
    """
    Solve lhs @ X = rhs by Gauss-Jordan elimination with partial pivoting.

    Returns None when a pivot falls below SINGULAR_PIVOT.
    """
    a = np.array(lhs, dtype=np.float64)
    b = np.array(rhs, dtype=np.float64)
    if b.ndim == 1:
        b = b[:, None]
    n = a.shape[0]
    aug = np.hstack([a, b])

    for col in range(n):
        pivot = col + int(np.argmax(np.abs(aug[col:, col])))
        if abs(aug[pivot, col]) < SINGULAR_PIVOT:
            return None
        if pivot != col:
            aug[[col, pivot]] = aug[[pivot, col]]

        aug[col] /= aug[col, col]
        for r in range(n):
            if r != col:
                aug[r] -= aug[r, col] * aug[col]

    return aug[:, n:]


def savgol_coefficients(window: int, order: int) -> Optional[np.ndarray]:
    """
    Smoothing coefficients (row 0 of (AᵀA)⁻¹Aᵀ) for an already-clamped
    window/order. None if the normal equations are singular.
    """
    half = (window - 1) // 2
    j = np.arange(-half, half + 1, dtype=np.float64)
    A = np.vander(j, order + 1, increasing=True)  # rows [j^0 ... j^p]

    solution = gauss_jordan_solve(A.T @ A, A.T)
    if solution is None:
        return None
    return solution[0]


def reflect_indices(index: np.ndarray, length: int) -> np.ndarray:
    """Mirror out-of-range indices back into [0, length), bouncing off both ends."""
    idx = np.asarray(index, dtype=np.int64).copy()
    if length <= 1:
        return np.zeros_like(idx)
    while np.any((idx < 0) | (idx >= length)):
        idx = np.where(idx < 0, -idx, idx)
        idx = np.where(idx >= length, 2 * length - idx - 2, idx)
    return idx


def savitzky_golay(values: np.ndarray, window: int, order: int) -> np.ndarray:
    data = np.asarray(values, dtype=np.float64)
    n = data.size
    if n == 0:
        return data.copy()

    params = SavitzkyGolay(window=window, order=order)
    coeffs = savgol_coefficients(params.window, params.order)
    if coeffs is None:
        logger.warning(
            f"Singular Savitzky-Golay normal equations (window={params.window}, "
            f"order={params.order}); falling back to moving average"
        )
        return moving_average(data, params.window // 2)

    half = params.half
    padded = data[reflect_indices(np.arange(-half, n + half), n)]
    return np.correlate(padded, coeffs, mode="valid")


def apply_filter(values: np.ndarray, config: Optional[FilterConfig]) -> np.ndarray:
    if config is None or isinstance(config, NoFilter):
        return np.asarray(values, dtype=np.float64).copy()
    if isinstance(config, MovingAverage):
        return moving_average(values, config.half_window)
    if isinstance(config, SavitzkyGolay):
        return savitzky_golay(values, config.window, config.order)
    raise TypeError(f"Unsupported filter config: {type(config).__name__}")
