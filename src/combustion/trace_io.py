"""
Pressure Trace Loading Module.
Delimited text / Excel / NI TDMS -> PressureTrace (angle [deg], pressure [bar]).

Only the first two numeric columns are used. Non-numeric rows (headers,
units, comments) are skipped, and rows are sorted by crank angle.
"""

import re
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import numpy as np
import pandas as pd
from loguru import logger
from nptdms import TdmsFile
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from combustion.core import PressureTrace
from combustion.errors import TraceFormatError

TEXT_SUFFIXES = {".csv", ".txt", ".dat"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
TDMS_SUFFIXES = {".tdms"}

# 쉼표, 세미콜론, 탭 (앞뒤 공백 포함) 또는 연속 공백
FIELD_SEPARATOR = re.compile(r"\s*[,;\t]\s*|\s+")


def read_trace(
    path: Union[str, Path],
    angle_channel: Optional[str] = None,
    pressure_channel: Optional[str] = None,
) -> PressureTrace:
    """
    Load a crank-angle / pressure trace.

    :param angle_channel: TDMS 전용. 채널 이름으로 각도 채널 지정.
    :param pressure_channel: TDMS 전용. 채널 이름으로 압력 채널 지정.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Trace file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in TDMS_SUFFIXES:
        angle, pressure = _read_tdms(path, angle_channel, pressure_channel)
        frame = pd.DataFrame({0: angle, 1: pressure})
    elif suffix in EXCEL_SUFFIXES:
        frame = _read_excel(path)
    elif suffix in TEXT_SUFFIXES:
        frame = _read_delimited(path)
    else:
        raise TraceFormatError(f"Unsupported trace file type: '{path.suffix}'")

    trace = frame_to_trace(frame, source=str(path))
    logger.info(
        f"Loaded trace {path.name}: {len(trace)} samples, "
        f"{trace.angle_deg[0]:.1f}..{trace.angle_deg[-1]:.1f} deg"
    )
    return trace


def frame_to_trace(frame: pd.DataFrame, source: str = "<frame>") -> PressureTrace:
    if frame.shape[1] < 2:
        raise TraceFormatError(f"{source}: need at least two columns (angle, pressure)")

    # 1. 앞의 두 열만 숫자로 변환 (실패 -> NaN -> 제거)
    data = frame.iloc[:, :2].apply(pd.to_numeric, errors="coerce")
    n_total = len(data)
    data = data.dropna()
    if data.empty:
        raise TraceFormatError(f"{source}: no numeric (angle, pressure) rows found")
    if len(data) < n_total:
        logger.debug(f"{source}: skipped {n_total - len(data)} non-numeric rows")

    # 2. 각도 기준 정렬 (stable)
    data = data.sort_values(by=data.columns[0], kind="mergesort")
    return PressureTrace(
        data.iloc[:, 0].to_numpy(dtype=np.float64),
        data.iloc[:, 1].to_numpy(dtype=np.float64),
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_fixed(0.1),
    retry=retry_if_exception_type(OSError),
    reraise=True,
)
def _read_delimited(path: Path) -> pd.DataFrame:
    # 행 단위 분할: 열 개수/구분자를 첫 줄에서 추정하지 않음 (제목줄, 정렬된 공백 .dat 허용)
    rows = []
    with open(path, encoding="utf-8-sig", errors="replace") as f:
        for line in f:
            fields = FIELD_SEPARATOR.split(line.strip())
            rows.append((fields + [None, None])[:2])
    return pd.DataFrame(rows)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_fixed(0.1),
    retry=retry_if_exception_type(OSError),
    reraise=True,
)
def _read_excel(path: Path) -> pd.DataFrame:
    return pd.read_excel(path, header=None, sheet_name=0)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_fixed(0.1),
    retry=retry_if_exception_type(OSError),
    reraise=True,
)
def _read_tdms(
    path: Path, angle_channel: Optional[str], pressure_channel: Optional[str]
) -> Tuple[np.ndarray, np.ndarray]:
    tdms_file = TdmsFile.read(str(path))

    if angle_channel or pressure_channel:
        if not (angle_channel and pressure_channel):
            raise TraceFormatError("Both angle_channel and pressure_channel are required")
        angle = _find_channel_by_name(tdms_file, angle_channel)
        pressure = _find_channel_by_name(tdms_file, pressure_channel)
        if angle is None or pressure is None:
            missing = angle_channel if angle is None else pressure_channel
            raise TraceFormatError(f"{path.name}: channel '{missing}' not found")
    else:
        angle, pressure = _first_channel_pair(tdms_file)
        if angle is None:
            raise TraceFormatError(f"{path.name}: no group with two channels")
        logger.debug(f"{path.name}: using channels '{angle.name}', '{pressure.name}'")

    return np.asarray(angle[:], dtype=np.float64), np.asarray(pressure[:], dtype=np.float64)


def _find_channel_by_name(tdms_file: TdmsFile, channel_name: str) -> Optional[Any]:
    """Finds a TDMS channel by its exact name."""
    for group in tdms_file.groups():
        if channel_name in group:
            return group[channel_name]
    logger.warning(f"Channel '{channel_name}' not found in any group.")
    return None


def _first_channel_pair(tdms_file: TdmsFile) -> Tuple[Optional[Any], Optional[Any]]:
    for group in tdms_file.groups():
        channels = group.channels()
        if len(channels) >= 2:
            return channels[0], channels[1]
    return None, None
