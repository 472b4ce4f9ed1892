"""
Tabular export of analysis cases (per-case series sheets, summary table).
"""

from pathlib import Path
from typing import Iterable, Union

import pandas as pd
from loguru import logger

from combustion.cases import AnalysisCase
from combustion.core import AnalysisResult

# Excel 시트 이름 최대 길이
SHEET_NAME_LIMIT = 31


def series_frame(result: AnalysisResult) -> pd.DataFrame:
    sig = result.signal
    return pd.DataFrame(
        {
            "Crank Angle (deg)": sig.angle_deg,
            "Pressure (bar)": sig.pressure_bar,
            "Volume (m3)": sig.volume_m3,
            "HRR (J/deg)": sig.hrr_raw,
            "HRR filtered (J/deg)": sig.hrr_filtered,
            "RoPR (bar/deg)": sig.ropr_raw,
            "RoPR filtered (bar/deg)": sig.ropr_filtered,
            "CHR (J)": sig.chr_j,
            "MFB (-)": sig.mfb,
        }
    )


def summary_frame(cases: Iterable[AnalysisCase]) -> pd.DataFrame:
    rows = []
    for case in cases:
        m = case.result.metrics
        rows.append(
            {
                "Shift (deg)": case.shift_deg,
                "P_max (bar)": m.peak_pressure,
                "P_max at (deg)": m.peak_pressure_angle,
                "HRR_max (J/deg)": m.peak_hrr,
                "HRR_max at (deg)": m.peak_hrr_angle,
                "RoPR_max (bar/deg)": m.peak_ropr,
                "RoPR_max at (deg)": m.peak_ropr_angle,
                "IMEP (bar)": m.imep,
                "CA05 (deg)": m.ca05,
                "CA10 (deg)": m.ca10,
                "CA50 (deg)": m.ca50,
                "CA90 (deg)": m.ca90,
                "Burn Duration (deg)": m.burn_duration,
            }
        )
    return pd.DataFrame(rows)


def sheet_name(case: AnalysisCase) -> str:
    return f"Shift {case.shift_deg:g} deg"[:SHEET_NAME_LIMIT]


def export_series(cases: Iterable[AnalysisCase], path: Union[str, Path]) -> Path:
    """One sheet per case; CHR/MFB cells are empty outside the window."""
    path = Path(path)
    cases = list(cases)
    if not cases:
        raise ValueError("No cases to export")

    used = set()
    with pd.ExcelWriter(path) as writer:
        for case in cases:
            name = sheet_name(case)
            # 동일 shift 케이스 -> 시트 이름 충돌 방지
            if name in used:
                name = f"{name[:SHEET_NAME_LIMIT - 5]} #{case.case_id}"
            used.add(name)
            series_frame(case.result).to_excel(writer, sheet_name=name, index=False)

    logger.info(f"Exported {len(cases)} case series to {path}")
    return path


def export_summary(cases: Iterable[AnalysisCase], path: Union[str, Path]) -> Path:
    return write_summary(summary_frame(cases), path)


def write_summary(df: pd.DataFrame, path: Union[str, Path]) -> Path:
    """.csv -> CSV, anything else -> single-sheet Excel workbook."""
    path = Path(path)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        df.to_excel(path, sheet_name="Summary_Results", index=False)
    logger.info(f"Exported summary of {len(df)} cases to {path}")
    return path
