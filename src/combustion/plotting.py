"""
Static charts of analysis cases (P-θ, HRR, RoPR, CHR, MFB, P-V, log P - log V).
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from combustion.cases import AnalysisCase
from combustion.core import AnalysisWindow
from combustion.processing import M3_TO_CC

# kind -> (title, x label, y label)
CHART_LABELS = {
    "pressure": ("In-Cylinder Pressure", "Crank Angle (°)", "Pressure (bar)"),
    "hrr": ("Heat Release Rate", "Crank Angle (°)", "HRR (J/deg)"),
    "ropr": ("Rate of Pressure Rise", "Crank Angle (°)", "RoPR (bar/deg)"),
    "chr": ("Cumulative Heat Release", "Crank Angle (°)", "Cum. Heat (J)"),
    "mfb": ("Mass Fraction Burned", "Crank Angle (°)", "MFB (-)"),
    "pv": ("P-V Diagram", "Volume (cc)", "Pressure (bar)"),
    "logpv": ("Log P - Log V Diagram", "Log Volume", "Log Pressure"),
}


def _xy(case: AnalysisCase, kind: str):
    sig = case.result.signal
    if kind == "pressure":
        return sig.angle_deg, sig.pressure_bar
    if kind == "hrr":
        return sig.angle_deg, sig.hrr_filtered
    if kind == "ropr":
        return sig.angle_deg, sig.ropr_filtered
    if kind == "chr":
        return sig.angle_deg, sig.chr_j
    if kind == "mfb":
        return sig.angle_deg, sig.mfb
    if kind == "pv":
        return sig.volume_m3 * M3_TO_CC, sig.pressure_bar
    return sig.log_volume, sig.log_pressure


def plot_cases(
    cases: Iterable[AnalysisCase],
    kind: str = "pressure",
    path: Optional[Union[str, Path]] = None,
    window: Optional[AnalysisWindow] = None,
):
    """
    Draw every visible case on one chart. Saves a PNG when ``path`` is given.
    Returns the matplotlib Figure.
    """
    if kind not in CHART_LABELS:
        raise ValueError(f"Unknown chart kind '{kind}', expected one of {sorted(CHART_LABELS)}")

    title, x_label, y_label = CHART_LABELS[kind]
    visible = [c for c in cases if c.visible]

    fig, ax = plt.subplots(figsize=(10, 6))
    for case in visible:
        x, y = _xy(case, kind)
        # NaN 구간 (window 밖) 은 matplotlib 이 자동으로 끊어서 그림
        ax.plot(x, y, color=case.color, label=f"Shift {case.label}", linewidth=1.2)

    # CHR/MFB 는 계산 창에 x축 고정
    if kind in ("chr", "mfb"):
        if window is not None:
            ax.set_xlim(window.start, window.end)
        elif visible:
            spans = []
            for case in visible:
                x, y = _xy(case, kind)
                spans.append(x[~np.isnan(y)])
            xs = np.concatenate(spans)
            if xs.size > 1 and xs.min() < xs.max():
                ax.set_xlim(xs.min(), xs.max())

    ax.set_title(title)
    ax.set_xlabel(x_label)
    ax.set_ylabel(y_label)
    ax.grid(True)
    if visible:
        ax.legend()

    if path is not None:
        fig.savefig(path, dpi=120, bbox_inches="tight")
    return fig
