"""
Thermodynamic processing engine (single-zone, first law, ideal gas).
Shift -> Volume -> Derivatives -> HRR / RoPR -> Windowed CHR -> Filtering -> MFB
"""

from typing import Optional

import numpy as np
from loguru import logger
from scipy import integrate

from combustion.core import AnalysisWindow, CombustionSignal, PressureTrace
from combustion.filters import FilterConfig, apply_filter
from combustion.geometry import EngineGeometry, cylinder_volume
from combustion.metrics.phasing import mass_fraction_burned

BAR_TO_PA = 1e5
M3_TO_CC = 1e6

# dθ == 0 (중복 각도) 일 때 대체값
ZERO_STEP_DEG = 0.1


class ThermodynamicProcessor:
    """열역학 해석 전용 클래스"""

    @staticmethod
    def process(
        trace: PressureTrace,
        geometry: EngineGeometry,
        shift_deg: float = 0.0,
        gamma: float = 1.33,
        window: Optional[AnalysisWindow] = None,
        filter_config: Optional[FilterConfig] = None,
    ) -> CombustionSignal:
        """
        Raw Trace -> Thermodynamic Pass -> Filtering -> MFB

        :param shift_deg: TDC 재정렬용 각도 오프셋. 체적/미분 계산 전에 적용됩니다.
        :param gamma: 비열비. 패스 자체에서는 기본값을 강제하지 않습니다.
        """
        window = window or AnalysisWindow()

        # 1. Shift & Geometry
        angle = trace.angle_deg + shift_deg
        pressure = trace.pressure_bar
        volume = cylinder_volume(angle, geometry)

        n = angle.size
        if n == 0:
            empty = np.zeros(0, dtype=np.float64)
            return CombustionSignal(
                angle_deg=angle,
                pressure_bar=pressure,
                volume_m3=empty,
                dvdtheta_m3=empty,
                hrr_raw=empty,
                hrr_filtered=empty,
                ropr_raw=empty,
                ropr_filtered=empty,
                chr_j=empty,
                mfb=empty,
                log_volume=empty,
                log_pressure=empty,
                work_j=0.0,
                swept_volume_m3=geometry.swept_volume_m3,
                peak_pressure_bar=0.0,
                peak_pressure_angle=0.0,
            )

        # 2. 후진 차분 (i=0 은 자기 자신과 비교 -> 0)
        d_theta = np.diff(angle, prepend=angle[0])
        d_theta = np.where(d_theta == 0, ZERO_STEP_DEG, d_theta)
        dv_dtheta = np.diff(volume, prepend=volume[0]) / d_theta
        dp_dtheta_bar = np.diff(pressure, prepend=pressure[0]) / d_theta
        dp_dtheta_pa = dp_dtheta_bar * BAR_TO_PA

        # 3. First law HRR [J/deg]
        p_pa = pressure * BAR_TO_PA
        hrr = (gamma / (gamma - 1)) * p_pa * dv_dtheta + (1 / (gamma - 1)) * volume * dp_dtheta_pa

        # 4. Windowed CHR
        chr_j = ThermodynamicProcessor.windowed_cumulative_heat(angle, hrr * d_theta, window)

        # 5. Work integral (전체 사이클, window 무관)
        work_j = float(integrate.trapezoid(p_pa, volume)) if n > 1 else 0.0

        # 6. Log P - Log V
        v_cc = volume * M3_TO_CC
        with np.errstate(divide="ignore", invalid="ignore"):
            log_volume = np.where(v_cc > 0, np.log10(np.where(v_cc > 0, v_cc, 1.0)), 0.0)
            log_pressure = np.where(p_pa > 0, np.log10(np.where(p_pa > 0, p_pa, 1.0)), 0.0)

        # 7. Raw peak pressure (global, pre-filter)
        peak_idx = int(np.argmax(pressure))

        # 8. Filtering (HRR, RoPR 동일 설정)
        hrr_filtered = apply_filter(hrr, filter_config)
        ropr_filtered = apply_filter(dp_dtheta_bar, filter_config)

        logger.debug(
            f"Thermodynamic pass: n={n}, shift={shift_deg}, gamma={gamma}, "
            f"window=[{window.start}, {window.end}], work={work_j:.3f} J"
        )

        return CombustionSignal(
            angle_deg=angle,
            pressure_bar=pressure,
            volume_m3=volume,
            dvdtheta_m3=dv_dtheta,
            hrr_raw=hrr,
            hrr_filtered=hrr_filtered,
            ropr_raw=dp_dtheta_bar,
            ropr_filtered=ropr_filtered,
            chr_j=chr_j,
            mfb=mass_fraction_burned(chr_j),
            log_volume=log_volume,
            log_pressure=log_pressure,
            work_j=work_j,
            swept_volume_m3=geometry.swept_volume_m3,
            peak_pressure_bar=float(pressure[peak_idx]),
            peak_pressure_angle=float(angle[peak_idx]),
        )

    @staticmethod
    def windowed_cumulative_heat(
        angle: np.ndarray, heat_step: np.ndarray, window: AnalysisWindow
    ) -> np.ndarray:
        """
        Cumulative heat release over the analysis window.

        The accumulator resets to zero at every sample before window.start and
        only adds heat_step (HRR * dθ) for samples inside [start, end]. Samples
        outside the window are NaN.
        """
        before = angle < window.start
        inside = window.contains(angle)

        csum = np.cumsum(np.where(inside, heat_step, 0.0))

        # 마지막 리셋 지점의 누적값을 기준선으로 사용
        idx = np.arange(angle.size)
        last_reset = np.maximum.accumulate(np.where(before, idx, -1))
        baseline = np.where(last_reset >= 0, csum[np.maximum(last_reset, 0)], 0.0)

        return np.where(inside, csum - baseline, np.nan)
