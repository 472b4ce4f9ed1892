"""
Case bookkeeping: one trace analysed at several TDC shifts.

Every case caches its own AnalysisResult. Changing any shared parameter
recomputes all cases from scratch; nothing is updated incrementally.
"""

import itertools
from dataclasses import dataclass
from typing import Iterator, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from combustion.config import settings
from combustion.core import AnalysisResult, AnalysisWindow, PressureTrace
from combustion.filters import FilterConfig
from combustion.geometry import EngineGeometry
from combustion.pipeline import analyze

CASE_COLORS = (
    "#800000",
    "#21409A",
    "#16a34a",
    "#9333ea",
    "#ea580c",
    "#0891b2",
    "#db2777",
    "#4f46e5",
)


def case_color(index: int) -> str:
    return CASE_COLORS[index % len(CASE_COLORS)]


class AnalysisParameters(BaseModel):
    """Parameters shared by every case of a CaseBook."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    geometry: EngineGeometry = Field(default_factory=settings.default_geometry)
    gamma: float = settings.GAMMA
    filter_config: FilterConfig = Field(default_factory=settings.default_filter)
    window: AnalysisWindow = Field(default_factory=settings.default_window)


@dataclass
class AnalysisCase:
    case_id: int
    shift_deg: float
    color: str
    result: AnalysisResult
    visible: bool = True

    @property
    def label(self) -> str:
        return f"{self.shift_deg:+g} deg"


class CaseBook:
    """
    트레이스 하나에 대한 shift 케이스 목록.
    파라미터 변경 시 모든 케이스를 독립적으로 재계산합니다.
    """

    def __init__(
        self,
        trace: Optional[PressureTrace] = None,
        parameters: Optional[AnalysisParameters] = None,
    ):
        self.trace = trace
        self.parameters = parameters or AnalysisParameters()
        self._cases: List[AnalysisCase] = []
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._cases)

    def __iter__(self) -> Iterator[AnalysisCase]:
        return iter(self._cases)

    @property
    def cases(self) -> List[AnalysisCase]:
        return list(self._cases)

    def visible_cases(self) -> List[AnalysisCase]:
        return [c for c in self._cases if c.visible]

    def load_trace(self, trace: PressureTrace):
        """새 트레이스 로드 -> 기존 케이스 초기화"""
        self.trace = trace
        self._cases.clear()

    def _compute(self, shift_deg: float) -> AnalysisResult:
        p = self.parameters
        return analyze(
            self.trace,
            p.geometry,
            shift_deg=shift_deg,
            gamma=p.gamma,
            filter_config=p.filter_config,
            window=p.window,
        )

    def add_case(self, shift_deg: float) -> AnalysisCase:
        if self.trace is None:
            raise ValueError("No pressure trace loaded; call load_trace() first")

        case = AnalysisCase(
            case_id=next(self._ids),
            shift_deg=float(shift_deg),
            color=case_color(len(self._cases)),
            result=self._compute(float(shift_deg)),
        )
        self._cases.append(case)
        logger.info(f"Added case #{case.case_id} (shift {case.label})")
        return case

    def get(self, case_id: int) -> AnalysisCase:
        for case in self._cases:
            if case.case_id == case_id:
                return case
        raise KeyError(case_id)

    def remove_case(self, case_id: int) -> AnalysisCase:
        case = self.get(case_id)
        self._cases.remove(case)
        return case

    def toggle_visibility(self, case_id: int) -> bool:
        case = self.get(case_id)
        case.visible = not case.visible
        return case.visible

    def update_parameters(self, **changes) -> None:
        """
        Replace shared parameters (geometry, gamma, filter_config, window)
        and recompute every case.
        """
        self.parameters = AnalysisParameters(**{**dict(self.parameters), **changes})
        for case in self._cases:
            case.result = self._compute(case.shift_deg)
        logger.debug(f"Recomputed {len(self._cases)} cases after update: {sorted(changes)}")
