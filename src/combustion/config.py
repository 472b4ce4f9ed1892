# config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

from combustion.core import AnalysisWindow
from combustion.filters import FilterConfig, make_filter
from combustion.geometry import EngineGeometry


class Settings(BaseSettings):
    """
    프로젝트 전역 설정 관리 (Pydantic V2)
    .env 파일에서 환경 변수를 로드하며, 없을 경우 기본값을 사용합니다.
    """

    # Project Info
    PROJECT_NAME: str = "Combustion_Trace"
    VERSION: str = "1.0.0"

    # Engine Geometry (4000 RPM 단기통 기본값)
    COMPRESSION_RATIO: float = 9.9
    ROD_LENGTH_MM: float = 94.0
    SWEPT_VOLUME_CC: float = 97.2
    STROKE_MM: float = 49.5

    # Thermodynamics
    GAMMA: float = 1.33

    # Filter Settings
    FILTER_TYPE: str = "moving_average"
    SMOOTHING_HALF_WINDOW: int = 2
    SG_WINDOW: int = 7
    SG_ORDER: int = 3

    # Combustion Window (deg)
    WINDOW_START: float = -30.0
    WINDOW_END: float = 90.0

    # Logging
    LOG_DIR: str = "./logs"
    LOG_LEVEL: str = "INFO"

    # .env 파일 로드 설정
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def default_geometry(self) -> EngineGeometry:
        return EngineGeometry(
            compression_ratio=self.COMPRESSION_RATIO,
            rod_length_mm=self.ROD_LENGTH_MM,
            swept_volume_cc=self.SWEPT_VOLUME_CC,
            stroke_mm=self.STROKE_MM,
        )

    def default_filter(self) -> FilterConfig:
        return make_filter(
            self.FILTER_TYPE,
            half_window=self.SMOOTHING_HALF_WINDOW,
            window=self.SG_WINDOW,
            order=self.SG_ORDER,
        )

    def default_window(self) -> AnalysisWindow:
        return AnalysisWindow(start=self.WINDOW_START, end=self.WINDOW_END)


# 싱글톤 인스턴스 생성
settings = Settings()
