from combustion.config import Settings
from combustion.filters import MovingAverage, SavitzkyGolay


def test_defaults():
    s = Settings()
    geo = s.default_geometry()
    assert geo.compression_ratio == 9.9
    assert s.GAMMA == 1.33
    assert s.default_filter() == MovingAverage(half_window=2)
    window = s.default_window()
    assert (window.start, window.end) == (-30.0, 90.0)


def test_environment_override(monkeypatch):
    monkeypatch.setenv("GAMMA", "1.4")
    monkeypatch.setenv("FILTER_TYPE", "savitzky_golay")
    monkeypatch.setenv("SG_WINDOW", "8")
    s = Settings()
    assert s.GAMMA == 1.4
    f = s.default_filter()
    assert isinstance(f, SavitzkyGolay)
    assert f.window == 9
