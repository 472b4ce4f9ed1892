import math

import numpy as np
import pytest

from combustion.errors import InvalidGeometryError
from combustion.geometry import EngineGeometry, cylinder_volume


def test_tdc_volume_equals_clearance(geometry):
    assert cylinder_volume(0.0, geometry) == pytest.approx(geometry.clearance_volume_m3, rel=1e-12)


def test_bdc_volume_is_clearance_plus_swept(geometry):
    v_bdc = cylinder_volume(180.0, geometry)
    assert v_bdc == pytest.approx(geometry.clearance_volume_m3 + geometry.swept_volume_m3, rel=1e-9)


def test_volume_is_periodic_over_360_deg(geometry):
    theta = np.linspace(-720.0, 720.0, 97)
    np.testing.assert_allclose(
        cylinder_volume(theta, geometry), cylinder_volume(theta + 360.0, geometry), rtol=1e-9
    )


def test_volume_is_symmetric_about_tdc(geometry):
    theta = np.arange(0.0, 181.0, 5.0)
    np.testing.assert_allclose(cylinder_volume(theta, geometry), cylinder_volume(-theta, geometry))


def test_clearance_volume_from_compression_ratio(geometry):
    # Vc = Vs / (rc - 1)
    assert geometry.clearance_volume_m3 == pytest.approx(97.2e-6 / 8.9)
    assert geometry.rod_ratio == pytest.approx(94.0 / 24.75)


def test_short_rod_never_raises():
    # R < 1 -> sqrt 인자가 음수가 될 수 있는 형상
    geo = EngineGeometry(compression_ratio=10.0, rod_length_mm=10.0, swept_volume_cc=500.0, stroke_mm=80.0)
    v = cylinder_volume(np.arange(-360.0, 361.0, 1.0), geo)
    assert np.all(np.isfinite(v))


def test_scalar_input_returns_float(geometry):
    assert isinstance(cylinder_volume(30.0, geometry), float)


@pytest.mark.parametrize(
    "field,value",
    [
        ("compression_ratio", 1.0),
        ("compression_ratio", 0.5),
        ("rod_length_mm", 0.0),
        ("swept_volume_cc", -97.2),
        ("stroke_mm", math.nan),
    ],
)
def test_invalid_geometry_rejected(field, value):
    params = dict(compression_ratio=9.9, rod_length_mm=94.0, swept_volume_cc=97.2, stroke_mm=49.5)
    params[field] = value
    with pytest.raises(InvalidGeometryError):
        EngineGeometry(**params)


def test_invalid_geometry_is_value_error():
    with pytest.raises(ValueError):
        EngineGeometry(compression_ratio="abc", rod_length_mm=94.0, swept_volume_cc=97.2, stroke_mm=49.5)
