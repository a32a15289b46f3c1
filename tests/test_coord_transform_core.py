import sys
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

import math

import pytest
from pydantic import ValidationError

from modules.coord_transform import core
from modules.coord_transform import (
    Coordinate,
    bd09_to_gcj02,
    bd09_to_wgs84,
    gcj02_to_bd09,
    gcj02_to_wgs84,
    out_of_china,
    wgs84_to_bd09,
    wgs84_to_gcj02,
)

# Tiananmen, WGS84
TAM_LNG = 116.397428
TAM_LAT = 39.90923

# Times Square, outside the China bounding box
NYC_LNG = -73.9857
NYC_LAT = 40.7484


def test_out_of_china_bounds():
    assert not out_of_china(TAM_LNG, TAM_LAT)
    assert out_of_china(NYC_LNG, NYC_LAT)
    assert out_of_china(72.0, 30.0)
    assert out_of_china(138.0, 30.0)
    assert out_of_china(100.0, 0.5)
    assert out_of_china(100.0, 56.0)
    # edges are inside
    assert not out_of_china(72.004, 30.0)
    assert not out_of_china(137.8347, 55.8271)


def test_wgs84_to_gcj02_known_value():
    gcj = wgs84_to_gcj02(TAM_LNG, TAM_LAT)
    assert isinstance(gcj, Coordinate)
    assert gcj.lng == pytest.approx(116.40367162595768, abs=1e-6)
    assert gcj.lat == pytest.approx(39.91063350638631, abs=1e-6)


def test_gcj02_to_bd09_known_value():
    bd = gcj02_to_bd09(116.40384825949647, 39.91640428150164)
    assert bd.lng == pytest.approx(116.4102166084372, abs=1e-6)
    assert bd.lat == pytest.approx(39.92274151588554, abs=1e-6)


def test_wgs84_to_bd09_known_value():
    bd = wgs84_to_bd09(TAM_LNG, TAM_LAT)
    assert bd.lng == pytest.approx(116.41004410170474, abs=1e-6)
    assert bd.lat == pytest.approx(39.916972856075134, abs=1e-6)


def test_wgs84_to_bd09_is_composition():
    gcj = wgs84_to_gcj02(TAM_LNG, TAM_LAT)
    assert wgs84_to_bd09(TAM_LNG, TAM_LAT) == gcj02_to_bd09(gcj.lng, gcj.lat)


def test_gcj02_round_trip():
    gcj = wgs84_to_gcj02(TAM_LNG, TAM_LAT)
    wgs = gcj02_to_wgs84(gcj.lng, gcj.lat)
    assert abs(wgs.lng - TAM_LNG) < 1e-5
    assert abs(wgs.lat - TAM_LAT) < 1e-5


def test_bd09_round_trip():
    bd = wgs84_to_bd09(TAM_LNG, TAM_LAT)
    wgs = bd09_to_wgs84(bd.lng, bd.lat)
    assert abs(wgs.lng - TAM_LNG) < 1e-5
    assert abs(wgs.lat - TAM_LAT) < 1e-5


def test_bd09_to_gcj02_inverts_closely():
    gcj = wgs84_to_gcj02(TAM_LNG, TAM_LAT)
    bd = gcj02_to_bd09(gcj.lng, gcj.lat)
    back = bd09_to_gcj02(bd.lng, bd.lat)
    assert abs(back.lng - gcj.lng) < 1e-5
    assert abs(back.lat - gcj.lat) < 1e-5


def test_out_of_china_is_identity():
    assert wgs84_to_gcj02(NYC_LNG, NYC_LAT) == Coordinate(lng=NYC_LNG, lat=NYC_LAT)
    assert gcj02_to_wgs84(NYC_LNG, NYC_LAT) == Coordinate(lng=NYC_LNG, lat=NYC_LAT)


def test_gcj02_to_bd09_has_no_bypass():
    bd = gcj02_to_bd09(NYC_LNG, NYC_LAT)
    assert bd != Coordinate(lng=NYC_LNG, lat=NYC_LAT)


def test_coordinate_is_frozen():
    coord = wgs84_to_gcj02(TAM_LNG, TAM_LAT)
    with pytest.raises(ValidationError):
        coord.lng = 0.0
    assert coord.as_tuple() == (coord.lng, coord.lat)


def test_nan_propagates_without_raising():
    gcj = wgs84_to_gcj02(float("nan"), TAM_LAT)
    assert math.isnan(gcj.lng)
    wgs = gcj02_to_wgs84(float("nan"), TAM_LAT)
    assert math.isnan(wgs.lng)


def _count_forward_calls(monkeypatch):
    calls = {"n": 0}
    forward = core._wgs84_to_gcj02

    def counting(lng, lat):
        calls["n"] += 1
        return forward(lng, lat)

    monkeypatch.setattr(core, "_wgs84_to_gcj02", counting)
    return calls


def test_iteration_never_exceeds_cap(monkeypatch):
    calls = _count_forward_calls(monkeypatch)
    gcj02_to_wgs84(121.4737, 31.2304)
    # one seed call plus at most ten correction steps
    assert 1 < calls["n"] <= 11


def test_iteration_stops_at_cap_when_not_converging(monkeypatch):
    calls = _count_forward_calls(monkeypatch)
    result = gcj02_to_wgs84(121.4737, 31.2304, threshold=0.0)
    assert calls["n"] == 11
    assert isinstance(result, Coordinate)


def test_iteration_cap_keyword(monkeypatch):
    calls = _count_forward_calls(monkeypatch)
    gcj02_to_wgs84(121.4737, 31.2304, max_iter=3, threshold=0.0)
    assert calls["n"] == 4


def test_iteration_cap_ignores_environment(monkeypatch):
    monkeypatch.setenv("COORD_MAX_ITER", "50")
    calls = _count_forward_calls(monkeypatch)
    gcj02_to_wgs84(121.4737, 31.2304, threshold=0.0)
    assert core.MAX_ITER == 10
    assert calls["n"] == 11


def test_out_of_china_skips_iteration(monkeypatch):
    calls = _count_forward_calls(monkeypatch)
    gcj02_to_wgs84(NYC_LNG, NYC_LAT)
    assert calls["n"] == 0


def test_bd09_infinite_input_returns_nan():
    bd = gcj02_to_bd09(math.inf, 0.0)
    assert math.isnan(bd.lng)
    assert math.isnan(bd.lat)


def test_bd09_overflowing_input_returns_nan():
    bd = gcj02_to_bd09(1e308, 1e308)
    assert math.isnan(bd.lng)
    assert math.isnan(bd.lat)

    gcj = bd09_to_gcj02(1e308, 0.0)
    assert math.isnan(gcj.lng)

    wgs = bd09_to_wgs84(1e308, 0.0)
    assert math.isnan(wgs.lng)
    assert math.isnan(wgs.lat)


def test_transform_formulas_tolerate_infinity():
    assert math.isnan(core.transform_lat(math.inf, 0.0))
    assert math.isnan(core.transform_lng(math.inf, 0.0))
