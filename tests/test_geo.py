import pytest

from waitcast.core.geo import haversine_km
from waitcast.domain.models import Coordinate
from waitcast.geo.cities import CityIndex, load_city_coordinates

SHANGHAI = Coordinate(lat=31.2304, lon=121.4737)
HANGZHOU = Coordinate(lat=30.2741, lon=120.1551)
BEIJING = Coordinate(lat=39.9042, lon=116.4074)


def test_haversine_zero_and_symmetric():
    assert haversine_km(SHANGHAI, SHANGHAI) == 0
    assert haversine_km(SHANGHAI, BEIJING) == pytest.approx(haversine_km(BEIJING, SHANGHAI))


def test_haversine_known_distance_and_triangle_inequality():
    # Shanghai <-> Hangzhou is roughly 165 km as the crow flies.
    assert 150 < haversine_km(SHANGHAI, HANGZHOU) < 180
    ab = haversine_km(SHANGHAI, HANGZHOU)
    bc = haversine_km(HANGZHOU, BEIJING)
    ac = haversine_km(SHANGHAI, BEIJING)
    assert ac <= ab + bc + 1e-9


def test_haversine_antipodal_points_stay_finite():
    d = haversine_km(Coordinate(lat=0, lon=0), Coordinate(lat=0, lon=180))
    assert d == pytest.approx(3.141592653589793 * 6371.0)


def test_coordinate_rejects_out_of_range_values():
    with pytest.raises(ValueError):
        Coordinate(lat=91, lon=0)
    with pytest.raises(ValueError):
        Coordinate(lat=0, lon=float("nan"))


def test_city_table_is_packaged_and_read_only():
    table = load_city_coordinates()
    assert table["上海"] == SHANGHAI
    assert len(table) >= 30
    with pytest.raises(TypeError):
        table["火星"] = SHANGHAI  # type: ignore[index]


def test_nearest_match_picks_user_city():
    index = CityIndex()
    assert index.nearest_match(SHANGHAI, ["杭州", "上海"]) == "上海"
    assert index.nearest_match(Coordinate(lat=30.3, lon=120.2), ["杭州", "上海"]) == "杭州"


def test_nearest_match_skips_unknown_names_and_handles_empty_lists():
    index = CityIndex()
    assert index.nearest_match(SHANGHAI, ["Atlantis", "北京"]) == "北京"
    assert index.nearest_match(SHANGHAI, ["Atlantis"]) is None
    assert index.nearest_match(SHANGHAI, []) is None


def test_nearest_match_exact_tie_keeps_first_candidate():
    index = CityIndex({"A": HANGZHOU, "B": HANGZHOU})
    assert index.nearest_match(SHANGHAI, ["A", "B"]) == "A"
    assert index.nearest_match(SHANGHAI, ["B", "A"]) == "B"
