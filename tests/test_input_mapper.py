import math

import pytest

from domain.models import BoardGeometry
from sequencer.input_mapper import InputMapper, map_point

GEOMETRY = BoardGeometry(origin_x=20.0, origin_y=20.0, cell_width=50.0, cell_height=50.0)


def test_point_inside_first_cell():
    assert map_point(45.0, 45.0, GEOMETRY, 16, 8) == (0, 0)


def test_point_before_origin_misses():
    assert map_point(5.0, 5.0, GEOMETRY, 16, 8) is None


def test_point_past_small_board_misses():
    assert map_point(500.0, 500.0, GEOMETRY, 4, 4) is None


@pytest.mark.parametrize(
    "x, y",
    [
        (-1e9, 30.0),
        (30.0, -1e9),
        (1e308, 30.0),
        (-1e308, -1e308),
        (math.inf, 30.0),
        (30.0, -math.inf),
        (math.nan, 30.0),
        (10**400, 30),
        (30, -(10**400)),
    ],
)
def test_extreme_coordinates_never_raise(x, y):
    assert map_point(x, y, GEOMETRY, 4, 4) is None


def test_every_cell_centre_maps_to_itself():
    mapper = InputMapper(4, 3, GEOMETRY)
    for step in range(4):
        for track in range(3):
            left, top = mapper.cell_origin(step, track)
            assert mapper.map_point(left + 25.0, top + 25.0) == (step, track)


def test_shared_edges_resolve_to_one_cell():
    # x = 70 is the boundary between step 0 and step 1.
    assert map_point(69.999, 45.0, GEOMETRY, 4, 4) == (0, 0)
    assert map_point(70.0, 45.0, GEOMETRY, 4, 4) == (1, 0)
    assert map_point(45.0, 70.0, GEOMETRY, 4, 4) == (0, 1)
    assert map_point(20.0, 20.0, GEOMETRY, 4, 4) == (0, 0)


def test_far_edge_is_exclusive():
    # The board spans [20, 220) on both axes for a 4x4 grid.
    assert map_point(219.999, 219.999, GEOMETRY, 4, 4) == (3, 3)
    assert map_point(220.0, 100.0, GEOMETRY, 4, 4) is None
    assert map_point(100.0, 220.0, GEOMETRY, 4, 4) is None


def test_resize_recomputes_geometry():
    mapper = InputMapper(16, 8, GEOMETRY)
    geometry = mapper.resize(1600.0, 800.0)

    assert geometry.cell_width == pytest.approx(100.0)
    assert mapper.map_point(150.0, 150.0) == (1, 1)
    assert mapper.map_point(1599.0, 799.0) == (15, 7)
