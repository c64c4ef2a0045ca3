import numpy as np
import pytest
from hsplyne.distance_table import DistanceTable

def straight_line(XI):
    # 4 units along x, parametrized at constant speed
    return np.stack((4*XI, np.zeros_like(XI)), axis=1)

@pytest.fixture
def line_table():
    return DistanceTable.from_curve(straight_line, nb_segments=2, nb_points=3, samples_per_segment=2)

def test_from_curve(line_table):
    np.testing.assert_array_almost_equal(line_table.distances, [0, 1, 2, 3, 4])
    np.testing.assert_array_almost_equal(line_table.params, [0, 0.25, 0.5, 0.75, 1])
    np.testing.assert_array_almost_equal(line_table.point_distances, [0, 2, 4])
    assert line_table.length==pytest.approx(4)

def test_closed_point_distances():
    table = DistanceTable.from_curve(straight_line, nb_segments=3, nb_points=3, samples_per_segment=3)
    assert table.point_distances.size==3
    np.testing.assert_array_almost_equal(table.point_distances, [0, 4/3, 8/3])

def test_to_parameter(line_table):
    XI, last_index = line_table.to_parameter(np.array([0., 0.5, 2., 3.5, 4., 10., -1.]))
    np.testing.assert_array_almost_equal(XI, [0, 0.125, 0.5, 0.875, 1, 1, 0])
    np.testing.assert_array_equal(last_index, [0, 0, 1, 1, 2, 2, 0])

def test_to_parameter_wraps_when_closed(line_table):
    XI, _ = line_table.to_parameter(np.array([4., 5., -1.]), closed=True)
    np.testing.assert_array_almost_equal(XI, [0, 0.25, 0.75])

def test_repeated_distances():
    # first segment has zero length
    table = DistanceTable(np.array([0., 0., 0., 1., 2.]),
                          np.array([0., 0.25, 0.5, 0.75, 1.]),
                          np.array([0., 0., 2.]),
                          2)
    XI, _ = table.to_parameter(np.array([0.5, 1.]))
    np.testing.assert_array_almost_equal(XI, [0.625, 0.75])

def test_empty():
    table = DistanceTable.empty(1)
    assert table.length==0
    XI, last_index = table.to_parameter(3.)
    assert XI==0 and last_index==0
    assert table.point_distances.size==1
