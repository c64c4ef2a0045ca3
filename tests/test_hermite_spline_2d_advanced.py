import numpy as np
import pytest
from hsplyne.hermite_spline_2d import HermiteSpline2D

@pytest.fixture
def wave():
    """Open wave through 4 points."""
    return HermiteSpline2D([[0, 0], [2, 2], [4, 0], [6, 2]])

@pytest.fixture
def loop():
    """Closed loop around the origin."""
    angles = 2*np.pi*np.arange(5)/5 + np.array([0, 0.2, -0.1, 0.15, 0])
    radii = np.array([1, 1.5, 1.2, 1.8, 1.3])
    return HermiteSpline2D(np.stack((radii*np.cos(angles), radii*np.sin(angles)), axis=1), closed=True)

@pytest.fixture
def straight_line():
    return HermiteSpline2D([[0, 0], [1, 0], [2, 0]])

def polyline_length(points):
    return np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1))

def test_length(wave, loop):
    # chords of the sampling underestimate the arc
    for spline in [wave, loop]:
        fine_length = polyline_length(spline(np.linspace(0, 1, 10_001)))
        assert spline.length <= fine_length
        assert spline.length==pytest.approx(fine_length, rel=2e-2)
    assert wave.length > polyline_length(wave.get_points())

def test_length_converges_with_sampling(wave):
    lengths = []
    for samples in [1, 2, 4, 8, 16]:
        wave.length_samples_per_segment = samples
        lengths.append(wave.length)
    assert np.all(np.diff(lengths) >= 0)

def test_distance_to_parameter_bounds(wave, loop):
    assert wave.distance_to_parameter(0)==0
    assert wave.distance_to_parameter(wave.length)==1
    assert wave.distance_to_parameter(wave.length + 3)==1
    assert wave.distance_to_parameter(-3)==0
    assert loop.distance_to_parameter(0)==0
    assert loop.distance_to_parameter(loop.length)==pytest.approx(0)

def test_distance_to_parameter_is_monotonic(wave):
    distances = np.linspace(-1, wave.length + 1, 301)
    XI = wave.distance_to_parameter(distances)
    assert XI.shape==distances.shape
    assert np.all(np.diff(XI) >= 0)

def test_closed_distances_wrap(loop):
    length = loop.length
    for distance in [0.3, 1.7, 4.2]:
        np.testing.assert_almost_equal(loop.distance_to_parameter(distance + length),
                                       loop.distance_to_parameter(distance))
        np.testing.assert_almost_equal(loop.distance_to_parameter(-distance),
                                       loop.distance_to_parameter(length - distance))

def test_distance_at_point(wave, loop):
    for spline in [wave, loop]:
        distances = np.array([spline.distance_at_point(i) for i in range(spline.count)])
        assert distances[0]==0
        assert np.all(np.diff(distances) > 0)
        assert distances[-1] < spline.length or not spline.closed
        for i, distance in enumerate(distances):
            np.testing.assert_almost_equal(spline.distance_to_parameter(distance), i/spline.nb_segments)
    np.testing.assert_almost_equal(wave.distance_at_point(3), wave.length)

def test_distance_at_point_follows_sample_density(wave):
    coarse = wave.distance_at_point(2)
    wave.length_samples_per_segment = 20
    fine = wave.distance_at_point(2)
    assert fine >= coarse
    np.testing.assert_almost_equal(wave.distance_to_parameter(fine), 2/3)

def test_round_trip(wave):
    samples = wave.length_samples_per_segment
    for t in [0.1, 0.35, 0.6, 0.85]:
        distance = polyline_length(wave(np.linspace(0, t, 2001)))
        assert abs(wave.distance_to_parameter(distance) - t) <= 1/samples

def test_last_index(straight_line):
    assert straight_line.distance_to_parameter(0.5, return_index=True)[1]==0
    assert straight_line.distance_to_parameter(1.5, return_index=True)[1]==1
    t, last_index = straight_line.distance_to_parameter(5., return_index=True)
    assert t==1 and last_index==2
    _, last_indices = straight_line.distance_to_parameter(np.array([0.5, 1.5]), return_index=True)
    np.testing.assert_array_equal(last_indices, [0, 1])

def test_interpolate_distance(straight_line):
    straight_line.length_samples_per_segment = 20
    distances = np.array([0.3, 0.7, 1.2, 1.9])
    fine = straight_line.interpolate_distance(distances)
    np.testing.assert_allclose(fine[:, 0], distances, atol=1e-2)
    np.testing.assert_allclose(fine[:, 1], 0, atol=1e-12)
    straight_line.length_samples_per_segment = 1
    coarse = straight_line.interpolate_distance(distances)
    assert np.abs(coarse[:, 0] - distances).max() > np.abs(fine[:, 0] - distances).max()

def test_derivative_distance(straight_line):
    derivatives = straight_line.derivative_distance(np.array([0.5, 1.5]))
    assert np.all(derivatives[:, 0] > 0)
    np.testing.assert_allclose(derivatives[:, 1], 0, atol=1e-12)
    np.testing.assert_array_almost_equal(straight_line.derivative_distance(0.), straight_line.derivative(0.))

def test_scrolling_shifts_distances():
    points = np.array([[0, 0], [2, 2], [4, 0], [6, 2], [8, 0], [10, 2]], dtype='float')
    spline = HermiteSpline2D(points)
    # segment 2 -> 3 only depends on points 1 to 4
    span = spline.distance_at_point(3) - spline.distance_at_point(2)
    spline.add_point_scroll([12, 0])
    assert spline.count==6
    np.testing.assert_array_equal(spline.get_point(0), [2, 2])
    np.testing.assert_almost_equal(spline.distance_at_point(2) - spline.distance_at_point(1), span)

def test_full_turns_wrap_to_start(loop):
    length = loop.length
    for distance in [length, 2*length, 3*length, -length, -1e-300]:
        assert loop.distance_to_parameter(distance)==0
