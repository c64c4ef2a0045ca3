from typing import Callable, Union

import numpy as np


class DistanceTable:
    """
    Lookup table between cumulative distance along a curve and its global parameter.

    The table is built by sampling the curve at uniform steps of its global
    parameter and accumulating the straight-line distance between consecutive
    samples. It is an approximation of the arc length whose error is bounded by
    the chord versus arc discrepancy at the chosen sample density.

    Attributes
    ----------
    distances : np.ndarray[np.floating]
        Non-decreasing cumulative distances, starting at 0.
    params : np.ndarray[np.floating]
        Strictly increasing global parameters of the samples, from 0 to 1.
    point_distances : np.ndarray[np.floating]
        Cumulative distance at every control point, recorded during the
        sampling pass.
    samples_per_segment : int
        Number of samples taken inside each segment.
    """

    distances: np.ndarray[np.floating]
    params: np.ndarray[np.floating]
    point_distances: np.ndarray[np.floating]
    samples_per_segment: int

    def __init__(
        self,
        distances: np.ndarray[np.floating],
        params: np.ndarray[np.floating],
        point_distances: np.ndarray[np.floating],
        samples_per_segment: int,
    ):
        self.distances = np.asarray(distances, dtype="float")
        self.params = np.asarray(params, dtype="float")
        self.point_distances = np.asarray(point_distances, dtype="float")
        self.samples_per_segment = samples_per_segment

    @classmethod
    def empty(cls, nb_points: int = 0, samples_per_segment: int = 5) -> "DistanceTable":
        """
        Create the table of a curve too short to be sampled (fewer than 2 control
        points). Its length is 0 and every distance maps to the parameter 0.
        """
        return cls(np.zeros(1), np.zeros(1), np.zeros(nb_points), samples_per_segment)

    @classmethod
    def from_curve(
        cls,
        curve: Callable[[np.ndarray[np.floating]], np.ndarray[np.floating]],
        nb_segments: int,
        nb_points: int,
        samples_per_segment: int = 5,
    ) -> "DistanceTable":
        """
        Sample a curve to build its distance table.

        Parameters
        ----------
        curve : Callable[[np.ndarray[np.floating]], np.ndarray[np.floating]]
            Function returning the positions, of shape (n, 2), at an array of `n`
            global parameters.
        nb_segments : int
            Number of segments of the curve.
        nb_points : int
            Number of control points of the curve. Control point `i` sits at the
            global parameter `i / nb_segments`.
        samples_per_segment : int, optional
            Number of samples taken inside each segment. By default, 5.

        Returns
        -------
        DistanceTable
            The table of `nb_segments * samples_per_segment` steps.

        Examples
        --------
        >>> straight = lambda XI: np.stack((4 * XI, np.zeros_like(XI)), axis=1)
        >>> table = DistanceTable.from_curve(straight, 2, 3, 2)
        >>> table.distances
        array([0., 1., 2., 3., 4.])
        >>> table.point_distances
        array([0., 2., 4.])
        """
        samples = samples_per_segment * nb_segments
        params = np.arange(samples + 1) / samples
        positions = curve(params)
        steps = np.linalg.norm(np.diff(positions, axis=0), axis=1)
        distances = np.concatenate(([0.0], np.cumsum(steps)))
        # closed curves hold one more boundary than control points
        point_distances = distances[::samples_per_segment][:nb_points]
        return cls(distances, params, point_distances, samples_per_segment)

    @property
    def length(self) -> float:
        """
        Total sampled length of the curve.
        """
        return float(self.distances[-1])

    def to_parameter(
        self, distance: Union[float, np.ndarray[np.floating]], closed: bool = False
    ) -> tuple[np.ndarray[np.floating], np.ndarray[np.integer]]:
        """
        Convert distances along the curve into global parameters.

        Parameters
        ----------
        distance : Union[float, np.ndarray[np.floating]]
            Distances from the start of the curve.
        closed : bool, optional
            If True, distances wrap modulo the total length. Otherwise they are
            clamped to [0, length], a distance reaching the length giving the
            parameter 1. By default, False.

        Returns
        -------
        XI : np.ndarray[np.floating]
            Global parameters, linearly interpolated between the two samples
            bracketing each distance.
        last_index : np.ndarray[np.integer]
            Index of the last control point passed before each distance.

        Notes
        -----
        The bracketing sample is found by binary search: for a distance equal to
        a run of identical table distances, the last sample of the run is used.
        """
        distance = np.asarray(distance, dtype="float")
        shape = distance.shape
        distance = distance.ravel()
        length = self.length
        nb_points = self.point_distances.size
        if self.distances.size < 2 or length <= 0:
            return np.zeros(shape), np.zeros(shape, dtype="int")
        if closed:
            distance = np.mod(distance, length)
            # rounding can leave a full turn just below the length
            distance = np.where(np.isclose(distance, length, rtol=1e-12, atol=0), 0.0, distance)
        else:
            distance = np.clip(distance, 0, length)
        size = self.distances.size
        j = np.searchsorted(self.distances, distance, side="right")
        past_end = j >= size
        j = np.minimum(j, size - 1)
        d0 = self.distances[j - 1]
        d1 = self.distances[j]
        ratio = (distance - d0) / np.where(d1 > d0, d1 - d0, 1.0)
        XI = self.params[j - 1] + ratio * (self.params[j] - self.params[j - 1])
        last_index = (j - 1) // self.samples_per_segment
        XI = np.where(past_end, 1.0, XI)
        last_index = np.where(past_end, nb_points - 1, last_index)
        at_start = distance == 0
        XI = np.where(at_start, 0.0, XI)
        last_index = np.where(at_start, 0, last_index)
        return XI.reshape(shape), last_index.reshape(shape)
