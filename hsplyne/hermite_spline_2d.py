from typing import Iterable, Union

import numpy as np

from hsplyne.hermite_basis import HermiteBasis
from hsplyne.distance_table import DistanceTable
from hsplyne.errors import OutOfRangeError, InvalidOperationError, DegenerateCurveError


class HermiteSpline2D:
    """
    Cubic multi-segment Hermite spline in 2D passing through its control points.

    A class providing a piecewise-cubic curve whose tangents are derived
    automatically from the neighbouring control points. The curve can be open or
    closed, its curvature tuned between straight segments (0) and Catmull-Rom
    shaping (0.5), and it can be queried by global parameter or, approximately,
    by distance along the curve for constant-speed traversal.

    Attributes
    ----------
    closed : bool
        Whether the last control point connects back to the first one.
    curvature : float
        Scale of the automatic tangents. 0.5 reproduces Catmull-Rom tangents.
    length_samples_per_segment : int
        Density of the sampling used to approximate distances along the curve.
    count : int
        Number of control points.
    nb_segments : int
        Number of Hermite segments.
    length : float
        Approximate length of the curve.

    Notes
    -----
    - Tangents and the distance table are derived data: every mutation only
      flags them as stale, and they are rebuilt in full at the next query that
      needs them (tangents first, since sampling the length evaluates the curve).
    - Positions and derivatives need at least 2 control points, querying them on
      a shorter curve raises `DegenerateCurveError`. Length queries return 0
      instead.
    - Global parameters are clamped to [0, 1].
    - The control points are copied on construction. A host keeping its own copy
      pushes external edits back with `sync`.
    - Not thread safe: flag updates and rebuilds are not atomic with respect to
      reads.

    See Also
    --------
    `HermiteBasis` : Hermite polynomials and tangent operator
    `DistanceTable` : Distance to parameter lookup
    """

    def __init__(
        self,
        points: Union[Iterable[Iterable[float]], None] = None,
        closed: bool = False,
        curvature: float = 0.5,
        length_samples_per_segment: int = 5,
    ):
        """
        Initialize a `HermiteSpline2D`, either empty or pre-seeded with points.

        Parameters
        ----------
        points : Union[Iterable[Iterable[float]], None], optional
            Initial control points, array-like of shape (n, 2). They are copied.
            By default, None (empty curve).
        closed : bool, optional
            Whether the curve loops back to its first point. By default, False.
        curvature : float, optional
            Scale of the automatic tangents. By default, 0.5.
        length_samples_per_segment : int, optional
            Number of length samples per segment. By default, 5.

        Examples
        --------
        >>> spline = HermiteSpline2D([[0, 0], [2, 2], [4, 0]])
        >>> spline.interpolate(1.)
        array([4., 0.])
        """
        self._points = np.empty((0, 2), dtype="float") if points is None else _as_points(points)
        self._closed = bool(closed)
        self._curvature = _check_curvature(curvature)
        self._length_samples_per_segment = _check_samples(length_samples_per_segment)
        self._tangents = np.empty((0, 2), dtype="float")
        self._basis = HermiteBasis(0, self._closed)
        self._table = DistanceTable.empty(0, self._length_samples_per_segment)
        self._tangents_dirty = True
        self._length_dirty = True

    # %% shape parameters

    @property
    def closed(self) -> bool:
        return self._closed

    @closed.setter
    def closed(self, value: bool):
        self._closed = bool(value)
        self._mark_dirty()

    @property
    def curvature(self) -> float:
        return self._curvature

    @curvature.setter
    def curvature(self, value: float):
        self._curvature = _check_curvature(value)
        self._mark_dirty()

    @property
    def length_samples_per_segment(self) -> int:
        return self._length_samples_per_segment

    @length_samples_per_segment.setter
    def length_samples_per_segment(self, value: int):
        self._length_samples_per_segment = _check_samples(value)
        self._length_dirty = True

    @property
    def count(self) -> int:
        return self._points.shape[0]

    def __len__(self) -> int:
        return self.count

    @property
    def nb_segments(self) -> int:
        if self.count < 2:
            return 0
        return self.count if self._closed else self.count - 1

    @property
    def length(self) -> float:
        """
        Approximate length of the curve, sampled at a resolution of
        `length_samples_per_segment`. 0 below 2 control points.
        """
        self._recalculate(True)
        return self._table.length

    # %% control points

    def add_point(self, p: Iterable[float]):
        """
        Append a control point at the end of the curve.
        """
        self._points = np.vstack((self._points, _as_point(p)))
        self._mark_dirty()

    def add_point_scroll(self, p: Iterable[float]):
        """
        Append a control point while dropping the earliest one.

        This keeps a fixed-size curve that extends toward new points at the
        expense of its oldest history. Distances are then measured from the new
        start point: subtract `distance_at_point(1)` from distances computed before
        the call (or `1 / nb_segments` from parameters) to keep following the same
        location. An empty curve simply receives the point.

        Raises
        ------
        InvalidOperationError
            If the curve is closed.
        """
        if self._closed:
            raise InvalidOperationError("Can't scroll the points of a closed spline.")
        p = _as_point(p)
        if self.count == 0:
            self._points = p[None].copy()
        else:
            self._points = np.vstack((self._points[1:], p))
        self._mark_dirty()

    def add_points(self, points: Iterable[Iterable[float]]):
        """
        Append control points at the end of the curve, in order.
        """
        self._points = np.vstack((self._points, _as_points(points)))
        self._mark_dirty()

    def insert_point(self, index: int, p: Iterable[float]):
        """
        Insert a control point before the given index. `index == count` appends.
        """
        self._check_index(index, self.count + 1)
        self._points = np.insert(self._points, index, _as_point(p), axis=0)
        self._mark_dirty()

    def remove_point(self, index: int):
        self._check_index(index)
        self._points = np.delete(self._points, index, axis=0)
        self._mark_dirty()

    def replace_points(self, points: Iterable[Iterable[float]], from_index: int = 0):
        """
        Replace every control point from `from_index` onwards with a new set.
        """
        self._check_index(from_index)
        self._points = np.vstack((self._points[:from_index], _as_points(points)))
        self._mark_dirty()

    def set_point(self, index: int, p: Iterable[float]):
        self._check_index(index)
        self._points[index] = _as_point(p)
        self._mark_dirty()

    def clear(self):
        self._points = np.empty((0, 2), dtype="float")
        self._mark_dirty()

    def sync(self, points: Iterable[Iterable[float]]):
        """
        Replace the whole control point sequence.

        Hosts mirroring the control points for storage call this after editing
        their copy, so that derived data is rebuilt from it at the next query.
        """
        self._points = _as_points(points)
        self._mark_dirty()

    def get_point(self, index: int) -> np.ndarray[np.floating]:
        self._check_index(index)
        return self._points[index].copy()

    def get_points(self) -> np.ndarray[np.floating]:
        """
        Copy of the control points, of shape (`count`, 2).
        """
        return self._points.copy()

    def get_tangents(self) -> np.ndarray[np.floating]:
        """
        Copy of the automatic tangents, of shape (`count`, 2), or (0, 2) below
        2 control points.
        """
        self._recalculate(False)
        return self._tangents.copy()

    # %% evaluation

    def __call__(
        self, XI: Union[float, np.ndarray[np.floating]], k: int = 0
    ) -> np.ndarray[np.floating]:
        """
        Evaluate the curve, or its derivative, at global parameters.

        Parameters
        ----------
        XI : Union[float, np.ndarray[np.floating]]
            Global parameters spanning the whole curve, clamped to [0, 1].
            On an open curve 1 is the last control point, on a closed one it is
            the first control point again.
        k : int, optional
            Order of the derivative, 0 (position) or 1 (first derivative).
            By default, 0.

        Returns
        -------
        values : np.ndarray[np.floating]
            Array of shape (*`XI.shape`, 2). Derivatives are taken with respect to
            the local parameter of each segment and are not normalized.

        Raises
        ------
        DegenerateCurveError
            If the curve holds fewer than 2 control points.

        Examples
        --------
        >>> spline = HermiteSpline2D([[0, 0], [2, 2], [4, 0]])
        >>> spline(np.array([0., 0.5, 1.]))
        array([[0., 0.],
               [2., 2.],
               [4., 0.]])
        """
        self._recalculate(False)
        self._check_evaluable()
        DN = self._basis.DN(XI, k)
        values = DN @ self._control_net()
        return values.reshape((*np.shape(XI), 2))

    def interpolate(self, t: Union[float, np.ndarray[np.floating]]) -> np.ndarray[np.floating]:
        """
        Position on the whole curve at the global parameter `t`.

        Note that if the control points are not evenly spaced, evenly spaced
        parameters give varying speeds along the curve.
        """
        return self(t, k=0)

    def derivative(self, t: Union[float, np.ndarray[np.floating]]) -> np.ndarray[np.floating]:
        """
        Derivative of the curve at the global parameter `t`, not normalized.
        """
        return self(t, k=1)

    def interpolate_segment(
        self, from_index: int, t: Union[float, np.ndarray[np.floating]]
    ) -> np.ndarray[np.floating]:
        """
        Position between the control point `from_index` and the next one, at the
        local parameter `t` in [0, 1].

        On an open curve, the segment starting at the last control point is
        clamped to that point.
        """
        return self._evaluate_segment(from_index, t, 0)

    def derivative_segment(
        self, from_index: int, t: Union[float, np.ndarray[np.floating]]
    ) -> np.ndarray[np.floating]:
        """
        Derivative between the control point `from_index` and the next one, at
        the local parameter `t` in [0, 1], not normalized.

        On an open curve, the segment starting at the last control point returns
        the tangent of that point.
        """
        return self._evaluate_segment(from_index, t, 1)

    def linspace(self, n_eval_per_segment: int = 10) -> np.ndarray[np.floating]:
        """
        Global parameters evenly spaced inside every segment, control point
        boundaries included.
        """
        self._recalculate(False)
        return self._basis.linspace(n_eval_per_segment)

    # %% distances

    def distance_to_parameter(
        self, distance: Union[float, np.ndarray[np.floating]], return_index: bool = False
    ) -> Union[float, np.ndarray[np.floating], tuple]:
        """
        Convert a distance along the curve into a global parameter.

        Parameters
        ----------
        distance : Union[float, np.ndarray[np.floating]]
            Distance from the first control point. On a closed curve it wraps
            modulo the length, on an open curve it is clamped to [0, length].
        return_index : bool, optional
            If True, also return the index of the last control point passed.
            By default, False.

        Returns
        -------
        t : Union[float, np.ndarray[np.floating]]
            Approximate global parameter, whose accuracy depends on
            `length_samples_per_segment`. 0 below 2 control points.
        last_index : Union[int, np.ndarray[np.integer]]
            Only returned if `return_index` is True.

        Examples
        --------
        >>> spline = HermiteSpline2D([[0, 0], [1, 0], [2, 0]])
        >>> round(spline.distance_to_parameter(1.), 6)
        0.5
        """
        self._recalculate(True)
        XI, last_index = self._table.to_parameter(distance, self._closed)
        if np.ndim(distance) == 0:
            XI, last_index = float(XI), int(last_index)
        if return_index:
            return XI, last_index
        return XI

    def interpolate_distance(
        self, distance: Union[float, np.ndarray[np.floating]]
    ) -> np.ndarray[np.floating]:
        """
        Position on the curve at an approximate distance from its start.
        """
        return self.interpolate(self.distance_to_parameter(distance))

    def derivative_distance(
        self, distance: Union[float, np.ndarray[np.floating]]
    ) -> np.ndarray[np.floating]:
        """
        Derivative of the curve at an approximate distance from its start.
        """
        return self.derivative(self.distance_to_parameter(distance))

    def distance_at_point(self, index: int) -> float:
        """
        Approximate distance from the start of the curve to the control point
        `index`.
        """
        self._check_index(index)
        if index == 0:
            return 0.0
        self._recalculate(True)
        return float(self._table.point_distances[index])

    # %% derived data

    def _mark_dirty(self):
        self._tangents_dirty = True
        self._length_dirty = True

    def _recalculate(self, including_length: bool):
        if self._tangents_dirty:
            self._recalc_tangents()
            self._tangents_dirty = False
        if including_length and self._length_dirty:
            self._recalc_length()
            self._length_dirty = False

    def _recalc_tangents(self):
        self._basis = HermiteBasis(self.count, self._closed)
        if self.count < 2:
            self._tangents = np.empty((0, 2), dtype="float")
            return
        self._tangents = self._basis.tangent_operator(self._curvature) @ self._points

    def _recalc_length(self):
        if self.count < 2:
            self._table = DistanceTable.empty(self.count, self._length_samples_per_segment)
            return
        self._table = DistanceTable.from_curve(
            self.interpolate,
            self.nb_segments,
            self.count,
            self._length_samples_per_segment,
        )

    def _control_net(self) -> np.ndarray[np.floating]:
        return np.vstack((self._points, self._tangents))

    def _evaluate_segment(self, from_index, t, k):
        self._check_index(from_index)
        self._recalculate(False)
        self._check_evaluable()
        T = np.clip(np.asarray(t, dtype="float"), 0, 1)
        segments = np.full(T.size, from_index, dtype="int")
        DN = self._basis.N(segments, T, k)
        values = DN @ self._control_net()
        return values.reshape((*np.shape(t), 2))

    def _check_index(self, index: int, upper: Union[int, None] = None):
        upper = self.count if upper is None else upper
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Point index must be an integer, got {index!r}.")
        if not 0 <= index < upper:
            raise OutOfRangeError(f"Point index {index} out of range [0, {upper}[.")

    def _check_evaluable(self):
        if self.count < 2:
            raise DegenerateCurveError(
                f"Can't evaluate a spline with {self.count} point(s), at least 2 are needed."
            )


def _as_point(p: Iterable[float]) -> np.ndarray[np.floating]:
    p = np.asarray(p, dtype="float")
    if p.shape != (2,):
        raise ValueError(f"A 2D point must have shape (2,), got {p.shape}.")
    return p


def _as_points(points: Iterable[Iterable[float]]) -> np.ndarray[np.floating]:
    if not isinstance(points, np.ndarray):
        points = list(points)
    points = np.array(points, dtype="float")
    if points.size == 0:
        return np.empty((0, 2), dtype="float")
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"2D points must have shape (n, 2), got {points.shape}.")
    return points


def _check_curvature(curvature: float) -> float:
    curvature = float(curvature)
    if not np.isfinite(curvature):
        raise ValueError(f"Curvature must be finite, got {curvature}.")
    return curvature


def _check_samples(samples: int) -> int:
    if isinstance(samples, bool) or not isinstance(samples, (int, np.integer)) or samples < 1:
        raise ValueError(f"The number of length samples per segment must be a positive integer, got {samples!r}.")
    return int(samples)
