from typing import Iterable, Union

import numpy as np
import numba as nb
import scipy.sparse as sps

# relative and absolute tolerances of the t≈0 and t≈1 shortcuts
_APPROX_REL = 1e-6
_APPROX_ABS = 8 * np.finfo(np.float64).eps


class HermiteBasis:
    """
    Cubic Hermite basis over a chain of control points.

    A class mapping parameters of a piecewise-cubic Hermite curve to the weights
    applied on its control points and tangents. Every segment `i` joins control
    point `i` to control point `i + 1` (or back to control point 0 for the last
    segment of a closed chain), and is evaluated through the four Hermite
    polynomials:
    `h1 = 2t³ - 3t² + 1`, `h2 = -2t³ + 3t²`, `h3 = t³ - 2t² + t`, `h4 = t³ - t²`.

    Attributes
    ----------
    n : int
        Number of control points of the chain.
    closed : bool
        Whether the last control point connects back to the first one.
    nb_segments : int
        Number of Hermite segments: `n` for a closed chain, `n - 1` for an open
        one, and 0 below 2 control points.

    Notes
    -----
    Evaluation matrices act on the stacked control net
    `np.vstack((points, tangents))` of shape (`2*n`, 2): the first `n` columns
    weight the control points, the last `n` columns weight the tangents.

    See Also
    --------
    `scipy.sparse` : Sparse matrix formats used for basis evaluations
    """

    n: int
    closed: bool
    nb_segments: int

    def __init__(self, n: int, closed: bool = False):
        """
        Initialize a Hermite basis over `n` control points.

        Parameters
        ----------
        n : int
            Number of control points.
        closed : bool, optional
            Whether the chain loops back to its first control point.
            By default, False.

        Examples
        --------
        >>> basis = HermiteBasis(3, closed=True)
        >>> basis.nb_segments
        3
        """
        self.n = int(n)
        self.closed = bool(closed)
        if self.n < 2:
            self.nb_segments = 0
        else:
            self.nb_segments = self.n if self.closed else self.n - 1

    def to_segment(
        self, XI: Union[float, np.ndarray[np.floating]]
    ) -> tuple[np.ndarray[np.integer], np.ndarray[np.floating]]:
        """
        Split global parameters into segment indices and local parameters.

        Parameters
        ----------
        XI : Union[float, np.ndarray[np.floating]]
            Global parameters spanning the whole curve. Values outside [0, 1]
            are clamped.

        Returns
        -------
        segments : np.ndarray[np.integer]
            Index of the first control point of the segment of each parameter.
        T : np.ndarray[np.floating]
            Local parameter in [0, 1[ inside each segment.

        Notes
        -----
        `XI = 1` gives segment `nb_segments` at local parameter 0, which is the
        last control point of an open chain and control point 0 of a closed one.

        Examples
        --------
        >>> HermiteBasis(3).to_segment(np.array([0., 0.25, 1.]))
        (array([0, 0, 2]), array([0. , 0.5, 0. ]))
        """
        XI = np.clip(np.asarray(XI, dtype="float").ravel(), 0, 1)
        f_seg = XI * self.nb_segments
        segments = f_seg.astype("int")
        T = f_seg - segments
        return segments, T

    def linspace(self, n_eval_per_segment: int = 10) -> np.ndarray[np.floating]:
        """
        Generate global parameters evenly spaced inside every segment,
        control point boundaries included.

        Parameters
        ----------
        n_eval_per_segment : int, optional
            Number of evaluation steps per segment. By default, 10.

        Returns
        -------
        XI : np.ndarray[np.floating]
            Array of `nb_segments * n_eval_per_segment + 1` global parameters
            from 0 to 1.

        Examples
        --------
        >>> HermiteBasis(3).linspace(2)
        array([0.  , 0.25, 0.5 , 0.75, 1.  ])
        """
        return np.linspace(0, 1, self.nb_segments * n_eval_per_segment + 1)

    def tangent_operator(self, curvature: float = 0.5) -> sps.coo_matrix:
        """
        Build the linear operator deriving one tangent per control point.

        Interior tangents are the scaled central difference
        `curvature * (points[i + 1] - points[i - 1])`. On a closed chain the end
        tangents wrap around, on an open chain they use the one-sided differences
        `curvature * (points[1] - points[0])` and
        `curvature * (points[-1] - points[-2])`.

        Parameters
        ----------
        curvature : float, optional
            Scale of the tangents. 0.5 gives Catmull-Rom tangents, 0 gives
            straight segments. By default, 0.5.

        Returns
        -------
        D : sps.coo_matrix
            Matrix of shape (`n`, `n`) so that `tangents = D @ points`.

        Raises
        ------
        ValueError
            If the chain holds fewer than 2 control points.

        Examples
        --------
        >>> HermiteBasis(3).tangent_operator(0.5).toarray()
        array([[-0.5,  0.5,  0. ],
               [-0.5,  0. ,  0.5],
               [ 0. , -0.5,  0.5]])
        """
        if self.n < 2:
            raise ValueError(
                f"Can't derive tangents from {self.n} control point(s), at least 2 are needed."
            )
        inds = np.arange(self.n)
        next_inds = inds + 1
        prev_inds = inds - 1
        if self.closed:
            next_inds %= self.n
            prev_inds %= self.n
        else:
            next_inds[-1] = self.n - 1
            prev_inds[0] = 0
        vals = np.concatenate(
            (np.full(self.n, curvature, dtype="float"), np.full(self.n, -curvature, dtype="float"))
        )
        row = np.concatenate((inds, inds))
        col = np.concatenate((next_inds, prev_inds))
        D = sps.coo_matrix((vals, (row, col)), shape=(self.n, self.n))
        return D

    def N(
        self,
        segments: Iterable[int],
        T: Union[float, np.ndarray[np.floating]],
        k: int = 0,
    ) -> sps.coo_matrix:
        """
        Compute the `k`-th derivative of the Hermite basis at local parameters.

        Parameters
        ----------
        segments : Iterable[int]
            Index of the first control point of each evaluated segment.
            On a closed chain, indices wrap modulo `n`. On an open chain, an index
            with no following control point is clamped to the last control point:
            positions return it and derivatives return its tangent.
        T : Union[float, np.ndarray[np.floating]]
            Local parameters in [0, 1], one per segment index.
        k : int, optional
            Order of the derivative, 0 or 1. By default, 0.

        Returns
        -------
        DN : sps.coo_matrix
            Sparse matrix of shape (`T.size`, `2*n`) to be applied on the stacked
            control net `np.vstack((points, tangents))`.

        Notes
        -----
        For `k=0`, local parameters approximately equal to 0 or 1 select the
        segment's end control point directly, so that consecutive segments join
        exactly.

        Examples
        --------
        >>> basis = HermiteBasis(2)
        >>> basis.N([0], [0.5]).toarray()
        array([[ 0.5  ,  0.5  ,  0.125, -0.125]])
        """
        segments = np.asarray(segments, dtype=np.int64).ravel()
        T = np.asarray(T, dtype=np.float64).ravel()
        if segments.size != T.size:
            raise ValueError(
                f"Got {segments.size} segment indices for {T.size} local parameters."
            )
        if k not in (0, 1):
            raise ValueError(f"Can't evaluate the {k}-th derivative of the Hermite basis, only 0 and 1 are supported.")
        vals, row, col = _DN(self.n, self.closed, segments, T, k)
        DN = sps.coo_matrix((vals, (row, col)), shape=(T.size, 2 * self.n))
        return DN

    def DN(self, XI: Union[float, np.ndarray[np.floating]], k: int = 0) -> sps.coo_matrix:
        """
        Compute the `k`-th derivative of the Hermite basis at global parameters.

        Parameters
        ----------
        XI : Union[float, np.ndarray[np.floating]]
            Global parameters, clamped to [0, 1].
        k : int, optional
            Order of the derivative, 0 or 1. By default, 0.

        Returns
        -------
        DN : sps.coo_matrix
            Sparse matrix of shape (`XI.size`, `2*n`).

        Notes
        -----
        The derivative is taken with respect to the local parameter of each
        segment, not to the global one.
        """
        segments, T = self.to_segment(XI)
        return self.N(segments, T, k)


# %% fast functions for evaluation


@nb.njit(nb.boolean(nb.float64, nb.float64), cache=True)
def _approx_equal(a, b):
    """
    Compare two floats up to a relative tolerance, floored by a few
    machine epsilons.
    """
    return abs(b - a) < max(_APPROX_REL * max(abs(a), abs(b)), _APPROX_ABS)


@nb.njit(nb.types.UniTuple(nb.float64, 4)(nb.float64, nb.int64), cache=True)
def _hermite_weights(t, k):
    """
    Evaluate the four Hermite polynomials, or their first derivative.

    Parameters
    ----------
    t : float
        Local parameter in the segment.
    k : int
        Order of the derivative, 0 or 1.

    Returns
    -------
    (h1, h2, h3, h4) : tuple of float
        Weights of the start point, end point, start tangent and end tangent.
    """
    if k == 0:
        if _approx_equal(t, 0.0):
            return (1.0, 0.0, 0.0, 0.0)
        if _approx_equal(t, 1.0):
            return (0.0, 1.0, 0.0, 0.0)
        t2 = t * t
        t3 = t2 * t
        return (
            2.0 * t3 - 3.0 * t2 + 1.0,
            -2.0 * t3 + 3.0 * t2,
            t3 - 2.0 * t2 + t,
            t3 - t2,
        )
    if k == 1:
        t2 = t * t
        return (
            6.0 * t2 - 6.0 * t,
            -6.0 * t2 + 6.0 * t,
            3.0 * t2 - 4.0 * t + 1.0,
            3.0 * t2 - 2.0 * t,
        )
    raise ValueError("Only the 0-th and 1-st derivatives of the Hermite basis are supported !")


@nb.njit(
    nb.types.Tuple((nb.int64, nb.int64, nb.float64))(
        nb.int64, nb.boolean, nb.int64, nb.float64
    ),
    cache=True,
)
def _segment_ends(n, closed, i_from, t):
    """
    Resolve the control points bounding a segment.

    Parameters
    ----------
    n : int
        Number of control points.
    closed : bool
        Whether the chain is closed.
    i_from : int
        Index of the first control point of the segment.
    t : float
        Local parameter in the segment.

    Returns
    -------
    (i_from, i_to, t) : (int, int, float)
        Wrapped indices on a closed chain. On an open chain with no control
        point after `i_from`, both indices are the last control point and the
        local parameter is reset to 0.
    """
    i_to = i_from + 1
    if i_to >= n:
        if closed:
            i_to = i_to % n
            i_from = i_from % n
        else:
            return n - 1, n - 1, 0.0
    return i_from, i_to, t


@nb.njit(cache=True)
def _DN(n, closed, segments, T, k):
    """
    Compute the `k`-th derivative of the Hermite basis for a set of segments
    and local parameters.

    Parameters
    ----------
    n : int
        Number of control points.
    closed : bool
        Whether the chain is closed.
    segments : numpy.array of int
        Index of the first control point of each evaluated segment.
    T : numpy.array of float
        Local parameters, one per segment index.
    k : int
        Order of the derivative.

    Returns
    -------
    (vals, row, col) : (numpy.array of float, numpy.array of int, numpy.array of int)
        Values and indices of the evaluation matrix, with the control points in
        columns 0 to `n - 1` and the tangents in columns `n` to `2*n - 1`.
    """
    loop1 = T.size
    vals = np.empty(4 * loop1, dtype=np.float64)
    row = np.empty(4 * loop1, dtype=np.int64)
    col = np.empty(4 * loop1, dtype=np.int64)
    for ind1 in range(loop1):
        i_from, i_to, t = _segment_ends(n, closed, segments[ind1], T[ind1])
        h1, h2, h3, h4 = _hermite_weights(t, k)
        ind = 4 * ind1
        vals[ind] = h1
        vals[ind + 1] = h2
        vals[ind + 2] = h3
        vals[ind + 3] = h4
        col[ind] = i_from
        col[ind + 1] = i_to
        col[ind + 2] = n + i_from
        col[ind + 3] = n + i_to
        for ind2 in range(4):
            row[ind + ind2] = ind1
    return (vals, row, col)
