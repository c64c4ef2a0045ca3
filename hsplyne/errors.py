class HsplyneError(Exception):
    """
    Base class of the errors raised by `hsplyne`.
    """


class OutOfRangeError(HsplyneError, IndexError):
    """
    A control point index lies outside the valid bounds.

    Raised before any mutation, so the curve is left untouched.
    """


class InvalidOperationError(HsplyneError, RuntimeError):
    """
    The operation is not allowed in the current state of the curve,
    e.g. a scrolling append on a closed curve.

    Raised before any mutation, so the curve is left untouched.
    """


class DegenerateCurveError(HsplyneError, ValueError):
    """
    A position or derivative was queried on a curve holding fewer than
    2 control points.
    """
