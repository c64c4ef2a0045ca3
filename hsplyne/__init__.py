"""
.. include:: ../README.md
"""
from hsplyne.hermite_basis import HermiteBasis
from hsplyne.distance_table import DistanceTable
from hsplyne.hermite_spline_2d import HermiteSpline2D
from hsplyne.spline_2d_component import Spline2DComponent
from hsplyne.errors import (HsplyneError, 
                            OutOfRangeError, 
                            InvalidOperationError, 
                            DegenerateCurveError)
