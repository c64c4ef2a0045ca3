from typing import Iterable, Literal, Union
import json, pickle

import numpy as np
from matplotlib.axes import Axes

from hsplyne.hermite_spline_2d import HermiteSpline2D, _check_curvature, _check_samples


class Spline2DComponent:
    """
    Storable wrapper around a `HermiteSpline2D`.

    All the curve math is done by `HermiteSpline2D`, this class keeps a plain copy
    of its state (points as nested lists and the three shape parameters) so it can
    be serialized, and forwards every getter, setter and mutator to the engine.
    The engine is created lazily from the stored state on first use.

    Attributes
    ----------
    points : list[list[float]]
        Mirrored control points. After editing this list directly, call `sync`
        to push the changes to the engine.

    Notes
    -----
    Mutators call the engine first, so an invalid index or operation raises
    before either copy is modified.

    Examples
    --------
    >>> component = Spline2DComponent([[0, 0], [2, 2], [4, 0]], closed=True)
    >>> component.save("loop.json")
    >>> Spline2DComponent.load("loop.json").count
    3
    """

    points: list[list[float]]

    def __init__(
        self,
        points: Union[Iterable[Iterable[float]], None] = None,
        closed: bool = False,
        curvature: float = 0.5,
        length_samples_per_segment: int = 5,
    ):
        self.points = [] if points is None else [[float(x), float(y)] for x, y in points]
        self._closed = bool(closed)
        self._curvature = _check_curvature(curvature)
        self._length_samples_per_segment = _check_samples(length_samples_per_segment)
        self._spline = None

    def _init_spline(self) -> HermiteSpline2D:
        if self._spline is None:
            self._spline = HermiteSpline2D(
                self.points,
                self._closed,
                self._curvature,
                self._length_samples_per_segment,
            )
        return self._spline

    def _mirror(self):
        self.points[:] = self._spline.get_points().tolist()

    @property
    def spline(self) -> HermiteSpline2D:
        return self._init_spline()

    # %% shape parameters

    @property
    def closed(self) -> bool:
        return self._closed

    @closed.setter
    def closed(self, value: bool):
        self._init_spline().closed = value
        self._closed = self._spline.closed

    @property
    def curvature(self) -> float:
        return self._curvature

    @curvature.setter
    def curvature(self, value: float):
        self._init_spline().curvature = value
        self._curvature = self._spline.curvature

    @property
    def length_samples_per_segment(self) -> int:
        return self._length_samples_per_segment

    @length_samples_per_segment.setter
    def length_samples_per_segment(self, value: int):
        self._init_spline().length_samples_per_segment = value
        self._length_samples_per_segment = self._spline.length_samples_per_segment

    @property
    def count(self) -> int:
        return len(self.points)

    @property
    def length(self) -> float:
        return self._init_spline().length

    # %% mutators

    def sync(self):
        """
        Push the mirrored points to the engine after they were edited in place.
        """
        self._init_spline().sync(self.points)
        self._mirror()

    def add_point(self, p: Iterable[float]):
        self._init_spline().add_point(p)
        self._mirror()

    def add_point_scroll(self, p: Iterable[float]):
        self._init_spline().add_point_scroll(p)
        self._mirror()

    def add_points(self, points: Iterable[Iterable[float]]):
        self._init_spline().add_points(points)
        self._mirror()

    def insert_point(self, index: int, p: Iterable[float]):
        self._init_spline().insert_point(index, p)
        self._mirror()

    def remove_point(self, index: int):
        self._init_spline().remove_point(index)
        self._mirror()

    def replace_points(self, points: Iterable[Iterable[float]], from_index: int = 0):
        self._init_spline().replace_points(points, from_index)
        self._mirror()

    def set_point(self, index: int, p: Iterable[float]):
        self._init_spline().set_point(index, p)
        self._mirror()

    def clear(self):
        self._init_spline().clear()
        self._mirror()

    # %% queries

    def get_point(self, index: int) -> np.ndarray[np.floating]:
        return self._init_spline().get_point(index)

    def interpolate(self, t):
        return self._init_spline().interpolate(t)

    def interpolate_segment(self, from_index: int, t):
        return self._init_spline().interpolate_segment(from_index, t)

    def derivative(self, t):
        return self._init_spline().derivative(t)

    def derivative_segment(self, from_index: int, t):
        return self._init_spline().derivative_segment(from_index, t)

    def distance_to_parameter(self, distance, return_index: bool = False):
        return self._init_spline().distance_to_parameter(distance, return_index)

    def interpolate_distance(self, distance):
        return self._init_spline().interpolate_distance(distance)

    def derivative_distance(self, distance):
        return self._init_spline().derivative_distance(distance)

    def distance_at_point(self, index: int) -> float:
        return self._init_spline().distance_at_point(index)

    # %% persistence

    def to_dict(self) -> dict:
        """
        Returns a dictionary representation of the Spline2DComponent object.
        Tangents and distances are derived, so they are not stored.
        """
        return {
            "points": [list(p) for p in self.points],
            "closed": self._closed,
            "curvature": self._curvature,
            "length_samples_per_segment": self._length_samples_per_segment,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Spline2DComponent":
        """
        Creates a Spline2DComponent object from a dictionary representation.
        """
        return cls(
            data["points"],
            data.get("closed", False),
            data.get("curvature", 0.5),
            data.get("length_samples_per_segment", 5),
        )

    def save(self, filepath: str, verbose: bool = False) -> None:
        """
        Save the Spline2DComponent object to a file.
        Supported extensions: json, pkl
        """
        data = self.to_dict()
        ext = filepath.split(".")[-1]
        if ext == "json":
            with open(filepath, "w") as f:
                json.dump(data, f, indent=2)
        elif ext == "pkl":
            with open(filepath, "wb") as f:
                pickle.dump(data, f)
        else:
            raise ValueError(
                f"Unknown extension {ext}. Supported extensions: json, pkl."
            )
        if verbose:
            print(f"{ext.upper()}: {filepath} written")

    @classmethod
    def load(cls, filepath: str) -> "Spline2DComponent":
        """
        Load a Spline2DComponent object from a file.
        Supported extensions: json, pkl
        """
        ext = filepath.split(".")[-1]
        if ext == "json":
            with open(filepath, "r") as f:
                data = json.load(f)
        elif ext == "pkl":
            with open(filepath, "rb") as f:
                data = pickle.load(f)
        else:
            raise ValueError(
                f"Unknown extension {ext}. Supported extensions: json, pkl."
            )
        return cls.from_dict(data)

    # %% preview

    def plotMPL(
        self,
        ax: Union[Axes, None] = None,
        steps_per_segment: int = 20,
        show_normals: bool = False,
        normal_length: float = 1.0,
        show_distance: bool = False,
        distance_marker: float = 1.0,
        ctrl_color: str = "#1b9e77",
        curve_color: str = "#7570b3",
        normal_color: str = "#666666",
        distance_color: str = "#d95f02",
        language: Union[Literal["english"], Literal["français"]] = "english",
    ):
        """
        Plot the spline using Matplotlib.

        Draws the control points and the curve, and optionally its normals and
        perpendicular ticks at regular distances along it.

        Parameters
        ----------
        ax : Union[Axes, None], optional
            Matplotlib axes for plotting. If None, creates a new figure and axes.
            By default, None.
        steps_per_segment : int, optional
            Number of drawn steps per segment. By default, 20.
        show_normals : bool, optional
            Draw the unit normals, scaled by `normal_length`, at every drawn
            step. By default, False.
        normal_length : float, optional
            Drawn length of the normals. By default, 1.
        show_distance : bool, optional
            Draw a tick across the curve every `distance_marker` units of
            length. By default, False.
        distance_marker : float, optional
            Distance between two ticks. Ticks are skipped if not strictly
            positive. By default, 1.
        ctrl_color : str, optional
            Color of the control points. By default, '#1b9e77' (green).
        curve_color : str, optional
            Color of the curve. By default, '#7570b3' (purple).
        normal_color : str, optional
            Color of the normals. By default, '#666666' (gray).
        distance_color : str, optional
            Color of the distance ticks. By default, '#d95f02' (orange).
        language: str, optional
            Language for the plot labels. Can be 'english' or 'français'.
            By default, 'english'.
        """
        import matplotlib.pyplot as plt
        from matplotlib.collections import LineCollection
        if language == "english":
            ctrl_label = "Control points"
            curve_label = "Hermite spline"
            normal_label = "Normals"
            distance_label = "Distance markers"
        elif language == "français":
            ctrl_label = "Points de contrôle"
            curve_label = "Spline d'Hermite"
            normal_label = "Normales"
            distance_label = "Repères de distance"
        else:
            raise NotImplementedError(f"Can't understand language '{language}'. Try 'english' or 'français'.")
        fig = plt.figure() if ax is None else ax.get_figure()
        ax = fig.add_subplot() if ax is None else ax
        spline = self._init_spline()
        if self.count == 0:
            return
        ctrl_pts = np.array(self.points)
        ax.plot(ctrl_pts[:, 0], ctrl_pts[:, 1], linestyle="", marker="o", c=ctrl_color, label=ctrl_label, zorder=2)
        if self.count >= 2:
            XI = spline.linspace(n_eval_per_segment=steps_per_segment)
            pts = spline(XI)
            ax.plot(pts[:, 0], pts[:, 1], c=curve_color, label=curve_label, zorder=1)
            if show_normals:
                normals = _unit_normals(spline(XI, k=1))
                segments = np.stack((pts, pts + normal_length * normals), axis=1)
                ax.add_collection(LineCollection(segments, colors=normal_color, label=normal_label, zorder=0)) # type: ignore
            if show_distance and distance_marker > 0:
                nb_markers = int(np.floor(spline.length / distance_marker)) + 1
                XI_marker = spline.distance_to_parameter(distance_marker * np.arange(nb_markers))
                pts_marker = spline(XI_marker)
                half_width = 0.25 * distance_marker * _unit_normals(spline(XI_marker, k=1))
                segments = np.stack((pts_marker - half_width, pts_marker + half_width), axis=1)
                ax.add_collection(LineCollection(segments, colors=distance_color, label=distance_label, zorder=3)) # type: ignore
        ax.legend()
        ax.set_aspect(1)


def _unit_normals(derivatives: np.ndarray[np.floating]) -> np.ndarray[np.floating]:
    normals = np.empty_like(derivatives)
    normals[:, 0] = -derivatives[:, 1]
    normals[:, 1] = derivatives[:, 0]
    norms = np.linalg.norm(normals, axis=1)
    normals /= np.where(norms > 0, norms, 1.0)[:, None]
    return normals
