from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Union

import numpy as np


class StrokeStyle(Enum):
    """Pen a primitive is drawn with."""

    MAJOR = "major"
    MINOR = "minor"
    TRACE = "trace"


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class LineSegment:
    """Straight grid line from (x0, y0) to (x1, y1)."""

    x0: float
    y0: float
    x1: float
    y1: float
    style: StrokeStyle

    @property
    def is_horizontal(self) -> bool:
        return self.y0 == self.y1

    @property
    def is_vertical(self) -> bool:
        return self.x0 == self.x1


@dataclass(frozen=True, eq=False)
class Polyline:
    """
    Connected trace through ``points``, an (n, 2) array of x/y device coordinates.
    """

    channel: int
    points: np.ndarray
    style: StrokeStyle = StrokeStyle.TRACE

    def __len__(self) -> int:
        return len(self.points)


DrawCommand = Union[LineSegment, Polyline]
