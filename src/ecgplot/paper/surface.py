from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from matplotlib.artist import Artist
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection

from ecgplot.paper.primitives import DrawCommand, LineSegment, Polyline, StrokeStyle


class MatplotlibSurface:
    """
    Paints draw commands onto a matplotlib Axes used as a pixel canvas.

    The axes span ``[0, width] x [0, height]`` with y pointing down, so
    device coordinates from the pipeline are used as data coordinates.
    Every `draw` replaces the previous scene.
    """

    # Default styling constants (ECG paper pens)
    DEFAULT_BACKGROUND = "white"
    DEFAULT_MAJOR_COLOR = "red"
    DEFAULT_MAJOR_WIDTH = 1.0
    DEFAULT_MINOR_COLOR = "palevioletred"
    DEFAULT_MINOR_WIDTH = 0.5
    DEFAULT_TRACE_COLOR = "black"
    DEFAULT_TRACE_WIDTH = 1.5

    def __init__(
        self,
        ax: Axes,
        background: str = DEFAULT_BACKGROUND,
        major_color: str = DEFAULT_MAJOR_COLOR,
        major_width: float = DEFAULT_MAJOR_WIDTH,
        minor_color: str = DEFAULT_MINOR_COLOR,
        minor_width: float = DEFAULT_MINOR_WIDTH,
        trace_color: str = DEFAULT_TRACE_COLOR,
        trace_width: float = DEFAULT_TRACE_WIDTH,
    ):
        self.ax = ax
        self.background = background
        self.pens: Dict[StrokeStyle, Dict[str, object]] = {
            StrokeStyle.MAJOR: {"color": major_color, "linewidth": major_width},
            StrokeStyle.MINOR: {"color": minor_color, "linewidth": minor_width},
            StrokeStyle.TRACE: {"color": trace_color, "linewidth": trace_width},
        }
        self._artists: List[Tuple[StrokeStyle, Artist]] = []
        self.draw_count = 0

    def clear(self) -> None:
        """Remove every artist added by previous draws."""
        for _, artist in self._artists:
            artist.remove()
        self._artists = []

    def draw(self, commands: Sequence[DrawCommand], width: float, height: float) -> None:
        """
        Replace the scene with ``commands``.

        Parameters
        ----------
        commands : Sequence[DrawCommand]
            Grid line segments and trace polylines.
        width, height : float
            Viewport size the commands were generated for.
        """
        self.clear()
        self._setup_axes(width, height)

        # grid lines are batched per pen, minor first so major lines stay on top
        segments: Dict[StrokeStyle, List[np.ndarray]] = {
            StrokeStyle.MINOR: [],
            StrokeStyle.MAJOR: [],
        }
        traces: List[Polyline] = []

        for command in commands:
            if isinstance(command, LineSegment):
                segments.setdefault(command.style, []).append(
                    np.array([[command.x0, command.y0], [command.x1, command.y1]])
                )
            elif isinstance(command, Polyline):
                traces.append(command)
            else:
                logger.warning(f"Ignoring unknown draw command: {command!r}")

        for zorder, (style, lines) in enumerate(segments.items(), start=1):
            if not lines:
                continue
            collection = LineCollection(lines, zorder=zorder, **self.pens[style])
            self.ax.add_collection(collection)
            self._artists.append((style, collection))

        for trace in traces:
            (line,) = self.ax.plot(
                trace.points[:, 0],
                trace.points[:, 1],
                zorder=len(segments) + 1,
                **self.pens[trace.style],
            )
            self._artists.append((trace.style, line))

        self.draw_count += 1
        self._request_redraw()

    def _setup_axes(self, width: float, height: float) -> None:
        ax = self.ax
        ax.set_facecolor(self.background)
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_xticks([])
        ax.set_yticks([])
        for spine in ax.spines.values():
            spine.set_visible(False)

    def _request_redraw(self) -> None:
        canvas = getattr(self.ax.figure, "canvas", None)
        if canvas is not None:
            canvas.draw_idle()

    def line_count(self, style: Optional[StrokeStyle] = None) -> int:
        """Number of grid lines and traces currently painted, optionally for one pen."""
        total = 0
        for pen, artist in self._artists:
            if style is not None and pen is not style:
                continue
            if isinstance(artist, LineCollection):
                total += len(artist.get_segments())
            else:
                total += 1
        return total
