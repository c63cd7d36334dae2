from typing import Iterator, Optional

from ecgplot.paper.grid_state import ROWS_PER_SCREEN, TICKS_PER_CELL, GridLayout
from ecgplot.paper.primitives import LineSegment, StrokeStyle


class GridRenderer:
    """
    Generates the ECG paper grid: a major line every ``ticks_per_cell`` minor lines.

    Nothing is cached; every call walks the layout again.
    """

    def __init__(self, rows: int = ROWS_PER_SCREEN, ticks_per_cell: int = TICKS_PER_CELL):
        self.rows = rows
        self.ticks_per_cell = ticks_per_cell

    def build_grid(
        self,
        width: float,
        height: float,
        layout: GridLayout,
        rows: Optional[int] = None,
        ticks_per_cell: Optional[int] = None,
    ) -> Iterator[LineSegment]:
        """
        Yield the horizontal then the vertical grid lines.

        Parameters
        ----------
        width, height : float
            Viewport size; horizontal lines span the width, vertical lines the height.
        layout : GridLayout
            Committed grid geometry.
        rows : int, optional
            Major rows to draw; defaults to the renderer's ``rows``.
        ticks_per_cell : int, optional
            Minor divisions per major cell; defaults to the renderer's value.

        Yields
        ------
        LineSegment
            ``rows + 1`` major and ``(ticks_per_cell - 1) * rows`` minor horizontal
            lines, then the vertical lines up to ``column_count`` cells.
        """
        rows = rows if rows is not None else self.rows
        ticks = ticks_per_cell if ticks_per_cell is not None else self.ticks_per_cell

        yield from self._horizontal_lines(width, layout.spacing, rows, ticks)
        yield from self._vertical_lines(
            width, height, layout.spacing, layout.column_count, ticks
        )

    @staticmethod
    def _horizontal_lines(
        width: float, spacing: float, rows: int, ticks: int
    ) -> Iterator[LineSegment]:
        step = 0
        for _ in range(rows):
            y = step * spacing
            yield LineSegment(0.0, y, width, y, StrokeStyle.MAJOR)
            step += 1

            for _ in range(1, ticks):
                y = step * spacing
                yield LineSegment(0.0, y, width, y, StrokeStyle.MINOR)
                step += 1

        # closing line at the bottom edge
        y = step * spacing
        yield LineSegment(0.0, y, width, y, StrokeStyle.MAJOR)

    @staticmethod
    def _vertical_lines(
        width: float, height: float, spacing: float, columns: int, ticks: int
    ) -> Iterator[LineSegment]:
        step = 0
        x = 0.0
        for _ in range(columns + 1):
            if x > width:
                break

            yield LineSegment(x, 0.0, x, height, StrokeStyle.MAJOR)
            step += 1
            x = step * spacing

            for _ in range(1, ticks):
                if x > width:
                    break

                yield LineSegment(x, 0.0, x, height, StrokeStyle.MINOR)
                step += 1
                x = step * spacing

        # trailing boundary line uses the minor pen, unlike the horizontal close
        yield LineSegment(x, 0.0, x, height, StrokeStyle.MINOR)
