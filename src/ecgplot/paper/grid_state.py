import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ecgplot.errors import LayoutError
from ecgplot.log import get_logger

# Grid rows (major cells) per screen height
ROWS_PER_SCREEN = 24
# Minor divisions per major cell
TICKS_PER_CELL = 5
# Relative cell size change tolerated before relayout (hysteresis)
HYSTERESIS_FRACTION = 0.1


@dataclass(frozen=True)
class GridLayout:
    """
    Committed grid geometry.

    Attributes
    ----------
    cell_size : float
        Height of one major grid row in device units.
    spacing : float
        Minor tick spacing, ``cell_size / ticks_per_cell``.
    column_count : int
        Whole major cells across the viewport, ``floor(width / cell_size)``.
    """

    cell_size: float
    spacing: float
    column_count: int


def _validate_viewport(width: float, height: float) -> None:
    if not (width > 0 and height > 0):
        raise LayoutError(
            f"Viewport must have positive size, got {width} x {height}"
        )


def compute_grid_layout(
    width: float,
    height: float,
    rows_per_screen: int = ROWS_PER_SCREEN,
    ticks_per_cell: int = TICKS_PER_CELL,
    previous_cell_size: float = 0.0,
    hysteresis: float = HYSTERESIS_FRACTION,
) -> Tuple[Optional[GridLayout], bool]:
    """
    Derive grid geometry from a viewport size, with change hysteresis.

    Parameters
    ----------
    width, height : float
        Viewport size in device units.
    rows_per_screen : int, default=24
        Major rows fitted into the viewport height.
    ticks_per_cell : int, default=5
        Minor divisions per major cell.
    previous_cell_size : float, default=0.0
        Last committed cell size; 0 means no layout exists yet.
    hysteresis : float, default=0.1
        Relative band around ``previous_cell_size`` inside which no relayout happens.

    Returns
    -------
    Tuple[Optional[GridLayout], bool]
        The new layout and True if the candidate cell size left the band,
        otherwise (None, False).

    Raises
    ------
    LayoutError
        If ``width`` or ``height`` is not positive, or the viewport is narrower
        than one cell.
    """
    _validate_viewport(width, height)

    candidate = height / rows_per_screen

    if previous_cell_size != 0 and (
        (1.0 - hysteresis) * previous_cell_size
        <= candidate
        <= (1.0 + hysteresis) * previous_cell_size
    ):
        return None, False

    column_count = math.floor(width / candidate)
    if column_count < 1:
        raise LayoutError(
            f"Viewport {width} x {height} is narrower than one grid cell ({candidate:.3g})"
        )

    layout = GridLayout(
        cell_size=candidate,
        spacing=candidate / ticks_per_cell,
        column_count=column_count,
    )
    return layout, True


class GridGeometryCalculator:
    """
    Holds the committed grid layout and recomputes it on viewport changes.

    Small resizes inside the hysteresis band keep the current layout so that
    interactive resizing does not regenerate the scene on every pixel.
    """

    def __init__(
        self,
        rows_per_screen: int = ROWS_PER_SCREEN,
        ticks_per_cell: int = TICKS_PER_CELL,
        hysteresis: float = HYSTERESIS_FRACTION,
        log: Optional[Any] = None,
    ):
        self.rows_per_screen = rows_per_screen
        self.ticks_per_cell = ticks_per_cell
        self.hysteresis = hysteresis
        self.log = log if log is not None else get_logger("grid")
        self._layout: Optional[GridLayout] = None

    @property
    def layout(self) -> Optional[GridLayout]:
        return self._layout

    @property
    def cell_size(self) -> float:
        return self._layout.cell_size if self._layout is not None else 0.0

    def recompute(
        self,
        width: float,
        height: float,
        rows_per_screen: Optional[int] = None,
        ticks_per_cell: Optional[int] = None,
        previous_cell_size: Optional[float] = None,
    ) -> Tuple[GridLayout, bool]:
        """
        Recompute the layout for a viewport and commit it if it changed.

        Parameters
        ----------
        width, height : float
            Viewport size in device units.
        rows_per_screen, ticks_per_cell : int, optional
            Override the calculator's defaults for this call.
        previous_cell_size : float, optional
            Reference cell size for the hysteresis check; defaults to the
            committed layout's cell size (0 before the first commit).

        Returns
        -------
        Tuple[GridLayout, bool]
            Current layout and whether it changed.

        Raises
        ------
        LayoutError
            If the viewport is degenerate. The committed layout is kept.
        """
        rows = rows_per_screen if rows_per_screen is not None else self.rows_per_screen
        ticks = ticks_per_cell if ticks_per_cell is not None else self.ticks_per_cell
        previous = previous_cell_size if previous_cell_size is not None else self.cell_size

        layout, changed = compute_grid_layout(
            width,
            height,
            rows_per_screen=rows,
            ticks_per_cell=ticks,
            previous_cell_size=previous,
            hysteresis=self.hysteresis,
        )

        if not changed:
            self.log.trace(
                f"Viewport {width:g} x {height:g} within hysteresis band, layout kept"
            )
            if self._layout is not None and self._layout.cell_size == previous:
                return self._layout, False
            # Caller-supplied reference size that was never committed here
            column_count = math.floor(width / previous)
            if column_count < 1:
                raise LayoutError(
                    f"Viewport {width} x {height} is narrower than one grid cell "
                    f"({previous:.3g})"
                )
            return (
                GridLayout(
                    cell_size=previous,
                    spacing=previous / ticks,
                    column_count=column_count,
                ),
                False,
            )

        self.log.info(
            f"Grid layout changed: cell={layout.cell_size:.3g}, "
            f"spacing={layout.spacing:.3g}, columns={layout.column_count}"
        )
        self._layout = layout
        return layout, True

    def reset(self) -> None:
        self._layout = None
