from typing import Optional

import numpy as np

from ecgplot.errors import MappingError
from ecgplot.paper.grid_state import TICKS_PER_CELL, GridLayout
from ecgplot.paper.primitives import Point

# Amplitude (raw units) spanning one major cell vertically
MAX_AMPLITUDE_SCALE = 1000


class CoordinateMapper:
    """
    Handles coordinate transformations from (channel, sample, amplitude) to device coordinates.

    Channel ``i`` is centred on grid row ``2i + 1``; higher amplitudes map to
    smaller y, as on screen.
    """

    def __init__(
        self,
        max_amplitude_scale: float = MAX_AMPLITUDE_SCALE,
        ticks_per_cell: int = TICKS_PER_CELL,
    ):
        """
        Initialise the coordinate mapper.

        Parameters
        ----------
        max_amplitude_scale : float, default=1000
            Amplitude that spans one major cell.
        ticks_per_cell : int, default=5
            Minor divisions per major cell.
        """
        self.max_amplitude_scale = max_amplitude_scale
        self.ticks_per_cell = ticks_per_cell

    def scale_x(self, layout: GridLayout, sample_count: int) -> float:
        """Device units per sample so the full record spans every column."""
        if sample_count == 0:
            raise MappingError("Cannot map samples of an empty record (sample_count=0)")
        return layout.cell_size * layout.column_count / sample_count

    def scale_y(
        self, layout: GridLayout, max_amplitude_scale: Optional[float] = None
    ) -> float:
        """Device units per amplitude unit."""
        scale = (
            max_amplitude_scale
            if max_amplitude_scale is not None
            else self.max_amplitude_scale
        )
        return layout.cell_size / scale

    def offset_y(
        self,
        channel_index: int,
        layout: GridLayout,
        ticks_per_cell: Optional[int] = None,
    ) -> float:
        """Baseline of a channel's trace."""
        ticks = ticks_per_cell if ticks_per_cell is not None else self.ticks_per_cell
        return layout.spacing * ticks * (2 * channel_index + 1)

    def map_sample(
        self,
        channel_index: int,
        sample_index: int,
        amplitude: float,
        layout: GridLayout,
        sample_count: int,
        max_amplitude_scale: Optional[float] = None,
        ticks_per_cell: Optional[int] = None,
    ) -> Point:
        """
        Map one sample to device coordinates.

        Parameters
        ----------
        channel_index : int
            Channel (lead) index.
        sample_index : int
            Position of the sample in the record.
        amplitude : float
            Raw amplitude.
        layout : GridLayout
            Current grid geometry.
        sample_count : int
            Samples per channel in the record.
        max_amplitude_scale : float, optional
            Overrides the mapper's amplitude scale.
        ticks_per_cell : int, optional
            Overrides the mapper's minor divisions per cell.

        Returns
        -------
        Point
            ``(sample_index * scale_x, offset_y - amplitude * scale_y)``.

        Raises
        ------
        MappingError
            If ``sample_count`` is 0.
        """
        sx = self.scale_x(layout, sample_count)
        sy = self.scale_y(layout, max_amplitude_scale)
        base = self.offset_y(channel_index, layout, ticks_per_cell)
        return Point(sample_index * sx, base - amplitude * sy)

    def map_channel(
        self,
        channel_index: int,
        amplitudes: np.ndarray,
        layout: GridLayout,
        max_amplitude_scale: Optional[float] = None,
        ticks_per_cell: Optional[int] = None,
    ) -> np.ndarray:
        """
        Vectorised `map_sample` over a whole channel.

        Returns
        -------
        np.ndarray
            Array of shape (n_samples, 2) with x and y columns.
        """
        amplitudes = np.asarray(amplitudes)
        sample_count = amplitudes.shape[0]
        sx = self.scale_x(layout, sample_count)
        sy = self.scale_y(layout, max_amplitude_scale)
        base = self.offset_y(channel_index, layout, ticks_per_cell)

        points = np.empty((sample_count, 2), dtype=np.float64)
        points[:, 0] = np.arange(sample_count, dtype=np.float64) * sx
        points[:, 1] = base - amplitudes.astype(np.float64) * sy
        return points
