from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ecgplot.log import get_logger
from ecgplot.paper.coordinate_manager import CoordinateMapper
from ecgplot.paper.grid_state import ROWS_PER_SCREEN, GridLayout
from ecgplot.paper.primitives import Polyline
from ecgplot.waveform.decoder import WaveformMatrix


class LeadLayout(Enum):
    """Lead arrangement selector; the value is the label shown in the layout menu."""

    REGULAR = "Regular"
    L3X4 = "3×4"
    L3X4_1 = "3×4+1"
    L3X4_3 = "3×4+3"
    L6X2 = "6×2"
    AVERAGE_COMPLEX = "Average Complex"

    @classmethod
    def from_tag(cls, tag: str) -> "LeadLayout":
        """Look up a layout by menu label, accepting ``x`` for ``×``."""
        wanted = tag.strip().lower()
        for layout in cls:
            label = layout.value.lower()
            if wanted in (label, label.replace("×", "x"), layout.name.lower()):
                return layout
        raise ValueError(f"Unknown lead layout: {tag!r}")


@dataclass(frozen=True)
class TraceSet:
    """
    Output of a lead arrangement.

    Attributes
    ----------
    lead_layout : LeadLayout
        Arrangement that produced the traces.
    polylines : Tuple[Polyline, ...]
        One polyline per rendered channel, in channel order.
    implemented : bool
        False when the arrangement has no geometry yet; ``polylines`` is then empty.
    dropped_channels : int
        Channels beyond the row capacity that were not rendered.
    """

    lead_layout: LeadLayout
    polylines: Tuple[Polyline, ...] = ()
    implemented: bool = True
    dropped_channels: int = 0

    def __len__(self) -> int:
        return len(self.polylines)

    def __iter__(self):
        return iter(self.polylines)


class LeadArrangement(ABC):
    """Strategy placing the channels of a matrix onto the grid."""

    lead_layout: LeadLayout
    implemented = True

    @abstractmethod
    def arrange(
        self,
        matrix: WaveformMatrix,
        layout: GridLayout,
        mapper: CoordinateMapper,
        max_channels: int,
    ) -> TraceSet:
        """Build the traces for ``matrix``, rendering at most ``max_channels`` channels."""


class RegularLayout(LeadArrangement):
    """Stacked full-length traces, channel ``i`` centred on row ``2i + 1``."""

    lead_layout = LeadLayout.REGULAR

    def arrange(
        self,
        matrix: WaveformMatrix,
        layout: GridLayout,
        mapper: CoordinateMapper,
        max_channels: int,
    ) -> TraceSet:
        rendered = min(matrix.channel_count, max_channels)
        dropped = matrix.channel_count - rendered

        if matrix.sample_count == 0:
            return TraceSet(self.lead_layout, (), True, dropped)

        polylines = tuple(
            Polyline(channel=i, points=mapper.map_channel(i, matrix.channel(i), layout))
            for i in range(rendered)
        )
        return TraceSet(self.lead_layout, polylines, True, dropped)


class UnimplementedLayout(LeadArrangement):
    """Placeholder for a recognised arrangement that has no geometry yet."""

    implemented = False

    def __init__(self, lead_layout: LeadLayout):
        self.lead_layout = lead_layout

    def arrange(
        self,
        matrix: WaveformMatrix,
        layout: GridLayout,
        mapper: CoordinateMapper,
        max_channels: int,
    ) -> TraceSet:
        return TraceSet(self.lead_layout, (), implemented=False)


def default_arrangements() -> Dict[LeadLayout, LeadArrangement]:
    arrangements: Dict[LeadLayout, LeadArrangement] = {
        layout: UnimplementedLayout(layout) for layout in LeadLayout
    }
    arrangements[LeadLayout.REGULAR] = RegularLayout()
    return arrangements


class TraceRenderer:
    """
    Produces one polyline per rendered channel for the selected lead layout.

    At most ``rows // 2`` channels are drawn (one trace per row pair); later
    channels are dropped without error.
    """

    def __init__(
        self,
        mapper: Optional[CoordinateMapper] = None,
        rows: int = ROWS_PER_SCREEN,
        arrangements: Optional[Dict[LeadLayout, LeadArrangement]] = None,
        log: Optional[Any] = None,
    ):
        self.mapper = mapper if mapper is not None else CoordinateMapper()
        self.rows = rows
        self.arrangements = (
            arrangements if arrangements is not None else default_arrangements()
        )
        self.log = log if log is not None else get_logger("traces")

    def is_implemented(self, lead_layout: LeadLayout) -> bool:
        """Whether ``lead_layout`` has trace geometry."""
        arrangement = self.arrangements.get(lead_layout)
        return arrangement is not None and arrangement.implemented

    def build_traces(
        self,
        matrix: WaveformMatrix,
        layout: GridLayout,
        lead_layout: LeadLayout = LeadLayout.REGULAR,
        rows: Optional[int] = None,
    ) -> TraceSet:
        """
        Build the trace polylines of a decoded waveform.

        Parameters
        ----------
        matrix : WaveformMatrix
            Decoded amplitudes.
        layout : GridLayout
            Committed grid geometry.
        lead_layout : LeadLayout, default=LeadLayout.REGULAR
            Arrangement selector.
        rows : int, optional
            Grid rows; defaults to the renderer's ``rows``.

        Returns
        -------
        TraceSet
            Polylines in channel order, or a not-implemented result for
            arrangements without geometry.
        """
        rows = rows if rows is not None else self.rows
        max_channels = rows // 2

        arrangement = self.arrangements.get(lead_layout)
        if arrangement is None:
            arrangement = UnimplementedLayout(lead_layout)

        traces = arrangement.arrange(matrix, layout, self.mapper, max_channels)

        if not traces.implemented:
            self.log.warning(f"Lead layout '{lead_layout.value}' is not implemented")
        elif traces.dropped_channels:
            self.log.debug(
                f"Rendering {len(traces)} of {matrix.channel_count} channels "
                f"(maximum {max_channels})"
            )
        return traces
