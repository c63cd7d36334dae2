from typing import Any, List, Optional, Tuple, Union

from ecgplot.errors import (
    DecodeError,
    InvalidHeaderError,
    MissingWaveformSequenceError,
    WrongModalityError,
)
from ecgplot.log import get_logger
from ecgplot.paper.coordinate_manager import MAX_AMPLITUDE_SCALE, CoordinateMapper
from ecgplot.paper.grid import GridRenderer
from ecgplot.paper.grid_state import (
    ROWS_PER_SCREEN,
    TICKS_PER_CELL,
    GridGeometryCalculator,
    GridLayout,
)
from ecgplot.paper.primitives import DrawCommand
from ecgplot.paper.traces import LeadLayout, TraceRenderer, TraceSet
from ecgplot.waveform.decoder import RawWaveformRecord, WaveformDecoder, WaveformMatrix
from ecgplot.waveform.io import load_waveform_record


class RenderOrchestrator:
    """
    Owns the decoded waveform, the grid geometry and the lead layout, and
    regenerates the scene when any of them changes.

    The surface is any object with a ``draw(commands, width, height)`` method;
    it receives the complete list of grid lines and trace polylines on every
    redraw. All entry points must be called from the thread (or event loop)
    that owns the orchestrator.
    """

    DEFAULT_ROWS = ROWS_PER_SCREEN
    DEFAULT_TICKS_PER_CELL = TICKS_PER_CELL
    DEFAULT_MAX_AMPLITUDE_SCALE = MAX_AMPLITUDE_SCALE

    def __init__(
        self,
        surface: Any,
        width: float,
        height: float,
        rows: int = DEFAULT_ROWS,
        ticks_per_cell: int = DEFAULT_TICKS_PER_CELL,
        max_amplitude_scale: float = DEFAULT_MAX_AMPLITUDE_SCALE,
        lead_layout: LeadLayout = LeadLayout.REGULAR,
        log: Optional[Any] = None,
    ):
        """
        Initialise the orchestrator and compute the first grid layout.

        Nothing is drawn until the first event or an explicit `redraw`.

        Parameters
        ----------
        surface : Any
            Rendering surface receiving draw commands.
        width, height : float
            Initial viewport size.
        rows : int, default=24
            Major grid rows per screen.
        ticks_per_cell : int, default=5
            Minor divisions per major cell.
        max_amplitude_scale : float, default=1000
            Amplitude spanning one major cell.
        lead_layout : LeadLayout, default=LeadLayout.REGULAR
            Initial lead arrangement.
        log : optional
            Logger to use; defaults to the loguru logger bound to "orchestrator".

        Raises
        ------
        LayoutError
            If the initial viewport is degenerate.
        """
        self.surface = surface
        self.rows = rows
        self.ticks_per_cell = ticks_per_cell
        self.log = log if log is not None else get_logger("orchestrator")

        self.decoder = WaveformDecoder(log=self.log.bind(component="decoder"))
        self.geometry = GridGeometryCalculator(
            rows, ticks_per_cell, log=self.log.bind(component="grid")
        )
        self.mapper = CoordinateMapper(max_amplitude_scale, ticks_per_cell)
        self.grid_renderer = GridRenderer(rows, ticks_per_cell)
        self.trace_renderer = TraceRenderer(
            self.mapper, rows, log=self.log.bind(component="traces")
        )

        self._matrix: Optional[WaveformMatrix] = None
        self._lead_layout = lead_layout
        self._loading_path: Optional[str] = None
        self.last_traces: Optional[TraceSet] = None

        self.geometry.recompute(width, height)
        self._viewport: Tuple[float, float] = (width, height)

    @property
    def matrix(self) -> Optional[WaveformMatrix]:
        return self._matrix

    @property
    def has_data(self) -> bool:
        return self._matrix is not None

    @property
    def layout(self) -> GridLayout:
        return self.geometry.layout

    @property
    def lead_layout(self) -> LeadLayout:
        return self._lead_layout

    @property
    def viewport(self) -> Tuple[float, float]:
        return self._viewport

    @property
    def is_loading(self) -> bool:
        return self._loading_path is not None

    def on_data_loaded(self, record: Optional[RawWaveformRecord]) -> bool:
        """
        Decode a new waveform record and redraw.

        Parameters
        ----------
        record : Optional[RawWaveformRecord]
            First waveform record of the dataset; None (empty Waveform Sequence)
            is ignored and the current waveform stays on screen.

        Returns
        -------
        bool
            True if the record replaced the current waveform.

        Raises
        ------
        DecodeError
            If the record is malformed. The current waveform is kept.
        """
        if record is None:
            return False

        matrix = self.decoder.decode_record(record)
        self._matrix = matrix
        self.log.info(
            f"Loaded waveform: {matrix.channel_count} channels x "
            f"{matrix.sample_count} samples"
        )
        self.redraw()
        return True

    def on_viewport_changed(self, width: float, height: float) -> bool:
        """
        Track a viewport resize; redraw only when the grid layout changed.

        Returns
        -------
        bool
            True if the layout changed and the scene was regenerated.

        Raises
        ------
        LayoutError
            If the new size is degenerate. Viewport and layout are kept.
        """
        _, changed = self.geometry.recompute(width, height)
        self._viewport = (width, height)

        if changed:
            self.redraw()
        return changed

    def on_lead_layout_changed(
        self, lead_layout: Union[LeadLayout, str], selection_changed: bool = True
    ) -> bool:
        """
        Switch the lead arrangement and redraw.

        Parameters
        ----------
        lead_layout : Union[LeadLayout, str]
            New arrangement, or its menu label.
        selection_changed : bool, default=True
            False for menu bookkeeping events that did not select anything;
            those are ignored.

        Returns
        -------
        bool
            True if the scene was regenerated.
        """
        if not selection_changed:
            return False

        if isinstance(lead_layout, str):
            lead_layout = LeadLayout.from_tag(lead_layout)

        self.log.info(f"Lead layout: {lead_layout.value}")
        self._lead_layout = lead_layout
        self.redraw()
        return True

    def build_scene(self) -> List[DrawCommand]:
        """Regenerate grid lines and, if a waveform is loaded, its traces."""
        width, height = self._viewport
        layout = self.geometry.layout

        commands: List[DrawCommand] = list(
            self.grid_renderer.build_grid(width, height, layout)
        )

        if self._matrix is not None:
            traces = self.trace_renderer.build_traces(
                self._matrix, layout, self._lead_layout
            )
            self.last_traces = traces
            commands.extend(traces.polylines)

        return commands

    def redraw(self) -> List[DrawCommand]:
        """Emit the full scene to the surface and return it."""
        commands = self.build_scene()
        self.log.debug(
            f"Redraw {self._viewport[0]:g} x {self._viewport[1]:g}: {len(commands)} commands"
        )
        self.surface.draw(commands, *self._viewport)
        return commands

    async def open_file(self, path: str) -> bool:
        """
        Load an ECG DICOM file and display its first waveform record.

        Only one file can be loading at a time; a request made while another
        is pending is rejected. Parsing cannot be cancelled.

        Returns
        -------
        bool
            True if the file's waveform replaced the current one. Rejected files
            are logged and leave the current state untouched.
        """
        if self._loading_path is not None:
            self.log.warning(
                f"Still loading {self._loading_path}, ignoring request to open {path}"
            )
            return False

        self._loading_path = path
        try:
            record = await load_waveform_record(path)
        except InvalidHeaderError as e:
            self.log.warning(str(e))
            return False
        except (WrongModalityError, MissingWaveformSequenceError) as e:
            self.log.info(str(e))
            return False
        except DecodeError as e:
            self.log.error(str(e))
            return False
        finally:
            self._loading_path = None

        try:
            return self.on_data_loaded(record)
        except DecodeError as e:
            self.log.error(f"{path}: {e}")
            return False
