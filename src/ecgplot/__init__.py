"""
ecgplot: ECG paper plotting for DICOM waveforms

Decodes multiplexed ECG waveforms from DICOM datasets and lays them out on a
calibrated grid resembling standard ECG paper, for any viewport size.
"""

from ecgplot.errors import (
    DecodeError,
    EcgPlotError,
    InvalidHeaderError,
    LayoutError,
    MappingError,
    MissingWaveformSequenceError,
    WrongModalityError,
)
from ecgplot.log import configure_logging, get_logger

# Import from paper subpackage
from ecgplot.paper.coordinate_manager import CoordinateMapper
from ecgplot.paper.grid import GridRenderer
from ecgplot.paper.grid_state import GridGeometryCalculator, GridLayout
from ecgplot.paper.orchestrator import RenderOrchestrator
from ecgplot.paper.primitives import LineSegment, Point, Polyline, StrokeStyle
from ecgplot.paper.traces import LeadLayout, TraceRenderer, TraceSet

# Import from waveform subpackage
from ecgplot.waveform.decoder import RawWaveformRecord, WaveformDecoder, WaveformMatrix
from ecgplot.waveform.io import has_valid_header, load_waveform_record, open_dataset

__all__ = [
    # Errors
    "EcgPlotError",
    "InvalidHeaderError",
    "WrongModalityError",
    "MissingWaveformSequenceError",
    "DecodeError",
    "LayoutError",
    "MappingError",
    # Logging
    "configure_logging",
    "get_logger",
    # ECG paper rendering
    "GridGeometryCalculator",
    "GridLayout",
    "CoordinateMapper",
    "GridRenderer",
    "TraceRenderer",
    "TraceSet",
    "LeadLayout",
    "RenderOrchestrator",
    "LineSegment",
    "Polyline",
    "Point",
    "StrokeStyle",
    # Waveform-specific components
    "RawWaveformRecord",
    "WaveformDecoder",
    "WaveformMatrix",
    "has_valid_header",
    "open_dataset",
    "load_waveform_record",
]
