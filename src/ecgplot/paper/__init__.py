"""
ECG paper rendering components for ecgplot.

Grid geometry, coordinate mapping and draw-command generation are independent
of any drawing toolkit; `surface` and `viewer` paint them with matplotlib.
"""

from ecgplot.paper.coordinate_manager import CoordinateMapper
from ecgplot.paper.grid import GridRenderer
from ecgplot.paper.grid_state import GridGeometryCalculator, GridLayout
from ecgplot.paper.orchestrator import RenderOrchestrator
from ecgplot.paper.traces import LeadLayout, TraceRenderer

__all__ = [
    "GridGeometryCalculator",
    "GridLayout",
    "CoordinateMapper",
    "GridRenderer",
    "TraceRenderer",
    "LeadLayout",
    "RenderOrchestrator",
]
