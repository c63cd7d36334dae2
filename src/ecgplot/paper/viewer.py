import asyncio
import sys
from typing import Any, Callable, Dict, List, Optional

import matplotlib.pyplot as plt

from ecgplot.errors import LayoutError
from ecgplot.log import get_logger
from ecgplot.paper.orchestrator import RenderOrchestrator
from ecgplot.paper.surface import MatplotlibSurface
from ecgplot.paper.traces import LeadLayout


class LeadLayoutMenu:
    """
    Radio-style lead layout menu.

    Selecting the checked item does nothing; selecting another item unchecks
    its siblings and reports exactly one selection change.
    """

    def __init__(self, selected: LeadLayout = LeadLayout.REGULAR):
        self._checked: Dict[LeadLayout, bool] = {
            layout: layout is selected for layout in LeadLayout
        }

    @property
    def selected(self) -> LeadLayout:
        return next(layout for layout, checked in self._checked.items() if checked)

    def is_checked(self, layout: LeadLayout) -> bool:
        return self._checked[layout]

    def select(self, layout: LeadLayout) -> bool:
        """Check ``layout``; returns True if the selection changed."""
        if self._checked[layout]:
            return False

        for item in self._checked:
            self._checked[item] = item is layout
        return True


class EcgViewer:
    """
    Matplotlib window showing an ECG on calibrated paper.

    Window resizes, number keys (lead layout) and file loads are forwarded to
    a `RenderOrchestrator`; the figure itself is only the paint surface.
    """

    # Default canvas, in pixels
    DEFAULT_WIDTH = 1201
    DEFAULT_HEIGHT = 721
    DEFAULT_DPI = 96
    DEFAULT_TITLE = "ECG Plot"

    LAYOUT_KEYS: Dict[str, LeadLayout] = {
        str(i): layout for i, layout in enumerate(LeadLayout, start=1)
    }

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        dpi: float = DEFAULT_DPI,
        lead_layout: LeadLayout = LeadLayout.REGULAR,
        log: Optional[Any] = None,
    ):
        self.log = log if log is not None else get_logger("viewer")
        self.fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.ax = self.fig.add_axes((0.0, 0.0, 1.0, 1.0))
        self.surface = MatplotlibSurface(self.ax)
        self.menu = LeadLayoutMenu(lead_layout)
        self.orchestrator = RenderOrchestrator(
            self.surface,
            width,
            height,
            lead_layout=lead_layout,
            log=self.log.bind(component="orchestrator"),
        )
        self.current_file: Optional[str] = None
        self._notice = None
        self._cids: List[int] = []

        self._connect_callbacks()
        self._update_title()
        self.orchestrator.redraw()

    def _connect_callbacks(self) -> None:
        canvas = self.fig.canvas
        self._cids = [
            canvas.mpl_connect("resize_event", self._on_resize),
            canvas.mpl_connect("key_press_event", self._on_key),
        ]

    def _on_resize(self, event) -> None:
        try:
            self.orchestrator.on_viewport_changed(event.width, event.height)
        except LayoutError as e:
            # minimised windows report a zero size
            self.log.debug(f"Skipping redraw: {e}")

    def _on_key(self, event) -> None:
        layout = self.LAYOUT_KEYS.get(event.key)
        if layout is not None:
            self.select_lead_layout(layout)

    def select_lead_layout(self, layout: LeadLayout) -> bool:
        """Select a lead layout as the menu would; returns True if it changed."""
        changed = self.menu.select(layout)
        redrawn = self.orchestrator.on_lead_layout_changed(layout, changed)
        if redrawn:
            self._update_title()
            if not self.orchestrator.trace_renderer.is_implemented(layout):
                self.show_notice(f"Lead layout '{layout.value}' is not implemented yet")
            else:
                self.clear_notice()
        return redrawn

    def open(self, path: str) -> bool:
        """Load a DICOM ECG file, blocking until it is parsed."""
        loaded = asyncio.run(self.orchestrator.open_file(path))
        if loaded:
            self.current_file = path
            self.clear_notice()
            self._update_title()
        return loaded

    def show_notice(self, message: str) -> None:
        """Show an error banner over the plot."""
        self.clear_notice()
        self._notice = self.fig.text(
            0.5,
            0.98,
            message,
            ha="center",
            va="top",
            color="white",
            bbox={"facecolor": "darkred", "alpha": 0.85, "boxstyle": "round"},
        )
        self.fig.canvas.draw_idle()

    def clear_notice(self) -> None:
        if self._notice is not None:
            self._notice.remove()
            self._notice = None
            self.fig.canvas.draw_idle()

    @property
    def notice(self) -> Optional[str]:
        return self._notice.get_text() if self._notice is not None else None

    def _update_title(self) -> None:
        parts = [self.DEFAULT_TITLE]
        if self.current_file:
            parts.append(self.current_file)
        parts.append(self.orchestrator.lead_layout.value)
        title = " - ".join(parts)
        manager = getattr(self.fig.canvas, "manager", None)
        if manager is not None:
            manager.set_window_title(title)

    def show(self) -> None:
        plt.show()

    def close(self) -> None:
        for cid in self._cids:
            self.fig.canvas.mpl_disconnect(cid)
        self._cids = []
        plt.close(self.fig)


def install_exception_handler(
    viewer: Optional[EcgViewer] = None, log: Optional[Any] = None
) -> Callable[[BaseException], None]:
    """
    Log and report uncaught exceptions instead of terminating.

    Installs the handler as ``sys.excepthook`` and, if a viewer is given, as the
    exception handler of its canvas callbacks, so failures inside resize or key
    handlers are reported on the figure.

    Returns
    -------
    Callable[[BaseException], None]
        The installed handler.
    """
    log = log if log is not None else get_logger("app")

    def handle(exc: BaseException) -> None:
        log.opt(exception=exc).error(f"Unhandled error: {exc}")
        if viewer is not None:
            viewer.show_notice(f"Oops! An error occurred: {exc}")

    def excepthook(exc_type, exc, tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        handle(exc)

    sys.excepthook = excepthook
    if viewer is not None:
        viewer.fig.canvas.callbacks.exception_handler = handle
    return handle
