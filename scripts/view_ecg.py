import sys
from warnings import warn

import matplotlib as mpl

from ecgplot import LeadLayout, configure_logging
from ecgplot.paper.viewer import EcgViewer, install_exception_handler

# --- User configuration dictionary ---
CONFIG = {
    "LOG_LEVEL": "INFO",  # logging level: TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL
    "CANVAS_WIDTH": 1201,  # initial canvas width in pixels
    "CANVAS_HEIGHT": 721,  # initial canvas height in pixels
    "DPI": 96,
    "LEAD_LAYOUT": "Regular",  # Regular, 3x4, 3x4+1, 3x4+3, 6x2, Average Complex
    # ---
    "FILES": [
        # "../data/ecg/12lead.dcm",
    ],
}


def main(argv: list) -> None:
    """
    Open the viewer and load every file given on the command line (or in CONFIG).

    Keys 1-6 switch the lead layout; q closes the window.
    """
    configure_logging(CONFIG.get("LOG_LEVEL", "INFO"))

    viewer = EcgViewer(
        width=CONFIG["CANVAS_WIDTH"],
        height=CONFIG["CANVAS_HEIGHT"],
        dpi=CONFIG["DPI"],
        lead_layout=LeadLayout.from_tag(CONFIG["LEAD_LAYOUT"]),
    )
    install_exception_handler(viewer)

    # each file replaces the previous one; the last valid file stays on screen
    for path in argv or CONFIG["FILES"]:
        viewer.open(path)

    viewer.show()


if __name__ == "__main__":
    # Set Matplotlib rcParams directly here
    for optn, val in {
        "backend": "QtAgg",
        "figure.constrained_layout.use": False,
        "toolbar": "None",
        "keymap.quit": ("q", "ctrl+w"),
    }.items():
        if isinstance(val, (list, tuple)):
            val = tuple(val)
        try:
            mpl.rcParams[optn] = val
        except KeyError:
            warn(f"mpl rcparams key '{optn}' not recognised as a valid rc parameter.")
    main(sys.argv[1:])
