"""
Exceptions raised by the ECG loading and rendering pipeline.

All of them are local, recoverable failures: they abort the operation that
raised them and leave previously loaded data and geometry untouched.
"""

from typing import Optional


class EcgPlotError(Exception):
    """Base class for all ecgplot failures."""


class InvalidHeaderError(EcgPlotError):
    """The file is not a readable DICOM file."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        msg = f"{path} is not a valid DICOM file."
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class WrongModalityError(EcgPlotError):
    """The dataset's Modality is not ECG."""

    def __init__(self, path: str, modality: str):
        self.path = path
        self.modality = modality
        super().__init__(f"{path} is not a ECG file (Modality={modality!r}).")


class MissingWaveformSequenceError(EcgPlotError):
    """The dataset has no Waveform Sequence (5400,0100)."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Dataset {path} does not contain Waveform Sequence (5400,0100)."
        )


class DecodeError(EcgPlotError, ValueError):
    """A waveform record's sample buffer does not match its declared shape."""


class LayoutError(EcgPlotError, ValueError):
    """The viewport is too small to lay out a grid."""


class MappingError(EcgPlotError, ValueError):
    """Sample coordinates cannot be mapped onto the grid."""
