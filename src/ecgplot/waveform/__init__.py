"""
Waveform-specific components for ecgplot.

This package reads DICOM ECG waveform records and decodes them into
per-channel amplitude matrices.
"""

from ecgplot.waveform.decoder import (
    RawWaveformRecord,
    WaveformDecoder,
    WaveformMatrix,
    signed_reinterpret,
    unpack_waveform_data,
)
from ecgplot.waveform.io import (
    has_valid_header,
    is_little_endian,
    load_waveform_record,
    open_dataset,
    read_waveform_record,
)

__all__ = [
    "RawWaveformRecord",
    "WaveformDecoder",
    "WaveformMatrix",
    "signed_reinterpret",
    "unpack_waveform_data",
    "has_valid_header",
    "is_little_endian",
    "open_dataset",
    "read_waveform_record",
    "load_waveform_record",
]
