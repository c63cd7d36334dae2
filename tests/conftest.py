from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

from typing import Callable

import pydicom
import pytest
from loguru import logger
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian

from ecgplot.waveform.decoder import RawWaveformRecord
from helpers import RecordingSurface, build_ecg_dataset, interleaved_values


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def write_dicom(tmp_path) -> Callable[[Dataset, str], str]:
    """Write a dataset as a DICOM file (preamble, DICM prefix, file meta)."""

    def _write(ds: Dataset, name: str = "ecg.dcm") -> str:
        meta = FileMetaDataset()
        meta.MediaStorageSOPClassUID = ds.SOPClassUID
        meta.MediaStorageSOPInstanceUID = ds.SOPInstanceUID
        meta.TransferSyntaxUID = ExplicitVRLittleEndian
        ds.file_meta = meta
        ds.preamble = b"\x00" * 128
        path = tmp_path / name
        pydicom.dcmwrite(str(path), ds)
        return str(path)

    return _write


@pytest.fixture
def ecg_file(write_dicom) -> str:
    return write_dicom(build_ecg_dataset(), "ecg.dcm")


@pytest.fixture
def text_file(tmp_path) -> str:
    path = tmp_path / "notes.txt"
    path.write_text("not a dicom file\n" * 20)
    return str(path)


@pytest.fixture
def make_record() -> Callable[..., RawWaveformRecord]:
    def _make(channels: int = 12, samples: int = 500, seed: int = 0) -> RawWaveformRecord:
        return RawWaveformRecord.from_values(
            channels, samples, interleaved_values(channels, samples, seed)
        )

    return _make


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(handler_id)
