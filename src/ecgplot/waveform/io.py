import asyncio
import os
from typing import Optional

import pydicom
from loguru import logger
from pydicom.dataset import Dataset
from pydicom.errors import InvalidDicomError
from pydicom.misc import is_dicom

from ecgplot.errors import (
    DecodeError,
    InvalidHeaderError,
    MissingWaveformSequenceError,
    WrongModalityError,
)
from ecgplot.waveform.decoder import RawWaveformRecord, unpack_waveform_data

ECG_MODALITY = "ECG"
REQUIRED_WAVEFORM_TAGS = (
    "NumberOfWaveformChannels",
    "NumberOfWaveformSamples",
    "WaveformData",
)


def is_little_endian(dataset: Dataset) -> bool:
    """
    Byte order of the dataset's transfer syntax.

    Datasets without file meta information (built in memory) are taken to be
    little endian.
    """
    file_meta = getattr(dataset, "file_meta", None)
    syntax = file_meta.get("TransferSyntaxUID") if file_meta is not None else None
    if syntax is None:
        return True
    try:
        return syntax.is_little_endian
    except ValueError:
        logger.debug(f"Unknown transfer syntax {syntax}, assuming little endian")
        return True


def has_valid_header(path: str) -> bool:
    """
    Check for the DICOM preamble and ``DICM`` prefix.

    Parameters
    ----------
    path : str
        Path to the candidate file.

    Returns
    -------
    bool
        True if the file exists and carries a DICOM file header.
    """
    if not os.path.isfile(path):
        return False
    try:
        return is_dicom(path)
    except OSError as e:
        logger.debug(f"Could not read header of {path}: {e}")
        return False


async def open_dataset(path: str) -> Dataset:
    """
    Parse a DICOM file without blocking the calling event loop.

    The parse runs in a worker thread and cannot be cancelled once started.

    Raises
    ------
    InvalidHeaderError
        If pydicom cannot parse the file.
    """
    logger.info(f"Reading DICOM file: {path}")
    try:
        return await asyncio.to_thread(pydicom.dcmread, path)
    except InvalidDicomError as e:
        raise InvalidHeaderError(path, str(e)) from e


def read_waveform_record(
    dataset: Dataset, source: str = "<dataset>"
) -> Optional[RawWaveformRecord]:
    """
    Extract the first multiplexed waveform record of an ECG dataset.

    Parameters
    ----------
    dataset : Dataset
        Parsed DICOM dataset.
    source : str, default="<dataset>"
        Name used in error messages.

    Returns
    -------
    Optional[RawWaveformRecord]
        The first record of the Waveform Sequence, or None if the sequence is empty.

    Raises
    ------
    WrongModalityError
        If Modality is not ECG.
    MissingWaveformSequenceError
        If the dataset has no Waveform Sequence.
    DecodeError
        If WaveformData does not hold channels x samples 16-bit values.
    """
    modality = dataset.get("Modality", "") or ""
    if modality != ECG_MODALITY:
        raise WrongModalityError(source, str(modality))

    if "WaveformSequence" not in dataset:
        raise MissingWaveformSequenceError(source)

    sequence = dataset.WaveformSequence
    if len(sequence) == 0:
        logger.debug(f"Waveform Sequence of {source} is empty")
        return None

    # only the first multiplex group is consulted
    item = sequence[0]
    missing = [keyword for keyword in REQUIRED_WAVEFORM_TAGS if keyword not in item]
    if missing:
        raise DecodeError(
            f"Malformed waveform record in {source}: missing {', '.join(missing)}"
        )

    channels = int(item.NumberOfWaveformChannels)
    samples = int(item.NumberOfWaveformSamples)
    raw = item.WaveformData

    logger.info(f"--Waveform channels: {channels}")
    logger.info(f"--Waveform samples: {samples}")
    logger.debug(f"--WaveformData: {len(raw)} bytes")

    try:
        values = unpack_waveform_data(
            raw, channels, samples, little_endian=is_little_endian(dataset)
        )
    except DecodeError as e:
        raise DecodeError(f"{source}: {e}") from e
    return RawWaveformRecord(channels, samples, values)


async def load_waveform_record(path: str) -> Optional[RawWaveformRecord]:
    """
    Validate, parse and extract the waveform record of a DICOM ECG file.

    Raises
    ------
    InvalidHeaderError, WrongModalityError, MissingWaveformSequenceError, DecodeError
        See `has_valid_header`, `open_dataset` and `read_waveform_record`.
    """
    if not has_valid_header(path):
        raise InvalidHeaderError(path)
    dataset = await open_dataset(path)
    return read_waveform_record(dataset, source=path)
