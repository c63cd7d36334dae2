"""Builders and doubles shared by the test modules."""

from __future__ import annotations

from typing import List, Optional

import numpy as np
from pydicom.dataset import Dataset
from pydicom.sequence import Sequence
from pydicom.uid import generate_uid

# 12-Lead ECG Waveform Storage
ECG_SOP_CLASS_UID = "1.2.840.10008.5.1.4.1.1.9.1.1"


class RecordingSurface:
    """Surface double keeping every emitted scene."""

    def __init__(self):
        self.scenes: List[list] = []
        self.sizes: List[tuple] = []

    def draw(self, commands, width, height):
        self.scenes.append(list(commands))
        self.sizes.append((width, height))

    @property
    def draw_count(self) -> int:
        return len(self.scenes)

    @property
    def last(self) -> list:
        return self.scenes[-1]


def interleaved_values(channels: int, samples: int, seed: int = 0) -> np.ndarray:
    """Deterministic uint16 buffer covering negative and positive amplitudes."""
    rng = np.random.default_rng(seed)
    signed = rng.integers(-2000, 2000, size=channels * samples, dtype=np.int16)
    return signed.view(np.uint16)


def build_ecg_dataset(
    channels: int = 12,
    samples: int = 500,
    values: Optional[np.ndarray] = None,
    modality: Optional[str] = "ECG",
    with_sequence: bool = True,
    n_items: int = 1,
    raw: Optional[bytes] = None,
) -> Dataset:
    """Build an in-memory ECG dataset with a multiplexed waveform sequence."""
    ds = Dataset()
    ds.SOPClassUID = ECG_SOP_CLASS_UID
    ds.SOPInstanceUID = generate_uid()
    if modality is not None:
        ds.Modality = modality

    if not with_sequence:
        return ds

    items = []
    for i in range(n_items):
        item = Dataset()
        item.NumberOfWaveformChannels = channels
        item.NumberOfWaveformSamples = samples
        item.SamplingFrequency = 500
        item.WaveformBitsAllocated = 16
        item.WaveformSampleInterpretation = "SS"
        data = values if values is not None else interleaved_values(channels, samples, i)
        payload = raw if raw is not None else np.asarray(data, dtype="<u2").tobytes()
        item.add_new(0x54001010, "OW", payload)
        items.append(item)
    ds.WaveformSequence = Sequence(items)
    return ds


def levels_of(records, text: str) -> List[str]:
    """Level names of captured loguru records whose message contains ``text``."""
    return [r["level"].name for r in records if text in r["message"]]
