from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import numpy as np
from numba import njit

from ecgplot.errors import DecodeError
from ecgplot.log import get_logger

# Bytes per stored sample (WaveformBitsAllocated = 16)
SAMPLE_BYTES = 2


def signed_reinterpret(values: Union[np.ndarray, Sequence[int]]) -> np.ndarray:
    """
    Reinterpret unsigned 16-bit values as two's-complement signed 16-bit values.

    The bit pattern is kept as is (0xFFFF becomes -1); no arithmetic conversion
    takes place.

    Parameters
    ----------
    values : Union[np.ndarray, Sequence[int]]
        Unsigned 16-bit sample values.

    Returns
    -------
    np.ndarray
        An int16 view of the same bits.
    """
    raw = np.ascontiguousarray(values, dtype=np.uint16)
    return raw.view(np.int16)


def unpack_waveform_data(
    raw: bytes, channel_count: int, sample_count: int, little_endian: bool = True
) -> np.ndarray:
    """
    Read a WaveformData byte buffer as unsigned 16-bit samples.

    Parameters
    ----------
    raw : bytes
        WaveformData value as stored in the dataset.
    channel_count, sample_count : int
        Declared shape of the record.
    little_endian : bool, default=True
        Byte order of the dataset's transfer syntax.

    Returns
    -------
    np.ndarray
        Read-only native-order uint16 array of ``channel_count * sample_count`` values.

    Raises
    ------
    DecodeError
        If ``len(raw)`` differs from ``channel_count * sample_count * 2``.
    """
    expected = channel_count * sample_count * SAMPLE_BYTES
    if len(raw) != expected:
        raise DecodeError(
            f"Malformed waveform record: WaveformData holds {len(raw)} bytes, "
            f"expected {expected} ({channel_count} channels x {sample_count} samples)"
        )

    dtype = "<u2" if little_endian else ">u2"
    samples = np.frombuffer(raw, dtype=dtype).astype(np.uint16)
    samples.setflags(write=False)
    return samples


@njit
def _deinterleave_numba(
    samples: np.ndarray, channel_count: int, sample_count: int
) -> np.ndarray:
    """
    Numba-optimized de-interleave of a multiplexed sample buffer.

    Parameters
    ----------
    samples : np.ndarray
        Interleaved int16 buffer, sample-major.
    channel_count : int
        Number of channels multiplexed in the buffer.
    sample_count : int
        Number of samples per channel.

    Returns
    -------
    np.ndarray
        Array of shape (channel_count, sample_count).
    """
    matrix = np.empty((channel_count, sample_count), dtype=np.int16)

    for j in range(sample_count):
        base = j * channel_count
        for i in range(channel_count):
            matrix[i, j] = samples[base + i]

    return matrix


@dataclass(frozen=True)
class RawWaveformRecord:
    """
    First multiplexed waveform record of a dataset, as stored on disk.

    Attributes
    ----------
    channel_count : int
        NumberOfWaveformChannels (unsigned 16-bit).
    sample_count : int
        NumberOfWaveformSamples.
    interleaved_samples : np.ndarray
        Read-only uint16 buffer, sample-major, ``channel_count * sample_count`` long.
    """

    channel_count: int
    sample_count: int
    interleaved_samples: np.ndarray

    @classmethod
    def from_values(
        cls, channel_count: int, sample_count: int, samples: Any
    ) -> "RawWaveformRecord":
        """Build a record from any sequence of unsigned 16-bit values."""
        buffer = np.array(samples, dtype=np.uint16)
        buffer.setflags(write=False)
        return cls(int(channel_count), int(sample_count), buffer)


class WaveformMatrix:
    """
    Signed amplitudes of a decoded waveform, indexed ``[channel, sample]``.

    Values are raw sensor units; no sensitivity or baseline is applied.
    """

    def __init__(self, data: np.ndarray):
        if data.ndim != 2:
            raise ValueError(f"Waveform matrix must be 2D, got shape {data.shape}")
        self._data = np.asarray(data, dtype=np.int16)
        self._data.setflags(write=False)

    @classmethod
    def empty(cls, channel_count: int = 0, sample_count: int = 0) -> "WaveformMatrix":
        return cls(np.empty((channel_count, sample_count), dtype=np.int16))

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def channel_count(self) -> int:
        return self._data.shape[0]

    @property
    def sample_count(self) -> int:
        return self._data.shape[1]

    @property
    def is_empty(self) -> bool:
        return self._data.size == 0

    def channel(self, index: int) -> np.ndarray:
        return self._data[index]

    def __getitem__(self, key):
        return self._data[key]

    def __repr__(self) -> str:
        return (
            f"WaveformMatrix(channels={self.channel_count}, "
            f"samples={self.sample_count})"
        )


class WaveformDecoder:
    """
    Turns a multiplexed DICOM waveform buffer into a per-channel matrix.

    Stateless; a single instance can decode any number of records.
    """

    def __init__(self, log: Optional[Any] = None):
        self.log = log if log is not None else get_logger("decoder")

    def decode(
        self,
        channel_count: int,
        sample_count: int,
        interleaved_samples: Union[np.ndarray, Sequence[int]],
    ) -> WaveformMatrix:
        """
        De-interleave a multiplexed buffer into a signed amplitude matrix.

        Parameters
        ----------
        channel_count : int
            Number of channels in the record.
        sample_count : int
            Number of samples per channel.
        interleaved_samples : Union[np.ndarray, Sequence[int]]
            Unsigned 16-bit values laid out as ``[sample * channel_count + channel]``.

        Returns
        -------
        WaveformMatrix
            Matrix with ``matrix[c, s] == signed(interleaved_samples[s * channel_count + c])``.

        Raises
        ------
        DecodeError
            If the buffer length differs from ``channel_count * sample_count``.
        """
        if channel_count < 0 or sample_count < 0:
            raise DecodeError(
                f"Negative waveform shape: {channel_count} channels, {sample_count} samples"
            )

        samples = signed_reinterpret(interleaved_samples).ravel()
        expected = channel_count * sample_count

        if channel_count == 0 or sample_count == 0:
            if samples.size != 0:
                raise DecodeError(
                    f"Malformed waveform record: {samples.size} samples for an empty "
                    f"{channel_count}x{sample_count} record"
                )
            self.log.debug("Empty waveform record, returning empty matrix")
            return WaveformMatrix.empty(channel_count, sample_count)

        if samples.size != expected:
            raise DecodeError(
                f"Malformed waveform record: expected {expected} samples "
                f"({channel_count} channels x {sample_count} samples), got {samples.size}"
            )

        matrix = _deinterleave_numba(samples, channel_count, sample_count)
        self.log.debug(
            f"Decoded {channel_count} channels x {sample_count} samples, "
            f"amplitude range [{matrix.min()}, {matrix.max()}]"
        )
        return WaveformMatrix(matrix)

    def decode_bytes(
        self,
        channel_count: int,
        sample_count: int,
        raw: bytes,
        little_endian: bool = True,
    ) -> WaveformMatrix:
        """
        Decode a WaveformData byte buffer.

        Raises
        ------
        DecodeError
            If ``len(raw)`` differs from ``channel_count * sample_count * 2``.
        """
        samples = unpack_waveform_data(raw, channel_count, sample_count, little_endian)
        return self.decode(channel_count, sample_count, samples)

    def decode_record(self, record: RawWaveformRecord) -> WaveformMatrix:
        return self.decode(
            record.channel_count, record.sample_count, record.interleaved_samples
        )
