"""Audio sources delivering mono 16 kHz int16 PCM to the capture loop.

Every source follows the same contract:
  source.open()
  samples = source.read(max_samples)   # int16 array of 0..max_samples, None once exhausted/closed
  source.close()
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

try:
    import sounddevice as sd
except (ImportError, OSError):
    # OSError: sounddevice installed but the PortAudio library is missing
    sd = None  # type: ignore

from wakeword_frontend.audio.config import AudioConfig
from wakeword_frontend.errors import AudioSourceError

logger = logging.getLogger(__name__)


class AudioSource(ABC):
    """Blocking pull-based PCM source. Usable as a context manager.

    `live` sources deliver audio in real time; the others (files, arrays) are
    read as fast as the consumer pulls, so their windows are stamped by
    stream position rather than wall-clock time.
    """

    live = False

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying device or data."""

    @abstractmethod
    def read(self, max_samples: int) -> Optional[np.ndarray]:
        """Block until samples are available; None once the source is exhausted or closed."""

    @abstractmethod
    def close(self) -> None:
        """Release the handle. Safe to call more than once."""

    def __enter__(self) -> "AudioSource":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SoundDeviceSource(AudioSource):
    """Microphone input through a sounddevice InputStream (int16, mono)."""

    live = True

    def __init__(self, config: Optional[AudioConfig] = None, device: Optional[int] = None):
        self.config = config or AudioConfig()
        self.device = device
        self._stream = None

    def open(self) -> None:
        if sd is None:
            raise AudioSourceError("sounddevice and PortAudio are required for recording. pip install sounddevice")
        if self._stream is not None:
            return
        try:
            stream = sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype="int16",
                device=self.device,
            )
            stream.start()
        except sd.PortAudioError as exc:
            raise AudioSourceError(f"could not open input device {self.device!r}: {exc}") from exc
        self._stream = stream
        logger.info(
            "Opened input device %r at %d Hz",
            self.device,
            self.config.sample_rate,
        )

    def read(self, max_samples: int) -> Optional[np.ndarray]:
        if self._stream is None:
            return None
        try:
            data, overflowed = self._stream.read(max_samples)
        except sd.PortAudioError as exc:
            raise AudioSourceError(f"audio read failed: {exc}") from exc
        if overflowed:
            logger.warning("Input overflow: samples were dropped by the device")
        return np.asarray(data, dtype=np.int16).reshape(-1)

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.info("Closed input device %r", self.device)


class ArraySource(AudioSource):
    """Serve int16 samples from memory, block_size samples at a time at most."""

    def __init__(
        self,
        samples: Union[np.ndarray, Sequence[int], None] = None,
        block_size: Optional[int] = None,
    ):
        self._samples = None if samples is None else np.asarray(samples, dtype=np.int16).reshape(-1)
        self.block_size = block_size
        self._pos = 0
        self._open = False
        self._closed = False

    def _load(self) -> np.ndarray:
        if self._samples is None:
            raise AudioSourceError("no samples to serve")
        return self._samples

    def open(self) -> None:
        self._samples = self._load()
        self._pos = 0
        self._open = True
        self._closed = False

    def read(self, max_samples: int) -> Optional[np.ndarray]:
        if self._closed:
            return None
        if not self._open:
            raise AudioSourceError("source is not open")
        if self._pos >= self._samples.shape[0]:
            return None
        n = max_samples if self.block_size is None else min(max_samples, self.block_size)
        chunk = self._samples[self._pos : self._pos + n]
        self._pos += chunk.shape[0]
        return chunk

    def close(self) -> None:
        self._open = False
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class WavFileSource(ArraySource):
    """Serve a WAV file as mono int16 at the configured sample rate."""

    def __init__(
        self,
        path: Union[str, Path],
        config: Optional[AudioConfig] = None,
        block_size: Optional[int] = None,
    ):
        super().__init__(None, block_size)
        self.path = Path(path)
        self.config = config or AudioConfig()

    def _load(self) -> np.ndarray:
        import scipy.io.wavfile as wavfile

        try:
            sr, audio = wavfile.read(str(self.path))
        except (OSError, ValueError) as exc:
            raise AudioSourceError(f"could not read {self.path}: {exc}") from exc
        if sr != self.config.sample_rate:
            raise AudioSourceError(
                f"Expected {self.config.sample_rate} Hz, got {sr} Hz. Resample the file."
            )
        logger.info("Loaded %s (%d samples)", self.path, audio.shape[0])
        return to_int16_mono(audio)


def to_int16_mono(audio: np.ndarray) -> np.ndarray:
    """Convert wavfile output (int16/int32/uint8/float, any channel count) to mono int16."""
    audio = np.asarray(audio)
    if audio.dtype == np.int16:
        pcm = audio.astype(np.float64)
    elif audio.dtype == np.int32:
        pcm = audio.astype(np.float64) / 65536.0
    elif audio.dtype == np.uint8:
        pcm = (audio.astype(np.float64) - 128.0) * 256.0
    else:
        pcm = np.clip(audio.astype(np.float64), -1.0, 1.0) * 32767.0
    if pcm.ndim > 1:
        pcm = pcm.mean(axis=1)
    return np.clip(np.round(pcm), -32768, 32767).astype(np.int16)
