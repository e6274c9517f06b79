"""Playback transport and peak metering.

``AudioPlayback`` is the play/pause/seek/volume transport over an
``AudioOutput`` device. ``PeakMeter`` reads the decoded samples under the
play head and produces analyser-style frequency magnitudes for the
left/right peak indicators.
"""

import logging
from collections.abc import Sequence

import numpy as np
from pydantic import BaseModel

from explorer.audio.output import AudioOutput

logger = logging.getLogger(__name__)

FFT_SIZE = 2048
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0
LEFT_BINS = slice(0, 50)
RIGHT_BINS = slice(50, 100)


class PlaybackState(BaseModel):
    """Snapshot of the transport for the shell."""

    path: str | None = None
    position: float = 0.0
    duration: float = 0.0
    is_playing: bool = False
    volume: float = 1.0


class AudioPlayback:
    """Play/pause/seek transport over an audio output device.

    The device owns the clock: position, end of media and (when it knows
    it) duration are read from it. The decoded length is only used while
    the device cannot report one.

    Attributes:
        data: The encoded audio bytes being played.
        mime_type: Playback MIME type of ``data``.
        output: The device playing ``data``.
        volume: Output volume in ``[0, 1]``.
        is_playing: Whether playback is running.
    """

    def __init__(self, data: bytes, mime_type: str, output: AudioOutput, duration: float = 0.0) -> None:
        self.data = data
        self.mime_type = mime_type
        self.output = output
        self.volume = 1.0
        self.is_playing = False
        self.released = False
        self._known_duration = max(duration, 0.0)

    @property
    def duration(self) -> float:
        """Length in seconds; 0 when neither the device nor the decoder knows it."""
        if self.released:
            return self._known_duration
        return self.output.duration or self._known_duration

    @duration.setter
    def duration(self, value: float) -> None:
        self._known_duration = max(value, 0.0)

    @property
    def position(self) -> float:
        """Current play head in seconds, clamped to the duration when known."""
        if self.released:
            return 0.0
        position = self.output.position
        if self.duration:
            position = min(position, self.duration)
        return position

    @property
    def ended(self) -> bool:
        if self.released:
            return False
        return self.output.ended or (bool(self.duration) and self.position >= self.duration)

    def play(self) -> bool:
        """Start or resume playback; restarts from 0 after the end.

        Returns:
            Whether playback is running.
        """
        if self.released:
            return False
        if self.is_playing:
            return True
        if self.ended:
            self.output.stop()
        self.output.set_volume(self.volume)
        self.is_playing = self.output.play()
        if not self.is_playing:
            logger.warning(f"Audio output refused to play {self.mime_type} payload")
        return self.is_playing

    def pause(self) -> None:
        """Freeze the play head."""
        if not self.released:
            self.output.pause()
        self.is_playing = False

    def toggle(self) -> bool:
        """Play if paused, pause if playing; returns the new playing state."""
        if self.is_playing:
            self.pause()
            return False
        return self.play()

    def stop(self) -> None:
        """Stop and rewind to the start."""
        if not self.released:
            self.output.stop()
        self.is_playing = False

    def seek(self, fraction: float) -> float:
        """Move the play head to a fraction of the duration.

        Args:
            fraction: Target position; clamped to ``[0, 1]``.

        Returns:
            The new position in seconds.
        """
        if self.released:
            return 0.0
        fraction = min(max(fraction, 0.0), 1.0)
        target = fraction * self.duration
        self.output.seek(target)
        return target

    def seek_from_pointer(self, x: float, surface_width: float) -> float:
        """Seek to the position under a pointer on the waveform surface."""
        if surface_width <= 0:
            return self.position
        return self.seek(x / surface_width)

    def set_volume(self, volume: float) -> float:
        """Set the output volume, clamped to ``[0, 1]``."""
        self.volume = min(max(volume, 0.0), 1.0)
        if not self.released:
            self.output.set_volume(self.volume)
        return self.volume

    def release(self) -> None:
        """Stop, free the device and drop the payload."""
        if self.released:
            return
        self.is_playing = False
        self.output.release()
        self.data = b""
        self.released = True


def frequency_bins(frame: np.ndarray, fft_size: int = FFT_SIZE) -> np.ndarray:
    """Byte-scaled magnitude spectrum of one frame.

    The frame is zero-padded to ``fft_size``, Hann-windowed, and each bin's
    magnitude in decibels is mapped linearly from ``[-100, -30]`` dB onto
    ``[0, 255]``.

    Returns:
        uint8 array of ``fft_size // 2`` bins.
    """
    padded = np.zeros(fft_size, dtype=np.float64)
    frame = np.asarray(frame, dtype=np.float64)[:fft_size]
    padded[: len(frame)] = frame
    spectrum = np.abs(np.fft.rfft(padded * np.hanning(fft_size)))[: fft_size // 2] / fft_size
    decibels = 20 * np.log10(np.maximum(spectrum, 1e-12))
    scaled = (decibels - MIN_DECIBELS) / (MAX_DECIBELS - MIN_DECIBELS) * 255
    return np.clip(scaled, 0, 255).astype(np.uint8)


def peak_levels(bins: np.ndarray) -> tuple[float, float]:
    """Left/right peak indicators from the low and next-higher bin ranges."""
    left = bins[LEFT_BINS]
    right = bins[RIGHT_BINS]
    return (
        float(left.max()) / 255 if left.size else 0.0,
        float(right.max()) / 255 if right.size else 0.0,
    )


class PeakMeter:
    """Reads peak levels at a play position from decoded samples."""

    def __init__(self, channels: Sequence[np.ndarray], sample_rate: int) -> None:
        self.sample_rate = sample_rate
        self._mono = np.mean(np.vstack(channels), axis=0) if channels else np.zeros(0)

    def read(self, position: float) -> tuple[float, float]:
        """Peak levels for the frame starting at position seconds."""
        if not self.sample_rate or not self._mono.size:
            return 0.0, 0.0
        start = int(position * self.sample_rate)
        frame = self._mono[start : start + FFT_SIZE]
        if not frame.size:
            return 0.0, 0.0
        return peak_levels(frequency_bins(frame))

    def release(self) -> None:
        self._mono = np.zeros(0)
