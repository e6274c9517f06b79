"""Decoding audio payloads into per-channel sample arrays."""

import asyncio
import io
import logging
from dataclasses import dataclass, field

import numpy as np
import soundfile as sf

logger = logging.getLogger(__name__)


class AudioDecodeError(Exception):
    """The payload could not be decoded into samples.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass
class DecodedAudio:
    """Decoded samples, one float32 array per channel.

    Attributes:
        channels: Samples per channel, all of equal length.
        sample_rate: Frames per second.
    """

    channels: list[np.ndarray] = field(default_factory=list)
    sample_rate: int = 0

    @property
    def frames(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration(self) -> float:
        """Length in seconds."""
        if not self.sample_rate:
            return 0.0
        return self.frames / self.sample_rate

    def release(self) -> None:
        """Drop the sample buffers."""
        self.channels = []


def decode_audio(data: bytes) -> DecodedAudio:
    """Decode an in-memory audio file.

    Args:
        data: The raw file contents.

    Returns:
        The decoded channels.

    Raises:
        AudioDecodeError: If the format is unsupported or the data is corrupt.
    """
    if not data:
        raise AudioDecodeError("Empty audio payload")
    try:
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    except (sf.SoundFileError, RuntimeError, ValueError) as e:
        raise AudioDecodeError(f"Could not decode audio: {e}") from e
    if samples.size == 0:
        raise AudioDecodeError("Audio payload contains no samples")
    channels = [np.ascontiguousarray(samples[:, i]) for i in range(samples.shape[1])]
    logger.debug(f"Decoded {len(channels)} channel(s), {samples.shape[0]} frames at {sample_rate} Hz")
    return DecodedAudio(channels=channels, sample_rate=int(sample_rate))


async def decode_audio_async(data: bytes) -> DecodedAudio:
    """Decode off the event loop thread.

    Raises:
        AudioDecodeError: If decoding fails.
    """
    return await asyncio.to_thread(decode_audio, data)
