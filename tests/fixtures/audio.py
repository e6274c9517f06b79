"""Audio payloads and output devices for decode, playback and pipeline tests."""

import io
import time

import numpy as np
import pytest
import soundfile as sf

from explorer.audio.output import AudioOutput

SAMPLE_RATE = 8000


def make_wav(channels: int = 2, seconds: float = 0.5, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Encode a sine tone (a quieter copy on the second channel) as WAV."""
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    tone = 0.5 * np.sin(2 * np.pi * 440 * t)
    data = np.column_stack([tone * (0.5 if i else 1.0) for i in range(channels)])
    buffer = io.BytesIO()
    sf.write(buffer, data, sample_rate, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


class FakeOutput(AudioOutput):
    """An output device that advances on a clock instead of making sound.

    Attributes:
        reported_duration: Length the device reports; 0 for unknown.
        volume: Last gain set by the transport.
        released: Whether the transport freed the device.
        refuse_play: Make ``play`` fail like a device that cannot open.
    """

    def __init__(self, data: bytes, mime_type: str, duration: float = 0.0, clock=time.monotonic) -> None:
        self.data = data
        self.mime_type = mime_type
        self.reported_duration = duration
        self.volume = 1.0
        self.playing = False
        self.released = False
        self.refuse_play = False
        self._clock = clock
        self._offset = 0.0
        self._started_at = 0.0

    @property
    def duration(self) -> float:
        return self.reported_duration

    @property
    def position(self) -> float:
        if self.playing:
            return self._offset + self._clock() - self._started_at
        return self._offset

    @property
    def ended(self) -> bool:
        return bool(self.reported_duration) and self.position >= self.reported_duration

    def play(self) -> bool:
        if self.released or self.refuse_play:
            return False
        if not self.playing:
            self._started_at = self._clock()
            self.playing = True
        return True

    def pause(self) -> None:
        self._offset = self.position
        self.playing = False

    def stop(self) -> None:
        self.playing = False
        self._offset = 0.0

    def seek(self, seconds: float) -> None:
        self._offset = seconds
        self._started_at = self._clock()

    def set_volume(self, volume: float) -> None:
        self.volume = volume

    def release(self) -> None:
        self.stop()
        self.released = True


class FakeOutputs:
    """Output factory that records every device it opens.

    Attributes:
        opened: Devices in the order they were opened.
        duration: Length the next devices report.
    """

    def __init__(self) -> None:
        self.opened: list[FakeOutput] = []
        self.duration = 0.0

    def __call__(self, data: bytes, mime_type: str) -> FakeOutput:
        output = FakeOutput(data, mime_type, duration=self.duration)
        self.opened.append(output)
        return output

    @property
    def last(self) -> FakeOutput:
        return self.opened[-1]


@pytest.fixture
def stereo_wav() -> bytes:
    return make_wav(channels=2)


@pytest.fixture
def mono_wav() -> bytes:
    return make_wav(channels=1)


@pytest.fixture
def audio_fs(fake_fs, stereo_wav):
    """The standard tree plus a decodable and an undecodable audio file."""
    fake_fs.add_file("C:\\Music\\tone.wav", stereo_wav)
    fake_fs.add_file("C:\\Music\\broken.mp3", b"definitely not audio")
    return fake_fs


@pytest.fixture
def audio_outputs() -> FakeOutputs:
    """Output factory standing in for libvlc."""
    return FakeOutputs()
