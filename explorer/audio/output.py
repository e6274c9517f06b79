"""Audio output devices for the playback transport.

``AudioOutput`` is what ``AudioPlayback`` drives. ``VlcOutput`` plays the
fetched payload with libvlc through python-vlc, so every container VLC
understands is audible, including files soundfile cannot decode for the
waveform. Position and duration are read back from the player.
"""

import logging
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from explorer.audio.formats import suffix_for_mime_type

logger = logging.getLogger(__name__)

VLC_OPTIONS = ("--no-video", "--quiet")


class AudioOutput(ABC):
    """A device playing one encoded audio payload.

    Positions and durations are in seconds. A duration of 0 means the
    device does not know the length (yet).
    """

    @property
    @abstractmethod
    def duration(self) -> float:
        """Length reported by the device."""

    @property
    @abstractmethod
    def position(self) -> float:
        """Current play head."""

    @property
    @abstractmethod
    def ended(self) -> bool:
        """Whether playback ran to the end of the media."""

    @abstractmethod
    def play(self) -> bool:
        """Start or resume; returns False if the device refused."""

    @abstractmethod
    def pause(self) -> None:
        """Freeze the play head."""

    @abstractmethod
    def stop(self) -> None:
        """Stop and rewind to the start."""

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """Move the play head."""

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        """Set the output gain in ``[0, 1]``."""

    @abstractmethod
    def release(self) -> None:
        """Stop and free the device; it is unusable afterwards."""


OutputFactory = Callable[[bytes, str], AudioOutput]


class VlcOutput(AudioOutput):
    """libvlc media player over a temporary copy of the payload.

    libvlc opens media by location, so the bytes are written to a temporary
    file whose suffix matches the MIME type. The file is removed on release.
    """

    def __init__(self, data: bytes, mime_type: str) -> None:
        import vlc

        self._vlc = vlc
        suffix = suffix_for_mime_type(mime_type)
        with tempfile.NamedTemporaryFile(prefix="explorer-", suffix=suffix, delete=False) as f:
            f.write(data)
            self._path = Path(f.name)
        self._instance = vlc.Instance(*VLC_OPTIONS)
        self._player = self._instance.media_player_new()
        self._media = self._instance.media_new(str(self._path))
        self._media.parse()
        self._player.set_media(self._media)
        self._start_at = 0.0
        logger.debug(f"Opened VLC output for {mime_type} ({len(data)} bytes)")

    @property
    def duration(self) -> float:
        length = self._player.get_length()
        if length <= 0:
            length = self._media.get_duration()
        return max(length, 0) / 1000

    @property
    def position(self) -> float:
        if self._state() in (self._vlc.State.Playing, self._vlc.State.Paused):
            return max(self._player.get_time(), 0) / 1000
        if self.ended:
            return self.duration
        return self._start_at

    @property
    def ended(self) -> bool:
        return self._state() == self._vlc.State.Ended

    def play(self) -> bool:
        state = self._state()
        if state == self._vlc.State.Paused:
            self._player.set_pause(0)
            return True
        if state == self._vlc.State.Ended:
            self._player.stop()
        # A stopped player reopens the media, so the start offset travels as an option
        self._media.add_option(f":start-time={self._start_at:.3f}")
        return self._player.play() == 0

    def pause(self) -> None:
        if self._state() == self._vlc.State.Playing:
            self._player.set_pause(1)

    def stop(self) -> None:
        self._player.stop()
        self._start_at = 0.0

    def seek(self, seconds: float) -> None:
        if self._state() in (self._vlc.State.Playing, self._vlc.State.Paused):
            self._player.set_time(int(seconds * 1000))
        else:
            self._start_at = seconds

    def set_volume(self, volume: float) -> None:
        self._player.audio_set_volume(round(volume * 100))

    def release(self) -> None:
        self._player.stop()
        self._player.release()
        self._media.release()
        self._instance.release()
        self._path.unlink(missing_ok=True)
        logger.debug(f"Released VLC output {self._path.name}")

    def _state(self):
        return self._player.get_state()


def open_vlc_output(data: bytes, mime_type: str) -> AudioOutput:
    """Default output factory: play the payload through libvlc."""
    return VlcOutput(data, mime_type)
