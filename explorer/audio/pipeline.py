"""Audio preview pipeline: fetch, decode, waveform, playback loops.

Exactly one ``AudioSession`` is live at a time. Loading a new file or
closing the player releases the current session (its loops, transport and
decoded buffers) before anything new is assigned.
"""

import asyncio
import logging
from collections.abc import Callable

import numpy as np

from agent_client._files import AsyncFilesClient
from agent_client.exceptions import FileAgentClientError
from explorer.audio.decode import AudioDecodeError, DecodedAudio, decode_audio_async
from explorer.audio.formats import mime_type_for
from explorer.audio.output import OutputFactory, open_vlc_output
from explorer.audio.player import AudioPlayback, PeakMeter, PlaybackState
from explorer.audio.waveform import WaveformRender, render_placeholder, render_waveform
from explorer.paths import base_name, normalize_path
from explorer.status import StatusLine
from explorer.tasks import ForegroundTracker, RequestGuard

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, float, float], None]
PeaksCallback = Callable[[float, float], None]
StateCallback = Callable[[PlaybackState], None]


class AudioSession:
    """One loaded audio file and its playback loops.

    Attributes:
        source_path: The file being previewed.
        mime_type: Playback MIME type.
        playback: The transport.
        decoded: Decoded samples, or None if decoding failed.
        waveform: The waveform shown for this file.
    """

    def __init__(
        self,
        source_path: str,
        playback: AudioPlayback,
        surface_width: int = 800,
        on_progress: ProgressCallback | None = None,
        on_peaks: PeaksCallback | None = None,
        on_state: StateCallback | None = None,
        progress_interval: float = 1 / 30,
        peak_interval: float = 1 / 60,
    ) -> None:
        self.source_path = source_path
        self.mime_type = playback.mime_type
        self.playback = playback
        self.surface_width = surface_width
        self.decoded: DecodedAudio | None = None
        self.waveform: WaveformRender | None = None
        self.closed = False
        self.progress_interval = progress_interval
        self.peak_interval = peak_interval
        self._meter: PeakMeter | None = None
        self._on_progress = on_progress
        self._on_peaks = on_peaks
        self._on_state = on_state
        self._progress_task: asyncio.Task | None = None
        self._peak_task: asyncio.Task | None = None

    @property
    def channels(self) -> list[np.ndarray]:
        return self.decoded.channels if self.decoded else []

    @property
    def sample_rate(self) -> int:
        return self.decoded.sample_rate if self.decoded else 0

    @property
    def is_playing(self) -> bool:
        return self.playback.is_playing

    @property
    def position_seconds(self) -> float:
        return self.playback.position

    @property
    def loops_running(self) -> bool:
        """Whether the progress or peak-meter loop is active."""
        return any(task is not None and not task.done() for task in (self._progress_task, self._peak_task))

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            path=self.source_path,
            position=self.playback.position,
            duration=self.playback.duration,
            is_playing=self.playback.is_playing,
            volume=self.playback.volume,
        )

    def attach(self, decoded: DecodedAudio | None, waveform: WaveformRender) -> None:
        """Attach the decode outcome and its waveform."""
        self.decoded = decoded
        self.waveform = waveform
        if decoded is not None:
            self.playback.duration = decoded.duration
            self._meter = PeakMeter(decoded.channels, decoded.sample_rate)

    def play(self) -> None:
        if self.closed or not self.playback.play():
            return
        self._start_loops()
        self._emit_state()

    def pause(self) -> None:
        self.playback.pause()
        self._stop_loops()
        self._emit_state()

    def toggle_play_pause(self) -> None:
        if self.playback.is_playing:
            self.pause()
        else:
            self.play()

    def stop(self) -> None:
        """Stop and rewind to the start."""
        self.playback.stop()
        self._stop_loops()
        self._report_progress()
        self._emit_state()

    def seek(self, fraction: float) -> None:
        self.playback.seek(fraction)
        self._report_progress()

    def seek_from_pointer(self, x: float, surface_width: float | None = None) -> None:
        """Seek to where the pointer is on the waveform surface."""
        self.playback.seek_from_pointer(x, surface_width or self.surface_width)
        self._report_progress()

    def set_volume(self, volume: float) -> float:
        volume = self.playback.set_volume(volume)
        self._emit_state()
        return volume

    def close(self) -> None:
        """Cancel the loops and release the transport and decoded buffers."""
        if self.closed:
            return
        self._stop_loops()
        self.playback.release()
        if self.decoded is not None:
            self.decoded.release()
        if self._meter is not None:
            self._meter.release()
        self.decoded = None
        self._meter = None
        self.closed = True
        logger.debug(f"Released audio session for {self.source_path}")

    def _start_loops(self) -> None:
        loop = asyncio.get_running_loop()
        if self._progress_task is None or self._progress_task.done():
            self._progress_task = loop.create_task(self._progress_loop())
        if self._meter is not None and (self._peak_task is None or self._peak_task.done()):
            self._peak_task = loop.create_task(self._peak_loop())

    def _stop_loops(self) -> None:
        current = asyncio.current_task() if _loop_running() else None
        for task in (self._progress_task, self._peak_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
        self._progress_task = None
        self._peak_task = None
        if self._on_peaks is not None:
            self._on_peaks(0.0, 0.0)

    async def _progress_loop(self) -> None:
        while self.playback.is_playing:
            self._report_progress()
            if self.playback.ended:
                self._finish()
                return
            await asyncio.sleep(self.progress_interval)

    async def _peak_loop(self) -> None:
        while self.playback.is_playing and self._meter is not None:
            left, right = self._meter.read(self.playback.position)
            if self._on_peaks is not None:
                self._on_peaks(left, right)
            await asyncio.sleep(self.peak_interval)

    def _finish(self) -> None:
        self.playback.pause()
        self._stop_loops()
        self._emit_state()

    def _report_progress(self) -> None:
        if self._on_progress is None:
            return
        position = self.playback.position
        duration = self.playback.duration
        x = position / duration * self.surface_width if duration else 0.0
        self._on_progress(position, duration, x)

    def _emit_state(self) -> None:
        if self._on_state is not None:
            self._on_state(self.state)


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class AudioWaveformPipeline:
    """Loads audio files for preview and owns the single live session."""

    def __init__(
        self,
        files: AsyncFilesClient,
        status: StatusLine | None = None,
        tracker: ForegroundTracker | None = None,
        width: int = 800,
        height: int = 120,
        on_waveform: Callable[[WaveformRender], None] | None = None,
        on_progress: ProgressCallback | None = None,
        on_peaks: PeaksCallback | None = None,
        on_state: StateCallback | None = None,
        progress_interval: float = 1 / 30,
        peak_interval: float = 1 / 60,
        rng: np.random.Generator | None = None,
        output_factory: OutputFactory | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            files: Async file endpoints of the agent.
            status: Status line for load progress and errors.
            tracker: Marks the binary fetch as foreground work.
            width: Waveform surface width (envelope resolution).
            height: Waveform surface height.
            on_waveform: Receives each rendered waveform.
            on_progress: Receives ``(position, duration, x)`` while playing.
            on_peaks: Receives ``(left, right)`` peak levels while playing.
            on_state: Receives transport state changes.
            progress_interval: Seconds between progress reports.
            peak_interval: Seconds between peak-meter reads.
            rng: Random source for the placeholder waveform.
            output_factory: Opens the playback device for a payload; libvlc
                if omitted.
        """
        self.status = status or StatusLine()
        self.tracker = tracker or ForegroundTracker()
        self.width = width
        self.height = height
        self.guard = RequestGuard("audio")
        self.session: AudioSession | None = None
        self.progress_interval = progress_interval
        self.peak_interval = peak_interval
        self._files = files
        self._rng = rng
        self._output_factory = output_factory or open_vlc_output
        self._on_waveform = on_waveform
        self._on_progress = on_progress
        self._on_peaks = on_peaks
        self._on_state = on_state

    async def load_audio(self, path: str) -> AudioSession | None:
        """Fetch, decode and display an audio file.

        A file that cannot be decoded still loads with a placeholder
        waveform. A load superseded by a newer one is discarded.

        Returns:
            The new session, or None if the fetch failed or was superseded.
        """
        path = normalize_path(path)
        ticket = self.guard.issue(path)
        self.status.loading(f"Loading audio {base_name(path)}...")
        try:
            with self.tracker.busy():
                data = await self._files.read_binary(path)
        except FileAgentClientError as e:
            if self.guard.is_current(ticket):
                logger.info(f"Failed to load audio {path}: {e}")
                self.status.error(f"Failed to load audio: {e}")
            return None
        if not self.guard.is_current(ticket):
            logger.debug(f"Discarding superseded audio load of {path}")
            return None

        self.close()
        mime_type = mime_type_for(path)
        output = await asyncio.to_thread(self._output_factory, data, mime_type)
        if not self.guard.is_current(ticket):
            logger.debug(f"Discarding superseded audio load of {path}")
            output.release()
            return None

        session = AudioSession(
            path,
            AudioPlayback(data, mime_type, output),
            surface_width=self.width,
            on_progress=self._on_progress,
            on_peaks=self._on_peaks,
            on_state=self._on_state,
            progress_interval=self.progress_interval,
            peak_interval=self.peak_interval,
        )
        self.session = session

        try:
            decoded = await decode_audio_async(data)
            waveform = render_waveform(decoded.channels, self.width, self.height)
        except AudioDecodeError as e:
            logger.warning(f"Using placeholder waveform for {path}: {e.message}")
            decoded = None
            waveform = render_placeholder(self.width, self.height, rng=self._rng)

        if not self.guard.is_current(ticket) or session.closed:
            logger.debug(f"Discarding superseded audio decode of {path}")
            if decoded is not None:
                decoded.release()
            if self.session is session:
                self.close()
            return None

        session.attach(decoded, waveform)
        if self._on_waveform is not None:
            self._on_waveform(waveform)
        if self._on_state is not None:
            self._on_state(session.state)
        logger.info(f"Loaded audio {path} ({session.playback.duration:.1f}s)")
        self.status.success(f"Loaded {base_name(path)}")
        return session

    def close(self) -> None:
        """Release the live session, if any."""
        if self.session is not None:
            self.session.close()
            self.session = None
            if self._on_state is not None:
                self._on_state(PlaybackState())

    def toggle_play_pause(self) -> None:
        if self.session is not None:
            self.session.toggle_play_pause()

    def stop(self) -> None:
        if self.session is not None:
            self.session.stop()
