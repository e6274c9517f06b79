"""Tests for AudioWaveformPipeline and AudioSession."""

import asyncio

import numpy as np
import pytest

from agent_client.exceptions import AgentOperationError
from explorer.audio.pipeline import AudioSession, AudioWaveformPipeline
from explorer.audio.player import AudioPlayback, PlaybackState
from explorer.audio.waveform import WaveformRender
from explorer.status import Severity, StatusLine, StatusMessage
from tests.fixtures.audio import FakeOutput, FakeOutputs


class Recorder:
    """Collects every pipeline callback."""

    def __init__(self) -> None:
        self.outputs = FakeOutputs()
        self.waveforms: list[WaveformRender] = []
        self.progress: list[tuple[float, float, float]] = []
        self.peaks: list[tuple[float, float]] = []
        self.states: list[PlaybackState] = []
        self.status: list[StatusMessage] = []

    def pipeline(self, files, **kwargs) -> AudioWaveformPipeline:
        return AudioWaveformPipeline(
            files,
            status=StatusLine(sink=self.status.append),
            width=64,
            height=32,
            on_waveform=self.waveforms.append,
            on_progress=lambda *args: self.progress.append(args),
            on_peaks=lambda *args: self.peaks.append(args),
            on_state=self.states.append,
            progress_interval=0.005,
            peak_interval=0.005,
            rng=np.random.default_rng(0),
            output_factory=self.outputs,
            **kwargs,
        )


class GatedFiles:
    """read_binary waits for a per-path gate."""

    def __init__(self, payloads: dict[str, bytes]) -> None:
        self.payloads = payloads
        self.gates: dict[str, asyncio.Event] = {}

    async def read_binary(self, path: str) -> bytes:
        if path in self.gates:
            await self.gates[path].wait()
        if path not in self.payloads:
            raise AgentOperationError(f"Not found: {path}", operation="read_binary", path=path)
        return self.payloads[path]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def pipeline(recorder, audio_fs, async_client) -> AudioWaveformPipeline:
    pipeline = recorder.pipeline(async_client.files)
    yield pipeline
    pipeline.close()


# =============================================================================
# Loading
# =============================================================================


class TestLoadAudio:
    async def test_load_decodes_and_renders(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")

        assert session is pipeline.session
        assert session.mime_type == "audio/wav"
        assert len(session.channels) == 2
        assert session.sample_rate == 8000
        assert session.playback.duration == pytest.approx(0.5)
        assert recorder.waveforms == [session.waveform]
        assert not session.waveform.placeholder
        assert len(session.waveform.layers) == 2
        assert recorder.states[-1].path == "C:\\Music\\tone.wav"
        assert recorder.status[-1] == StatusMessage(text="Loaded tone.wav", severity=Severity.SUCCESS)

    async def test_undecodable_file_gets_placeholder(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\broken.mp3")

        assert session is not None
        assert session.decoded is None
        assert session.waveform.placeholder
        assert session.playback.duration == 0.0
        assert session.mime_type == "audio/mpeg"
        assert recorder.status[-1].severity is Severity.SUCCESS

    async def test_undecodable_file_still_plays(self, pipeline, recorder) -> None:
        recorder.outputs.duration = 3.0
        session = await pipeline.load_audio("C:\\Music\\broken.mp3")
        output = recorder.outputs.last

        assert output.data == b"definitely not audio"
        assert output.mime_type == "audio/mpeg"
        assert session.playback.duration == 3.0
        session.play()
        assert output.playing
        session.seek(0.5)
        assert session.position_seconds == pytest.approx(1.5, abs=0.05)
        session.pause()

    async def test_fetch_failure(self, pipeline, recorder) -> None:
        assert await pipeline.load_audio("C:\\Music\\missing.wav") is None
        assert pipeline.session is None
        assert recorder.status[-1].severity is Severity.ERROR
        assert recorder.status[-1].text.startswith("Failed to load audio")

    async def test_new_load_releases_previous_session(self, pipeline, recorder) -> None:
        first = await pipeline.load_audio("C:\\Music\\tone.wav")
        first.play()
        second = await pipeline.load_audio("C:\\Music\\broken.mp3")

        assert first.closed
        assert first.playback.released
        assert recorder.outputs.opened[0].released
        assert not recorder.outputs.last.released
        assert first.decoded is None
        assert not first.loops_running
        assert pipeline.session is second

    async def test_superseded_load_is_discarded(self, recorder, stereo_wav) -> None:
        files = GatedFiles({"C:\\a.wav": stereo_wav, "C:\\b.wav": stereo_wav})
        gate = files.gates["C:\\a.wav"] = asyncio.Event()
        pipeline = recorder.pipeline(files)

        slow = asyncio.create_task(pipeline.load_audio("C:\\a.wav"))
        await asyncio.sleep(0)
        fast = await pipeline.load_audio("C:\\b.wav")
        gate.set()

        assert await slow is None
        assert pipeline.session is fast
        assert fast.source_path == "C:\\b.wav"
        assert len(recorder.waveforms) == 1
        assert len(recorder.outputs.opened) == 1
        pipeline.close()

    async def test_superseded_failure_is_silent(self, recorder, stereo_wav) -> None:
        files = GatedFiles({"C:\\b.wav": stereo_wav})
        gate = files.gates["C:\\missing.wav"] = asyncio.Event()
        pipeline = recorder.pipeline(files)

        slow = asyncio.create_task(pipeline.load_audio("C:\\missing.wav"))
        await asyncio.sleep(0)
        await pipeline.load_audio("C:\\b.wav")
        gate.set()

        assert await slow is None
        assert not any(m.severity is Severity.ERROR for m in recorder.status)
        pipeline.close()

    async def test_close_emits_empty_state(self, pipeline, recorder) -> None:
        await pipeline.load_audio("C:\\Music\\tone.wav")
        pipeline.close()
        assert pipeline.session is None
        assert recorder.states[-1] == PlaybackState()
        pipeline.close()


# =============================================================================
# Playback loops
# =============================================================================


class TestPlaybackLoops:
    async def test_loops_run_only_while_playing(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        assert not session.loops_running

        pipeline.toggle_play_pause()
        assert session.is_playing
        assert session.loops_running
        await asyncio.sleep(0.03)
        assert recorder.progress
        assert recorder.peaks

        pipeline.toggle_play_pause()
        assert not session.is_playing
        assert not session.loops_running
        assert recorder.peaks[-1] == (0.0, 0.0)

    async def test_progress_reports_position(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        session.seek(0.5)
        position, duration, x = recorder.progress[-1]
        assert position == pytest.approx(0.25)
        assert duration == pytest.approx(0.5)
        assert x == pytest.approx(32)

    async def test_playback_stops_at_end(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        session.seek(0.95)
        session.play()
        await asyncio.sleep(0.2)

        assert not session.is_playing
        assert not session.loops_running
        assert session.position_seconds == pytest.approx(0.5)
        assert recorder.states[-1].is_playing is False

    async def test_stop_rewinds(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        session.play()
        await asyncio.sleep(0.02)
        pipeline.stop()
        assert session.position_seconds == 0.0
        assert recorder.progress[-1][0] == 0.0
        assert not session.loops_running

    async def test_placeholder_session_plays_without_meter(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\broken.mp3")
        session.play()
        assert session.is_playing
        await asyncio.sleep(0.02)
        assert recorder.peaks == []
        session.pause()

    async def test_seek_from_pointer(self, pipeline) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        session.seek_from_pointer(16)
        assert session.position_seconds == pytest.approx(0.125)

    async def test_volume(self, pipeline, recorder) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        assert session.set_volume(0.3) == 0.3
        assert recorder.states[-1].volume == 0.3
        assert recorder.outputs.last.volume == 0.3

    async def test_closed_session_does_not_play(self, pipeline) -> None:
        session = await pipeline.load_audio("C:\\Music\\tone.wav")
        session.close()
        session.play()
        assert not session.is_playing
        assert not session.loops_running


class TestAudioSession:
    def test_state_before_attach(self) -> None:
        session = AudioSession("C:\\a.wav", AudioPlayback(b"x", "audio/wav", FakeOutput(b"x", "audio/wav")))
        assert session.channels == []
        assert session.sample_rate == 0
        assert session.state == PlaybackState(path="C:\\a.wav")

    def test_close_outside_loop(self) -> None:
        peaks: list[tuple[float, float]] = []
        playback = AudioPlayback(b"x", "audio/wav", FakeOutput(b"x", "audio/wav"))
        session = AudioSession("C:\\a.wav", playback, on_peaks=lambda *a: peaks.append(a))
        session.close()
        session.close()
        assert session.closed
        assert peaks == [(0.0, 0.0)]
