"""Audio preview: decoding, waveform rendering and playback."""

from explorer.audio.decode import AudioDecodeError, DecodedAudio, decode_audio, decode_audio_async
from explorer.audio.formats import (
    AUDIO_EXTENSIONS,
    audio_format_label,
    format_time,
    is_audio_file,
    mime_type_for,
)
from explorer.audio.output import AudioOutput, VlcOutput, open_vlc_output
from explorer.audio.pipeline import AudioSession, AudioWaveformPipeline
from explorer.audio.player import AudioPlayback, PeakMeter, PlaybackState, frequency_bins, peak_levels
from explorer.audio.waveform import (
    WaveformLayer,
    WaveformRender,
    downsample_envelope,
    normalize_envelope,
    placeholder_envelope,
    render_placeholder,
    render_waveform,
)

__all__ = [
    "AUDIO_EXTENSIONS",
    "AudioDecodeError",
    "AudioOutput",
    "AudioPlayback",
    "AudioSession",
    "AudioWaveformPipeline",
    "DecodedAudio",
    "PeakMeter",
    "PlaybackState",
    "VlcOutput",
    "WaveformLayer",
    "WaveformRender",
    "audio_format_label",
    "decode_audio",
    "decode_audio_async",
    "downsample_envelope",
    "format_time",
    "frequency_bins",
    "is_audio_file",
    "mime_type_for",
    "normalize_envelope",
    "open_vlc_output",
    "peak_levels",
    "placeholder_envelope",
    "render_placeholder",
    "render_waveform",
]
