"""Audio file type helpers."""

import math

from explorer.paths import extension

AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "aif", "aiff", "ogg", "flac", "m4a", "aac"})

DEFAULT_MIME_TYPE = "audio/mpeg"

MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "aif": "audio/aiff",
    "aiff": "audio/aiff",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
}

FORMAT_LABELS = {
    "mp3": "MP3 • 44.1kHz • 16bit • Stereo",
    "wav": "WAV • 44.1kHz • 16bit • Stereo",
    "aif": "AIFF • 44.1kHz • 16bit • Stereo",
    "aiff": "AIFF • 44.1kHz • 16bit • Stereo",
    "flac": "FLAC • 44.1kHz • 24bit • Stereo",
    "ogg": "OGG • 44.1kHz • 16bit • Stereo",
    "m4a": "AAC • 44.1kHz • 16bit • Stereo",
    "aac": "AAC • 44.1kHz • 16bit • Stereo",
}


def is_audio_file(path: str) -> bool:
    """Whether a path has one of the previewable audio extensions."""
    return extension(path) in AUDIO_EXTENSIONS


def mime_type_for(path: str) -> str:
    """Playback MIME type for a path, falling back to audio/mpeg."""
    return MIME_TYPES.get(extension(path), DEFAULT_MIME_TYPE)


def audio_format_label(ext: str) -> str:
    """Short format description shown next to the file name."""
    ext = ext.lower().lstrip(".")
    return FORMAT_LABELS.get(ext, f"{ext.upper()} • Audio file")


def format_time(seconds: float | None) -> str:
    """Format seconds as ``m:ss``; unknown values show as ``0:00``."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "0:00"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def suffix_for_mime_type(mime_type: str) -> str:
    """File suffix a media player recognizes for a playback MIME type."""
    for ext, mime in MIME_TYPES.items():
        if mime == mime_type:
            return f".{ext}"
    return ".mp3"
