"""Waveform envelopes and their rendering.

A channel is reduced to one mean absolute amplitude per horizontal pixel,
normalized by the channel's own peak, and drawn as vertical strokes around
the centre line. The first channel is drawn at full scale; further
channels are overlaid at reduced scale in a second colour.
"""

from collections.abc import Sequence

import numpy as np
from PIL import Image, ImageDraw
from pydantic import BaseModel, Field

BACKGROUND = "#0f0f0f"
PRIMARY_COLOR = "#4ecdc4"
SECONDARY_COLOR = "#ff6b6b"
PRIMARY_SCALE = 0.8
SECONDARY_SCALE = 0.4
PLACEHOLDER_SEGMENTS = 1000


def downsample_envelope(channel: np.ndarray, width: int) -> np.ndarray:
    """Reduce samples to ``width`` blocks of mean absolute amplitude.

    Samples beyond ``width * (len // width)`` are ignored. A channel with
    fewer samples than ``width`` gets one sample per block and zeros after.

    Args:
        channel: One channel of samples.
        width: Number of blocks (the render surface width).

    Returns:
        Float64 array of length ``width``.
    """
    if width <= 0:
        raise ValueError("width must be positive")
    samples = np.abs(np.asarray(channel, dtype=np.float64))
    if len(samples) < width:
        envelope = np.zeros(width, dtype=np.float64)
        envelope[: len(samples)] = samples
        return envelope
    block = len(samples) // width
    return samples[: block * width].reshape(width, block).mean(axis=1)


def normalize_envelope(envelope: np.ndarray) -> np.ndarray:
    """Scale an envelope so its maximum is exactly 1.0.

    An all-silent (or empty) envelope yields all zeros instead of dividing
    by zero.
    """
    envelope = np.asarray(envelope, dtype=np.float64)
    peak = float(envelope.max()) if envelope.size else 0.0
    if peak <= 0.0 or not np.isfinite(peak):
        return np.zeros_like(envelope)
    return envelope / peak


def placeholder_envelope(
    segments: int = PLACEHOLDER_SEGMENTS,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Pseudo-random amplitudes in ``[0.1, 0.9)`` for undecodable audio."""
    rng = rng or np.random.default_rng()
    return rng.random(segments) * 0.8 + 0.1


class WaveformLayer(BaseModel):
    """Vertical strokes drawn in one colour.

    Attributes:
        color: Stroke colour.
        line_width: Stroke width in pixels.
        strokes: ``(x, y_top, y_bottom)`` per stroke.
    """

    color: str
    line_width: int = 1
    strokes: list[tuple[float, float, float]] = Field(default_factory=list)


class WaveformRender(BaseModel):
    """A waveform ready to draw on a surface of the given size."""

    width: int
    height: int
    background: str = BACKGROUND
    layers: list[WaveformLayer] = Field(default_factory=list)
    placeholder: bool = False

    def to_image(self) -> Image.Image:
        """Rasterize the waveform with Pillow."""
        image = Image.new("RGB", (self.width, self.height), self.background)
        draw = ImageDraw.Draw(image)
        for layer in self.layers:
            for x, top, bottom in layer.strokes:
                draw.line([(x, top), (x, bottom)], fill=layer.color, width=layer.line_width)
        return image


def _layer(envelope: np.ndarray, width: int, height: int, scale: float, color: str, line_width: int) -> WaveformLayer:
    center = height / 2
    count = len(envelope)
    strokes = []
    for i, amplitude in enumerate(envelope):
        x = i / count * width
        reach = float(amplitude) * center * scale
        strokes.append((x, center - reach, center + reach))
    return WaveformLayer(color=color, line_width=line_width, strokes=strokes)


def render_waveform(channels: Sequence[np.ndarray], width: int, height: int) -> WaveformRender:
    """Build the waveform for decoded channels.

    Args:
        channels: Per-channel samples.
        width: Surface width; also the number of envelope blocks.
        height: Surface height.
    """
    render = WaveformRender(width=width, height=height)
    for index, channel in enumerate(channels):
        envelope = normalize_envelope(downsample_envelope(channel, width))
        if index == 0:
            render.layers.append(_layer(envelope, width, height, PRIMARY_SCALE, PRIMARY_COLOR, 2))
        else:
            render.layers.append(_layer(envelope, width, height, SECONDARY_SCALE, SECONDARY_COLOR, 1))
    return render


def render_placeholder(
    width: int,
    height: int,
    rng: np.random.Generator | None = None,
) -> WaveformRender:
    """Build a synthetic waveform shown when decoding fails."""
    envelope = placeholder_envelope(rng=rng)
    return WaveformRender(
        width=width,
        height=height,
        layers=[_layer(envelope, width, height, PRIMARY_SCALE, PRIMARY_COLOR, 1)],
        placeholder=True,
    )
