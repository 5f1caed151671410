"""Audio access for word-level analysis.

WAV files are read with torchaudio; any other container is decoded with
the system FFmpeg binary. Both end up as an in-memory mono waveform from
which per-word windows are sliced.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

import numpy as np
import torch
import torchaudio

logger = logging.getLogger(__name__)

FFMPEG_BIN = "ffmpeg"

FFMPEG_INSTALL_HELP = """
FFmpeg is required but not found. Install it:

  Windows:   winget install "FFmpeg (Shared)"
  macOS:     brew install ffmpeg
  Linux:     sudo apt install ffmpeg

After installation, restart your terminal.
""".strip()


class FFmpegNotFoundError(RuntimeError):
    """Raised when FFmpeg is not available."""

    def __init__(self):
        super().__init__(FFMPEG_INSTALL_HELP)


class AudioDecodeError(RuntimeError):
    """Raised when an audio file or window cannot be decoded."""


class AudioSource(Protocol):
    """Accessor returning mono PCM for a time range."""

    def read(self, start: float, end: float, sample_rate: int) -> np.ndarray:
        """Samples for ``[start, end)`` at ``sample_rate``; empty if unavailable."""
        ...


def check_ffmpeg() -> None:
    """Check if FFmpeg is available in PATH.

    Raises:
        FFmpegNotFoundError: If FFmpeg is not found.
    """
    if shutil.which(FFMPEG_BIN) is None:
        raise FFmpegNotFoundError()


def load_audio(file: str, sr: int = 16000) -> np.ndarray:
    """Load audio file and convert to float32 array at specified sample rate.

    Uses FFmpeg to decode any audio format to raw PCM.

    Args:
        file: Path to audio file.
        sr: Target sample rate (default 16000 Hz).

    Returns:
        Audio samples as float32 numpy array, normalized to [-1, 1].

    Raises:
        AudioDecodeError: If FFmpeg fails to decode the file.
    """
    cmd = [
        FFMPEG_BIN,
        "-nostdin",
        "-threads", "0",
        "-i", file,
        "-f", "s16le",
        "-ac", "1",
        "-acodec", "pcm_s16le",
        "-ar", str(sr),
        "-",
    ]
    try:
        out = subprocess.run(cmd, capture_output=True, check=True).stdout
    except subprocess.CalledProcessError as e:
        raise AudioDecodeError(f"Failed to load audio: {e.stderr.decode(errors='replace')}") from e
    return np.frombuffer(out, np.int16).flatten().astype(np.float32) / 32768.0


def to_mono(waveform: torch.Tensor) -> torch.Tensor:
    """Downmix a (channels, samples) tensor to (1, samples)."""
    if waveform.dim() == 1:
        return waveform.unsqueeze(0)
    if waveform.shape[0] > 1:
        waveform = waveform.mean(dim=0, keepdim=True)
    return waveform


def resample(waveform: torch.Tensor, orig_sr: int, target_sr: int) -> torch.Tensor:
    if orig_sr == target_sr:
        return waveform
    return torchaudio.functional.resample(waveform, orig_sr, target_sr)


class WaveformSource:
    """In-memory mono waveform with per-rate caching of resampled copies."""

    def __init__(self, samples: np.ndarray | torch.Tensor, sample_rate: int):
        if isinstance(samples, np.ndarray):
            if np.issubdtype(samples.dtype, np.integer):
                samples = samples.astype(np.float32) / 32768.0
            samples = torch.from_numpy(np.ascontiguousarray(samples, dtype=np.float32))
        self.sample_rate = sample_rate
        self._waveforms: dict[int, torch.Tensor] = {sample_rate: to_mono(samples.float())}

    @property
    def duration(self) -> float:
        return self._waveforms[self.sample_rate].shape[1] / self.sample_rate

    def _at_rate(self, sample_rate: int) -> torch.Tensor:
        if sample_rate not in self._waveforms:
            self._waveforms[sample_rate] = resample(
                self._waveforms[self.sample_rate], self.sample_rate, sample_rate
            )
        return self._waveforms[sample_rate]

    def read(self, start: float, end: float, sample_rate: int) -> np.ndarray:
        """Contiguous window ``[start, end)``; clipped to the recording."""
        waveform = self._at_rate(sample_rate)
        total = waveform.shape[1]
        start_sample = min(total, max(0, int(start * sample_rate)))
        end_sample = min(total, max(start_sample, int(end * sample_rate)))
        return waveform[0, start_sample:end_sample].numpy()


def open_audio(path: Path, sample_rate: int = 16000) -> WaveformSource:
    """Load a recording as a mono WaveformSource at ``sample_rate``.

    Raises:
        FileNotFoundError: If the file does not exist.
        FFmpegNotFoundError: If a non-WAV file needs FFmpeg and it is missing.
        AudioDecodeError: If decoding fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    if path.suffix.lower() == ".wav":
        try:
            waveform, sr = torchaudio.load(str(path))
        except (RuntimeError, OSError) as e:
            raise AudioDecodeError(f"Failed to load {path.name}: {e}") from e
        waveform = resample(to_mono(waveform), sr, sample_rate)
        logger.debug("Loaded %s (%d Hz -> %d Hz, %d samples)", path.name, sr, sample_rate, waveform.shape[1])
        return WaveformSource(waveform, sample_rate)

    check_ffmpeg()
    samples = load_audio(str(path), sr=sample_rate)
    logger.debug("Decoded %s with FFmpeg (%d samples)", path.name, samples.size)
    return WaveformSource(samples, sample_rate)
