"""Music streaming, sound-effect loading and the final audio mix."""

from __future__ import annotations

import enum
import io
import logging
import struct
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from retroengine.mixer import (
    MAX_VOLUME,
    MIX_BUFFER_SAMPLES,
    SFX_COUNT,
    SfxMixer,
    clamp_samples,
    mix_into,
)

logger = logging.getLogger(__name__)

TRACK_COUNT = 0x10
AUDIO_FREQUENCY = 44100
AUDIO_CHANNELS = 2

MusicDecoder = Callable[[bytes], Sequence[int]]


class MusicStatus(enum.IntEnum):
    STOPPED = 0
    PLAYING = 1
    PAUSED = 2
    LOADING = 3
    READY = 4


@dataclass
class TrackInfo:
    """A music slot: the file to stream and how it loops."""

    file_name: str = ""
    loop: bool = False
    loop_point: int = 0


@dataclass
class _MusicStream:
    samples: tuple[int, ...]
    loop: bool
    loop_point: int
    position: int = 0


class _ConfigReader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise ValueError(f"unexpected end of game config at offset {self._pos}")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def string(self) -> str:
        return self.take(self.u8()).decode("latin-1")


def sfx_display_name(sfx_name: str) -> str:
    """Derive the short name of a sound effect from its path.

    The folder before the first slash and the extension are dropped, and
    spaces are removed: ``"Global/Jump.wav"`` becomes ``"Jump"``.
    """
    mode = 0
    kept: list[str] = []
    for char in sfx_name:
        if char == "." and mode == 1:
            mode = 2
        elif char in "/\\" and mode == 0:
            mode = 1
        elif char != " " and mode == 1:
            kept.append(char)
    return "".join(kept)


def read_global_sfx_names(data: bytes) -> list[str]:
    """Return the global sound-effect paths listed in game configuration data."""
    reader = _ConfigReader(data)
    for _ in range(3):
        reader.string()

    object_count = reader.u8()
    for _ in range(object_count):
        reader.string()
    for _ in range(object_count):
        reader.string()

    for _ in range(reader.u8()):
        reader.string()
        reader.take(4)

    return [reader.string() for _ in range(reader.u8())]


def decode_wav(data: bytes) -> tuple[int, int, list[int]]:
    """Decode WAV data into ``(channels, frame_rate, samples)``.

    Samples are interleaved and widened or narrowed to signed 16 bits.
    """
    try:
        with wave.open(io.BytesIO(data), "rb") as wav:
            channels = wav.getnchannels()
            rate = wav.getframerate()
            width = wav.getsampwidth()
            frames = wav.readframes(wav.getnframes())
    except (wave.Error, EOFError, struct.error) as exc:
        raise ValueError(f"invalid WAV data: {exc}") from exc

    if width == 1:
        samples = [(byte - 128) << 8 for byte in frames]
    elif width == 2:
        count = len(frames) // 2
        samples = list(struct.unpack(f"<{count}h", frames[: count * 2]))
    elif width == 4:
        count = len(frames) // 4
        samples = [value >> 16 for value in struct.unpack(f"<{count}i", frames[: count * 4])]
    else:
        raise ValueError(f"unsupported WAV sample width: {width}")
    return channels, rate, samples


def _to_device_format(channels: int, rate: int, samples: Sequence[int]) -> list[int]:
    """Convert interleaved samples to stereo at the device frequency."""
    if channels <= 0 or rate <= 0:
        raise ValueError("invalid channel count or sample rate")
    frames = [tuple(samples[start:start + channels]) for start in range(0, len(samples) - channels + 1, channels)]
    if channels == 1:
        stereo = [(frame[0], frame[0]) for frame in frames]
    else:
        stereo = [(frame[0], frame[1]) for frame in frames]

    if rate != AUDIO_FREQUENCY and stereo:
        out_count = len(stereo) * AUDIO_FREQUENCY // rate
        stereo = [stereo[min(len(stereo) - 1, index * rate // AUDIO_FREQUENCY)] for index in range(out_count)]

    return [value for frame in stereo for value in frame]


def _decode_wav_music(data: bytes) -> list[int]:
    return _to_device_format(*decode_wav(data))


class AudioEngine:
    """Owns the music tracks, the sound-effect table and the output mix."""

    def __init__(self, data_root: Union[str, Path] = ".", decoder: Optional[MusicDecoder] = None) -> None:
        self.data_root = Path(data_root)
        self.decoder: MusicDecoder = decoder if decoder is not None else _decode_wav_music
        self.mixer = SfxMixer()
        self.master_volume = MAX_VOLUME
        self.sfx_volume = MAX_VOLUME
        self.bgm_volume = MAX_VOLUME
        self.track_id = -1
        self.music_status = MusicStatus.STOPPED
        self.music_tracks = [TrackInfo() for _ in range(TRACK_COUNT)]
        self.global_sfx_count = 0
        self.stage_sfx_count = 0
        self.global_sfx_names = [""] * SFX_COUNT
        self.stage_sfx_names = [""] * SFX_COUNT
        self._stream: Optional[_MusicStream] = None

    def load_global_sfx(self) -> int:
        """Load every sound effect named in the game configuration; return how many."""
        self.global_sfx_count = 0
        try:
            data = (self.data_root / "Data" / "Game" / "GameConfig.bin").read_bytes()
        except OSError:
            data = None

        if data is not None:
            names = read_global_sfx_names(data)
            self.global_sfx_count = len(names)
            for sfx_id, name in enumerate(names):
                self.load_sfx(name, sfx_id)
                self.global_sfx_names[sfx_id] = sfx_display_name(name)
                logger.debug("Set Global SFX (%d) name to: %s", sfx_id, self.global_sfx_names[sfx_id])

        self.mixer.next_channel_pos = 0
        self.mixer.stop_all()
        return self.global_sfx_count

    def load_sfx(self, file_path: str, sfx_id: int) -> bool:
        """Load a WAV sound effect into a slot; return False if it cannot be read."""
        path = self.data_root / "Data" / "SoundFX" / file_path
        try:
            data = path.read_bytes()
        except OSError:
            return False
        try:
            samples = _to_device_format(*decode_wav(data))
        except ValueError as exc:
            logger.warning("Unable to read sfx: %s (%s)", path, exc)
            return False
        self.mixer.load_sfx(sfx_id, file_path, samples)
        return True

    def set_music_track(self, file_path: str, track_id: int, loop: bool, loop_point: int) -> None:
        if not 0 <= track_id < TRACK_COUNT:
            raise IndexError(f"music track id out of range: {track_id}")
        self.music_tracks[track_id] = TrackInfo("Data/Music/" + file_path, bool(loop), loop_point)

    def play_music(self, track: int) -> bool:
        """Start a music track; return False if nothing was started."""
        if not 0 <= track < TRACK_COUNT:
            raise IndexError(f"music track id out of range: {track}")
        if not self.music_tracks[track].file_name:
            self.stop_music()
            return False
        if self.music_status == MusicStatus.LOADING:
            logger.warning("music tried to play while music was loading")
            return False
        self.music_status = MusicStatus.LOADING
        self._load_music(track)
        return True

    def _load_music(self, track: int) -> None:
        info = self.music_tracks[track]
        self._stream = None
        try:
            data = (self.data_root / info.file_name).read_bytes()
        except OSError:
            self.music_status = MusicStatus.STOPPED
            return
        try:
            samples = tuple(self.decoder(data))
        except ValueError as exc:
            logger.warning("Failed to load music %s: %s", info.file_name, exc)
            self.music_status = MusicStatus.STOPPED
            return
        self._stream = _MusicStream(samples, info.loop, info.loop_point)
        self.music_status = MusicStatus.PLAYING
        self.master_volume = MAX_VOLUME
        self.track_id = track

    def stop_music(self) -> None:
        self.music_status = MusicStatus.STOPPED
        self._stream = None

    def set_music_volume(self, volume: int) -> None:
        self.master_volume = max(0, min(MAX_VOLUME, volume))

    def pause_sound(self) -> bool:
        if self.music_status == MusicStatus.PLAYING:
            self.music_status = MusicStatus.PAUSED
            return True
        return False

    def resume_sound(self) -> None:
        if self.music_status == MusicStatus.PAUSED:
            self.music_status = MusicStatus.PLAYING

    def release_global_sfx(self) -> None:
        self.mixer.stop_all()
        for sfx_id in range(self.global_sfx_count - 1, -1, -1):
            if self.mixer.sounds[sfx_id].loaded:
                self.mixer.unload(sfx_id)
        self.global_sfx_count = 0

    def release_stage_sfx(self) -> None:
        top = min(self.stage_sfx_count + self.global_sfx_count, SFX_COUNT - 1)
        for sfx_id in range(top, self.global_sfx_count - 1, -1):
            if self.mixer.sounds[sfx_id].loaded:
                self.mixer.unload(sfx_id)
        self.stage_sfx_count = 0

    def _mix_music(self, mix: list[int]) -> None:
        stream = self._stream
        if stream is None or self.music_status != MusicStatus.PLAYING:
            return
        wanted = len(mix)
        buffer: list[int] = []
        while len(buffer) < wanted:
            if stream.position >= len(stream.samples):
                restart = stream.loop_point * AUDIO_CHANNELS
                if stream.loop and restart < len(stream.samples):
                    stream.position = restart
                    continue
                self.music_status = MusicStatus.STOPPED
                break
            take = min(wanted - len(buffer), len(stream.samples) - stream.position)
            buffer.extend(stream.samples[stream.position:stream.position + take])
            stream.position += take
        mix_into(mix, buffer, (self.bgm_volume * self.master_volume) // MAX_VOLUME)

    def render(self, sample_count: int) -> list[int]:
        """Produce ``sample_count`` interleaved signed 16-bit output samples."""
        if sample_count < 0:
            raise ValueError("sample count must not be negative")
        output: list[int] = []
        remaining = sample_count
        while remaining:
            chunk = min(remaining, MIX_BUFFER_SAMPLES)
            mix = [0] * chunk
            self._mix_music(mix)
            self.mixer.mix(mix, chunk, self.sfx_volume)
            output.extend(clamp_samples(mix))
            remaining -= chunk
        return output

    def release(self) -> None:
        self.stop_music()
        self.mixer.stop_all()
        self.release_stage_sfx()
        self.release_global_sfx()