"""Sound-effect channels and the sample mixing shared by the audio engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableSequence, Optional, Sequence

SFX_COUNT = 0x100
CHANNEL_COUNT = 4
MAX_VOLUME = 100
MIX_BUFFER_SAMPLES = 256

SAMPLE_MAX = (1 << 15) - 1
SAMPLE_MIN = -(1 << 15)


def _scale_volume(sample: int, volume: int) -> int:
    """Scale a sample by ``volume / MAX_VOLUME``, truncating toward zero."""
    product = sample * volume
    scaled = abs(product) // MAX_VOLUME
    return -scaled if product < 0 else scaled


def mix_into(dst: MutableSequence[int], src: Sequence[int], volume: int, pan: int = 0) -> None:
    """Add ``src`` into ``dst`` in place at the given volume and stereo pan.

    Samples are interleaved left/right. A negative pan attenuates the right
    channel, a positive pan the left one; ``pan`` runs from -100 to 100.
    """
    if len(src) > len(dst):
        raise ValueError("source is longer than the destination buffer")
    if volume == 0:
        return
    volume = min(volume, MAX_VOLUME)

    pan_left = pan_right = 0.0
    if pan < 0:
        pan_right = 1.0 - abs(pan / 100.0)
        pan_left = 1.0
    elif pan > 0:
        pan_left = 1.0 - abs(pan / 100.0)
        pan_right = 1.0

    for index, raw in enumerate(src):
        sample = _scale_volume(raw, volume)
        if pan != 0:
            sample = int(sample * (pan_right if index % 2 else pan_left))
        dst[index] += sample


def clamp_samples(mix: Sequence[int]) -> list[int]:
    """Clamp mixed samples back into the signed 16-bit range."""
    return [min(SAMPLE_MAX, max(SAMPLE_MIN, sample)) for sample in mix]


@dataclass
class SoundEffect:
    """A decoded sound effect held as signed 16-bit samples."""

    name: str = ""
    samples: tuple[int, ...] = ()
    loaded: bool = False


@dataclass
class SfxChannel:
    """Playback state of one sound-effect channel."""

    sfx_id: int = -1
    samples: Optional[tuple[int, ...]] = None
    position: int = 0
    remaining: int = 0
    loop: bool = False
    pan: int = 0

    def reset(self) -> None:
        self.sfx_id = -1
        self.samples = None
        self.position = 0
        self.remaining = 0
        self.loop = False
        self.pan = 0

    @property
    def active(self) -> bool:
        return self.sfx_id >= 0


@dataclass
class SfxMixer:
    """The table of loaded sound effects and the channels that play them."""

    sounds: list[SoundEffect] = field(default_factory=list)
    channels: list[SfxChannel] = field(default_factory=list)
    next_channel_pos: int = 0

    def __init__(self) -> None:
        self.sounds = [SoundEffect() for _ in range(SFX_COUNT)]
        self.channels = [SfxChannel() for _ in range(CHANNEL_COUNT)]
        self.next_channel_pos = 0

    @staticmethod
    def _check_id(sfx_id: int) -> None:
        if not 0 <= sfx_id < SFX_COUNT:
            raise IndexError(f"sound effect id out of range: {sfx_id}")

    def load_sfx(self, sfx_id: int, name: str, samples: Sequence[int]) -> SoundEffect:
        """Store decoded samples in a sound-effect slot."""
        self._check_id(sfx_id)
        sound = SoundEffect(name=name, samples=tuple(samples), loaded=True)
        self.sounds[sfx_id] = sound
        return sound

    def unload(self, sfx_id: int) -> None:
        """Empty a sound-effect slot."""
        self._check_id(sfx_id)
        self.sounds[sfx_id] = SoundEffect()

    def _start(self, channel: SfxChannel, sfx_id: int) -> None:
        sound = self.sounds[sfx_id]
        channel.samples = sound.samples if sound.loaded else None
        channel.position = 0
        channel.remaining = len(sound.samples) if sound.loaded else 0

    def play_sfx(self, sfx_id: int, loop: bool = False) -> int:
        """Start a sound effect and return the channel it plays on.

        A sound already playing restarts on its own channel; otherwise the
        channels are used in turn.
        """
        self._check_id(sfx_id)
        channel_id = self.next_channel_pos
        self.next_channel_pos += 1
        for index, channel in enumerate(self.channels):
            if channel.sfx_id == sfx_id:
                channel_id = index
                break

        channel = self.channels[channel_id]
        channel.sfx_id = sfx_id
        self._start(channel, sfx_id)
        channel.loop = bool(loop)
        channel.pan = 0
        if self.next_channel_pos == CHANNEL_COUNT:
            self.next_channel_pos = 0
        return channel_id

    def stop_sfx(self, sfx_id: int) -> None:
        """Silence every channel playing the given sound effect."""
        for channel in self.channels:
            if channel.sfx_id == sfx_id:
                channel.reset()

    def stop_all(self) -> None:
        for channel in self.channels:
            channel.sfx_id = -1

    def set_sfx_attributes(self, sfx_id: int, loop_count: int, pan: int) -> Optional[int]:
        """Restart a sound with new looping and pan settings.

        The sound takes its own channel or the first free one; a
        ``loop_count`` of -1 keeps the channel's looping as it was. Returns
        the channel used, or None if every channel is busy with other sounds.
        """
        self._check_id(sfx_id)
        for index, channel in enumerate(self.channels):
            if channel.sfx_id in (sfx_id, -1):
                break
        else:
            return None

        self._start(channel, sfx_id)
        if loop_count != -1:
            channel.loop = bool(loop_count)
        channel.pan = pan
        channel.sfx_id = sfx_id
        return index

    def mix(self, mix_buffer: MutableSequence[int], sample_count: int, volume: int = MAX_VOLUME) -> None:
        """Add ``sample_count`` samples of every playing channel into ``mix_buffer``."""
        if sample_count > len(mix_buffer):
            raise ValueError("sample count exceeds the mix buffer")
        for channel in self.channels:
            if not channel.active or channel.samples is None:
                continue

            buffer: list[int] = []
            while len(buffer) < sample_count:
                take = min(channel.remaining, sample_count - len(buffer))
                buffer.extend(channel.samples[channel.position:channel.position + take])
                channel.position += take
                channel.remaining -= take
                if channel.remaining == 0:
                    if channel.loop and channel.samples:
                        channel.position = 0
                        channel.remaining = len(channel.samples)
                    else:
                        channel.reset()
                        break

            mix_into(mix_buffer, buffer, volume, channel.pan)