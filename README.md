# retroengine

Runtime pieces of a retro side-scrolling game engine, in pure Python with no
third-party dependencies.

## Modules

### `retroengine.animation`

Reads the engine's binary animation files into an `AnimationBank`.

- `AnimationBank(data_root=".", sheet_loader=None)` holds the loaded
  `AnimationFile`, `SpriteAnimation`, `SpriteFrame` and `Hitbox` records in
  the lists `files`, `animations`, `frames` and `hitboxes`.
- `load_animation_bytes(data)` parses animation data and appends its contents.
  Each sprite sheet name in the data is passed to `sheet_loader`, and the
  number it returns becomes the frames' `sheet_id`. Malformed data, or data
  that would overflow the tables (0x400 animations, 0x1000 frames, 0x20
  hitboxes), raises `AnimationFormatError` and adds nothing.
- `load_animation_file(path)` does the same for a file on disk and returns
  `None` if the file cannot be read.
- `add_animation_file(file_name)` returns the entry already registered under
  that name. Otherwise it loads `Data/Animations/<file_name>` below
  `data_root` and registers it. It returns `None` once 0x100 files are
  registered.
- `default_animation_file()` returns the first registered file.
- `clear()` empties the bank.
- `process_object_animation(anim_file, entity)` advances an `AnimatedEntity`
  by one tick. The timer grows by the animation's speed, or by the entity's
  own `animation_speed` capped at 0xF0. Each time the timer reaches 0xF0 the
  frame moves on. Past the last frame it wraps to the loop point. Switching
  animation resets the frame, timer and speed.

Animations with `RotationStyle.STATIC_FRAMES` keep only the first half of
their frames in `frame_count`.

### `retroengine.mixer`

- `SfxMixer` has a table of 0x100 `SoundEffect` slots and four `SfxChannel`s.
  It provides `load_sfx`, `unload`, `play_sfx`, `stop_sfx`, `stop_all`,
  `set_sfx_attributes` and `mix`.
  - `play_sfx` restarts a sound on the channel already playing it. Otherwise
    it takes the channels in turn.
  - `set_sfx_attributes` restarts the sound on its own channel or on the first
    free one, with a new loop setting and pan. A `loop_count` of -1 keeps the
    channel's current loop setting.
- `mix_into(dst, src, volume, pan=0)` adds interleaved stereo samples into a
  buffer. The volume is 0 to 100. The pan runs from -100 to 100: negative
  values attenuate the right channel, positive values the left one.
- `clamp_samples(mix)` clamps mixed values to the signed 16-bit range.

### `retroengine.audio`

`AudioEngine(data_root=".", decoder=None)` manages the audio state.

- `load_global_sfx()` reads the sound-effect list from
  `Data/Game/GameConfig.bin` and loads each entry from `Data/SoundFX/`.
  `read_global_sfx_names(data)` and `sfx_display_name(name)` are available on
  their own; `sfx_display_name` turns `"Global/Jump.wav"` into `"Jump"`.
- `load_sfx(file_path, sfx_id)` decodes a WAV file with `decode_wav` and
  converts it to stereo at 44100 Hz.
- `set_music_track(file_path, track_id, loop, loop_point)` fills one of 16
  music slots, using the path `Data/Music/<file_path>`. The loop point counts
  stereo frames.
- `play_music(track)` starts a track. The track's file is decoded by
  `decoder`, a callable that takes bytes and returns interleaved 16-bit stereo
  samples at 44100 Hz. The default decoder reads WAV.
- Playback control: `stop_music`, `pause_sound`, `resume_sound`,
  `set_music_volume`.
- `MusicStatus` reports the state of the music.
- `render(sample_count)` mixes the playing music and sound effects and returns
  that many clamped, interleaved 16-bit samples.
- Clean-up: `release_global_sfx`, `release_stage_sfx`, `release`.

### `retroengine.graphics`

- `FlipFlags`, `InkFlags`, `DrawFX` and the renderer's table sizes.
- `check_surface_size(size)` is true for powers of two from 2 to 1024.

## What this package does not do

- It does not draw anything and does not load sprite sheet images. Sheet
  loading is left to the `sheet_loader` callable.
- It does not open an audio device. `AudioEngine.render` returns sample lists
  for the caller to play.
- It decodes only WAV by itself. Compressed music needs a `decoder`.
- It has no video playback, scripting, scenes, input or game loop, and no
  command to run.

## Installation

```
pip install .
```

## Example

```python
from retroengine.animation import AnimationBank, AnimatedEntity

sheets = []

def load_sheet(name):
    sheets.append(name)
    return len(sheets) - 1

bank = AnimationBank("path/to/game", load_sheet)
anim_file = bank.add_animation_file("Players/Sonic.ani")

entity = AnimatedEntity(animation=0)
for _ in range(60):
    bank.process_object_animation(anim_file, entity)
print(entity.frame)
```

```python
from retroengine.mixer import SfxMixer

mixer = SfxMixer()
mixer.load_sfx(0, "Jump.wav", [1000, -1000] * 64)
mixer.play_sfx(0, loop=False)

mix = [0] * 256
mixer.mix(mix, 256, volume=100)
```

## Running the tests

```
pip install .[test]
pytest
```