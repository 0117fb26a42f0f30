"""Loading of sprite animation files and per-entity animation stepping."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

ANIFILE_COUNT = 0x100
ANIMATION_COUNT = 0x400
SPRITEFRAME_COUNT = 0x1000
HITBOX_COUNT = 0x20
HITBOX_DIR_COUNT = 8
SHEET_SLOT_COUNT = 0x18

ANIMATION_TIMER_STEP = 0xF0

SheetLoader = Callable[[str], int]


class AnimationFormatError(ValueError):
    """Raised when animation data is malformed or overflows the tables."""


class RotationStyle(enum.IntEnum):
    NONE = 0
    FULL = 1
    DEG45 = 2
    STATIC_FRAMES = 3


@dataclass
class SpriteFrame:
    spr_x: int = 0
    spr_y: int = 0
    width: int = 0
    height: int = 0
    pivot_x: int = 0
    pivot_y: int = 0
    sheet_id: int = 0
    hitbox_id: int = 0


@dataclass
class SpriteAnimation:
    name: str = ""
    frame_count: int = 0
    speed: int = 0
    loop_point: int = 0
    rotation_style: int = RotationStyle.NONE
    frame_list_offset: int = 0


@dataclass(frozen=True)
class Hitbox:
    left: tuple[int, ...]
    top: tuple[int, ...]
    right: tuple[int, ...]
    bottom: tuple[int, ...]


@dataclass
class AnimationFile:
    file_name: str = ""
    anim_count: int = 0
    ani_list_offset: int = 0
    hitbox_list_offset: int = 0


@dataclass
class AnimatedEntity:
    """The animation state an object carries between frames."""

    animation: int = 0
    prev_animation: int = 0
    frame: int = 0
    animation_timer: int = 0
    animation_speed: int = 0


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise AnimationFormatError(f"unexpected end of animation data at offset {self._pos}")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def s8(self) -> int:
        value = self.u8()
        return value - 0x100 if value >= 0x80 else value

    def string(self) -> str:
        return self.take(self.u8()).decode("latin-1")


class AnimationBank:
    """Holds every loaded animation, frame and hitbox for the current scene."""

    def __init__(self, data_root: Union[str, Path] = ".", sheet_loader: Optional[SheetLoader] = None) -> None:
        self.data_root = Path(data_root)
        self.sheet_loader = sheet_loader
        self.files: list[AnimationFile] = []
        self.animations: list[SpriteAnimation] = []
        self.frames: list[SpriteFrame] = []
        self.hitboxes: list[Hitbox] = []
        self.script_frames: list[SpriteFrame] = []

    def load_animation_bytes(self, data: bytes) -> AnimationFile:
        """Parse animation data, append its contents and describe where they went.

        Nothing is added to the bank if the data is malformed.
        """
        reader = _Reader(data)
        sheet_ids = [0] * SHEET_SLOT_COUNT

        sheet_count = reader.u8()
        if sheet_count > SHEET_SLOT_COUNT:
            raise AnimationFormatError(f"too many sprite sheets: {sheet_count}")
        sheet_names: list[tuple[int, str]] = []
        for slot in range(sheet_count):
            name = reader.string()
            if name:
                sheet_names.append((slot, name))

        animations: list[SpriteAnimation] = []
        frames: list[SpriteFrame] = []
        frame_offset = len(self.frames)
        pending_sheets: list[tuple[SpriteFrame, int]] = []

        for _ in range(reader.u8()):
            anim = SpriteAnimation(frame_list_offset=frame_offset + len(frames))
            anim.name = reader.string()
            anim.frame_count = reader.u8()
            anim.speed = reader.u8()
            anim.loop_point = reader.u8()
            anim.rotation_style = reader.u8()
            for _ in range(anim.frame_count):
                sheet_slot = reader.u8()
                if sheet_slot >= SHEET_SLOT_COUNT:
                    raise AnimationFormatError(f"sprite sheet index out of range: {sheet_slot}")
                frame = SpriteFrame(hitbox_id=reader.u8())
                frame.spr_x = reader.u8()
                frame.spr_y = reader.u8()
                frame.width = reader.u8()
                frame.height = reader.u8()
                frame.pivot_x = reader.s8()
                frame.pivot_y = reader.s8()
                frames.append(frame)
                pending_sheets.append((frame, sheet_slot))
            if anim.rotation_style == RotationStyle.STATIC_FRAMES:
                anim.frame_count >>= 1
            animations.append(anim)

        hitboxes: list[Hitbox] = []
        for _ in range(reader.u8()):
            sides: list[list[int]] = [[], [], [], []]
            for _ in range(HITBOX_DIR_COUNT):
                for side in sides:
                    side.append(reader.s8())
            hitboxes.append(Hitbox(*(tuple(side) for side in sides)))

        if len(self.animations) + len(animations) > ANIMATION_COUNT:
            raise AnimationFormatError("animation table is full")
        if len(self.frames) + len(frames) > SPRITEFRAME_COUNT:
            raise AnimationFormatError("sprite frame table is full")
        if len(self.hitboxes) + len(hitboxes) > HITBOX_COUNT:
            raise AnimationFormatError("hitbox table is full")

        if self.sheet_loader is not None:
            for slot, name in sheet_names:
                sheet_ids[slot] = self.sheet_loader(name)
        for frame, slot in pending_sheets:
            frame.sheet_id = sheet_ids[slot]

        result = AnimationFile(
            anim_count=len(animations),
            ani_list_offset=len(self.animations),
            hitbox_list_offset=len(self.hitboxes),
        )
        self.animations.extend(animations)
        self.frames.extend(frames)
        self.hitboxes.extend(hitboxes)
        return result

    def load_animation_file(self, path: Union[str, Path]) -> Optional[AnimationFile]:
        """Load an animation file from disk; return None if it cannot be read."""
        try:
            data = Path(path).read_bytes()
        except OSError:
            return None
        return self.load_animation_bytes(data)

    def add_animation_file(self, file_name: str) -> Optional[AnimationFile]:
        """Return the named animation file, loading it on first use.

        Returns None when the file table is already full.
        """
        for entry in self.files:
            if entry.file_name == file_name:
                return entry
        if len(self.files) >= ANIFILE_COUNT:
            return None
        loaded = self.load_animation_file(self.data_root / "Data" / "Animations" / file_name)
        entry = loaded if loaded is not None else AnimationFile()
        entry.file_name = file_name
        self.files.append(entry)
        return entry

    def default_animation_file(self) -> AnimationFile:
        """The first registered animation file, or an empty one if none is loaded."""
        return self.files[0] if self.files else AnimationFile()

    def clear(self) -> None:
        self.files.clear()
        self.animations.clear()
        self.frames.clear()
        self.hitboxes.clear()
        self.script_frames.clear()

    def process_object_animation(self, anim_file: AnimationFile, entity: AnimatedEntity) -> None:
        """Advance an entity's animation timer and frame by one tick."""
        anim = self.animations[anim_file.ani_list_offset + entity.animation]

        if entity.animation_speed <= 0:
            entity.animation_timer += anim.speed
        else:
            entity.animation_speed = min(entity.animation_speed, ANIMATION_TIMER_STEP)
            entity.animation_timer += entity.animation_speed

        if entity.animation != entity.prev_animation:
            entity.prev_animation = entity.animation
            entity.frame = 0
            entity.animation_timer = 0
            entity.animation_speed = 0

        if entity.animation_timer >= ANIMATION_TIMER_STEP:
            entity.animation_timer -= ANIMATION_TIMER_STEP
            entity.frame += 1

        if entity.frame >= anim.frame_count:
            entity.frame = anim.loop_point