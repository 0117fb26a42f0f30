import pytest

from retroengine.animation import (
    ANIMATION_TIMER_STEP,
    HITBOX_DIR_COUNT,
    AnimatedEntity,
    AnimationBank,
    AnimationFile,
    AnimationFormatError,
    Hitbox,
    RotationStyle,
    SpriteFrame,
)


def _s8(value):
    return value & 0xFF


def _string(text):
    raw = text.encode("latin-1")
    return bytes([len(raw)]) + raw


def build_ani(sheets, anims, hitboxes):
    """anims: list of (name, speed, loop, style, frames); frame = (sheet, hitbox, x, y, w, h, px, py)."""
    out = bytearray([len(sheets)])
    for sheet in sheets:
        out += _string(sheet)
    out.append(len(anims))
    for name, speed, loop, style, frames in anims:
        out += _string(name)
        out += bytes([len(frames), speed, loop, style])
        for sheet, hitbox, x, y, w, h, px, py in frames:
            out += bytes([sheet, hitbox, x, y, w, h, _s8(px), _s8(py)])
    out.append(len(hitboxes))
    for left, top, right, bottom in hitboxes:
        for d in range(HITBOX_DIR_COUNT):
            out += bytes([_s8(left[d]), _s8(top[d]), _s8(right[d]), _s8(bottom[d])])
    return bytes(out)


class RecordingLoader:
    def __init__(self):
        self.names = []

    def __call__(self, name):
        self.names.append(name)
        return 40 + len(self.names)


FRAMES = [
    (0, 0, 10, 20, 30, 40, -15, -20),
    (1, 1, 50, 60, 24, 32, 5, -100),
]
HITBOX = (
    tuple(range(-8, 0)),
    tuple(range(-16, -8)),
    tuple(range(0, 8)),
    tuple(range(8, 16)),
)


def test_frames_and_sheets_are_read():
    loader = RecordingLoader()
    bank = AnimationBank(sheet_loader=loader)
    data = build_ani(["Players/Sonic1.gif", "Players/Sonic2.gif"], [("Walk", 6, 1, RotationStyle.FULL, FRAMES)], [])
    info = bank.load_animation_bytes(data)

    assert loader.names == ["Players/Sonic1.gif", "Players/Sonic2.gif"]
    assert info.anim_count == 1
    anim = bank.animations[0]
    assert anim.name == "Walk"
    assert (anim.speed, anim.loop_point, anim.rotation_style) == (6, 1, RotationStyle.FULL)
    assert anim.frame_count == len(FRAMES)
    assert bank.frames[0] == SpriteFrame(10, 20, 30, 40, -15, -20, sheet_id=loader("x") - 2, hitbox_id=0)
    assert bank.frames[1].sheet_id == bank.frames[0].sheet_id + 1
    assert (bank.frames[1].pivot_x, bank.frames[1].pivot_y) == (5, -100)


def test_empty_sheet_names_are_not_loaded():
    loader = RecordingLoader()
    bank = AnimationBank(sheet_loader=loader)
    bank.load_animation_bytes(build_ani(["", "Global/Items.gif"], [], []))
    assert loader.names == ["Global/Items.gif"]


def test_static_frames_halve_frame_count():
    frames = FRAMES + FRAMES
    bank = AnimationBank()
    bank.load_animation_bytes(build_ani([], [("Spin", 1, 0, RotationStyle.STATIC_FRAMES, frames)], []))
    assert bank.animations[0].frame_count == len(frames) // 2
    assert len(bank.frames) == len(frames)


def test_hitboxes_round_trip():
    bank = AnimationBank()
    info = bank.load_animation_bytes(build_ani([], [], [HITBOX, HITBOX]))
    assert info.hitbox_list_offset == 0
    assert bank.hitboxes == [Hitbox(*HITBOX), Hitbox(*HITBOX)]


def test_offsets_accumulate_between_files():
    bank = AnimationBank()
    data = build_ani([], [("A", 1, 0, 0, FRAMES), ("B", 1, 0, 0, FRAMES)], [HITBOX])
    first = bank.load_animation_bytes(data)
    second = bank.load_animation_bytes(data)
    assert second.ani_list_offset == first.anim_count
    assert second.hitbox_list_offset == len(bank.hitboxes) // 2
    assert bank.animations[first.anim_count].frame_list_offset == len(FRAMES) * 2


def test_truncated_data_raises_and_leaves_bank_unchanged():
    data = build_ani(["S.gif"], [("Walk", 6, 1, 0, FRAMES)], [HITBOX])
    for end in range(len(data)):
        bank = AnimationBank()
        with pytest.raises(AnimationFormatError):
            bank.load_animation_bytes(data[:end])
        assert bank.animations == [] and bank.frames == [] and bank.hitboxes == []


def test_sheet_index_out_of_range_raises():
    data = build_ani([], [("Bad", 1, 0, 0, [(0x18, 0, 0, 0, 0, 0, 0, 0)])], [])
    with pytest.raises(AnimationFormatError):
        AnimationBank().load_animation_bytes(data)


def test_too_many_sheets_raises():
    with pytest.raises(AnimationFormatError):
        AnimationBank().load_animation_bytes(build_ani([""] * 0x19, [], []))


def test_add_animation_file_reads_and_caches(tmp_path):
    folder = tmp_path / "Data" / "Animations" / "Players"
    folder.mkdir(parents=True)
    (folder / "Sonic.ani").write_bytes(build_ani([], [("Idle", 1, 0, 0, FRAMES)], []))
    bank = AnimationBank(tmp_path)

    entry = bank.add_animation_file("Players/Sonic.ani")
    assert entry.file_name == "Players/Sonic.ani"
    assert entry.anim_count == 1
    assert bank.add_animation_file("Players/Sonic.ani") is entry
    assert len(bank.animations) == 1
    assert bank.default_animation_file() is entry


def test_missing_animation_file_registers_empty_entry(tmp_path):
    bank = AnimationBank(tmp_path)
    entry = bank.add_animation_file("Missing.ani")
    assert entry == AnimationFile("Missing.ani", 0, 0, 0)
    assert bank.files == [entry]
    assert bank.load_animation_file(tmp_path / "nope.ani") is None


def test_clear_resets_everything(tmp_path):
    bank = AnimationBank(tmp_path)
    bank.load_animation_bytes(build_ani([], [("A", 1, 0, 0, FRAMES)], [HITBOX]))
    bank.add_animation_file("Missing.ani")
    bank.clear()
    assert (bank.files, bank.animations, bank.frames, bank.hitboxes) == ([], [], [], [])
    assert bank.default_animation_file() == AnimationFile()


def _bank_with(speed, loop, frame_total):
    bank = AnimationBank()
    frames = [FRAMES[0]] * frame_total
    info = bank.load_animation_bytes(build_ani([], [("A", speed, loop, 0, frames), ("B", speed, loop, 0, frames)], []))
    return bank, info


def test_timer_uses_animation_speed_and_advances_frame():
    bank, info = _bank_with(ANIMATION_TIMER_STEP, 0, 4)
    entity = AnimatedEntity()
    bank.process_object_animation(info, entity)
    assert entity.frame == 1
    assert entity.animation_timer == 0


def test_entity_speed_is_clamped():
    bank, info = _bank_with(1, 0, 4)
    entity = AnimatedEntity(animation_speed=500)
    bank.process_object_animation(info, entity)
    assert entity.animation_speed == ANIMATION_TIMER_STEP
    assert entity.frame == 1


def test_changing_animation_resets_state():
    bank, info = _bank_with(ANIMATION_TIMER_STEP // 2, 0, 4)
    entity = AnimatedEntity(animation=1, prev_animation=0, frame=3, animation_timer=50, animation_speed=10)
    bank.process_object_animation(info, entity)
    assert entity.prev_animation == 1
    assert (entity.frame, entity.animation_timer, entity.animation_speed) == (0, 0, 0)


def test_frame_wraps_to_loop_point():
    bank, info = _bank_with(ANIMATION_TIMER_STEP, 2, 3)
    entity = AnimatedEntity(frame=2)
    bank.process_object_animation(info, entity)
    assert entity.frame == 2
    entity.frame = 2
    bank.process_object_animation(info, entity)
    assert entity.frame == bank.animations[0].loop_point