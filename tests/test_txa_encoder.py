"""
Unit tests for TXAEncoder
"""

import struct

import numpy as np
import pytest

from txa_codec import TXAEncoder, TXA_MAGIC
from txa_frames import COLOR_FULL, FRAME_KEY, FRAME_DELTA


def _frame_records(data, header_size, n_frames):
    """Walk the frame section of an encoded buffer"""
    records = []
    offset = header_size
    for _ in range(n_frames):
        ftype, size = struct.unpack_from('<BI', data, offset)
        offset += 5
        records.append((ftype, data[offset:offset + size]))
        offset += size
    assert offset == len(data)
    return records


def test_defaults():
    """Constructor defaults follow the recorder defaults"""
    print('✓ test_defaults')

    enc = TXAEncoder()
    assert (enc.width, enc.height, enc.fps) == (80, 45, 30)
    assert enc.characters == " 0123456789ABCDEF"
    assert enc.keyframe_interval == 30
    assert enc.lum_bits == 8
    assert enc.change_speed == 2.0


@pytest.mark.parametrize('kwargs', [
    {'width': 0},
    {'height': -1},
    {'color_mode': 5},
    {'keyframe_interval': 0},
    {'lum_bits': 0},
    {'lum_bits': 9},
])
def test_invalid_configuration(kwargs):
    """Bad configuration is rejected up front"""
    print('✓ test_invalid_configuration')

    with pytest.raises(ValueError):
        TXAEncoder(**kwargs)


def test_example_scenario():
    """2x2 gradient grid: keyframe, delta with one change, empty delta"""
    print('✓ test_example_scenario')

    enc = TXAEncoder(width=2, height=2, characters=' #')
    f0 = np.zeros((2, 2, 1), dtype=np.uint8)
    f1 = f0.copy()
    f1[1, 1, 0] = 200

    enc.add_frame(f0)
    enc.add_frame(f1)
    enc.add_frame(f1)

    assert [f.type for f in enc.frames] == [FRAME_KEY, FRAME_DELTA, FRAME_DELTA]
    assert enc.frames[0].data == bytes([255, 4, 0])
    assert enc.frames[1].data[:2] == b'\x00\x01'
    assert enc.frames[2].data == b'\x00\x00'


def test_keyframe_cadence(make_grids):
    """Frames 0, k, 2k are keyframes, the rest deltas"""
    print('✓ test_keyframe_cadence')

    enc = TXAEncoder(width=12, height=7, keyframe_interval=3)
    for g in make_grids(8):
        enc.add_frame(g)

    types = [f.type for f in enc.frames]
    assert types == [0, 1, 1, 0, 1, 1, 0, 1]


def test_degenerate_delta_after_quantization():
    """Grids that differ only inside one bucket produce the zero marker"""
    print('✓ test_degenerate_delta_after_quantization')

    enc = TXAEncoder(width=3, height=2, lum_bits=4)
    enc.add_frame(np.full((3, 2), 0, dtype=np.uint8))
    enc.add_frame(np.full((3, 2), 15, dtype=np.uint8))

    assert enc.frames[1] == (FRAME_DELTA, b'\x00\x00')


def test_nested_list_input():
    """Grids may be given as nested [x][y][component] lists"""
    print('✓ test_nested_list_input')

    enc = TXAEncoder(width=2, height=1, color_mode=COLOR_FULL)
    enc.add_frame([[[1, 2, 3]], [[4, 5, 6]]])
    enc.add_frame([[[1, 2, 3]], [[4, 5, 7]]])

    assert enc.frames[1].type == FRAME_DELTA
    assert enc.frames[1].data[:2] == b'\x00\x01'


def test_dimension_mismatch():
    """A grid of the wrong size is a caller error"""
    print('✓ test_dimension_mismatch')

    enc = TXAEncoder(width=4, height=4)
    with pytest.raises(ValueError):
        enc.add_frame(np.zeros((4, 5, 1), dtype=np.uint8))

    enc = TXAEncoder(width=4, height=4, color_mode=COLOR_FULL)
    with pytest.raises(ValueError):
        enc.add_frame(np.zeros((4, 4, 1), dtype=np.uint8))


def test_unrepresentable_delta_becomes_keyframe():
    """Changes beyond x=255 force a keyframe"""
    print('✓ test_unrepresentable_delta_becomes_keyframe')

    enc = TXAEncoder(width=300, height=1)
    grid = np.zeros((300, 1, 1), dtype=np.uint8)
    enc.add_frame(grid)
    grid[299, 0, 0] = 1
    enc.add_frame(grid)
    grid[0, 0, 0] = 1
    enc.add_frame(grid)

    assert [f.type for f in enc.frames] == [FRAME_KEY, FRAME_KEY, FRAME_DELTA]


def test_reference_updated_every_frame():
    """Each delta is relative to the previous frame, not the last keyframe"""
    print('✓ test_reference_updated_every_frame')

    enc = TXAEncoder(width=2, height=2)
    grid = np.zeros((2, 2, 1), dtype=np.uint8)
    enc.add_frame(grid)
    grid[0, 0, 0] = 10
    enc.add_frame(grid)
    grid[1, 1, 0] = 20
    enc.add_frame(grid)

    # Trzecia klatka zmienia tylko (1, 1)
    assert enc.frames[2].data[:2] == b'\x00\x01'


def test_encode_header_layout():
    """The 32-byte header carries every configuration field"""
    print('✓ test_encode_header_layout')

    enc = TXAEncoder(width=3, height=2, fps=24, color_mode=COLOR_FULL,
                     characters=' .:', bg_color=(1, 2, 3), change_speed=1.5,
                     canvas_ratio=2, lum_bits=6)
    enc.set_color_palette([(9, 8, 7), (6, 5, 4)])
    enc.add_frame(np.zeros((3, 2, 3), dtype=np.uint8))
    data = enc.encode()

    fields = struct.unpack_from('<4sBBHHBIBH3sBBB8s', data, 0)
    assert fields == (TXA_MAGIC, 2, 1, 3, 2, 24, 1, 3, 2, b'\x01\x02\x03',
                      15, 2, 6, bytes(8))
    assert data[32:35] == b' .:'
    assert data[35:41] == bytes([9, 8, 7, 6, 5, 4])

    records = _frame_records(data, 41, 1)
    assert records[0][0] == FRAME_KEY


def test_encode_is_pure(make_grids):
    """encode() does not change encoder state"""
    print('✓ test_encode_is_pure')

    enc = TXAEncoder(width=12, height=7)
    for g in make_grids(4):
        enc.add_frame(g)

    first = enc.encode()
    assert enc.encode() == first
    assert len(enc.frames) == 4


def test_encode_requires_characters():
    """An empty character palette cannot be written"""
    print('✓ test_encode_requires_characters')

    enc = TXAEncoder(width=2, height=2, characters='')
    with pytest.raises(ValueError):
        enc.encode()

    enc = TXAEncoder(width=2, height=2, characters='x' * 256)
    with pytest.raises(ValueError):
        enc.encode()


def test_build_color_palette():
    """Gradient palette has 256 entries from dark to light"""
    print('✓ test_build_color_palette')

    enc = TXAEncoder(width=2, height=2)
    enc.build_color_palette((0, 0, 0), (255, 128, 0))
    assert len(enc.color_palette) == 256
    assert enc.color_palette[0] == (0, 0, 0)
    assert enc.color_palette[255] == (255, 128, 0)


def test_reset_keeps_configuration(make_grids):
    """reset() clears frames but not settings"""
    print('✓ test_reset_keeps_configuration')

    enc = TXAEncoder(width=12, height=7, fps=12, keyframe_interval=5)
    for g in make_grids(3):
        enc.add_frame(g)
    enc.reset()

    assert enc.frames == []
    assert enc.frame_count == 0
    assert (enc.width, enc.height, enc.fps, enc.keyframe_interval) == (12, 7, 12, 5)

    enc.add_frame(make_grids(1)[0])
    assert enc.frames[0].type == FRAME_KEY


def test_get_stats(make_grids):
    """Statistics count frame types and sizes"""
    print('✓ test_get_stats')

    enc = TXAEncoder(width=12, height=7, keyframe_interval=2)
    assert enc.get_stats()['compression_ratio'] == '0%'

    for g in make_grids(5):
        enc.add_frame(g)
    stats = enc.get_stats()

    assert stats['total_frames'] == 5
    assert stats['keyframes'] == 3
    assert stats['delta_frames'] == 2
    assert stats['uncompressed_size'] == 12 * 7 * 5
    assert stats['compressed_size'] == sum(len(f.data) for f in enc.frames)
    assert stats['compression_ratio'].endswith('%')
    print(f"  {stats}")

