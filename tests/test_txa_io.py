"""
Tests for file I/O, text rendering and the command line
"""

import imageio.v3 as iio
import numpy as np
import pytest

import txa_codec
from txa_codec import (TXAEncoder, TXA_MAGIC, save_txa, load_txa, parse_txa,
                       render_frame_text, decode_txa, main)
from txa_frames import COLOR_FULL, COLOR_GRADIENT


def _sample_buffer(make_grids, n=5):
    grids = make_grids(n, width=6, height=3)
    enc = TXAEncoder(width=6, height=3, characters=' .:#')
    enc.build_color_palette((0, 0, 0), (255, 255, 255))
    for g in grids:
        enc.add_frame(g)
    return enc.encode()


def test_save_load_raw(tmp_path, make_grids):
    """Unwrapped files are written and read back byte for byte"""
    print('✓ test_save_load_raw')

    data = _sample_buffer(make_grids)
    path = tmp_path / 'anim.txa'

    assert save_txa(str(path), data) == len(data)
    assert path.read_bytes()[:4] == TXA_MAGIC
    assert load_txa(str(path)) == data


def test_save_load_zstd(tmp_path, make_grids):
    """Zstd-wrapped files are unwrapped transparently"""
    print('✓ test_save_load_zstd')

    data = _sample_buffer(make_grids)
    path = tmp_path / 'anim.txa'

    written = save_txa(str(path), data, zstd_level=3)
    assert path.read_bytes()[:4] == b'\x28\xb5\x2f\xfd'
    assert written == path.stat().st_size
    assert load_txa(str(path)) == data


def test_render_frame_text_gradient():
    """Dark cells use the background character, the rest scale with luminance"""
    print('✓ test_render_frame_text_gradient')

    grid = np.array([[[0]], [[12]], [[100]], [[200]]], dtype=np.uint8)
    assert render_frame_text(grid, ' .o') == ['  .o']

    grid = np.array([[[0], [255]]], dtype=np.uint8)
    assert render_frame_text(grid, ' #') == [' ', '#']


def test_render_frame_text_fullcolor():
    """Full-color cells are rendered by their luminance"""
    print('✓ test_render_frame_text_fullcolor')

    grid = np.array([[[255, 255, 255]], [[0, 0, 0]]], dtype=np.uint8)
    assert render_frame_text(grid, ' #', COLOR_FULL) == ['# ']


def test_render_single_character_palette():
    """A one-character palette renders every cell with it"""
    print('✓ test_render_single_character_palette')

    grid = np.full((3, 1, 1), 200, dtype=np.uint8)
    assert render_frame_text(grid, '*') == ['***']


def test_decode_txa_writes_text_frames(tmp_path, make_grids):
    """Every frame is written as height lines, frames separated by form feeds"""
    print('✓ test_decode_txa_writes_text_frames')

    src = tmp_path / 'anim.txa'
    out = tmp_path / 'anim.txt'
    save_txa(str(src), _sample_buffer(make_grids, n=4), zstd_level=5)

    assert decode_txa(str(src), str(out)) == 4

    frames = out.read_text(encoding='utf-8').split('\f\n')
    assert len(frames) == 4
    for text in frames:
        lines = text.rstrip('\n').split('\n')
        assert len(lines) == 3
        assert all(len(line) == 6 for line in lines)
        assert set(''.join(lines)) <= set(' .:#')


def test_cli_info(tmp_path, make_grids, capsys):
    """--info prints a header summary"""
    print('✓ test_cli_info')

    path = tmp_path / 'anim.txa'
    save_txa(str(path), _sample_buffer(make_grids))

    assert main(['-i', str(path), '--info']) == 0
    out = capsys.readouterr().out
    assert 'Wersja:       2' in out
    assert '6x3' in out
    assert "' .:#'" in out


def test_cli_requires_output(tmp_path):
    """Encoding and decoding need an output path"""
    print('✓ test_cli_requires_output')

    with pytest.raises(SystemExit):
        main(['-i', str(tmp_path / 'missing.gif')])


def test_cli_encode_and_decode_image(tmp_path):
    """A still image goes through the CLI encoder and decoder"""
    print('✓ test_cli_encode_and_decode_image')

    img = np.zeros((8, 16, 3), dtype=np.uint8)
    img[:, 8:] = 255
    png = tmp_path / 'frame.png'
    iio.imwrite(png, img)

    txa = tmp_path / 'frame.txa'
    assert main(['-i', str(png), '-o', str(txa), '--cell-size', '4',
                 '--chars', ' #', '--zstd-level', '3']) == 0

    f = parse_txa(load_txa(str(txa)))
    assert (f.header.width, f.header.height) == (4, 2)
    assert f.header.color_mode == COLOR_GRADIENT
    assert len(f.frames) == 1
    assert len(f.color_palette) == 256

    txt = tmp_path / 'frame.txt'
    assert main(['-i', str(txa), '-o', str(txt), '-d']) == 0
    assert txt.read_text(encoding='utf-8') == '  ##\n  ##\n'


def test_read_frames_missing_file(tmp_path):
    """Unreadable input is reported as a runtime error"""
    print('✓ test_read_frames_missing_file')

    with pytest.raises(RuntimeError):
        txa_codec._read_frames(str(tmp_path / 'nope.gif'), 10)
