#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║   TXA CODEC v2 — TEXT ANIMATION (siatki znaków)                             ║
╠══════════════════════════════════════════════════════════════════════════════╣
║                                                                              ║
║  NAGŁÓWEK (32 B, little-endian):                                            ║
║    magic "TXA\\0" | version 1B | colorMode 1B | width 2B | height 2B        ║
║    fps 1B | totalFrames 4B | charCount 1B | colorCount 2B | bg RGB 3B       ║
║    changeSpeed 1B (×10) | canvasRatio 1B | lumBits 1B | reserved 8B         ║
║                                                                              ║
║  PALETA:   charCount B znaków ASCII + colorCount × 3 B RGB                  ║
║  KLATKI:   [typ 1B: 0=key 1=delta][rozmiar 4B LE][dane]                     ║
║                                                                              ║
║  Wersje:                                                                     ║
║    v1 (legacy) — komórki 2B/4B z indeksem znaku, samo RLE                   ║
║    v2 (obecna) — komórki 1B/3B, Delta + RLE, kwantyzacja luminancji         ║
║                                                                              ║
║  Uruchomienie:                                                               ║
║    python txa_codec.py -i anim.gif -o anim.txa --cell-size 8                ║
║    python txa_codec.py -i anim.txa -o anim.txt -d                           ║
║    python txa_codec.py -i anim.txa --info                                   ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import os
import sys
import time
import struct
import argparse
from bisect import bisect_right
from typing import NamedTuple

import numpy as np
import zstandard as zstd

import txa_frames
from txa_frames import (COLOR_GRADIENT, COLOR_FULL, FRAME_KEY, FRAME_DELTA,
                        COLOR_MODE_NAMES, CANVAS_RATIOS)

# ─────────────────────────────────────────────────────────────────────────────
# KONFIGURACJA GLOBALNA
# ─────────────────────────────────────────────────────────────────────────────
_ZSTD_LEVEL         = int(os.environ.get('TXA_ZSTD_LEVEL', 19))
_KEYFRAME_INTERVAL  = int(os.environ.get('TXA_KEYFRAME_INTERVAL', 30))
_VERBOSE            = os.environ.get('TXA_VERBOSE', '0') not in ('0', 'false', 'off', 'no')

# ─────────────────────────────────────────────────────────────────────────────
# MAGIC NUMBERS
# ─────────────────────────────────────────────────────────────────────────────
TXA_MAGIC     = b'TXA\x00'
TXA_VERSION   = 2
_ZSTD_MAGIC   = b'\x28\xb5\x2f\xfd'
HEADER_SIZE   = 32

_HEADER_V2    = struct.Struct('<4sBBHHBIBH3sBBB8x')
_HEADER_V1    = struct.Struct('<4sBBHHBIBH3sBB9x')
_FRAME_HEAD   = struct.Struct('<BI')

DEFAULT_CHARACTERS = " 0123456789ABCDEF"
_WHITE = (255, 255, 255)


class TXAFormatError(ValueError):
    """Plik nie jest poprawnym plikiem TXA (magic, wersja, nagłówek)."""


# ═══════════════════════════════════════════════════════════════════════════════
# TYPY DANYCH
# ═══════════════════════════════════════════════════════════════════════════════

class TXAHeader(NamedTuple):
    version: int
    color_mode: int
    width: int
    height: int
    fps: int
    total_frames: int
    char_count: int
    color_count: int
    bg_color: tuple
    change_speed: float
    canvas_ratio: int
    lum_bits: int

    @property
    def cell_size(self) -> int:
        return txa_frames.cell_size(self.color_mode, self.version)

    @property
    def duration(self) -> float:
        return self.total_frames / self.fps if self.fps else 0.0


class TXAFrame(NamedTuple):
    type: int
    data: bytes


class _FormatStrategy(NamedTuple):
    """Wariant formatu wybierany raz, przy parsowaniu."""
    version: int
    header: struct.Struct
    predictor: bool

    def read_header(self, buf: bytes) -> TXAHeader:
        fields = self.header.unpack_from(buf, 0)
        (_, version, color_mode, width, height, fps, total, n_chars,
         n_colors, bg, speed, ratio) = fields[:12]
        lum_bits = fields[12] if len(fields) > 12 else 8
        return TXAHeader(version, color_mode, width, height, fps, total,
                         n_chars, n_colors, tuple(bg), speed / 10,
                         ratio, lum_bits)


_FORMATS = {
    1: _FormatStrategy(1, _HEADER_V1, predictor=False),
    2: _FormatStrategy(2, _HEADER_V2, predictor=True),
}


def pack_header(header: TXAHeader) -> bytes:
    return _HEADER_V2.pack(
        TXA_MAGIC, header.version, header.color_mode,
        header.width, header.height, header.fps, header.total_frames,
        header.char_count, header.color_count, bytes(header.bg_color),
        int(np.floor(header.change_speed * 10 + 0.5)), header.canvas_ratio,
        header.lum_bits)


# ═══════════════════════════════════════════════════════════════════════════════
# ENKODER
# ═══════════════════════════════════════════════════════════════════════════════

class TXAEncoder:
    """
    Zbiera siatki klatka po klatce i serializuje je do pliku TXA v2.

    Siatka referencyjna (_last_grid) jest nadpisywana po każdej klatce,
    delta liczona jest zawsze względem poprzedniej klatki.
    """

    def __init__(self, width: int = 80, height: int = 45, fps: int = 30,
                 color_mode: int = COLOR_GRADIENT,
                 characters: str = DEFAULT_CHARACTERS,
                 keyframe_interval: int = 30,
                 bg_color=(0, 0, 0), change_speed: float = 2.0,
                 canvas_ratio: int = 0, lum_bits: int = 8):
        if width <= 0 or height <= 0:
            raise ValueError(f"Nieprawidłowy rozmiar siatki: {width}x{height}")
        if color_mode not in COLOR_MODE_NAMES:
            raise ValueError(f"Nieznany tryb koloru: {color_mode}")
        if keyframe_interval <= 0:
            raise ValueError(f"keyframe_interval musi być > 0 (jest {keyframe_interval})")
        if not 1 <= lum_bits <= 8:
            raise ValueError(f"lum_bits poza zakresem 1..8: {lum_bits}")

        self.width = width
        self.height = height
        self.fps = fps
        self.color_mode = color_mode
        self.characters = characters
        self.keyframe_interval = keyframe_interval
        self.bg_color = tuple(bg_color)
        self.change_speed = change_speed
        self.canvas_ratio = canvas_ratio
        self.lum_bits = lum_bits

        self.frames = []
        self.color_palette = []
        self._last_grid = None
        self.frame_count = 0

    @property
    def cell_size(self) -> int:
        return txa_frames.cell_size(self.color_mode)

    def _prepare_grid(self, grid) -> np.ndarray:
        arr = np.asarray(grid)
        cell = self.cell_size
        if arr.ndim == 2 and cell == 1:
            arr = arr[:, :, None]
        if arr.ndim != 3 or arr.shape[:2] != (self.width, self.height):
            raise ValueError(f"Siatka {arr.shape[:2]} ≠ oczekiwana "
                             f"({self.width}, {self.height})")
        if arr.shape[2] < cell:
            raise ValueError(f"Komórka ma {arr.shape[2]} składowych, wymagane {cell}")
        arr = np.clip(arr[:, :, :cell], 0, 255).astype(np.uint8)
        if self.color_mode == COLOR_GRADIENT:
            arr = txa_frames.quantize_grid(arr, self.lum_bits)
        return np.ascontiguousarray(arr)

    def add_frame(self, grid):
        """Dodaje klatkę: kwantyzacja → keyframe albo delta → lista klatek."""
        processed = self._prepare_grid(grid)
        key = txa_frames.is_keyframe(self.frame_count, self.keyframe_interval,
                                     self._last_grid is not None)
        data = None
        if not key:
            data = txa_frames.pack_delta(self._last_grid, processed)
            if data is None and _VERBOSE:
                print(f"[txa] klatka {self.frame_count}: delta niemożliwa → keyframe",
                      file=sys.stderr, flush=True)
        if data is None:
            self.frames.append(TXAFrame(FRAME_KEY, txa_frames.pack_keyframe(processed)))
        else:
            self.frames.append(TXAFrame(FRAME_DELTA, data))

        self._last_grid = processed.copy()
        self.frame_count += 1

    def build_color_palette(self, color_dark, color_light):
        self.color_palette = txa_frames.build_gradient_palette(color_dark, color_light)

    def set_color_palette(self, colors):
        self.color_palette = [tuple(int(v) for v in c[:3]) for c in colors]

    def encode(self) -> bytes:
        """Serializuje nagłówek, paletę i wszystkie klatki do jednego bufora."""
        if not self.characters:
            raise ValueError("Paleta znaków jest pusta")
        if len(self.characters) > 255:
            raise ValueError(f"Za dużo znaków w palecie: {len(self.characters)} > 255")
        if len(self.color_palette) > 0xFFFF:
            raise ValueError(f"Za dużo kolorów w palecie: {len(self.color_palette)}")
        chars = self.characters.encode('latin-1')

        header = TXAHeader(
            TXA_VERSION, self.color_mode, self.width, self.height, self.fps,
            len(self.frames), len(chars), len(self.color_palette),
            self.bg_color, self.change_speed, self.canvas_ratio, self.lum_bits)

        out = bytearray(pack_header(header))
        out.extend(chars)
        for r, g, b in self.color_palette:
            out.extend((r, g, b))
        for frame in self.frames:
            out.extend(_FRAME_HEAD.pack(frame.type, len(frame.data)))
            out.extend(frame.data)
        return bytes(out)

    def reset(self):
        """Czyści klatki i siatkę referencyjną; konfiguracja zostaje."""
        self.frames = []
        self._last_grid = None
        self.frame_count = 0

    def get_stats(self) -> dict:
        frame_size = self.width * self.height * self.cell_size
        keyframes = sum(1 for f in self.frames if f.type == FRAME_KEY)
        # Delta liczona jak pełna klatka (najgorszy przypadek)
        uncompressed = frame_size * len(self.frames)
        compressed = sum(len(f.data) for f in self.frames)
        ratio = (f"{(1 - compressed / uncompressed) * 100:.1f}%"
                 if uncompressed > 0 else "0%")
        return {
            'total_frames':      len(self.frames),
            'keyframes':         keyframes,
            'delta_frames':      len(self.frames) - keyframes,
            'uncompressed_size': uncompressed,
            'compressed_size':   compressed,
            'compression_ratio': ratio,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# PARSOWANIE (niemutowalna struktura pliku)
# ═══════════════════════════════════════════════════════════════════════════════

class TXAFile(NamedTuple):
    header: TXAHeader
    characters: str
    color_palette: tuple
    frames: tuple
    keyframes: tuple
    strategy: _FormatStrategy


def parse_txa(buffer) -> TXAFile:
    """
    Parsuje bufor TXA. Rzuca TXAFormatError przy złym magic / wersji.
    Klatki nie są dekompresowane, tylko indeksowane po rozmiarze.
    """
    buf = bytes(buffer)
    if buf[:4] != TXA_MAGIC:
        raise TXAFormatError(f"Nieprawidłowy plik TXA: zły magic {buf[:4]!r}")
    if len(buf) < 5:
        raise TXAFormatError("Nieprawidłowy plik TXA: brak wersji")

    version = buf[4]
    strategy = _FORMATS.get(version)
    if strategy is None:
        raise TXAFormatError(f"Nieobsługiwana wersja TXA: {version}, "
                             f"obsługiwane: {sorted(_FORMATS)}")
    if len(buf) < strategy.header.size:
        raise TXAFormatError(f"Nagłówek obcięty: {len(buf)} B < {strategy.header.size} B")

    header = strategy.read_header(buf)
    if header.color_mode not in COLOR_MODE_NAMES:
        raise TXAFormatError(f"Nieznany tryb koloru: {header.color_mode}")
    offset = strategy.header.size

    characters = buf[offset:offset + header.char_count].decode('latin-1')
    offset += header.char_count

    pal = buf[offset:offset + header.color_count * 3]
    palette = tuple(tuple(pal[i:i + 3]) for i in range(0, len(pal) - len(pal) % 3, 3))
    offset += header.color_count * 3

    frames = []
    keyframes = []
    for i in range(header.total_frames):
        if offset + _FRAME_HEAD.size > len(buf):
            if _VERBOSE:
                print(f"[txa] OSTRZEŻENIE: sekcja klatek urwana po {i}/{header.total_frames}",
                      file=sys.stderr, flush=True)
            break
        ftype, size = _FRAME_HEAD.unpack_from(buf, offset)
        offset += _FRAME_HEAD.size
        frames.append(TXAFrame(ftype, buf[offset:offset + size]))
        if ftype == FRAME_KEY:
            keyframes.append(i)
        offset += size

    return TXAFile(header, characters, palette, tuple(frames), tuple(keyframes), strategy)


# ═══════════════════════════════════════════════════════════════════════════════
# SESJA DEKODOWANIA (kursor + siatka)
# ═══════════════════════════════════════════════════════════════════════════════

class DecoderSession:
    """
    Własny kursor odtwarzania nad jednym TXAFile.

    Nie jest bezpieczna wątkowo. Każdy konsument (wątek) powinien mieć
    własną sesję nad tym samym TXAFile.
    """

    def __init__(self, txa_file: TXAFile, keyframe_seek: bool = False):
        self.file = txa_file
        self.keyframe_seek = keyframe_seek
        self.frames_applied = 0
        self.reset()

    @property
    def total_frames(self) -> int:
        return len(self.file.frames)

    @property
    def cursor(self) -> int:
        return self._cursor

    def reset(self):
        h = self.file.header
        self._grid = txa_frames.empty_grid(h.width, h.height, h.cell_size)
        self._cursor = -1

    def _seek_start(self, index: int):
        if self.keyframe_seek:
            pos = bisect_right(self.file.keyframes, index) - 1
            if pos >= 0:
                key = self.file.keyframes[pos]
                # keyframe nadpisuje całą siatkę, start tuż przed nim
                if index < self._cursor or key > self._cursor:
                    self._cursor = key - 1
                return
        if index < self._cursor:
            self.reset()

    def get_frame(self, index: int):
        """Siatka dla klatki `index` (widok tylko do odczytu) albo None."""
        if index < 0 or index >= self.total_frames:
            return None

        self._seek_start(index)
        while self._cursor < index:
            self._cursor += 1
            self._apply(self._cursor)

        view = self._grid.view()
        view.flags.writeable = False
        return view

    def _apply(self, index: int):
        frame = self.file.frames[index]
        predictor = self.file.strategy.predictor
        if frame.type == FRAME_KEY:
            txa_frames.apply_keyframe(self._grid, frame.data, predictor)
        else:
            txa_frames.apply_delta(self._grid, frame.data, predictor)
        self.frames_applied += 1


# ═══════════════════════════════════════════════════════════════════════════════
# DEKODER (fasada: plik + domyślna sesja)
# ═══════════════════════════════════════════════════════════════════════════════

class TXADecoder:

    def __init__(self, keyframe_seek: bool = False):
        self.keyframe_seek = keyframe_seek
        self.file = None
        self.session = None

    def parse(self, buffer) -> TXAHeader:
        self.file = None
        self.session = None
        txa_file = parse_txa(buffer)
        self.file = txa_file
        self.session = DecoderSession(txa_file, self.keyframe_seek)
        return txa_file.header

    def new_session(self, keyframe_seek=None) -> DecoderSession:
        if self.file is None:
            raise RuntimeError("Najpierw wywołaj parse()")
        ks = self.keyframe_seek if keyframe_seek is None else keyframe_seek
        return DecoderSession(self.file, ks)

    def get_frame(self, index: int):
        if self.session is None:
            return None
        return self.session.get_frame(index)

    def get_color(self, lum_or_index: int) -> tuple:
        palette = self.color_palette
        if 0 <= lum_or_index < len(palette):
            return palette[lum_or_index]
        return _WHITE

    def get_character(self, index: int) -> str:
        chars = self.characters
        if 0 <= index < len(chars):
            return chars[index]
        return ' '

    @property
    def header(self):
        return self.file.header if self.file else None

    @property
    def characters(self) -> str:
        return self.file.characters if self.file else ''

    @property
    def color_palette(self) -> tuple:
        return self.file.color_palette if self.file else ()

    @property
    def width(self) -> int:
        return self.header.width if self.file else 0

    @property
    def height(self) -> int:
        return self.header.height if self.file else 0

    @property
    def fps(self) -> int:
        return (self.header.fps if self.file else 0) or 30

    @property
    def total_frames(self) -> int:
        return len(self.file.frames) if self.file else 0

    @property
    def color_mode(self) -> int:
        return self.header.color_mode if self.file else COLOR_GRADIENT

    @property
    def duration(self) -> float:
        return self.total_frames / self.fps

    @property
    def bg_color(self) -> tuple:
        return self.header.bg_color if self.file else (0, 0, 0)

    @property
    def change_speed(self) -> float:
        return (self.header.change_speed if self.file else 0) or 2.0

    @property
    def canvas_ratio(self) -> int:
        return self.header.canvas_ratio if self.file else 0

    @property
    def version(self) -> int:
        return self.header.version if self.file else 1


# ═══════════════════════════════════════════════════════════════════════════════
# PLIKI I RENDER TEKSTOWY
# ═══════════════════════════════════════════════════════════════════════════════

def save_txa(path: str, data: bytes, zstd_level=None):
    """Zapisuje bufor; z zstd_level owija go w ramkę Zstd."""
    if zstd_level:
        data = zstd.ZstdCompressor(level=zstd_level).compress(data)
    with open(path, 'wb') as f:
        f.write(data)
    return len(data)


def load_txa(path: str) -> bytes:
    """Czyta plik .txa (surowy albo owinięty w Zstd)."""
    with open(path, 'rb') as f:
        head = f.read(4)
        f.seek(0)
        if head == _ZSTD_MAGIC:
            dctx = zstd.ZstdDecompressor()
            return dctx.stream_reader(f).read()
        return f.read()


def render_frame_text(grid: np.ndarray, characters: str, color_mode: int = COLOR_GRADIENT,
                      version: int = 2) -> list:
    """
    Siatka → wiersze tekstu. Luminancja ≤ 12 → znak tła (indeks 0),
    inaczej znak proporcjonalny do luminancji spośród pozostałych.
    """
    chars = characters or ' '
    n = len(chars)
    width, height = grid.shape[:2]
    rows = []
    for y in range(height):
        line = []
        for x in range(width):
            lum = txa_frames.cell_luminance(grid[x, y], color_mode, version)
            if lum <= txa_frames.BG_LUMINANCE or n == 1:
                line.append(chars[0])
            else:
                line.append(chars[1 + lum * (n - 1) // 256])
        rows.append(''.join(line))
    return rows


# ═══════════════════════════════════════════════════════════════════════════════
# WIDEO I/O
# ═══════════════════════════════════════════════════════════════════════════════

def _read_frames(input_path, max_frames, full=False):
    frames = []
    try:
        import imageio.v3 as _iio
        for i, frame in enumerate(_iio.imiter(input_path)):
            if not full and i >= max_frames:
                break
            frames.append(np.asarray(frame))
            print(f"  Wczytano klatkę {i+1}", flush=True)
    except Exception as e:
        raise RuntimeError(f"Nie udało się wczytać wideo: {e}") from e
    if not frames:
        raise RuntimeError(f"Brak klatek w {input_path}")
    return frames


def grids_from_frames(frames, cell_px: int, color_mode: int = COLOR_GRADIENT) -> list:
    return [txa_frames.extract_grid(f, cell_px, color_mode) for f in frames]


def _parse_rgb(text: str) -> tuple:
    s = text.lstrip('#')
    if len(s) != 6:
        raise argparse.ArgumentTypeError(f"Oczekiwano koloru RRGGBB, jest '{text}'")
    return tuple(int(s[i:i+2], 16) for i in (0, 2, 4))


# ═══════════════════════════════════════════════════════════════════════════════
# ENKODOWANIE I DEKODOWANIE
# ═══════════════════════════════════════════════════════════════════════════════

def encode_video(input_path, output_path, max_frames=300, full=False,
                 cell_px=8, color_mode=COLOR_GRADIENT, fps=30,
                 keyframe_interval=_KEYFRAME_INTERVAL, lum_bits=8,
                 characters=DEFAULT_CHARACTERS, dark=(0, 0, 0),
                 light=(255, 255, 255), bg_color=(0, 0, 0),
                 change_speed=2.0, canvas_ratio=0, zstd_level=None):

    print(f"\n╔══ TXA CODEC v{TXA_VERSION} — ENKODOWANIE ══╗")
    print(f"  Wejście: {input_path}")
    print(f"  Komórka={cell_px}px  tryb={COLOR_MODE_NAMES[color_mode]}  "
          f"lum_bits={lum_bits}  keyframe_interval={keyframe_interval}")
    print(f"╚{'═'*40}╝\n", flush=True)

    frames = _read_frames(input_path, max_frames, full)
    grids = grids_from_frames(frames, cell_px, color_mode)
    width, height = grids[0].shape[:2]
    print(f"\n  Wczytano {len(grids)} klatek → siatka {width}x{height}", flush=True)

    enc = TXAEncoder(width=width, height=height, fps=fps, color_mode=color_mode,
                     characters=characters, keyframe_interval=keyframe_interval,
                     bg_color=bg_color, change_speed=change_speed,
                     canvas_ratio=canvas_ratio, lum_bits=lum_bits)
    if color_mode == COLOR_GRADIENT:
        enc.build_color_palette(dark, light)

    for i, grid in enumerate(grids):
        t0 = time.time()
        enc.add_frame(grid)
        last = enc.frames[-1]
        ft = 'K' if last.type == FRAME_KEY else 'D'
        print(f"  Klatka {i+1}/{len(grids)} [{ft}] → {len(last.data)} B "
              f"({(time.time() - t0) * 1000:.1f} ms)", flush=True)

    data = enc.encode()
    written = save_txa(output_path, data, zstd_level)
    stats = enc.get_stats()

    print(f"\n✓ SUKCES!")
    print(f"  Klatki: {stats['total_frames']}  |  K: {stats['keyframes']}  D: {stats['delta_frames']}")
    print(f"  Raw: {stats['uncompressed_size']//1024} KB  |  Klatki TXA: {stats['compressed_size']//1024} KB")
    print(f"  Plik: {written} B{' (zstd)' if zstd_level else ''}")
    print(f"  Kompresja: {stats['compression_ratio']}", flush=True)
    return stats


def decode_txa(input_path, output_path, keyframe_seek=False):
    """Dekoduje .txa i zapisuje wszystkie klatki jako tekst (oddzielone \\f)."""
    print(f"\n╔══ TXA CODEC v{TXA_VERSION} — DEKODOWANIE ══╗")
    print(f"  Wejście: {input_path}")
    print(f"  Wyjście: {output_path}", flush=True)

    dec = TXADecoder(keyframe_seek=keyframe_seek)
    header = dec.parse(load_txa(input_path))
    print(f"  Format: v{header.version}  {header.width}x{header.height}  "
          f"FPS={dec.fps}  tryb={COLOR_MODE_NAMES[header.color_mode]}", flush=True)

    with open(output_path, 'w', encoding='utf-8') as out:
        for i in range(dec.total_frames):
            grid = dec.get_frame(i)
            rows = render_frame_text(grid, dec.characters, header.color_mode, header.version)
            if i:
                out.write('\f\n')
            out.write('\n'.join(rows) + '\n')

    print(f"\n  Łącznie zdekodowano: {dec.total_frames} klatek", flush=True)
    print(f"\n✓ SUKCES! → {output_path}", flush=True)
    return dec.total_frames


def print_info(input_path):
    raw = load_txa(input_path)
    f = parse_txa(raw)
    h = f.header
    n_key = len(f.keyframes)
    payload = sum(len(fr.data) for fr in f.frames)
    print(f"[txa] {input_path}")
    print(f"  Wersja:       {h.version}")
    print(f"  Tryb koloru:  {COLOR_MODE_NAMES[h.color_mode]}")
    print(f"  Siatka:       {h.width}x{h.height}  (komórka {h.cell_size} B)")
    print(f"  FPS:          {h.fps}  |  czas: {h.duration:.2f} s")
    print(f"  Klatki:       {len(f.frames)}  (K: {n_key}  D: {len(f.frames) - n_key})")
    print(f"  Znaki:        {f.characters!r}")
    print(f"  Paleta:       {len(f.color_palette)} kolorów  |  tło: {h.bg_color}")
    print(f"  ChangeSpeed:  {h.change_speed:.1f}  |  proporcje: {CANVAS_RATIOS.get(h.canvas_ratio, '?')}")
    print(f"  LumBits:      {h.lum_bits}")
    print(f"  Dane klatek:  {payload} B  |  plik: {len(raw)} B", flush=True)
    return h


# ═══════════════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════════════

def main(argv=None):
    parser = argparse.ArgumentParser(
        description=f"TXA CODEC v{TXA_VERSION} — animacje tekstowe (Delta + RLE)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Presety:
  --preset-small    lum_bits=4, keyframe co 120 klatek, zstd 19
  --preset-quality  lum_bits=8, keyframe co 30 klatek
        """)
    parser.add_argument('-i', '--input', required=True)
    parser.add_argument('-o', '--output')
    parser.add_argument('-d', '--decode', action='store_true')
    parser.add_argument('--info', action='store_true')
    parser.add_argument('-n', '--frames', type=int, default=300)
    parser.add_argument('-f', '--full', action='store_true')
    parser.add_argument('--cell-size', type=int, default=8)
    parser.add_argument('--fullcolor', action='store_true')
    parser.add_argument('--fps', type=int, default=30)
    parser.add_argument('--keyframe-interval', type=int, default=_KEYFRAME_INTERVAL)
    parser.add_argument('--lum-bits', type=int, default=8, choices=range(1, 9))
    parser.add_argument('--chars', default=DEFAULT_CHARACTERS)
    parser.add_argument('--dark', type=_parse_rgb, default=(0, 0, 0))
    parser.add_argument('--light', type=_parse_rgb, default=(255, 255, 255))
    parser.add_argument('--bg', type=_parse_rgb, default=(0, 0, 0))
    parser.add_argument('--change-speed', type=float, default=2.0)
    parser.add_argument('--canvas-ratio', type=int, default=0, choices=sorted(CANVAS_RATIOS))
    parser.add_argument('--zstd-level', type=int, default=0, choices=range(0, 23),
                        help='0 = bez owijania w Zstd')
    parser.add_argument('--keyframe-seek', action='store_true',
                        help='Dekodowanie: skok do najbliższego keyframe')
    parser.add_argument('--preset-small', action='store_true')
    parser.add_argument('--preset-quality', action='store_true')
    args = parser.parse_args(argv)

    if args.info:
        print_info(args.input)
        return 0
    if not args.output:
        parser.error("-o/--output jest wymagane (poza --info)")

    if args.decode:
        decode_txa(args.input, args.output, keyframe_seek=args.keyframe_seek)
        return 0

    lum_bits, kf, zl = args.lum_bits, args.keyframe_interval, args.zstd_level
    if args.preset_small:
        lum_bits, kf, zl = 4, 120, _ZSTD_LEVEL
        print(f"▶ Preset SMALL: lum_bits=4 keyframe=120 zstd={zl}")
    elif args.preset_quality:
        lum_bits, kf = 8, 30
        print("▶ Preset QUALITY: lum_bits=8 keyframe=30")

    encode_video(
        args.input, args.output,
        max_frames=args.frames, full=args.full,
        cell_px=args.cell_size,
        color_mode=COLOR_FULL if args.fullcolor else COLOR_GRADIENT,
        fps=args.fps, keyframe_interval=kf, lum_bits=lum_bits,
        characters=args.chars, dark=args.dark, light=args.light,
        bg_color=args.bg, change_speed=args.change_speed,
        canvas_ratio=args.canvas_ratio, zstd_level=zl or None,
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
