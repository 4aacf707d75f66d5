"""
╔══════════════════════════════════════════════════════════════════════════════╗
║   TXA CODEC — MODEL KLATEK (keyframe / delta / kwantyzacja)                 ║
╠══════════════════════════════════════════════════════════════════════════════╣
║                                                                              ║
║  SIATKA (grid):  np.ndarray uint8 (width, height, cell)  adresowana [x, y]  ║
║    • tryb gradientu (0):  cell = 1B [luminancja]                            ║
║    • tryb full-color (1): cell = 3B [r, g, b]                               ║
║    • format v1 (legacy):  cell = 2B / 4B  (+ indeks znaku na początku)      ║
║                                                                              ║
║  KEYFRAME:  cała siatka, skan wierszami (y zewnętrzne, x wewnętrzne)        ║
║             → Delta + RLE (txa_rle)                                          ║
║                                                                              ║
║  DELTA:     [2B BE: liczba zmian] + Delta+RLE( (x, y, payload...) * N )     ║
║             kolejność zmian: x zewnętrzne, y wewnętrzne                     ║
║             0 zmian → dokładnie b'\\x00\\x00' (bez kompresji)               ║
║                                                                              ║
║  Delta zawsze względem siatki po poprzedniej klatce — nigdy względem       ║
║  dowolnego keyframe'u.                                                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import os
import sys
import struct

import numpy as np

import txa_rle

_VERBOSE = os.environ.get('TXA_VERBOSE', '0') not in ('0', 'false', 'off', 'no')

# ─────────────────────────────────────────────────────────────────────────────
# STAŁE
# ─────────────────────────────────────────────────────────────────────────────
COLOR_GRADIENT = 0
COLOR_FULL     = 1

COLOR_MODE_NAMES = {
    COLOR_GRADIENT: "gradient",
    COLOR_FULL:     "fullcolor",
}

FRAME_KEY   = 0
FRAME_DELTA = 1

CANVAS_RATIOS = {
    0: "free",
    1: "16:9",
    2: "4:3",
    3: "1:1",
    4: "9:16",
    5: "3:4",
}

MAX_CHANGES = 0xFFFF   # licznik zmian 2B
MAX_COORD   = 0xFF     # x, y zapisywane jako 1B

EMPTY_DELTA = b'\x00\x00'

# Próg "tła" i wagi luminancji jak w odtwarzaczu
BG_LUMINANCE = 12
_LUMA_W = np.array([0.299, 0.587, 0.114])

_CELL_SIZES = {
    1: {COLOR_GRADIENT: 2, COLOR_FULL: 4},
    2: {COLOR_GRADIENT: 1, COLOR_FULL: 3},
}


def cell_size(color_mode: int, version: int = 2) -> int:
    """Rozmiar komórki w bajtach dla danego trybu koloru i wersji formatu."""
    sizes = _CELL_SIZES[1] if version < 2 else _CELL_SIZES[2]
    if color_mode not in sizes:
        raise ValueError(f"Nieznany tryb koloru: {color_mode}")
    return sizes[color_mode]


def _warn(msg: str):
    if _VERBOSE:
        print(f"[txa] OSTRZEŻENIE: {msg}", file=sys.stderr, flush=True)


# ═══════════════════════════════════════════════════════════════════════════════
# 1. KWANTYZACJA LUMINANCJI
# ═══════════════════════════════════════════════════════════════════════════════

def quantize_luminance(value: int, bits: int) -> int:
    """
    Mapuje luminancję na środek kubełka przy głębi `bits` < 8.

    step = 256 / 2^bits,  level = floor(v / step),
    wynik = round(level*step + step/2) obcięty do 0..255.
    """
    if bits >= 8:
        return int(value)
    step = 256 / (1 << bits)
    level = int(value // step)
    # step ≥ 2 → step/2 całkowite, więc round() nie trafia na .5
    return max(0, min(255, int(round(level * step + step / 2))))


def quantize_grid(grid: np.ndarray, bits: int) -> np.ndarray:
    """Wektorowa wersja quantize_luminance() dla całej siatki."""
    if bits >= 8:
        return grid
    step = 256 >> bits
    q = (grid.astype(np.int32) // step) * step + step // 2
    return np.clip(q, 0, 255).astype(np.uint8)


# ═══════════════════════════════════════════════════════════════════════════════
# 2. POLITYKA KEYFRAME
# ═══════════════════════════════════════════════════════════════════════════════

def is_keyframe(ordinal: int, interval: int, have_reference: bool = True) -> bool:
    """Keyframe: pierwsza klatka, brak siatki referencyjnej lub ordinal % interval == 0."""
    return ordinal == 0 or not have_reference or ordinal % interval == 0


# ═══════════════════════════════════════════════════════════════════════════════
# 3. SIATKI
# ═══════════════════════════════════════════════════════════════════════════════

def empty_grid(width: int, height: int, cell: int) -> np.ndarray:
    return np.zeros((width, height, cell), dtype=np.uint8)


def flatten_grid(grid: np.ndarray) -> bytes:
    """(W, H, C) → bajty w kolejności wierszy: y zewnętrzne, x wewnętrzne."""
    return np.ascontiguousarray(grid.transpose(1, 0, 2)).tobytes()


def grid_from_flat(flat: bytes, width: int, height: int, cell: int) -> np.ndarray:
    """Odwrotność flatten_grid(). Za krótkie dane dopełniane zerami."""
    expected = width * height * cell
    arr = np.zeros(expected, dtype=np.uint8)
    raw = np.frombuffer(flat, dtype=np.uint8)[:expected]
    arr[:raw.size] = raw
    return arr.reshape(height, width, cell).transpose(1, 0, 2)


def compute_changes(prev: np.ndarray, curr: np.ndarray) -> np.ndarray:
    """
    Zwraca tablicę (N, 2 + cell) z krotkami (x, y, payload...) dla komórek,
    które różnią się choć jedną składową. Kolejność: x zewnętrzne, y wewnętrzne.
    Współrzędne jako int64, sprawdzenie zakresu należy do wywołującego.
    """
    changed = np.any(prev != curr, axis=2)
    # np.nonzero przechodzi (W, H) w porządku C → x zewnętrzne
    xs, ys = np.nonzero(changed)
    payload = curr[xs, ys].astype(np.int64)
    return np.concatenate([xs[:, None], ys[:, None], payload], axis=1)


# ═══════════════════════════════════════════════════════════════════════════════
# 4. PAKOWANIE KLATEK
# ═══════════════════════════════════════════════════════════════════════════════

def _pack(raw: bytes, predictor: bool) -> bytes:
    return txa_rle.compress(raw) if predictor else txa_rle.rle_encode(raw)


def _unpack(data: bytes, expected: int, predictor: bool) -> bytes:
    if predictor:
        return txa_rle.decompress(data, expected)
    return txa_rle.rle_decode(data, expected)


def pack_keyframe(grid: np.ndarray, predictor: bool = True) -> bytes:
    return _pack(flatten_grid(grid), predictor)


def pack_delta(prev: np.ndarray, curr: np.ndarray, predictor: bool = True):
    """
    Pakuje klatkę delta. Zwraca bytes albo None, gdy zmian nie da się
    zapisać (współrzędna > 255 lub więcej niż 65535 zmian). Wtedy
    enkoder musi zapisać keyframe.
    """
    changes = compute_changes(prev, curr)
    n = len(changes)
    if n == 0:
        return EMPTY_DELTA
    if n > MAX_CHANGES or int(changes[:, :2].max()) > MAX_COORD:
        return None
    raw = changes.astype(np.uint8).tobytes()
    return struct.pack('>H', n) + _pack(raw, predictor)


# ═══════════════════════════════════════════════════════════════════════════════
# 5. ODTWARZANIE KLATEK (in-place)
# ═══════════════════════════════════════════════════════════════════════════════

def apply_keyframe(grid: np.ndarray, payload: bytes, predictor: bool = True) -> np.ndarray:
    """Nadpisuje całą siatkę. Brakujące bajty traktowane jako zera."""
    width, height, cell = grid.shape
    expected = width * height * cell
    flat = _unpack(payload, expected, predictor)
    if len(flat) < expected:
        _warn(f"keyframe: {len(flat)}/{expected} B po dekompresji")
    grid[:, :, :] = grid_from_flat(flat, width, height, cell)
    return grid


def apply_delta(grid: np.ndarray, payload: bytes, predictor: bool = True) -> np.ndarray:
    """
    Nakłada zmiany na siatkę. Krotki spoza (width, height) są pomijane,
    niepełna krotka na końcu strumienia jest odrzucana.
    """
    if len(payload) < 2:
        _warn(f"delta: payload {len(payload)} B < 2")
        return grid
    count = struct.unpack_from('>H', payload, 0)[0]
    if count == 0:
        return grid

    width, height, cell = grid.shape
    tup = 2 + cell
    expected = count * tup
    raw = _unpack(payload[2:], expected, predictor)
    if len(raw) < expected:
        _warn(f"delta: {len(raw)}/{expected} B po dekompresji")

    n_full = len(raw) // tup
    if n_full == 0:
        return grid
    tuples = np.frombuffer(raw, dtype=np.uint8)[:n_full * tup].reshape(n_full, tup)
    xs = tuples[:, 0].astype(np.intp)
    ys = tuples[:, 1].astype(np.intp)
    ok = (xs < width) & (ys < height)
    grid[xs[ok], ys[ok]] = tuples[ok, 2:]
    return grid


# ═══════════════════════════════════════════════════════════════════════════════
# 6. PALETA KOLORÓW
# ═══════════════════════════════════════════════════════════════════════════════

def build_gradient_palette(dark, light) -> list:
    """256 kolorów: liniowa interpolacja per kanał od `dark` (lum 0) do `light` (lum 255)."""
    t = np.arange(256, dtype=np.float64)[:, None] / 255.0
    d = np.asarray(dark, dtype=np.float64)[None, :3]
    l = np.asarray(light, dtype=np.float64)[None, :3]
    # Math.round → zaokrąglenie połówek w górę
    rgb = np.floor(d + (l - d) * t + 0.5).astype(int)
    return [tuple(int(c) for c in row) for row in rgb]


# ═══════════════════════════════════════════════════════════════════════════════
# 7. PRODUCENT KLATEK — obraz RGB → siatka
# ═══════════════════════════════════════════════════════════════════════════════

def extract_grid(pixels: np.ndarray, cell_px: int, color_mode: int = COLOR_GRADIENT) -> np.ndarray:
    """
    Próbkuje środek każdej komórki cell_px × cell_px obrazu (H, W, 3|4).
    Zwraca siatkę (W // cell_px, H // cell_px, cell).
    """
    img = np.asarray(pixels)
    if img.ndim == 2:
        img = np.repeat(img[:, :, None], 3, axis=2)
    h, w = img.shape[:2]
    gw, gh = w // cell_px, h // cell_px
    if gw == 0 or gh == 0:
        raise ValueError(f"Obraz {w}x{h} mniejszy niż komórka {cell_px}px")

    cx = (np.arange(gw) * cell_px + cell_px // 2)
    cy = (np.arange(gh) * cell_px + cell_px // 2)
    # (gh, gw, 3) → (gw, gh, 3)
    rgb = img[cy[:, None], cx[None, :], :3].astype(np.float64).transpose(1, 0, 2)

    if color_mode == COLOR_GRADIENT:
        lum = np.floor(rgb @ _LUMA_W + 0.5)
        return np.clip(lum, 0, 255).astype(np.uint8)[:, :, None]
    return rgb.astype(np.uint8)


def cell_luminance(cell, color_mode: int, version: int = 2) -> int:
    """Luminancja komórki tak, jak liczy ją odtwarzacz."""
    offset = 0 if version >= 2 else 1
    if color_mode == COLOR_GRADIENT:
        return int(cell[offset])
    r, g, b = (int(v) for v in cell[offset:offset + 3])
    return int(np.floor(0.299 * r + 0.587 * g + 0.114 * b + 0.5))
