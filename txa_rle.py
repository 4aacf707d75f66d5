"""
╔══════════════════════════════════════════════════════════════════════════════╗
║   TXA CODEC — MODUŁ KOMPRESJI BAJTÓW (Delta + RLE)                          ║
╠══════════════════════════════════════════════════════════════════════════════╣
║                                                                              ║
║  Wspólny kompresor dla klatek kluczowych i klatek delta.                    ║
║                                                                              ║
║  Dwa etapy (kompresja w tej kolejności, dekompresja odwrotnie):             ║
║  1. PREDYKTOR RÓŻNICOWY: out[0] = in[0], out[i] = (in[i] - in[i-1]) % 256   ║
║     — liczony po CAŁYM spłaszczonym strumieniu, nie per wiersz!             ║
║  2. RLE:                                                                     ║
║     • run ≥3 identycznych bajtów → (0xFF, długość≤255, wartość)            ║
║     • reszta → blok literałów (n≤254, b0, b1, ...)                          ║
║     • blok literałów kończy się tuż przed początkiem nowego runu ≥3        ║
║                                                                              ║
║  Dekoder zatrzymuje się po osiągnięciu expected_size, nawet jeśli          ║
║  strumień ma nadmiarowe bajty na końcu.                                     ║
║                                                                              ║
║  UŻYCIE:                                                                     ║
║      import txa_rle                                                          ║
║      packed   = txa_rle.compress(raw_bytes)                                  ║
║      unpacked = txa_rle.decompress(packed, len(raw_bytes))                   ║
║      # assert unpacked == raw_bytes                                          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import numpy as np

RLE_ESCAPE    = 0xFF   # (0xFF, count, value)
RLE_MAX_RUN   = 255
RLE_MAX_LIT   = 254
RLE_MIN_RUN   = 3


# ═══════════════════════════════════════════════════════════════════════════════
# 1. PREDYKTOR RÓŻNICOWY
# ═══════════════════════════════════════════════════════════════════════════════

def _as_u8(data) -> np.ndarray:
    if isinstance(data, np.ndarray):
        return np.ascontiguousarray(data, dtype=np.uint8).ravel()
    return np.frombuffer(bytes(data), dtype=np.uint8)


def delta_encode(data) -> bytes:
    """Koduje różnicowo: pierwszy bajt bez zmian, dalej różnice mod 256."""
    arr = _as_u8(data)
    if arr.size == 0:
        return b''
    out = np.empty_like(arr)
    out[0] = arr[0]
    # uint8 - uint8 zawija się modulo 256
    out[1:] = np.diff(arr)
    return out.tobytes()


def delta_decode(data) -> bytes:
    """Odwraca delta_encode(): suma prefiksowa modulo 256."""
    arr = _as_u8(data)
    if arr.size == 0:
        return b''
    return (np.cumsum(arr, dtype=np.uint64) & 0xFF).astype(np.uint8).tobytes()


# ═══════════════════════════════════════════════════════════════════════════════
# 2. RLE
# ═══════════════════════════════════════════════════════════════════════════════

def rle_encode(data) -> bytes:
    """
    Koduje strumień bajtów w RLE z escape 0xFF.

    Algorytm (bit w bit zgodny z plikami .txa):
    1. Policz run od pozycji i (max 255)
    2. Run ≥3 → emituj (0xFF, run, wartość)
    3. Inaczej zbieraj literały aż do 254 lub do miejsca,
       w którym zaczyna się świeży run ≥3
    """
    buf = bytes(data)
    n = len(buf)
    out = bytearray()
    i = 0

    while i < n:
        value = buf[i]
        run = 1
        while i + run < n and buf[i + run] == value and run < RLE_MAX_RUN:
            run += 1

        if run >= RLE_MIN_RUN:
            out.append(RLE_ESCAPE)
            out.append(run)
            out.append(value)
            i += run
            continue

        lit = 0
        while i + lit < n and lit < RLE_MAX_LIT:
            p = i + lit
            if p + 2 < n and buf[p] == buf[p + 1] == buf[p + 2]:
                break
            lit += 1
        if lit == 0:
            lit = 1

        out.append(lit)
        out.extend(buf[i:i + lit])
        i += lit

    return bytes(out)


def rle_decode(data, expected_size: int) -> bytes:
    """
    Dekoduje RLE. Zwraca co najwyżej expected_size bajtów.

    Uszkodzony lub za krótki strumień nie rzuca wyjątku, wynik jest
    wtedy krótszy niż expected_size (dopełnia wywołujący).
    """
    buf = bytes(data)
    n = len(buf)
    out = bytearray()
    i = 0

    while i < n and len(out) < expected_size:
        marker = buf[i]; i += 1

        if marker == RLE_ESCAPE:
            if i + 1 >= n:
                # Obcięta trójka na końcu strumienia
                break
            count, value = buf[i], buf[i + 1]; i += 2
            count = min(count, expected_size - len(out))
            out.extend(bytes((value,)) * count)
        else:
            take = min(marker, expected_size - len(out), n - i)
            out.extend(buf[i:i + take])
            i += marker

    return bytes(out)


# ═══════════════════════════════════════════════════════════════════════════════
# 3. KOMPOZYCJA
# ═══════════════════════════════════════════════════════════════════════════════

def compress(data) -> bytes:
    return rle_encode(delta_encode(data))


def decompress(data, expected_size: int) -> bytes:
    return delta_decode(rle_decode(data, expected_size))


# ═══════════════════════════════════════════════════════════════════════════════
# 4. TEST I POMIAR
# ═══════════════════════════════════════════════════════════════════════════════

def _selftest():
    """Weryfikacja roundtrip i pomiar kompresji."""
    import time

    rng = np.random.default_rng(42)

    print("═══ TEST ROUNDTRIP ═══")

    cases = {
        'pojedynczy bajt': b'\x07',
        'same runy':       bytes(1000),
        'bez runów':       bytes(range(256)),
        'losowe':          rng.integers(0, 256, 4096, dtype=np.uint8).tobytes(),
        'gradient':        np.tile(np.arange(80, dtype=np.uint8), 45).tobytes(),
    }
    for name, raw in cases.items():
        packed = compress(raw)
        assert decompress(packed, len(raw)) == raw, f"Roundtrip '{name}' FAILED!"
        print(f"✓ {name:<16s} {len(raw):>6,} B → {len(packed):>6,} B")

    print("\n═══ BENCHMARK KOMPRESJI ═══")

    # Symulacja klatki 160×90 w trybie gradientu (16 poziomów luminancji)
    lum = (np.add.outer(np.arange(90), np.arange(160)) // 4 % 16 * 16 + 8).astype(np.uint8)
    raw = lum.tobytes()

    t0 = time.perf_counter()
    packed = compress(raw)
    t_pack = (time.perf_counter() - t0) * 1000

    t0 = time.perf_counter()
    assert decompress(packed, len(raw)) == raw
    t_unpack = (time.perf_counter() - t0) * 1000

    ratio = len(raw) / max(1, len(packed))
    print(f"  Rozmiar raw:      {len(raw):>8,} B")
    print(f"  Rozmiar Delta+RLE:{len(packed):>8,} B")
    print(f"  Kompresja:        {ratio:.2f}×")
    print(f"  Czas pack:        {t_pack:.1f} ms")
    print(f"  Czas unpack:      {t_unpack:.1f} ms")


if __name__ == '__main__':
    _selftest()
