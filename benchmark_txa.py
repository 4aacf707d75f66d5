"""
Benchmark TXA (Delta + RLE) vs Zstd — uruchom: python benchmark_txa.py
Wymaga: numpy, zstandard, txa_codec.py / txa_frames.py / txa_rle.py w tym samym katalogu.
"""
import sys, os, time
import numpy as np

# Szukaj modułów txa obok skryptu
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
import txa_codec
import zstandard as zstd

# ─── Parametry symulacji ──────────────────────────────────────────────────────
SEED       = 42
W, H       = 160, 90       # siatka komórek
N_FRAMES   = 120
LUM_BITS   = 4
KF_INT     = 30
REPS       = 3             # powtórzenia dla pomiaru czasu
ZSTD_LVL   = 19

rng = np.random.default_rng(SEED)

# ─── Syntetyczna animacja: przesuwający się gradient + szum ──────────────────
xx, yy = np.meshgrid(np.arange(W), np.arange(H), indexing='ij')
grids = []
for t in range(N_FRAMES):
    lum = 128 + 100 * np.sin((xx + t * 2) / 12.0) * np.cos(yy / 9.0)
    noise = rng.integers(-6, 7, (W, H))
    grids.append(np.clip(lum + noise, 0, 255).astype(np.uint8)[:, :, None])

raw_size = W * H * N_FRAMES

# ─── Pomiary ─────────────────────────────────────────────────────────────────
def bench(fn, reps=REPS):
    t0 = time.perf_counter()
    for _ in range(reps): fn()
    return (time.perf_counter() - t0) / reps * 1000

def encode_all():
    enc = txa_codec.TXAEncoder(width=W, height=H, lum_bits=LUM_BITS, keyframe_interval=KF_INT)
    enc.build_color_palette((0, 0, 0), (255, 255, 255))
    for g in grids:
        enc.add_frame(g)
    return enc

enc  = encode_all()
data = enc.encode()
stats = enc.get_stats()

def decode_forward(keyframe_seek=False):
    dec = txa_codec.TXADecoder(keyframe_seek=keyframe_seek)
    dec.parse(data)
    for i in range(dec.total_frames):
        dec.get_frame(i)
    return dec

def decode_backward(keyframe_seek=False):
    dec = txa_codec.TXADecoder(keyframe_seek=keyframe_seek)
    dec.parse(data)
    for i in reversed(range(dec.total_frames)):
        dec.get_frame(i)
    return dec

t_enc      = bench(encode_all)
t_dec_fw   = bench(decode_forward)
t_dec_bw   = bench(decode_backward)
t_dec_bw_k = bench(lambda: decode_backward(True))

applied_bw   = decode_backward().session.frames_applied
applied_bw_k = decode_backward(True).session.frames_applied

cctx = zstd.ZstdCompressor(level=ZSTD_LVL)
z_raw = cctx.compress(b''.join(g.tobytes() for g in grids))
z_txa = cctx.compress(data)

# ─── Raport ──────────────────────────────────────────────────────────────────
WD = 68
print(f"╔{'═'*WD}╗")
print(f"║{'  BENCHMARK TXA — ' + f'{W}×{H}, {N_FRAMES} klatek, lum_bits={LUM_BITS}, keyframe={KF_INT}':<{WD}}║")
print(f"╠{'═'*WD}╣")

def row(label, val, extra=""):
    s = f"  {label:<30s} {val:>14s}"
    if extra: s += f"  {extra}"
    print(f"║{s:<{WD}}║")

print(f"║  {'─── Rozmiary ───':<{WD-2}}║")
row("Raw (1 B / komórka):",   f"{raw_size:>10,} B")
row("TXA:",                   f"{len(data):>10,} B", f"→ {raw_size/len(data):.1f}× mniej")
row("Raw + Zstd:",            f"{len(z_raw):>10,} B", f"→ {raw_size/len(z_raw):.1f}× mniej")
row("TXA + Zstd:",            f"{len(z_txa):>10,} B", f"→ {raw_size/len(z_txa):.1f}× mniej")
row("Keyframe / delta:",      f"{stats['keyframes']} / {stats['delta_frames']}")
row("compression_ratio:",     stats['compression_ratio'])

print(f"║  {'─── Czasy (ms, średnia ' + str(REPS) + ' powtórzeń) ───':<{WD-2}}║")
row("Enkodowanie:",              f"{t_enc:>8.1f} ms")
row("Dekodowanie 0→N:",          f"{t_dec_fw:>8.1f} ms")
row("Dekodowanie N→0:",          f"{t_dec_bw:>8.1f} ms", f"({applied_bw} rekordów)")
row("Dekodowanie N→0 + seek KF:", f"{t_dec_bw_k:>8.1f} ms", f"({applied_bw_k} rekordów)")
print(f"╚{'═'*WD}╝")
