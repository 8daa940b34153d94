"""
chachapoly — Live Demo: ChaCha20-Poly1305 family
================================================
Run:  python examples/demo_aead.py

Encrypts and decrypts a message with every variant, checks the RFC 8439
vector, and shows that a flipped bit is refused.
"""

import sys, os, time, logging
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chachapoly import (ChaCha20Poly1305, XChaCha20Poly1305,
                        ChaCha12Poly1305, ChaCha8Poly1305,
                        XChaCha12Poly1305, XChaCha8Poly1305,
                        AuthenticationFailed)

LINE = "═" * 70
MSG  = b"Attack at dawn. Bring sunscreen."
AAD  = b"demo-header-v1"

def header(name):
    print(f"\n{LINE}")
    print(f"  {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

if "-v" in sys.argv:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

# ─────────────────────────────────────────────────────────────────────────────
print(f"\n{LINE}")
print("  chachapoly — ChaCha20-Poly1305 / XChaCha20-Poly1305 Demo")
print(LINE)
print(f"  Message: {MSG.decode()}\n")

# ── RFC 8439 vector ──────────────────────────────────────────────────────────
header("RFC 8439 section 2.8.2 — known answer")
key   = bytes(range(0x80, 0xA0))
nonce = bytes.fromhex("070000004041424344454647")
aad   = bytes.fromhex("50515253c0c1c2c3c4c5c6c7")
pt    = (b"Ladies and Gentlemen of the class of '99: If I could offer you "
         b"only one tip for the future, sunscreen would be it.")
out   = ChaCha20Poly1305(key).encrypt(nonce, aad, pt)
ok("Ciphertext", out[:8].hex() + "...")
ok("Tag",        out[-16:].hex())
ok("Matches",    str(out[-16:].hex() == "1ae10b594f09e26a7e902ecbd0600691"))

# ── every variant ────────────────────────────────────────────────────────────
for cls in (ChaCha20Poly1305, XChaCha20Poly1305,
            ChaCha12Poly1305, ChaCha8Poly1305,
            XChaCha12Poly1305, XChaCha8Poly1305):
    header(f"{cls.__name__} — {cls.ROUNDS} rounds, {cls.NONCE_SIZE * 8}-bit nonce")
    t0    = time.perf_counter()
    box   = cls(os.urandom(cls.KEY_SIZE))
    nonce = os.urandom(cls.NONCE_SIZE)
    ct    = box.encrypt(nonce, AAD, MSG)
    pt    = box.decrypt(nonce, AAD, ct)
    elapsed = time.perf_counter() - t0
    ok("Output size", f"{len(ct)} bytes (data + tag=16)")
    ok("Round-trip",  f"{elapsed*1000:.2f} ms")
    ok("Decrypted",   pt.decode())

# ── tamper ───────────────────────────────────────────────────────────────────
header("Tamper detection")
box   = XChaCha20Poly1305(os.urandom(32))
nonce = os.urandom(24)
ct    = bytearray(box.encrypt(nonce, AAD, MSG))
ct[3] ^= 0x01
try:
    box.decrypt(nonce, AAD, bytes(ct))
    print("  ✗  Tampered ciphertext accepted")
    sys.exit(1)
except AuthenticationFailed:
    ok("Flipped bit rejected", "AuthenticationFailed, no plaintext released")

print(f"\n{LINE}\n")
