"""Content hashing used to address blobs and commits."""

from __future__ import annotations

FNV_PRIME = 16777619
FNV_OFFSET_BASIS = 2166136261
_MASK_32 = 0xFFFFFFFF


def _as_bytes(content: str | bytes) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8", "surrogateescape")
    return bytes(content)


def calculate_hash(content: str | bytes) -> str:
    """Return the 32-bit FNV-1a hash of *content* as eight lower-case hex digits.

    Text is hashed as its UTF-8 bytes, so text read back from a file with
    :func:`minigit.fileutils.read_file` hashes the same as the raw file bytes.
    """
    value = FNV_OFFSET_BASIS
    for byte in _as_bytes(content):
        value ^= byte
        value = (value * FNV_PRIME) & _MASK_32
    return f"{value:08x}"