"""Little-endian byte helpers and 32-bit alignment."""
from __future__ import annotations

import struct

from .errors import FaceFormatError

# Filler used after every blob payload. Not zero.
PAD_BYTE = 0xFF


def _check(buf, idx: int, size: int) -> None:
    if idx < 0 or idx + size > len(buf):
        raise FaceFormatError('Read of %d bytes at 0x%X runs past end of data (%d bytes)' % (size, idx, len(buf)))


def get_u8(buf, idx: int) -> int:
    _check(buf, idx, 1)
    return buf[idx]


def get_u16(buf, idx: int) -> int:
    _check(buf, idx, 2)
    return struct.unpack_from('<H', buf, idx)[0]


def get_u32(buf, idx: int) -> int:
    _check(buf, idx, 4)
    return struct.unpack_from('<I', buf, idx)[0]


def get_bytes(buf, idx: int, size: int) -> bytes:
    _check(buf, idx, size)
    return bytes(buf[idx:idx + size])


def put_u16(buf: bytearray, idx: int, val: int) -> None:
    struct.pack_into('<H', buf, idx, val)


def put_u32(buf: bytearray, idx: int, val: int) -> None:
    struct.pack_into('<I', buf, idx, val)


def align_diff(offset: int) -> int:
    """Number of bytes needed to bring offset up to a multiple of 4."""
    return -offset % 4


def align(offset: int) -> int:
    return offset + align_diff(offset)


def pad_it(buf: bytearray) -> bytearray:
    """Pad buf in place with PAD_BYTE to a 4-byte boundary and return it."""
    buf.extend(bytes([PAD_BYTE]) * align_diff(len(buf)))
    return buf
