"""
Pixel formats and the row based RLE codec used by FaceN images.

Formats, in conversion order:
  ARGB8888  4 bytes per pixel: R, G, B, A (the Pillow RGBA layout)
  ARGB8565  3 bytes per pixel: alpha, then the RGB565 word high byte first
  RLE       ARGB8565 compressed row by row, plus a 4 byte header entry per row

Conversions only go between neighbours; ARGB8888 <-> RLE always passes
through ARGB8565.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from PIL import Image

from .errors import RleCorruptError, RleRangeError
from .util import get_u16

g_logger = logging.getLogger(__name__)

MAX_RUN = 127
MAX_ROW_OFFSET = 0x1FFFFF   # 21 bits
MAX_ROW_LENGTH = 0x7FF      # 11 bits
ROW_HEADER_SIZE = 4


# ----------------------------------------------------------------------------
#  RGB conversion
# ----------------------------------------------------------------------------

def rgb565_to_888(hi: int, lo: int) -> Tuple[int, int, int]:
    """Expand an RGB565 word (given as high and low byte) to 8-bit R, G, B.

    The vacated low bits of each channel repeat the channel's top bits, so
    0x1F expands to 0xFF rather than 0xF8.
    """
    tmp_16 = (hi << 8) | lo
    r = (tmp_16 >> 11) & 0x1F
    g = (tmp_16 >> 5) & 0x3F
    b = tmp_16 & 0x1F
    return (r << 3) | (r >> 2), (g << 2) | (g >> 4), (b << 3) | (b >> 2)


def rgb888_to_565(r: int, g: int, b: int) -> Tuple[int, int]:
    """Reduce 8-bit R, G, B to an RGB565 word, returned as (high, low) bytes."""
    tmp_16 = ((r & 248) << 8) | ((g & 252) << 3) | ((b & 248) >> 3)
    return (tmp_16 >> 8) & 0xFF, tmp_16 & 0xFF


def argb8888_to_argb8565(data: bytes) -> bytes:
    if len(data) % 4:
        raise ValueError('ARGB8888 data length %d is not a multiple of 4' % len(data))
    out = bytearray(len(data) // 4 * 3)
    o = 0
    for i in range(0, len(data), 4):
        r, g, b, a = data[i:i + 4]
        hi, lo = rgb888_to_565(r, g, b)
        out[o] = a
        out[o + 1] = hi
        out[o + 2] = lo
        o += 3
    return bytes(out)


def argb8565_to_argb8888(data: bytes) -> bytes:
    if len(data) % 3:
        raise ValueError('ARGB8565 data length %d is not a multiple of 3' % len(data))
    out = bytearray(len(data) // 3 * 4)
    # watch face images use few colours
    cache = {}
    o = 0
    for i in range(0, len(data), 3):
        a, hi, lo = data[i:i + 3]
        word = (hi << 8) | lo
        rgb = cache.get(word)
        if rgb is None:
            rgb = cache[word] = rgb565_to_888(hi, lo)
        out[o:o + 3] = bytes(rgb)
        out[o + 3] = a
        o += 4
    return bytes(out)


# ----------------------------------------------------------------------------
#  RLE row header
# ----------------------------------------------------------------------------

def pack_row_header(offset: int, length: int) -> bytes:
    """
    Pack one row table entry.

    Bytes 0-1 hold offset bits 0-15, byte 2 bits 0-4 hold offset bits 16-20,
    and the length is stored multiplied by 32 in the top 11 bits.
    :param offset: byte offset of the row data
    :param length: compressed byte length of the row
    :return: 4 bytes
    """
    if not 0 <= offset <= MAX_ROW_OFFSET:
        raise RleRangeError('RLE compressed data is too big to be stored (row offset %d)' % offset)
    if not 0 <= length <= MAX_ROW_LENGTH:
        raise RleRangeError('RLE compressed row is too long to be stored (%d bytes)' % length)
    size = length * 32
    return bytes((
        offset & 0xFF,
        (offset >> 8) & 0xFF,
        ((offset >> 16) & 0x1F) | (size & 0xFF),
        (size >> 8) & 0xFF,
    ))


def unpack_row_header(buf, idx: int = 0) -> Tuple[int, int]:
    """Return (offset, length) of the row table entry at buf[idx:idx + 4]."""
    lo = get_u16(buf, idx)
    hi = get_u16(buf, idx + 2)
    return lo | ((hi & 0x1F) << 16), hi >> 5


def payload_size(header, height: int) -> int:
    """Size of the compressed payload described by a row table.

    It is not stored anywhere; it ends where the last row ends.
    """
    if height == 0:
        return 0
    first_offset, _ = unpack_row_header(header, 0)
    last_offset, last_length = unpack_row_header(header, (height - 1) * ROW_HEADER_SIZE)
    size = last_offset + last_length - first_offset
    if size < 0:
        raise RleCorruptError('RLE row table ends before it starts (%d bytes)' % size)
    return size


# ----------------------------------------------------------------------------
#  RLE rows
# ----------------------------------------------------------------------------

def compress_row(row: bytes) -> bytes:
    """
    Compress one row of ARGB8565 pixels.

    A pixel equal to its neighbour starts a repeat run (0x80 | count, pixel),
    otherwise a literal run (count, pixels) collects pixels that differ from
    the next one. Runs stop at 127 pixels. The last pixel of a row, when it is
    left over, always goes out as a literal of one.
    """
    if len(row) % 3:
        raise ValueError('ARGB8565 row length %d is not a multiple of 3' % len(row))
    pixels = [row[i:i + 3] for i in range(0, len(row), 3)]
    n = len(pixels)
    out = bytearray()
    i = 0
    while n - i >= 2:
        if pixels[i] == pixels[i + 1]:
            run = 2
            while run < MAX_RUN and i + run < n and pixels[i + run] == pixels[i]:
                run += 1
            out.append(0x80 | run)
            out += pixels[i]
        else:
            run = 1
            while run < MAX_RUN and i + run + 1 < n and pixels[i + run] != pixels[i + run + 1]:
                run += 1
            out.append(run)
            out += row[i * 3:(i + run) * 3]
        i += run
    if i < n:
        out.append(n - i)
        out += row[i * 3:]
    return bytes(out)


def decompress_row(data: bytes) -> bytes:
    """Decompress one RLE row; the whole of data must be consumed."""
    out = bytearray()
    pos = 0
    end = len(data)
    while pos < end:
        cmd = data[pos]
        pos += 1
        if cmd & 0x80:
            if pos + 3 > end:
                raise RleCorruptError('RLE repeat run truncated at byte %d' % pos)
            out += data[pos:pos + 3] * (cmd & 0x7F)
            pos += 3
        else:
            size = cmd * 3
            if pos + size > end:
                raise RleCorruptError('RLE literal run of %d pixels truncated at byte %d' % (cmd, pos))
            out += data[pos:pos + size]
            pos += size
    return bytes(out)


def compress(data: bytes, width: int, height: int) -> Tuple[bytes, bytes]:
    """
    Compress a whole ARGB8565 image.

    Row offsets count from the start of the row table, so the first row sits
    at 4 * height.
    :return: (row table, payload)
    """
    row_size = width * 3
    if len(data) != row_size * height:
        raise ValueError('ARGB8565 data is %d bytes, expected %d for %dx%d' % (len(data), row_size * height, width, height))
    header = bytearray()
    payload = bytearray()
    offset = height * ROW_HEADER_SIZE
    for y in range(height):
        row = compress_row(data[y * row_size:(y + 1) * row_size])
        header += pack_row_header(offset, len(row))
        payload += row
        offset += len(row)
    g_logger.debug('Compressed %dx%d image: %d -> %d bytes', width, height, len(data), len(header) + len(payload))
    return bytes(header), bytes(payload)


def decompress(header: bytes, payload: bytes, width: int, height: int) -> bytes:
    """Decompress an image to ARGB8565, one row table entry at a time."""
    if len(header) < height * ROW_HEADER_SIZE:
        raise RleCorruptError('RLE row table has %d bytes, %d rows need %d' % (len(header), height, height * ROW_HEADER_SIZE))
    out = bytearray()
    base = unpack_row_header(header, 0)[0] if height else 0
    for y in range(height):
        offset, length = unpack_row_header(header, y * ROW_HEADER_SIZE)
        start = offset - base
        if start < 0 or start + length > len(payload):
            raise RleCorruptError('RLE row %d (offset %d, length %d) lies outside the %d byte payload' % (y, offset, length, len(payload)))
        row = decompress_row(payload[start:start + length])
        if len(row) != width * 3:
            raise RleCorruptError('RLE row %d decodes to %d pixels, expected %d' % (y, len(row) // 3, width))
        out += row
    return bytes(out)


# ----------------------------------------------------------------------------
#  IMG - basic image data in any of the three formats
# ----------------------------------------------------------------------------

class ImgFormat(enum.Enum):
    ARGB8888 = 0    # 4 bytes per pixel
    ARGB8565 = 1    # 3 bytes per pixel
    RLE = 2         # compressed ARGB8565


@dataclass
class Img:
    w: int
    h: int
    format: ImgFormat
    data: bytes
    rle_header: Optional[bytes] = None

    def copy(self) -> 'Img':
        return replace(self)

    def convert_format(self, new_format: ImgFormat) -> 'Img':
        """Convert in place, one neighbouring step at a time. Returns self."""
        if new_format == ImgFormat.ARGB8888:
            if self.format == ImgFormat.RLE:
                self._rle_to_argb8565()
            if self.format == ImgFormat.ARGB8565:
                self._argb8565_to_argb8888()
        elif new_format == ImgFormat.ARGB8565:
            if self.format == ImgFormat.RLE:
                self._rle_to_argb8565()
            elif self.format == ImgFormat.ARGB8888:
                self._argb8888_to_argb8565()
        elif new_format == ImgFormat.RLE:
            if self.format == ImgFormat.ARGB8888:
                self._argb8888_to_argb8565()
            if self.format == ImgFormat.ARGB8565:
                self._argb8565_to_rle()
        return self

    def _argb8888_to_argb8565(self):
        self.data = argb8888_to_argb8565(self.data)
        self.format = ImgFormat.ARGB8565

    def _argb8565_to_argb8888(self):
        self.data = argb8565_to_argb8888(self.data)
        self.format = ImgFormat.ARGB8888

    def _argb8565_to_rle(self):
        self.rle_header, self.data = compress(self.data, self.w, self.h)
        self.format = ImgFormat.RLE

    def _rle_to_argb8565(self):
        self.data = decompress(self.rle_header or b'', self.data, self.w, self.h)
        self.rle_header = None
        self.format = ImgFormat.ARGB8565

    def to_image(self) -> Image.Image:
        """Return a Pillow RGBA image, leaving self untouched."""
        img = self.copy().convert_format(ImgFormat.ARGB8888)
        return Image.frombytes('RGBA', (img.w, img.h), img.data)

    @classmethod
    def from_image(cls, image: Image.Image) -> 'Img':
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        width, height = image.size
        return cls(width, height, ImgFormat.ARGB8888, image.tobytes())
