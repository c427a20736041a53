"""
BMP reading and writing for image import/export.

Headers are parsed field by field with struct; nothing relies on the layout
of a packed structure.

  BITMAPFILEHEADER  14 bytes: sig, file_size, reserved1, reserved2, offset
  BITMAPINFOHEADER  40 bytes: dib_header_size, width, height, planes, bpp,
                    compression, image_data_size, hres, vres, clr_used,
                    clr_important
  followed by the colour masks (R, G, B, A) for BI_BITFIELDS / V4 / V5.
"""
from __future__ import annotations

import logging
import struct

from .errors import BmpFormatError
from .pixels import Img, ImgFormat

g_logger = logging.getLogger(__name__)

BMP_SIG = 0x4D42            # "BM"
BASIC_BMP_HEADER_SIZE = 54
V5_HEADER_SIZE = 138
DIB_HEADER_SIZES = (40, 108, 124)
BI_RGB = 0
BI_BITFIELDS = 3
PIXELS_PER_METRE = 2835     # 72 dpi

RGB565_MASKS = (0xF800, 0x07E0, 0x001F)
RGB888_MASKS = (0xFF0000, 0x00FF00, 0x0000FF)
ARGB8888_MASKS = (0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000)


def _masks(buf, count):
    end = BASIC_BMP_HEADER_SIZE + 4 * count
    if len(buf) < end:
        raise BmpFormatError('BMP file is too small to hold its colour masks.')
    return struct.unpack_from('<%dI' % count, buf, BASIC_BMP_HEADER_SIZE)


def read_bmp(buf) -> Img:
    """
    Read a 16, 24 or 32 bpp BMP.

    A BMP with no pixels gives an empty Img. 32bpp BI_RGB pixels come back
    opaque, as that layout has no alpha channel.
    :param buf: file contents
    :return: Img in ARGB8565 (16 bpp) or ARGB8888 (24/32 bpp), top row first
    """
    if len(buf) < BASIC_BMP_HEADER_SIZE:
        raise BmpFormatError('BMP file is too small.')

    sig, _file_size, reserved1, reserved2, offset = struct.unpack_from('<HIHHI', buf, 0)
    dib_header_size, width, height, planes, bpp, compression, image_data_size = \
        struct.unpack_from('<IiiHHII', buf, 14)

    top_down = height < 0
    height = abs(height)

    if sig != BMP_SIG:
        raise BmpFormatError('File is not a BMP bitmap.')
    if dib_header_size not in DIB_HEADER_SIZES:
        raise BmpFormatError('BMP header format unrecognised.')
    if planes != 1 or reserved1 != 0 or reserved2 != 0:
        raise BmpFormatError("BMP is unusual, can't read it.")
    if bpp not in (16, 24, 32):
        raise BmpFormatError('BMP must be RGB565 or RGB888 or ARGB8888.')
    if bpp == 16 and compression != BI_BITFIELDS:
        raise BmpFormatError('16bpp BMP is missing bitfields.')
    if bpp in (24, 32) and compression not in (BI_RGB, BI_BITFIELDS):
        raise BmpFormatError('BMP must be uncompressed.')
    if width < 0:
        raise BmpFormatError('BMP has a negative width (%d).' % width)

    if bpp == 16:
        if _masks(buf, 3) != RGB565_MASKS:
            raise BmpFormatError('16bpp BMP has unusual bitfields, should be RGB565.')
        fmt = ImgFormat.ARGB8565
    elif bpp == 24:
        if compression == BI_BITFIELDS and _masks(buf, 3) != RGB888_MASKS:
            raise BmpFormatError('24bpp BMP bitfields not RGB888.')
        fmt = ImgFormat.ARGB8888
    else:
        if compression == BI_BITFIELDS:
            if dib_header_size > 40:
                masks = _masks(buf, 4)
            else:
                masks = _masks(buf, 3) + (ARGB8888_MASKS[3],)
            if masks != ARGB8888_MASKS:
                raise BmpFormatError('32bpp BMP bitfields not ARGB8888.')
        fmt = ImgFormat.ARGB8888

    # empty images are dumped as 0-pixel BMPs
    if width == 0 or height == 0:
        return Img(width, height, fmt, b'')

    bytes_per_pixel = bpp // 8
    pixel_row = width * bytes_per_pixel
    # image_data_size is often wrong, fall back to what is in the file
    row_size = image_data_size // height
    if row_size < pixel_row:
        row_size = (len(buf) - offset) // height
        if row_size < pixel_row:
            raise BmpFormatError("BMP image_data_size doesn't make sense!")
    if offset + (height - 1) * row_size + pixel_row > len(buf):
        raise BmpFormatError('BMP pixel data is truncated.')

    # the 4th byte of a BI_RGB pixel is reserved, not alpha
    opaque = bpp == 32 and compression == BI_RGB

    data = bytearray()
    for y in range(height):
        row_idx = y if top_down else height - y - 1
        start = offset + row_idx * row_size
        row = bytes(buf[start:start + pixel_row])
        if bpp == 16:
            # little-endian 565 word -> alpha, hi, lo
            out = bytearray(width * 3)
            out[0::3] = b'\xff' * width
            out[1::3] = row[1::2]
            out[2::3] = row[0::2]
        elif bpp == 24:
            out = bytearray(width * 4)
            out[0::4] = row[2::3]
            out[1::4] = row[1::3]
            out[2::4] = row[0::3]
            out[3::4] = b'\xff' * width
        else:
            out = bytearray(row)
            out[0::4] = row[2::4]
            out[2::4] = row[0::4]
            if opaque:
                out[3::4] = b'\xff' * width
        data += out

    g_logger.debug('Read %dx%d %dbpp BMP (%s)', width, height, bpp, 'top-down' if top_down else 'bottom-up')
    return Img(width, height, fmt, bytes(data))


def write_bmp(img: Img) -> bytes:
    """
    Write img as a 32bpp ARGB8888 BMP with a V5 header, top row first.
    """
    img = img.copy().convert_format(ImgFormat.ARGB8888)
    row_size = (img.w * 4 + 3) & ~3
    image_data_size = row_size * img.h

    out = bytearray()
    out += struct.pack('<HIHHI', BMP_SIG, V5_HEADER_SIZE + image_data_size, 0, 0, V5_HEADER_SIZE)
    out += struct.pack('<IiiHHIIiiII', V5_HEADER_SIZE - 14, img.w, -img.h, 1, 32, BI_BITFIELDS,
                       image_data_size, PIXELS_PER_METRE, PIXELS_PER_METRE, 0, 0)
    out += struct.pack('<4I', *ARGB8888_MASKS)
    # colour space, endpoints, gammas, intent and profile: all unused
    out += bytes(V5_HEADER_SIZE - len(out))

    src_row = img.w * 4
    padding = bytes(row_size - src_row)
    for y in range(img.h):
        row = img.data[y * src_row:(y + 1) * src_row]
        bgra = bytearray(row)
        bgra[0::4] = row[2::4]
        bgra[2::4] = row[0::4]
        out += bgra
        out += padding
    return bytes(out)
