"""
ImgData: one image in its compressed, as-stored-in-the-face form.

The row table (header) and payload (data) are kept byte for byte so an
untouched image is written back exactly as it was read. The file name is only
used when the image is exported to, or imported from, the dump folder.
"""
from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .assets import AssetFolder, DumpFormat, sane_file_name
from .bmp import read_bmp, write_bmp
from .errors import AssetError, FaceFormatError
from .pixels import ROW_HEADER_SIZE, Img, ImgFormat, payload_size
from .util import get_bytes, get_u16, get_u32, pad_it

g_logger = logging.getLogger(__name__)

OWH_SIZE = 8    # offset u32, width u16, height u16


@dataclass
class ImgData:
    header: bytes = b''
    data: bytes = b''
    w: int = 0
    h: int = 0
    file_name: Optional[str] = None

    def __repr__(self):
        return 'ImgData(w=%d, h=%d, data=<%d bytes>, file_name=%r)' % (self.w, self.h, len(self.data), self.file_name)

    @classmethod
    def from_owh(cls, buf, owh_offset: int) -> 'ImgData':
        """Load the image an (offset, width, height) triple at owh_offset points to."""
        bin_offset = get_u32(buf, owh_offset)      # from start of file
        width = get_u16(buf, owh_offset + 4)
        height = get_u16(buf, owh_offset + 6)
        return cls.from_bin(buf, bin_offset, width, height)

    @classmethod
    def from_bin(cls, buf, bin_offset: int, width: int, height: int) -> 'ImgData':
        header_size = height * ROW_HEADER_SIZE
        header = get_bytes(buf, bin_offset, header_size)
        size = payload_size(header, height)
        data = get_bytes(buf, bin_offset + header_size, size)
        return cls(header, data, width, height)

    def owh(self, blob_offset: int) -> bytes:
        return struct.pack('<IHH', blob_offset, self.w, self.h)

    def has_row_table(self) -> bool:
        """True if the stored rows match the height, so the image can be written."""
        return len(self.header) == self.h * ROW_HEADER_SIZE

    def clear(self):
        """Drop the pixels, leaving an empty 0x0 image."""
        self.header = b''
        self.data = b''
        self.w = 0
        self.h = 0

    def to_bin(self) -> bytes:
        """Row table and payload, padded with 0xFF to a 4-byte boundary."""
        if not self.has_row_table():
            raise FaceFormatError('Image [%s] is %dx%d but holds a %d byte row table, expected %d'
                                  % (self.file_name, self.w, self.h, len(self.header), self.h * ROW_HEADER_SIZE))
        return bytes(pad_it(bytearray(self.header + self.data)))

    def to_img(self) -> Img:
        return Img(self.w, self.h, ImgFormat.RLE, self.data, self.header)

    def set_img(self, img: Img):
        """Replace the pixels with img, compressing it."""
        img = img.copy().convert_format(ImgFormat.RLE)
        self.w = img.w
        self.h = img.h
        self.header = img.rle_header
        self.data = img.data

    def set_file_name(self, file_name: str, overwrite: bool = False):
        # keep a sensible existing name unless told otherwise
        if overwrite or not sane_file_name(self.file_name):
            self.file_name = file_name

    def read_img(self, folder: AssetFolder):
        """
        Re-import the image from its file in folder.

        :param folder: asset folder
        :raise AssetError: no usable file name or the file can't be read; the
            image keeps its previous data
        """
        if not sane_file_name(self.file_name):
            raise AssetError('Not reading image file, as file_name %r is non-existent or non-sensible.' % (self.file_name,))

        fmt = DumpFormat.from_file_name(self.file_name)
        file_data = folder.read(self.file_name)

        if fmt == DumpFormat.BIN:
            loaded = ImgData.from_bin(file_data, 0, self.w, self.h)
            self.header = loaded.header
            self.data = loaded.data
            return

        if fmt == DumpFormat.RAW:
            if len(file_data) != self.w * self.h * 3:
                raise FaceFormatError('RAW file [%s] is %d bytes, expected %dx%dx3' % (self.file_name, len(file_data), self.w, self.h))
            img = Img(self.w, self.h, ImgFormat.ARGB8565, file_data)
        elif fmt == DumpFormat.PNG and not file_data and not (self.w and self.h):
            img = Img(self.w, self.h, ImgFormat.ARGB8565, b'')
        elif fmt == DumpFormat.PNG:
            try:
                with Image.open(io.BytesIO(file_data)) as image:
                    img = Img.from_image(image)
            except (UnidentifiedImageError, OSError) as e:
                raise FaceFormatError('Unable to understand image file [%s]: %s' % (self.file_name, e)) from e
        else:
            img = read_bmp(file_data)

        self.set_img(img)
        g_logger.debug('[%s] imported %dx%d, %d bytes compressed', self.file_name, self.w, self.h, len(self.data))

    def write_img(self, folder: AssetFolder, fmt: Optional[DumpFormat] = None):
        """Export the image to its file in folder."""
        if self.file_name is None:
            raise AssetError('No file name for image %r' % self)
        if fmt is None:
            fmt = DumpFormat.from_file_name(self.file_name)

        if fmt == DumpFormat.BIN:
            out = self.header + self.data
        elif fmt == DumpFormat.RAW:
            out = self.to_img().convert_format(ImgFormat.ARGB8565).data
        elif fmt == DumpFormat.PNG and not (self.w and self.h):
            # PNG can't hold an empty image
            out = b''
        elif fmt == DumpFormat.PNG:
            buf = io.BytesIO()
            self.to_img().to_image().save(buf, format='PNG')
            out = buf.getvalue()
        else:
            out = write_bmp(self.to_img())

        folder.write(self.file_name, out)

    def to_dict(self):
        return {'w': self.w, 'h': self.h, 'file_name': self.file_name}

    @classmethod
    def from_dict(cls, d) -> 'ImgData':
        return cls(w=d.get('w', 0), h=d.get('h', 0), file_name=d.get('file_name'))
