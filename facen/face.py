"""
Face: the whole FaceN watch face file.

File layout (all little-endian):
  0x00  api_ver u16
  0x02  unknown u16
  0x04  preview image offset u32, width u16, height u16
  0x0C  digits section offset u16 (0 if there are no digit sets)
  0x0E  elements section offset u16
  digits section: 0x0101, then one 83-byte record per digit set
  elements section: element records, ended by a zero flag byte pair
  blob: RLE images, starting 4-byte aligned, each padded with 0xFF
"""
from __future__ import annotations

import collections
import json
import logging
import os
import struct
from dataclasses import dataclass, field
from typing import Iterator, List

from tqdm import tqdm

from .assets import AssetFolder, DumpFormat, gen_name
from .blob import BlobWriter
from .digits import DIGITS_HEADER_SIZE, DigitSet
from .elements import Element
from .errors import AssetError, ElementSizeError, FaceFormatError
from .img_data import ImgData
from .util import align_diff, get_u8, get_u16, put_u16, put_u32

g_logger = logging.getLogger(__name__)

HEADER_SIZE = 16
DIGITS_SENTINEL = 0x0101
WATCHFACE_JSON = 'watchface.json'
TYPE_STR = 'facen watchface'


@dataclass
class Face:
    api_ver: int = 0
    unknown: int = 0
    preview_img_data: ImgData = field(default_factory=ImgData)
    digits: List[DigitSet] = field(default_factory=list)
    elements: List[Element] = field(default_factory=list)
    # only kept in the JSON model
    type_str: str = TYPE_STR
    rev: int = 0
    tpls: int = 0

    @classmethod
    def from_bin(cls, buf) -> 'Face':
        """
        Parse a FaceN file.

        :param buf: whole file contents
        :return: Face
        :raise FaceFormatError: the data is not a FaceN file this tool understands
        """
        face = cls(
            api_ver=get_u16(buf, 0),
            unknown=get_u16(buf, 2),
            preview_img_data=ImgData.from_owh(buf, 4),
        )
        d_offset = get_u16(buf, 12)
        e_offset = get_u16(buf, 14)

        if d_offset:
            dss = get_u16(buf, d_offset)
            if dss != DIGITS_SENTINEL:
                g_logger.warning('Unknown start to digits section: 0x%04X', dss)
            offset = d_offset + 2
            while offset < e_offset:
                face.digits.append(DigitSet.from_bin(buf, offset, len(face.digits)))
                offset += DIGITS_HEADER_SIZE

        offset = e_offset
        while get_u8(buf, offset) != 0:
            el = Element.from_bin(buf, offset)
            g_logger.debug('Element %d: %s at 0x%X', len(face.elements), el.NAME, offset)
            offset += el.bin_size()
            face.elements.append(el)

        g_logger.debug('api_ver %d, %d digit sets, %d elements', face.api_ver, len(face.digits), len(face.elements))
        return face

    def digits_header_size(self) -> int:
        if not self.digits:
            return 0
        return 2 + len(self.digits) * DIGITS_HEADER_SIZE

    def header_size(self) -> int:
        """Bytes before the blob: main header, digit sets, elements and the terminator."""
        return HEADER_SIZE + self.digits_header_size() + sum(el.bin_size() for el in self.elements) + 2

    def to_bin(self) -> bytes:
        """
        Build the FaceN file.

        The headers are sized first so the blob start is known; then elements
        are emitted in order, each writing its images to the blob. The digit
        sets and the preview image come last, as their offsets are only known
        once every element image has been placed.
        """
        digits_size = self.digits_header_size()
        dh_offset = HEADER_SIZE if self.digits else 0
        bh_offset = HEADER_SIZE + digits_size
        total_header_size = self.header_size()
        header_align = align_diff(total_header_size)
        blob = BlobWriter(total_header_size + header_align)

        try:
            data = bytearray(struct.pack('<HHIHHHH', self.api_ver, self.unknown, 0,
                                         self.preview_img_data.w, self.preview_img_data.h, dh_offset, bh_offset))
        except struct.error as e:
            raise FaceFormatError('Face header field out of range: %s' % e) from e

        # digit sets are filled in once the element images are placed
        data += bytes(digits_size)

        for n, el in enumerate(self.elements):
            expected_size = el.bin_size()
            el_data = el.to_bin(blob)
            if len(el_data) != expected_size:
                raise ElementSizeError('Element %d (%s) produced %d bytes, expected %d' % (n, el.NAME, len(el_data), expected_size))
            data += el_data
        data += b'\x00\x00'

        if len(data) != total_header_size:
            raise FaceFormatError('Header sizes mismatch: %d bytes written, %d expected' % (len(data), total_header_size))

        if self.digits:
            put_u16(data, dh_offset, DIGITS_SENTINEL)
            offset = dh_offset + 2
            for n, digit_set in enumerate(self.digits):
                dh = digit_set.to_bin(n, blob)
                if len(dh) != DIGITS_HEADER_SIZE:
                    raise FaceFormatError('Digit set %d header is %d bytes, expected %d' % (n, len(dh), DIGITS_HEADER_SIZE))
                data[offset:offset + DIGITS_HEADER_SIZE] = dh
                offset += DIGITS_HEADER_SIZE

        put_u32(data, 4, blob.write_img(self.preview_img_data))

        data += bytes(header_align)
        data += blob.getvalue()
        g_logger.debug('Face built: %d header bytes, %d blob bytes', total_header_size, len(blob))
        return bytes(data)

    def images(self) -> Iterator[ImgData]:
        yield self.preview_img_data
        for digit_set in self.digits:
            yield from digit_set.img_data
        for el in self.elements:
            yield from el.images()

    def generate_file_names(self, fmt: DumpFormat = DumpFormat.BMP, overwrite: bool = True):
        """
        Name every image after what it is: preview, digit_<set>_<n>, and
        <element>_<count>[_<n>] counting each element type separately.
        """
        self.preview_img_data.set_file_name(gen_name('preview', [], fmt), overwrite)

        for n, digit_set in enumerate(self.digits):
            for i, img in enumerate(digit_set.img_data):
                img.set_file_name(gen_name('digit', [n, i], fmt), overwrite)

        counters = collections.Counter()
        for el in self.elements:
            imgs = el.images()
            if not imgs:
                continue
            count = counters[el.NAME]
            counters[el.NAME] += 1
            if len(imgs) == 1:
                imgs[0].set_file_name(gen_name(el.NAME, [count], fmt), overwrite)
            else:
                for i, img in enumerate(imgs):
                    img.set_file_name(gen_name(el.NAME, [count, i], fmt), overwrite)

    def read_imgs(self, folder: AssetFolder, progress: bool = False) -> int:
        """
        Re-import every image from folder. Images that can't be found keep
        their current data.

        :return: number of images imported
        """
        imgs = list(self.images())
        done = 0
        pbar = tqdm(total=len(imgs), desc='Reading images', disable=not progress)
        try:
            for img in imgs:
                try:
                    img.read_img(folder)
                    done += 1
                except AssetError as e:
                    g_logger.warning('%s', e)
                    if not img.has_row_table():
                        g_logger.warning('[%s] has no image data, storing it as 0x0', img.file_name)
                        img.clear()
                pbar.update()
        finally:
            pbar.close()
        return done

    def write_imgs(self, folder: AssetFolder, fmt: DumpFormat = None, progress: bool = False) -> int:
        """
        Export every image to folder.

        :return: number of images written
        """
        imgs = list(self.images())
        done = 0
        pbar = tqdm(total=len(imgs), desc='Saving images', disable=not progress)
        try:
            for img in imgs:
                try:
                    img.write_img(folder, fmt)
                    done += 1
                except AssetError as e:
                    g_logger.error('%s', e)
                pbar.update()
        finally:
            pbar.close()
        return done

    def to_dict(self):
        return {
            'type_str': self.type_str,
            'rev': self.rev,
            'tpls': self.tpls,
            'api_ver': self.api_ver,
            'unknown': self.unknown,
            'preview_img_data': self.preview_img_data.to_dict(),
            'digits': [d.to_dict() for d in self.digits],
            'elements': [el.to_dict() for el in self.elements],
        }

    @classmethod
    def from_dict(cls, d) -> 'Face':
        return cls(
            api_ver=d.get('api_ver', 0),
            unknown=d.get('unknown', 0),
            preview_img_data=ImgData.from_dict(d.get('preview_img_data', {})),
            digits=[DigitSet.from_dict(i) for i in d.get('digits', [])],
            elements=[Element.from_dict(i) for i in d.get('elements', [])],
            type_str=d.get('type_str', TYPE_STR),
            rev=d.get('rev', 0),
            tpls=d.get('tpls', 0),
        )

    def save_json(self, path):
        """Write the editable model; a folder gets watchface.json inside it."""
        if os.path.isdir(path):
            path = os.path.join(path, WATCHFACE_JSON)
        with open(path, 'w', encoding='utf-8') as out_f:
            json.dump(self.to_dict(), out_f, indent=2)
        return path

    @classmethod
    def load_json(cls, path) -> 'Face':
        if os.path.isdir(path):
            path = os.path.join(path, WATCHFACE_JSON)
        try:
            with open(path, 'r', encoding='utf-8') as in_f:
                d = json.load(in_f)
        except json.JSONDecodeError as e:
            raise FaceFormatError('Unable to understand JSON file [%s]: %s' % (path, e)) from e
        return cls.from_dict(d)

    def summary(self) -> List[str]:
        lines = [
            'api_ver          %d' % self.api_ver,
            'unknown          0x%04X' % self.unknown,
            'preview          %dx%d' % (self.preview_img_data.w, self.preview_img_data.h),
            'digits.len       %d' % len(self.digits),
            'elements.len     %d' % len(self.elements),
        ]
        for n, el in enumerate(self.elements):
            lines.append('element %d: e_type %d (%s), %d image(s)' % (n, el.E_TYPE, el.NAME, len(el.images())))
        return lines
