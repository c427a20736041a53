"""Digit sets: reusable fonts of ten digit images, referenced by number from the elements."""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List

from .errors import DigitIndexError, FaceFormatError
from .img_data import OWH_SIZE, ImgData
from .util import get_u8, get_u16

DIGITS_HEADER_SIZE = 83     # set number, 10 owh, unknown u16
DIGIT_COUNT = 10


@dataclass
class DigitSet:
    img_data: List[ImgData] = field(default_factory=lambda: [ImgData() for _ in range(DIGIT_COUNT)])
    unknown: int = 0

    @classmethod
    def from_bin(cls, buf, offset: int, expected_set: int) -> 'DigitSet':
        digit_set = get_u8(buf, offset)
        if digit_set != expected_set:
            raise DigitIndexError('Digit set at 0x%X is numbered %d, expected %d' % (offset, digit_set, expected_set))
        img_data = [ImgData.from_owh(buf, offset + 1 + i * OWH_SIZE) for i in range(DIGIT_COUNT)]
        return cls(img_data, get_u16(buf, offset + 81))

    def to_bin(self, digit_set: int, blob) -> bytes:
        if len(self.img_data) != DIGIT_COUNT:
            raise FaceFormatError('Digit set %d has %d images, expected %d' % (digit_set, len(self.img_data), DIGIT_COUNT))
        dh = bytearray((digit_set,))
        for img in self.img_data:
            dh += img.owh(blob.write_img(img))
        dh += struct.pack('<H', self.unknown)
        return bytes(dh)

    def to_dict(self):
        return {'img_data': [img.to_dict() for img in self.img_data], 'unknown': self.unknown}

    @classmethod
    def from_dict(cls, d) -> 'DigitSet':
        return cls([ImgData.from_dict(i) for i in d.get('img_data', [])], d.get('unknown', 0))
