"""
Elements: the things drawn on the watch face, in paint order.

Every element record starts with a flag byte (1) and a type byte, followed by
a fixed layout per type. Image fields are stored as (offset u32, width u16,
height u16) pointing into the blob. bin_size() includes the two leading bytes.

  type  name            size
     0  image           14
     2  time_num        34
     4  day_name        63
     5  battery_fill    42
     6  heart_rate_num  26
     7  steps_num       26
     9  k_cal_num       19
    10  time_hand       19
    13  day_num         12
    15  month_num       12
    18  bar_display     8 + 8 * count
    27  weather         7 + 8 * count
    29  unknown29       3
    35  dash            10
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field, fields
from typing import ClassVar, Dict, List, Type

from .errors import FaceFormatError, UnknownElementError
from .img_data import OWH_SIZE, ImgData
from .util import get_bytes, get_u8, get_u16, get_u32

g_logger = logging.getLogger(__name__)

ELEMENT_TYPES: Dict[int, Type['Element']] = {}
ELEMENT_NAMES: Dict[str, Type['Element']] = {}


@dataclass
class XY:
    x: int = 0
    y: int = 0

    SIZE: ClassVar[int] = 4

    @classmethod
    def from_bin(cls, buf, offset: int) -> 'XY':
        return cls(get_u16(buf, offset), get_u16(buf, offset + 2))

    def to_bin(self) -> bytes:
        return struct.pack('<HH', self.x, self.y)

    def to_dict(self):
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, d) -> 'XY':
        return cls(d.get('x', 0), d.get('y', 0))


def _read_imgs(buf, offset, count):
    return [ImgData.from_owh(buf, offset + i * OWH_SIZE) for i in range(count)]


def _write_imgs(blob, imgs):
    # each owh is built after its payload has been given an offset
    return b''.join(img.owh(blob.write_img(img)) for img in imgs)


def _dump(value):
    if isinstance(value, (ImgData, XY)):
        return value.to_dict()
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


# field annotation -> loader for the JSON form
_LOADERS = {
    'ImgData': ImgData.from_dict,
    'List[ImgData]': lambda v: [ImgData.from_dict(i) for i in v],
    'XY': XY.from_dict,
    'List[XY]': lambda v: [XY.from_dict(i) for i in v],
    'List[int]': list,
}


def register(cls):
    ELEMENT_TYPES[cls.E_TYPE] = cls
    ELEMENT_NAMES[cls.NAME] = cls
    return cls


class Element:
    """Base of all element types."""

    E_TYPE: ClassVar[int]
    NAME: ClassVar[str]
    SIZE: ClassVar[int]

    @staticmethod
    def from_bin(buf, base_offset: int) -> 'Element':
        """Decode the element record at base_offset."""
        e_type = get_u8(buf, base_offset + 1)
        cls = ELEMENT_TYPES.get(e_type)
        if cls is None:
            raise UnknownElementError(e_type, base_offset)
        return cls._from_bin(buf, base_offset + 2)

    @classmethod
    def _from_bin(cls, buf, offset: int) -> 'Element':
        raise NotImplementedError

    def _to_bin(self, blob) -> bytes:
        raise NotImplementedError

    def bin_size(self) -> int:
        return self.SIZE

    def to_bin(self, blob) -> bytes:
        """
        Encode the element record, writing its images to blob.

        :param blob: BlobWriter receiving the image payloads
        :return: record bytes, flag and type included
        """
        try:
            return bytes((1, self.E_TYPE)) + self._to_bin(blob)
        except (struct.error, ValueError) as e:
            raise FaceFormatError('Element %s has a field out of range: %s' % (self.NAME, e)) from e

    def images(self) -> List[ImgData]:
        """Images of this element, in the order they are stored."""
        imgs = []
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ImgData):
                imgs.append(value)
            elif isinstance(value, list):
                imgs.extend(v for v in value if isinstance(v, ImgData))
        return imgs

    def to_dict(self):
        d = {'e_type': self.NAME}
        for f in fields(self):
            d[f.name] = _dump(getattr(self, f.name))
        return d

    @staticmethod
    def from_dict(d) -> 'Element':
        cls = ELEMENT_NAMES.get(d.get('e_type'))
        if cls is None:
            raise FaceFormatError('Unknown element type %r in watch face model' % (d.get('e_type'),))
        kwargs = {}
        for f in fields(cls):
            if f.name in d:
                kwargs[f.name] = _LOADERS.get(f.type, lambda v: v)(d[f.name])
        return cls(**kwargs)


@register
@dataclass
class Image(Element):
    x: int = 0                  # 0 for background
    y: int = 0
    img_data: ImgData = field(default_factory=ImgData)

    E_TYPE: ClassVar[int] = 0
    NAME: ClassVar[str] = 'image'
    SIZE: ClassVar[int] = 14

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(get_u16(buf, offset), get_u16(buf, offset + 2), ImgData.from_owh(buf, offset + 4))

    def _to_bin(self, blob):
        return struct.pack('<HH', self.x, self.y) + _write_imgs(blob, [self.img_data])


@register
@dataclass
class TimeNum(Element):
    """Four time digits HHMM, each drawn from a digit set."""
    digit_sets: List[int] = field(default_factory=lambda: [0] * 4)
    xys: List[XY] = field(default_factory=lambda: [XY() for _ in range(4)])
    unknown: List[int] = field(default_factory=lambda: [0] * 12)

    E_TYPE: ClassVar[int] = 2
    NAME: ClassVar[str] = 'time_num'
    SIZE: ClassVar[int] = 34

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(
            digit_sets=list(get_bytes(buf, offset, 4)),
            xys=[XY.from_bin(buf, offset + 4 + i * XY.SIZE) for i in range(4)],
            unknown=list(get_bytes(buf, offset + 20, 12)),
        )

    def _to_bin(self, blob):
        return bytes(self.digit_sets) + b''.join(xy.to_bin() for xy in self.xys) + bytes(self.unknown)


@register
@dataclass
class DayName(Element):
    n_type: int = 0
    x: int = 0
    y: int = 0
    img_data: List[ImgData] = field(default_factory=lambda: [ImgData() for _ in range(7)])

    E_TYPE: ClassVar[int] = 4
    NAME: ClassVar[str] = 'day_name'
    SIZE: ClassVar[int] = 63

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(get_u8(buf, offset), get_u16(buf, offset + 1), get_u16(buf, offset + 3),
                   _read_imgs(buf, offset + 5, 7))

    def _to_bin(self, blob):
        return struct.pack('<BHH', self.n_type, self.x, self.y) + _write_imgs(blob, self.img_data)


@register
@dataclass
class BatteryFill(Element):
    x: int = 0
    y: int = 0
    img_data: ImgData = field(default_factory=ImgData)      # background
    x1: int = 0                 # area the watch fills, relative to the image
    y1: int = 0
    x2: int = 0
    y2: int = 0
    unknown0: int = 0
    unknown1: int = 0
    image_data1: ImgData = field(default_factory=ImgData)
    image_data2: ImgData = field(default_factory=ImgData)

    E_TYPE: ClassVar[int] = 5
    NAME: ClassVar[str] = 'battery_fill'
    SIZE: ClassVar[int] = 42

    @classmethod
    def _from_bin(cls, buf, offset):
        x1, y1, x2, y2 = get_bytes(buf, offset + 12, 4)
        return cls(
            x=get_u16(buf, offset),
            y=get_u16(buf, offset + 2),
            img_data=ImgData.from_owh(buf, offset + 4),
            x1=x1, y1=y1, x2=x2, y2=y2,
            unknown0=get_u32(buf, offset + 16),
            unknown1=get_u32(buf, offset + 20),
            image_data1=ImgData.from_owh(buf, offset + 24),
            image_data2=ImgData.from_owh(buf, offset + 32),
        )

    def _to_bin(self, blob):
        h = struct.pack('<HH', self.x, self.y)
        h += _write_imgs(blob, [self.img_data])
        h += struct.pack('<BBBBII', self.x1, self.y1, self.x2, self.y2, self.unknown0, self.unknown1)
        h += _write_imgs(blob, [self.image_data1, self.image_data2])
        return h


@dataclass
class _DigitNum(Element):
    """A number drawn with a digit set: heart rate, steps, kcal."""
    digit_set: int = 0
    align: int = 0              # 0: left, 1: right, 2: centre
    x: int = 0
    y: int = 0
    unknown: List[int] = field(default_factory=lambda: [0] * 18)

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(get_u8(buf, offset), get_u8(buf, offset + 1), get_u16(buf, offset + 2), get_u16(buf, offset + 4),
                   list(get_bytes(buf, offset + 6, cls.SIZE - 8)))

    def _to_bin(self, blob):
        return struct.pack('<BBHH', self.digit_set, self.align, self.x, self.y) + bytes(self.unknown)


@register
@dataclass
class HeartRateNum(_DigitNum):
    E_TYPE: ClassVar[int] = 6
    NAME: ClassVar[str] = 'heart_rate_num'
    SIZE: ClassVar[int] = 26


@register
@dataclass
class StepsNum(_DigitNum):
    E_TYPE: ClassVar[int] = 7
    NAME: ClassVar[str] = 'steps_num'
    SIZE: ClassVar[int] = 26


@register
@dataclass
class KCalNum(_DigitNum):
    unknown: List[int] = field(default_factory=lambda: [0] * 11)

    E_TYPE: ClassVar[int] = 9
    NAME: ClassVar[str] = 'k_cal_num'
    SIZE: ClassVar[int] = 19


@register
@dataclass
class TimeHand(Element):
    h_type: int = 0             # 0: hours, 1: minutes, 2: seconds
    unknown_x: int = 0
    unknown_y: int = 0
    img_data: ImgData = field(default_factory=ImgData)
    x: int = 0
    y: int = 0

    E_TYPE: ClassVar[int] = 10
    NAME: ClassVar[str] = 'time_hand'
    SIZE: ClassVar[int] = 19

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(
            h_type=get_u8(buf, offset),
            unknown_x=get_u16(buf, offset + 1),
            unknown_y=get_u16(buf, offset + 3),
            img_data=ImgData.from_owh(buf, offset + 5),
            x=get_u16(buf, offset + 13),
            y=get_u16(buf, offset + 15),
        )

    def _to_bin(self, blob):
        h = struct.pack('<BHH', self.h_type, self.unknown_x, self.unknown_y)
        h += _write_imgs(blob, [self.img_data])
        h += struct.pack('<HH', self.x, self.y)
        return h


@dataclass
class _DateNum(Element):
    """Two digits of the day or month number."""
    digit_set: int = 0
    align: int = 0
    xys: List[XY] = field(default_factory=lambda: [XY(), XY()])

    SIZE: ClassVar[int] = 12

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(get_u8(buf, offset), get_u8(buf, offset + 1),
                   [XY.from_bin(buf, offset + 2 + i * XY.SIZE) for i in range(2)])

    def _to_bin(self, blob):
        return struct.pack('<BB', self.digit_set, self.align) + b''.join(xy.to_bin() for xy in self.xys)


@register
@dataclass
class DayNum(_DateNum):
    E_TYPE: ClassVar[int] = 13
    NAME: ClassVar[str] = 'day_num'


@register
@dataclass
class MonthNum(_DateNum):
    E_TYPE: ClassVar[int] = 15
    NAME: ClassVar[str] = 'month_num'


@register
@dataclass
class BarDisplay(Element):
    b_type: int = 0             # data source: 0 steps, 2 kcal, 5 heart rate, 6 battery
    count: int = 0
    x: int = 0
    y: int = 0
    img_data: List[ImgData] = field(default_factory=list)

    E_TYPE: ClassVar[int] = 18
    NAME: ClassVar[str] = 'bar_display'

    @classmethod
    def _from_bin(cls, buf, offset):
        count = get_u8(buf, offset + 1)
        return cls(get_u8(buf, offset), count, get_u16(buf, offset + 2), get_u16(buf, offset + 4),
                   _read_imgs(buf, offset + 6, count))

    def bin_size(self):
        return 8 + self.count * OWH_SIZE

    def _to_bin(self, blob):
        return struct.pack('<BBHH', self.b_type, self.count, self.x, self.y) + _write_imgs(blob, self.img_data)


@register
@dataclass
class Weather(Element):
    count: int = 0
    x: int = 0
    y: int = 0
    img_data: List[ImgData] = field(default_factory=list)

    E_TYPE: ClassVar[int] = 27
    NAME: ClassVar[str] = 'weather'

    @classmethod
    def _from_bin(cls, buf, offset):
        count = get_u8(buf, offset)
        return cls(count, get_u16(buf, offset + 1), get_u16(buf, offset + 3), _read_imgs(buf, offset + 5, count))

    def bin_size(self):
        return 7 + self.count * OWH_SIZE

    def _to_bin(self, blob):
        return struct.pack('<BHH', self.count, self.x, self.y) + _write_imgs(blob, self.img_data)


@register
@dataclass
class Unknown29(Element):
    unknown: int = 0

    E_TYPE: ClassVar[int] = 29
    NAME: ClassVar[str] = 'unknown29'
    SIZE: ClassVar[int] = 3

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(get_u8(buf, offset))

    def _to_bin(self, blob):
        return bytes((self.unknown,))


@register
@dataclass
class Dash(Element):
    img_data: ImgData = field(default_factory=ImgData)

    E_TYPE: ClassVar[int] = 35
    NAME: ClassVar[str] = 'dash'
    SIZE: ClassVar[int] = 10

    @classmethod
    def _from_bin(cls, buf, offset):
        return cls(ImgData.from_owh(buf, offset))

    def _to_bin(self, blob):
        return _write_imgs(blob, [self.img_data])
